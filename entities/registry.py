"""
SPDX-License-Identifier: AGPL-3.0-or-later
Copyright (C) 2025 Lappeenrannan-Lahden teknillinen yliopisto LUT
Author: Aleksei Romanenko <aleksei.romanenko@lut.fi>


This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.

Funded by the European Union and UKRI. Views and opinions expressed are however those of the author(s)
only and do not necessarily reflect those of the European Union, CINEA or UKRI. Neither the European
Union nor the granting authority can be held responsible for them.
"""


from threading import RLock

from beartype import beartype
from beartype.typing import Any, Iterator

from entities.charging_pool import ChargingPool
from entities.charging_station import ChargingStation
from entities.evse import EVSE
from entities.ids import EntityId
from entities.operator import ChargingStationOperator
from util import InvalidArgumentException, setup_logging

logger = setup_logging(__name__)

Entity = ChargingStationOperator | ChargingPool | ChargingStation | EVSE

# Type of parent each entity type may hang under.
PARENT_TYPES = {
    ChargingStationOperator: type(None),
    ChargingPool: ChargingStationOperator,
    ChargingStation: ChargingPool,
    EVSE: ChargingStation,
}


class UnknownEntityException(KeyError):
    pass


class DuplicateEntityException(ValueError):
    pass


class EntityHasChildrenException(ValueError):
    pass


@beartype
class EntityRegistry:
    """
    Arena of all entities, indexed by id. Entities keep only the id of their
    parent and resolve it here, so removing an entity never leaves dangling
    references behind. The parent must be registered before its children and
    an entity with children cannot be removed.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._entities : dict[Any, Entity] = dict()
        self._children : dict[Any, set] = dict()

    def add(self, entity: Entity) -> Entity:
        with self._lock:
            if entity.id in self._entities:
                raise DuplicateEntityException(f"{type(entity).__name__} {entity.id} is already registered")

            if entity.parent_id is not None:
                parent = self.get(entity.parent_id)
                expected = PARENT_TYPES[type(entity)]
                if not isinstance(parent, expected):
                    raise InvalidArgumentException(
                        f"Parent of {entity.id} must be a {expected.__name__}, got {type(parent).__name__}")
                self._children.setdefault(entity.parent_id, set()).add(entity.id)

            self._entities[entity.id] = entity
            entity.registry = self
            logger.debug(f"Registered {type(entity).__name__} {entity.id}")
            return entity

    def get(self, entity_id: EntityId) -> Entity:
        entity = self._entities.get(entity_id)
        if entity is None:
            raise UnknownEntityException(f"No entity with id {entity_id}")
        return entity

    def try_get(self, entity_id: EntityId) -> Entity | None:
        return self._entities.get(entity_id)

    def remove(self, entity_id: EntityId) -> Entity:
        with self._lock:
            entity = self.get(entity_id)
            if self._children.get(entity_id):
                raise EntityHasChildrenException(f"{entity_id} still has children, remove them first")

            del self._entities[entity_id]
            self._children.pop(entity_id, None)
            if entity.parent_id is not None:
                self._children.get(entity.parent_id, set()).discard(entity_id)
            entity.registry = None
            logger.debug(f"Removed {type(entity).__name__} {entity_id}")
            return entity

    def children_of(self, entity_id: EntityId) -> list[Entity]:
        return [self._entities[c] for c in sorted(self._children.get(entity_id, set()))]

    def parent_of(self, entity_id: EntityId) -> Entity | None:
        parent_id = self.get(entity_id).parent_id
        return None if parent_id is None else self.try_get(parent_id)

    def evses(self) -> list[EVSE]:
        return sorted((e for e in self._entities.values() if isinstance(e, EVSE)), key=lambda e: e.id)

    def __contains__(self, entity_id) -> bool:
        return entity_id in self._entities

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def __len__(self) -> int:
        return len(self._entities)
