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


from datetime import datetime
from functools import total_ordering
from typing import Any, ClassVar, Iterable

from pydantic import BaseModel, ConfigDict, InstanceOf, field_serializer

from entities.data.status_types import EVSEStatusTypes, EVSEAdminStatusTypes, ChargingStationStatusTypes, \
    ChargingStationAdminStatusTypes, ChargingPoolStatusTypes, ChargingPoolAdminStatusTypes
from entities.data.timestamped import Timestamped, EPOCH
from entities.ids import EVSEId, ChargingStationId, ChargingPoolId


@total_ordering
class EntityStatus(BaseModel):
    """
    Point-in-time status of one entity. Ordered by (id, status) so collections
    of statuses sort deterministically regardless of their timestamps.
    """
    model_config = ConfigDict(frozen=True)

    # Name of the entity attribute holding the effective Timestamped value.
    SOURCE_ATTRIBUTE : ClassVar[str] = "status"

    id : Any
    status : Any
    timestamp : datetime

    @field_serializer("id")
    def serialize_id(self, value):
        return str(value)

    @classmethod
    def snapshot(cls, entity):
        current : Timestamped = getattr(entity, cls.SOURCE_ATTRIBUTE)
        return cls(id=entity.id, status=current.value, timestamp=current.timestamp)

    @property
    def timestamped(self) -> Timestamped:
        return Timestamped(timestamp=self.timestamp, value=self.status)

    def __lt__(self, other):
        if not isinstance(other, EntityStatus):
            return NotImplemented
        return (self.id, self.status) < (other.id, other.status)


@total_ordering
class EntityStatusUpdate(BaseModel):
    """
    A status transition of one entity: the value it had before and the one it
    has now.
    """
    model_config = ConfigDict(frozen=True)

    SOURCE_ATTRIBUTE : ClassVar[str] = "status"
    SCHEDULE_METHOD : ClassVar[str] = "status_schedule"

    id : Any
    old_status : Timestamped
    new_status : Timestamped

    @field_serializer("id")
    def serialize_id(self, value):
        return str(value)

    @classmethod
    def snapshot(cls, entity):
        current : Timestamped = getattr(entity, cls.SOURCE_ATTRIBUTE)
        history = list(getattr(entity, cls.SCHEDULE_METHOD)(2))
        if len(history) > 1:
            previous = history[1]
        else:
            previous = Timestamped(timestamp=EPOCH, value=type(current.value).unspecified)
        return cls(id=entity.id, old_status=previous, new_status=current)

    @property
    def changed(self) -> bool:
        return self.old_status.value != self.new_status.value

    def __lt__(self, other):
        if not isinstance(other, EntityStatusUpdate):
            return NotImplemented
        return (self.id, self.new_status, self.old_status) < (other.id, other.new_status, other.old_status)


class EVSEStatus(EntityStatus):
    id : InstanceOf[EVSEId]
    status : EVSEStatusTypes


class EVSEAdminStatus(EntityStatus):
    SOURCE_ATTRIBUTE : ClassVar[str] = "admin_status"

    id : InstanceOf[EVSEId]
    status : EVSEAdminStatusTypes


class EVSEStatusUpdate(EntityStatusUpdate):
    id : InstanceOf[EVSEId]


class EVSEAdminStatusUpdate(EntityStatusUpdate):
    SOURCE_ATTRIBUTE : ClassVar[str] = "admin_status"
    SCHEDULE_METHOD : ClassVar[str] = "admin_status_schedule"

    id : InstanceOf[EVSEId]


class ChargingStationStatus(EntityStatus):
    id : InstanceOf[ChargingStationId]
    status : ChargingStationStatusTypes


class ChargingStationAdminStatus(EntityStatus):
    SOURCE_ATTRIBUTE : ClassVar[str] = "admin_status"

    id : InstanceOf[ChargingStationId]
    status : ChargingStationAdminStatusTypes


class ChargingStationStatusUpdate(EntityStatusUpdate):
    id : InstanceOf[ChargingStationId]


class ChargingStationAdminStatusUpdate(EntityStatusUpdate):
    SOURCE_ATTRIBUTE : ClassVar[str] = "admin_status"
    SCHEDULE_METHOD : ClassVar[str] = "admin_status_schedule"

    id : InstanceOf[ChargingStationId]


class ChargingPoolStatus(EntityStatus):
    id : InstanceOf[ChargingPoolId]
    status : ChargingPoolStatusTypes


class ChargingPoolAdminStatus(EntityStatus):
    SOURCE_ATTRIBUTE : ClassVar[str] = "admin_status"

    id : InstanceOf[ChargingPoolId]
    status : ChargingPoolAdminStatusTypes


class ChargingPoolStatusUpdate(EntityStatusUpdate):
    id : InstanceOf[ChargingPoolId]


class ChargingPoolAdminStatusUpdate(EntityStatusUpdate):
    SOURCE_ATTRIBUTE : ClassVar[str] = "admin_status"
    SCHEDULE_METHOD : ClassVar[str] = "admin_status_schedule"

    id : InstanceOf[ChargingPoolId]


def statuses_to_json(statuses: Iterable[EntityStatus], skip: int = 0, take: int | None = None) -> dict[str, list[str]]:
    """
    Serialize a batch of statuses as ``{id: [timestamp, status]}``, keeping only
    the newest status per id and ordering the result by id.
    """
    newest : dict[Any, EntityStatus] = dict()
    for status in statuses:
        if status.id not in newest or newest[status.id].timestamp < status.timestamp:
            newest[status.id] = status

    ordered = [newest[k] for k in sorted(newest)]
    ordered = ordered[skip:] if take is None else ordered[skip:skip + take]
    return {str(s.id): s.timestamped.to_json() for s in ordered}


def contains_status(statuses: Iterable[EntityStatus], entity_id, status) -> bool:
    return any(s.id == entity_id and s.status == status for s in statuses)
