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
from enum import StrEnum

from beartype import beartype
from beartype.typing import Any, Callable, ClassVar, Iterable
from pydantic import BaseModel, ConfigDict, Field

from entities.config import get_entity_config
from entities.data.timestamped import Timestamped
from entities.events import EntityEvents, EntityEvent
from entities.remote_interface import RemoteChargingInterface
from entities.status_schedule import StatusSchedule, ChangeMethods
from util import InvalidArgumentException, ResettableIterator, setup_logging, utc_now, new_event_tracking_id
from util.types import EventTrackingId

logger = setup_logging(__name__)


class DataChange(BaseModel):
    """Result of an explicit property setter."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    entity_id : Any
    property_name : str
    old_value : Any
    new_value : Any
    timestamp : datetime = Field(default_factory=utc_now)
    event_tracking_id : EventTrackingId = Field(default_factory=new_event_tracking_id)

    @property
    def changed(self) -> bool:
        return self.old_value != self.new_value


class RemoteAttachment:
    """
    Optional execution path of an entity. Either attached to a
    :class:`RemoteChargingInterface` or explicitly detached.
    """

    def __init__(self, remote: RemoteChargingInterface | None = None):
        self._remote = remote

    @property
    def remote_attached(self) -> bool:
        return self._remote is not None

    @property
    def remote(self) -> RemoteChargingInterface | None:
        return self._remote

    @beartype
    def attach_remote(self, remote: RemoteChargingInterface) -> None:
        self._remote = remote

    def detach_remote(self) -> None:
        self._remote = None


@beartype
class StatusEntity(RemoteAttachment):
    """
    Entity owning a status schedule and an admin status schedule.

    The admin status acts as a gate: while it is one of ``OPEN_ADMIN_STATUSES``
    the effective status is the current value of the status schedule, otherwise
    the effective status is ``out_of_service`` stamped with the admin status
    timestamp. The effective status is computed on every read.

    Subclasses bind the status enums through the class variables.
    """

    STATUS_TYPES : ClassVar[type[StrEnum]]
    ADMIN_STATUS_TYPES : ClassVar[type[StrEnum]]
    DEFAULT_STATUS : ClassVar[StrEnum]
    DEFAULT_ADMIN_STATUS : ClassVar[StrEnum]

    def __init__(self,
                 id: Any,
                 parent_id: Any = None,
                 initial_status: StrEnum | None = None,
                 initial_admin_status: StrEnum | None = None,
                 max_status_schedule_size: int | None = None,
                 max_admin_status_schedule_size: int | None = None,
                 remote: RemoteChargingInterface | None = None,
                 timestamp: datetime | None = None) -> None:
        super().__init__(remote)

        config = get_entity_config()
        timestamp = timestamp or utc_now()
        initial_status = self.DEFAULT_STATUS if initial_status is None else initial_status
        initial_admin_status = self.DEFAULT_ADMIN_STATUS if initial_admin_status is None else initial_admin_status
        if not isinstance(initial_status, self.STATUS_TYPES):
            raise InvalidArgumentException(f"{initial_status!r} is not a {self.STATUS_TYPES.__name__}")
        if not isinstance(initial_admin_status, self.ADMIN_STATUS_TYPES):
            raise InvalidArgumentException(f"{initial_admin_status!r} is not a {self.ADMIN_STATUS_TYPES.__name__}")

        self.id = id
        self.parent_id = parent_id
        self.registry = None
        self.events = EntityEvents(owner=str(id))

        if max_status_schedule_size is None:
            max_status_schedule_size = config.max_status_schedule_size
        if max_admin_status_schedule_size is None:
            max_admin_status_schedule_size = config.max_admin_status_schedule_size

        self.statuses = StatusSchedule(initial_status,
                                       max_list_size=max_status_schedule_size,
                                       timestamp=timestamp,
                                       name=f"{id} status")
        self.admin_statuses = StatusSchedule(initial_admin_status,
                                             max_list_size=max_admin_status_schedule_size,
                                             timestamp=timestamp,
                                             name=f"{id} admin status")

        self.statuses.on_status_changed(self._relay_status_changed)
        self.admin_statuses.on_status_changed(self._relay_admin_status_changed)

    @property
    def open_admin_statuses(self) -> frozenset:
        return frozenset({self.ADMIN_STATUS_TYPES.operational, self.ADMIN_STATUS_TYPES.internal_use})

    def _relay_status_changed(self, timestamp, event_tracking_id, schedule, old_status, new_status):
        self.events.emit(EntityEvent.on_status_changed, timestamp, event_tracking_id, self, old_status, new_status)

    def _relay_admin_status_changed(self, timestamp, event_tracking_id, schedule, old_status, new_status):
        logger.info(f"{self.id} admin status {old_status.value} -> {new_status.value}")
        self.events.emit(EntityEvent.on_admin_status_changed, timestamp, event_tracking_id, self, old_status, new_status)

    def on(self, event: EntityEvent, handler: Callable[..., Any]) -> Callable[..., Any]:
        return self.events.on(event, handler)

    @property
    def is_operational(self) -> bool:
        return self.admin_statuses.current_value in self.open_admin_statuses

    @property
    def admin_status(self) -> Timestamped:
        return self.admin_statuses.current_status

    @property
    def status(self) -> Timestamped:
        if self.is_operational:
            return self.statuses.current_status
        return Timestamped(timestamp=self.admin_status.timestamp, value=self.STATUS_TYPES.out_of_service)

    def status_schedule(self, history_size: int | None = None) -> ResettableIterator[Timestamped]:
        """
        Status history, newest first. While the admin status gate is closed the
        history collapses to the single effective out-of-service entry.
        """
        if self.is_operational:
            return self.statuses.take(history_size)
        effective = self.status
        return ResettableIterator[Timestamped](factory=lambda: iter([effective][:history_size]))

    def admin_status_schedule(self, history_size: int | None = None) -> ResettableIterator[Timestamped]:
        return self.admin_statuses.take(history_size)

    def set_status(self,
                   value: StrEnum,
                   timestamp: datetime | None = None,
                   event_tracking_id: EventTrackingId | None = None) -> Timestamped:
        return self.statuses.insert(self._check_status(value), timestamp, event_tracking_id)

    def set_status_timestamped(self,
                               item: Timestamped,
                               event_tracking_id: EventTrackingId | None = None) -> Timestamped:
        self._check_status(item.value)
        return self.statuses.insert_timestamped(item, event_tracking_id)

    def set_statuses(self,
                     items: Iterable[Timestamped],
                     change_method: ChangeMethods = ChangeMethods.replace,
                     event_tracking_id: EventTrackingId | None = None) -> Timestamped:
        items = list(items)
        for item in items:
            self._check_status(item.value)
        return self.statuses.insert_many(items, change_method, event_tracking_id)

    def set_admin_status(self,
                         value: StrEnum,
                         timestamp: datetime | None = None,
                         event_tracking_id: EventTrackingId | None = None) -> Timestamped:
        return self.admin_statuses.insert(self._check_admin_status(value), timestamp, event_tracking_id)

    def set_admin_status_timestamped(self,
                                     item: Timestamped,
                                     event_tracking_id: EventTrackingId | None = None) -> Timestamped:
        self._check_admin_status(item.value)
        return self.admin_statuses.insert_timestamped(item, event_tracking_id)

    def set_admin_statuses(self,
                           items: Iterable[Timestamped],
                           change_method: ChangeMethods = ChangeMethods.replace,
                           event_tracking_id: EventTrackingId | None = None) -> Timestamped:
        items = list(items)
        for item in items:
            self._check_admin_status(item.value)
        return self.admin_statuses.insert_many(items, change_method, event_tracking_id)

    def _check_status(self, value):
        if not isinstance(value, self.STATUS_TYPES):
            raise InvalidArgumentException(f"{value!r} is not a {self.STATUS_TYPES.__name__}")
        return value

    def _check_admin_status(self, value):
        if not isinstance(value, self.ADMIN_STATUS_TYPES):
            raise InvalidArgumentException(f"{value!r} is not a {self.ADMIN_STATUS_TYPES.__name__}")
        return value

    def _set_data(self,
                  property_name: str,
                  new_value: Any,
                  event_tracking_id: EventTrackingId | None = None) -> DataChange:
        old_value = getattr(self, f"_{property_name}")
        change = DataChange(entity_id=self.id,
                            property_name=property_name,
                            old_value=old_value,
                            new_value=new_value,
                            event_tracking_id=event_tracking_id or new_event_tracking_id())
        if change.changed:
            setattr(self, f"_{property_name}", new_value)
            self.events.emit(EntityEvent.on_data_changed, self, change)
        return change

    def _copy_data_from(self, other, event_tracking_id: EventTrackingId | None) -> list[DataChange]:
        return []

    def update_with(self, other, event_tracking_id: EventTrackingId | None = None) -> list[DataChange]:
        """
        Copy the data properties of ``other`` (same type, same id) into this
        entity and adopt its status and admin status where they are newer.
        Returns the data changes that were applied.
        """
        if type(other) is not type(self) or other.id != self.id:
            raise InvalidArgumentException(f"Cannot update {self.id} with {other.id}")

        changes = [c for c in self._copy_data_from(other, event_tracking_id) if c.changed]

        if other.admin_status.timestamp > self.admin_status.timestamp:
            self.set_admin_status_timestamped(other.admin_status, event_tracking_id)
        if other.statuses.current_status.timestamp > self.statuses.current_status.timestamp:
            self.set_status_timestamped(other.statuses.current_status, event_tracking_id)

        return changes

    @property
    def parent(self):
        if self.registry is None or self.parent_id is None:
            return None
        return self.registry.try_get(self.parent_id)

    def resolve_remote(self) -> RemoteChargingInterface | None:
        """Own execution path, else the nearest one up the parent chain."""
        if self.remote_attached:
            return self.remote
        parent = self.parent
        if parent is None:
            return None
        return parent.resolve_remote()

    def __repr__(self):
        return f"{type(self).__name__}({self.id}, status={self.status.value}, admin_status={self.admin_status.value})"
