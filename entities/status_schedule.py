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
from itertools import islice
from threading import RLock

from beartype import beartype
from beartype.typing import Any, Callable, Generic, Iterable, Iterator, TypeVar

from entities.config import get_entity_config
from entities.data.timestamped import Timestamped
from entities.events import EntityEvents, ScheduleEvent
from util import InvalidArgumentException, ResettableIterator, setup_logging, utc_now, new_event_tracking_id
from util.types import EventTrackingId

logger = setup_logging(__name__)

T = TypeVar("T")


class EmptyScheduleException(InvalidArgumentException):
    pass


class ChangeMethods(StrEnum):
    replace = "Replace"
    add = "Add"


@beartype
class StatusSchedule(Generic[T]):
    """
    Bounded history of timestamped values of one status, newest first.

    The schedule is seeded with an initial value and therefore never empty.
    Every insert is recorded, even when it repeats the current value, and the
    oldest entries are evicted once ``max_list_size`` is exceeded.
    ``on_status_changed`` fires only when the current value actually changes:

        handler(timestamp, event_tracking_id, schedule, old_status, new_status)
    """

    def __init__(self,
                 initial_value: Any,
                 max_list_size: int | None = None,
                 timestamp: datetime | None = None,
                 name: str = "status") -> None:
        if max_list_size is None:
            max_list_size = get_entity_config().max_status_schedule_size
        if max_list_size < 1:
            raise InvalidArgumentException(f"max_list_size must be positive, got {max_list_size}")

        self.name = name
        self._max_list_size = max_list_size
        self._lock = RLock()
        self._history : list[Timestamped] = [Timestamped(timestamp=timestamp or utc_now(), value=initial_value)]
        self.events = EntityEvents(owner=f"StatusSchedule[{name}]")

    @property
    def max_list_size(self) -> int:
        return self._max_list_size

    @property
    def current_status(self) -> Timestamped:
        return self._history[0]

    @property
    def current_value(self) -> Any:
        return self._history[0].value

    def on_status_changed(self, handler: Callable[..., Any]) -> Callable[..., Any]:
        return self.events.on(ScheduleEvent.on_status_changed, handler)

    def insert(self,
               value: Any,
               timestamp: datetime | None = None,
               event_tracking_id: EventTrackingId | None = None) -> Timestamped:
        item = Timestamped.now(value) if timestamp is None else Timestamped(timestamp=timestamp, value=value)
        return self.insert_timestamped(item, event_tracking_id=event_tracking_id)

    def insert_timestamped(self,
                           item: Timestamped,
                           event_tracking_id: EventTrackingId | None = None) -> Timestamped:
        with self._lock:
            old_status = self._history[0]
            self._history.insert(0, item)
            del self._history[self._max_list_size:]
            self._notify_if_changed(old_status, event_tracking_id)
            return item

    def insert_many(self,
                    items: Iterable[Timestamped],
                    change_method: ChangeMethods = ChangeMethods.replace,
                    event_tracking_id: EventTrackingId | None = None) -> Timestamped:
        """
        ``replace`` adopts ``items`` as the new history in the given order (first
        item becomes current). ``add`` merges them into the existing history by
        timestamp, newest first, keeping new items ahead of equally old ones.
        """
        items = list(items)

        with self._lock:
            old_status = self._history[0]

            if change_method == ChangeMethods.replace:
                if len(items) == 0:
                    raise EmptyScheduleException(f"Cannot replace the {self.name} schedule with an empty list")
                self._history = items[:self._max_list_size]
            else:
                if len(items) == 0:
                    return old_status
                merged = items + self._history
                merged.sort(key=lambda s: s.timestamp, reverse=True)
                self._history = merged[:self._max_list_size]

            self._notify_if_changed(old_status, event_tracking_id)
            return self._history[0]

    def _notify_if_changed(self, old_status: Timestamped, event_tracking_id: EventTrackingId | None) -> None:
        new_status = self._history[0]
        if new_status.value == old_status.value:
            return
        logger.debug(f"{self.name} changed from {old_status} to {new_status}")
        self.events.emit(ScheduleEvent.on_status_changed,
                         utc_now(),
                         event_tracking_id or new_event_tracking_id(),
                         self,
                         old_status,
                         new_status)

    def take(self, count: int | None = None) -> ResettableIterator[Timestamped]:
        """
        Lazy view of the ``count`` newest entries (all entries if ``count`` is
        None). The view can be iterated repeatedly and reflects the history at
        the time each iteration starts.
        """
        if count is not None and count < 0:
            raise InvalidArgumentException(f"count must not be negative, got {count}")
        return ResettableIterator[Timestamped](factory=lambda: islice(self._snapshot(), count))

    def _snapshot(self) -> Iterator[Timestamped]:
        with self._lock:
            return iter(tuple(self._history))

    def __iter__(self) -> Iterator[Timestamped]:
        return self._snapshot()

    def __len__(self) -> int:
        return len(self._history)

    def __repr__(self):
        return f"StatusSchedule({self.name}, current={self.current_status}, size={len(self)}/{self._max_list_size})"
