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


import asyncio
import inspect
from enum import StrEnum
from functools import wraps

from beartype import beartype
from beartype.typing import Any, Callable
from pyee.asyncio import AsyncIOEventEmitter

from util import setup_logging

logger = setup_logging(__name__)


class ScheduleEvent(StrEnum):
    on_status_changed = "on_status_changed"


class EntityEvent(StrEnum):
    on_data_changed = "on_data_changed"
    on_status_changed = "on_status_changed"
    on_admin_status_changed = "on_admin_status_changed"

    on_reserve_request = "on_reserve_request"
    on_reserve_response = "on_reserve_response"
    on_new_reservation = "on_new_reservation"

    on_cancel_reservation_request = "on_cancel_reservation_request"
    on_cancel_reservation_response = "on_cancel_reservation_response"
    on_reservation_canceled = "on_reservation_canceled"

    on_remote_start_request = "on_remote_start_request"
    on_remote_start_response = "on_remote_start_response"
    on_new_charging_session = "on_new_charging_session"

    on_remote_stop_request = "on_remote_stop_request"
    on_remote_stop_response = "on_remote_stop_response"
    on_new_charge_detail_record = "on_new_charge_detail_record"


class EntityEvents:
    """
    Observer list owned by a single schedule or entity.

    Plain callables run inline, in subscription order, inside ``emit``.
    Coroutine functions are scheduled on the running event loop, or skipped
    with a warning when ``emit`` runs outside of one. Whatever a handler raises
    is logged and dropped so the emitting operation always completes.
    """

    @beartype
    def __init__(self, owner: str) -> None:
        self.owner = owner
        self._emitter = AsyncIOEventEmitter()
        self._emitter.on("error", self._log_handler_error)
        self._wrapped : dict[tuple[str, Callable[..., Any]], Callable[..., Any]] = dict()

    def _log_handler_error(self, error: Exception) -> None:
        logger.error(f"Notification handler of {self.owner} failed: {error!r}", exc_info=error)

    def _when_loop_running(self, handler: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(handler)
        def schedule(*vargs, **kwargs):
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                logger.warning(f"No running event loop, skipped {handler.__qualname__} of {self.owner}")
                return None
            return handler(*vargs, **kwargs)

        return schedule

    @beartype
    def on(self, event: str, handler: Callable[..., Any]) -> Callable[..., Any]:
        listener = handler
        if inspect.iscoroutinefunction(handler):
            listener = self._when_loop_running(handler)
            self._wrapped[(str(event), handler)] = listener
        self._emitter.on(str(event), listener)
        return handler

    @beartype
    def remove(self, event: str, handler: Callable[..., Any]) -> None:
        listener = self._wrapped.pop((str(event), handler), handler)
        self._emitter.remove_listener(str(event), listener)

    def emit(self, event: str, *vargs: Any) -> bool:
        return self._emitter.emit(str(event), *vargs)

    def listener_count(self, event: str) -> int:
        return len(self._emitter.listeners(str(event)))
