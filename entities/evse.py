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
from datetime import timedelta

from beartype import beartype
from beartype.typing import Any, Awaitable, Callable, Iterable

from entities.config import get_entity_config
from entities.data.requests import GatedRequest, ReserveRequest, CancelReservationRequest, RemoteStartRequest, \
    RemoteStopRequest
from entities.data.reservation import SocketOutlet, ChargingReservation, ChargingSession, ChargeDetailRecord, \
    ReservationCancellationReason, ReservationHandling
from entities.data.results import GatedResult, ReservationResult, CancelReservationResult, RemoteStartResult, \
    RemoteStopResult
from entities.data.status_types import EVSEStatusTypes, EVSEAdminStatusTypes
from entities.events import EntityEvent
from entities.ids import EVSEId, ChargingStationId
from entities.remote_interface import RemoteChargingInterface
from entities.status_entity import StatusEntity, DataChange
from util import setup_logging, utc_now, log_async_call, with_request_model
from util.types import EventTrackingId

logger = setup_logging(__name__)


class EVSE(StatusEntity):
    """
    One independently controllable charge point.

    Reservations and remote start/stop pass the admin status gate before they
    reach an execution path: the EVSE's own remote, or the first one found on
    the charging station, charging pool or operator above it. Gated operations
    take keyword arguments, validated into the request models of
    :mod:`entities.data.requests`, and always return a result object.

    Events (positional handler arguments):
        on_reserve_request(timestamp, evse, request)
        on_reserve_response(timestamp, evse, request, result)
        on_new_reservation(timestamp, evse, reservation)
        on_cancel_reservation_request / _response, on_reservation_canceled(timestamp, evse, reservation, reason)
        on_remote_start_request / _response, on_new_charging_session(timestamp, evse, session)
        on_remote_stop_request / _response, on_new_charge_detail_record(timestamp, evse, cdr)
    """

    STATUS_TYPES = EVSEStatusTypes
    ADMIN_STATUS_TYPES = EVSEAdminStatusTypes
    DEFAULT_STATUS = EVSEStatusTypes.out_of_service
    DEFAULT_ADMIN_STATUS = EVSEAdminStatusTypes.out_of_service

    @beartype
    def __init__(self,
                 id: EVSEId,
                 station_id: ChargingStationId | None = None,
                 initial_status: EVSEStatusTypes | None = None,
                 initial_admin_status: EVSEAdminStatusTypes | None = None,
                 socket_outlets: Iterable[SocketOutlet] = (),
                 description: str | None = None,
                 max_power_kw: float | None = None,
                 max_reservation_duration: timedelta | None = None,
                 remote: RemoteChargingInterface | None = None,
                 **kwargs) -> None:
        super().__init__(id,
                         parent_id=station_id,
                         initial_status=initial_status,
                         initial_admin_status=initial_admin_status,
                         remote=remote,
                         **kwargs)
        self._socket_outlets = frozenset(socket_outlets)
        self._description = description
        self._max_power_kw = max_power_kw
        self._max_reservation_duration = max_reservation_duration or get_entity_config().max_reservation_duration

        self._reservation : ChargingReservation | None = None
        self._session : ChargingSession | None = None
        self._operation_lock : asyncio.Lock | None = None
        self._operation_loop : asyncio.AbstractEventLoop | None = None

    @property
    def station_id(self) -> ChargingStationId | None:
        return self.parent_id

    @property
    def socket_outlets(self) -> frozenset[SocketOutlet]:
        return self._socket_outlets

    def set_socket_outlets(self, value: Iterable[SocketOutlet],
                           event_tracking_id: EventTrackingId | None = None) -> DataChange:
        return self._set_data("socket_outlets", frozenset(value), event_tracking_id)

    @property
    def description(self) -> str | None:
        return self._description

    def set_description(self, value: str | None, event_tracking_id: EventTrackingId | None = None) -> DataChange:
        return self._set_data("description", value, event_tracking_id)

    @property
    def max_power_kw(self) -> float | None:
        return self._max_power_kw

    def set_max_power_kw(self, value: float | None, event_tracking_id: EventTrackingId | None = None) -> DataChange:
        return self._set_data("max_power_kw", value, event_tracking_id)

    @property
    def max_reservation_duration(self) -> timedelta:
        return self._max_reservation_duration

    def set_max_reservation_duration(self, value: timedelta,
                                     event_tracking_id: EventTrackingId | None = None) -> DataChange:
        return self._set_data("max_reservation_duration", value, event_tracking_id)

    def _copy_data_from(self, other, event_tracking_id):
        return [self.set_socket_outlets(other.socket_outlets, event_tracking_id),
                self.set_description(other.description, event_tracking_id),
                self.set_max_power_kw(other.max_power_kw, event_tracking_id),
                self.set_max_reservation_duration(other.max_reservation_duration, event_tracking_id)]

    @property
    def reservation(self) -> ChargingReservation | None:
        return self._reservation

    @property
    def is_reserved(self) -> bool:
        return self._reservation is not None

    @property
    def charging_session(self) -> ChargingSession | None:
        return self._session

    @property
    def is_charging(self) -> bool:
        return self._session is not None

    def _active_reservation(self) -> ChargingReservation | None:
        if self._reservation is not None and self._reservation.is_expired():
            expired = self._reservation
            self._reservation = None
            logger.info(f"{self.id} reservation {expired.id} expired at {expired.end_time.isoformat()}")
            self.events.emit(EntityEvent.on_reservation_canceled, utc_now(), self, expired,
                             ReservationCancellationReason.expired)
        return self._reservation

    def _lock_for_running_loop(self) -> asyncio.Lock:
        """Operations are serialized per event loop. A new loop gets a fresh lock."""
        loop = asyncio.get_running_loop()
        if self._operation_lock is None or self._operation_loop is not loop:
            self._operation_lock = asyncio.Lock()
            self._operation_loop = loop
        return self._operation_lock

    async def _run_gated(self,
                         request: GatedRequest,
                         request_event: EntityEvent,
                         response_event: EntityEvent,
                         gate: Callable[[Any], Awaitable[GatedResult]]):
        if request.evse_id is None:
            request = request.model_copy(update={"evse_id": self.id})

        started = utc_now()
        self.events.emit(request_event, started, self, request)

        async with self._lock_for_running_loop():
            result = await gate(request)

        finished = utc_now()
        result = result.with_runtime(finished - started)
        logger.debug(f"{self.id} {request_event.removesuffix('_request').removeprefix('on_')} "
                     f"[{request.event_tracking_id}] -> {result.result} in {result.runtime}")
        self.events.emit(response_event, finished, self, request, result)
        return result

    @with_request_model(ReserveRequest)
    async def reserve(self, request: ReserveRequest) -> ReservationResult:
        return await self._run_gated(request,
                                     EntityEvent.on_reserve_request,
                                     EntityEvent.on_reserve_response,
                                     self._reserve_gate)

    async def _reserve_gate(self, request: ReserveRequest) -> ReservationResult:
        if request.evse_id != self.id:
            return ReservationResult.unknown_location()
        if not self.is_operational:
            return ReservationResult.out_of_service()

        active = self._active_reservation()
        if active is not None and active.id != request.reservation_id:
            return ReservationResult.already_reserved(active)
        if self._session is not None:
            return ReservationResult.already_in_use()

        remote = self.resolve_remote()
        if remote is None:
            return ReservationResult.offline()

        duration = min(request.duration or self.max_reservation_duration, self.max_reservation_duration)
        request = request.model_copy(update={"duration": duration})
        try:
            result = await log_async_call(logger.debug)(remote.reserve)(request)
        except Exception as e:
            logger.error(f"{self.id} reserve failed in remote: {e!r}")
            return ReservationResult.error(str(e))

        if result.is_success:
            reservation = result.reservation or self._new_reservation(request)
            self._reservation = reservation
            self.events.emit(EntityEvent.on_new_reservation, utc_now(), self, reservation)
            result = result.model_copy(update={"reservation": reservation})
        return result

    def _new_reservation(self, request: ReserveRequest) -> ChargingReservation:
        data = dict(evse_id=self.id,
                    start_time=request.start_time or request.timestamp,
                    duration=request.duration,
                    provider_id=request.provider_id,
                    charging_product=request.charging_product,
                    auth_tokens=request.auth_tokens,
                    pins=request.pins)
        if request.reservation_id is not None:
            data["id"] = request.reservation_id
        return ChargingReservation(**data)

    @with_request_model(CancelReservationRequest)
    async def cancel_reservation(self, request: CancelReservationRequest) -> CancelReservationResult:
        return await self._run_gated(request,
                                     EntityEvent.on_cancel_reservation_request,
                                     EntityEvent.on_cancel_reservation_response,
                                     self._cancel_reservation_gate)

    async def _cancel_reservation_gate(self, request: CancelReservationRequest) -> CancelReservationResult:
        active = self._active_reservation()
        if active is None:
            return CancelReservationResult.success(request.reservation_id, request.reason)
        if active.id != request.reservation_id:
            return CancelReservationResult.unknown_reservation_id(request.reservation_id, request.reason)
        if not self.is_operational:
            return CancelReservationResult.out_of_service(request.reservation_id, request.reason)

        remote = self.resolve_remote()
        if remote is None:
            return CancelReservationResult.offline(request.reservation_id, request.reason)

        try:
            result = await log_async_call(logger.debug)(remote.cancel_reservation)(request)
        except Exception as e:
            logger.error(f"{self.id} cancel_reservation failed in remote: {e!r}")
            return CancelReservationResult.error(request.reservation_id, request.reason, str(e))

        if result.is_success:
            self._reservation = None
            self.events.emit(EntityEvent.on_reservation_canceled, utc_now(), self, active, request.reason)
            result = result.model_copy(update={"canceled_reservation": active})
        return result

    @with_request_model(RemoteStartRequest)
    async def remote_start(self, request: RemoteStartRequest) -> RemoteStartResult:
        return await self._run_gated(request,
                                     EntityEvent.on_remote_start_request,
                                     EntityEvent.on_remote_start_response,
                                     self._remote_start_gate)

    async def _remote_start_gate(self, request: RemoteStartRequest) -> RemoteStartResult:
        if request.evse_id != self.id:
            return RemoteStartResult.unknown_location()
        if not self.is_operational:
            return RemoteStartResult.out_of_service()
        if self._session is not None:
            return RemoteStartResult.already_in_use()

        active = self._active_reservation()
        if active is not None and active.id != request.reservation_id:
            return RemoteStartResult.reserved(f"{self.id} is reserved")

        remote = self.resolve_remote()
        if remote is None:
            return RemoteStartResult.offline()

        try:
            result = await log_async_call(logger.debug)(remote.remote_start)(request)
        except Exception as e:
            logger.error(f"{self.id} remote_start failed in remote: {e!r}")
            return RemoteStartResult.error(str(e))

        if result.is_success:
            session = result.session or self._new_session(request)
            self._session = session
            self.events.emit(EntityEvent.on_new_charging_session, utc_now(), self, session)
            result = result.model_copy(update={"session": session})
        return result

    def _new_session(self, request: RemoteStartRequest) -> ChargingSession:
        data = dict(evse_id=self.id,
                    reservation_id=request.reservation_id,
                    provider_id=request.provider_id,
                    charging_product=request.charging_product,
                    auth_token=request.auth_token,
                    start_time=request.timestamp)
        if request.session_id is not None:
            data["id"] = request.session_id
        return ChargingSession(**data)

    @with_request_model(RemoteStopRequest)
    async def remote_stop(self, request: RemoteStopRequest) -> RemoteStopResult:
        return await self._run_gated(request,
                                     EntityEvent.on_remote_stop_request,
                                     EntityEvent.on_remote_stop_response,
                                     self._remote_stop_gate)

    async def _remote_stop_gate(self, request: RemoteStopRequest) -> RemoteStopResult:
        if not self.is_operational:
            return RemoteStopResult.out_of_service(request.session_id)
        remote = self.resolve_remote()
        if remote is None:
            return RemoteStopResult.offline(request.session_id)

        try:
            result = await log_async_call(logger.debug)(remote.remote_stop)(request)
        except Exception as e:
            logger.error(f"{self.id} remote_stop failed in remote: {e!r}")
            return RemoteStopResult.error(request.session_id, str(e))

        if result.is_success:
            # Only a locally recorded session is ended here
            if self._session is not None and self._session.id == request.session_id:
                self._end_session(request.reservation_handling)
            if result.charge_detail_record is not None:
                self.events.emit(EntityEvent.on_new_charge_detail_record, utc_now(), self,
                                 result.charge_detail_record)
        return result

    def _end_session(self, reservation_handling: ReservationHandling) -> ChargingSession | None:
        session, self._session = self._session, None
        if (session is not None and reservation_handling == ReservationHandling.close
                and self._reservation is not None and self._reservation.id == session.reservation_id):
            self._reservation = None
        return session

    @beartype
    def receive_charge_detail_record(self, cdr: ChargeDetailRecord) -> bool:
        """
        A charge detail record arriving for the active session ends it. Returns
        False when the record does not belong to the active session.
        """
        if self._session is None or self._session.id != cdr.session_id:
            logger.warning(f"{self.id} got charge detail record {cdr.id} for unknown session {cdr.session_id}")
            return False

        self._end_session(ReservationHandling.close)
        self.events.emit(EntityEvent.on_new_charge_detail_record, utc_now(), self, cdr)
        return True
