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


from datetime import timedelta
from enum import StrEnum
from typing import Any

from camel_converter import dict_to_camel
from pydantic import BaseModel

from entities.data.reservation import ChargingReservation, ChargingSession, ChargeDetailRecord, \
    ReservationCancellationReason
from util.types import ReservationId, SessionId


class ReservationResultType(StrEnum):
    unspecified = "Unspecified"
    success = "Success"
    offline = "Offline"
    out_of_service = "OutOfService"
    unknown_location = "UnknownLocation"
    already_reserved = "AlreadyReserved"
    already_in_use = "AlreadyInUse"
    timeout = "Timeout"
    error = "Error"


class CancelReservationResultType(StrEnum):
    unspecified = "Unspecified"
    success = "Success"
    unknown_reservation_id = "UnknownReservationId"
    offline = "Offline"
    out_of_service = "OutOfService"
    timeout = "Timeout"
    error = "Error"


class RemoteStartResultType(StrEnum):
    unspecified = "Unspecified"
    success = "Success"
    offline = "Offline"
    out_of_service = "OutOfService"
    unknown_location = "UnknownLocation"
    already_in_use = "AlreadyInUse"
    reserved = "Reserved"
    timeout = "Timeout"
    error = "Error"


class RemoteStopResultType(StrEnum):
    unspecified = "Unspecified"
    success = "Success"
    invalid_session_id = "InvalidSessionId"
    offline = "Offline"
    out_of_service = "OutOfService"
    timeout = "Timeout"
    error = "Error"


class GatedResult(BaseModel):
    """
    Outcome of a gated EVSE operation. Every branch of the gate produces one of
    these, so callers branch on ``result`` instead of catching exceptions.
    """
    result : Any
    description : str | None = None
    runtime : timedelta | None = None

    @property
    def is_success(self) -> bool:
        return self.result == "Success"

    def with_runtime(self, runtime: timedelta):
        return self.model_copy(update={"runtime": runtime})

    def to_json(self) -> dict[str, Any]:
        return dict_to_camel(self.model_dump(mode="json", exclude_none=True))


class ReservationResult(GatedResult):
    result : ReservationResultType
    reservation : ChargingReservation | None = None

    @classmethod
    def success(cls, reservation: ChargingReservation | None = None):
        return cls(result=ReservationResultType.success, reservation=reservation)

    @classmethod
    def offline(cls):
        return cls(result=ReservationResultType.offline)

    @classmethod
    def out_of_service(cls):
        return cls(result=ReservationResultType.out_of_service)

    @classmethod
    def unknown_location(cls):
        return cls(result=ReservationResultType.unknown_location)

    @classmethod
    def already_reserved(cls, reservation: ChargingReservation | None = None):
        return cls(result=ReservationResultType.already_reserved, reservation=reservation)

    @classmethod
    def already_in_use(cls):
        return cls(result=ReservationResultType.already_in_use)

    @classmethod
    def error(cls, description: str | None = None):
        return cls(result=ReservationResultType.error, description=description)


class CancelReservationResult(GatedResult):
    result : CancelReservationResultType
    reservation_id : ReservationId
    reason : ReservationCancellationReason = ReservationCancellationReason.deleted
    canceled_reservation : ChargingReservation | None = None

    @classmethod
    def success(cls, reservation_id: ReservationId, reason: ReservationCancellationReason,
                canceled_reservation: ChargingReservation | None = None):
        return cls(result=CancelReservationResultType.success, reservation_id=reservation_id, reason=reason,
                   canceled_reservation=canceled_reservation)

    @classmethod
    def unknown_reservation_id(cls, reservation_id: ReservationId, reason: ReservationCancellationReason):
        return cls(result=CancelReservationResultType.unknown_reservation_id, reservation_id=reservation_id,
                   reason=reason)

    @classmethod
    def offline(cls, reservation_id: ReservationId, reason: ReservationCancellationReason):
        return cls(result=CancelReservationResultType.offline, reservation_id=reservation_id, reason=reason)

    @classmethod
    def out_of_service(cls, reservation_id: ReservationId, reason: ReservationCancellationReason):
        return cls(result=CancelReservationResultType.out_of_service, reservation_id=reservation_id, reason=reason)

    @classmethod
    def error(cls, reservation_id: ReservationId, reason: ReservationCancellationReason,
              description: str | None = None):
        return cls(result=CancelReservationResultType.error, reservation_id=reservation_id, reason=reason,
                   description=description)


class RemoteStartResult(GatedResult):
    result : RemoteStartResultType
    session : ChargingSession | None = None

    @classmethod
    def success(cls, session: ChargingSession | None = None):
        return cls(result=RemoteStartResultType.success, session=session)

    @classmethod
    def offline(cls):
        return cls(result=RemoteStartResultType.offline)

    @classmethod
    def out_of_service(cls):
        return cls(result=RemoteStartResultType.out_of_service)

    @classmethod
    def unknown_location(cls):
        return cls(result=RemoteStartResultType.unknown_location)

    @classmethod
    def already_in_use(cls):
        return cls(result=RemoteStartResultType.already_in_use)

    @classmethod
    def reserved(cls, description: str | None = None):
        return cls(result=RemoteStartResultType.reserved, description=description)

    @classmethod
    def error(cls, description: str | None = None):
        return cls(result=RemoteStartResultType.error, description=description)


class RemoteStopResult(GatedResult):
    result : RemoteStopResultType
    session_id : SessionId
    charge_detail_record : ChargeDetailRecord | None = None

    @classmethod
    def success(cls, session_id: SessionId, charge_detail_record: ChargeDetailRecord | None = None):
        return cls(result=RemoteStopResultType.success, session_id=session_id,
                   charge_detail_record=charge_detail_record)

    @classmethod
    def invalid_session_id(cls, session_id: SessionId):
        return cls(result=RemoteStopResultType.invalid_session_id, session_id=session_id)

    @classmethod
    def offline(cls, session_id: SessionId):
        return cls(result=RemoteStopResultType.offline, session_id=session_id)

    @classmethod
    def out_of_service(cls, session_id: SessionId):
        return cls(result=RemoteStopResultType.out_of_service, session_id=session_id)

    @classmethod
    def error(cls, session_id: SessionId, description: str | None = None):
        return cls(result=RemoteStopResultType.error, session_id=session_id, description=description)
