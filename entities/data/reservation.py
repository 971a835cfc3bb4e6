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


from datetime import datetime, timedelta
from enum import StrEnum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, field_serializer

from entities.ids import EVSEId
from util import utc_now
from util.types import ReservationId, SessionId, ProviderId, AuthToken, ChargeDetailRecordId


class PlugTypes(StrEnum):
    type2_outlet = "Type2Outlet"
    type2_connector_cable_attached = "Type2Connector_CableAttached"
    ccs_combo2 = "CCSCombo2Plug_CableAttached"
    chademo = "CHAdeMO"
    type_f_schuko = "TypeFSchuko"
    tesla_connector = "TeslaConnector"


class ReservationCancellationReason(StrEnum):
    deleted = "Deleted"
    expired = "Expired"
    aborted = "Aborted"


class ReservationHandling(StrEnum):
    close = "Close"
    keep_alive = "KeepAlive"


class SocketOutlet(BaseModel):
    model_config = ConfigDict(frozen=True)

    plug : PlugTypes
    cable_attached : bool = False
    cable_length_m : float | None = None
    max_power_kw : float | None = None


def _new_reservation_id() -> ReservationId:
    return ReservationId(str(uuid4()))


def _new_session_id() -> SessionId:
    return SessionId(str(uuid4()))


class ChargingReservation(BaseModel):
    id : ReservationId = Field(default_factory=_new_reservation_id)
    evse_id : InstanceOf[EVSEId] | None = None
    start_time : datetime = Field(default_factory=utc_now)
    duration : timedelta = timedelta(minutes=15)
    provider_id : ProviderId | None = None
    charging_product : str | None = None
    auth_tokens : list[AuthToken] = Field(default_factory=list)
    pins : list[str] = Field(default_factory=list)

    @field_serializer("evse_id")
    def serialize_evse_id(self, value):
        return None if value is None else str(value)

    @property
    def end_time(self) -> datetime:
        return self.start_time + self.duration

    def is_expired(self, moment: datetime | None = None) -> bool:
        return (moment or utc_now()) >= self.end_time


class ChargingSession(BaseModel):
    id : SessionId = Field(default_factory=_new_session_id)
    evse_id : InstanceOf[EVSEId] | None = None
    reservation_id : ReservationId | None = None
    provider_id : ProviderId | None = None
    charging_product : str | None = None
    auth_token : AuthToken | None = None
    start_time : datetime = Field(default_factory=utc_now)

    @field_serializer("evse_id")
    def serialize_evse_id(self, value):
        return None if value is None else str(value)


class ChargeDetailRecord(BaseModel):
    id : ChargeDetailRecordId = Field(default_factory=lambda: ChargeDetailRecordId(str(uuid4())))
    session_id : SessionId
    evse_id : InstanceOf[EVSEId] | None = None
    reservation_id : ReservationId | None = None
    provider_id : ProviderId | None = None
    session_start : datetime | None = None
    session_end : datetime = Field(default_factory=utc_now)
    energy_kwh : float = 0.0

    @field_serializer("evse_id")
    def serialize_evse_id(self, value):
        return None if value is None else str(value)
