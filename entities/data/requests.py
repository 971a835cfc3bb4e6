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
from datetime import datetime, timedelta
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, AfterValidator, field_validator

from entities.config import get_entity_config
from entities.data.reservation import ReservationCancellationReason, ReservationHandling
from entities.ids import EVSEId
from util import utc_now, new_event_tracking_id
from util.types import EventTrackingId, ReservationId, SessionId, ProviderId, AuthToken


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


class GatedRequest(BaseModel):
    """
    Envelope shared by every gated EVSE operation. Missing timestamps and event
    tracking ids are filled in on validation, so a request always carries both.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    evse_id : InstanceOf[EVSEId] | None = None
    timestamp : datetime = Field(default_factory=utc_now)
    event_tracking_id : EventTrackingId = Field(default_factory=new_event_tracking_id)
    request_timeout : timedelta | None = Field(default_factory=lambda: get_entity_config().default_request_timeout)
    cancellation : asyncio.Event | None = Field(default=None, exclude=True)

    @field_validator("timestamp", mode="before")
    @classmethod
    def default_timestamp(cls, value):
        return utc_now() if value is None else value

    @field_validator("event_tracking_id", mode="before")
    @classmethod
    def default_event_tracking_id(cls, value):
        return new_event_tracking_id() if value is None else value

    @field_validator("request_timeout", mode="before")
    @classmethod
    def default_request_timeout(cls, value):
        return get_entity_config().default_request_timeout if value is None else value

    @property
    def is_cancelled(self) -> bool:
        return self.cancellation is not None and self.cancellation.is_set()


class ReserveRequest(GatedRequest):
    start_time : datetime | None = None
    duration : timedelta | None = None
    reservation_id : Annotated[ReservationId, AfterValidator(_not_blank)] | None = None
    provider_id : ProviderId | None = None
    charging_product : str | None = None
    auth_tokens : list[AuthToken] = Field(default_factory=list)
    pins : list[str] = Field(default_factory=list)

    @field_validator("duration")
    @classmethod
    def positive_duration(cls, value):
        if value is not None and value <= timedelta(0):
            raise ValueError("reservation duration must be positive")
        return value


class CancelReservationRequest(GatedRequest):
    reservation_id : Annotated[ReservationId, AfterValidator(_not_blank)]
    reason : ReservationCancellationReason = ReservationCancellationReason.deleted


class RemoteStartRequest(GatedRequest):
    charging_product : str | None = None
    reservation_id : Annotated[ReservationId, AfterValidator(_not_blank)] | None = None
    session_id : Annotated[SessionId, AfterValidator(_not_blank)] | None = None
    provider_id : ProviderId | None = None
    auth_token : AuthToken | None = None


class RemoteStopRequest(GatedRequest):
    session_id : Annotated[SessionId, AfterValidator(_not_blank)]
    reservation_handling : ReservationHandling = ReservationHandling.close
    provider_id : ProviderId | None = None
