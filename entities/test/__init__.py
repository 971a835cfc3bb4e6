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
from datetime import datetime, timedelta, timezone

from entities.data.reservation import ChargeDetailRecord
from entities.data.results import ReservationResult, CancelReservationResult, RemoteStartResult, RemoteStopResult
from entities.data.status_types import EVSEStatusTypes, EVSEAdminStatusTypes
from entities.evse import EVSE
from entities.ids import EVSEId
from entities.remote_interface import RemoteChargingInterface

T0 = datetime(2025, 12, 1, 3, 45, tzinfo=timezone.utc)

EVSE_ID = "DE*822*E1111*1"


def at(minutes):
    return T0 + timedelta(minutes=minutes)


class SpyRemote(RemoteChargingInterface):
    """Accepts every request and records it. Raises ``fail`` instead when given."""

    def __init__(self, fail: Exception | None = None):
        self.calls = []
        self.fail = fail

    def _record(self, name, request):
        self.calls.append((name, request))
        if self.fail is not None:
            raise self.fail

    async def reserve(self, request):
        self._record("reserve", request)
        return ReservationResult.success()

    async def cancel_reservation(self, request):
        self._record("cancel_reservation", request)
        return CancelReservationResult.success(request.reservation_id, request.reason)

    async def remote_start(self, request):
        self._record("remote_start", request)
        return RemoteStartResult.success()

    async def remote_stop(self, request):
        self._record("remote_stop", request)
        return RemoteStopResult.success(request.session_id,
                                        ChargeDetailRecord(session_id=request.session_id,
                                                           evse_id=request.evse_id,
                                                           energy_kwh=12.5))


class SlowSpyRemote(SpyRemote):
    """Takes ``delay`` seconds to answer a reservation."""

    def __init__(self, delay: float = 0.05):
        super().__init__()
        self.delay = delay

    async def reserve(self, request):
        self._record("reserve", request)
        await asyncio.sleep(self.delay)
        return ReservationResult.success()


def make_evse(admin_status=EVSEAdminStatusTypes.operational,
              status=EVSEStatusTypes.available,
              remote=None,
              evse_id=EVSE_ID,
              **kwargs) -> EVSE:
    return EVSE(EVSEId.parse(evse_id),
                initial_status=status,
                initial_admin_status=admin_status,
                remote=remote,
                timestamp=T0,
                **kwargs)


def record(entity, event):
    calls = []
    entity.on(event, lambda *vargs: calls.append(vargs))
    return calls
