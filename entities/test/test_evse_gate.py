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

import pytest

from entities.config import EntityConfig, EntityConfigurator
from entities.data.reservation import ReservationCancellationReason, ChargeDetailRecord, ReservationHandling
from entities.data.results import ReservationResultType, CancelReservationResultType, RemoteStartResultType, \
    RemoteStopResultType
from entities.data.status_types import EVSEStatusTypes, EVSEAdminStatusTypes
from entities.data.timestamped import Timestamped
from entities.events import EntityEvent
from entities.ids import EVSEId
from entities.test import SpyRemote, SlowSpyRemote, make_evse, record, T0, at
from util import InvalidArgumentException, utc_now

S = EVSEStatusTypes
A = EVSEAdminStatusTypes


def test_closed_gate_forces_out_of_service():
    evse = make_evse(admin_status=A.out_of_service, status=S.available)

    assert evse.status == Timestamped(timestamp=T0, value=S.out_of_service), f"{evse.status=}"
    assert evse.statuses.current_value == S.available, "underlying status is kept"


def test_open_gate_passes_status_through():
    evse = make_evse(admin_status=A.out_of_service, status=S.available)
    evse.set_admin_status(A.operational, at(5))

    assert evse.status == Timestamped(timestamp=T0, value=S.available), "status keeps its own timestamp"


def test_effective_status_for_every_admin_status():
    evse = make_evse(status=S.charging)
    for minute, admin_status in enumerate(A, start=1):
        evse.set_admin_status(admin_status, at(minute))
        if admin_status in (A.operational, A.internal_use):
            assert evse.status == Timestamped(timestamp=T0, value=S.charging), f"{admin_status}"
        else:
            assert evse.status == Timestamped(timestamp=at(minute), value=S.out_of_service), f"{admin_status}"


def test_closed_gate_collapses_status_schedule():
    evse = make_evse(admin_status=A.blocked, status=S.available)
    evse.set_status(S.charging, at(1))

    assert list(evse.status_schedule()) == [Timestamped(timestamp=T0, value=S.out_of_service)]
    assert list(evse.status_schedule(0)) == []

    evse.set_admin_status(A.internal_use, at(2))
    assert [s.value for s in evse.status_schedule()] == [S.charging, S.available]
    assert [s.value for s in evse.admin_status_schedule(1)] == [A.internal_use]


def test_status_and_admin_status_events():
    evse = make_evse(admin_status=A.out_of_service)
    status_changes = record(evse, EntityEvent.on_status_changed)
    admin_changes = record(evse, EntityEvent.on_admin_status_changed)

    evse.set_admin_status(A.operational, at(1), event_tracking_id="evt-7")
    evse.set_status(S.charging, at(2))
    evse.set_status(S.charging, at(3))

    assert len(admin_changes) == 1
    timestamp, event_tracking_id, source, old_status, new_status = admin_changes[0]
    assert event_tracking_id == "evt-7" and source is evse
    assert (old_status.value, new_status.value) == (A.out_of_service, A.operational)
    assert len(status_changes) == 1


def test_status_of_wrong_type_is_rejected():
    evse = make_evse()
    with pytest.raises(InvalidArgumentException):
        evse.set_status(A.operational)
    with pytest.raises(InvalidArgumentException):
        evse.set_admin_status(S.available)


def test_closed_gate_never_reaches_remote():
    remote = SpyRemote()
    evse = make_evse(admin_status=A.out_of_service, remote=remote)

    reserved = asyncio.run(evse.reserve())
    started = asyncio.run(evse.remote_start())
    stopped = asyncio.run(evse.remote_stop(session_id="session-1"))

    assert reserved.result == ReservationResultType.out_of_service
    assert started.result == RemoteStartResultType.out_of_service
    assert stopped.result == RemoteStopResultType.out_of_service
    assert remote.calls == [], f"{remote.calls=}"


def test_cancel_without_reservation_succeeds_untouched():
    remote = SpyRemote()
    evse = make_evse(admin_status=A.out_of_service, remote=remote)
    before = (list(evse.statuses), list(evse.admin_statuses))

    result = asyncio.run(evse.cancel_reservation(reservation_id="r-1"))

    assert result.result == CancelReservationResultType.success
    assert result.reservation_id == "r-1"
    assert (list(evse.statuses), list(evse.admin_statuses)) == before
    assert remote.calls == []


def test_reserve_without_remote_is_offline_and_notified():
    evse = make_evse()
    requests = record(evse, EntityEvent.on_reserve_request)
    responses = record(evse, EntityEvent.on_reserve_response)

    result = asyncio.run(evse.reserve(event_tracking_id="evt-42"))

    assert result.result == ReservationResultType.offline
    assert result.runtime is not None and result.runtime >= timedelta(0)
    assert len(requests) == 1 and len(responses) == 1
    request = requests[0][2]
    response_request, response_result = responses[0][2], responses[0][3]
    assert request.event_tracking_id == response_request.event_tracking_id == "evt-42"
    assert response_result == result
    assert requests[0][0] <= responses[0][0], "request precedes response"


def test_request_defaults_are_filled_in():
    evse = make_evse()
    requests = record(evse, EntityEvent.on_remote_start_request)

    asyncio.run(evse.remote_start(timestamp=None, event_tracking_id=None))

    request = requests[0][2]
    assert request.timestamp is not None
    assert request.event_tracking_id
    assert request.evse_id == evse.id


def test_invalid_arguments_fail_before_notification():
    evse = make_evse(remote=SpyRemote())
    requests = record(evse, EntityEvent.on_cancel_reservation_request)

    with pytest.raises(InvalidArgumentException):
        asyncio.run(evse.cancel_reservation(reservation_id=""))
    with pytest.raises(InvalidArgumentException):
        asyncio.run(evse.cancel_reservation())
    with pytest.raises(InvalidArgumentException):
        asyncio.run(evse.remote_stop(session_id="  "))
    with pytest.raises(InvalidArgumentException):
        asyncio.run(evse.reserve(duration=timedelta(minutes=-5)))

    assert requests == []


def test_reserve_for_other_evse_is_unknown_location():
    remote = SpyRemote()
    evse = make_evse(remote=remote)

    result = asyncio.run(evse.reserve(evse_id=EVSEId.parse("DE*822*E1111*2")))
    started = asyncio.run(evse.remote_start(evse_id=EVSEId.parse("DE*822*E1111*2")))

    assert result.result == ReservationResultType.unknown_location
    assert started.result == RemoteStartResultType.unknown_location
    assert remote.calls == []


def test_reserve_and_cancel_through_remote():
    remote = SpyRemote()
    evse = make_evse(remote=remote)
    new_reservations = record(evse, EntityEvent.on_new_reservation)
    canceled = record(evse, EntityEvent.on_reservation_canceled)

    result = asyncio.run(evse.reserve(reservation_id="r-1", provider_id="DE-GDF", duration=timedelta(hours=2)))

    assert result.result == ReservationResultType.success
    assert result.reservation.id == "r-1"
    assert result.reservation.evse_id == evse.id
    assert result.reservation.duration == evse.max_reservation_duration, "duration is capped"
    assert evse.reservation == result.reservation
    assert new_reservations[0][2] == result.reservation
    assert remote.calls[0][1].evse_id == evse.id

    other = asyncio.run(evse.reserve(reservation_id="r-2"))
    assert other.result == ReservationResultType.already_reserved
    assert other.reservation.id == "r-1"

    unknown = asyncio.run(evse.cancel_reservation(reservation_id="r-2"))
    assert unknown.result == CancelReservationResultType.unknown_reservation_id

    cancel = asyncio.run(evse.cancel_reservation(reservation_id="r-1", reason=ReservationCancellationReason.aborted))
    assert cancel.result == CancelReservationResultType.success
    assert cancel.canceled_reservation.id == "r-1"
    assert evse.reservation is None
    assert canceled[0][3] == ReservationCancellationReason.aborted
    assert [name for name, _ in remote.calls] == ["reserve", "cancel_reservation"]


def test_same_reservation_id_can_reserve_again():
    evse = make_evse(remote=SpyRemote())
    asyncio.run(evse.reserve(reservation_id="r-1"))

    again = asyncio.run(evse.reserve(reservation_id="r-1"))

    assert again.result == ReservationResultType.success


def test_remote_start_respects_reservation():
    remote = SpyRemote()
    evse = make_evse(remote=remote)
    asyncio.run(evse.reserve(reservation_id="r-1"))

    blocked = asyncio.run(evse.remote_start(auth_token="token-a"))
    assert blocked.result == RemoteStartResultType.reserved

    started = asyncio.run(evse.remote_start(reservation_id="r-1", session_id="s-1"))
    assert started.result == RemoteStartResultType.success
    assert started.session.id == "s-1"
    assert started.session.reservation_id == "r-1"
    assert evse.charging_session == started.session

    again = asyncio.run(evse.remote_start(reservation_id="r-1"))
    assert again.result == RemoteStartResultType.already_in_use
    busy = asyncio.run(evse.reserve(reservation_id="r-1"))
    assert busy.result == ReservationResultType.already_in_use


def test_remote_stop_ends_session_and_reports_cdr():
    remote = SpyRemote()
    evse = make_evse(remote=remote)
    cdrs = record(evse, EntityEvent.on_new_charge_detail_record)
    asyncio.run(evse.reserve(reservation_id="r-1"))
    asyncio.run(evse.remote_start(reservation_id="r-1", session_id="s-1"))

    other = asyncio.run(evse.remote_stop(session_id="s-2"))
    assert other.result == RemoteStopResultType.success
    assert evse.charging_session.id == "s-1", "only the matching local session is ended"
    assert evse.is_reserved

    stopped = asyncio.run(evse.remote_stop(session_id="s-1"))
    assert stopped.result == RemoteStopResultType.success
    assert stopped.charge_detail_record.session_id == "s-1"
    assert evse.charging_session is None
    assert evse.reservation is None, "closing the session closes its reservation"
    assert cdrs[0][2].session_id == "s-2"
    assert cdrs[1][2] == stopped.charge_detail_record


def test_remote_stop_can_keep_reservation_alive():
    evse = make_evse(remote=SpyRemote())
    asyncio.run(evse.reserve(reservation_id="r-1"))
    asyncio.run(evse.remote_start(reservation_id="r-1", session_id="s-1"))

    asyncio.run(evse.remote_stop(session_id="s-1", reservation_handling=ReservationHandling.keep_alive))

    assert evse.charging_session is None
    assert evse.reservation.id == "r-1"


def test_charge_detail_record_ends_session():
    evse = make_evse(remote=SpyRemote())
    cdrs = record(evse, EntityEvent.on_new_charge_detail_record)
    asyncio.run(evse.remote_start(session_id="s-1"))

    assert not evse.receive_charge_detail_record(ChargeDetailRecord(session_id="s-9"))
    assert evse.is_charging

    assert evse.receive_charge_detail_record(ChargeDetailRecord(session_id="s-1", energy_kwh=3.2))
    assert not evse.is_charging
    assert cdrs[0][2].energy_kwh == 3.2


def test_expired_reservation_does_not_block():
    evse = make_evse(remote=SpyRemote())
    canceled = record(evse, EntityEvent.on_reservation_canceled)
    asyncio.run(evse.reserve(reservation_id="r-1",
                             start_time=utc_now() - timedelta(hours=1),
                             duration=timedelta(minutes=1)))
    assert evse.is_reserved

    started = asyncio.run(evse.remote_start())

    assert started.result == RemoteStartResultType.success
    assert not evse.is_reserved
    assert canceled[0][3] == ReservationCancellationReason.expired


def test_remote_failure_becomes_error_result():
    evse = make_evse(remote=SpyRemote(fail=ConnectionError("backend unreachable")))

    result = asyncio.run(evse.reserve())
    stopped = asyncio.run(evse.remote_stop(session_id="s-1"))

    assert result.result == ReservationResultType.error
    assert "backend unreachable" in result.description
    assert stopped.result == RemoteStopResultType.error
    assert "backend unreachable" in stopped.description
    assert evse.reservation is None


def test_failing_handler_does_not_abort_operation():
    evse = make_evse(remote=SpyRemote())

    def broken(*vargs):
        raise RuntimeError("handler failed")

    evse.on(EntityEvent.on_reserve_request, broken)
    evse.on(EntityEvent.on_new_reservation, broken)
    responses = record(evse, EntityEvent.on_reserve_response)

    result = asyncio.run(evse.reserve())

    assert result.result == ReservationResultType.success
    assert len(responses) == 1


def test_detached_remote_goes_offline():
    remote = SpyRemote()
    evse = make_evse(remote=remote)
    assert evse.remote_attached

    evse.detach_remote()
    result = asyncio.run(evse.remote_start())
    assert not evse.remote_attached
    assert result.result == RemoteStartResultType.offline

    evse.attach_remote(remote)
    result = asyncio.run(evse.remote_start())
    assert result.result == RemoteStartResultType.success


def test_result_json_uses_camel_case():
    evse = make_evse(remote=SpyRemote())
    asyncio.run(evse.remote_start(session_id="s-1"))

    data = asyncio.run(evse.remote_stop(session_id="s-1")).to_json()

    assert data["result"] == "Success"
    assert data["sessionId"] == "s-1"
    assert data["chargeDetailRecord"]["energyKwh"] == 12.5
    assert data["chargeDetailRecord"]["evseId"] == "DE*822*E1111*1"


def test_timeout_and_cancellation_are_forwarded_to_remote():
    remote = SpyRemote()
    evse = make_evse(remote=remote)

    async def main():
        cancellation = asyncio.Event()
        await evse.reserve(reservation_id="r-1", request_timeout=timedelta(seconds=5))
        with EntityConfigurator.configured(EntityConfig(default_request_timeout=timedelta(seconds=30))):
            await evse.remote_start(reservation_id="r-1", cancellation=cancellation)
        return cancellation

    cancellation = asyncio.run(main())

    reserve_request, start_request = remote.calls[0][1], remote.calls[1][1]
    assert start_request.request_timeout == timedelta(seconds=30)
    assert start_request.cancellation is cancellation and not start_request.is_cancelled
    assert reserve_request.request_timeout == timedelta(seconds=5)


def test_remote_stop_without_local_session_is_delegated():
    assert asyncio.run(make_evse().remote_stop(session_id="s-ext")).result == RemoteStopResultType.offline

    remote = SpyRemote()
    evse = make_evse(remote=remote)
    cdrs = record(evse, EntityEvent.on_new_charge_detail_record)

    stopped = asyncio.run(evse.remote_stop(session_id="s-ext"))

    assert stopped.result == RemoteStopResultType.success
    assert [name for name, _ in remote.calls] == ["remote_stop"]
    assert remote.calls[0][1].session_id == "s-ext"
    assert evse.charging_session is None
    assert cdrs[0][2].session_id == "s-ext"


def test_concurrent_reservations_are_serialized():
    remote = SlowSpyRemote()
    evse = make_evse(remote=remote)

    async def main():
        return await asyncio.gather(evse.reserve(reservation_id="r-1"),
                                    evse.reserve(reservation_id="r-2"))

    first, second = asyncio.run(main())

    assert first.result == ReservationResultType.success
    assert second.result == ReservationResultType.already_reserved
    assert second.reservation.id == "r-1"
    assert len(remote.calls) == 1
    assert evse.reservation.id == "r-1"


def test_operations_work_across_event_loops():
    remote = SlowSpyRemote(delay=0.01)
    evse = make_evse(remote=remote)

    async def contend(*reservation_ids):
        return await asyncio.gather(*(evse.reserve(reservation_id=id) for id in reservation_ids))

    first = asyncio.run(contend("r-1", "r-2"))
    asyncio.run(evse.cancel_reservation(reservation_id="r-1"))
    second = asyncio.run(contend("r-3", "r-4"))

    assert [r.result for r in first] == [ReservationResultType.success, ReservationResultType.already_reserved]
    assert [r.result for r in second] == [ReservationResultType.success, ReservationResultType.already_reserved]
    assert evse.reservation.id == "r-3"


def test_non_positive_schedule_size_is_rejected():
    with pytest.raises(InvalidArgumentException):
        make_evse(max_status_schedule_size=0)
    with pytest.raises(InvalidArgumentException):
        make_evse(max_admin_status_schedule_size=0)
