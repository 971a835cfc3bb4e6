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


from enum import StrEnum


class EVSEStatusTypes(StrEnum):
    unspecified = "Unspecified"
    unknown = "Unknown"
    available = "Available"
    blocked = "Blocked"
    charging = "Charging"
    door_not_closed = "DoorNotClosed"
    error = "Error"
    faulted = "Faulted"
    in_deployment = "InDeployment"
    offline = "Offline"
    occupied = "Occupied"
    out_of_order = "OutOfOrder"
    out_of_service = "OutOfService"
    plugged_in = "PluggedIn"
    removed = "Removed"
    reserved = "Reserved"
    waiting_for_plugin = "WaitingForPlugin"


class EVSEAdminStatusTypes(StrEnum):
    unspecified = "Unspecified"
    unknown = "Unknown"
    planned = "Planned"
    in_deployment = "InDeployment"
    operational = "Operational"
    internal_use = "InternalUse"
    out_of_service = "OutOfService"
    blocked = "Blocked"
    deleted = "Deleted"


class ChargingStationStatusTypes(StrEnum):
    unspecified = "Unspecified"
    unknown = "Unknown"
    available = "Available"
    partial_available = "PartialAvailable"
    charging = "Charging"
    reserved = "Reserved"
    faulted = "Faulted"
    offline = "Offline"
    out_of_service = "OutOfService"


class ChargingStationAdminStatusTypes(StrEnum):
    unspecified = "Unspecified"
    unknown = "Unknown"
    planned = "Planned"
    in_deployment = "InDeployment"
    operational = "Operational"
    internal_use = "InternalUse"
    out_of_service = "OutOfService"
    deleted = "Deleted"


class ChargingPoolStatusTypes(StrEnum):
    unspecified = "Unspecified"
    unknown = "Unknown"
    available = "Available"
    partial_available = "PartialAvailable"
    charging = "Charging"
    faulted = "Faulted"
    offline = "Offline"
    out_of_service = "OutOfService"


class ChargingPoolAdminStatusTypes(StrEnum):
    unspecified = "Unspecified"
    unknown = "Unknown"
    planned = "Planned"
    in_deployment = "InDeployment"
    operational = "Operational"
    internal_use = "InternalUse"
    out_of_service = "OutOfService"
    deleted = "Deleted"
