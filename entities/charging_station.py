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


from beartype import beartype

from entities.data.status_types import ChargingStationStatusTypes, ChargingStationAdminStatusTypes
from entities.ids import ChargingStationId, ChargingPoolId
from entities.remote_interface import RemoteChargingInterface
from entities.status_entity import StatusEntity, DataChange
from util.types import EventTrackingId


class ChargingStation(StatusEntity):
    STATUS_TYPES = ChargingStationStatusTypes
    ADMIN_STATUS_TYPES = ChargingStationAdminStatusTypes
    DEFAULT_STATUS = ChargingStationStatusTypes.available
    DEFAULT_ADMIN_STATUS = ChargingStationAdminStatusTypes.operational

    @beartype
    def __init__(self,
                 id: ChargingStationId,
                 pool_id: ChargingPoolId | None = None,
                 initial_status: ChargingStationStatusTypes | None = None,
                 initial_admin_status: ChargingStationAdminStatusTypes | None = None,
                 name: str | None = None,
                 description: str | None = None,
                 remote: RemoteChargingInterface | None = None,
                 **kwargs) -> None:
        super().__init__(id,
                         parent_id=pool_id,
                         initial_status=initial_status,
                         initial_admin_status=initial_admin_status,
                         remote=remote,
                         **kwargs)
        self._name = name
        self._description = description

    @property
    def pool_id(self) -> ChargingPoolId | None:
        return self.parent_id

    @property
    def name(self) -> str | None:
        return self._name

    def set_name(self, value: str | None, event_tracking_id: EventTrackingId | None = None) -> DataChange:
        return self._set_data("name", value, event_tracking_id)

    @property
    def description(self) -> str | None:
        return self._description

    def set_description(self, value: str | None, event_tracking_id: EventTrackingId | None = None) -> DataChange:
        return self._set_data("description", value, event_tracking_id)

    def _copy_data_from(self, other, event_tracking_id):
        return [self.set_name(other.name, event_tracking_id),
                self.set_description(other.description, event_tracking_id)]

    @property
    def evses(self) -> list:
        if self.registry is None:
            return []
        return self.registry.children_of(self.id)
