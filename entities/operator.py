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

from entities.ids import OperatorId
from entities.remote_interface import RemoteChargingInterface
from entities.status_entity import RemoteAttachment


class ChargingStationOperator(RemoteAttachment):
    """Root of the entity tree. Carries the execution path of last resort."""

    @beartype
    def __init__(self, id: OperatorId, name: str | None = None, remote: RemoteChargingInterface | None = None):
        super().__init__(remote)
        self.id = id
        self.name = name
        self.parent_id = None
        self.registry = None

    def resolve_remote(self) -> RemoteChargingInterface | None:
        return self.remote

    @property
    def pools(self) -> list:
        if self.registry is None:
            return []
        return self.registry.children_of(self.id)

    def __repr__(self):
        return f"ChargingStationOperator({self.id}, name={self.name!r})"
