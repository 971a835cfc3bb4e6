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


import re
from dataclasses import dataclass, field
from functools import total_ordering
from uuid import uuid4

from util import InvalidArgumentException

# Operator ids come as "DE*GEF" (ISO with star) or "DEGEF" (ISO without separator).
OPERATOR_ID_RE = re.compile(r"^([A-Za-z]{2})(\*?)([A-Za-z0-9]{3})$")

def _child_id_re(marker: str):
    return re.compile(r"^([A-Za-z]{2}\*?[A-Za-z0-9]{3})\*?" + marker + r"([A-Za-z0-9][A-Za-z0-9\*]{0,30})$")

POOL_ID_RE = _child_id_re("P")
STATION_ID_RE = _child_id_re("S")
EVSE_ID_RE = _child_id_re("E")


@total_ordering
@dataclass(frozen=True)
class OperatorId:
    country_code: str
    suffix: str
    with_star: bool = field(default=True, compare=False)

    @classmethod
    def parse(cls, text: str) -> "OperatorId":
        result = cls.try_parse(text)
        if result is None:
            raise InvalidArgumentException(f"Invalid charging station operator id: '{text}'")
        return result

    @classmethod
    def try_parse(cls, text: str) -> "OperatorId | None":
        match = OPERATOR_ID_RE.match(text.strip())
        if match is None:
            return None
        return cls(country_code=match.group(1).upper(),
                   suffix=match.group(3).upper(),
                   with_star=match.group(2) == "*")

    def __str__(self):
        return f"{self.country_code}{'*' if self.with_star else ''}{self.suffix}"

    def __lt__(self, other):
        if not isinstance(other, OperatorId):
            return NotImplemented
        return str(self) < str(other)


@total_ordering
@dataclass(frozen=True)
class _OperatorScopedId:
    """
    Common shape of pool, station and EVSE ids: an operator id, a one-letter
    marker and a free suffix, e.g. ``DE*GEF*E1234*1``.
    """
    operator_id: OperatorId
    suffix: str

    MARKER = ""
    PATTERN = re.compile("$^")

    @classmethod
    def parse(cls, text: str):
        result = cls.try_parse(text)
        if result is None:
            raise InvalidArgumentException(f"Invalid {cls.__name__}: '{text}'")
        return result

    @classmethod
    def try_parse(cls, text: str):
        match = cls.PATTERN.match(text.strip())
        if match is None:
            return None
        operator_id = OperatorId.try_parse(match.group(1))
        if operator_id is None:
            return None
        return cls(operator_id=operator_id, suffix=match.group(2).upper())

    @classmethod
    def new_random(cls, operator_id: OperatorId, length: int = 12):
        return cls(operator_id=operator_id, suffix=uuid4().hex[:length].upper())

    def __str__(self):
        separator = "*" if self.operator_id.with_star else ""
        return f"{self.operator_id}{separator}{self.MARKER}{self.suffix}"

    def __lt__(self, other):
        if not isinstance(other, _OperatorScopedId):
            return NotImplemented
        return str(self) < str(other)


@dataclass(frozen=True)
class ChargingPoolId(_OperatorScopedId):
    MARKER = "P"
    PATTERN = POOL_ID_RE


@dataclass(frozen=True)
class ChargingStationId(_OperatorScopedId):
    MARKER = "S"
    PATTERN = STATION_ID_RE

    @classmethod
    def from_pool(cls, pool_id: ChargingPoolId, suffix: str) -> "ChargingStationId":
        return cls(operator_id=pool_id.operator_id, suffix=f"{pool_id.suffix}*{suffix}".upper())


@dataclass(frozen=True)
class EVSEId(_OperatorScopedId):
    MARKER = "E"
    PATTERN = EVSE_ID_RE

    @classmethod
    def from_station(cls, station_id: ChargingStationId, suffix: str) -> "EVSEId":
        return cls(operator_id=station_id.operator_id, suffix=f"{station_id.suffix}*{suffix}".upper())


EntityId = OperatorId | ChargingPoolId | ChargingStationId | EVSEId
