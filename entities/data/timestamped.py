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


from datetime import datetime, timezone
from functools import total_ordering
from typing import Generic, TypeVar

import dateutil.parser
from pydantic import BaseModel, ConfigDict

from util import utc_now

T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@total_ordering
class Timestamped(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True)

    timestamp : datetime
    value : T

    @classmethod
    def now(cls, value: T) -> "Timestamped[T]":
        return cls(timestamp=utc_now(), value=value)

    def __lt__(self, other):
        if not isinstance(other, Timestamped):
            return NotImplemented
        if self.timestamp != other.timestamp:
            return self.timestamp < other.timestamp
        return self.value < other.value

    def to_json(self) -> list[str]:
        return [self.timestamp.isoformat(), str(self.value)]

    @classmethod
    def from_json(cls, data: list[str], value_type: type) -> "Timestamped":
        timestamp, value = data
        return cls(timestamp=dateutil.parser.isoparse(timestamp), value=value_type(value))

    def __str__(self):
        return f"{self.value} since {self.timestamp.isoformat()}"
