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

from cachetools import cached
from pydantic import BaseModel, Field

from util.app_configurator import Configurator


class EntityConfig(BaseModel):
    max_status_schedule_size : int = Field(default=50, gt=0)
    max_admin_status_schedule_size : int = Field(default=50, gt=0)
    default_request_timeout : timedelta | None = None
    max_reservation_duration : timedelta = timedelta(minutes=15)


@cached(cache={})
def get_default_entity_config() -> EntityConfig:
    return EntityConfig()


class EntityConfigurator(Configurator[EntityConfig]):

    @classmethod
    def default(cls) -> EntityConfig:
        return get_default_entity_config()


def get_entity_config() -> EntityConfig:
    return EntityConfigurator.current()
