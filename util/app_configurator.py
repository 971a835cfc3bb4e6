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
from contextlib import contextmanager
from typing import Generic, Iterator
from typing import TypeVar

T = TypeVar("T")

class ConfigNotReadyException(Exception):
    pass


class ConfigRedefinedException(Exception):
    pass


class Configurator(Generic[T]):
    """
    Process-wide configuration holder. Subclass it once per configuration model;
    each subclass keeps its own slot. Subclasses may override ``default`` to
    supply a configuration while none has been set.
    """
    _CONFIG: T | None = None

    @classmethod
    def is_configured(cls) -> bool:
        return cls._CONFIG is not None

    @classmethod
    def default(cls) -> T:
        raise ConfigNotReadyException(f"{cls.__name__} configuration has not been loaded yet.")

    @classmethod
    def get_global_config(cls) -> T:
        if cls._CONFIG is None:
            raise ConfigNotReadyException(f"{cls.__name__} configuration has not been loaded yet.")
        return cls._CONFIG

    @classmethod
    def current(cls) -> T:
        return cls._CONFIG if cls._CONFIG is not None else cls.default()

    @classmethod
    def set_global_config(cls, new_config: T):
        if cls._CONFIG is not None:
            raise ConfigRedefinedException(f"{cls.__name__} can be set only once. "
                                           "Clear it first or use configured() for a temporary override.")

        cls._CONFIG = new_config

    @classmethod
    def clear_global_config(cls):
        cls._CONFIG = None

    @classmethod
    @contextmanager
    def configured(cls, new_config: T) -> Iterator[T]:
        """Install ``new_config`` for the duration of the block."""
        previous, cls._CONFIG = cls._CONFIG, new_config
        try:
            yield new_config
        finally:
            cls._CONFIG = previous
