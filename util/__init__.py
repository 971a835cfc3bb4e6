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


import logging
from datetime import datetime, timezone
from functools import wraps
from logging import getLogger
from uuid import uuid4

from beartype import beartype
from beartype.typing import TypeVar, Generic, Type, Callable, Iterator
from pydantic import BaseModel, ValidationError

from util.types import EventTrackingId


class InvalidArgumentException(ValueError):
    pass


ERT = TypeVar("ERT")


class ResettableIterator(Generic[ERT]):
    """
    Iterator over whatever the factory produces. Every new ``iter()`` restarts
    it from a fresh factory call, so the same object can be walked repeatedly.
    """

    @beartype
    def __init__(self, factory: Callable[[], Iterator[ERT]]) -> None:
        super().__init__()
        self._factory = factory
        self._current : Iterator[ERT] | None = None

    def __iter__(self) -> Iterator[ERT]:
        self.reset()
        return self

    def __next__(self) -> ERT:
        if self._current is None:
            self.reset()
        return next(self._current)

    def reset(self) -> None:
        self._current = self._factory()


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def new_event_tracking_id() -> EventTrackingId:
    return EventTrackingId(str(uuid4()))


def setup_logging(name):
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    l2 = getLogger(name)
    assert l2 is not None
    logger: logging.Logger = l2
    logger.setLevel(logging.DEBUG)
    lr: logging.Handler | None = logging.lastResort
    assert lr is not None
    lr.setFormatter(formatter)
    lr.setLevel(logging.DEBUG)
    return logger


def log_async_call(log_sink):

    def log_call_inner(f):

        @wraps(f)
        async def wrapped_function(*vargs, **kwargs):
            log_sink(f"Called {f.__name__} with {vargs} {kwargs}")
            result = await f(*vargs, **kwargs)
            log_sink(f"Returned from {f.__name__} with {result=}")
            return result

        return wrapped_function

    return log_call_inner


def with_request_model(model_class: Type[BaseModel]):
    """
    Validates the keyword arguments of an async method into ``model_class`` and
    calls the method with the model instead. Validation failures surface as
    :class:`InvalidArgumentException` before the method body runs.
    """
    def get_wrapper(f):
        @wraps(f)
        async def wrapper(self, **kwargs):
            try:
                model = model_class.model_validate(kwargs)
            except ValidationError as e:
                raise InvalidArgumentException(f"Invalid arguments for {f.__name__}: {e}") from e
            return await f(self, model)

        return wrapper

    return get_wrapper
