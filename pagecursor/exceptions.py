# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pagecursor.settings.defaults import DEFAULT_STOP_MESSAGE


class PageCursorException(Exception):
    """
    Any exception raised by the pagecursor library itself, such as:
      - the stop sentinel signaling that a cursor has no more pages,
      - a cancelled or timed-out fetch context,
      - an incomplete cursor configuration,
    but not, for instance,
      - a network error raised by a caller-supplied fetch operation.
    Errors coming from caller-supplied operations are never wrapped
    and reach the caller exactly as they were raised.
    """

    pass


@dataclass
class CursorStopException(PageCursorException):
    """
    The stop sentinel. It has two meanings, distinguished only by where it
    comes from:
      - raised by a cursor's `get` when the cursor is exhausted ("no more
        pages"). In this case `result` holds the last page fetched by the
        cursor (or the configured zero result if nothing was ever fetched);
      - raised by a driven-iteration callback, to end the iteration early.

    In both cases a driven iteration (`iterate`) terminates quietly.
    Callers should test for this condition with `isinstance` (or `is_stop`),
    never by comparing messages.

    Attributes:
        text: a text message about the exception.
        result: the page payload associated to the stop, if any.
    """

    text: str
    result: Any

    def __init__(
        self,
        text: str = DEFAULT_STOP_MESSAGE,
        *,
        result: Any = None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.result = result


# The stop sentinel instance a callback can raise to end iteration early.
STOP = CursorStopException(DEFAULT_STOP_MESSAGE)


def is_stop(error: BaseException | None) -> bool:
    """Whether the provided exception is the cursor stop sentinel."""
    return isinstance(error, CursorStopException)


@dataclass
class FetchCancelledException(PageCursorException):
    """
    A FetchContext was cancelled before (or while) a page was being fetched.
    Caller-supplied fetch operations raise this through
    `FetchContext.raise_if_cancelled()`; to the cursor it is an ordinary
    fetch error: it propagates unchanged and the cursor does not advance.

    Attributes:
        text: a text message about the exception.
    """

    text: str

    def __init__(self, text: str) -> None:
        super().__init__(text)
        self.text = text


@dataclass
class FetchTimeoutException(FetchCancelledException):
    """
    The deadline of a FetchContext has passed.

    Attributes:
        text: a text message about the exception.
        timeout_ms: the nominal timeout, in milliseconds, that expired.
        label: the name of the timeout setting as known to the user, if any.
    """

    text: str
    timeout_ms: int | None
    label: str | None

    def __init__(
        self,
        text: str,
        *,
        timeout_ms: int | None,
        label: str | None = None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.timeout_ms = timeout_ms
        self.label = label


@dataclass
class CursorConfigurationException(PageCursorException, ValueError):
    """
    A cursor was given an incomplete or invalid configuration, for instance
    one of the three required operations is missing or is not callable.

    Attributes:
        text: a text message about the exception.
        field_name: the name of the offending configuration field.
    """

    text: str
    field_name: str | None

    def __init__(
        self,
        text: str,
        *,
        field_name: str | None = None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.field_name = field_name


__all__ = [
    "CursorConfigurationException",
    "CursorStopException",
    "FetchCancelledException",
    "FetchTimeoutException",
    "PageCursorException",
    "STOP",
    "is_stop",
]
