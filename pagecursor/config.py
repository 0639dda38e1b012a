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
from typing import Any, Awaitable, Callable, Generic, TypeVar

from pagecursor.context import FetchContext
from pagecursor.exceptions import CursorConfigurationException

# A cursor sends TIN (the continuation token) to the fetch operation
# and receives TRES (the page payload) back.
TIN = TypeVar("TIN")
TRES = TypeVar("TRES")

REQUIRED_OPERATIONS = ("get_first_input", "fetch_next", "has_next")


def _validate_operations(config: Any) -> None:
    for field_name in REQUIRED_OPERATIONS:
        operation = getattr(config, field_name)
        if operation is None:
            raise CursorConfigurationException(
                text=f"Cursor configuration is missing '{field_name}'.",
                field_name=field_name,
            )
        if not callable(operation):
            raise CursorConfigurationException(
                text=(
                    f"Cursor configuration field '{field_name}' must be callable, "
                    f"got {type(operation).__name__}."
                ),
                field_name=field_name,
            )


@dataclass(frozen=True)
class CursorConfig(Generic[TIN, TRES]):
    """
    The three operations driving a synchronous `Cursor`, plus the "zero values"
    a cursor exposes before anything has been fetched.

    Attributes:
        get_first_input: returns the continuation token for a fresh traversal.
            It must be deterministic and must not fail.
        fetch_next: fetches one page given a continuation token and the
            FetchContext of the current call. Any exception it raises reaches
            the cursor's caller unchanged.
        has_next: inspects a fetched page and returns a pair
            (next continuation token, whether more pages exist). When the
            boolean is False the token is ignored.
        zero_input: the token used by a freshly constructed cursor that has
            not been `reset()` yet. Defaults to None.
        zero_result: the page reported by an exhausted cursor that never
            fetched anything. Defaults to None.
    """

    get_first_input: Callable[[], TIN]
    fetch_next: Callable[[TIN, FetchContext], TRES]
    has_next: Callable[[TRES], tuple[TIN, bool]]
    zero_input: TIN | None = None
    zero_result: TRES | None = None

    def __post_init__(self) -> None:
        _validate_operations(self)


@dataclass(frozen=True)
class AsyncCursorConfig(Generic[TIN, TRES]):
    """
    The three operations driving an `AsyncCursor`. These are the same as for
    `CursorConfig`, except that `fetch_next` is a coroutine function (or any
    callable returning an awaitable).

    Attributes:
        get_first_input: returns the continuation token for a fresh traversal.
        fetch_next: asynchronously fetches one page given a continuation token
            and the FetchContext of the current call.
        has_next: inspects a fetched page and returns a pair
            (next continuation token, whether more pages exist).
        zero_input: the token used by a freshly constructed cursor.
        zero_result: the page reported by an exhausted, never-fetched cursor.
    """

    get_first_input: Callable[[], TIN]
    fetch_next: Callable[[TIN, FetchContext], Awaitable[TRES]]
    has_next: Callable[[TRES], tuple[TIN, bool]]
    zero_input: TIN | None = None
    zero_result: TRES | None = None

    def __post_init__(self) -> None:
        _validate_operations(self)


__all__ = [
    "AsyncCursorConfig",
    "CursorConfig",
]
