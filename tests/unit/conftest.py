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

"""
Main conftest for shared fixtures.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterable, List

import pytest

from pagecursor import AsyncCursor, Cursor, FetchContext

Record = int
Page = List[Record]


class RecordSource:
    """
    An in-memory paginated data source: records are integers 1..N and
    a page holds the records after the "last seen" one, up to `limit`.
    Fetches are counted and can be made to fail on demand.
    """

    def __init__(self, records_count: int, limit: int = 2) -> None:
        self.records = list(range(1, records_count + 1))
        self.limit = limit
        self.requested_inputs: list[int] = []
        self.contexts: list[FetchContext] = []
        self.failure: Exception | None = None

    def fetch(self, last_seen: int, context: FetchContext) -> Page:
        self.requested_inputs.append(last_seen)
        self.contexts.append(context)
        context.raise_if_cancelled()
        if self.failure is not None:
            raise self.failure
        return [record for record in self.records if record > last_seen][
            : self.limit
        ]

    async def async_fetch(self, last_seen: int, context: FetchContext) -> Page:
        await asyncio.sleep(0)
        return self.fetch(last_seen, context)


def last_seen_has_next(page: Page) -> tuple[int, bool]:
    if len(page) > 0:
        # the last record id is the next continuation token
        return page[-1], True
    return 0, False


def flatten(pages: Iterable[Page]) -> list[Record]:
    return [record for page in pages for record in page]


@pytest.fixture
def record_source() -> Callable[..., RecordSource]:
    return RecordSource


@pytest.fixture
def make_cursor() -> Callable[[RecordSource], Cursor[int, Page]]:
    def _make_cursor(source: RecordSource) -> Cursor[int, Page]:
        return Cursor(
            get_first_input=lambda: 0,
            fetch_next=source.fetch,
            has_next=last_seen_has_next,
            zero_input=0,
            zero_result=[],
        )

    return _make_cursor


@pytest.fixture
def make_async_cursor() -> Callable[[RecordSource], AsyncCursor[int, Page]]:
    def _make_async_cursor(source: RecordSource) -> AsyncCursor[int, Page]:
        return AsyncCursor(
            get_first_input=lambda: 0,
            fetch_next=source.async_fetch,
            has_next=last_seen_has_next,
            zero_input=0,
            zero_result=[],
        )

    return _make_async_cursor


@pytest.fixture
def flatten_pages() -> Callable[[Iterable[Page]], list[Record]]:
    return flatten


class CallRecorder:
    """A driven-iteration callback that records pages and acts on the K-th call."""

    def __init__(
        self,
        act_on_call: int | None = None,
        action: Callable[[], Any] | None = None,
    ) -> None:
        self.pages: list[Page] = []
        self.act_on_call = act_on_call
        self.action = action

    def __call__(self, page: Page) -> Any:
        self.pages.append(page)
        if self.act_on_call is not None and len(self.pages) == self.act_on_call:
            if self.action is not None:
                return self.action()
        return None


@pytest.fixture
def call_recorder() -> Callable[..., CallRecorder]:
    return CallRecorder
