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

import logging
from abc import ABC
from enum import Enum
from inspect import iscoroutinefunction
from typing import Any, Awaitable, Callable, Generic, cast

from pagecursor.config import TIN, TRES, AsyncCursorConfig, CursorConfig
from pagecursor.context import FetchContext
from pagecursor.exceptions import CursorConfigurationException, CursorStopException
from pagecursor.utils.logging import describe_value, log_trace

logger = logging.getLogger(__name__)


class CursorState(Enum):
    """
    This enum expresses the possible states for a cursor. The state is
    derived from the cursor fields and is only a convenience view.

    Values:
        IDLE: no page fetched yet since construction/reset (has_next=T)
        STARTED: at least one page fetched, more pages available (has_next=T)
        EXHAUSTED: the last page said there is nothing more (has_next=F)
    """

    # no page fetched yet since construction/reset (has_next=T)
    IDLE = "idle"
    # at least one page fetched, more pages available (has_next=T)
    STARTED = "started"
    # the last page said there is nothing more (has_next=F)
    EXHAUSTED = "exhausted"


class AbstractCursor(ABC, Generic[TIN, TRES]):
    """
    The state machine common to `Cursor` and `AsyncCursor`.

    A cursor holds the continuation token for the next fetch, the last
    page fetched and a "more available" flag. It starts optimistic (there is
    always a first page to try) and advances one page at a time: fetch with
    the current token, then let the caller-supplied `has_next` inspect the page
    to produce the next token and the updated flag. The page that reports
    the end of the data is still handed to the caller: exhaustion is only
    observed on the step after it.

    This class is not meant to be directly instantiated by the user. The
    fetch step itself (the only part that may block or suspend) is left to
    the concrete subclasses, which wrap it between `_ensure_has_more` and
    `_advance`.

    Cursors are not safe for concurrent use: one consumer should drive
    a cursor at a time.
    """

    _current_input: TIN | None
    _last_result: TRES | None
    _has_more: bool
    _pages_retrieved: int
    _get_first_input: Callable[[], TIN]
    _has_next: Callable[[TRES], tuple[TIN, bool]]

    def __init__(
        self,
        *,
        get_first_input: Callable[[], TIN],
        has_next: Callable[[TRES], tuple[TIN, bool]],
        zero_input: TIN | None,
        zero_result: TRES | None,
    ) -> None:
        self._get_first_input = get_first_input
        self._has_next = has_next
        self._current_input = zero_input
        self._last_result = zero_result
        self._has_more = True
        self._pages_retrieved = 0

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({self.state.value}, "
            f"pages retrieved: {self.pages_retrieved})"
        )

    @property
    def state(self) -> CursorState:
        """
        The current state of this cursor.

        Returns:
            a value in `pagecursor.cursors.CursorState`.
        """

        if not self._has_more:
            return CursorState.EXHAUSTED
        if self._pages_retrieved == 0:
            return CursorState.IDLE
        return CursorState.STARTED

    @property
    def current_input(self) -> TIN | None:
        """The continuation token that the next fetch will use."""
        return self._current_input

    @property
    def last_result(self) -> TRES | None:
        """
        The last page fetched successfully. A failed fetch does not change it,
        and neither does `reset()`. Before any fetch this is the zero result.
        """
        return self._last_result

    @property
    def pages_retrieved(self) -> int:
        """The number of pages fetched successfully since construction/reset."""
        return self._pages_retrieved

    @property
    def cursor_id(self) -> int:
        """
        An integer uniquely identifying this cursor.

        Returns:
            cursor_id: an integer number uniquely identifying the cursor.
        """

        return id(self)

    def has_next(self) -> bool:
        """
        Whether the cursor may still return pages.

        This never triggers a fetch: it is True after construction and after
        each `reset()`, then it reflects the outcome of the last `has_next`
        inspection. Once False, it stays False until the next `reset()`.

        Returns:
            a boolean, True if a further `get` would attempt a fetch.
        """

        return self._has_more

    def reset(self) -> None:
        """
        Bring the cursor back to the start of the traversal, regardless of its
        current state: the continuation token is recomputed through
        `get_first_input` and the cursor becomes available again.

        No fetch is performed, and the last fetched page is retained until the
        next successful fetch replaces it.

        This is an in-place modification of the cursor.
        """

        self._current_input = self._get_first_input()
        self._has_more = True
        self._pages_retrieved = 0
        logger.debug(f"{self.__class__.__name__} {self.cursor_id} reset")

    def _ensure_has_more(self) -> None:
        if not self._has_more:
            logger.debug(
                f"{self.__class__.__name__} {self.cursor_id} is exhausted, stopping"
            )
            raise CursorStopException(result=self._last_result)

    def _advance(self, result: TRES) -> TRES:
        """Record a successfully fetched page and move to the next token."""
        self._last_result = result
        self._pages_retrieved += 1
        next_input, more = self._has_next(result)
        self._current_input = next_input
        self._has_more = more
        log_trace(
            logger,
            f"cursor advanced: next input {describe_value(next_input)}, "
            f"more pages: {more}",
        )
        return result

    @staticmethod
    def _release_stop(stop: CursorStopException) -> None:
        # the sentinel may be a shared instance (STOP): drop the frames it holds
        stop.__traceback__ = None
        stop.__context__ = None

    @staticmethod
    def _resolve_context(context: FetchContext | None) -> FetchContext:
        return context if context is not None else FetchContext()


def _resolve_config(
    config: Any,
    config_class: type,
    **operations: Any,
) -> Any:
    if config is not None:
        if any(value is not None for value in operations.values()):
            raise CursorConfigurationException(
                text="Cursor operations must be passed either as a config or as "
                "keyword arguments, not both."
            )
        if not isinstance(config, config_class):
            raise CursorConfigurationException(
                text=f"Expected a {config_class.__name__}, "
                f"got {type(config).__name__}."
            )
        return config
    return config_class(**operations)


class Cursor(AbstractCursor[TIN, TRES]):
    """
    A synchronous cursor over a paginated data source, driven by three
    caller-supplied operations (see `CursorConfig`).

    A cursor can be consumed manually (`has_next` then `get`), through a
    callback (`iterate`), as a Python iterator over pages, or materialized
    with `to_list`. All of these share the same single-step advancement, so
    they produce the same sequence of pages.

    Args:
        config: a `CursorConfig` with the operations. Alternatively, pass the
            operations as keyword arguments.
        get_first_input: see `CursorConfig`.
        fetch_next: see `CursorConfig`.
        has_next: see `CursorConfig`.
        zero_input: see `CursorConfig`.
        zero_result: see `CursorConfig`.

    Example:
        >>> cursor = Cursor(
        ...     get_first_input=lambda: 0,
        ...     fetch_next=lambda offset, ctx: source[offset : offset + 2],
        ...     has_next=lambda page: (page[-1], True) if page else (0, False),
        ...     zero_input=0,
        ... )
        >>> while cursor.has_next():
        ...     print(cursor.get())
        ...
        [1, 2]
        [3, 4]
        [5]
        []
    """

    _fetch_next: Callable[[TIN, FetchContext], TRES]

    def __init__(
        self,
        config: CursorConfig[TIN, TRES] | None = None,
        *,
        get_first_input: Callable[[], TIN] | None = None,
        fetch_next: Callable[[TIN, FetchContext], TRES] | None = None,
        has_next: Callable[[TRES], tuple[TIN, bool]] | None = None,
        zero_input: TIN | None = None,
        zero_result: TRES | None = None,
    ) -> None:
        _config = cast(
            CursorConfig[TIN, TRES],
            _resolve_config(
                config,
                CursorConfig,
                get_first_input=get_first_input,
                fetch_next=fetch_next,
                has_next=has_next,
                zero_input=zero_input,
                zero_result=zero_result,
            ),
        )
        self._fetch_next = _config.fetch_next
        AbstractCursor.__init__(
            self,
            get_first_input=_config.get_first_input,
            has_next=_config.has_next,
            zero_input=_config.zero_input,
            zero_result=_config.zero_result,
        )

    def __iter__(self) -> Cursor[TIN, TRES]:
        return self

    def __next__(self) -> TRES:
        if not self.has_next():
            raise StopIteration
        return self.get()

    def get(self, *, context: FetchContext | None = None) -> TRES:
        """
        Fetch the next page and advance the cursor.

        If the fetch operation raises, the exception propagates unchanged and
        the cursor does not move: calling `get` again retries the very same
        continuation token.

        Args:
            context: the FetchContext handed to the fetch operation. If not
                provided, a fresh (never cancelled) context is used.

        Returns:
            the fetched page. The page that ends the data is returned as well,
            after which `has_next()` becomes False.

        Raises:
            CursorStopException: if the cursor is exhausted. The exception
                `result` attribute holds the last page fetched.
        """

        self._ensure_has_more()
        _context = self._resolve_context(context)
        _input_str = describe_value(self._current_input)
        logger.info(f"cursor fetching a page: {_input_str}")
        result = self._fetch_next(cast(TIN, self._current_input), _context)
        logger.info(f"cursor finished fetching a page: {_input_str}")
        return self._advance(result)

    def iterate(
        self,
        callback: Callable[[TRES], Any],
        *,
        context: FetchContext | None = None,
    ) -> None:
        """
        Consume the remaining pages, invoking a callback on each of them.

        Iteration ends normally when the cursor is exhausted, or when the
        callback raises the stop sentinel (`pagecursor.STOP`, or any
        `CursorStopException`). In both cases this method returns None.
        Whatever the callback returns is ignored. Any other exception, raised
        by the fetch operation or by the callback, propagates and ends the
        iteration.

        Args:
            callback: a function called with each fetched page, in order.
            context: the FetchContext handed to every fetch during this
                iteration. If not provided, a fresh context is used.
        """

        _context = self._resolve_context(context)
        while self.has_next():
            try:
                page = self.get(context=_context)
            except CursorStopException:
                return
            try:
                callback(page)
            except CursorStopException as stop:
                self._release_stop(stop)
                logger.debug(
                    f"iteration of cursor {self.cursor_id} stopped by callback"
                )
                return
        logger.debug(f"iteration of cursor {self.cursor_id} ended: no more pages")

    def to_list(self, *, context: FetchContext | None = None) -> list[TRES]:
        """
        Materialize all pages that remain to be fetched into a list.

        Args:
            context: the FetchContext handed to every fetch. If not provided,
                a fresh context is used.

        Returns:
            a list of pages, in the order they were fetched.
        """

        pages: list[TRES] = []
        self.iterate(pages.append, context=context)
        return pages


class AsyncCursor(AbstractCursor[TIN, TRES]):
    """
    An asynchronous cursor over a paginated data source, driven by three
    caller-supplied operations (see `AsyncCursorConfig`), the fetch operation
    being a coroutine.

    This is the async counterpart of `Cursor`, with the same semantics:
    for usage examples, please refer to the synchronous class and apply the
    necessary adaptations to the async interface. Cancelling the task that
    awaits `get` or `iterate` raises `asyncio.CancelledError` from the fetch
    operation; as for any fetch error, the cursor does not advance.

    Args:
        config: an `AsyncCursorConfig` with the operations. Alternatively, pass
            the operations as keyword arguments.
        get_first_input: see `AsyncCursorConfig`.
        fetch_next: see `AsyncCursorConfig`.
        has_next: see `AsyncCursorConfig`.
        zero_input: see `AsyncCursorConfig`.
        zero_result: see `AsyncCursorConfig`.
    """

    _fetch_next: Callable[[TIN, FetchContext], Awaitable[TRES]]

    def __init__(
        self,
        config: AsyncCursorConfig[TIN, TRES] | None = None,
        *,
        get_first_input: Callable[[], TIN] | None = None,
        fetch_next: Callable[[TIN, FetchContext], Awaitable[TRES]] | None = None,
        has_next: Callable[[TRES], tuple[TIN, bool]] | None = None,
        zero_input: TIN | None = None,
        zero_result: TRES | None = None,
    ) -> None:
        _config = cast(
            AsyncCursorConfig[TIN, TRES],
            _resolve_config(
                config,
                AsyncCursorConfig,
                get_first_input=get_first_input,
                fetch_next=fetch_next,
                has_next=has_next,
                zero_input=zero_input,
                zero_result=zero_result,
            ),
        )
        self._fetch_next = _config.fetch_next
        AbstractCursor.__init__(
            self,
            get_first_input=_config.get_first_input,
            has_next=_config.has_next,
            zero_input=_config.zero_input,
            zero_result=_config.zero_result,
        )

    def __aiter__(self) -> AsyncCursor[TIN, TRES]:
        return self

    async def __anext__(self) -> TRES:
        if not self.has_next():
            raise StopAsyncIteration
        return await self.get()

    async def get(self, *, context: FetchContext | None = None) -> TRES:
        """
        Fetch the next page and advance the cursor.

        Same as `Cursor.get`, awaiting the fetch operation.

        Args:
            context: the FetchContext handed to the fetch operation. If not
                provided, a fresh (never cancelled) context is used.

        Returns:
            the fetched page.

        Raises:
            CursorStopException: if the cursor is exhausted. The exception
                `result` attribute holds the last page fetched.
        """

        self._ensure_has_more()
        _context = self._resolve_context(context)
        _input_str = describe_value(self._current_input)
        logger.info(f"cursor fetching a page: {_input_str}, async")
        result = await self._fetch_next(cast(TIN, self._current_input), _context)
        logger.info(f"cursor finished fetching a page: {_input_str}, async")
        return self._advance(result)

    async def iterate(
        self,
        callback: Callable[[TRES], Any] | Callable[[TRES], Awaitable[Any]],
        *,
        context: FetchContext | None = None,
    ) -> None:
        """
        Consume the remaining pages, invoking a callback function (or
        coroutine) on each of them.

        Same termination rules as `Cursor.iterate`: exhaustion or the stop
        sentinel raised by the callback end the iteration normally; any other
        exception propagates. Return values of the callback are ignored.

        Args:
            callback: a function, or a coroutine function, called with each
                fetched page, in order.
            context: the FetchContext handed to every fetch during this
                iteration. If not provided, a fresh context is used.
        """

        _context = self._resolve_context(context)
        is_coro = iscoroutinefunction(callback)
        while self.has_next():
            try:
                page = await self.get(context=_context)
            except CursorStopException:
                return
            try:
                if is_coro:
                    await callback(page)  # type: ignore[misc]
                else:
                    callback(page)
            except CursorStopException as stop:
                self._release_stop(stop)
                logger.debug(
                    f"iteration of cursor {self.cursor_id} stopped by callback, async"
                )
                return
        logger.debug(
            f"iteration of cursor {self.cursor_id} ended: no more pages, async"
        )

    async def to_list(self, *, context: FetchContext | None = None) -> list[TRES]:
        """
        Materialize all pages that remain to be fetched into a list.

        Args:
            context: the FetchContext handed to every fetch. If not provided,
                a fresh context is used.

        Returns:
            a list of pages, in the order they were fetched.
        """

        pages: list[TRES] = []
        await self.iterate(pages.append, context=context)
        return pages
