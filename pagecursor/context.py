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
import time
from types import TracebackType

from pagecursor.exceptions import FetchCancelledException, FetchTimeoutException
from pagecursor.settings.defaults import DEFAULT_FETCH_TIMEOUT_LABEL

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


class FetchContext:
    """
    A cancellation handle forwarded by cursors to each invocation of the
    caller-supplied fetch operation.

    A context can be cancelled explicitly (`cancel()`), can carry a deadline
    (`timeout_ms`, measured from the context creation) and can be derived from
    a parent context, in which case it is cancelled whenever the parent is.
    The cursor itself never inspects the context: it is up to the fetch
    operation to honour it, typically by calling `raise_if_cancelled()` before
    doing I/O and by passing `remaining_timeout_ms()` to its transport.

    Leaving a `with FetchContext(...)` block cancels the context.

    Args:
        timeout_ms: an optional overall duration, in milliseconds, after
            which the context counts as cancelled. Zero is the same as None.
        label: a name for the timeout setting, used in error messages.
        parent: an optional parent context.

    Example:
        >>> with FetchContext(timeout_ms=2000) as ctx:
        ...     cursor.iterate(print, context=ctx)
    """

    timeout_ms: int | None
    label: str | None
    parent: FetchContext | None
    started_ms: int
    deadline_ms: int | None

    def __init__(
        self,
        *,
        timeout_ms: int | None = None,
        label: str | None = None,
        parent: FetchContext | None = None,
    ) -> None:
        self.started_ms = _now_ms()
        # zero timeouts are mapped to None for deadline mgmt:
        self.timeout_ms = timeout_ms or None
        self.label = label
        self.parent = parent
        self._cancel_requested = False
        if self.timeout_ms is not None:
            self.deadline_ms = self.started_ms + self.timeout_ms
        else:
            self.deadline_ms = None

    def __repr__(self) -> str:
        pieces = [
            pc
            for pc in (
                f"timeout_ms={self.timeout_ms}" if self.timeout_ms else None,
                f"label={self.label!r}" if self.label else None,
                "cancelled" if self.cancelled else None,
            )
            if pc is not None
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    def __enter__(self) -> FetchContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        self.cancel()

    def child(
        self,
        *,
        timeout_ms: int | None = None,
        label: str | None = None,
    ) -> FetchContext:
        """
        Create a derived context, cancelled as soon as this one is, with an
        optional (typically tighter) deadline of its own.
        """

        return FetchContext(timeout_ms=timeout_ms, label=label, parent=self)

    def cancel(self) -> None:
        """Cancel this context (and, implicitly, all contexts derived from it)."""
        if not self._cancel_requested:
            logger.debug(f"cancelling {self}")
        self._cancel_requested = True

    def _expired(self) -> bool:
        return self.deadline_ms is not None and _now_ms() >= self.deadline_ms

    @property
    def cancelled(self) -> bool:
        """Whether this context, or any of its ancestors, is cancelled or expired."""
        ctx: FetchContext | None = self
        while ctx is not None:
            if ctx._cancel_requested or ctx._expired():
                return True
            ctx = ctx.parent
        return False

    def raise_if_cancelled(self) -> None:
        """
        Raise if this context can no longer be used for fetching.

        Raises:
            FetchTimeoutException: if the deadline of this context, or of one of
                its ancestors, has passed.
            FetchCancelledException: if this context, or one of its ancestors,
                was cancelled explicitly.
        """

        ctx: FetchContext | None = self
        while ctx is not None:
            if ctx._expired():
                _label = ctx.label or DEFAULT_FETCH_TIMEOUT_LABEL
                raise FetchTimeoutException(
                    text=(
                        "Fetch context timed out (timeout honoured: "
                        f"{_label} = {ctx.timeout_ms} ms)."
                    ),
                    timeout_ms=ctx.timeout_ms,
                    label=ctx.label,
                )
            if ctx._cancel_requested:
                raise FetchCancelledException(text="Fetch context was cancelled.")
            ctx = ctx.parent

    def remaining_timeout_ms(self) -> int | None:
        """
        The number of milliseconds left before the nearest deadline along the
        chain of contexts, for use as a transport-level timeout.

        Returns:
            a positive integer, or None if no deadline applies.

        Raises:
            FetchCancelledException, FetchTimeoutException: as for
                `raise_if_cancelled`, if the context is no longer usable.
        """

        self.raise_if_cancelled()
        now_ms = _now_ms()
        remaining: int | None = None
        ctx: FetchContext | None = self
        while ctx is not None:
            if ctx.deadline_ms is not None:
                ctx_remaining = ctx.deadline_ms - now_ms
                if remaining is None or ctx_remaining < remaining:
                    remaining = ctx_remaining
            ctx = ctx.parent
        if remaining is None:
            return None
        # the deadline may pass right after the check above
        return max(remaining, 1)


__all__ = [
    "FetchContext",
]
