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
from typing import Any

from pagecursor.settings.defaults import TRACE_LOG_LEVEL, TRACE_LOG_LEVEL_NAME

# Add a new TRACE logging level
logging.addLevelName(TRACE_LOG_LEVEL, TRACE_LOG_LEVEL_NAME)


def log_trace(logger: logging.Logger, msg: str, *args: Any, **kwargs: Any) -> None:
    """
    Emit a message at the TRACE level (below DEBUG) on the given logger.

    The level check happens first, so callers do not pay for the record
    unless TRACE is enabled.
    """
    if logger.isEnabledFor(TRACE_LOG_LEVEL):
        logger.log(TRACE_LOG_LEVEL, msg, *args, **kwargs)


def describe_value(value: Any, max_length: int = 80) -> str:
    """A short, log-friendly rendering of an opaque input token or page."""
    if isinstance(value, (list, tuple, dict, set)):
        return f"<{type(value).__name__} of {len(value)} entries>"
    text = repr(value)
    if len(text) > max_length:
        return f"{text[: max_length - 3]}..."
    return text
