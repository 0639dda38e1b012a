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
Tests for the cursor logging, including the "TRACE" custom logging level
"""

from __future__ import annotations

import logging

import pytest

from pagecursor import CursorStopException

CURSOR_LOGGER = "pagecursor.cursor"


@pytest.mark.describe("should log page fetches at INFO level")
def test_cursor_logging_info(
    caplog: pytest.LogCaptureFixture,
    record_source,
    make_cursor,
) -> None:
    cursor = make_cursor(record_source(3))
    with caplog.at_level(logging.INFO, logger=CURSOR_LOGGER):
        cursor.get()
    messages = [record.getMessage() for record in caplog.records]
    assert messages == [
        "cursor fetching a page: 0",
        "cursor finished fetching a page: 0",
    ]


@pytest.mark.describe("should log exhaustion and reset at DEBUG level")
def test_cursor_logging_debug(
    caplog: pytest.LogCaptureFixture,
    record_source,
    make_cursor,
) -> None:
    cursor = make_cursor(record_source(1))
    with caplog.at_level(logging.DEBUG, logger=CURSOR_LOGGER):
        cursor.iterate(lambda page: None)
        with pytest.raises(CursorStopException):
            cursor.get()
        cursor.reset()
    messages = [record.getMessage() for record in caplog.records]
    assert any("ended: no more pages" in msg for msg in messages)
    assert any("is exhausted, stopping" in msg for msg in messages)
    assert any(msg.endswith(" reset") for msg in messages)


@pytest.mark.describe("should obey the 'TRACE' logging level when requested")
def test_cursor_logging_trace(
    caplog: pytest.LogCaptureFixture,
    record_source,
    make_cursor,
) -> None:
    cursor = make_cursor(record_source(5))
    with caplog.at_level(logging.DEBUG, logger=CURSOR_LOGGER):
        cursor.get()
        for record in caplog.records:
            assert record.levelname != "TRACE"
    caplog.clear()
    # TRACE is level 5:
    with caplog.at_level(5, logger=CURSOR_LOGGER):
        cursor.get()
        trace_records = [
            record for record in caplog.records if record.levelname == "TRACE"
        ]
        assert len(trace_records) == 1
        assert "more pages: True" in trace_records[0].getMessage()
        assert "next input 4" in trace_records[0].getMessage()
