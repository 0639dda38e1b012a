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

import importlib.metadata

# Kept in sync with the release: setup.py reads this line.
_PACKAGE_VERSION = "0.3.0"


def get_version() -> str:
    try:
        return importlib.metadata.version(__package__)

    # If the package is not installed, use the version declared in the source
    except importlib.metadata.PackageNotFoundError:
        return _PACKAGE_VERSION


__version__: str = get_version()


import pagecursor.utils.logging  # noqa: F401, E402
from pagecursor.config import AsyncCursorConfig, CursorConfig  # noqa: E402
from pagecursor.context import FetchContext  # noqa: E402
from pagecursor.cursor import (  # noqa: E402
    AbstractCursor,
    AsyncCursor,
    Cursor,
    CursorState,
)
from pagecursor.exceptions import (  # noqa: E402
    STOP,
    CursorConfigurationException,
    CursorStopException,
    FetchCancelledException,
    FetchTimeoutException,
    PageCursorException,
    is_stop,
)

__all__ = [
    "AbstractCursor",
    "AsyncCursor",
    "AsyncCursorConfig",
    "Cursor",
    "CursorConfig",
    "CursorConfigurationException",
    "CursorState",
    "CursorStopException",
    "FetchCancelledException",
    "FetchContext",
    "FetchTimeoutException",
    "PageCursorException",
    "STOP",
    "__version__",
    "is_stop",
]


__pdoc__ = {
    "settings": False,
    "utils": False,
}
