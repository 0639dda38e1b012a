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

# Message carried by the stop sentinel
DEFAULT_STOP_MESSAGE = "iterator stopped"

# Custom logging level, below DEBUG, for per-step cursor tracing
TRACE_LOG_LEVEL = 5
TRACE_LOG_LEVEL_NAME = "TRACE"

# Labels used when reporting an expired FetchContext deadline
DEFAULT_FETCH_TIMEOUT_LABEL = "timeout_ms"
