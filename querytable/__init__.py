# Copyright (c) Nex-AGI. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
querytable: tabular-UI queries over document collections.

A compact filter language, free-text search, multi-field sort, pagination
and distinct value counts on top of pluggable database engines.
"""

from .config import ConfigError, DataTableConfig
from .datatable import (
    DataTableOptions,
    DataTableQuery,
    DistinctValueCount,
    PaginatedResult,
    QueryOptions,
    build_sort_spec,
    calculate_page,
    compile_filter,
)
from .orm import (
    DatabaseEngine,
    InMemoryDatabaseEngine,
    RemoteDatabaseEngine,
    SQLDatabaseEngine,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DataTableConfig",
    "DataTableOptions",
    "DataTableQuery",
    "DatabaseEngine",
    "DistinctValueCount",
    "InMemoryDatabaseEngine",
    "PaginatedResult",
    "QueryOptions",
    "RemoteDatabaseEngine",
    "SQLDatabaseEngine",
    "build_sort_spec",
    "calculate_page",
    "compile_filter",
]
