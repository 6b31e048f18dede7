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

"""Storage layer: predicate tree, converters and database engines."""

from .engine import DatabaseEngine, Pipeline, get_pk_fields, get_table_name
from .filters import (
    AndFilter,
    ComparisonFilter,
    ComparisonOperator,
    EqualsFilter,
    Filter,
    FilterValue,
    OrFilter,
    PatternFilter,
    TextSearchFilter,
    evaluate,
    to_mongo,
    to_sqlalchemy,
)
from .memory_engine import InMemoryDatabaseEngine
from .pipeline import run_pipeline, sort_key
from .remote_engine import RemoteDatabaseEngine, to_mongo_sort
from .sql_engine import SQLDatabaseEngine

__all__ = [
    # DatabaseEngine classes
    "DatabaseEngine",
    "InMemoryDatabaseEngine",
    "SQLDatabaseEngine",
    "RemoteDatabaseEngine",
    # Predicate tree
    "Filter",
    "FilterValue",
    "EqualsFilter",
    "PatternFilter",
    "ComparisonFilter",
    "ComparisonOperator",
    "TextSearchFilter",
    "AndFilter",
    "OrFilter",
    # Converters
    "to_mongo",
    "to_mongo_sort",
    "to_sqlalchemy",
    "evaluate",
    # Pipelines
    "Pipeline",
    "run_pipeline",
    "sort_key",
    # Utilities
    "get_pk_fields",
    "get_table_name",
]
