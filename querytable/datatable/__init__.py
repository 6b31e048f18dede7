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

"""Table affordances over a database engine: filter language, search, sort, pagination."""

from .compiler import Clause, Operation, assemble, compile_clause, compile_filter, parse_clause
from .distinct import UNWIND_DEPTH, build_distinct_pipeline, get_filter_list
from .lexer import Token, TokenType, tokenize
from .models import DataTableOptions, DistinctValueCount, PaginatedResult, QueryOptions
from .pagination import DEFAULT_ITEMS_PER_PAGE, PageSpec, calculate_page, parse_int
from .parser import AndGroup, OrGroup, parse_filter, parse_tokens
from .query import DataTableQuery
from .sort import SortDirection, SortSpec, build_sort_spec, to_order_by

__all__ = [
    # Orchestrator
    "DataTableQuery",
    # Filter language
    "Token",
    "TokenType",
    "tokenize",
    "AndGroup",
    "OrGroup",
    "parse_tokens",
    "parse_filter",
    "Operation",
    "Clause",
    "parse_clause",
    "compile_clause",
    "assemble",
    "compile_filter",
    # Sort and pagination
    "SortDirection",
    "SortSpec",
    "build_sort_spec",
    "to_order_by",
    "DEFAULT_ITEMS_PER_PAGE",
    "PageSpec",
    "parse_int",
    "calculate_page",
    # Distinct values
    "UNWIND_DEPTH",
    "build_distinct_pipeline",
    "get_filter_list",
    # Models
    "DataTableOptions",
    "DistinctValueCount",
    "PaginatedResult",
    "QueryOptions",
]
