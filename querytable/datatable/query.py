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

"""Data-table query orchestration.

``DataTableQuery`` wraps a model class on a database engine and layers the
table affordances over it: filter string, free-text search, multi-field sort,
pagination and distinct value lists. Queries are immutable; every stage
returns a new query.

Example:
    >>> query = DataTableQuery(engine, Person)
    >>> result = await query.data_table({"filter": "status(eq:active);age(gte:25)", "page": 1})
    >>> result.result_count, result.total_count
    (2, 3)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from sqlmodel import SQLModel

from querytable.config import DataTableConfig
from querytable.orm import AndFilter, DatabaseEngine, Filter, TextSearchFilter

from .compiler import compile_filter
from .distinct import get_filter_list
from .models import DistinctValueCount, PaginatedResult, QueryOptions
from .pagination import PageSpec, calculate_page
from .sort import build_sort_spec, to_order_by

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=SQLModel)


class DataTableQuery(Generic[T]):
    """Chainable query over one collection of a database engine."""

    def __init__(
        self,
        engine: DatabaseEngine,
        model_class: type[T],
        *,
        config: DataTableConfig | None = None,
        filters: Filter | None = None,
        order_by: tuple[str, ...] = (),
        offset: int = 0,
        limit: int = 0,
    ) -> None:
        self._engine = engine
        self._model_class = model_class
        self._config = config or DataTableConfig()
        self._filters = filters
        self._order_by = order_by
        self._offset = offset
        self._limit = limit

    def _replace(self, **changes: Any) -> DataTableQuery[T]:
        state: dict[str, Any] = {
            "config": self._config,
            "filters": self._filters,
            "order_by": self._order_by,
            "offset": self._offset,
            "limit": self._limit,
        }
        state.update(changes)
        return DataTableQuery(self._engine, self._model_class, **state)

    @property
    def conditions(self) -> Filter | None:
        """Predicate currently constraining the query, ``None`` if unconstrained."""
        return self._filters

    @property
    def order_by(self) -> tuple[str, ...]:
        return self._order_by

    @property
    def window(self) -> PageSpec:
        return PageSpec(offset=self._offset, limit=self._limit)

    # ------------------------------------------------------------------
    # Query stages
    # ------------------------------------------------------------------

    def find(self, filter_: Filter | None) -> DataTableQuery[T]:
        """AND a predicate into the current conditions."""
        if filter_ is None:
            return self
        if self._filters is None:
            return self._replace(filters=filter_)
        return self._replace(filters=AndFilter(filters=[self._filters, filter_]))

    def filter(self, terms: str | None) -> DataTableQuery[T]:
        """Apply a filter string. A string that compiles to nothing is ignored."""
        return self.find(compile_filter(terms))

    def search(self, search: str | None, options: Mapping[str, Any] | None = None) -> DataTableQuery[T]:
        """Require a free-text match in addition to the current conditions."""
        if not search:
            return self
        return self.find(TextSearchFilter(search=search, options=dict(options or {})))

    def sort(
        self,
        sort_by: str | Sequence[str] | None,
        sort_desc: str | Sequence[bool] | Sequence[str] | None = "",
    ) -> DataTableQuery[T]:
        """Order by the given fields, replacing any previous order."""
        spec = build_sort_spec(sort_by, sort_desc)
        if not spec:
            return self
        return self._replace(order_by=to_order_by(spec))

    def skip(self, offset: int) -> DataTableQuery[T]:
        return self._replace(offset=max(offset, 0))

    def limit(self, limit: int) -> DataTableQuery[T]:
        return self._replace(limit=max(limit, 0))

    def paginate(
        self,
        page: int | float | str | None = 1,
        items_per_page: int | float | str | None = None,
    ) -> DataTableQuery[T]:
        """Restrict the query to one page (1-based)."""
        spec = calculate_page(page, items_per_page, self._config.default_items_per_page)
        return self._replace(offset=spec.offset, limit=spec.limit)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def all(self) -> list[T]:
        """Fetch the documents selected by the query."""
        return await self._engine.find_many(
            self._model_class,
            filters=self._filters,
            limit=self._limit or None,
            offset=self._offset or None,
            order_by=self._order_by or None,
        )

    async def count(self) -> int:
        """Count documents matching the conditions, ignoring sort and pagination."""
        return await self._engine.count(self._model_class, filters=self._filters)

    async def paginated(
        self,
        page: int | float | str | None = 1,
        items_per_page: int | float | str | None = None,
    ) -> PaginatedResult:
        """Fetch one page together with the filtered and total counts.

        The three reads run concurrently and are not transactionally linked,
        so the counts are a snapshot that may lag concurrent writes.
        """
        page_query = self.paginate(page, items_per_page)
        data, result_count, total_count = await asyncio.gather(
            page_query.all(),
            self.count(),
            self._engine.count(self._model_class),
        )
        return PaginatedResult(data=data, result_count=result_count, total_count=total_count)

    async def get_filter_list(self, field: str) -> list[DistinctValueCount]:
        """Distinct values of ``field`` across the whole collection."""
        return await get_filter_list(self._engine, self._model_class, field)

    async def data_table(self, options: QueryOptions | Mapping[str, Any]) -> PaginatedResult:
        """Run filter, search, sort and pagination from one options bundle.

        With ``get_filter_list`` set, returns that field's distinct values
        instead and skips every other stage.
        """
        if not isinstance(options, QueryOptions):
            options = QueryOptions.model_validate(options)

        if options.get_filter_list:
            logger.debug("Listing distinct values of %r", options.get_filter_list)
            values = await self.get_filter_list(options.get_filter_list)
            return PaginatedResult(data=values, result_count=len(values), total_count=len(values))

        query = self
        if options.filter is not None:
            query = query.filter(options.filter)
        if options.search is not None:
            query = query.search(options.search, options.search_options)
        if options.sort_by is not None:
            query = query.sort(options.sort_by, options.sort_desc)
        return await query.paginated(options.page, options.items_per_page)

    async def query_data_table(self, options: QueryOptions | Mapping[str, Any]) -> PaginatedResult:
        """Alias of ``data_table`` kept for older callers."""
        return await self.data_table(options)

    def __repr__(self) -> str:
        return f"DataTableQuery(model={self._model_class.__name__}, engine={self._engine!r})"
