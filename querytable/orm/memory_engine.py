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

"""Process-local document collections.

Each table is a dict of model instances keyed by primary key. Predicates go
through ``evaluate`` and pipelines through ``run_pipeline``; nothing is
persisted.
"""

from __future__ import annotations

import threading
from typing import Any, TypeVar

from sqlmodel import SQLModel

from .engine import DatabaseEngine, Pipeline, get_pk_fields, get_table_name
from .filters import Filter, evaluate, resolve_path
from .pipeline import run_pipeline, sort_key

T = TypeVar("T", bound=SQLModel)


class InMemoryDatabaseEngine(DatabaseEngine):
    """Thread-safe in-memory storage engine.

    Records keep insertion order, which is the storage order returned by
    unsorted queries.

    Example:
        >>> engine = InMemoryDatabaseEngine()
        >>> await engine.setup_models([Person])
        >>> await engine.create_many([Person(id=1, status="active", age=17)])
        >>> await engine.count(Person, filters=ComparisonFilter.gte("age", "18"))
        0
    """

    def __init__(self) -> None:
        # table name -> primary key tuple -> model, in insertion order
        self._storage: dict[str, dict[tuple[object, ...], SQLModel]] = {}
        self._lock = threading.RLock()

    async def setup_models(self, model_classes: list[type[SQLModel]]) -> None:
        """Register empty tables; existing rows are kept."""
        with self._lock:
            for model_class in model_classes:
                self._storage.setdefault(get_table_name(model_class), {})

    def _get_pk_tuple(self, model: SQLModel) -> tuple[object, ...]:
        pk_fields = get_pk_fields(type(model))
        return tuple(getattr(model, f) for f in pk_fields)

    def _get_table(self, model_class: type[SQLModel]) -> dict[tuple[object, ...], SQLModel]:
        return self._storage.setdefault(get_table_name(model_class), {})

    def _matching(self, model_class: type[SQLModel], filters: Filter | None) -> list[tuple[SQLModel, dict[str, Any]]]:
        rows = [(model, model.model_dump()) for model in self._get_table(model_class).values()]
        if filters is None:
            return rows
        return [(model, record) for model, record in rows if evaluate(filters, record)]

    async def find_many(
        self,
        model_class: type[T],
        *,
        filters: Filter | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: str | tuple[str, ...] | None = None,
    ) -> list[T]:
        """Matching records in insertion order, then sorted by ``order_by``.

        Sorting uses the document store's cross-type order and accepts dotted
        paths; each ``order_by`` entry may carry a ``-`` prefix for descending.
        """
        with self._lock:
            rows = self._matching(model_class, filters)

        if order_by:
            fields = (order_by,) if isinstance(order_by, str) else order_by
            for field in reversed(fields):
                reverse = field.startswith("-")
                field_name = field[1:] if reverse else field
                rows.sort(
                    key=lambda row: sort_key(resolve_path(row[1], field_name)[1]),
                    reverse=reverse,
                )

        results = [model for model, _ in rows]
        if offset:
            results = results[offset:]
        if limit:
            results = results[:limit]
        return results  # type: ignore[return-value]

    async def count(
        self,
        model_class: type[T],
        *,
        filters: Filter | None = None,
    ) -> int:
        """Count records matching filters."""
        with self._lock:
            if filters is None:
                return len(self._get_table(model_class))
            return len(self._matching(model_class, filters))

    async def aggregate(
        self,
        model_class: type[T],
        pipeline: Pipeline,
    ) -> list[dict[str, Any]]:
        """Run an aggregation pipeline over the table's records."""
        with self._lock:
            records = [model.model_dump() for model in self._get_table(model_class).values()]
        return run_pipeline(records, pipeline)

    async def create(self, model: T) -> T:
        """Create a new record.

        Raises:
            ValueError: If a record with the same primary key already exists
        """
        with self._lock:
            self._insert(model)
            return model

    async def create_many(self, models: list[T]) -> list[T]:
        """Create multiple records."""
        with self._lock:
            for model in models:
                self._insert(model)
        return models

    def _insert(self, model: SQLModel) -> None:
        table = self._get_table(type(model))
        pk = self._get_pk_tuple(model)
        if pk in table:
            pk_values = dict(zip(get_pk_fields(type(model)), pk))
            raise ValueError(f"Duplicate primary key: {pk_values}")
        table[pk] = model
