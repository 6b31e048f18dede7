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

"""Database engine abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from sqlmodel import SQLModel

from .filters import Filter

T = TypeVar("T", bound=SQLModel)

Pipeline = Sequence[Mapping[str, Any]]


def get_table_name(model_class: type[SQLModel]) -> str:
    """Get table name from a SQLModel class."""
    return str(model_class.__tablename__)  # type: ignore[attr-defined]


def get_pk_fields(model_class: type[SQLModel]) -> list[str]:
    """Get primary key field names from a SQLModel class."""
    return [name for name, info in model_class.model_fields.items() if getattr(info, "primary_key", False) is True]


class DatabaseEngine(ABC):
    """Abstract document collection backing a data-table query.

    ``order_by`` entries name a field, prefixed with ``-`` for descending.
    A ``limit`` of ``None`` or ``0`` means unbounded.
    """

    @abstractmethod
    async def setup_models(self, model_classes: list[type[SQLModel]]) -> None:
        """Setup storage for the given model classes."""

    @abstractmethod
    async def find_many(
        self,
        model_class: type[T],
        *,
        filters: Filter | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: str | tuple[str, ...] | None = None,
    ) -> list[T]:
        """Find all records matching filters, in storage order unless sorted."""

    @abstractmethod
    async def count(
        self,
        model_class: type[T],
        *,
        filters: Filter | None = None,
    ) -> int:
        """Count records matching filters."""

    @abstractmethod
    async def aggregate(
        self,
        model_class: type[T],
        pipeline: Pipeline,
    ) -> list[dict[str, Any]]:
        """Run an aggregation pipeline (document-store stage form)."""

    @abstractmethod
    async def create(self, model: T) -> T:
        """Create a new record. Returns the created record."""

    @abstractmethod
    async def create_many(self, models: list[T]) -> list[T]:
        """Create multiple records. Returns the created records."""
