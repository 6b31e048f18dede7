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

"""SQL-backed document collections through SQLModel/SQLAlchemy.

Predicates become ``WHERE`` clauses via ``to_sqlalchemy``. Aggregation
pipelines are run in-process with ``run_pipeline`` over the table's rows,
since unwinding JSON arrays has no portable SQL form.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy import func, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlmodel import SQLModel, select
from sqlmodel.sql.expression import SelectOfScalar

from .engine import DatabaseEngine, Pipeline, get_table_name
from .filters import Filter, to_sqlalchemy
from .pipeline import run_pipeline

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=SQLModel)

ASYNC_DRIVERS = ("+asyncpg", "+aiosqlite", "+aiomysql")

_SQLITE_PRAGMAS = ("PRAGMA journal_mode=WAL", "PRAGMA busy_timeout=30000")


class SQLDatabaseEngine(DatabaseEngine):
    """Async SQL engine for SQLite, PostgreSQL and MySQL.

    Unsorted reads come back in the database's natural order, which for
    the supported backends is insertion order on a freshly written table.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
        **kwargs: Any,
    ) -> SQLDatabaseEngine:
        """Create an engine from an async database URL.

        Raises:
            ValueError: If the URL names no async driver
        """
        if not any(driver in url for driver in ASYNC_DRIVERS):
            raise ValueError(f"URL must contain async driver ({', '.join(ASYNC_DRIVERS)}): {url}")

        options: dict[str, Any] = {"echo": echo, **kwargs}
        if "sqlite" in url:
            connect_args = dict(options.pop("connect_args", {}))
            connect_args.setdefault("check_same_thread", False)
            connect_args.setdefault("timeout", 30)
            options["connect_args"] = connect_args
        else:
            options.setdefault("pool_size", pool_size)
            options.setdefault("max_overflow", max_overflow)

        return cls(create_async_engine(url, **options))

    @property
    def _is_sqlite(self) -> bool:
        return "sqlite" in str(self._engine.url.drivername)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        async with AsyncSession(self._engine) as session:
            yield session

    async def setup_models(self, model_classes: list[type[SQLModel]]) -> None:
        """Create the tables of the given model classes if missing."""
        tables = [model_class.__table__ for model_class in model_classes]  # type: ignore[attr-defined]
        async with self._engine.begin() as conn:
            if self._is_sqlite:
                for pragma in _SQLITE_PRAGMAS:
                    await conn.execute(text(pragma))
            await conn.run_sync(lambda sync_conn: SQLModel.metadata.create_all(sync_conn, tables=tables))
        logger.debug("Ensured tables %s", [get_table_name(model_class) for model_class in model_classes])

    def _where(self, stmt: SelectOfScalar[Any], model_class: type[SQLModel], filters: Filter | None) -> SelectOfScalar[Any]:
        if filters is None:
            return stmt
        return stmt.where(to_sqlalchemy(filters, model_class))

    def _ordered(
        self,
        stmt: SelectOfScalar[Any],
        model_class: type[SQLModel],
        order_by: str | tuple[str, ...] | None,
    ) -> SelectOfScalar[Any]:
        if not order_by:
            return stmt
        for entry in (order_by,) if isinstance(order_by, str) else order_by:
            descending = entry.startswith("-")
            name = entry[1:] if descending else entry
            if name not in model_class.__table__.columns:  # type: ignore[attr-defined]
                raise ValueError(f"Cannot order by '{name}': no such column on {model_class.__name__}")
            column = getattr(model_class, name)
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        return stmt

    async def find_many(
        self,
        model_class: type[T],
        *,
        filters: Filter | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: str | tuple[str, ...] | None = None,
    ) -> list[T]:
        """Select the rows matching ``filters``.

        Args:
            model_class: Table to read
            filters: Predicate tree, ``None`` for every row
            limit: Row cap; ``None`` or ``0`` for no cap
            offset: Rows to skip
            order_by: Column names, ``-`` prefixed for descending

        Raises:
            ValueError: For unknown ordering columns or operators without a SQL form
        """
        stmt = self._ordered(self._where(select(model_class), model_class, filters), model_class, order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)

        async with self._session() as session:
            rows = await session.execute(stmt)
            return list(rows.scalars().all())

    async def count(
        self,
        model_class: type[T],
        *,
        filters: Filter | None = None,
    ) -> int:
        """Count the rows matching ``filters``."""
        stmt = self._where(select(func.count()).select_from(model_class), model_class, filters)
        async with self._session() as session:
            rows = await session.execute(stmt)
            return rows.scalar() or 0

    async def aggregate(
        self,
        model_class: type[T],
        pipeline: Pipeline,
    ) -> list[dict[str, Any]]:
        """Run ``pipeline`` over every row of the table."""
        documents = [row.model_dump() for row in await self.find_many(model_class)]
        logger.debug("Aggregating %d row(s) of %s in-process", len(documents), get_table_name(model_class))
        return run_pipeline(documents, pipeline)

    async def create(self, model: T) -> T:
        """Insert one row.

        The insert is flushed before commit so constraint violations surface
        here and roll the session back.
        """
        async with self._session() as session:
            session.add(model)
            try:
                await session.flush()
                await session.commit()
            except Exception:
                await session.rollback()
                raise

            try:
                await session.refresh(model)
            except Exception as e:
                logger.debug("Could not refresh %s after insert: %s", type(model).__name__, e)
            return model

    async def create_many(self, models: list[T]) -> list[T]:
        """Insert rows in one transaction."""
        if not models:
            return []

        async with self._session() as session:
            session.add_all(models)
            await session.commit()
            for model in models:
                await session.refresh(model)
        return models

    async def close(self) -> None:
        """Dispose of the connection pool."""
        await self._engine.dispose()
