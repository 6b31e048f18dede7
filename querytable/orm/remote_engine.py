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

"""Remote database engine for a document-store HTTP API.

Queries are sent in the store's native form: filters through ``to_mongo``,
sort as ``{field: 1 | -1}``, aggregation pipelines unchanged.

Endpoints (relative to ``base_url``), all ``POST`` with a JSON body:
    /{table}/find        {"filter", "sort", "skip", "limit"} -> {"documents": [...]}
    /{table}/count       {"filter"}                          -> {"count": n}
    /{table}/aggregate   {"pipeline"}                        -> {"documents": [...]}
    /{table}/insert_one  {"document"}                        -> {"document": {...}}
    /{table}/insert_many {"documents"}                       -> {"documents": [...]}
    /{table}/ensure      {"table", "primary_key"}
"""

from __future__ import annotations

import asyncio
from typing import Any, TypeVar

import httpx
from sqlmodel import SQLModel

from .engine import DatabaseEngine, Pipeline, get_pk_fields, get_table_name
from .filters import Filter, to_mongo

T = TypeVar("T", bound=SQLModel)


def to_mongo_sort(order_by: str | tuple[str, ...] | None) -> dict[str, int] | None:
    """Render engine-style ``order_by`` as a document-store sort document."""
    if not order_by:
        return None
    fields = (order_by,) if isinstance(order_by, str) else order_by
    return {field[1:] if field.startswith("-") else field: -1 if field.startswith("-") else 1 for field in fields}


class RemoteDatabaseEngine(DatabaseEngine):
    """Database engine that talks to a document store over HTTP.

    Uses httpx.AsyncClient for async HTTP operations. HTTP errors propagate
    as ``httpx.HTTPStatusError``.

    Attributes:
        _base_url: Base URL of the document API
        _api_key: API key for authentication (optional)
        _timeout: HTTP request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the remote database engine.

        Args:
            base_url: Base URL of the document API
            api_key: API key/token for authentication (optional)
            timeout: HTTP request timeout in seconds
            transport: Custom httpx transport (optional)
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"

            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> RemoteDatabaseEngine:
        self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _post(self, model_class: type[SQLModel], action: str, payload: dict[str, Any]) -> dict[str, Any]:
        client = self._get_client()
        response = await client.post(f"/{get_table_name(model_class)}/{action}", json=payload)
        response.raise_for_status()
        return response.json()

    def _parse_models(self, model_class: type[T], results: list[Any]) -> list[T]:
        return [model_class.model_validate(r) for r in results]

    async def setup_models(self, model_classes: list[type[SQLModel]]) -> None:
        """Ensure collections exist for all model classes."""

        async def ensure_table(model_class: type[SQLModel]) -> None:
            await self._post(
                model_class,
                "ensure",
                {"table": get_table_name(model_class), "primary_key": get_pk_fields(model_class)},
            )

        await asyncio.gather(*[ensure_table(mc) for mc in model_classes])

    async def find_many(
        self,
        model_class: type[T],
        *,
        filters: Filter | None = None,
        limit: int | None = None,
        offset: int | None = None,
        order_by: str | tuple[str, ...] | None = None,
    ) -> list[T]:
        """Find all documents matching the filters."""
        data = await self._post(
            model_class,
            "find",
            {
                "filter": to_mongo(filters) if filters is not None else {},
                "sort": to_mongo_sort(order_by),
                "skip": offset or 0,
                "limit": limit or 0,
            },
        )
        return self._parse_models(model_class, data.get("documents", []))

    async def count(
        self,
        model_class: type[T],
        *,
        filters: Filter | None = None,
    ) -> int:
        """Count documents matching the filters."""
        data = await self._post(
            model_class,
            "count",
            {"filter": to_mongo(filters) if filters is not None else {}},
        )
        return int(data.get("count", 0))

    async def aggregate(
        self,
        model_class: type[T],
        pipeline: Pipeline,
    ) -> list[dict[str, Any]]:
        """Run an aggregation pipeline on the remote store."""
        data = await self._post(model_class, "aggregate", {"pipeline": [dict(stage) for stage in pipeline]})
        return list(data.get("documents", []))

    async def create(self, model: T) -> T:
        """Insert a document."""
        data = await self._post(type(model), "insert_one", {"document": model.model_dump(mode="json")})
        return type(model).model_validate(data.get("document"))

    async def create_many(self, models: list[T]) -> list[T]:
        """Insert multiple documents."""
        if not models:
            return []
        model_class = type(models[0])
        data = await self._post(
            model_class,
            "insert_many",
            {"documents": [m.model_dump(mode="json") for m in models]},
        )
        return self._parse_models(model_class, data.get("documents", []))

    def __repr__(self) -> str:
        return f"RemoteDatabaseEngine(base_url={self._base_url!r})"
