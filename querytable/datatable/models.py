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

"""Request and response models of the data-table query."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DistinctValueCount(BaseModel):
    """One distinct field value and how often it occurs."""

    value: Any
    count: int = Field(ge=1)


class PaginatedResult(BaseModel):
    """A page of documents with filtered and unfiltered totals.

    Attributes:
        data: Documents of the requested page (or distinct value counts)
        result_count: Documents matching the applied filter and search
        total_count: All documents of the collection
    """

    model_config = ConfigDict(populate_by_name=True)

    data: list[Any] = Field(default_factory=list)
    result_count: int = Field(default=0, alias="resultCount")
    total_count: int = Field(default=0, alias="totalCount")


class QueryOptions(BaseModel):
    """Options bundle accepted by ``DataTableQuery.data_table``.

    Field aliases are the camelCase names sent by the table widget.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page: int | float | str | None = None
    items_per_page: int | float | str | None = Field(default=None, alias="itemsPerPage")
    search: str | None = None
    search_options: dict[str, Any] = Field(default_factory=dict, alias="searchOptions")
    filter: str | None = None
    sort_by: str | list[str] | None = Field(default=None, alias="sortBy")
    sort_desc: str | list[bool] | list[str] = Field(default="", alias="sortDesc")
    get_filter_list: str | None = Field(default=None, alias="getFilterList")


class DataTableOptions(BaseModel):
    """Pagination and sort state as kept by the table widget itself."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page: int = 1
    items_per_page: int | None = Field(default=None, alias="itemsPerPage")
    sort_by: list[str] = Field(default_factory=list, alias="sortBy")
    sort_desc: list[bool] = Field(default_factory=list, alias="sortDesc")
    search_options: dict[str, Any] = Field(default_factory=dict, alias="searchOptions")

    def to_query_options(
        self,
        *,
        search: str | None = None,
        filter: str | None = None,
        get_filter_list: str | None = None,
    ) -> QueryOptions:
        """Combine the widget state with search and filter inputs."""
        return QueryOptions(
            page=self.page,
            items_per_page=self.items_per_page,
            search=search,
            search_options=dict(self.search_options),
            filter=filter,
            sort_by=",".join(self.sort_by) if self.sort_by else None,
            sort_desc=",".join("true" if desc else "false" for desc in self.sort_desc),
            get_filter_list=get_filter_list,
        )
