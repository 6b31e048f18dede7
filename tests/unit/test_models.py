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

"""Tests for the data-table request and response models."""

import pytest
from pydantic import ValidationError

from querytable.datatable import DataTableOptions, DistinctValueCount, PaginatedResult, QueryOptions


class TestQueryOptions:
    """Tests for QueryOptions."""

    def test_camel_case_aliases(self):
        options = QueryOptions.model_validate(
            {
                "page": "2",
                "itemsPerPage": 25,
                "search": "coffee",
                "searchOptions": {"$language": "en"},
                "filter": "age(gte:18)",
                "sortBy": "age,name",
                "sortDesc": "true",
                "getFilterList": "status",
            }
        )

        assert options.page == "2"
        assert options.items_per_page == 25
        assert options.search_options == {"$language": "en"}
        assert options.sort_by == "age,name"
        assert options.sort_desc == "true"
        assert options.get_filter_list == "status"

    def test_field_names_accepted(self):
        options = QueryOptions(items_per_page=5, sort_by=["age"], sort_desc=[True])

        assert options.items_per_page == 5
        assert options.sort_by == ["age"]
        assert options.sort_desc == [True]

    def test_defaults_and_unknown_keys(self):
        options = QueryOptions.model_validate({"groupBy": "status"})

        assert options.page is None
        assert options.filter is None
        assert options.sort_desc == ""
        assert options.search_options == {}


class TestPaginatedResult:
    """Tests for PaginatedResult."""

    def test_dump_by_alias(self):
        result = PaginatedResult(data=[{"id": 1}], result_count=1, total_count=3)

        assert result.model_dump(by_alias=True) == {"data": [{"id": 1}], "resultCount": 1, "totalCount": 3}

    def test_validate_from_alias(self):
        result = PaginatedResult.model_validate({"data": [], "resultCount": 0, "totalCount": 9})

        assert result.total_count == 9


class TestDistinctValueCount:
    """Tests for DistinctValueCount."""

    def test_any_value(self):
        assert DistinctValueCount(value=["nested"], count=1).value == ["nested"]
        assert DistinctValueCount(value=None, count=2).value is None

    def test_count_must_be_positive(self):
        with pytest.raises(ValidationError):
            DistinctValueCount(value="x", count=0)


class TestDataTableOptions:
    """Tests for DataTableOptions.to_query_options()."""

    def test_joins_sort_state(self):
        widget = DataTableOptions.model_validate(
            {"page": 3, "itemsPerPage": 20, "sortBy": ["age", "name"], "sortDesc": [True, False]}
        )

        options = widget.to_query_options(search="bob", filter="status(eq:active)")

        assert options.page == 3
        assert options.items_per_page == 20
        assert options.sort_by == "age,name"
        assert options.sort_desc == "true,false"
        assert options.search == "bob"
        assert options.filter == "status(eq:active)"
        assert options.get_filter_list is None

    def test_no_sort(self):
        options = DataTableOptions().to_query_options(get_filter_list="status")

        assert options.page == 1
        assert options.sort_by is None
        assert options.sort_desc == ""
        assert options.get_filter_list == "status"
