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

"""Tests for page arithmetic."""

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from querytable.datatable import DEFAULT_ITEMS_PER_PAGE, PageSpec, calculate_page, parse_int


class TestParseInt:
    """Tests for parse_int()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (7, 7),
            (-2, -2),
            (3.9, 3),
            ("12", 12),
            (" 12abc", 12),
            ("+3", 3),
            ("-4", -4),
            ("2.7", 2),
            ("abc", None),
            ("", None),
            (None, None),
            (True, None),
            (math.nan, None),
            (math.inf, None),
        ],
    )
    def test_values(self, value, expected):
        assert parse_int(value) == expected


class TestCalculatePage:
    """Tests for calculate_page()."""

    @pytest.mark.parametrize(
        ("page", "items_per_page", "expected"),
        [
            (1, 10, PageSpec(offset=0, limit=10)),
            (3, 20, PageSpec(offset=40, limit=20)),
            (0, 10, PageSpec(offset=0, limit=10)),
            (1, -5, PageSpec(offset=0, limit=0)),
            (4, 0, PageSpec(offset=0, limit=0)),
            ("2", "5", PageSpec(offset=5, limit=5)),
            (2.9, 5, PageSpec(offset=5, limit=5)),
            (-3, 10, PageSpec(offset=0, limit=10)),
            ("abc", 10, PageSpec(offset=0, limit=10)),
        ],
    )
    def test_arithmetic(self, page, items_per_page, expected):
        assert calculate_page(page, items_per_page) == expected

    def test_defaults(self):
        assert calculate_page() == PageSpec(offset=0, limit=DEFAULT_ITEMS_PER_PAGE)
        assert calculate_page(None, None) == PageSpec(offset=0, limit=10)

    def test_unreadable_page_size_falls_back_to_default(self):
        assert calculate_page(2, "lots") == PageSpec(offset=10, limit=10)
        assert calculate_page(2, "") == PageSpec(offset=10, limit=10)

    def test_custom_default(self):
        assert calculate_page(3, None, default_items_per_page=25) == PageSpec(offset=50, limit=25)


class TestCalculatePageProperties:
    """Property-based tests for calculate_page()."""

    @given(st.integers(min_value=1, max_value=10_000), st.integers(min_value=0, max_value=1_000))
    def test_offset_is_previous_pages(self, page: int, items_per_page: int):
        spec = calculate_page(page, items_per_page)

        assert spec == PageSpec(offset=(page - 1) * items_per_page, limit=items_per_page)

    @given(
        st.one_of(st.none(), st.integers(), st.floats(), st.text(max_size=8)),
        st.one_of(st.none(), st.integers(), st.floats(), st.text(max_size=8)),
    )
    def test_never_negative(self, page, items_per_page):
        spec = calculate_page(page, items_per_page)

        assert spec.offset >= 0
        assert spec.limit >= 0
