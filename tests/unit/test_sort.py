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

"""Tests for the sort specification builder."""

from querytable.datatable import SortDirection, build_sort_spec, to_order_by

ASC = SortDirection.ASCENDING
DESC = SortDirection.DESCENDING


class TestBuildSortSpec:
    """Tests for build_sort_spec()."""

    def test_positional_pairing_with_default_fill(self):
        spec = build_sort_spec("a,b", "true")

        assert spec == {"a": DESC, "b": ASC}
        assert list(spec) == ["a", "b"]

    def test_no_flags_means_ascending(self):
        assert build_sort_spec("name") == {"name": ASC}
        assert build_sort_spec("name", None) == {"name": ASC}

    def test_only_true_is_descending(self):
        assert build_sort_spec("a,b,c,d", "false,1,yes,TRUE") == {"a": ASC, "b": ASC, "c": ASC, "d": DESC}

    def test_extra_flags_ignored(self):
        assert build_sort_spec("a", "true,true,true") == {"a": DESC}

    def test_whitespace_and_empty_fields(self):
        assert build_sort_spec(" a , ,b ", "false, false ,true") == {"a": ASC, "b": DESC}

    def test_empty(self):
        assert build_sort_spec(None) == {}
        assert build_sort_spec("") == {}
        assert build_sort_spec([]) == {}

    def test_list_inputs(self):
        assert build_sort_spec(["age", "name"], [True, False]) == {"age": DESC, "name": ASC}
        assert build_sort_spec(["age", "name"], ["false", "true"]) == {"age": ASC, "name": DESC}

    def test_field_order_is_kept(self):
        assert list(build_sort_spec("z,a,m")) == ["z", "a", "m"]


class TestToOrderBy:
    """Tests for to_order_by()."""

    def test_descending_prefix(self):
        assert to_order_by({"age": DESC, "name": ASC}) == ("-age", "name")

    def test_empty(self):
        assert to_order_by({}) == ()
