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

"""Sort specification builder."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum


class SortDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


SortSpec = dict[str, SortDirection]


def _split(value: str | Sequence[str] | Sequence[bool] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split(",")
    return [str(item) for item in value]


def build_sort_spec(
    sort_by: str | Sequence[str] | None,
    sort_desc: str | Sequence[bool] | Sequence[str] | None = "",
) -> SortSpec:
    """Pair sort fields with direction flags positionally.

    Args:
        sort_by: Comma-separated field names, or a list of them
        sort_desc: Comma-separated ``true``/``false`` flags, or a list of
            booleans. Missing or unrecognised entries mean ascending.

    Returns:
        Ordered mapping of field to direction; empty when no field is given.

    Examples:
        >>> build_sort_spec("a,b", "true")
        {'a': <SortDirection.DESCENDING: 'descending'>, 'b': <SortDirection.ASCENDING: 'ascending'>}
    """
    fields = [field.strip() for field in _split(sort_by)]
    flags = [flag.strip().lower() == "true" for flag in _split(sort_desc)]

    spec: SortSpec = {}
    for index, field in enumerate(fields):
        if not field:
            continue
        descending = flags[index] if index < len(flags) else False
        spec[field] = SortDirection.DESCENDING if descending else SortDirection.ASCENDING
    return spec


def to_order_by(spec: SortSpec) -> tuple[str, ...]:
    """Render a sort spec as engine ``order_by`` (``-`` prefix for descending)."""
    return tuple(f"-{field}" if direction == SortDirection.DESCENDING else field for field, direction in spec.items())
