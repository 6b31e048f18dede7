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

"""Page number to offset/limit arithmetic."""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_ITEMS_PER_PAGE = 10

_INTEGER_PREFIX = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class PageSpec:
    """Zero-based window over a result set; ``limit == 0`` means unbounded."""

    offset: int
    limit: int


def parse_int(value: int | float | str | None) -> int | None:
    """Read an integer from a number or the leading digits of a string.

    Returns ``None`` when no integer can be read (``"abc"``, ``""``, ``None``).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    match = _INTEGER_PREFIX.match(value)
    if match is None:
        return None
    return int(match.group(1))


def calculate_page(
    page: int | float | str | None = 1,
    items_per_page: int | float | str | None = None,
    default_items_per_page: int = DEFAULT_ITEMS_PER_PAGE,
) -> PageSpec:
    """Translate a 1-based page and page size into offset and limit.

    An unreadable or negative page counts as page 0, so the offset never goes
    negative. An unreadable page size falls back to the default; a negative
    one becomes 0 (unbounded).

    Examples:
        >>> calculate_page(3, 20)
        PageSpec(offset=40, limit=20)
        >>> calculate_page("abc", -5)
        PageSpec(offset=0, limit=0)
    """
    page_number = 1 if page is None else parse_int(page)
    if page_number is None or page_number < 0:
        page_number = 0

    items = parse_int(items_per_page)
    if items is None:
        items = default_items_per_page
    limit = max(items, 0)

    return PageSpec(offset=max(page_number - 1, 0) * limit, limit=limit)
