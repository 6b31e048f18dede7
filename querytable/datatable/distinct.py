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

"""Distinct value counts for filter pickers."""

from __future__ import annotations

from typing import Any, TypeVar

from sqlmodel import SQLModel

from querytable.orm import DatabaseEngine

from .models import DistinctValueCount

T = TypeVar("T", bound=SQLModel)

# Array nesting flattened before grouping; deeper values group as arrays.
UNWIND_DEPTH = 6


def build_distinct_pipeline(field: str) -> list[dict[str, Any]]:
    """Build the aggregation pipeline counting distinct values of ``field``.

    Documents missing the field, or holding null or an empty array, do not
    contribute.
    """
    return [
        {"$project": {"field": f"${field}"}},
        *({"$unwind": "$field"} for _ in range(UNWIND_DEPTH)),
        {"$group": {"_id": "$field", "count": {"$sum": 1}}},
        {"$project": {"_id": False, "count": "$count", "value": "$_id"}},
        {"$sort": {"value": 1}},
    ]


async def get_filter_list(
    engine: DatabaseEngine,
    model_class: type[T],
    field: str,
) -> list[DistinctValueCount]:
    """Count occurrences of each distinct (flattened) value of ``field``.

    Returns:
        ``{value, count}`` pairs sorted ascending by value.
    """
    records = await engine.aggregate(model_class, build_distinct_pipeline(field))
    return [DistinctValueCount.model_validate(record) for record in records]
