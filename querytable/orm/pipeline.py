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

"""In-process aggregation pipeline executor.

Runs the subset of document-store aggregation stages the data-table layer
issues (``$project``, ``$unwind``, ``$group`` with ``$sum``, ``$sort``) over
plain Python records. Used by engines whose backend has no native pipeline.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from .filters import resolve_path

Record = dict[str, Any]
Stage = Mapping[str, Any]


def sort_key(value: Any) -> tuple[Any, ...]:
    """Ordering key following the document store's cross-type order.

    null < numbers < strings < objects < arrays < booleans < dates
    """
    if value is None:
        return (0,)
    if isinstance(value, bool):
        return (5, value)
    if isinstance(value, (int, float, Decimal)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    if isinstance(value, Mapping):
        return (3, tuple((k, sort_key(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return (4, tuple(sort_key(v) for v in value))
    if isinstance(value, datetime):
        return (6, value)
    return (7, str(value))


def _group_key(value: Any) -> Any:
    # Hashable identity; keeps True apart from 1 but 1 together with 1.0
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float, Decimal)):
        return ("number", value)
    if isinstance(value, Mapping):
        return ("object", tuple((k, _group_key(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return ("array", tuple(_group_key(v) for v in value))
    return (type(value).__name__, value)


def _expression(record: Mapping[str, Any], expr: Any) -> tuple[bool, Any]:
    if isinstance(expr, str) and expr.startswith("$"):
        return resolve_path(record, expr[1:])
    return True, expr


def _with_path(record: Mapping[str, Any], path: str, value: Any) -> Record:
    head, _, rest = path.partition(".")
    updated = dict(record)
    if rest:
        child = record.get(head)
        updated[head] = _with_path(child if isinstance(child, Mapping) else {}, rest, value)
    else:
        updated[head] = value
    return updated


def _project(records: list[Record], spec: Mapping[str, Any]) -> list[Record]:
    projected_records: list[Record] = []
    for record in records:
        projected: Record = {}
        if "_id" in record and "_id" not in spec:
            projected["_id"] = record["_id"]
        for key, expr in spec.items():
            if isinstance(expr, (bool, int)):
                if not expr:
                    continue
                found, value = resolve_path(record, key)
            elif isinstance(expr, str) and expr.startswith("$"):
                found, value = resolve_path(record, expr[1:])
            else:
                raise ValueError(f"Unsupported $project expression for '{key}': {expr!r}")
            if found:
                projected[key] = value
        projected_records.append(projected)
    return projected_records


def _unwind(records: list[Record], spec: Any) -> list[Record]:
    if isinstance(spec, Mapping):
        path = str(spec["path"])
        preserve = bool(spec.get("preserveNullAndEmptyArrays", False))
    else:
        path = str(spec)
        preserve = False
    if not path.startswith("$"):
        raise ValueError(f"$unwind path must start with '$': {path}")
    path = path[1:]

    unwound: list[Record] = []
    for record in records:
        found, value = resolve_path(record, path)
        if not found or value is None or value == []:
            if preserve:
                unwound.append(record)
            continue
        if isinstance(value, list):
            unwound.extend(_with_path(record, path, element) for element in value)
        else:
            unwound.append(record)
    return unwound


def _group(records: list[Record], spec: Mapping[str, Any]) -> list[Record]:
    if "_id" not in spec:
        raise ValueError("$group requires an _id expression")
    accumulators = {name: acc for name, acc in spec.items() if name != "_id"}
    for name, acc in accumulators.items():
        if not isinstance(acc, Mapping) or list(acc) != ["$sum"]:
            raise ValueError(f"Unsupported $group accumulator for '{name}': {acc!r}")

    groups: dict[Any, Record] = {}
    for record in records:
        found, group_id = _expression(record, spec["_id"])
        if not found:
            group_id = None
        key = _group_key(group_id)
        group = groups.get(key)
        if group is None:
            group = {"_id": group_id, **{name: 0 for name in accumulators}}
            groups[key] = group
        for name, acc in accumulators.items():
            found, value = _expression(record, acc["$sum"])
            if found and isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
                group[name] += value
    return list(groups.values())


def _sort(records: list[Record], spec: Mapping[str, Any]) -> list[Record]:
    ordered = list(records)
    # Stable sorts applied from the least significant key
    for key, direction in reversed(list(spec.items())):
        ordered.sort(key=lambda r: sort_key(resolve_path(r, key)[1]), reverse=int(direction) < 0)
    return ordered


_STAGES: dict[str, Callable[[list[Record], Any], list[Record]]] = {
    "$project": _project,
    "$unwind": _unwind,
    "$group": _group,
    "$sort": _sort,
}


def run_pipeline(records: Iterable[Mapping[str, Any]], pipeline: Sequence[Stage]) -> list[Record]:
    """Run an aggregation pipeline over records.

    Args:
        records: Input documents
        pipeline: Stages in document-store form, one operator per stage

    Returns:
        Output documents of the last stage

    Raises:
        ValueError: If a stage or expression is not supported
    """
    documents: list[Record] = [dict(record) for record in records]
    for stage in pipeline:
        if len(stage) != 1:
            raise ValueError(f"Pipeline stage must have exactly one operator: {dict(stage)!r}")
        ((name, spec),) = stage.items()
        handler = _STAGES.get(name)
        if handler is None:
            raise ValueError(f"Unsupported pipeline stage: {name}")
        documents = handler(documents, spec)
    return documents
