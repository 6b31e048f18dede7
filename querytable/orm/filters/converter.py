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

"""Filter converters.

Translates the predicate tree into the native form of each backend: a
document-store query document (``to_mongo``), a SQLAlchemy expression
(``to_sqlalchemy``) and a Python predicate over in-memory records
(``evaluate``).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel
from sqlalchemy import ColumnElement, String, TypeDecorator, and_, false, literal, not_, or_, true
from sqlmodel import SQLModel

from .dsl import (
    AndFilter,
    ComparisonFilter,
    ComparisonOperator,
    EqualsFilter,
    Filter,
    FilterValue,
    OrFilter,
    PatternFilter,
    TextSearchFilter,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Shared helpers
# ============================================================================


def resolve_path(record: Mapping[str, Any], path: str) -> tuple[bool, Any]:
    """Resolve a dotted field path.

    Returns:
        ``(found, value)``; ``found`` is False when any path segment is missing.
    """
    current: Any = record
    for part in path.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        else:
            return False, None
    return True, current


def cast_value(value: Any, target: type | None) -> Any:
    """Cast a textual filter argument to the type of the stored value.

    Filter arguments always arrive as strings; the stored value's type decides
    how they compare. Values that do not cast cleanly are returned unchanged.
    """
    if not isinstance(value, str) or target is None or target is str:
        return value
    if target is bool:
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
        return value
    if target is int:
        try:
            return int(value)
        except ValueError:
            try:
                return float(value)
            except ValueError:
                return value
    if target is float:
        try:
            return float(value)
        except ValueError:
            return value
    if target is datetime:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    return value


def as_bool(value: FilterValue) -> bool:
    """Interpret an ``exists``-style flag."""
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "")
    return bool(value)


def _as_list(value: FilterValue) -> list[Any]:
    if isinstance(value, list):
        return list(value)
    return [value]


# ============================================================================
# Document-store query documents
# ============================================================================


def to_mongo(filter_: Filter) -> dict[str, Any]:
    """Convert a filter into a document-store query document.

    Examples:
        >>> to_mongo(ComparisonFilter.gte("age", "18"))
        {'age': {'$gte': '18'}}
        >>> to_mongo(PatternFilter(field="name", pattern="^Bob$", case_insensitive=True))
        {'name': {'$regex': '^Bob$', '$options': 'i'}}
    """
    if isinstance(filter_, EqualsFilter):
        return {filter_.field: filter_.value}
    if isinstance(filter_, PatternFilter):
        pattern: dict[str, Any] = {"$regex": filter_.pattern}
        if filter_.case_insensitive:
            pattern["$options"] = "i"
        return {filter_.field: pattern}
    if isinstance(filter_, ComparisonFilter):
        return {filter_.field: {f"${filter_.op.value}": filter_.value}}
    if isinstance(filter_, TextSearchFilter):
        return {"$text": {"$search": filter_.search, **filter_.options}}
    if isinstance(filter_, AndFilter):
        return {"$and": [to_mongo(sub_filter) for sub_filter in filter_.filters]}
    return {"$or": [to_mongo(sub_filter) for sub_filter in filter_.filters]}


# ============================================================================
# SQLAlchemy expressions
# ============================================================================


def to_sqlalchemy(
    filter_: Filter,
    model_class: type[SQLModel],
) -> ColumnElement[bool]:
    """Convert a filter into a SQLAlchemy boolean expression.

    Args:
        filter_: Predicate tree
        model_class: SQLModel class providing the columns

    Returns:
        SQLAlchemy ColumnElement[bool] expression

    Fields that are not columns of ``model_class`` (dotted paths included)
    behave like a field missing from every document.

    Raises:
        ValueError: If the operator has no SQL counterpart (``type``)
    """
    if isinstance(filter_, EqualsFilter):
        column = _get_column(model_class, filter_.field)
        if column is None:
            return false()
        return column == cast_value(filter_.value, _column_python_type(column))
    if isinstance(filter_, PatternFilter):
        column = _get_column(model_class, filter_.field)
        if column is None:
            return false()
        if not _is_string_column(column):
            logger.debug("Pattern on non-string column %r matches nothing", filter_.field)
            return false()
        return column.regexp_match(filter_.pattern, flags="i" if filter_.case_insensitive else None)
    if isinstance(filter_, ComparisonFilter):
        return _convert_comparison_filter(filter_, model_class)
    if isinstance(filter_, TextSearchFilter):
        return _convert_text_filter(filter_, model_class)
    if isinstance(filter_, AndFilter):
        if not filter_.filters:
            return literal(True)
        return and_(*[to_sqlalchemy(sub_filter, model_class) for sub_filter in filter_.filters])
    if not filter_.filters:
        return literal(False)
    return or_(*[to_sqlalchemy(sub_filter, model_class) for sub_filter in filter_.filters])


def _get_column(
    model_class: type[SQLModel],
    field_name: str,
) -> ColumnElement[Any] | None:
    if field_name not in model_class.__table__.columns:  # type: ignore[attr-defined]
        logger.debug("Field %r is not a column of %s; treating it as missing", field_name, model_class.__name__)
        return None

    column: ColumnElement[Any] = getattr(model_class, field_name)
    return column


def _is_string_column(column: ColumnElement[Any]) -> bool:
    column_type = column.type
    if isinstance(column_type, TypeDecorator):
        column_type = column_type.impl_instance
    return isinstance(column_type, String)


def _missing_field(filter_: ComparisonFilter) -> ColumnElement[bool]:
    op = filter_.op
    if op == ComparisonOperator.EXISTS:
        return false() if as_bool(filter_.value) else true()
    if op in (ComparisonOperator.NE, ComparisonOperator.NIN):
        return true()
    return false()


def _column_python_type(column: ColumnElement[Any]) -> type | None:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _convert_comparison_filter(
    filter_: ComparisonFilter,
    model_class: type[SQLModel],
) -> ColumnElement[bool]:
    op = filter_.op
    if op == ComparisonOperator.TYPE:
        raise ValueError(f"Unsupported operator for SQL backend: {op.value}")
    column = _get_column(model_class, filter_.field)
    if column is None:
        return _missing_field(filter_)
    target = _column_python_type(column)

    if op == ComparisonOperator.EXISTS:
        return column.is_not(None) if as_bool(filter_.value) else column.is_(None)
    if op in (ComparisonOperator.IN, ComparisonOperator.NIN):
        values = [cast_value(v, target) for v in _as_list(filter_.value)]
        return column.in_(values) if op == ComparisonOperator.IN else column.not_in(values)

    value = cast_value(filter_.value, target)
    if op == ComparisonOperator.EQ:
        return column == value
    elif op == ComparisonOperator.NE:
        return column != value
    elif op == ComparisonOperator.GT:
        return column > value
    elif op == ComparisonOperator.GTE:
        return column >= value
    elif op == ComparisonOperator.LT:
        return column < value
    elif op == ComparisonOperator.LTE:
        return column <= value
    raise ValueError(f"Unsupported operator for SQL backend: {op.value}")


def _convert_text_filter(
    filter_: TextSearchFilter,
    model_class: type[SQLModel],
) -> ColumnElement[bool]:
    case_sensitive = _text_case_sensitive(filter_)
    columns = [
        column
        for column in model_class.__table__.columns  # type: ignore[attr-defined]
        if _is_string_column(column)
    ]
    terms, negated = _split_search(filter_.search)
    if not columns or not terms:
        return literal(False)

    def _matches(term: str) -> ColumnElement[bool]:
        pattern = f"%{term}%"
        return or_(*[column.like(pattern) if case_sensitive else column.ilike(pattern) for column in columns])

    expression = or_(*[_matches(term) for term in terms])
    if negated:
        expression = and_(expression, *[not_(_matches(term)) for term in negated])
    return expression


# ============================================================================
# Python evaluation
# ============================================================================


def evaluate(
    filter_: Filter,
    record: Mapping[str, Any] | BaseModel,
) -> bool:
    """Evaluate a filter against a single record.

    Array fields match when any element matches; the negated operators
    (``ne``, ``nin``) require that no element matches.

    Examples:
        >>> evaluate(ComparisonFilter.gte("age", "18"), {"age": 21})
        True
        >>> evaluate(EqualsFilter(field="tags", value="x"), {"tags": ["x", "y"]})
        True
    """
    record_dict: Mapping[str, Any]
    if isinstance(record, BaseModel):
        record_dict = record.model_dump()
    else:
        record_dict = record

    if isinstance(filter_, EqualsFilter):
        found, field_value = resolve_path(record_dict, filter_.field)
        return _equals(field_value if found else None, filter_.value)
    if isinstance(filter_, PatternFilter):
        return _evaluate_pattern_filter(filter_, record_dict)
    if isinstance(filter_, ComparisonFilter):
        return _evaluate_comparison_filter(filter_, record_dict)
    if isinstance(filter_, TextSearchFilter):
        return _evaluate_text_filter(filter_, record_dict)
    if isinstance(filter_, AndFilter):
        return all(evaluate(sub_filter, record_dict) for sub_filter in filter_.filters)
    return any(evaluate(sub_filter, record_dict) for sub_filter in filter_.filters)


def _scalar_equals(candidate: Any, filter_value: Any) -> bool:
    return candidate == cast_value(filter_value, type(candidate) if candidate is not None else None)


def _equals(field_value: Any, filter_value: Any) -> bool:
    if isinstance(field_value, list):
        if field_value == filter_value:
            return True
        return any(_scalar_equals(element, filter_value) for element in field_value)
    return _scalar_equals(field_value, filter_value)


def _safe_compare(a: object, b: object, op: ComparisonOperator) -> bool:
    try:
        if op == ComparisonOperator.GT:
            return a > b  # type: ignore[operator]
        elif op == ComparisonOperator.GTE:
            return a >= b  # type: ignore[operator]
        elif op == ComparisonOperator.LT:
            return a < b  # type: ignore[operator]
        elif op == ComparisonOperator.LTE:
            return a <= b  # type: ignore[operator]
        return False
    except TypeError:
        return False


def _candidates(field_value: Any) -> list[Any]:
    return list(field_value) if isinstance(field_value, list) else [field_value]


def _evaluate_comparison_filter(
    filter_: ComparisonFilter,
    record: Mapping[str, Any],
) -> bool:
    found, field_value = resolve_path(record, filter_.field)
    op = filter_.op
    filter_value = filter_.value

    if op == ComparisonOperator.EXISTS:
        return found == as_bool(filter_value)
    if op == ComparisonOperator.TYPE:
        if not found:
            return False
        return any(_matches_type(field_value, str(type_name)) for type_name in _as_list(filter_value))
    if op == ComparisonOperator.EQ:
        return _equals(field_value, filter_value)
    if op == ComparisonOperator.NE:
        return not _equals(field_value, filter_value)
    if op in (ComparisonOperator.IN, ComparisonOperator.NIN):
        matched = any(_equals(field_value, value) for value in _as_list(filter_value))
        return matched if op == ComparisonOperator.IN else not matched

    if field_value is None or filter_value is None:
        return False
    for candidate in _candidates(field_value):
        if candidate is None:
            continue
        if _safe_compare(candidate, cast_value(filter_value, type(candidate)), op):
            return True
    return False


def _evaluate_pattern_filter(
    filter_: PatternFilter,
    record: Mapping[str, Any],
) -> bool:
    found, field_value = resolve_path(record, filter_.field)
    if not found:
        return False
    regex = re.compile(filter_.pattern, re.IGNORECASE if filter_.case_insensitive else 0)
    return any(isinstance(candidate, str) and regex.search(candidate) is not None for candidate in _candidates(field_value))


_NUMBER_TYPES = (int, float, Decimal)

_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "double": lambda v: isinstance(v, float),
    "string": lambda v: isinstance(v, str),
    "object": lambda v: isinstance(v, Mapping),
    "array": lambda v: isinstance(v, list),
    "bool": lambda v: isinstance(v, bool),
    "date": lambda v: isinstance(v, datetime),
    "null": lambda v: v is None,
    "int": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "long": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "decimal": lambda v: isinstance(v, Decimal),
    "number": lambda v: isinstance(v, _NUMBER_TYPES) and not isinstance(v, bool),
}

# Numeric BSON type codes accepted in place of the alias
_TYPE_CODES = {
    "1": "double",
    "2": "string",
    "3": "object",
    "4": "array",
    "8": "bool",
    "9": "date",
    "10": "null",
    "16": "int",
    "18": "long",
    "19": "decimal",
}


def _matches_type(field_value: Any, type_name: str) -> bool:
    name = _TYPE_CODES.get(type_name, type_name)
    check = _TYPE_CHECKS.get(name)
    if check is None:
        return False
    if check(field_value):
        return True
    if isinstance(field_value, list) and name != "array":
        return any(check(element) for element in field_value)
    return False


_SEARCH_TOKEN = re.compile(r'(-?)"([^"]*)"|(-?)(\S+)')
_WORD = re.compile(r"\w+")


def _text_case_sensitive(filter_: TextSearchFilter) -> bool:
    options = filter_.options
    return bool(options.get("$caseSensitive", options.get("caseSensitive", False)))


def _split_search(search: str) -> tuple[list[str], list[str]]:
    """Split a search string into positive and negated terms.

    Quoted phrases are kept whole; a leading ``-`` negates a term or phrase.
    """
    terms: list[str] = []
    negated: list[str] = []
    for match in _SEARCH_TOKEN.finditer(search):
        minus = match.group(1) or match.group(3)
        term = match.group(2) if match.group(2) is not None else match.group(4)
        if not term or term == "-":
            continue
        (negated if minus else terms).append(term)
    return terms, negated


def _iter_strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _iter_strings(item)
    elif isinstance(value, list):
        for item in value:
            yield from _iter_strings(item)


def _evaluate_text_filter(
    filter_: TextSearchFilter,
    record: Mapping[str, Any],
) -> bool:
    case_sensitive = _text_case_sensitive(filter_)
    text = " ".join(_iter_strings(record))
    if not case_sensitive:
        text = text.lower()
    words = set(_WORD.findall(text))

    def _contains(term: str) -> bool:
        needle = term if case_sensitive else term.lower()
        if " " in needle or not _WORD.fullmatch(needle):
            return needle in text
        return needle in words

    terms, negated = _split_search(filter_.search)
    if not terms:
        return False
    if any(_contains(term) for term in negated):
        return False
    return any(_contains(term) for term in terms)
