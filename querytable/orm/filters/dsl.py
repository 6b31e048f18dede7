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

"""Predicate tree models.

Serializable filter nodes produced by the data-table filter compiler and
consumed by the database engines. Each backend translates the tree through a
single function in ``converter``.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

FilterValue = str | int | float | bool | None | list[str | int | float]


class ComparisonOperator(str, Enum):
    """Document-store comparison operators (rendered with a ``$`` prefix)."""

    LTE = "lte"
    LT = "lt"
    GT = "gt"
    GTE = "gte"
    IN = "in"
    NIN = "nin"
    EQ = "eq"
    NE = "ne"
    EXISTS = "exists"
    TYPE = "type"


class FilterBase(BaseModel):
    """Base class for predicate tree nodes."""

    pass


class EqualsFilter(FilterBase):
    """Exact equality against a literal value."""

    type: Literal["equals"] = "equals"
    field: str
    value: FilterValue


class PatternFilter(FilterBase):
    """Regular-expression match over a field."""

    type: Literal["pattern"] = "pattern"
    field: str
    pattern: str
    case_insensitive: bool = False


class ComparisonFilter(FilterBase):
    """Single field comparison carrying a document-store operator."""

    type: Literal["comparison"] = "comparison"
    field: str
    op: ComparisonOperator
    value: FilterValue

    @classmethod
    def eq(cls, field: str, value: FilterValue) -> "ComparisonFilter":
        return cls(field=field, op=ComparisonOperator.EQ, value=value)

    @classmethod
    def ne(cls, field: str, value: FilterValue) -> "ComparisonFilter":
        return cls(field=field, op=ComparisonOperator.NE, value=value)

    @classmethod
    def gt(cls, field: str, value: FilterValue) -> "ComparisonFilter":
        return cls(field=field, op=ComparisonOperator.GT, value=value)

    @classmethod
    def gte(cls, field: str, value: FilterValue) -> "ComparisonFilter":
        return cls(field=field, op=ComparisonOperator.GTE, value=value)

    @classmethod
    def lt(cls, field: str, value: FilterValue) -> "ComparisonFilter":
        return cls(field=field, op=ComparisonOperator.LT, value=value)

    @classmethod
    def lte(cls, field: str, value: FilterValue) -> "ComparisonFilter":
        return cls(field=field, op=ComparisonOperator.LTE, value=value)

    @classmethod
    def in_(cls, field: str, value: FilterValue) -> "ComparisonFilter":
        return cls(field=field, op=ComparisonOperator.IN, value=value)


class TextSearchFilter(FilterBase):
    """Free-text search across the document's text fields.

    ``options`` is passed through to the store's text operator unchanged
    (``$language``, ``$caseSensitive``, ``$diacriticSensitive``).
    """

    type: Literal["text"] = "text"
    search: str
    options: dict[str, Any] = Field(default_factory=dict)


class AndFilter(FilterBase):
    """Logical AND of child filters."""

    type: Literal["and"] = "and"
    filters: Sequence["EqualsFilter | PatternFilter | ComparisonFilter | TextSearchFilter | AndFilter | OrFilter"]


class OrFilter(FilterBase):
    """Logical OR of child filters."""

    type: Literal["or"] = "or"
    filters: Sequence["EqualsFilter | PatternFilter | ComparisonFilter | TextSearchFilter | AndFilter | OrFilter"]


Filter = EqualsFilter | PatternFilter | ComparisonFilter | TextSearchFilter | AndFilter | OrFilter

# Resolve forward references for the nested unions
AndFilter.model_rebuild()
OrFilter.model_rebuild()
