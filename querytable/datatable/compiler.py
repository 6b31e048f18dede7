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

"""Filter clause compiler.

Turns ``field(operation:value:flags,...)`` clause tokens into predicate tree
nodes and folds the parsed groups into ``OrFilter(AndFilter(...), ...)``.

Unknown operations, malformed clauses and invalid patterns are dropped
rather than reported; a filter that compiles to nothing yields ``None`` and
must be treated as no filter at all.

Examples:
    >>> to_mongo(compile_filter("age(gte:18);name(match:Bob,i)"))
    {'$or': [{'$and': [{'age': {'$gte': '18'}}]}, {'$and': [{'name': {'$regex': '^Bob$', '$options': 'i'}}]}]}
    >>> compile_filter("age(between:1:2)") is None
    True
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum

from querytable.orm.filters import (
    AndFilter,
    ComparisonFilter,
    ComparisonOperator,
    EqualsFilter,
    Filter,
    OrFilter,
    PatternFilter,
)

from .parser import OrGroup, parse_filter

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    """Operation names accepted inside a clause."""

    MATCH = "match"
    CONTAINS = "contains"
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

    @property
    def is_comparison(self) -> bool:
        return self not in (Operation.MATCH, Operation.CONTAINS)


CASE_INSENSITIVE_FLAG = "i"
PATTERN_FLAGS = frozenset({CASE_INSENSITIVE_FLAG})


@dataclass(frozen=True)
class Clause:
    """One operation applied to one field."""

    field: str
    operation: Operation
    args: tuple[str, ...]
    flags: str | None = None


_CLAUSE_SHAPE = re.compile(r"^([^()]*)\((.*)\)$", re.DOTALL)


def parse_clause(token: str) -> list[Clause]:
    """Split a clause token into one ``Clause`` per argument.

    An argument without ``:`` is an implicit ``match``. A bare pattern flag
    directly after a ``match``/``contains`` argument becomes that argument's
    flags, so ``name(match:Bob,i)`` equals ``name(match:Bob:i)``.
    """
    shape = _CLAUSE_SHAPE.match(token.strip())
    if shape is None:
        logger.debug("Dropping malformed filter clause %r", token)
        return []
    field = shape.group(1).strip()
    if not field:
        logger.debug("Dropping filter clause without a field %r", token)
        return []

    clauses: list[Clause] = []
    previous: Clause | None = None
    for argument in shape.group(2).split(","):
        pieces = [piece.strip() for piece in argument.split(":")]
        if len(pieces) <= 1:
            if (
                previous is not None
                and not previous.operation.is_comparison
                and previous.flags is None
                and pieces[0] in PATTERN_FLAGS
            ):
                clauses[-1] = previous = replace(previous, flags=pieces[0])
                continue
            pieces = [Operation.MATCH.value, pieces[0]]

        name, params = pieces[0], pieces[1:]
        try:
            operation = Operation(name)
        except ValueError:
            logger.debug("Dropping unknown filter operation %r on field %r", name, field)
            previous = None
            continue

        if operation.is_comparison:
            clause = Clause(field=field, operation=operation, args=tuple(params))
        else:
            clause = Clause(
                field=field,
                operation=operation,
                args=(params[0],),
                flags=params[1] if len(params) > 1 else None,
            )
        clauses.append(clause)
        previous = clause
    return clauses


def _pattern(field: str, pattern: str, case_insensitive: bool) -> PatternFilter | None:
    try:
        re.compile(pattern)
    except re.error as e:
        logger.debug("Dropping invalid pattern %r on field %r: %s", pattern, field, e)
        return None
    return PatternFilter(field=field, pattern=pattern, case_insensitive=case_insensitive)


def compile_clause(clause: Clause) -> Filter | None:
    """Compile one clause into a predicate node, or ``None`` when dropped."""
    case_insensitive = clause.flags == CASE_INSENSITIVE_FLAG
    if clause.operation == Operation.MATCH:
        value = clause.args[0]
        if case_insensitive:
            return _pattern(clause.field, f"^{value}$", True)
        return EqualsFilter(field=clause.field, value=value)
    if clause.operation == Operation.CONTAINS:
        return _pattern(clause.field, clause.args[0], case_insensitive)

    args = list(clause.args)
    return ComparisonFilter(
        field=clause.field,
        op=ComparisonOperator(clause.operation.value),
        value=args if len(args) > 1 else args[0],
    )


def assemble(or_group: OrGroup) -> OrFilter | None:
    """Compile grouped clause tokens into the OR-of-AND predicate.

    Returns:
        The predicate, or ``None`` when every group compiled to nothing.
    """
    and_filters: list[AndFilter] = []
    for and_group in or_group:
        compiled: list[Filter] = []
        for token in and_group:
            for clause in parse_clause(token.value):
                filter_ = compile_clause(clause)
                if filter_ is not None:
                    compiled.append(filter_)
        if compiled:
            and_filters.append(AndFilter(filters=compiled))

    if not and_filters:
        return None
    return OrFilter(filters=and_filters)


def compile_filter(terms: str | None) -> OrFilter | None:
    """Compile a filter string; ``None`` means apply no filter."""
    if not terms:
        return None
    compiled = assemble(parse_filter(terms))
    if compiled is None:
        logger.debug("Filter %r compiled to nothing; passing through", terms)
    else:
        logger.debug("Compiled filter %r into %d OR group(s)", terms, len(compiled.filters))
    return compiled
