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

"""Filter string structure builder.

Folds the token stream into an OR-list of AND-lists of clause tokens: a clause
preceded by ``;`` opens a new AND group, any other clause joins the current
one.
"""

from __future__ import annotations

from .lexer import OR_DELIMITER, Token, TokenType, tokenize

AndGroup = list[Token]
OrGroup = list[AndGroup]


def parse_tokens(tokens: list[Token]) -> OrGroup:
    """Build the two-level group structure from a token stream.

    Args:
        tokens: Output of ``tokenize``

    Returns:
        AND groups in order; never contains an empty group.
    """
    or_group: OrGroup = []
    and_group: AndGroup = []
    previous: Token | None = None
    for token in tokens:
        if token.type == TokenType.CLAUSE:
            starts_or = (
                previous is not None and previous.type == TokenType.DELIMITER and previous.value == OR_DELIMITER
            )
            if starts_or and and_group:
                or_group.append(and_group)
                and_group = []
            and_group.append(token)
        previous = token

    if and_group:
        or_group.append(and_group)
    return or_group


def parse_filter(terms: str) -> OrGroup:
    """Tokenize and group a filter string."""
    return parse_tokens(tokenize(terms))
