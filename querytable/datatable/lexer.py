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

"""Filter string tokenizer.

Splits a filter string such as ``a(eq:1),b(eq:2);c(eq:3)`` into clause tokens
and ``,`` / ``;`` delimiter tokens. Argument lists are kept opaque, so commas
inside parentheses never split a clause. Fragments that are neither are
skipped; tokenizing never fails.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class TokenType(str, Enum):
    CLAUSE = "clause"
    DELIMITER = "delimiter"


AND_DELIMITER = ","
OR_DELIMITER = ";"


@dataclass(frozen=True)
class Token:
    """A lexical token of a filter string."""

    type: TokenType
    value: str
    position: int


# Delimiters are tried first at every position
TOKEN_PATTERNS: list[tuple[re.Pattern[str], TokenType]] = [
    (re.compile(r"[,;]"), TokenType.DELIMITER),
    (re.compile(r"[^()]+\([^)]+\)"), TokenType.CLAUSE),
]


def tokenize(terms: str) -> list[Token]:
    """Tokenize a filter string.

    Args:
        terms: Raw filter string

    Returns:
        Flat list of clause and delimiter tokens; empty when the string holds
        no clause at all.
    """
    tokens: list[Token] = []
    position = 0
    while position < len(terms):
        for pattern, token_type in TOKEN_PATTERNS:
            match = pattern.match(terms, position)
            if match:
                tokens.append(Token(token_type, match.group(0), position))
                position = match.end()
                break
        else:
            position += 1

    if not any(token.type == TokenType.CLAUSE for token in tokens):
        return []
    return tokens
