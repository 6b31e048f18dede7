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

"""
Pytest configuration and fixtures for querytable tests.

Async code is driven with ``asyncio.run`` inside synchronous tests, so no
asyncio plugin is needed.
"""

import asyncio
from collections.abc import Iterator

import pytest

from querytable.orm import InMemoryDatabaseEngine
from tests.utils.documents import Person, sample_people, scenario_people


def _seeded_engine(people: list[Person]) -> InMemoryDatabaseEngine:
    engine = InMemoryDatabaseEngine()

    async def seed() -> None:
        await engine.setup_models([Person])
        await engine.create_many(people)

    asyncio.run(seed())
    return engine


@pytest.fixture
def scenario_engine() -> Iterator[InMemoryDatabaseEngine]:
    """In-memory engine holding the three-document scenario collection."""
    yield _seeded_engine(scenario_people())


@pytest.fixture
def people_engine() -> Iterator[InMemoryDatabaseEngine]:
    """In-memory engine holding the sample people collection."""
    yield _seeded_engine(sample_people())
