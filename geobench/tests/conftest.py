#  Licensed to the Apache Software Foundation (ASF) under one
#  or more contributor license agreements.  See the NOTICE file
#  distributed with this work for additional information
#  regarding copyright ownership.  The ASF licenses this file
#  to you under the Apache License, Version 2.0 (the
#  "License"); you may not use this file except in compliance
#  with the License.  You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing,
#  software distributed under the License is distributed on an
#  "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
#  KIND, either express or implied.  See the License for the
#  specific language governing permissions and limitations
#  under the License.

"""
Shared fixtures for the GeoBench test suite.

FakeStore implements the SpatialStore interface in memory so that the
orchestration, fixture and runner logic can be tested without a database.
It identifies which approach a query belongs to by matching the SQL text
against the PostGIS query catalogue.
"""

from typing import Any, Iterable, Optional, Union

import pytest

from geobench.approaches import QUERY_CLASSES, get_queries
from geobench.store_base import BoundingBox, SpatialStore


class FakeStore(SpatialStore):
    """In-memory stand-in for a backing store.

    Attributes:
        rows: Number of rows currently "stored"
        outcomes: Approach name to a fixed row count, or an exception to raise
        events: Ordered log of calls, e.g. ["clear", "insert:100", "fetch:knn"]
    """

    def __init__(
        self,
        outcomes: Optional[dict[str, Union[int, Exception]]] = None,
        fail_insert_for: Iterable[int] = (),
        dialect: str = "PostGIS",
    ) -> None:
        self._dialect = dialect
        self.outcomes = dict(outcomes or {})
        self.fail_insert_for = set(fail_insert_for)
        self.rows = 0
        self.events: list[str] = []
        self.connected = False
        self._sql_to_approach = (
            {sql: name for name, sql in get_queries(dialect).items()}
            if dialect in QUERY_CLASSES
            else {}
        )

    @property
    def name(self) -> str:
        return "fake"

    @property
    def dialect(self) -> str:
        return self._dialect

    def connect(self) -> None:
        self.connected = True

    def clear_all(self) -> None:
        self.events.append("clear")
        self.rows = 0

    def insert_random(self, count: int, box: BoundingBox) -> None:
        self.events.append(f"insert:{count}")
        if count in self.fail_insert_for:
            raise RuntimeError(f"disk full while inserting {count} rows")
        self.rows = count

    def count_records(self) -> int:
        return self.rows

    def fetch_count(self, sql: str, params: dict[str, Any]) -> int:
        approach = self._sql_to_approach[sql]
        self.events.append(f"fetch:{approach}")
        outcome = self.outcomes.get(approach)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            return self.rows
        return outcome

    def close(self) -> None:
        self.connected = False


class FakeClock:
    """Clock returning a scripted sequence of readings (in seconds)."""

    def __init__(self, readings: Iterable[float]) -> None:
        self._readings = iter(readings)

    def __call__(self) -> float:
        return next(self._readings)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def make_store():
    """Factory for FakeStore instances with scripted outcomes."""
    return FakeStore


@pytest.fixture
def make_clock():
    return FakeClock


@pytest.fixture
def small_box() -> BoundingBox:
    return BoundingBox(north=27.0, south=26.0, east=86.0, west=85.0)
