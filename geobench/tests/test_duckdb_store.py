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
Integration tests for the DuckDB store.

These tests verify the DuckDB store implementation works end-to-end:
1. Connection and disconnection
2. Dataset generation inside the database
3. Approach queries running against the generated table

Note: These tests require DuckDB and its spatial extension.
"""

import pytest

# Skip all tests if DuckDB is not installed
duckdb = pytest.importorskip("duckdb")

from geobench.approaches import list_approaches
from geobench.config import BenchmarkConfig
from geobench.fixture import DatasetFixture
from geobench.orchestrator import BenchmarkOrchestrator
from geobench.reporting import format_report
from geobench.store_base import BoundingBox, Coordinate
from geobench.stores.duckdb_store import DuckDBStore

BOX = BoundingBox(north=27.0, south=26.0, east=86.0, west=85.0)


@pytest.fixture
def store():
    store = DuckDBStore()
    try:
        store.connect()
    except ConnectionError as e:
        pytest.skip(f"DuckDB spatial extension unavailable: {e}")
    yield store
    store.close()


class TestDuckDBStoreProperties:
    """Tests for DuckDBStore property values."""

    def test_name_is_duckdb(self):
        assert DuckDBStore().name == "duckdb"

    def test_dialect_is_duckdb(self):
        assert DuckDBStore().dialect == "DuckDB"

    def test_defaults_to_in_memory_database(self):
        assert DuckDBStore()._database == ":memory:"


class TestDuckDBStoreConnection:
    """Tests for DuckDB connection management."""

    def test_connect_creates_empty_table(self, store):
        assert store._conn is not None
        assert store.count_records() == 0

    def test_close_releases_connection(self, store):
        store.close()

        assert store._conn is None

    def test_close_twice_is_safe(self, store):
        store.close()
        store.close()

    def test_queries_before_connect_raise(self):
        with pytest.raises(RuntimeError, match="connect"):
            DuckDBStore().count_records()

    def test_version_reported(self, store):
        assert store.get_version() != "unknown"


class TestDuckDBStoreDataset:
    """Tests for generating the synthetic dataset."""

    def test_insert_random_adds_exact_count(self, store):
        store.insert_random(250, BOX)

        assert store.count_records() == 250

    def test_points_inside_bounding_box(self, store):
        store.insert_random(200, BOX)

        row = store._conn.execute(
            "SELECT min(latitude), max(latitude), min(longitude), max(longitude) FROM entities"
        ).fetchone()
        assert BOX.south <= row[0] and row[1] <= BOX.north
        assert BOX.west <= row[2] and row[3] <= BOX.east

    def test_insert_without_clear_appends(self, store):
        store.insert_random(30, BOX)
        store.insert_random(20, BOX)

        assert store.count_records() == 50
        row = store._conn.execute("SELECT count(DISTINCT id) FROM entities").fetchone()
        assert row[0] == 50

    def test_clear_all_then_insert_replaces_rows(self, store):
        fixture = DatasetFixture(store, BOX)

        fixture.prepare(300)
        fixture.prepare(40)

        assert store.count_records() == 40

    def test_zero_volume(self, store):
        DatasetFixture(store, BOX).prepare(0)

        assert store.count_records() == 0


class TestDuckDBApproaches:
    """Tests running the approach queries against real data."""

    def test_every_supported_approach_finds_nothing_in_empty_table(self, store):
        approaches = list_approaches(store.dialect)
        orchestrator = BenchmarkOrchestrator(store, approaches, BOX)

        report = orchestrator.run_comparison(
            [Coordinate(26.5, 85.5), Coordinate(26.2, 85.1)], 1000.0, 10, 3, volumes=[0]
        )

        (trial,) = report.trials
        assert trial.error is None
        for name in approaches:
            result = trial.results[name]
            assert result.success, f"{name} failed: {result.error_message}"
            assert result.records_found == 0

    def test_knn_returns_k_per_point(self, store):
        orchestrator = BenchmarkOrchestrator(store, ["knn"], BOX)

        report = orchestrator.run_comparison(
            [Coordinate(26.5, 85.5), Coordinate(26.2, 85.1)], 1000.0, 10, 3, volumes=[500]
        )

        assert report.trials[0].results["knn"].records_found == 20

    def test_whole_box_radius_finds_everything(self, store):
        """A radius larger than the box matches every row for each point."""
        orchestrator = BenchmarkOrchestrator(store, ["haversine", "euclidean"], BOX)

        report = orchestrator.run_comparison(
            [Coordinate(26.5, 85.5)], 500_000.0, 10, 3, volumes=[100]
        )

        results = report.trials[0].results
        assert results["haversine"].records_found == 100
        assert results["euclidean"].records_found == 100

    def test_unsupported_approaches_recorded_as_failures(self, store):
        config = BenchmarkConfig(
            volumes=[10],
            point_set_sizes=[2],
            radii=[1000.0],
            approaches=["geohash", "dbscan", "kd-tree"],
            bounding_box=BOX,
            seed=3,
        )

        report = BenchmarkOrchestrator.from_config(store, config).run(config)

        results = report.trials[0].results
        assert results["geohash"].success
        assert not results["dbscan"].success
        assert "not supported" in results["kd-tree"].error_message
        assert "dbscan" in format_report(report)
