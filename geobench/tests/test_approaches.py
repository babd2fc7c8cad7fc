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
Tests for the approach query provider.

These tests verify:
1. Each dialect exposes its supported approaches as SQL
2. Unsupported approaches are absent rather than empty
3. Listing and validation helpers respect the canonical order
"""

import pytest

from geobench.approaches import (
    APPROACHES,
    get_queries,
    get_query,
    list_approaches,
    list_dialects,
    validate_approaches,
)
from geobench.errors import ConfigurationError


class TestGetQueries:
    """Tests for the get_queries() function."""

    def test_returns_dict_of_queries(self):
        """get_queries() returns a dictionary of approach name -> SQL."""
        queries = get_queries("PostGIS")

        assert isinstance(queries, dict)
        assert all(isinstance(v, str) for v in queries.values())

    def test_postgis_supports_every_approach(self):
        """PostGIS offers all eight approaches."""
        assert set(get_queries("PostGIS")) == set(APPROACHES)

    def test_duckdb_lacks_dbscan_and_kd_tree(self):
        """DuckDB has no clustering function or kd-tree index."""
        queries = get_queries("DuckDB")

        assert "dbscan" not in queries
        assert "kd-tree" not in queries
        assert set(queries) == set(APPROACHES) - {"dbscan", "kd-tree"}

    @pytest.mark.parametrize("dialect", ["PostGIS", "DuckDB"])
    def test_queries_select_from_entities(self, dialect):
        """Every query reads the entities table and joins the input points."""
        for name, sql in get_queries(dialect).items():
            assert "SELECT" in sql.upper(), f"{name} missing SELECT"
            assert "entities" in sql, f"{name} does not read entities"
            assert "input_points" in sql, f"{name} ignores the query points"

    def test_postgis_uses_pyformat_parameters(self):
        """PostGIS queries use psycopg2 named placeholders."""
        for sql in get_queries("PostGIS").values():
            assert "%(lats)s" in sql
            assert "$lats" not in sql

    def test_duckdb_uses_dollar_parameters(self):
        """DuckDB queries use $name placeholders."""
        for sql in get_queries("DuckDB").values():
            assert "$lats" in sql
            assert "%(lats)s" not in sql

    def test_unknown_dialect_raises_error(self):
        with pytest.raises(ValueError, match="Unknown dialect"):
            get_queries("Oracle")

    def test_dialect_case_sensitivity(self):
        """Dialect names must match exactly."""
        with pytest.raises(ValueError):
            get_queries("duckdb")


class TestGetQuery:
    """Tests for the get_query() function."""

    def test_returns_single_query(self):
        sql = get_query("PostGIS", "knn")

        assert sql is not None
        assert "LIMIT %(k)s" in sql

    def test_unsupported_approach_returns_none(self):
        assert get_query("DuckDB", "dbscan") is None

    def test_unknown_approach_returns_none(self):
        assert get_query("PostGIS", "quadtree") is None


class TestListing:
    """Tests for list_approaches() and list_dialects()."""

    def test_list_all_in_canonical_order(self):
        assert list_approaches() == list(APPROACHES)
        assert list_approaches()[0] == "geohash"

    def test_list_for_dialect_keeps_order(self):
        assert list_approaches("DuckDB") == [
            "geohash",
            "euclidean",
            "haversine",
            "knn",
            "r-tree",
            "postgis-native",
        ]

    def test_list_dialects(self):
        assert list_dialects() == ["DuckDB", "PostGIS"]


class TestValidateApproaches:
    """Tests for validate_approaches()."""

    def test_preserves_given_order(self):
        assert validate_approaches(["knn", "geohash"]) == ["knn", "geohash"]

    def test_unknown_name_rejected(self):
        with pytest.raises(ConfigurationError, match="quadtree"):
            validate_approaches(["geohash", "quadtree"])

    def test_empty_rejected(self):
        with pytest.raises(ConfigurationError, match="At least one"):
            validate_approaches([])

    def test_duplicates_rejected(self):
        with pytest.raises(ConfigurationError, match="more than once"):
            validate_approaches(["knn", "knn"])
