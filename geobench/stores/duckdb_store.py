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
DuckDB Backing Store Implementation

This module provides a DuckDB implementation of the SpatialStore interface.
DuckDB is the default store due to its:
- In-process operation (no external server required)
- Built-in spatial extension with an R-tree index
- Fast bulk generation of random rows with range()
"""

import logging
import re
from typing import Any, Optional

from geobench.store_base import ENTITIES_TABLE, BoundingBox, SpatialStore

logger = logging.getLogger(__name__)

_PARAM_PATTERN = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")

# Geohash precision of the stored column; queries match on shorter prefixes
STORED_GEOHASH_PRECISION = 8


class DuckDBStore(SpatialStore):
    """DuckDB implementation of the backing store.

    Points live in a plain table with a GEOMETRY column in [latitude,
    longitude] axis order and a precomputed geohash. The R-tree index is
    built after the first load into a cleared table, since bulk loading into
    an indexed table is much slower than indexing afterwards.

    Attributes:
        _conn: DuckDB connection object
        _database: Database file path, or ":memory:"
    """

    def __init__(self, dsn: Optional[str] = None) -> None:
        """Initialize DuckDB store.

        Args:
            dsn: Database file to open; an in-memory database when omitted
        """
        self._conn: Optional[Any] = None
        self._database: str = dsn or ":memory:"

    @property
    def name(self) -> str:
        """Return store identifier."""
        return "duckdb"

    @property
    def dialect(self) -> str:
        """Return SQL dialect for approach queries."""
        return "DuckDB"

    def _require_connection(self) -> Any:
        if self._conn is None:
            raise RuntimeError("Connection not established. Call connect() first.")
        return self._conn

    def connect(self) -> None:
        """Open the DuckDB database, load the spatial extension, create the table.

        Raises:
            ImportError: If duckdb package is not installed
            ConnectionError: If the database or spatial extension cannot be opened
        """
        try:
            import duckdb
        except ImportError as e:
            raise ImportError(
                "DuckDB is required for this store. "
                "Install it with: pip install duckdb"
            ) from e

        logger.info(f"Opening DuckDB database {self._database}")
        try:
            self._conn = duckdb.connect(self._database)
        except Exception as e:
            raise ConnectionError(f"Failed to open DuckDB database {self._database}: {e}") from e

        logger.info("Loading DuckDB spatial extension")
        try:
            self._conn.execute("INSTALL spatial;")
            self._conn.execute("LOAD spatial;")
        except Exception as e:
            self.close()
            raise ConnectionError(f"Failed to load DuckDB spatial extension: {e}") from e

        self._create_table()
        logger.info("DuckDB connection established with spatial extension")

    def _create_table(self) -> None:
        self._require_connection().execute(
            f"""
            CREATE OR REPLACE TABLE {ENTITIES_TABLE} (
                id BIGINT PRIMARY KEY,
                latitude DOUBLE NOT NULL,
                longitude DOUBLE NOT NULL,
                geom GEOMETRY NOT NULL,
                geohash VARCHAR NOT NULL
            )
            """
        )

    def clear_all(self) -> None:
        """Drop all rows by recreating the table, which also drops its index."""
        logger.debug(f"Clearing table '{ENTITIES_TABLE}'")
        self._create_table()

    def insert_random(self, count: int, box: BoundingBox) -> None:
        """Append ``count`` random points generated inside DuckDB and index them."""
        conn = self._require_connection()
        logger.debug(f"Inserting {count:,} random points into '{ENTITIES_TABLE}'")

        conn.execute(
            f"""
            INSERT INTO {ENTITIES_TABLE}
            SELECT
                (SELECT coalesce(max(id) + 1, 0) FROM {ENTITIES_TABLE}) + i AS id,
                lat AS latitude,
                lon AS longitude,
                ST_Point(lat, lon) AS geom,
                ST_GeoHash(ST_Point(lon, lat), {STORED_GEOHASH_PRECISION}) AS geohash
            FROM (
                SELECT
                    i,
                    $south + random() * ($north - $south) AS lat,
                    $west + random() * ($east - $west) AS lon
                FROM range($count) t(i)
            )
            """,
            {
                "count": count,
                "north": box.north,
                "south": box.south,
                "east": box.east,
                "west": box.west,
            },
        )
        conn.execute(
            f"CREATE INDEX IF NOT EXISTS {ENTITIES_TABLE}_geom_rtree "
            f"ON {ENTITIES_TABLE} USING RTREE (geom)"
        )

    def count_records(self) -> int:
        row = self._require_connection().execute(
            f"SELECT COUNT(*) FROM {ENTITIES_TABLE}"
        ).fetchone()
        return int(row[0])

    def fetch_count(self, sql: str, params: dict[str, Any]) -> int:
        """Execute a query and count the rows it returns.

        DuckDB rejects named parameters that the statement does not use, so
        only the referenced ones are bound.
        """
        conn = self._require_connection()
        referenced = set(_PARAM_PATTERN.findall(sql))
        bound = {key: value for key, value in params.items() if key in referenced}
        rows = conn.execute(sql, bound).fetchall()
        return len(rows)

    def close(self) -> None:
        """Close DuckDB connection and release resources."""
        if self._conn is not None:
            logger.info("Closing DuckDB connection")
            self._conn.close()
            self._conn = None

    def warmup(self) -> None:
        """Run a simple spatial query to trigger lazy initialization."""
        if self._conn is None:
            return

        logger.debug("Running warmup query")
        try:
            self._conn.execute("SELECT 1").fetchall()
            self._conn.execute(
                "SELECT ST_Distance_Sphere(ST_Point(0, 0), ST_Point(0, 1))"
            ).fetchall()
        except Exception as e:
            logger.warning(f"Warmup query failed: {e}")

    def get_version(self) -> str:
        """Return DuckDB version string."""
        if self._conn is None:
            return "unknown"

        try:
            result = self._conn.execute("SELECT version()").fetchone()
            return result[0] if result else "unknown"
        except Exception:
            return "unknown"
