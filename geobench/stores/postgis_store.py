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
PostGIS Backing Store Implementation

This module provides a PostgreSQL/PostGIS implementation of the SpatialStore
interface using psycopg2. It is the only store that can run every approach:
DBSCAN clustering and the SP-GiST kd-tree index are PostGIS features.

The connection string defaults to the DATABASE_URL environment variable.
"""

import logging
import os
from typing import Any, Optional

from geobench.store_base import ENTITIES_TABLE, BoundingBox, SpatialStore

logger = logging.getLogger(__name__)

STORED_GEOHASH_PRECISION = 8

_SCHEMA_STATEMENTS = [
    "CREATE EXTENSION IF NOT EXISTS postgis",
    f"""
    CREATE TABLE IF NOT EXISTS {ENTITIES_TABLE} (
        id BIGSERIAL PRIMARY KEY,
        latitude DOUBLE PRECISION NOT NULL,
        longitude DOUBLE PRECISION NOT NULL,
        geom geometry(Point, 4326) NOT NULL,
        geohash TEXT NOT NULL
    )
    """,
    # R-tree over GiST, answers && and <->
    f"CREATE INDEX IF NOT EXISTS {ENTITIES_TABLE}_geom_gist ON {ENTITIES_TABLE} USING GIST (geom)",
    # kd-tree over SP-GiST, answers &&&
    f"""
    CREATE INDEX IF NOT EXISTS {ENTITIES_TABLE}_geom_spgist
        ON {ENTITIES_TABLE} USING SPGIST (geom spgist_geometry_ops_nd)
    """,
    f"""
    CREATE INDEX IF NOT EXISTS {ENTITIES_TABLE}_geohash_prefix
        ON {ENTITIES_TABLE} (geohash text_pattern_ops)
    """,
]


class PostGISStore(SpatialStore):
    """PostGIS implementation of the backing store.

    The connection runs in autocommit mode so that every insert is visible
    to the approach queries that follow it.

    Attributes:
        _conn: psycopg2 connection object
        _dsn: libpq connection string
    """

    def __init__(self, dsn: Optional[str] = None) -> None:
        self._conn: Optional[Any] = None
        self._dsn: Optional[str] = dsn or os.environ.get("DATABASE_URL")

    @property
    def name(self) -> str:
        return "postgis"

    @property
    def dialect(self) -> str:
        return "PostGIS"

    def _require_connection(self) -> Any:
        if self._conn is None:
            raise RuntimeError("Connection not established. Call connect() first.")
        return self._conn

    def _execute(self, sql: str, params: Optional[dict[str, Any]] = None) -> None:
        with self._require_connection().cursor() as cur:
            cur.execute(sql, params)

    def connect(self) -> None:
        """Connect to PostgreSQL and make sure PostGIS and the schema exist.

        Raises:
            ImportError: If psycopg2 is not installed
            ConnectionError: If the server cannot be reached or set up
        """
        try:
            import psycopg2
        except ImportError as e:
            raise ImportError(
                "psycopg2 is required for this store. "
                "Install it with: pip install psycopg2-binary"
            ) from e

        if not self._dsn:
            raise ConnectionError(
                "No PostgreSQL connection string given. Pass --dsn or set DATABASE_URL"
            )

        logger.info("Connecting to PostgreSQL")
        try:
            self._conn = psycopg2.connect(self._dsn)
            self._conn.autocommit = True
        except psycopg2.Error as e:
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}") from e

        try:
            for statement in _SCHEMA_STATEMENTS:
                self._execute(statement)
        except psycopg2.Error as e:
            self.close()
            raise ConnectionError(f"Failed to set up PostGIS schema: {e}") from e

        logger.info("PostgreSQL connection established with PostGIS")

    def clear_all(self) -> None:
        logger.debug(f"Truncating table '{ENTITIES_TABLE}'")
        self._execute(f"TRUNCATE TABLE {ENTITIES_TABLE} RESTART IDENTITY")

    def insert_random(self, count: int, box: BoundingBox) -> None:
        """Generate ``count`` random points server-side, then refresh statistics."""
        logger.debug(f"Inserting {count:,} random points into '{ENTITIES_TABLE}'")
        self._execute(
            f"""
            INSERT INTO {ENTITIES_TABLE} (latitude, longitude, geom, geohash)
            SELECT
                lat,
                lon,
                ST_SetSRID(ST_MakePoint(lon, lat), 4326),
                ST_GeoHash(ST_SetSRID(ST_MakePoint(lon, lat), 4326), {STORED_GEOHASH_PRECISION})
            FROM (
                SELECT
                    %(south)s + random() * (%(north)s - %(south)s) AS lat,
                    %(west)s + random() * (%(east)s - %(west)s) AS lon
                FROM generate_series(1, %(count)s)
            ) AS points
            """,
            {
                "count": count,
                "north": box.north,
                "south": box.south,
                "east": box.east,
                "west": box.west,
            },
        )
        self._execute(f"ANALYZE {ENTITIES_TABLE}")

    def count_records(self) -> int:
        with self._require_connection().cursor() as cur:
            cur.execute(f"SELECT COUNT(*) FROM {ENTITIES_TABLE}")
            return int(cur.fetchone()[0])

    def fetch_count(self, sql: str, params: dict[str, Any]) -> int:
        with self._require_connection().cursor() as cur:
            cur.execute(sql, params)
            return len(cur.fetchall())

    def close(self) -> None:
        if self._conn is not None:
            logger.info("Closing PostgreSQL connection")
            self._conn.close()
            self._conn = None

    def warmup(self) -> None:
        if self._conn is None:
            return

        logger.debug("Running warmup query")
        try:
            with self._conn.cursor() as cur:
                cur.execute("SELECT PostGIS_Version()")
                cur.fetchall()
        except Exception as e:
            logger.warning(f"Warmup query failed: {e}")

    def get_version(self) -> str:
        if self._conn is None:
            return "unknown"

        try:
            with self._conn.cursor() as cur:
                cur.execute("SELECT version(), PostGIS_Version()")
                pg_version, postgis_version = cur.fetchone()
            return f"{pg_version.split(',')[0]} / PostGIS {postgis_version}"
        except Exception:
            return "unknown"
