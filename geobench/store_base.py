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
Abstract Base Class for Spatial Backing Stores

This module defines the interface that every backing store must follow, along
with the small value types shared by the rest of the harness. A store owns one
connection to a spatial database and a single table of synthetic points
(``entities``). The harness never computes distances itself: each approach is a
query handed to the store, and the store only reports how many rows came back.

To implement a new store:

    from geobench.store_base import SpatialStore

    class MyStore(SpatialStore):
        '''Store implementation for MySpatialDB.'''

        @property
        def name(self) -> str:
            return "mydb"

        @property
        def dialect(self) -> str:
            return "MyDB"

        def connect(self) -> None:
            self._conn = mydb.connect(...)

        def clear_all(self) -> None:
            self._conn.execute("DELETE FROM entities")

        def insert_random(self, count: int, box: BoundingBox) -> None:
            self._conn.execute("INSERT INTO entities ...", ...)

        def count_records(self) -> int:
            return self._conn.execute("SELECT COUNT(*) FROM entities").fetchone()[0]

        def fetch_count(self, sql: str, params: dict[str, Any]) -> int:
            return len(self._conn.execute(sql, params).fetchall())

        def close(self) -> None:
            if self._conn:
                self._conn.close()

Then add a query class for the "MyDB" dialect in geobench/approaches.py and
register the store in geobench/stores/__init__.py.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Optional
import time

from geobench.errors import ConfigurationError


# Table holding the synthetic points in every store
ENTITIES_TABLE = "entities"


class Coordinate(NamedTuple):
    """A (latitude, longitude) pair in degrees."""

    latitude: float
    longitude: float


@dataclass(frozen=True)
class BoundingBox:
    """Rectangular geographic area in degrees.

    Boxes crossing the antimeridian are not supported, so ``east`` must be
    strictly greater than ``west``.
    """

    north: float
    south: float
    east: float
    west: float

    def __post_init__(self) -> None:
        if not self.north > self.south:
            raise ConfigurationError(
                f"Bounding box north ({self.north}) must be greater than south ({self.south})"
            )
        if not self.east > self.west:
            raise ConfigurationError(
                f"Bounding box east ({self.east}) must be greater than west ({self.west})"
            )
        if not (-90.0 <= self.south and self.north <= 90.0):
            raise ConfigurationError("Bounding box latitudes must lie within [-90, 90]")
        if not (-180.0 <= self.west and self.east <= 180.0):
            raise ConfigurationError("Bounding box longitudes must lie within [-180, 180]")

    def to_dict(self) -> dict[str, float]:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }


# Nepal
DEFAULT_BOUNDING_BOX = BoundingBox(
    north=30.42271698660863,
    south=26.347,
    east=88.20152567091282,
    west=80.05858693736828,
)


@dataclass
class ApproachResult:
    """Result of running one approach against the prepared dataset.

    Attributes:
        approach: Approach identifier (e.g., "geohash", "knn")
        success: Whether the retrieval completed
        time_taken_ms: Elapsed milliseconds; 0 when the approach failed
            before its timer started
        records_found: Number of rows returned (None if failed)
        error_message: Error description (if failed)
    """

    approach: str
    success: bool
    time_taken_ms: int = 0
    records_found: Optional[int] = None
    error_message: Optional[str] = None

    @classmethod
    def failed(cls, approach: str, error: str, time_taken_ms: int = 0) -> "ApproachResult":
        return cls(
            approach=approach,
            success=False,
            time_taken_ms=time_taken_ms,
            error_message=error,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for JSON serialization."""
        return {
            "approach": self.approach,
            "success": self.success,
            "time_taken_ms": self.time_taken_ms,
            "records_found": self.records_found,
            "error_message": self.error_message,
        }


class SpatialStore(ABC):
    """Abstract base class for spatial backing stores.

    The typical lifecycle is:
        1. store = MyStore()
        2. store.connect()
        3. for volume in volumes:
               store.clear_all()
               store.insert_random(volume, box)
               for sql in approach_queries:
                   store.fetch_count(sql, params)
        4. store.close()

    Context manager support is provided for automatic cleanup:
        with MyStore() as store:
            store.insert_random(...)
            store.fetch_count(...)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the short identifier for this store (e.g., 'duckdb', 'postgis').

        This is used in CLI arguments and result reporting.
        """
        pass

    @property
    @abstractmethod
    def dialect(self) -> str:
        """Return the SQL dialect name used to look up approach queries.

        This must match one of the dialect names in geobench/approaches.py:
        - "PostGIS"
        - "DuckDB"
        """
        pass

    @abstractmethod
    def connect(self) -> None:
        """Establish the connection and make sure the entities table exists.

        Raises:
            ConnectionError: If unable to reach the database or load its
                spatial extension
        """
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """Remove every previously inserted synthetic record."""
        pass

    @abstractmethod
    def insert_random(self, count: int, box: BoundingBox) -> None:
        """Insert ``count`` uniformly random points drawn from ``box``.

        Generation happens inside the database. The call must not return
        until the rows are committed and visible to subsequent queries.
        Rows are appended to whatever the table already holds; call
        clear_all() first to get a dataset of exactly ``count`` rows.
        """
        pass

    @abstractmethod
    def count_records(self) -> int:
        """Return the number of rows currently in the entities table."""
        pass

    @abstractmethod
    def fetch_count(self, sql: str, params: dict[str, Any]) -> int:
        """Execute a retrieval query and return the number of rows it produced.

        Args:
            sql: Query text in this store's dialect
            params: Named query parameters; keys the query does not
                reference must be tolerated

        Raises:
            Exception: Whatever the driver raises; callers record it
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the connection and any other resources."""
        pass

    def warmup(self) -> None:
        """Optional warmup routine before running benchmarks.

        Override this method to trigger lazy initialization such as loading
        spatial function catalogs.
        """
        pass

    def get_version(self) -> str:
        """Return the version string of the database, for the report."""
        return "unknown"

    def __enter__(self) -> "SpatialStore":
        """Context manager entry: connect to database."""
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit: close connection."""
        self.close()


class TimedExecution:
    """Context manager for timing code execution on a monotonic clock.

    Usage:
        with TimedExecution() as timer:
            # code to time
        print(f"Elapsed: {timer.elapsed_ms}ms")
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    @property
    def elapsed_ms(self) -> int:
        return max(0, round(self.elapsed * 1000))

    def __enter__(self) -> "TimedExecution":
        self.start_time = self._clock()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.end_time = self._clock()
        self.elapsed = self.end_time - self.start_time
