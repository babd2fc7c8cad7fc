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
Approach Runner

Runs a single named approach against whatever dataset the store currently
holds and turns the outcome into an ApproachResult. One runner performs one
timed retrieval per call and keeps no state between calls, so a failure in
one approach never leaks into another.
"""

import logging
import time
from typing import Any, Callable, Sequence

from geobench.approaches import GEOHASH_PREFIX_PRECISION, METERS_PER_DEGREE, get_query
from geobench.errors import ApproachError
from geobench.store_base import ApproachResult, Coordinate, SpatialStore, TimedExecution

logger = logging.getLogger(__name__)


def build_parameters(
    coordinates: Sequence[Coordinate],
    radius: float,
    k: int,
    min_points: int,
) -> dict[str, Any]:
    """Build the named parameters shared by every approach query."""
    return {
        "lats": [float(c.latitude) for c in coordinates],
        "lons": [float(c.longitude) for c in coordinates],
        "radius": float(radius),
        "radius_deg": float(radius) / METERS_PER_DEGREE,
        "k": int(k),
        "min_points": int(min_points),
        "geohash_precision": GEOHASH_PREFIX_PRECISION,
    }


class ApproachRunner:
    """Executes one approach and measures it.

    Attributes:
        store: Connected backing store holding the prepared dataset
        approach: Approach name from geobench.approaches.APPROACHES
    """

    def __init__(
        self,
        store: SpatialStore,
        approach: str,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.store = store
        self.approach = approach
        self._clock = clock

    def _resolve_sql(self) -> str:
        try:
            sql = get_query(self.store.dialect, self.approach)
        except ValueError as e:
            raise ApproachError(self.approach, str(e)) from e
        if sql is None:
            raise ApproachError(
                self.approach,
                f"Approach '{self.approach}' is not supported by {self.store.name}",
            )
        return sql

    def run(
        self,
        coordinates: Sequence[Coordinate],
        radius: float,
        k: int,
        min_points: int,
    ) -> ApproachResult:
        """Run the approach once and return its timing and row count.

        Failures are logged and returned as a failed ApproachResult rather
        than raised. The reported time covers only the retrieval itself.
        """
        try:
            sql = self._resolve_sql()
        except ApproachError as e:
            logger.warning(str(e))
            return ApproachResult.failed(self.approach, str(e))

        params = build_parameters(coordinates, radius, k, min_points)
        logger.debug(
            f"Running {self.approach} for {len(coordinates)} points, radius {radius}m"
        )

        timer = TimedExecution(self._clock)
        try:
            with timer:
                records_found = self.store.fetch_count(sql, params)
        except Exception as e:
            logger.error(f"Approach {self.approach} failed: {e}")
            return ApproachResult.failed(self.approach, str(e), timer.elapsed_ms)

        logger.debug(
            f"Approach {self.approach} completed: {records_found} rows in {timer.elapsed_ms}ms"
        )

        return ApproachResult(
            approach=self.approach,
            success=True,
            time_taken_ms=timer.elapsed_ms,
            records_found=records_found,
        )
