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
GeoBench Proximity Benchmark Harness

Times different SQL formulations of "find stored points near these query
coordinates" (geohash prefixes, planar and spherical distance, DBSCAN, KNN,
bounding-box index probes) against a spatial database, over a range of
dataset volumes, query point counts and search radii.

To add support for a new database:
1. Create a new file in geobench/stores/ (e.g., spatialite_store.py)
2. Subclass SpatialStore from geobench.store_base
3. Implement all abstract methods: connect(), clear_all(), insert_random(),
   count_records(), fetch_count(), close()
4. Add a query class for its dialect in geobench/approaches.py
5. Register your store in geobench/stores/__init__.py
"""

from geobench.approaches import APPROACHES
from geobench.config import BenchmarkConfig
from geobench.orchestrator import BenchmarkOrchestrator
from geobench.reporting import BenchmarkReport, format_report, write_report
from geobench.store_base import ApproachResult, BoundingBox, Coordinate, SpatialStore
from geobench.stores import STORES, get_store

__all__ = [
    "APPROACHES",
    "ApproachResult",
    "BenchmarkConfig",
    "BenchmarkOrchestrator",
    "BenchmarkReport",
    "BoundingBox",
    "Coordinate",
    "SpatialStore",
    "STORES",
    "format_report",
    "get_store",
    "write_report",
]
