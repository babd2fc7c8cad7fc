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
Approach Query Provider for GeoBench

Every approach answers the same question, "which stored points are near one of
these query coordinates", with a different SQL formulation. This module holds
the formulations for each supported dialect and looks them up by name.

All queries receive the same named parameters:
    lats, lons          parallel arrays of query coordinates (degrees)
    radius              search radius in meters
    radius_deg          the radius converted to degrees of latitude
    k                   neighbours per query point (knn)
    min_points          core point threshold (dbscan)
    geohash_precision   prefix length used by the geohash approach

A dialect may omit approaches its database cannot express; the runner then
records the approach as failed for that store.
"""

from typing import Iterable, Optional

from geobench.errors import ConfigurationError

# Full set of approaches, in the order they run by default
APPROACHES: tuple[str, ...] = (
    "geohash",
    "euclidean",
    "haversine",
    "dbscan",
    "knn",
    "r-tree",
    "kd-tree",
    "postgis-native",
)

# Meters per degree of latitude, used for the planar and bounding-box approaches
METERS_PER_DEGREE = 111320.0

GEOHASH_PREFIX_PRECISION = 4


class PostGISApproachQueries:
    """Approach formulations for PostgreSQL with the PostGIS extension."""

    _INPUT_POINTS = """
        WITH input_points AS (
            SELECT ip.lat, ip.lon, ip.idx
            FROM unnest(%(lats)s::float8[], %(lons)s::float8[])
                WITH ORDINALITY AS ip(lat, lon, idx)
        )"""

    def geohash(self) -> str:
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON e.geohash LIKE ST_GeoHash(
                 ST_SetSRID(ST_MakePoint(ip.lon, ip.lat), 4326),
                 %(geohash_precision)s
             ) || '%%';
        """

    def euclidean(self) -> str:
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON power(e.latitude - ip.lat, 2) + power(e.longitude - ip.lon, 2)
             <= power(%(radius_deg)s, 2);
        """

    def haversine(self) -> str:
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON ST_DistanceSphere(e.geom, ST_SetSRID(ST_MakePoint(ip.lon, ip.lat), 4326))
             <= %(radius)s;
        """

    def dbscan(self) -> str:
        return self._INPUT_POINTS + """,
        nearby_points AS (
            SELECT e.id, e.geom
            FROM entities e
            JOIN input_points ip
              ON ST_DWithin(
                     e.geom::geography,
                     ST_SetSRID(ST_MakePoint(ip.lon, ip.lat), 4326)::geography,
                     %(radius)s
                 )
        ),
        clusters AS (
            SELECT ST_ClusterDBSCAN(geom, eps := %(radius_deg)s, minpoints := %(min_points)s)
                       OVER () AS cid,
                   id
            FROM nearby_points
        )
        SELECT id FROM clusters WHERE cid IS NOT NULL;
        """

    def knn(self) -> str:
        return self._INPUT_POINTS + """
        SELECT nn.id, nn.distance
        FROM input_points ip
        CROSS JOIN LATERAL (
            SELECT e.id,
                   ST_DistanceSphere(e.geom, ST_SetSRID(ST_MakePoint(ip.lon, ip.lat), 4326))
                       AS distance
            FROM entities e
            ORDER BY e.geom <-> ST_SetSRID(ST_MakePoint(ip.lon, ip.lat), 4326)
            LIMIT %(k)s
        ) nn;
        """

    def r_tree(self) -> str:
        # && is answered by the GiST (R-tree) index on geom
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON e.geom && ST_Expand(
                 ST_SetSRID(ST_MakePoint(ip.lon, ip.lat), 4326),
                 %(radius_deg)s
             );
        """

    def kd_tree(self) -> str:
        # &&& is answered by the SP-GiST n-D (kd-tree) index on geom
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON e.geom &&& ST_Expand(
                 ST_SetSRID(ST_MakePoint(ip.lon, ip.lat), 4326),
                 %(radius_deg)s
             );
        """

    def postgis_native(self) -> str:
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON ST_DWithin(
                 e.geom::geography,
                 ST_SetSRID(ST_MakePoint(ip.lon, ip.lat), 4326)::geography,
                 %(radius)s
             );
        """

    def queries(self) -> dict[str, str]:
        return {
            "geohash": self.geohash(),
            "euclidean": self.euclidean(),
            "haversine": self.haversine(),
            "dbscan": self.dbscan(),
            "knn": self.knn(),
            "r-tree": self.r_tree(),
            "kd-tree": self.kd_tree(),
            "postgis-native": self.postgis_native(),
        }


class DuckDBApproachQueries:
    """Approach formulations for DuckDB with the spatial extension.

    Points are stored in [latitude, longitude] axis order, which is what the
    ST_Distance_Sphere and ST_Distance_Spheroid functions expect. The geohash
    column is computed from the conventional [longitude, latitude] order.

    DuckDB has no DBSCAN window function and no kd-tree index, so those two
    approaches are not offered.
    """

    _INPUT_POINTS = """
        WITH input_points AS (
            SELECT
                unnest($lats::DOUBLE[]) AS lat,
                unnest($lons::DOUBLE[]) AS lon,
                unnest(range(len($lats::DOUBLE[]))) AS idx
        )"""

    def geohash(self) -> str:
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON starts_with(
                 e.geohash,
                 ST_GeoHash(ST_Point(ip.lon, ip.lat), $geohash_precision)
             );
        """

    def euclidean(self) -> str:
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON power(e.latitude - ip.lat, 2) + power(e.longitude - ip.lon, 2)
             <= power($radius_deg, 2);
        """

    def haversine(self) -> str:
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON ST_Distance_Sphere(e.geom, ST_Point(ip.lat, ip.lon)) <= $radius;
        """

    def knn(self) -> str:
        return self._INPUT_POINTS + """,
        ranked AS (
            SELECT e.id,
                   ST_Distance_Sphere(e.geom, ST_Point(ip.lat, ip.lon)) AS distance,
                   row_number() OVER (
                       PARTITION BY ip.idx
                       ORDER BY ST_Distance_Sphere(e.geom, ST_Point(ip.lat, ip.lon))
                   ) AS rn
            FROM entities e
            CROSS JOIN input_points ip
        )
        SELECT id, distance FROM ranked WHERE rn <= $k;
        """

    def r_tree(self) -> str:
        # ST_Intersects against an envelope can be answered by the RTREE index
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON ST_Intersects(
                 e.geom,
                 ST_MakeEnvelope(
                     ip.lat - $radius_deg, ip.lon - $radius_deg,
                     ip.lat + $radius_deg, ip.lon + $radius_deg
                 )
             );
        """

    def postgis_native(self) -> str:
        # Closest DuckDB equivalent of ST_DWithin on geography: ellipsoidal distance
        return self._INPUT_POINTS + """
        SELECT e.id
        FROM entities e
        JOIN input_points ip
          ON ST_Distance_Spheroid(e.geom, ST_Point(ip.lat, ip.lon)) <= $radius;
        """

    def queries(self) -> dict[str, str]:
        return {
            "geohash": self.geohash(),
            "euclidean": self.euclidean(),
            "haversine": self.haversine(),
            "knn": self.knn(),
            "r-tree": self.r_tree(),
            "postgis-native": self.postgis_native(),
        }


# Mapping from dialect names to query classes
QUERY_CLASSES: dict[str, type] = {
    "PostGIS": PostGISApproachQueries,
    "DuckDB": DuckDBApproachQueries,
}


def get_queries(dialect: str) -> dict[str, str]:
    """Get approach queries for a specific SQL dialect.

    Args:
        dialect: SQL dialect name (e.g., "DuckDB", "PostGIS")

    Returns:
        Dictionary mapping approach names (e.g., "knn") to SQL strings

    Raises:
        ValueError: If dialect is not supported
    """
    if dialect not in QUERY_CLASSES:
        available = ", ".join(sorted(QUERY_CLASSES.keys()))
        raise ValueError(f"Unknown dialect '{dialect}'. Available: {available}")

    return QUERY_CLASSES[dialect]().queries()


def get_query(dialect: str, approach: str) -> Optional[str]:
    """Get the query for one approach, or None if the dialect lacks it."""
    return get_queries(dialect).get(approach)


def list_approaches(dialect: Optional[str] = None) -> list[str]:
    """List approach names in canonical order.

    Args:
        dialect: Restrict to approaches this dialect supports (None = all)
    """
    if dialect is None:
        return list(APPROACHES)
    supported = get_queries(dialect)
    return [name for name in APPROACHES if name in supported]


def list_dialects() -> list[str]:
    """Return list of supported SQL dialects."""
    return sorted(QUERY_CLASSES.keys())


def validate_approaches(names: Iterable[str]) -> list[str]:
    """Check approach names against the catalogue, preserving their order.

    Raises:
        ConfigurationError: If a name is unknown, repeated, or none are given
    """
    approaches = list(names)
    if not approaches:
        raise ConfigurationError("At least one approach must be enabled")

    unknown = [name for name in approaches if name not in APPROACHES]
    if unknown:
        raise ConfigurationError(
            f"Unknown approach(es): {', '.join(unknown)}. "
            f"Available: {', '.join(APPROACHES)}"
        )

    duplicates = sorted({name for name in approaches if approaches.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Approach(es) listed more than once: {', '.join(duplicates)}")

    return approaches
