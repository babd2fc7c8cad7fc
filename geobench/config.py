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
Benchmark Configuration

Holds the validated inputs of one benchmark run. Values normally come from the
command line (see runner.py); the parse helpers below double as argparse
``type=`` callables.
"""

import argparse
from dataclasses import dataclass, field
from typing import Optional

from geobench.approaches import APPROACHES, validate_approaches
from geobench.errors import ConfigurationError
from geobench.store_base import DEFAULT_BOUNDING_BOX, BoundingBox

# Iteration axes, outermost first
AXES = ("volume", "point_set_size", "radius")
DEFAULT_ORDER = AXES

DEFAULT_VOLUMES = [100_000]
DEFAULT_POINT_SET_SIZES = [1, 5, 20, 50, 100]
DEFAULT_RADII = [5_000.0]
DEFAULT_K = 10
DEFAULT_MIN_POINTS = 3


def _split(value: str) -> list[str]:
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def parse_int_list(value: str) -> list[int]:
    """Parse "1000,5_000" into [1000, 5000]."""
    try:
        return [int(item) for item in _split(value)]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got '{value}'")


def parse_float_list(value: str) -> list[float]:
    """Parse "500,1e3" into [500.0, 1000.0]."""
    try:
        return [float(item) for item in _split(value)]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated numbers, got '{value}'")


def parse_name_list(value: str) -> list[str]:
    return [item.lower() for item in _split(value)]


def parse_bounding_box(value: str) -> BoundingBox:
    """Parse "north,south,east,west" into a BoundingBox."""
    parts = parse_float_list(value)
    if len(parts) != 4:
        raise argparse.ArgumentTypeError(
            f"expected north,south,east,west, got {len(parts)} value(s)"
        )
    try:
        return BoundingBox(north=parts[0], south=parts[1], east=parts[2], west=parts[3])
    except ConfigurationError as e:
        raise argparse.ArgumentTypeError(str(e))


@dataclass
class BenchmarkConfig:
    """Inputs for one benchmark run.

    Attributes:
        volumes: Dataset sizes to test, in order
        point_set_sizes: Numbers of query coordinates to test
        radii: Search radii in meters
        k: Neighbours per query point for knn
        min_points: Core point threshold for dbscan
        approaches: Enabled approaches, in run order
        bounding_box: Area that both dataset and query points are drawn from
        order: Iteration axes, outermost first
        reuse_dataset: Prepare the dataset only when the volume changes
        seed: Seed for query coordinate generation
    """

    volumes: list[int] = field(default_factory=lambda: list(DEFAULT_VOLUMES))
    point_set_sizes: list[int] = field(default_factory=lambda: list(DEFAULT_POINT_SET_SIZES))
    radii: list[float] = field(default_factory=lambda: list(DEFAULT_RADII))
    k: int = DEFAULT_K
    min_points: int = DEFAULT_MIN_POINTS
    approaches: list[str] = field(default_factory=lambda: list(APPROACHES))
    bounding_box: BoundingBox = DEFAULT_BOUNDING_BOX
    order: tuple[str, ...] = DEFAULT_ORDER
    reuse_dataset: bool = False
    seed: Optional[int] = None

    def validate(self) -> "BenchmarkConfig":
        """Check every field, raising ConfigurationError on the first problem."""
        if not self.volumes:
            raise ConfigurationError("At least one volume is required")
        if any(v < 0 for v in self.volumes):
            raise ConfigurationError(f"Volumes must not be negative: {self.volumes}")

        if not self.point_set_sizes:
            raise ConfigurationError("At least one point set size is required")
        if any(size <= 0 for size in self.point_set_sizes):
            raise ConfigurationError(
                f"Point set sizes must be positive: {self.point_set_sizes}"
            )

        if not self.radii:
            raise ConfigurationError("At least one radius is required")
        if any(radius <= 0 for radius in self.radii):
            raise ConfigurationError(f"Radii must be positive: {self.radii}")

        if self.k <= 0:
            raise ConfigurationError(f"k must be positive, got {self.k}")
        if self.min_points <= 0:
            raise ConfigurationError(f"min_points must be positive, got {self.min_points}")

        self.approaches = validate_approaches(self.approaches)

        order = tuple(self.order)
        if sorted(order) != sorted(AXES):
            raise ConfigurationError(
                f"Order must be a permutation of {', '.join(AXES)}, got {', '.join(order)}"
            )
        self.order = order

        if not isinstance(self.bounding_box, BoundingBox):
            raise ConfigurationError("bounding_box must be a BoundingBox")

        return self

    def to_dict(self) -> dict:
        return {
            "volumes": list(self.volumes),
            "point_set_sizes": list(self.point_set_sizes),
            "radii": list(self.radii),
            "k": self.k,
            "min_points": self.min_points,
            "approaches": list(self.approaches),
            "bounding_box": self.bounding_box.to_dict(),
            "order": list(self.order),
            "reuse_dataset": self.reuse_dataset,
            "seed": self.seed,
        }
