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

"""Tests for CoordinateGenerator."""

import pytest

from geobench.coordinates import CoordinateGenerator
from geobench.errors import InvalidArgumentError
from geobench.store_base import DEFAULT_BOUNDING_BOX, Coordinate


class TestCoordinateGenerator:

    @pytest.mark.parametrize("count", [1, 5, 100, 1000])
    def test_returns_exact_count(self, count, small_box):
        coordinates = CoordinateGenerator().generate(count, small_box)

        assert len(coordinates) == count

    def test_zero_count_returns_empty_list(self, small_box):
        assert CoordinateGenerator().generate(0, small_box) == []

    def test_negative_count_raises(self, small_box):
        with pytest.raises(InvalidArgumentError):
            CoordinateGenerator().generate(-1, small_box)

    def test_negative_count_is_value_error(self, small_box):
        with pytest.raises(ValueError):
            CoordinateGenerator().generate(-5, small_box)

    def test_coordinates_within_box(self):
        """Lower bounds are inclusive, upper bounds exclusive."""
        box = DEFAULT_BOUNDING_BOX
        coordinates = CoordinateGenerator(seed=7).generate(2000, box)

        for c in coordinates:
            assert box.south <= c.latitude < box.north
            assert box.west <= c.longitude < box.east

    def test_returns_coordinate_tuples(self, small_box):
        (coordinate,) = CoordinateGenerator(seed=1).generate(1, small_box)

        assert isinstance(coordinate, Coordinate)
        lat, lon = coordinate
        assert lat == coordinate.latitude
        assert lon == coordinate.longitude

    def test_seed_makes_output_reproducible(self, small_box):
        first = CoordinateGenerator(seed=42).generate(10, small_box)
        second = CoordinateGenerator(seed=42).generate(10, small_box)

        assert first == second

    def test_successive_calls_differ(self, small_box):
        generator = CoordinateGenerator(seed=42)

        assert generator.generate(10, small_box) != generator.generate(10, small_box)

    def test_spreads_across_box(self, small_box):
        """Points are not clustered in one corner of the box."""
        coordinates = CoordinateGenerator(seed=3).generate(1000, small_box)
        mid_lat = (small_box.north + small_box.south) / 2
        mid_lon = (small_box.east + small_box.west) / 2

        north_half = sum(1 for c in coordinates if c.latitude >= mid_lat)
        east_half = sum(1 for c in coordinates if c.longitude >= mid_lon)

        assert 350 < north_half < 650
        assert 350 < east_half < 650
