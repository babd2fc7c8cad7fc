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
Tests for the configuration module.

These tests verify:
1. Defaults match the documented benchmark settings
2. Invalid values are rejected with ConfigurationError
3. The list parsers work as argparse type callables
"""

import argparse

import pytest

from geobench.approaches import APPROACHES
from geobench.config import (
    AXES,
    BenchmarkConfig,
    parse_bounding_box,
    parse_float_list,
    parse_int_list,
    parse_name_list,
)
from geobench.errors import ConfigurationError
from geobench.store_base import DEFAULT_BOUNDING_BOX


class TestDefaults:
    """Tests for BenchmarkConfig default values."""

    def test_default_values(self):
        config = BenchmarkConfig()

        assert config.volumes == [100_000]
        assert config.point_set_sizes == [1, 5, 20, 50, 100]
        assert config.radii == [5_000.0]
        assert config.k == 10
        assert config.min_points == 3
        assert config.approaches == list(APPROACHES)
        assert config.bounding_box == DEFAULT_BOUNDING_BOX
        assert config.order == AXES
        assert config.reuse_dataset is False

    def test_defaults_validate(self):
        assert BenchmarkConfig().validate().order == ("volume", "point_set_size", "radius")

    def test_default_lists_not_shared(self):
        first = BenchmarkConfig()
        first.volumes.append(5)

        assert BenchmarkConfig().volumes == [100_000]


class TestValidate:
    """Tests for BenchmarkConfig.validate()."""

    @pytest.mark.parametrize("overrides,message", [
        ({"volumes": []}, "volume"),
        ({"volumes": [10, -1]}, "negative"),
        ({"point_set_sizes": []}, "point set size"),
        ({"point_set_sizes": [0]}, "positive"),
        ({"radii": []}, "radius"),
        ({"radii": [-5.0]}, "positive"),
        ({"k": 0}, "k must be positive"),
        ({"min_points": 0}, "min_points"),
        ({"approaches": []}, "At least one approach"),
        ({"approaches": ["geohash", "quadtree"]}, "quadtree"),
        ({"approaches": ["knn", "knn"]}, "more than once"),
        ({"order": ("volume", "radius")}, "permutation"),
        ({"order": ("volume", "radius", "radius")}, "permutation"),
    ])
    def test_invalid_values_rejected(self, overrides, message):
        with pytest.raises(ConfigurationError, match=message):
            BenchmarkConfig(**overrides).validate()

    def test_zero_volume_allowed(self):
        assert BenchmarkConfig(volumes=[0]).validate().volumes == [0]

    def test_order_normalized_to_tuple(self):
        config = BenchmarkConfig(order=["radius", "volume", "point_set_size"]).validate()

        assert config.order == ("radius", "volume", "point_set_size")

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            BenchmarkConfig(k=-1).validate()

    def test_to_dict_round_trips_through_json_types(self):
        data = BenchmarkConfig(seed=7).validate().to_dict()

        assert data["seed"] == 7
        assert data["order"] == list(AXES)
        assert data["bounding_box"]["north"] == DEFAULT_BOUNDING_BOX.north


class TestParsers:
    """Tests for the comma-separated argument parsers."""

    def test_parse_int_list(self):
        assert parse_int_list("1000, 5_000,") == [1000, 5000]

    def test_parse_int_list_rejects_text(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_int_list("10,many")

    def test_parse_float_list(self):
        assert parse_float_list("500,1e3") == [500.0, 1000.0]

    def test_parse_name_list_lowercases(self):
        assert parse_name_list("GeoHash, KNN") == ["geohash", "knn"]

    def test_parse_bounding_box(self):
        box = parse_bounding_box("27,26,86,85")

        assert (box.north, box.south, box.east, box.west) == (27.0, 26.0, 86.0, 85.0)

    @pytest.mark.parametrize("value", ["27,26,86", "26,27,86,85", "27,26,85,86"])
    def test_parse_bounding_box_rejects_bad_boxes(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_bounding_box(value)
