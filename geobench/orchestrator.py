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
Benchmark Orchestrator

Sequences trials over volumes, point set sizes and radii. For each trial the
dataset is prepared first, then every enabled approach runs in configured
order against it. Trials and approaches run strictly one after another: they
share a single table, and concurrent runs would skew each other's timings.

Failure scopes:
    - a dataset that cannot be prepared fails its own trial only
    - an approach that fails is recorded on its result; siblings still run
"""

import itertools
import logging
import time
from typing import Callable, Optional, Sequence

from geobench.approach_runner import ApproachRunner
from geobench.approaches import QUERY_CLASSES, list_dialects, validate_approaches
from geobench.config import BenchmarkConfig
from geobench.coordinates import CoordinateGenerator
from geobench.errors import ConfigurationError, FixtureError
from geobench.fixture import DatasetFixture
from geobench.reporting import BenchmarkReport, TrialParameters, TrialResult
from geobench.store_base import DEFAULT_BOUNDING_BOX, BoundingBox, Coordinate, SpatialStore

logger = logging.getLogger(__name__)

TrialCallback = Callable[[TrialResult], None]


class BenchmarkOrchestrator:
    """Runs benchmark trials against one store.

    Attributes:
        store: Connected backing store
        approaches: Enabled approach names, in run order
        bounding_box: Area for both dataset points and query coordinates
        reuse_dataset: Skip re-preparing the dataset when consecutive trials
            use the volume that is already loaded
    """

    def __init__(
        self,
        store: SpatialStore,
        approaches: Sequence[str],
        bounding_box: BoundingBox = DEFAULT_BOUNDING_BOX,
        generator: Optional[CoordinateGenerator] = None,
        clock: Callable[[], float] = time.perf_counter,
        reuse_dataset: bool = False,
    ) -> None:
        if store.dialect not in QUERY_CLASSES:
            raise ConfigurationError(
                f"Store '{store.name}' uses dialect '{store.dialect}', which has no "
                f"approach queries. Available dialects: {', '.join(list_dialects())}"
            )

        self.store = store
        self.approaches = validate_approaches(approaches)
        self.bounding_box = bounding_box
        self.generator = generator or CoordinateGenerator()
        self.reuse_dataset = reuse_dataset
        self.fixture = DatasetFixture(store, bounding_box)
        self.runners = [ApproachRunner(store, name, clock) for name in self.approaches]
        self._loaded_volume: Optional[int] = None

    @classmethod
    def from_config(
        cls,
        store: SpatialStore,
        config: BenchmarkConfig,
        clock: Callable[[], float] = time.perf_counter,
    ) -> "BenchmarkOrchestrator":
        config.validate()
        return cls(
            store=store,
            approaches=config.approaches,
            bounding_box=config.bounding_box,
            generator=CoordinateGenerator(config.seed),
            clock=clock,
            reuse_dataset=config.reuse_dataset,
        )

    def _check_config(self, config: BenchmarkConfig) -> None:
        """Reject a config that disagrees with how this orchestrator was built."""
        mismatches = []
        if list(config.approaches) != self.approaches:
            mismatches.append(f"approaches {config.approaches} != {self.approaches}")
        if config.bounding_box != self.bounding_box:
            mismatches.append("bounding_box")
        if config.reuse_dataset != self.reuse_dataset:
            mismatches.append(f"reuse_dataset {config.reuse_dataset} != {self.reuse_dataset}")
        if mismatches:
            raise ConfigurationError(
                "Config does not match the orchestrator (build it with from_config): "
                + "; ".join(mismatches)
            )

    def _prepare(self, volume: int) -> Optional[str]:
        """Prepare the dataset, returning an error message on failure."""
        if self.reuse_dataset and self._loaded_volume == volume:
            logger.debug(f"Reusing loaded dataset of {volume:,} records")
            return None

        self._loaded_volume = None
        try:
            self.fixture.prepare(volume)
        except FixtureError as e:
            return str(e)
        self._loaded_volume = volume
        return None

    def run_trial(
        self,
        parameters: TrialParameters,
        coordinates: Sequence[Coordinate],
    ) -> TrialResult:
        """Prepare the dataset for one trial and run every enabled approach."""
        trial = TrialResult(parameters=parameters)

        error = self._prepare(parameters.volume)
        if error is not None:
            logger.error(f"Skipping approaches for volume {parameters.volume}: {error}")
            trial.error = error
            return trial

        for runner in self.runners:
            trial.add_result(
                runner.run(coordinates, parameters.radius, parameters.k, parameters.min_points)
            )

        return trial

    def run_comparison(
        self,
        coordinates: Sequence[Coordinate],
        radius: float,
        k: int,
        min_points: int,
        volumes: Sequence[int],
        on_trial: Optional[TrialCallback] = None,
    ) -> BenchmarkReport:
        """Run every enabled approach once per volume for a fixed point set.

        Args:
            coordinates: Query coordinates shared by all trials
            radius: Search radius in meters
            k: Neighbours per query point for knn
            min_points: Core point threshold for dbscan
            volumes: Dataset sizes, run in the given order
            on_trial: Called with each TrialResult as soon as it completes

        Returns:
            BenchmarkReport whose trial headers identify only the volume
        """
        report = BenchmarkReport(store=self.store.name, varies_inputs=False)

        for volume in volumes:
            logger.info(f"=== Running comparison for volume: {volume:,} ===")
            parameters = TrialParameters(
                volume=volume,
                point_set_size=len(coordinates),
                radius=radius,
                k=k,
                min_points=min_points,
            )
            trial = self.run_trial(parameters, coordinates)
            report.add_trial(trial)
            if on_trial is not None:
                on_trial(trial)

        return report

    def run(
        self,
        config: BenchmarkConfig,
        on_trial: Optional[TrialCallback] = None,
    ) -> BenchmarkReport:
        """Run the full cross product of volumes, point set sizes and radii.

        Axes are nested in ``config.order``, outermost first. Query
        coordinates are drawn afresh every time a point set size iteration
        begins, so with the default order each (volume, point set size) pair
        gets its own coordinates, shared by all radii inside it.

        Unless ``reuse_dataset`` is set, the dataset is prepared again for
        every trial even though only the volume affects its contents.

        Raises:
            ConfigurationError: If the config is invalid, or its approaches,
                bounding box or reuse flag differ from this orchestrator's
        """
        config.validate()
        self._check_config(config)
        report = BenchmarkReport(
            store=self.store.name,
            varies_inputs=True,
            config=config.to_dict(),
        )
        # coordinates come from this orchestrator's generator
        report.config["seed"] = self.generator.seed

        values = {
            "volume": list(config.volumes),
            "point_set_size": list(config.point_set_sizes),
            "radius": list(config.radii),
        }
        order = config.order
        size_depth = order.index("point_set_size") + 1
        total = len(values["volume"]) * len(values["point_set_size"]) * len(values["radius"])
        logger.info(
            f"Running {total} trials × {len(self.runners)} approaches "
            f"(order: {' > '.join(order)})"
        )

        coordinates: list[Coordinate] = []
        coordinates_key: Optional[tuple[int, ...]] = None

        for indices in itertools.product(*(range(len(values[axis])) for axis in order)):
            point = {axis: values[axis][i] for axis, i in zip(order, indices)}

            if indices[:size_depth] != coordinates_key:
                coordinates = self.generator.generate(point["point_set_size"], self.bounding_box)
                coordinates_key = indices[:size_depth]
                logger.info(f"=== Generated {len(coordinates)} query points ===")

            logger.info(
                f"Running comparison for volume {point['volume']:,}, "
                f"{point['point_set_size']} points, radius {point['radius']} meters"
            )
            parameters = TrialParameters(
                volume=point["volume"],
                point_set_size=point["point_set_size"],
                radius=point["radius"],
                k=config.k,
                min_points=config.min_points,
            )
            trial = self.run_trial(parameters, coordinates)
            report.add_trial(trial)
            if on_trial is not None:
                on_trial(trial)

        return report
