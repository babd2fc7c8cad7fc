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

"""Random query coordinates for proximity benchmarks."""

import random
from typing import Optional

from geobench.errors import InvalidArgumentError
from geobench.store_base import BoundingBox, Coordinate


class CoordinateGenerator:
    """Draws coordinates uniformly at random from a bounding box.

    Each coordinate is independent, so repeats are possible. Pass ``seed`` to
    get the same sequence across runs.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._random = random.Random(seed)

    def generate(self, count: int, box: BoundingBox) -> list[Coordinate]:
        """Return exactly ``count`` coordinates inside ``box``.

        Raises:
            InvalidArgumentError: If count is negative
        """
        if count < 0:
            raise InvalidArgumentError(f"Coordinate count must not be negative, got {count}")

        lat_span = box.north - box.south
        lon_span = box.east - box.west
        return [
            Coordinate(
                latitude=box.south + self._random.random() * lat_span,
                longitude=box.west + self._random.random() * lon_span,
            )
            for _ in range(count)
        ]
