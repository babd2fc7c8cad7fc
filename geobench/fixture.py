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
Dataset Fixture

Resets the backing store to a known volume of random points before a trial.
Every approach in a trial must see the same fully committed dataset, so
prepare() returns only after the rows are in place and counted.
"""

import logging

from geobench.errors import FixtureError
from geobench.store_base import BoundingBox, SpatialStore

logger = logging.getLogger(__name__)


class DatasetFixture:
    """Clears and repopulates the entities table of a store."""

    def __init__(self, store: SpatialStore, bounding_box: BoundingBox) -> None:
        self.store = store
        self.bounding_box = bounding_box

    def prepare(self, volume: int) -> None:
        """Replace the dataset with exactly ``volume`` random records.

        Raises:
            FixtureError: If clearing, inserting or verifying fails
        """
        if volume < 0:
            raise FixtureError(volume, "volume must not be negative")

        logger.info(f"Preparing dataset with {volume:,} records")
        try:
            self.store.clear_all()
            self.store.insert_random(volume, self.bounding_box)
            count = self.store.count_records()
        except Exception as e:
            logger.error(f"Dataset preparation failed for volume {volume}: {e}")
            raise FixtureError(volume, str(e)) from e

        if count != volume:
            raise FixtureError(volume, f"expected {volume} records after insert, found {count}")

        logger.info(f"Loaded table 'entities': {count:,} rows")
