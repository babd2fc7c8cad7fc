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
GeoBench Error Types

Errors are grouped by the scope they abort:

- ConfigurationError: bad or missing configuration, fatal before any trial runs
- FixtureError: the dataset for one trial could not be prepared; that trial is
  recorded as failed and the run moves on to the next one
- ApproachError: a single retrieval approach failed; recorded inline on its
  ApproachResult, sibling approaches still run
- ReportWriteError: the final report could not be persisted, fatal
"""


class GeoBenchError(Exception):
    """Base class for all harness errors."""


class ConfigurationError(GeoBenchError, ValueError):
    """Raised when benchmark configuration is malformed or incomplete."""


class InvalidArgumentError(GeoBenchError, ValueError):
    """Raised when a helper is called with an out-of-range argument."""


class FixtureError(GeoBenchError):
    """Raised when the dataset for a trial cannot be cleared or populated."""

    def __init__(self, volume: int, message: str) -> None:
        super().__init__(f"Failed to prepare dataset of {volume} records: {message}")
        self.volume = volume


class ApproachError(GeoBenchError):
    """Raised when an approach cannot be executed against a store."""

    def __init__(self, approach: str, message: str) -> None:
        super().__init__(message)
        self.approach = approach


class ReportWriteError(GeoBenchError):
    """Raised when the benchmark report cannot be written to disk."""
