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
Benchmark Result Reporting

This module holds the result containers produced by the orchestrator and the
utilities for rendering and persisting them. The text report is a lossless,
order-preserving rendering of every trial: nothing is averaged, sorted or
dropped, because it is meant to be read top to bottom.
"""

import contextlib
import json
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, TextIO

from geobench.errors import ReportWriteError
from geobench.store_base import ApproachResult

REPORT_TITLE = "Comparison Results:"

# Width that approach names are padded to in the text report
APPROACH_COLUMN_WIDTH = 11


@dataclass(frozen=True)
class TrialParameters:
    """Inputs of one trial; (volume, point_set_size, radius) identifies it."""

    volume: int
    point_set_size: int
    radius: float
    k: int
    min_points: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "volume": self.volume,
            "point_set_size": self.point_set_size,
            "radius": self.radius,
            "k": self.k,
            "min_points": self.min_points,
        }


@dataclass
class TrialResult:
    """Results of every approach for one trial.

    Attributes:
        parameters: The trial's inputs
        results: Approach name to result, in the order the approaches ran
        error: Trial-level failure (dataset preparation); no approach ran
    """

    parameters: TrialParameters
    results: dict[str, ApproachResult] = field(default_factory=dict)
    error: Optional[str] = None

    def add_result(self, result: ApproachResult) -> None:
        self.results[result.approach] = result

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "parameters": self.parameters.to_dict(),
            "error": self.error,
            "results": [r.to_dict() for r in self.results.values()],
        }


@dataclass
class BenchmarkReport:
    """All trials of one run, in execution order.

    Attributes:
        store: Backing store name
        store_version: Version of the backing database
        varies_inputs: Whether trials differ in point set size and radius as
            well as volume; controls the trial header format
        config: Configuration the run was started with (for JSON export)
    """

    store: str
    store_version: str = "unknown"
    varies_inputs: bool = True
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    config: dict[str, Any] = field(default_factory=dict)
    trials: list[TrialResult] = field(default_factory=list)

    def add_trial(self, trial: TrialResult) -> None:
        self.trials.append(trial)

    @property
    def total_trials(self) -> int:
        return len(self.trials)

    @property
    def failed_trials(self) -> int:
        return sum(1 for t in self.trials if not t.success)

    @property
    def total_runs(self) -> int:
        return sum(len(t.results) for t in self.trials)

    @property
    def failed_runs(self) -> int:
        return sum(1 for t in self.trials for r in t.results.values() if not r.success)

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary for JSON serialization."""
        return {
            "store": self.store,
            "store_version": self.store_version,
            "timestamp": self.timestamp,
            "config": self.config,
            "summary": {
                "total_trials": self.total_trials,
                "failed_trials": self.failed_trials,
                "total_runs": self.total_runs,
                "failed_runs": self.failed_runs,
            },
            "trials": [t.to_dict() for t in self.trials],
        }


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_trial_header(parameters: TrialParameters, varies_inputs: bool) -> str:
    if varies_inputs:
        return (
            f"Point Size: {parameters.point_set_size}, "
            f"Volume: {parameters.volume} records, "
            f"Radius: {_format_number(parameters.radius)} meters"
        )
    return f"Volume: {parameters.volume} records"


def format_approach_line(result: ApproachResult) -> str:
    name = result.approach.ljust(APPROACH_COLUMN_WIDTH)
    if result.success:
        return f"  {name}: {result.time_taken_ms}ms, {result.records_found} records found"
    return f"  {name}: failed after {result.time_taken_ms}ms: {result.error_message}"


def format_report(report: BenchmarkReport) -> str:
    """Render a report as text.

    Layout:

        Comparison Results:

        Point Size: 3, Volume: 100 records, Radius: 500 meters
          geohash    : 12ms, 7 records found
          haversine  : 31ms, 5 records found

    One header per trial, one line per approach, a blank line after each
    trial. The output depends only on the report, so formatting the same
    report twice gives identical text.
    """
    lines = [REPORT_TITLE, ""]

    for trial in report.trials:
        lines.append(format_trial_header(trial.parameters, report.varies_inputs))
        if trial.error is not None:
            lines.append(f"  Error preparing dataset: {trial.error}")
        for result in trial.results.values():
            lines.append(format_approach_line(result))
        lines.append("")

    return "\n".join(lines) + "\n"


def write_report(report: BenchmarkReport, output_path: Path) -> None:
    """Format a report and overwrite ``output_path`` with it.

    The text is fully rendered before the file is opened, and written to a
    sibling temporary file that replaces the target. A failure leaves
    neither a truncated report nor the temporary file behind.

    Raises:
        ReportWriteError: If the file cannot be written
    """
    text = format_report(report)
    tmp_path = output_path.with_name(output_path.name + ".tmp")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w") as f:
            f.write(text)
        os.replace(tmp_path, output_path)
    except OSError as e:
        with contextlib.suppress(OSError):
            tmp_path.unlink(missing_ok=True)
        raise ReportWriteError(f"Failed to write report to {output_path}: {e}") from e


def save_json(report: BenchmarkReport, output_path: Path) -> None:
    """Save benchmark results to JSON file.

    Raises:
        ReportWriteError: If the file cannot be written
    """
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(report.to_dict(), f, indent=2)
    except OSError as e:
        raise ReportWriteError(f"Failed to write JSON results to {output_path}: {e}") from e


def print_trial_progress(
    trial: TrialResult,
    varies_inputs: bool = True,
    file: TextIO | None = None,
) -> None:
    """Print one trial's outcome as progress lines."""
    if file is None:
        file = sys.stdout

    print(f"  {format_trial_header(trial.parameters, varies_inputs)}", file=file)
    if trial.error is not None:
        print(f"    [✗] dataset: FAILED - {trial.error}", file=file)
        return

    for result in trial.results.values():
        status = "✓" if result.success else "✗"
        if result.success:
            print(
                f"    [{status}] {result.approach}: {result.time_taken_ms}ms "
                f"({result.records_found} rows)",
                file=file,
            )
        else:
            print(f"    [{status}] {result.approach}: FAILED - {result.error_message}", file=file)


def print_results_table(
    report: BenchmarkReport,
    file: TextIO | None = None,
) -> None:
    """Print every approach run as an ASCII table, in execution order.

    Args:
        report: Report to display
        file: Output file (defaults to stdout)
    """
    if file is None:
        file = sys.stdout

    headers = ["Points", "Volume", "Radius (m)", "Approach", "Time (ms)", "Records", "Status"]
    widths = [6, 10, 10, 14, 10, 10, 6]

    header_line = " | ".join(h.ljust(w) for h, w in zip(headers, widths))
    separator = "-+-".join("-" * w for w in widths)

    print(separator, file=file)
    print(header_line, file=file)
    print(separator, file=file)

    for trial in report.trials:
        params = trial.parameters
        prefix = [
            str(params.point_set_size).rjust(widths[0]),
            str(params.volume).rjust(widths[1]),
            _format_number(params.radius).rjust(widths[2]),
        ]

        if trial.error is not None:
            row = prefix + [
                "(dataset)".ljust(widths[3]),
                "-".rjust(widths[4]),
                "-".rjust(widths[5]),
                "FAIL".ljust(widths[6]),
            ]
            print(" | ".join(row), file=file)
            continue

        for result in trial.results.values():
            status = "OK" if result.success else "FAIL"
            duration = str(result.time_taken_ms) if result.success else "-"
            records = str(result.records_found) if result.success else "-"
            row = prefix + [
                result.approach.ljust(widths[3]),
                duration.rjust(widths[4]),
                records.rjust(widths[5]),
                status.ljust(widths[6]),
            ]
            print(" | ".join(row), file=file)

    print(separator, file=file)
