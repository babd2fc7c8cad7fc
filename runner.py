#!/usr/bin/env python3
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
GeoBench Benchmark Runner

A CLI tool that repeatedly loads a spatial table with random points and times
several "find points near these coordinates" query approaches against it.

Usage Examples:
    # Run the default comparison against an in-memory DuckDB database
    python runner.py

    # Compare geohash and haversine over two volumes and radii
    python runner.py --volumes 10000,100000 --radii 1000,5000 --approaches geohash,haversine

    # Run every approach against PostGIS and also save JSON results
    python runner.py --store postgis --dsn postgresql://localhost/gis --json results.json

    # List available stores or approaches
    python runner.py --list-stores
    python runner.py --list-approaches
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from geobench.approaches import APPROACHES, list_approaches
from geobench.config import (
    AXES,
    DEFAULT_K,
    DEFAULT_MIN_POINTS,
    DEFAULT_POINT_SET_SIZES,
    DEFAULT_RADII,
    DEFAULT_VOLUMES,
    BenchmarkConfig,
    parse_bounding_box,
    parse_float_list,
    parse_int_list,
    parse_name_list,
)
from geobench.errors import ConfigurationError, ReportWriteError
from geobench.orchestrator import BenchmarkOrchestrator
from geobench.reporting import (
    BenchmarkReport,
    print_results_table,
    print_trial_progress,
    save_json,
    write_report,
)
from geobench.store_base import DEFAULT_BOUNDING_BOX, SpatialStore
from geobench.stores import get_store, list_stores

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def run_benchmark(
    store: SpatialStore,
    config: BenchmarkConfig,
    warmup: bool = True,
) -> BenchmarkReport:
    """Run every configured trial against a connected store.

    Args:
        store: Connected backing store
        config: Validated benchmark configuration
        warmup: Whether to run warmup before benchmarks

    Returns:
        BenchmarkReport with all trials in execution order
    """
    if warmup:
        logger.info("Running warmup...")
        store.warmup()

    orchestrator = BenchmarkOrchestrator.from_config(store, config)
    print()  # Blank line before results

    report = orchestrator.run(
        config,
        on_trial=lambda trial: print_trial_progress(trial, varies_inputs=True),
    )
    report.store_version = store.get_version()
    return report


def build_config(args: argparse.Namespace, store: SpatialStore) -> BenchmarkConfig:
    """Turn parsed arguments into a validated BenchmarkConfig.

    Raises:
        ConfigurationError: If any value is invalid
    """
    if args.approaches is None:
        approaches = list_approaches(store.dialect)
    elif args.approaches == ["all"]:
        approaches = list(APPROACHES)
    else:
        approaches = args.approaches

    order = tuple(args.order) if args.order else AXES

    config = BenchmarkConfig(
        volumes=args.volumes,
        point_set_sizes=args.point_set_sizes,
        radii=args.radii,
        k=args.k,
        min_points=args.min_points,
        approaches=approaches,
        bounding_box=args.bbox,
        order=order,
        reuse_dataset=args.reuse_dataset,
        seed=args.seed,
    )
    return config.validate()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="GeoBench Benchmark Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --volumes 10000,100000 --radii 1000,5000
  %(prog)s --approaches geohash,haversine,knn --point-set-sizes 1,5,20
  %(prog)s --store postgis --dsn postgresql://localhost/gis --output out/output.txt
  %(prog)s --list-approaches
        """,
    )

    # Store selection
    parser.add_argument(
        "--store",
        "-s",
        type=str,
        default="duckdb",
        help=f"Backing store to benchmark (default: duckdb). Available: {', '.join(list_stores())}",
    )

    parser.add_argument(
        "--dsn",
        type=str,
        help="Connection string (postgis; default: $DATABASE_URL) "
        "or database file (duckdb; default: in-memory)",
    )

    # Trial configuration
    parser.add_argument(
        "--volumes",
        type=parse_int_list,
        default=list(DEFAULT_VOLUMES),
        help="Comma-separated dataset sizes (default: 100000)",
    )

    parser.add_argument(
        "--point-set-sizes",
        type=parse_int_list,
        default=list(DEFAULT_POINT_SET_SIZES),
        help="Comma-separated numbers of query coordinates (default: 1,5,20,50,100)",
    )

    parser.add_argument(
        "--radii",
        type=parse_float_list,
        default=list(DEFAULT_RADII),
        help="Comma-separated search radii in meters (default: 5000)",
    )

    parser.add_argument(
        "--k",
        type=int,
        default=DEFAULT_K,
        help=f"Neighbours per query point for knn (default: {DEFAULT_K})",
    )

    parser.add_argument(
        "--min-points",
        type=int,
        default=DEFAULT_MIN_POINTS,
        help=f"Core point threshold for dbscan (default: {DEFAULT_MIN_POINTS})",
    )

    parser.add_argument(
        "--approaches",
        "-a",
        type=parse_name_list,
        help="Comma-separated approaches to run, in order, or 'all'. "
        "Default: every approach the store supports",
    )

    parser.add_argument(
        "--bbox",
        type=parse_bounding_box,
        default=DEFAULT_BOUNDING_BOX,
        help="Area for random points as north,south,east,west "
        "(default: 30.4227,26.347,88.2015,80.0586)",
    )

    parser.add_argument(
        "--order",
        type=parse_name_list,
        help=f"Loop nesting, outermost first (default: {','.join(AXES)})",
    )

    parser.add_argument(
        "--reuse-dataset",
        action="store_true",
        help="Only reload the dataset when the volume changes between trials",
    )

    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for query coordinate generation",
    )

    # Output configuration
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("output.txt"),
        help="Text report path, overwritten on each run (default: output.txt)",
    )

    parser.add_argument(
        "--json",
        type=Path,
        help="Also save results as JSON to this path",
    )

    # Execution options
    parser.add_argument(
        "--startup-delay",
        type=float,
        default=0.0,
        help="Seconds to wait before connecting, e.g. for a database container "
        "that is still starting (default: 0)",
    )

    parser.add_argument(
        "--no-warmup",
        action="store_true",
        help="Skip warmup before running benchmarks",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose (debug) logging",
    )

    # Information commands
    parser.add_argument(
        "--list-stores",
        action="store_true",
        help="List available backing stores and exit",
    )

    parser.add_argument(
        "--list-approaches",
        action="store_true",
        help="List available approaches and exit",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the benchmark runner."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Handle verbose logging
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Handle information commands
    if args.list_stores:
        print("Available backing stores:")
        for name in list_stores():
            store = get_store(name)
            supported = ", ".join(list_approaches(store.dialect))
            print(f"  - {name} (dialect: {store.dialect}, approaches: {supported})")
        return 0

    if args.list_approaches:
        print(f"Available approaches ({len(APPROACHES)} total):")
        for name in APPROACHES:
            print(f"  - {name}")
        return 0

    try:
        store = get_store(args.store, dsn=args.dsn)
        config = build_config(args, store)
    except (ValueError, ConfigurationError) as e:
        logger.error(str(e))
        return 1

    if args.startup_delay > 0:
        logger.info(f"Waiting {args.startup_delay:g} seconds to let the database initialize...")
        time.sleep(args.startup_delay)

    print(f"\n{'='*60}")
    print(f"Store: {store.name.upper()}")
    print(f"{'='*60}")

    try:
        with store:
            logger.info(f"Store version: {store.get_version()}")
            report = run_benchmark(store, config, warmup=not args.no_warmup)
    except Exception as e:
        logger.error(f"Benchmark failed for {args.store}: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    # Print results
    print(f"\n{'='*60}")
    print("RESULTS")
    print(f"{'='*60}\n")

    print(f"Store: {report.store} ({report.store_version})")
    print(f"Trials: {report.total_trials - report.failed_trials}/{report.total_trials} prepared")
    print(f"Approach runs: {report.total_runs - report.failed_runs}/{report.total_runs} successful")
    print()
    print_results_table(report)
    print()

    try:
        write_report(report, args.output)
        logger.info(f"Results written to {args.output}")
        if args.json:
            save_json(report, args.json)
            logger.info(f"JSON results saved to {args.json}")
    except ReportWriteError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
