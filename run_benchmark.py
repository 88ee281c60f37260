#!/usr/bin/env python3
"""
ORM Benchmark Script - runs the benchmark suites against a freshly seeded database.

Each parameter combination of a suite drops and recreates the database
before seeding it, so any data at the configured location is lost.
"""

import argparse
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ormbench.benchmarks import SUITES, discover_benchmarks, get_suite
from ormbench.db.engine import DATABASE_URL, mask_url
from ormbench.errors import BenchmarkError, ConfigurationError
from ormbench.harness import (
    DEFAULT_ITERATIONS,
    DEFAULT_WARMUP,
    check_counts,
    format_params,
    parse_param_override,
    run_suite,
)
from ormbench.report import build_metadata, format_duration, print_summary, write_results


def print_progress(stage: str, info: Dict) -> None:
    """Print one progress line per harness event."""
    if stage == "setup":
        print(f"\n🌱 Setting up {info['suite']} ({format_params(info['params']) or 'no parameters'})...")
    elif stage == "benchmark":
        print(f"  🧪 {info['benchmark']}...", end="", flush=True)
    elif stage == "done":
        result = info["result"]
        print(f" ✅ {format_duration(result.mean_ms)} ± {format_duration(result.error_ms)}")
    elif stage == "failed":
        print(f" ❌ {info['result'].failure}")


def list_suites() -> None:
    print("📋 Available suites:")
    for name, suite_cls in SUITES.items():
        print(f"  {name:<22} {suite_cls.description}")
        for param, values in suite_cls.params.items():
            print(f"    {param} = {', '.join(str(v) for v in values)}")
        for info in discover_benchmarks(suite_cls):
            marker = " (baseline)" if info.baseline else ""
            print(f"    - {info.name}{marker}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ORM micro-benchmarks")
    parser.add_argument("--suites", nargs="+", default=list(SUITES),
                        help=f"Suites to run (default: all of {', '.join(SUITES)})")
    parser.add_argument("--list", action="store_true", help="List suites, parameters and benchmarks, then exit")
    parser.add_argument("--iterations", type=int, default=DEFAULT_ITERATIONS,
                        help=f"Measured invocations per benchmark (default: {DEFAULT_ITERATIONS})")
    parser.add_argument("--warmup", type=int, default=DEFAULT_WARMUP,
                        help=f"Unmeasured invocations before measuring (default: {DEFAULT_WARMUP})")
    parser.add_argument("--param", action="append", default=[], metavar="NAME=V1,V2",
                        help="Override a parameter's values, e.g. NumBlogs=10,100 (repeatable)")
    parser.add_argument("--database-url", default=DATABASE_URL,
                        help="SQLAlchemy database URL (default: $ORMBENCH_DATABASE_URL or a local SQLite file)")
    parser.add_argument("--echo", action="store_true", help="Log every SQL statement")
    parser.add_argument("--output-dir", help="Results directory (default: .tmp/bench_<timestamp>)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main benchmark function."""
    args = build_parser().parse_args(argv)

    if args.list:
        list_suites()
        return 0

    try:
        check_counts(args.iterations, args.warmup)
        suites = [get_suite(name) for name in args.suites]
        overrides = {suite_cls.name: {} for suite_cls in suites}
        for text in args.param:
            # A parameter applies to every selected suite that declares it
            name = text.partition("=")[0].strip()
            targets = [suite_cls for suite_cls in suites if name in suite_cls.params]
            if not targets:
                raise ConfigurationError(f"no selected suite has a parameter named {name!r}")
            for suite_cls in targets:
                key, values = parse_param_override(text, suite_cls)
                overrides[suite_cls.name][key] = values
    except BenchmarkError as e:
        print(f"❌ {e}")
        return 1

    print("🚀 ORM Benchmarks")
    print("=" * 70)
    print(f"📊 Suites: {', '.join(suite_cls.name for suite_cls in suites)}")
    print(f"🔁 Iterations: {args.iterations} (+{args.warmup} warmup)")
    print(f"🗄️  Database: {mask_url(args.database_url)}")

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_dir = Path(args.output_dir) if args.output_dir else Path(f".tmp/bench_{timestamp}")
    print(f"📁 Output: {out_dir}")

    start_time = time.time()
    results = []
    try:
        for suite_cls in suites:
            results.extend(run_suite(
                suite_cls,
                iterations=args.iterations,
                warmup=args.warmup,
                overrides=overrides[suite_cls.name],
                database_url=args.database_url,
                echo=args.echo,
                progress_callback=print_progress,
            ))
    except BenchmarkError as e:
        print(f"\n❌ Run aborted: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n🛑 Interrupted")
        return 130

    print("\n" + "=" * 100)
    print("📊 BENCHMARK RESULTS")
    print("=" * 100)
    print_summary(results)

    metadata = build_metadata(args.iterations, args.warmup, args.database_url, [s.name for s in suites])
    results_path = write_results(results, out_dir, metadata)
    print(f"\n💾 Results saved: {results_path}")
    print(f"🎉 Benchmarks completed in {time.time() - start_time:.1f}s")
    print(f"📊 Generate interactive HTML report: `python plot_results.py --dir {out_dir}`")
    return 0


if __name__ == "__main__":
    sys.exit(main())
