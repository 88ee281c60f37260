"""Benchmark suites.

New suites only need to be added to ``SUITES``; the runner discovers their
benchmarks automatically.
"""

from ormbench.errors import ConfigurationError

from .average_blog_ranking import AverageBlogRanking
from .base import BenchmarkInfo, BenchmarkSuite, RelatedEntityLoadingMode, benchmark, discover_benchmarks
from .query_buffering import QueryBuffering
from .query_tracking import QueryTrackingBehavior
from .related_loading import RelatedEntityLoading
from .update_batching import UpdateBatching

SUITES = {
    suite.name: suite
    for suite in (
        QueryTrackingBehavior,
        AverageBlogRanking,
        RelatedEntityLoading,
        UpdateBatching,
        QueryBuffering,
    )
}


def get_suite(name: str):
    try:
        return SUITES[name]
    except KeyError:
        raise ConfigurationError(f"unknown suite {name!r} (available: {', '.join(SUITES)})") from None


__all__ = [
    "SUITES",
    "get_suite",
    "AverageBlogRanking",
    "BenchmarkInfo",
    "BenchmarkSuite",
    "QueryBuffering",
    "QueryTrackingBehavior",
    "RelatedEntityLoading",
    "RelatedEntityLoadingMode",
    "UpdateBatching",
    "benchmark",
    "discover_benchmarks",
]
