"""Measurement harness: parameter sweep, one-time setup, timed invocations.

Benchmarks run one at a time in the calling thread. Each measured call is
timed with ``time.perf_counter``; allocations are sampled in a separate
pass under ``tracemalloc`` so tracing overhead never shows up in the
timings.
"""

import gc
import itertools
import math
import time
import tracemalloc
from dataclasses import asdict, dataclass, field
from enum import Enum
from statistics import NormalDist, fmean, stdev
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import psutil

from ormbench.db import StatementCounter
from ormbench.errors import ConfigurationError, SetupError

DEFAULT_ITERATIONS = 10
DEFAULT_WARMUP = 2
CONFIDENCE_LEVEL = 0.999

# Two-sided critical value of the normal distribution at CONFIDENCE_LEVEL
_Z = NormalDist().inv_cdf(1 - (1 - CONFIDENCE_LEVEL) / 2)


@dataclass
class Measurement:
    """Samples (seconds) collected for one benchmark."""

    samples: List[float]
    allocated_bytes: int = 0
    statements: Optional[float] = None

    @property
    def mean(self) -> float:
        return fmean(self.samples) if self.samples else 0.0

    @property
    def stddev(self) -> float:
        return stdev(self.samples) if len(self.samples) > 1 else 0.0

    @property
    def error(self) -> float:
        """Half-width of the confidence interval of the mean."""
        if len(self.samples) < 2:
            return 0.0
        return _Z * self.stddev / math.sqrt(len(self.samples))

    @property
    def min(self) -> float:
        return min(self.samples) if self.samples else 0.0

    @property
    def max(self) -> float:
        return max(self.samples) if self.samples else 0.0


@dataclass
class BenchmarkResult:
    suite: str
    benchmark: str
    params: Dict[str, Any] = field(default_factory=dict)
    baseline: bool = False
    description: Optional[str] = None
    iterations: int = 0
    mean_ms: float = 0.0
    error_ms: float = 0.0
    stddev_ms: float = 0.0
    min_ms: float = 0.0
    max_ms: float = 0.0
    allocated_kb: float = 0.0
    statements: Optional[float] = None
    rss_mb: float = 0.0
    ratio: Optional[float] = None
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def json_params(params: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value.value if isinstance(value, Enum) else value for key, value in params.items()}


def format_params(params: Dict[str, Any]) -> str:
    return ", ".join(f"{key}={value}" for key, value in json_params(params).items())


def expand_params(
    params: Dict[str, Sequence[Any]],
    overrides: Optional[Dict[str, Sequence[Any]]] = None,
) -> Iterator[Dict[str, Any]]:
    """Yield every parameter combination, first parameter varying slowest."""
    overrides = overrides or {}
    unknown = sorted(set(overrides) - set(params))
    if unknown:
        raise ConfigurationError(f"unknown parameter(s): {', '.join(unknown)}")

    names = list(params)
    values = [list(overrides.get(name, params[name])) for name in names]
    empty = [name for name, vals in zip(names, values) if not vals]
    if empty:
        raise ConfigurationError(f"no values for parameter(s): {', '.join(empty)}")
    for combo in itertools.product(*values):
        yield dict(zip(names, combo))


def _convert(raw: str, sample: Any) -> Any:
    try:
        if isinstance(sample, Enum):
            return type(sample)[raw]
        if isinstance(sample, int):
            return int(raw)
    except (KeyError, ValueError):
        raise ConfigurationError(f"invalid value {raw!r} for a {type(sample).__name__} parameter") from None
    return raw


def parse_param_override(text: str, suite_cls) -> Tuple[str, List[Any]]:
    """Parse ``NAME=V1,V2`` against the parameters declared by ``suite_cls``."""
    name, sep, raw = text.partition("=")
    name = name.strip()
    if not sep or not raw.strip():
        raise ConfigurationError(f"expected NAME=VALUE[,VALUE...], got {text!r}")
    if name not in suite_cls.params:
        raise ConfigurationError(f"{suite_cls.name} has no parameter {name!r}")

    sample = suite_cls.params[name][0]
    values = [_convert(part.strip(), sample) for part in raw.split(",") if part.strip()]
    if not values:
        raise ConfigurationError(f"no values given for {name!r}")
    return name, values


def check_counts(iterations: int, warmup: int) -> None:
    if iterations < 1:
        raise ConfigurationError(f"iterations must be at least 1, got {iterations}")
    if warmup < 0:
        raise ConfigurationError(f"warmup must not be negative, got {warmup}")


def measure(
    func: Callable[[], Any],
    iterations: int = DEFAULT_ITERATIONS,
    warmup: int = DEFAULT_WARMUP,
    counter: Optional[StatementCounter] = None,
) -> Measurement:
    """Time ``iterations`` calls of ``func`` after ``warmup`` untimed calls."""
    check_counts(iterations, warmup)

    for _ in range(warmup):
        func()

    samples = []
    statements = []
    for _ in range(iterations):
        if counter is not None:
            counter.reset()
        start = time.perf_counter()
        func()
        samples.append(time.perf_counter() - start)
        if counter is not None:
            statements.append(counter.count)

    return Measurement(
        samples=samples,
        allocated_bytes=measure_allocation(func),
        statements=fmean(statements) if statements else None,
    )


def measure_allocation(func: Callable[[], Any]) -> int:
    """Peak bytes allocated by one call of ``func``."""
    gc.collect()
    already_tracing = tracemalloc.is_tracing()
    if not already_tracing:
        tracemalloc.start()
    try:
        tracemalloc.reset_peak()
        before, _ = tracemalloc.get_traced_memory()
        func()
        _, peak = tracemalloc.get_traced_memory()
    finally:
        if not already_tracing:
            tracemalloc.stop()
    return max(peak - before, 0)


def apply_ratios(results: List[BenchmarkResult]) -> None:
    """Fill in each result's mean relative to the baseline of the same run."""
    baseline = next((r for r in results if r.baseline and r.ok), None)
    if baseline is None or baseline.mean_ms <= 0:
        return
    for result in results:
        if result.ok:
            result.ratio = result.mean_ms / baseline.mean_ms


def _notify(progress_callback, stage: str, **info) -> None:
    if progress_callback:
        progress_callback(stage, info)


def run_suite(
    suite_cls,
    iterations: int = DEFAULT_ITERATIONS,
    warmup: int = DEFAULT_WARMUP,
    overrides: Optional[Dict[str, Sequence[Any]]] = None,
    database_url: Optional[str] = None,
    echo: bool = False,
    progress_callback: Optional[Callable[[str, Dict[str, Any]], None]] = None,
) -> List[BenchmarkResult]:
    """Run every benchmark of ``suite_cls`` for every parameter combination.

    A failing ``setup()`` raises :class:`SetupError` and ends the run. A
    failing benchmark is recorded on its result and the next one runs.
    """
    check_counts(iterations, warmup)
    results = []
    process = psutil.Process()

    for combo in expand_params(suite_cls.params, overrides):
        suite = None
        _notify(progress_callback, "setup", suite=suite_cls.name, params=combo)
        try:
            try:
                suite = suite_cls(database_url=database_url, echo=echo, **combo)
                suite.setup()
            except Exception as e:
                raise SetupError(suite_cls.name, json_params(combo), e) from e

            combo_results = []
            for info, func in suite.bound_benchmarks():
                _notify(progress_callback, "benchmark", suite=suite_cls.name, params=combo, benchmark=info.name)
                result = BenchmarkResult(
                    suite=suite_cls.name,
                    benchmark=info.name,
                    params=json_params(combo),
                    baseline=info.baseline,
                    description=info.description,
                    iterations=iterations,
                )
                try:
                    measurement = measure(func, iterations, warmup, suite.counter)
                except Exception as e:
                    result.failure = f"{type(e).__name__}: {e}"
                    _notify(progress_callback, "failed", suite=suite_cls.name, params=combo, result=result)
                else:
                    result.mean_ms = measurement.mean * 1000
                    result.error_ms = measurement.error * 1000
                    result.stddev_ms = measurement.stddev * 1000
                    result.min_ms = measurement.min * 1000
                    result.max_ms = measurement.max * 1000
                    result.allocated_kb = measurement.allocated_bytes / 1024
                    result.statements = measurement.statements
                    result.rss_mb = process.memory_info().rss / (1024 * 1024)
                    _notify(progress_callback, "done", suite=suite_cls.name, params=combo, result=result)
                combo_results.append(result)

            apply_ratios(combo_results)
            results.extend(combo_results)
        finally:
            if suite is not None:
                suite.dispose()

    return results
