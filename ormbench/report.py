"""Console summary and JSON output of benchmark results."""

import json
import platform
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import psutil
import sqlalchemy

from ormbench.db.engine import mask_url
from ormbench.harness import BenchmarkResult

RESULTS_FILENAME = "results.json"


def format_duration(ms: float) -> str:
    """Render a duration with a unit that keeps 1-4 integer digits."""
    if ms < 1:
        return f"{ms * 1000:.1f} us"
    if ms < 1000:
        return f"{ms:.3f} ms"
    return f"{ms / 1000:.3f} s"


def format_size(kb: float) -> str:
    if kb < 1024:
        return f"{kb:.1f} KB"
    return f"{kb / 1024:.2f} MB"


def summary_rows(results: Sequence[BenchmarkResult]) -> List[Dict[str, str]]:
    rows = []
    for result in results:
        row = {"Method": result.benchmark}
        row.update({key: str(value) for key, value in result.params.items()})
        if result.ok:
            row.update({
                "Mean": format_duration(result.mean_ms),
                "Error": format_duration(result.error_ms),
                "StdDev": format_duration(result.stddev_ms),
                "Ratio": f"{result.ratio:.2f}" if result.ratio is not None else "-",
                "Queries": f"{result.statements:g}" if result.statements is not None else "-",
                "Allocated": format_size(result.allocated_kb),
            })
        else:
            row.update({"Mean": "NA", "Error": "NA", "StdDev": "NA", "Ratio": "?", "Queries": "-", "Allocated": "-"})
        rows.append(row)
    return rows


def format_table(rows: List[Dict[str, str]]) -> str:
    """Pipe-separated table with dynamic column widths."""
    if not rows:
        return ""
    columns = list(rows[0])
    widths = {col: max(len(col), *(len(row.get(col, "")) for row in rows)) for col in columns}

    header = " | ".join(f"{col:<{widths[col]}}" for col in columns)
    lines = [header, "-" * len(header)]
    for row in rows:
        cells = []
        for col in columns:
            # Method names read left-aligned, numbers right-aligned
            align = "<" if col == "Method" else ">"
            cells.append(f"{row.get(col, ''):{align}{widths[col]}}")
        lines.append(" | ".join(cells))
    return "\n".join(lines)


def print_summary(results: Sequence[BenchmarkResult]) -> None:
    """Print one table per suite, followed by any failures."""
    suites = []
    for result in results:
        if result.suite not in suites:
            suites.append(result.suite)

    for suite in suites:
        suite_results = [r for r in results if r.suite == suite]
        print(f"\n📈 {suite}:")
        print(format_table(summary_rows(suite_results)))

        for result in suite_results:
            if not result.ok:
                print(f"  ❌ {result.benchmark} ({', '.join(f'{k}={v}' for k, v in result.params.items())}): {result.failure}")


def build_metadata(iterations: int, warmup: int, database_url: str, suites: Sequence[str]) -> Dict[str, Any]:
    memory = psutil.virtual_memory()
    return {
        "suites": list(suites),
        "iterations": iterations,
        "warmup": warmup,
        "database_url": mask_url(database_url),
        "timestamp": datetime.now().isoformat(),
        "python": platform.python_version(),
        "sqlalchemy": sqlalchemy.__version__,
        "platform": platform.platform(),
        "cpu_count": psutil.cpu_count(logical=True),
        "memory_total_mb": memory.total / (1024 * 1024),
    }


def write_results(
    results: Sequence[BenchmarkResult],
    out_dir: Path,
    metadata: Optional[Dict[str, Any]] = None,
) -> Path:
    """Save results with metadata to ``out_dir/results.json``."""
    out_dir.mkdir(parents=True, exist_ok=True)
    results_path = out_dir / RESULTS_FILENAME
    with open(results_path, "w") as f:
        json.dump(
            {"metadata": metadata or {}, "results": [result.to_dict() for result in results]},
            f,
            indent=2,
        )
    return results_path
