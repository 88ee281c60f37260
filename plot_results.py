#!/usr/bin/env python3
"""Plot ORM benchmark results as ASCII charts and an interactive HTML report."""

import argparse
import html
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ormbench.report import RESULTS_FILENAME, format_duration, format_size

COLORS = ['#FF6384', '#36A2EB', '#FFCE56', '#4BC0C0', '#9966FF', '#FF9F40']


def find_latest_benchmark_dir(tmp_dir: Path = Path(".tmp")) -> Path:
    """Find the latest benchmark directory."""
    if not tmp_dir.exists():
        raise FileNotFoundError(f"No {tmp_dir} directory found")

    benchmark_dirs = [d for d in tmp_dir.glob("bench_*") if (d / RESULTS_FILENAME).exists()]
    if not benchmark_dirs:
        raise FileNotFoundError("No benchmark directories found")

    # Newest first
    return max(benchmark_dirs, key=lambda p: p.stat().st_mtime)


def load_benchmark_data(results_dir: Path) -> Dict[str, Any]:
    """Load benchmark data from the consolidated results file."""
    results_file = results_dir / RESULTS_FILENAME

    if not results_file.exists():
        raise FileNotFoundError(f"No {RESULTS_FILENAME} found in {results_dir}")

    with open(results_file) as f:
        data = json.load(f)

    return {"metadata": data.get("metadata", {}), "results": data.get("results", [])}


def result_label(item: Dict[str, Any]) -> str:
    """``Tracking`` or ``Related[Eager]`` style label for one result."""
    params = item.get("params") or {}
    if not params:
        return item["benchmark"]
    return f"{item['benchmark']}[{', '.join(str(v) for v in params.values())}]"


def group_by_suite(data: List[Dict]) -> Dict[str, List[Dict]]:
    groups = {}
    for item in data:
        groups.setdefault(item["suite"], []).append(item)
    return groups


def print_ascii_chart(data: List[Dict], title: str, value_key: str, max_width: int = 50, fmt=str):
    """Print ASCII chart, one block per suite."""
    data = [item for item in data if item.get("failure") is None and item.get(value_key) is not None]
    if not data:
        return

    print(f"\n📊 {title}")
    print("=" * 80)

    for suite, items in group_by_suite(data).items():
        print(f"{suite}:")
        max_value = max(item[value_key] for item in items) or 1
        name_width = max(len(result_label(item)) for item in items) + 2
        for item in items:
            value = item[value_key]
            bar_length = int((value / max_value) * max_width)
            bar = '█' * bar_length + '░' * (max_width - bar_length)
            print(f"  {result_label(item):<{name_width}} {bar} {fmt(value)}")


def print_table(data: List[Dict], title: str, columns: List[Dict]):
    """Print formatted table."""
    print(f"\n📋 {title}")
    print("=" * 100)

    header = " | ".join(f"{col['name']:<{col['width']}}" for col in columns)
    print(header)
    print("-" * len(header))

    for item in data:
        row_parts = []
        for col in columns:
            value = col['value'](item) if 'value' in col else item.get(col['key'])
            if value is None:
                value = "-"
            elif isinstance(value, float):
                value = f"{value:.{col.get('precision', 2)}f}"
            row_parts.append(f"{str(value):<{col['width']}}")
        print(" | ".join(row_parts))


def create_html_chart(items: List[Dict], title: str, value_key: str, chart_id: str) -> str:
    """Create a Chart.js bar chart of ``value_key`` for one suite."""
    items = [item for item in items if item.get("failure") is None and item.get(value_key) is not None]
    if not items:
        return ""

    chart_config = {
        'type': 'bar',
        'data': {
            'labels': [result_label(item) for item in items],
            'datasets': [{
                'label': value_key.replace('_', ' '),
                'data': [item[value_key] for item in items],
                'backgroundColor': [COLORS[i % len(COLORS)] + '80' for i in range(len(items))],
                'borderColor': [COLORS[i % len(COLORS)] for i in range(len(items))],
                'borderWidth': 1,
            }],
        },
        'options': {
            'responsive': True,
            'scales': {'y': {'beginAtZero': True, 'title': {'display': True, 'text': value_key.replace('_', ' ')}}},
            'plugins': {'title': {'display': True, 'text': title}, 'legend': {'display': False}},
        },
    }

    return f"""
    <div style="width: 100%; height: 400px; margin: 20px 0;">
        <canvas id="{chart_id}"></canvas>
    </div>
    <script>
        new Chart(document.getElementById('{chart_id}'), {json.dumps(chart_config)});
    </script>
    """


def generate_html_report(results: List[Dict], output_file: Path, metadata: Optional[Dict[str, Any]] = None):
    """Generate HTML report with one section of charts per suite."""
    metadata = metadata or {}
    suites = group_by_suite(results)

    html_content = f"""
<!DOCTYPE html>
<html>
<head>
    <title>ORM Benchmark Results</title>
    <script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 20px; }}
        .header {{ text-align: center; margin-bottom: 30px; }}
        .chart-container {{ margin: 30px 0; }}
        .summary {{ background: #f5f5f5; padding: 20px; border-radius: 5px; margin: 20px 0; }}
        .failure {{ color: #b00020; }}
        table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
        th, td {{ border: 1px solid #ddd; padding: 8px; text-align: left; }}
        th {{ background-color: #f2f2f2; }}
    </style>
</head>
<body>
    <div class="header">
        <h1>🚀 ORM Benchmark Results</h1>
        <p>Generated from {html.escape(str(metadata.get("timestamp", "unknown")))}</p>
    </div>

    <div class="summary">
        <h2>📊 Summary</h2>
        <p><strong>Suites:</strong> {html.escape(', '.join(suites))}</p>
        <p><strong>Total benchmarks:</strong> {len(results)}</p>
        <p><strong>Iterations:</strong> {metadata.get("iterations", "Unknown")} (+{metadata.get("warmup", "?")} warmup)</p>
        <p><strong>Database:</strong> {html.escape(str(metadata.get("database_url", "Unknown")))}</p>
        <p><strong>Python / SQLAlchemy:</strong> {metadata.get("python", "?")} / {metadata.get("sqlalchemy", "?")}</p>
        <p><strong>Host:</strong> {html.escape(str(metadata.get("platform", "Unknown")))}, {metadata.get("cpu_count", "?")} CPUs</p>
    </div>
"""

    for index, (suite, items) in enumerate(suites.items()):
        html_content += f"""
    <div class="chart-container">
        <h2>📈 {html.escape(suite)}</h2>
        {create_html_chart(items, f"{suite}: mean time (ms)", "mean_ms", f"chart_{index}_mean")}
        {create_html_chart(items, f"{suite}: peak allocation (KB)", "allocated_kb", f"chart_{index}_alloc")}
        <table>
            <tr>
                <th>Benchmark</th>
                <th>Mean</th>
                <th>Error</th>
                <th>StdDev</th>
                <th>Ratio</th>
                <th>Queries</th>
                <th>Allocated</th>
            </tr>
"""
        for item in items:
            if item.get("failure"):
                html_content += f"""
            <tr>
                <td>{html.escape(result_label(item))}</td>
                <td colspan="6" class="failure">{html.escape(item['failure'])}</td>
            </tr>
"""
                continue
            ratio = item.get("ratio")
            statements = item.get("statements")
            html_content += f"""
            <tr>
                <td>{html.escape(result_label(item))}</td>
                <td>{format_duration(item['mean_ms'])}</td>
                <td>{format_duration(item['error_ms'])}</td>
                <td>{format_duration(item['stddev_ms'])}</td>
                <td>{f'{ratio:.2f}' if ratio is not None else '-'}</td>
                <td>{f'{statements:g}' if statements is not None else '-'}</td>
                <td>{format_size(item['allocated_kb'])}</td>
            </tr>
"""
        html_content += """
        </table>
    </div>
"""

    html_content += """
</body>
</html>
"""

    with open(output_file, 'w') as f:
        f.write(html_content)


def main(argv=None) -> int:
    """Main plotting function."""
    parser = argparse.ArgumentParser(description="Plot ORM benchmark results")
    parser.add_argument("--dir", help="Specific benchmark directory to use")
    parser.add_argument("--no-html", action="store_true", help="Skip HTML report generation")
    parser.add_argument("--output", default="benchmark_report.html", help="HTML output filename")

    args = parser.parse_args(argv)

    try:
        if args.dir:
            results_dir = Path(args.dir)
            if not results_dir.exists():
                print(f"❌ Directory {results_dir} does not exist")
                return 1
        else:
            results_dir = find_latest_benchmark_dir()

        print(f"📁 Using data from: {results_dir}")

        print("📊 Loading benchmark data...")
        full_data = load_benchmark_data(results_dir)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        print(f"❌ Error: {e}")
        return 1

    metadata = full_data["metadata"]
    results = full_data["results"]

    if not results:
        print("❌ No benchmark data found")
        return 1

    print(f"✅ Loaded {len(results)} benchmark results")
    suites = list(group_by_suite(results))
    print(f"\n🎯 Found {len(suites)} suites: {', '.join(suites)}")

    print_ascii_chart(results, "Mean time", "mean_ms", fmt=format_duration)
    print_ascii_chart(results, "Peak allocation", "allocated_kb", fmt=format_size)
    print_ascii_chart(results, "SQL statements per invocation", "statements", fmt=lambda v: f"{v:g}")

    print_table(results, "Benchmark Results", [
        {'name': 'Suite', 'key': 'suite', 'width': 22},
        {'name': 'Benchmark', 'value': result_label, 'width': 45},
        {'name': 'Mean(ms)', 'key': 'mean_ms', 'width': 10, 'precision': 3},
        {'name': 'Error(ms)', 'key': 'error_ms', 'width': 10, 'precision': 3},
        {'name': 'Ratio', 'key': 'ratio', 'width': 6, 'precision': 2},
        {'name': 'Queries', 'key': 'statements', 'width': 8, 'precision': 1},
        {'name': 'Alloc(KB)', 'key': 'allocated_kb', 'width': 10, 'precision': 1},
    ])

    failures = [item for item in results if item.get("failure")]
    if failures:
        print(f"\n❌ {len(failures)} benchmark(s) failed:")
        for item in failures:
            print(f"  {item['suite']}.{result_label(item)}: {item['failure']}")

    if not args.no_html:
        output_file = Path(args.output)
        print(f"\n🌐 Generating HTML report: {output_file}")
        generate_html_report(results, output_file, metadata)
        print(f"✅ HTML report saved to: {output_file}")
        print(f"🔗 Open report: file://{output_file.absolute()}")
    else:
        print("\n⏭️  Skipping HTML report generation (--no-html specified)")

    print(f"\n🎉 Analysis complete! Data from: {results_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
