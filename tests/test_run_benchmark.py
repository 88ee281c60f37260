import json

import pytest

import plot_results
import run_benchmark


@pytest.fixture
def run_args(database_url, tmp_path):
    return ["--database-url", database_url, "--output-dir", str(tmp_path / "out"), "--iterations", "2", "--warmup", "0"]


def test_list_suites(capsys):
    assert run_benchmark.main(["--list"]) == 0
    out = capsys.readouterr().out
    for name in ("query_tracking", "average_blog_ranking", "related_loading", "update_batching", "query_buffering"):
        assert name in out
    assert "CalculateInDatabase (baseline)" in out


def test_unknown_suite_fails(capsys):
    assert run_benchmark.main(["--suites", "nope"]) == 1
    assert "unknown suite" in capsys.readouterr().out


def test_unknown_parameter_fails(run_args, capsys):
    assert run_benchmark.main(["--suites", "average_blog_ranking", "--param", "NumPostsPerBlog=1", *run_args]) == 1
    assert "NumPostsPerBlog" in capsys.readouterr().out


@pytest.mark.parametrize("option, value", [("--iterations", "0"), ("--warmup", "-1")])
def test_bad_counts_fail_before_running(database_url, tmp_path, capsys, option, value):
    argv = ["--suites", "average_blog_ranking", "--database-url", database_url, "--output-dir", str(tmp_path / "out"), option, value]
    assert run_benchmark.main(argv) == 1
    out = capsys.readouterr().out
    assert option.lstrip("-") in out
    assert "ORM Benchmarks" not in out
    assert not (tmp_path / "out").exists()


def test_parameter_without_values_fails(run_args, tmp_path, capsys):
    assert run_benchmark.main(["--suites", "average_blog_ranking", "--param", "NumBlogs=,", *run_args]) == 1
    assert "NumBlogs" in capsys.readouterr().out
    assert not (tmp_path / "out").exists()


def test_run_writes_results(run_args, tmp_path, capsys):
    argv = [
        "--suites", "average_blog_ranking", "related_loading",
        "--param", "NumBlogs=10",
        "--param", "NumPostsPerBlog=2",
        "--param", "RelatedEntityLoadingMode=Eager,Lazy",
        *run_args,
    ]
    assert run_benchmark.main(argv) == 0

    data = json.loads((tmp_path / "out" / "results.json").read_text())
    results = data["results"]
    assert {r["suite"] for r in results} == {"average_blog_ranking", "related_loading"}
    # 4 ranking variants + 2 related benchmarks for each of 2 modes
    assert len(results) == 8
    assert all(r["failure"] is None for r in results)
    assert {r["params"]["NumBlogs"] for r in results} == {10}
    assert data["metadata"]["suites"] == ["average_blog_ranking", "related_loading"]

    out = capsys.readouterr().out
    assert "BENCHMARK RESULTS" in out


def test_setup_failure_exits_nonzero(tmp_path, capsys):
    argv = [
        "--suites", "average_blog_ranking",
        "--database-url", f"sqlite:///{tmp_path / 'missing' / 'dir' / 'bench.db'}",
        "--output-dir", str(tmp_path / "out"),
    ]
    assert run_benchmark.main(argv) == 1
    assert "Run aborted" in capsys.readouterr().out


def test_plot_results_from_run(run_args, tmp_path, capsys):
    assert run_benchmark.main(["--suites", "query_buffering", "--param", "NumBlogs=5", *run_args]) == 0

    report = tmp_path / "report.html"
    assert plot_results.main(["--dir", str(tmp_path / "out"), "--output", str(report)]) == 0
    html = report.read_text()
    assert "query_buffering" in html
    assert "Streaming" in html
    assert "Mean time" in capsys.readouterr().out


def test_plot_results_missing_dir(tmp_path):
    assert plot_results.main(["--dir", str(tmp_path / "nope"), "--no-html"]) == 1


def test_find_latest_benchmark_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        plot_results.find_latest_benchmark_dir(tmp_path / ".tmp")

    for name in ("bench_20240101_000000", "bench_20240102_000000"):
        (tmp_path / ".tmp" / name).mkdir(parents=True)
        (tmp_path / ".tmp" / name / "results.json").write_text('{"results": []}')

    latest = plot_results.find_latest_benchmark_dir(tmp_path / ".tmp")
    assert latest.name.startswith("bench_")


def test_result_label():
    assert plot_results.result_label({"benchmark": "Related", "params": {"NumBlogs": 5, "Mode": "Lazy"}}) == "Related[5, Lazy]"
    assert plot_results.result_label({"benchmark": "Tracking", "params": {}}) == "Tracking"
