import pytest

from ormbench.benchmarks import AverageBlogRanking, discover_benchmarks

from tests.helpers import count_rows, statements_for

VARIANTS = ["load_entities", "load_entities_non_tracking", "project_only_ranking", "calculate_in_database"]


@pytest.fixture(scope="module")
def suite(tmp_path_factory):
    url = f"sqlite:///{tmp_path_factory.mktemp('ranking') / 'bench.db'}"
    suite = AverageBlogRanking(database_url=url, NumBlogs=1000)
    suite.setup()
    yield suite
    suite.dispose()


def test_setup_seeds_blogs(suite):
    assert count_rows(suite) == 1000


@pytest.mark.parametrize("name", VARIANTS)
def test_every_variant_computes_the_mean_rating(suite, name):
    assert getattr(suite, name)() == pytest.approx(2.0)


def test_projection_matches_database_aggregate(suite):
    assert suite.project_only_ranking() == pytest.approx(suite.calculate_in_database())


def test_calculate_in_database_returns_float(suite):
    assert isinstance(suite.calculate_in_database(), float)


@pytest.mark.parametrize("name", VARIANTS)
def test_every_variant_is_a_single_query(suite, name):
    _, statements = statements_for(suite, getattr(suite, name))
    assert statements == 1


def test_uneven_ratings(make_suite):
    suite = make_suite(AverageBlogRanking, NumBlogs=3)
    # ratings 0, 1, 2
    assert suite.load_entities() == pytest.approx(1.0)
    assert suite.calculate_in_database() == pytest.approx(1.0)


@pytest.mark.parametrize("name", VARIANTS)
def test_empty_table_yields_zero(make_suite, name):
    suite = make_suite(AverageBlogRanking, NumBlogs=0)
    assert getattr(suite, name)() == 0.0


def test_calculate_in_database_is_the_baseline():
    baselines = [info.name for info in discover_benchmarks(AverageBlogRanking) if info.baseline]
    assert baselines == ["CalculateInDatabase"]
