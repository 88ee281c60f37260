import pytest


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'bench.db'}"


@pytest.fixture
def make_suite(database_url):
    """Build suites against a throwaway SQLite file and dispose them afterwards."""
    suites = []

    def factory(suite_cls, setup=True, **params):
        suite = suite_cls(database_url=database_url, **params)
        suites.append(suite)
        if setup:
            suite.setup()
        return suite

    yield factory

    for suite in suites:
        suite.dispose()
