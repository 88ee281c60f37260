import pytest

from ormbench.benchmarks import RelatedEntityLoading, RelatedEntityLoadingMode
from ormbench.db import Post

from tests.helpers import count_orphan_posts, count_rows, statements_for

NUM_BLOGS = 4
NUM_POSTS_PER_BLOG = 3
MODES = list(RelatedEntityLoadingMode)


@pytest.fixture
def make_related(make_suite):
    def factory(mode):
        return make_suite(
            RelatedEntityLoading,
            NumBlogs=NUM_BLOGS,
            NumPostsPerBlog=NUM_POSTS_PER_BLOG,
            RelatedEntityLoadingMode=mode,
        )

    return factory


@pytest.mark.parametrize("mode", MODES)
def test_row_counts_do_not_depend_on_mode(make_related, mode):
    suite = make_related(mode)
    assert count_rows(suite) == NUM_BLOGS
    assert count_rows(suite, Post) == NUM_BLOGS * NUM_POSTS_PER_BLOG
    assert count_orphan_posts(suite) == 0


@pytest.mark.parametrize("mode", MODES)
def test_related_loads_every_post(make_related, mode):
    suite = make_related(mode)
    assert suite.related() == NUM_BLOGS * NUM_POSTS_PER_BLOG


@pytest.mark.parametrize("mode, expected", [
    (RelatedEntityLoadingMode.Eager, NUM_BLOGS * NUM_POSTS_PER_BLOG),
    (RelatedEntityLoadingMode.Explicit, 0),
    (RelatedEntityLoadingMode.Lazy, 0),
])
def test_no_related_only_materializes_eager_posts(make_related, mode, expected):
    suite = make_related(mode)
    assert suite.no_related() == expected


@pytest.mark.parametrize("mode, expected", [
    (RelatedEntityLoadingMode.Eager, 1),
    (RelatedEntityLoadingMode.Explicit, 1 + NUM_BLOGS),
    (RelatedEntityLoadingMode.Lazy, 1 + NUM_BLOGS),
])
def test_related_statement_counts(make_related, mode, expected):
    suite = make_related(mode)
    _, statements = statements_for(suite, suite.related)
    assert statements == expected


@pytest.mark.parametrize("mode", MODES)
def test_no_related_is_a_single_query(make_related, mode):
    suite = make_related(mode)
    _, statements = statements_for(suite, suite.no_related)
    assert statements == 1


def test_switching_mode_on_the_same_store(make_related):
    lazy = make_related(RelatedEntityLoadingMode.Lazy)
    eager = make_related(RelatedEntityLoadingMode.Eager)
    assert count_rows(lazy) == count_rows(eager) == NUM_BLOGS
    assert lazy.related() == eager.related()


def test_mode_defaults_sweep_all_modes():
    assert RelatedEntityLoading.params["RelatedEntityLoadingMode"] == MODES
