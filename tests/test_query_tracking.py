import pytest

from ormbench.benchmarks import QueryTrackingBehavior
from ormbench.db import Post

from tests.helpers import count_orphan_posts, count_rows, statements_for


@pytest.fixture
def suite(make_suite):
    return make_suite(QueryTrackingBehavior, NumBlogs=2, NumPostsPerBlog=3)


def snapshot(posts):
    return [(p.id, p.title, p.content, p.blog_id, p.blog.id, p.blog.url, p.blog.rating) for p in posts]


def test_setup_seeds_posts_for_every_blog(suite):
    assert count_rows(suite) == 2
    assert count_rows(suite, Post) == 6
    assert count_orphan_posts(suite) == 0


def test_setup_again_recreates_the_same_dataset(suite):
    first = snapshot(suite.tracking())
    suite.setup()

    assert count_rows(suite) == 2
    assert count_rows(suite, Post) == 6
    assert count_orphan_posts(suite) == 0
    assert snapshot(suite.tracking()) == first


def test_default_params():
    assert QueryTrackingBehavior.params == {"NumBlogs": [1], "NumPostsPerBlog": [5000]}


def test_tracking_and_identity_resolution_return_same_values(suite):
    tracked = suite.tracking()
    resolved = suite.no_tracking_with_identity_resolution()

    assert len(tracked) == len(resolved) == 6
    assert snapshot(tracked) == snapshot(resolved)


def test_no_tracking_returns_same_values(suite):
    assert snapshot(suite.no_tracking()) == snapshot(suite.tracking())


def test_tracking_shares_blog_instances(suite):
    posts = suite.tracking()
    assert len({id(p.blog) for p in posts}) == 2


def test_identity_resolution_shares_blog_instances(suite):
    posts = suite.no_tracking_with_identity_resolution()
    assert len({id(p.blog) for p in posts}) == 2


def test_no_tracking_duplicates_blog_instances(suite):
    posts = suite.no_tracking()
    assert len({id(p.blog) for p in posts}) == 6
    assert len({p.blog.id for p in posts}) == 2


@pytest.mark.parametrize("name", ["tracking", "no_tracking", "no_tracking_with_identity_resolution"])
def test_posts_and_blogs_load_in_one_query(suite, name):
    _, statements = statements_for(suite, getattr(suite, name))
    assert statements == 1
