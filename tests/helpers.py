from sqlalchemy import func, select

from ormbench.db import Blog, Post


def count_rows(suite, entity=Blog):
    with suite.session() as session:
        return session.scalar(select(func.count()).select_from(entity))


def count_orphan_posts(suite):
    """Posts whose blog_id does not resolve to a blog."""
    with suite.session() as session:
        stmt = (
            select(func.count())
            .select_from(Post)
            .outerjoin(Blog, Post.blog_id == Blog.id)
            .where(Blog.id.is_(None))
        )
        return session.scalar(stmt)


def statements_for(suite, func):
    suite.counter.reset()
    result = func()
    return result, suite.counter.count
