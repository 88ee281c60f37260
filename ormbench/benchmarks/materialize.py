"""Build entities from plain rows without attaching them to a session.

Instances created here carry no identity-map entry and no snapshot of
their loaded state, so nothing tracks changes made to them.
"""

from typing import Dict, Iterable, List, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from ormbench.db.schema import Blog, Post

BLOG_COLUMNS = ("id", "name", "url", "creation_time", "rating")
POST_COLUMNS = ("id", "title", "content", "blog_id")


def untracked(cls, columns: Sequence[str], values: Sequence):
    return cls(**dict(zip(columns, values)))


def blog_rows(session: Session):
    return session.execute(select(*(getattr(Blog, c) for c in BLOG_COLUMNS)).order_by(Blog.id))


def untracked_blogs(session: Session) -> Iterable[Blog]:
    for row in blog_rows(session):
        yield untracked(Blog, BLOG_COLUMNS, row)


def post_with_blog_rows(session: Session):
    """Every post joined with its blog, in a single query."""
    stmt = (
        select(*(getattr(Post, c) for c in POST_COLUMNS), *(getattr(Blog, c) for c in BLOG_COLUMNS))
        .join(Post.blog)
        .order_by(Post.id)
    )
    return session.execute(stmt)


def untracked_posts(session: Session, resolve_identity: bool = False) -> List[Post]:
    """Materialize posts with their blog included.

    Without identity resolution every post gets its own ``Blog`` instance,
    even when several posts share a blog row.
    """
    split = len(POST_COLUMNS)
    blogs: Dict[int, Blog] = {}
    posts = []
    for row in post_with_blog_rows(session):
        row = tuple(row)
        post = untracked(Post, POST_COLUMNS, row[:split])
        blog_id = row[split]
        if resolve_identity:
            blog = blogs.get(blog_id)
            if blog is None:
                blog = blogs[blog_id] = untracked(Blog, BLOG_COLUMNS, row[split:])
        else:
            blog = untracked(Blog, BLOG_COLUMNS, row[split:])
        set_committed_value(post, "blog", blog)
        posts.append(post)
    return posts
