"""Seed routines for the blogging sample data."""

from datetime import datetime

from sqlalchemy.orm import Session

from .schema import Blog, Post

CREATION_TIME = datetime(2020, 1, 1)


def seed_blogs(
    session: Session,
    num_blogs: int,
    num_posts_per_blog: int = 0,
    blog_cls=Blog,
    post_cls=Post,
) -> int:
    """Insert ``num_blogs`` blogs, each owning ``num_posts_per_blog`` posts.

    Blog ``i`` gets rating ``i % 5``. Works with either mapping of the
    blogging tables. Returns the number of blogs inserted.
    """
    if num_blogs < 0 or num_posts_per_blog < 0:
        raise ValueError("row counts must not be negative")

    session.add_all(
        blog_cls(
            name=f"Blog{i}",
            url=f"blog{i}.blogs.net",
            creation_time=CREATION_TIME,
            rating=i % 5,
            posts=[
                post_cls(title=f"Post{j}", content=f"Content of post {j} on blog {i}")
                for j in range(num_posts_per_blog)
            ],
        )
        for i in range(num_blogs)
    )
    session.commit()
    return num_blogs
