"""Database package for the benchmark suites."""

from .engine import (
    DATABASE_URL,
    StatementCounter,
    create_db_engine,
    create_session_factory,
    get_db_session,
    recreate_database,
)
from .schema import Base, Blog, LazyBase, LazyBlog, LazyPost, Post
from .seed import seed_blogs

__all__ = [
    "DATABASE_URL",
    "StatementCounter",
    "create_db_engine",
    "create_session_factory",
    "get_db_session",
    "recreate_database",
    "Base",
    "Blog",
    "Post",
    "LazyBase",
    "LazyBlog",
    "LazyPost",
    "seed_blogs",
]
