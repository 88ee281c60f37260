"""Database engine configuration for the benchmark suites."""

import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

# Database URL - a local SQLite file unless overridden from the environment
DEFAULT_DATABASE_URL = "sqlite:///./.benchmark.db"
DATABASE_URL = os.environ.get("ORMBENCH_DATABASE_URL", DEFAULT_DATABASE_URL)


def create_db_engine(url: Optional[str] = None, echo: bool = False, **kwargs) -> Engine:
    """Create a synchronous engine for the given (or configured) database URL."""
    url = url or DATABASE_URL
    connect_args = kwargs.pop("connect_args", {})
    if make_url(url).get_backend_name() == "sqlite":
        connect_args.setdefault("check_same_thread", False)

    return create_engine(
        url,
        connect_args=connect_args,
        echo=echo,
        pool_pre_ping=True,
        **kwargs,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session maker bound to ``engine``."""
    return sessionmaker(autoflush=False, bind=engine)


@contextmanager
def get_db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Get a database session that is always closed on exit."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def recreate_database(engine: Engine, metadata: MetaData) -> None:
    """Drop and recreate every table in ``metadata``.

    Any data already stored at the engine's location is destroyed.
    """
    metadata.drop_all(bind=engine)
    metadata.create_all(bind=engine)


def mask_url(url: str) -> str:
    """Render a database URL with its password hidden."""
    return make_url(url).render_as_string(hide_password=True)


class StatementCounter:
    """Count database roundtrips made through an engine.

    Every cursor execution counts once (an ``executemany`` is sent as a
    single batch), and so does every COMMIT, which the cursor events never
    see.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.count = 0
        self.commits = 0
        event.listen(engine, "before_cursor_execute", self._on_execute)
        event.listen(engine, "commit", self._on_commit)

    def _on_execute(self, conn, cursor, statement, parameters, context, executemany):
        self.count += 1

    def _on_commit(self, conn):
        self.count += 1
        self.commits += 1

    def reset(self) -> None:
        self.count = 0
        self.commits = 0

    def detach(self) -> None:
        for identifier, fn in (("before_cursor_execute", self._on_execute), ("commit", self._on_commit)):
            if event.contains(self.engine, identifier, fn):
                event.remove(self.engine, identifier, fn)

    def __enter__(self):
        self.reset()
        return self

    def __exit__(self, exc_type, exc, tb):
        return False
