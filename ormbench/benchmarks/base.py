"""Building blocks shared by the benchmark suites.

A suite is a class with a one-time ``setup()`` and a number of methods
marked with :func:`benchmark`. The harness instantiates the suite once per
parameter combination, runs ``setup()`` and then measures every marked
method, each call working in its own session.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import MetaData

from ormbench.db import (
    DATABASE_URL,
    Base,
    StatementCounter,
    create_db_engine,
    create_session_factory,
    get_db_session,
    recreate_database,
)
from ormbench.errors import ConfigurationError


class RelatedEntityLoadingMode(Enum):
    Eager = "Eager"
    Explicit = "Explicit"
    Lazy = "Lazy"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class BenchmarkInfo:
    """Metadata attached to a method by :func:`benchmark`."""

    name: str
    attribute: str
    baseline: bool = False
    description: Optional[str] = None


def benchmark(name: Optional[str] = None, baseline: bool = False, description: Optional[str] = None):
    """Mark a suite method as a measured operation."""

    def decorate(func: Callable) -> Callable:
        doc = description or (func.__doc__ or "").strip().split("\n")[0] or None
        func.__benchmark__ = BenchmarkInfo(
            name=name or func.__name__,
            attribute=func.__name__,
            baseline=baseline,
            description=doc,
        )
        return func

    return decorate


def discover_benchmarks(suite_cls) -> List[BenchmarkInfo]:
    """Return the marked methods of ``suite_cls`` in definition order."""
    found: Dict[str, BenchmarkInfo] = {}
    for klass in reversed(suite_cls.__mro__):
        for attribute, member in vars(klass).items():
            info = getattr(member, "__benchmark__", None)
            if isinstance(info, BenchmarkInfo):
                found[attribute] = info

    benchmarks = list(found.values())
    if sum(1 for info in benchmarks if info.baseline) > 1:
        raise ConfigurationError(f"{suite_cls.__name__} marks more than one baseline")
    return benchmarks


def attribute_name(param: str) -> str:
    """``NumPostsPerBlog`` -> ``num_posts_per_blog``"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", param).lower()


class BenchmarkSuite:
    """Base class for a group of comparable operations on one dataset."""

    name = ""
    description = ""
    # Parameter name -> values swept by the harness, in declaration order
    params: Dict[str, List[Any]] = {}
    metadata: MetaData = Base.metadata

    def __init__(self, database_url: Optional[str] = None, echo: bool = False, **params):
        unknown = sorted(set(params) - set(self.params))
        if unknown:
            raise ConfigurationError(f"{self.name} has no parameter(s) {', '.join(unknown)}")

        self.param_values = {key: params.get(key, values[0]) for key, values in self.params.items()}
        for key, value in self.param_values.items():
            setattr(self, attribute_name(key), value)

        self.database_url = database_url or DATABASE_URL
        self.engine = create_db_engine(self.database_url, echo=echo)
        self.session_factory = create_session_factory(self.engine)
        self.counter = StatementCounter(self.engine)

    def setup(self) -> None:
        """Drop, recreate and seed the store. Runs once per parameter combination."""
        raise NotImplementedError

    def recreate(self, metadata: Optional[MetaData] = None) -> None:
        recreate_database(self.engine, metadata if metadata is not None else self.metadata)

    def session(self):
        """Scoped session for one invocation."""
        return get_db_session(self.session_factory)

    def bound_benchmarks(self):
        return [(info, getattr(self, info.attribute)) for info in discover_benchmarks(type(self))]

    def dispose(self) -> None:
        self.counter.detach()
        self.engine.dispose()

    def __repr__(self):
        return f"<{type(self).__name__} {self.param_values}>"
