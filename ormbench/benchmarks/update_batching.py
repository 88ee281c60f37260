"""
Update batching: one unit-of-work flush vs. committing every change.

Each invocation updates the url of the first blog and adds two new blogs.
Saving all three changes at once lets the ORM batch the inserts into one
statement and commit once; committing after every change sends each INSERT
on its own and adds a COMMIT roundtrip per change.

Both benchmarks return the roundtrips of one invocation, COMMITs included.
"""

import itertools

from sqlalchemy import select

from ormbench.db import Blog, seed_blogs

from .base import BenchmarkSuite, benchmark


class UpdateBatching(BenchmarkSuite):
    name = "update_batching"
    description = "Single flush vs. one commit per change"
    params = {
        "NumBlogs": [100],
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._invocations = itertools.count()

    def setup(self) -> None:
        self.recreate()
        with self.session() as session:
            seed_blogs(session, self.num_blogs)

    def _changes(self, session):
        n = next(self._invocations)
        blog = session.scalars(select(Blog).order_by(Blog.id).limit(1)).one()
        blog.url = f"someotherblog{n}.blogs.net"
        yield
        session.add(Blog(name=f"NewBlog{n}a", url=f"newblog{n}a.blogs.net"))
        yield
        session.add(Blog(name=f"NewBlog{n}b", url=f"newblog{n}b.blogs.net"))
        yield

    @benchmark("SingleSaveChanges", baseline=True)
    def single_save_changes(self) -> int:
        """Update one blog and insert two, then commit once."""
        with self.session() as session:
            self.counter.reset()
            for _ in self._changes(session):
                pass
            session.commit()
            return self.counter.count

    @benchmark("SaveChangesPerOperation")
    def save_changes_per_operation(self) -> int:
        """Commit after each of the same three changes."""
        with self.session() as session:
            self.counter.reset()
            for _ in self._changes(session):
                session.commit()
            return self.counter.count
