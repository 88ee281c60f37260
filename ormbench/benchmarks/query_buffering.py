"""
Buffering vs. streaming: materialize a whole result up front, or walk it
in partitions.

EXPECTED RESULTS:
- Buffered: peak memory grows with the row count
- Streaming: peak memory bounded by the partition size
"""

from sqlalchemy import select

from ormbench.db import Blog, seed_blogs

from .base import BenchmarkSuite, benchmark

STREAM_PARTITION_SIZE = 100


class QueryBuffering(BenchmarkSuite):
    name = "query_buffering"
    description = "Buffered .all() vs. streamed yield_per iteration"
    params = {
        "NumBlogs": [1000],
    }

    def setup(self) -> None:
        self.recreate()
        with self.session() as session:
            seed_blogs(session, self.num_blogs)

    @benchmark("Buffered", baseline=True)
    def buffered(self) -> int:
        with self.session() as session:
            blogs = session.scalars(select(Blog).order_by(Blog.id)).all()
            return len(blogs)

    @benchmark("Streaming")
    def streaming(self) -> int:
        count = 0
        with self.session() as session:
            stmt = select(Blog).order_by(Blog.id).execution_options(yield_per=STREAM_PARTITION_SIZE)
            for _ in session.scalars(stmt):
                count += 1
        return count
