"""
Average blog ranking: four ways of computing the mean rating of all blogs.

EXPECTED RESULTS (slowest to fastest):
- LoadEntities: every column of every blog is materialized and tracked
- LoadEntitiesNonTracking: same rows, nothing retained by the session
- ProjectOnlyRanking: only the rating column is transferred
- CalculateInDatabase: the store returns a single scalar
"""

from sqlalchemy import func, select

from ormbench.db import Blog, seed_blogs

from .base import BenchmarkSuite, benchmark
from .materialize import untracked_blogs


def _mean(total: int, count: int) -> float:
    return total / count if count else 0.0


class AverageBlogRanking(BenchmarkSuite):
    name = "average_blog_ranking"
    description = "Client-side vs. in-database aggregation of Blog.rating"
    params = {
        "NumBlogs": [1000],
    }

    def setup(self) -> None:
        self.recreate()
        with self.session() as session:
            seed_blogs(session, self.num_blogs)

    @benchmark("LoadEntities")
    def load_entities(self) -> float:
        total = count = 0
        with self.session() as session:
            for blog in session.scalars(select(Blog)):
                total += blog.rating
                count += 1
        return _mean(total, count)

    @benchmark("LoadEntitiesNonTracking")
    def load_entities_non_tracking(self) -> float:
        total = count = 0
        with self.session() as session:
            for blog in untracked_blogs(session):
                total += blog.rating
                count += 1
        return _mean(total, count)

    @benchmark("ProjectOnlyRanking")
    def project_only_ranking(self) -> float:
        total = count = 0
        with self.session() as session:
            for rating in session.scalars(select(Blog.rating)):
                total += rating
                count += 1
        return _mean(total, count)

    @benchmark("CalculateInDatabase", baseline=True)
    def calculate_in_database(self) -> float:
        with self.session() as session:
            average = session.scalar(select(func.avg(Blog.rating)))
        # Some drivers return Decimal; an empty table yields NULL
        return float(average) if average is not None else 0.0
