"""
Query tracking behavior: what change tracking costs when loading posts.

EXPECTED RESULTS:
- Tracking: highest memory, the session keeps an identity map entry and a
  snapshot of every loaded row
- NoTracking: less memory, but each post carries its own copy of the blog
- NoTrackingWithIdentityResolution: in between, one blog instance per row
  and no snapshots
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from ormbench.db import Post, seed_blogs

from .base import BenchmarkSuite, benchmark
from .materialize import untracked_posts


class QueryTrackingBehavior(BenchmarkSuite):
    name = "query_tracking"
    description = "Tracking vs. no-tracking queries of posts including their blog"
    params = {
        "NumBlogs": [1],
        "NumPostsPerBlog": [5000],
    }

    def setup(self) -> None:
        self.recreate()
        with self.session() as session:
            seed_blogs(session, self.num_blogs, self.num_posts_per_blog)

    @benchmark("Tracking")
    def tracking(self) -> List[Post]:
        """Load posts and blogs into the session's identity map."""
        with self.session() as session:
            stmt = select(Post).options(joinedload(Post.blog)).order_by(Post.id)
            return session.scalars(stmt).all()

    @benchmark("NoTracking")
    def no_tracking(self) -> List[Post]:
        """Materialize detached posts, one blog instance per post."""
        with self.session() as session:
            return untracked_posts(session)

    @benchmark("NoTrackingWithIdentityResolution")
    def no_tracking_with_identity_resolution(self) -> List[Post]:
        """Materialize detached posts sharing one instance per blog."""
        with self.session() as session:
            return untracked_posts(session, resolve_identity=True)
