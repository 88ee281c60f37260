"""
Related entity loading: eager, explicit and lazy loading of blog posts.

EXPECTED RESULTS:
- Eager: a single joined query; cheapest when the posts are used, wasted
  work when they are not (NoRelated)
- Explicit: one extra query per blog, issued only when asked for
- Lazy: one extra query per blog on first access (the N+1 problem)
"""

from sqlalchemy import inspect, select
from sqlalchemy.orm import joinedload
from sqlalchemy.orm.attributes import set_committed_value

from ormbench.db import Blog, LazyBase, LazyBlog, LazyPost, Post, seed_blogs

from .base import BenchmarkSuite, RelatedEntityLoadingMode, benchmark


def _loaded_post_count(blog) -> int:
    posts = inspect(blog).dict.get("posts")
    return len(posts) if posts is not None else 0


class RelatedEntityLoading(BenchmarkSuite):
    name = "related_loading"
    description = "Eager vs. explicit vs. lazy loading of Blog.posts"
    params = {
        "NumBlogs": [50],
        "NumPostsPerBlog": [10],
        "RelatedEntityLoadingMode": [
            RelatedEntityLoadingMode.Eager,
            RelatedEntityLoadingMode.Explicit,
            RelatedEntityLoadingMode.Lazy,
        ],
    }

    @property
    def lazy(self) -> bool:
        return self.related_entity_loading_mode is RelatedEntityLoadingMode.Lazy

    def setup(self) -> None:
        if self.lazy:
            self.recreate(LazyBase.metadata)
            with self.session() as session:
                seed_blogs(
                    session,
                    self.num_blogs,
                    self.num_posts_per_blog,
                    blog_cls=LazyBlog,
                    post_cls=LazyPost,
                )
        else:
            self.recreate()
            with self.session() as session:
                seed_blogs(session, self.num_blogs, self.num_posts_per_blog)

    def _load_blogs(self, session):
        mode = self.related_entity_loading_mode
        if mode is RelatedEntityLoadingMode.Lazy:
            return session.scalars(select(LazyBlog).order_by(LazyBlog.id)).all()
        if mode is RelatedEntityLoadingMode.Eager:
            stmt = select(Blog).options(joinedload(Blog.posts)).order_by(Blog.id)
            return session.scalars(stmt).unique().all()
        return session.scalars(select(Blog).order_by(Blog.id)).all()

    @benchmark("NoRelated", baseline=True)
    def no_related(self) -> int:
        """Load blogs without touching their posts."""
        with self.session() as session:
            return sum(_loaded_post_count(blog) for blog in self._load_blogs(session))

    @benchmark("Related")
    def related(self) -> int:
        """Load blogs and every blog's posts."""
        mode = self.related_entity_loading_mode
        count = 0
        with self.session() as session:
            for blog in self._load_blogs(session):
                if mode is RelatedEntityLoadingMode.Explicit:
                    posts = session.scalars(
                        select(Post).where(Post.blog_id == blog.id).order_by(Post.id)
                    ).all()
                    set_committed_value(blog, "posts", posts)
                count += len(blog.posts)
        return count
