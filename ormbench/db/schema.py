"""Database schema for the blogging sample data.

Two mappings share the ``Blogs`` and ``Posts`` tables. ``Blog``/``Post``
never load related rows on attribute access: navigation properties must be
eagerly or explicitly loaded. ``LazyBlog``/``LazyPost`` load them on first
access instead.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, declarative_base, orm_insert_sentinel, relationship

Base = declarative_base()
LazyBase = declarative_base()


class Blog(Base):
    """Blog owning an ordered collection of posts."""

    __tablename__ = "Blogs"

    id = Column(Integer, primary_key=True)
    name = Column(String(255))
    url = Column(String(255), index=True)
    creation_time = Column(DateTime)
    rating = Column(Integer, nullable=False, default=0)
    # Lets one flush insert several blogs in a single INSERT .. RETURNING on
    # backends whose autoincrement keys come back in no guaranteed order
    _sentinel: Mapped[int] = orm_insert_sentinel()

    posts = relationship(
        "Post",
        back_populates="blog",
        cascade="all, delete-orphan",
        order_by="Post.id",
        lazy="raise",
    )

    def __repr__(self):
        return f"<Blog id={self.id} url={self.url!r}>"


class Post(Base):
    """Post belonging to exactly one blog."""

    __tablename__ = "Posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(255))
    content = Column(Text)
    blog_id = Column(Integer, ForeignKey("Blogs.id"), nullable=False, index=True)

    blog = relationship("Blog", back_populates="posts", lazy="raise")

    def __repr__(self):
        return f"<Post id={self.id} blog_id={self.blog_id}>"


class LazyBlog(LazyBase):
    __tablename__ = "Blogs"

    id = Column(Integer, primary_key=True)
    name = Column(String(255))
    url = Column(String(255), index=True)
    creation_time = Column(DateTime)
    rating = Column(Integer, nullable=False, default=0)
    # See Blog._sentinel
    _sentinel: Mapped[int] = orm_insert_sentinel()

    posts = relationship(
        "LazyPost",
        back_populates="blog",
        cascade="all, delete-orphan",
        order_by="LazyPost.id",
        lazy="select",
    )


class LazyPost(LazyBase):
    __tablename__ = "Posts"

    id = Column(Integer, primary_key=True)
    title = Column(String(255))
    content = Column(Text)
    blog_id = Column(Integer, ForeignKey("Blogs.id"), nullable=False, index=True)

    blog = relationship("LazyBlog", back_populates="posts", lazy="select")
