"""ORM models for knowledge-base articles and their tag associations."""

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)

from servdesk.models.base import Base


class ArticleStatus(str, enum.Enum):
    """Publication state of an article."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class Article(Base):
    """
    Knowledge-base article.

    slug is unique across all articles; the unique index is the final guard for
    concurrent creation of the same title.
    """

    __tablename__ = "kb_articles"
    __table_args__ = (CheckConstraint("view_count >= 0", name="ck_kb_articles_view_count"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(String(500), nullable=True)
    status = Column(
        Enum(ArticleStatus, name="kb_article_status"),
        nullable=False,
        default=ArticleStatus.DRAFT,
        index=True,
    )
    category_id = Column(
        Integer,
        ForeignKey("kb_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    view_count = Column(Integer, nullable=False, default=0)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class ArticleTag(Base):
    """Many-to-many join between articles and tags; no lifecycle of its own."""

    __tablename__ = "kb_article_tags"

    article_id = Column(
        Integer,
        ForeignKey("kb_articles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id = Column(
        Integer,
        ForeignKey("kb_tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
