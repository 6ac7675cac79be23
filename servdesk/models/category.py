"""ORM model for hierarchical knowledge-base categories."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, func

from servdesk.models.base import Base


class Category(Base):
    """
    Category node in an acyclic parent tree.

    article_count is a denormalized projection of kb_articles.category_id and is
    written only by the counter reconciler.
    """

    __tablename__ = "kb_categories"
    __table_args__ = (
        CheckConstraint("article_count >= 0", name="ck_kb_categories_article_count"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(String(500), nullable=True)
    parent_id = Column(
        Integer,
        ForeignKey("kb_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    sort_order = Column(Integer, nullable=False, default=0)
    article_count = Column(Integer, nullable=False, default=0)
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
