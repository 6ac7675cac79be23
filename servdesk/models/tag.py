"""ORM model for knowledge-base tags."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, func

from servdesk.models.base import Base


class Tag(Base):
    """Flat label attached to articles through kb_article_tags."""

    __tablename__ = "kb_tags"
    __table_args__ = (CheckConstraint("article_count >= 0", name="ck_kb_tags_article_count"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    article_count = Column(Integer, nullable=False, default=0)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
