"""SQLAlchemy ORM models."""

from servdesk.models.article import Article, ArticleStatus, ArticleTag
from servdesk.models.base import Base
from servdesk.models.category import Category
from servdesk.models.tag import Tag
from servdesk.models.user import Role, User, UserRole

__all__ = [
    "Article",
    "ArticleStatus",
    "ArticleTag",
    "Base",
    "Category",
    "Role",
    "Tag",
    "User",
    "UserRole",
]
