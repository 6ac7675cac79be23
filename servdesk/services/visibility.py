"""Which articles an actor may see, as a query predicate and as a row check."""

from sqlalchemy import and_, false, or_, true
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from servdesk.core.exceptions import NotFoundError
from servdesk.models import Article, ArticleStatus, Role
from servdesk.services.policy import SUPERVISOR_ROLES, has_any_role


def sees_everything(actor_roles: frozenset[Role]) -> bool:
    """SUPERVISOR and above see articles in every status."""
    return has_any_role(actor_roles, SUPERVISOR_ROLES)


def visible_predicate(
    actor_roles: frozenset[Role],
    actor_id: int,
    status_filter: ArticleStatus | None = None,
) -> ColumnElement[bool]:
    """
    SQL clause selecting the articles visible to the actor.

    SUPERVISOR+ see everything, narrowed only by status_filter. An agent sees
    published articles and their own drafts, never archived ones. An agent's
    status_filter intersects that rule, so asking for ARCHIVED yields nothing.
    """
    if sees_everything(actor_roles):
        return Article.status == status_filter if status_filter is not None else true()

    if status_filter == ArticleStatus.ARCHIVED:
        return false()
    own_drafts = and_(Article.status == ArticleStatus.DRAFT, Article.author_id == actor_id)
    if status_filter == ArticleStatus.PUBLISHED:
        return Article.status == ArticleStatus.PUBLISHED
    if status_filter == ArticleStatus.DRAFT:
        return own_drafts
    return or_(Article.status == ArticleStatus.PUBLISHED, own_drafts)


def is_visible(article: Article, actor_roles: frozenset[Role], actor_id: int) -> bool:
    """Row-level form of visible_predicate (no status filter)."""
    if sees_everything(actor_roles):
        return True
    if article.status == ArticleStatus.PUBLISHED:
        return True
    return article.status == ArticleStatus.DRAFT and article.author_id == actor_id


def get_visible_article(
    db: Session,
    actor_roles: frozenset[Role],
    actor_id: int,
    article_id: int,
) -> Article:
    """Fetch one article, raising NotFoundError when it is absent or invisible to the actor."""
    article = db.get(Article, article_id)
    if article is None or not is_visible(article, actor_roles, actor_id):
        raise NotFoundError("Article")
    return article
