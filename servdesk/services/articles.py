"""
Article orchestration: every mutation is one transaction of
validate -> lock current row -> compute next state -> persist -> reconcile counters.

Coarse permission (may this actor call the operation at all) comes from the action
table; the status-change gate comes from the lifecycle rules.
"""

import logging
import math
from datetime import UTC, datetime
from typing import NamedTuple

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from servdesk.core.config import settings
from servdesk.core.database import atomic
from servdesk.core.exceptions import ForbiddenError, NotFoundError, ValidationFailedError
from servdesk.models import Article, ArticleStatus, ArticleTag, Category, Tag
from servdesk.schemas.articles import ArticleCreate, ArticleListParams, ArticleUpdate
from servdesk.schemas.auth import CurrentUser
from servdesk.services.authorization import authorize_action
from servdesk.services.counters import CATEGORY, TAG, reconcile, reconcile_many, tags_to_reconcile
from servdesk.services.lifecycle import (
    INITIAL_STATUS,
    apply_transition,
    check_transition,
    validate_article_fields,
)
from servdesk.services.slugs import flush_with_unique_slug, require_slug
from servdesk.services.visibility import get_visible_article, sees_everything, visible_predicate

logger = logging.getLogger(__name__)


class ArticlePage(NamedTuple):
    items: list[Article]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _lock_article(db: Session, article_id: int) -> Article:
    """Load the article with a row lock held until the transaction ends."""
    article = db.query(Article).filter(Article.id == article_id).with_for_update().first()
    if article is None:
        raise NotFoundError("Article")
    return article


def article_tag_ids(db: Session, article_id: int) -> list[int]:
    rows = db.execute(
        select(ArticleTag.tag_id).where(ArticleTag.article_id == article_id).order_by(ArticleTag.tag_id)
    )
    return list(rows.scalars())


def tag_ids_by_article(db: Session, article_ids: list[int]) -> dict[int, list[int]]:
    """Tag ids for several articles in one query (for list responses)."""
    result: dict[int, list[int]] = {article_id: [] for article_id in article_ids}
    if not article_ids:
        return result
    rows = db.execute(
        select(ArticleTag.article_id, ArticleTag.tag_id)
        .where(ArticleTag.article_id.in_(article_ids))
        .order_by(ArticleTag.article_id, ArticleTag.tag_id)
    )
    for article_id, tag_id in rows:
        result[article_id].append(tag_id)
    return result


def _check_references(db: Session, category_id: int | None, tag_ids: set[int]) -> None:
    """Referenced category and tags must exist; a dangling reference is a validation error."""
    errors: dict[str, str] = {}
    if category_id is not None and db.get(Category, category_id) is None:
        errors["category_id"] = "Category not found"
    if tag_ids:
        found = set(db.execute(select(Tag.id).where(Tag.id.in_(sorted(tag_ids)))).scalars())
        missing = sorted(tag_ids - found)
        if missing:
            errors["tag_ids"] = "Tags not found: " + ", ".join(str(t) for t in missing)
    if errors:
        raise ValidationFailedError(errors)


def create_article(
    db: Session,
    actor: CurrentUser,
    data: ArticleCreate,
) -> Article:
    """Create a DRAFT article authored by the actor (SUPERVISOR and above)."""
    authorize_action(actor, "kb.articles.create")
    errors = validate_article_fields(data.title, data.content, data.excerpt)
    if errors:
        raise ValidationFailedError(errors)
    base_slug = require_slug(data.title, "title")
    tag_ids = set(data.tag_ids)

    with atomic(db):
        _check_references(db, data.category_id, tag_ids)
        article = Article(
            title=data.title.strip(),
            content=data.content,
            excerpt=data.excerpt,
            status=INITIAL_STATUS,
            category_id=data.category_id,
            author_id=actor.id,
            view_count=0,
            published_at=None,
        )
        flush_with_unique_slug(db, "articles", article, base_slug)
        db.add_all(ArticleTag(article_id=article.id, tag_id=tag_id) for tag_id in sorted(tag_ids))
        reconcile(db, CATEGORY, article.category_id)
        reconcile_many(db, TAG, tag_ids)

    logger.info(
        "Article created: id=%s slug=%s author_id=%s tags=%s",
        article.id,
        article.slug,
        actor.id,
        len(tag_ids),
    )
    return article


def update_article(
    db: Session,
    actor: CurrentUser,
    article_id: int,
    data: ArticleUpdate,
    now: datetime | None = None,
) -> Article:
    """
    Apply a partial update.

    A status change is checked against the lifecycle gate before anything is written;
    a denied change raises ForbiddenError and leaves the article as it was. Counters
    are reconciled only for the category pair and the tags that actually changed.
    """
    authorize_action(actor, "kb.articles.update")
    supplied = data.model_fields_set

    errors = validate_article_fields(
        data.title if "title" in supplied else None,
        data.content if "content" in supplied else None,
        data.excerpt,
        partial=True,
    )
    for field in ("title", "content"):
        if field in supplied and getattr(data, field) is None:
            errors[field] = f"{field.capitalize()} cannot be null"
    if errors:
        raise ValidationFailedError(errors)
    base_slug = require_slug(data.title, "title") if data.title is not None else None

    with atomic(db):
        article = _lock_article(db, article_id)
        current = article.status
        target = data.status if data.status is not None else current

        decision = check_transition(actor.roles, current, target)
        if not decision.allowed:
            logger.info(
                "Status change denied: article_id=%s %s -> %s user_id=%s",
                article.id,
                current.value,
                target.value,
                actor.id,
            )
            raise ForbiddenError(
                decision.required_roles,
                f"change status from {current.value} to {target.value}",
            )

        old_category_id = article.category_id
        new_category_id = data.category_id if "category_id" in supplied else old_category_id
        old_tag_ids = set(article_tag_ids(db, article.id))
        new_tag_ids = set(data.tag_ids) if data.tag_ids is not None else old_tag_ids
        _check_references(
            db,
            new_category_id if new_category_id != old_category_id else None,
            new_tag_ids - old_tag_ids,
        )

        retitled = data.title is not None and data.title.strip() != article.title
        if retitled:
            article.title = data.title.strip()
        if data.content is not None:
            article.content = data.content
        if "excerpt" in supplied:
            article.excerpt = data.excerpt
        article.category_id = new_category_id

        result = apply_transition(current, target, article.published_at, now or _utcnow())
        article.status = result.status
        article.published_at = result.published_at

        if retitled:
            flush_with_unique_slug(db, "articles", article, base_slug, exclude_id=article.id)

        changed_tag_ids = tags_to_reconcile(old_tag_ids, new_tag_ids)
        if changed_tag_ids:
            removed = old_tag_ids - new_tag_ids
            if removed:
                db.query(ArticleTag).filter(
                    ArticleTag.article_id == article.id,
                    ArticleTag.tag_id.in_(sorted(removed)),
                ).delete(synchronize_session=False)
            db.add_all(
                ArticleTag(article_id=article.id, tag_id=tag_id)
                for tag_id in sorted(new_tag_ids - old_tag_ids)
            )
        if new_category_id != old_category_id:
            reconcile_many(db, CATEGORY, [old_category_id, new_category_id])
        reconcile_many(db, TAG, changed_tag_ids)

    if target != current:
        logger.info(
            "Article status changed: id=%s %s -> %s by user_id=%s",
            article_id,
            current.value,
            target.value,
            actor.id,
        )
    return article


def soft_delete_article(
    db: Session,
    actor: CurrentUser,
    article_id: int,
    now: datetime | None = None,
) -> Article:
    """
    Archive the article (SUPERVISOR and above).

    The row and its tag associations stay, so no counter changes. published_at is
    kept.
    """
    authorize_action(actor, "kb.articles.archive")
    with atomic(db):
        article = _lock_article(db, article_id)
        result = apply_transition(
            article.status, ArticleStatus.ARCHIVED, article.published_at, now or _utcnow()
        )
        article.status = result.status
        article.published_at = result.published_at
    logger.info("Article archived: id=%s by user_id=%s", article_id, actor.id)
    return article


def hard_delete_article(db: Session, actor: CurrentUser, article_id: int) -> None:
    """Remove the article and its tag associations (ADMIN and above), then recount."""
    authorize_action(actor, "kb.articles.delete")
    with atomic(db):
        article = _lock_article(db, article_id)
        category_id = article.category_id
        tag_ids = article_tag_ids(db, article.id)
        db.query(ArticleTag).filter(ArticleTag.article_id == article.id).delete(
            synchronize_session=False
        )
        db.delete(article)
        reconcile(db, CATEGORY, category_id)
        reconcile_many(db, TAG, tag_ids)
    logger.info(
        "Article deleted permanently: id=%s by user_id=%s (tags reconciled=%s)",
        article_id,
        actor.id,
        len(tag_ids),
    )


def get_article(db: Session, actor: CurrentUser, article_id: int) -> Article:
    """Single article for staff; NotFoundError when absent or not visible to the actor."""
    authorize_action(actor, "kb.articles.read")
    return get_visible_article(db, actor.roles, actor.id, article_id)


def list_articles(db: Session, actor: CurrentUser, params: ArticleListParams) -> ArticlePage:
    """Visibility-filtered listing, newest first."""
    authorize_action(actor, "kb.articles.read")
    limit = min(params.limit, settings.ARTICLES_MAX_PAGE_SIZE)

    query = db.query(Article).filter(visible_predicate(actor.roles, actor.id, params.status))
    if params.category_id is not None:
        query = query.filter(Article.category_id == params.category_id)
    if params.tag_id is not None:
        query = query.filter(
            Article.id.in_(select(ArticleTag.article_id).where(ArticleTag.tag_id == params.tag_id))
        )
    if params.author_id is not None and sees_everything(actor.roles):
        query = query.filter(Article.author_id == params.author_id)
    if params.search and params.search.strip():
        term = f"%{params.search.strip()}%"
        query = query.filter(or_(Article.title.ilike(term), Article.content.ilike(term)))

    total = query.count()
    items = (
        query.order_by(Article.created_at.desc(), Article.id.desc())
        .offset((params.page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ArticlePage(items=items, total=total, page=params.page, limit=limit)


def list_published_articles(
    db: Session,
    page: int = 1,
    limit: int = 10,
    category_id: int | None = None,
    search: str | None = None,
) -> ArticlePage:
    """Public knowledge base listing: PUBLISHED only, most recently published first."""
    limit = max(1, min(limit, settings.PUBLIC_ARTICLES_MAX_PAGE_SIZE))
    page = max(1, page)
    query = db.query(Article).filter(Article.status == ArticleStatus.PUBLISHED)
    if category_id is not None:
        query = query.filter(Article.category_id == category_id)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(Article.title.ilike(term), Article.content.ilike(term)))
    total = query.count()
    items = (
        query.order_by(Article.published_at.desc(), Article.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ArticlePage(items=items, total=total, page=page, limit=limit)


def get_published_article_by_slug(db: Session, slug: str) -> Article:
    """Published article by slug; drafts and archived articles are NotFound."""
    article = (
        db.query(Article)
        .filter(Article.slug == slug, Article.status == ArticleStatus.PUBLISHED)
        .first()
    )
    if article is None:
        raise NotFoundError("Article")
    return article
