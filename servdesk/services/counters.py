"""
Denormalized article_count maintenance for categories and tags.

article_count is a projection: it is always recomputed from the live association
rows and overwritten, never incremented or decremented. Recomputing is idempotent,
so reconciling an aggregate twice, or reconciling one that did not change, is safe.
This module is the only writer of article_count.
"""

import logging
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from servdesk.models import Article, ArticleTag, Category, Tag

logger = logging.getLogger(__name__)

CATEGORY = "category"
TAG = "tag"

_AGGREGATES = {
    CATEGORY: (Category, Article.id, Article.category_id),
    TAG: (Tag, ArticleTag.article_id, ArticleTag.tag_id),
}


def count_live(db: Session, kind: str, entity_id: int) -> int:
    """Number of articles associated with the aggregate right now (archived articles included)."""
    _, counted, fk = _spec(kind)
    return db.execute(select(func.count(counted)).where(fk == entity_id)).scalar_one()


def _spec(kind: str):
    try:
        return _AGGREGATES[kind]
    except KeyError:
        raise ValueError(f"Unknown counter kind: {kind!r}") from None


def reconcile(db: Session, kind: str, entity_id: int | None) -> int | None:
    """
    Overwrite the aggregate's article_count with the live association count.

    Returns the new count, or None when entity_id is None or the aggregate row no
    longer exists. Pending session changes are flushed first so the count sees them.
    """
    if entity_id is None:
        return None
    model, _, _ = _spec(kind)
    db.flush()
    aggregate = db.get(model, entity_id)
    if aggregate is None:
        return None
    live = count_live(db, kind, entity_id)
    if aggregate.article_count != live:
        logger.debug(
            "Reconciled %s %s article_count %s -> %s",
            kind,
            entity_id,
            aggregate.article_count,
            live,
        )
    aggregate.article_count = live
    return live


def reconcile_many(db: Session, kind: str, entity_ids: Iterable[int | None]) -> dict[int, int]:
    """Reconcile each distinct id once. Missing rows and None ids are skipped."""
    results: dict[int, int] = {}
    for entity_id in sorted({i for i in entity_ids if i is not None}):
        count = reconcile(db, kind, entity_id)
        if count is not None:
            results[entity_id] = count
    return results


def tags_to_reconcile(old_tag_ids: Iterable[int], new_tag_ids: Iterable[int]) -> set[int]:
    """Tags whose association with the article changed: the symmetric difference."""
    return set(old_tag_ids) ^ set(new_tag_ids)


def reconcile_all(db: Session) -> tuple[int, int]:
    """
    Recompute article_count for every category and tag (repair job).

    Returns (categories_changed, tags_changed). Does not commit; the caller owns the
    transaction.
    """
    changed = {CATEGORY: 0, TAG: 0}
    for kind, (model, _, _) in _AGGREGATES.items():
        for entity_id, before in db.query(model.id, model.article_count).order_by(model.id).all():
            after = reconcile(db, kind, entity_id)
            if after is not None and after != before:
                changed[kind] += 1
    return changed[CATEGORY], changed[TAG]
