"""Tag management. Tag names are unique; deleting a tag drops its article associations."""

import logging

from sqlalchemy.orm import Session

from servdesk.core.database import atomic
from servdesk.core.exceptions import ConflictError, NotFoundError
from servdesk.models import ArticleTag, Tag
from servdesk.schemas.auth import CurrentUser
from servdesk.schemas.taxonomy import TagCreate, TagUpdate
from servdesk.services.authorization import authorize_action
from servdesk.services.slugs import flush_with_unique_slug, require_slug

logger = logging.getLogger(__name__)


def _ensure_name_free(db: Session, name: str, exclude_id: int | None = None) -> None:
    query = db.query(Tag.id).filter(Tag.name == name)
    if exclude_id is not None:
        query = query.filter(Tag.id != exclude_id)
    if query.first() is not None:
        raise ConflictError("Tag with this name already exists")


def list_tags(db: Session, actor: CurrentUser) -> list[Tag]:
    """All tags, most used first."""
    authorize_action(actor, "kb.tags.read")
    return db.query(Tag).order_by(Tag.article_count.desc(), Tag.name).all()


def create_tag(db: Session, actor: CurrentUser, data: TagCreate) -> Tag:
    authorize_action(actor, "kb.tags.manage")
    name = data.name.strip()
    base_slug = require_slug(name, "name")
    with atomic(db):
        _ensure_name_free(db, name)
        tag = Tag(name=name, article_count=0)
        flush_with_unique_slug(db, "tags", tag, base_slug)
    logger.info("Tag created: id=%s slug=%s", tag.id, tag.slug)
    return tag


def rename_tag(db: Session, actor: CurrentUser, tag_id: int, data: TagUpdate) -> Tag:
    authorize_action(actor, "kb.tags.manage")
    name = data.name.strip()
    base_slug = require_slug(name, "name")
    with atomic(db):
        tag = db.query(Tag).filter(Tag.id == tag_id).with_for_update().first()
        if tag is None:
            raise NotFoundError("Tag")
        if name != tag.name:
            _ensure_name_free(db, name, exclude_id=tag.id)
            tag.name = name
            flush_with_unique_slug(db, "tags", tag, base_slug, exclude_id=tag.id)
    return tag


def delete_tag(db: Session, actor: CurrentUser, tag_id: int) -> None:
    authorize_action(actor, "kb.tags.manage")
    with atomic(db):
        tag = db.get(Tag, tag_id)
        if tag is None:
            raise NotFoundError("Tag")
        removed = (
            db.query(ArticleTag)
            .filter(ArticleTag.tag_id == tag_id)
            .delete(synchronize_session=False)
        )
        db.delete(tag)
    logger.info("Tag deleted: id=%s associations_removed=%s", tag_id, removed)
