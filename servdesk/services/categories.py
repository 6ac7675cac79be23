"""Category management: an acyclic tree of categories that articles are filed under."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from servdesk.core.database import atomic
from servdesk.core.exceptions import (
    CircularReferenceError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from servdesk.models import Article, Category
from servdesk.schemas.auth import CurrentUser
from servdesk.schemas.taxonomy import CategoryCreate, CategoryTreeNode, CategoryUpdate
from servdesk.services.authorization import authorize_action
from servdesk.services.slugs import flush_with_unique_slug, require_slug

logger = logging.getLogger(__name__)


def build_category_tree(categories: list[Category]) -> list[CategoryTreeNode]:
    """
    Nest categories under their parents. Siblings are ordered by (sort_order, name);
    a category whose parent is not in the list is treated as a root.
    """
    nodes = {c.id: CategoryTreeNode.model_validate(c) for c in categories}
    roots: list[CategoryTreeNode] = []
    for category in categories:
        node = nodes[category.id]
        parent = nodes.get(category.parent_id) if category.parent_id is not None else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)

    def _sort(level: list[CategoryTreeNode]) -> list[CategoryTreeNode]:
        level.sort(key=lambda n: (n.sort_order, n.name))
        for n in level:
            _sort(n.children)
        return level

    return _sort(roots)


def would_create_cycle(db: Session, category_id: int, new_parent_id: int | None) -> bool:
    """True if making new_parent_id the parent of category_id would close a loop."""
    visited: set[int] = set()
    current = new_parent_id
    while current is not None:
        if current == category_id or current in visited:
            return True
        visited.add(current)
        current = db.execute(
            select(Category.parent_id).where(Category.id == current)
        ).scalar_one_or_none()
    return False


def has_child_categories(db: Session, category_id: int) -> bool:
    return db.query(Category.id).filter(Category.parent_id == category_id).first() is not None


def _lock_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).with_for_update().first()
    if category is None:
        raise NotFoundError("Category")
    return category


def list_categories(db: Session, actor: CurrentUser) -> list[Category]:
    authorize_action(actor, "kb.categories.read")
    return db.query(Category).order_by(Category.sort_order, Category.name).all()


def get_category(db: Session, actor: CurrentUser, category_id: int) -> Category:
    authorize_action(actor, "kb.categories.read")
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category")
    return category


def create_category(db: Session, actor: CurrentUser, data: CategoryCreate) -> Category:
    authorize_action(actor, "kb.categories.manage")
    base_slug = require_slug(data.name, "name")
    with atomic(db):
        if data.parent_id is not None and db.get(Category, data.parent_id) is None:
            raise ValidationFailedError({"parent_id": "Parent category not found"})
        category = Category(
            name=data.name.strip(),
            description=data.description,
            parent_id=data.parent_id,
            sort_order=data.sort_order,
            article_count=0,
        )
        flush_with_unique_slug(db, "categories", category, base_slug)
    logger.info("Category created: id=%s slug=%s", category.id, category.slug)
    return category


def update_category(
    db: Session,
    actor: CurrentUser,
    category_id: int,
    data: CategoryUpdate,
) -> Category:
    """Partial update. Re-parenting is refused when it would create a cycle."""
    authorize_action(actor, "kb.categories.manage")
    supplied = data.model_fields_set
    base_slug = require_slug(data.name, "name") if data.name is not None else None

    with atomic(db):
        category = _lock_category(db, category_id)

        if "parent_id" in supplied and data.parent_id != category.parent_id:
            if data.parent_id is not None:
                if db.get(Category, data.parent_id) is None:
                    raise ValidationFailedError({"parent_id": "Parent category not found"})
                if would_create_cycle(db, category.id, data.parent_id):
                    raise CircularReferenceError()
            category.parent_id = data.parent_id

        if "description" in supplied:
            category.description = data.description
        if data.sort_order is not None:
            category.sort_order = data.sort_order
        if data.name is not None and data.name.strip() != category.name:
            category.name = data.name.strip()
            flush_with_unique_slug(db, "categories", category, base_slug, exclude_id=category.id)
    return category


def delete_category(db: Session, actor: CurrentUser, category_id: int) -> None:
    """Delete a leaf category; its articles become uncategorized."""
    authorize_action(actor, "kb.categories.manage")
    with atomic(db):
        category = _lock_category(db, category_id)
        if has_child_categories(db, category.id):
            raise ConflictError("Cannot delete category with subcategories")
        detached = (
            db.query(Article)
            .filter(Article.category_id == category.id)
            .update({Article.category_id: None}, synchronize_session=False)
        )
        db.delete(category)
    logger.info("Category deleted: id=%s articles_detached=%s", category_id, detached)
