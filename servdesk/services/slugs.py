"""URL slug derivation and per-namespace uniqueness for articles, categories, and tags."""

import logging
import re
import unicodedata

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from servdesk.core.config import settings
from servdesk.core.exceptions import ConflictError, ValidationFailedError
from servdesk.models import Article, Category, Tag

logger = logging.getLogger(__name__)

SLUG_NAMESPACES = {
    "articles": Article,
    "categories": Category,
    "tags": Tag,
}

_PUNCTUATION = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")


def slugify(text: str) -> str:
    """
    Lowercase, ASCII-folded, hyphen-separated form of text.

    Punctuation is dropped; runs of whitespace, underscores and hyphens collapse to a
    single hyphen; leading/trailing hyphens are trimmed. Text with no letters or
    digits yields "". slugify(slugify(x)) == slugify(x).
    """
    value = unicodedata.normalize("NFKD", text or "")
    value = value.encode("ascii", "ignore").decode("ascii")
    value = _PUNCTUATION.sub("", value.lower())
    value = _SEPARATORS.sub("-", value)
    return value.strip("-")


def require_slug(text: str, field: str) -> str:
    """slugify(text), raising ValidationFailedError on field when the result is empty."""
    slug = slugify(text)
    if not slug:
        raise ValidationFailedError({field: "must contain at least one letter or digit"})
    return slug


def _model_for(namespace: str):
    try:
        return SLUG_NAMESPACES[namespace]
    except KeyError:
        raise ValueError(f"Unknown slug namespace: {namespace!r}") from None


def ensure_unique_slug(
    db: Session,
    namespace: str,
    base_slug: str,
    exclude_id: int | None = None,
) -> str:
    """
    Return base_slug if no other row in the namespace uses it, else the smallest
    free base-<n> (n >= 1).

    exclude_id is the row being updated, so an entity never collides with itself.
    Gives up with ConflictError after SLUG_MAX_ATTEMPTS suffixes.
    """
    model = _model_for(namespace)
    query = db.query(model.slug).filter(
        or_(model.slug == base_slug, model.slug.like(f"{base_slug}-%"))
    )
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)

    suffixed = re.compile(rf"^{re.escape(base_slug)}-(\d+)$")
    taken_base = False
    taken_suffixes: set[int] = set()
    for (slug,) in query.all():
        if slug == base_slug:
            taken_base = True
            continue
        match = suffixed.match(slug)
        if match:
            taken_suffixes.add(int(match.group(1)))

    if not taken_base:
        return base_slug
    for n in range(1, settings.SLUG_MAX_ATTEMPTS + 1):
        if n not in taken_suffixes:
            return f"{base_slug}-{n}"
    raise ConflictError(f"Could not allocate a unique slug for '{base_slug}'")


def flush_with_unique_slug(
    db: Session,
    namespace: str,
    row,
    base_slug: str,
    exclude_id: int | None = None,
) -> str:
    """
    Assign a unique slug to row and flush it, retrying on a unique-index collision.

    Two writers can both see base_slug as free; the store's unique index rejects the
    second flush. Each attempt runs inside a SAVEPOINT so the loser can re-derive the
    suffix without aborting the surrounding transaction. row must not have been added
    to the session yet when it is new.
    """
    rejected: str | None = None
    for attempt in range(1, settings.SLUG_MAX_ATTEMPTS + 1):
        savepoint = db.begin_nested()
        candidate = ensure_unique_slug(db, namespace, base_slug, exclude_id)
        if candidate == rejected:
            # Same slug still looks free: the collision was on another unique column.
            savepoint.rollback()
            raise ConflictError(f"Could not save '{base_slug}': a unique value is already in use")
        row.slug = candidate
        db.add(row)
        try:
            db.flush()
        except IntegrityError:
            savepoint.rollback()
            rejected = candidate
            logger.warning(
                "Slug collision in %s for %r (attempt %s); retrying",
                namespace,
                base_slug,
                attempt,
            )
            continue
        savepoint.commit()
        return row.slug
    raise ConflictError(f"Could not allocate a unique slug for '{base_slug}'")
