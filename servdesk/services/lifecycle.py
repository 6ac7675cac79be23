"""
Article status machine: who may move an article between DRAFT, PUBLISHED and
ARCHIVED, and what happens to published_at when they do.

Everything here is pure. Orchestration (locking, persistence, counters) lives in
servdesk.services.articles.
"""

from dataclasses import dataclass
from datetime import datetime

from servdesk.models.article import ArticleStatus
from servdesk.models.user import Role
from servdesk.services.policy import ADMIN_ROLES, SUPERVISOR_ROLES, RoleSet, has_any_role

INITIAL_STATUS = ArticleStatus.DRAFT

TITLE_MAX_LEN = 200
EXCERPT_MAX_LEN = 500

# Statuses whose entry or exit changes what the public can see.
_PRIVILEGED_STATUSES = frozenset({ArticleStatus.PUBLISHED, ArticleStatus.ARCHIVED})


@dataclass(frozen=True)
class TransitionDecision:
    """Outcome of a transition check. required_roles is the gate that was applied."""

    allowed: bool
    required_roles: RoleSet


@dataclass(frozen=True)
class TransitionResult:
    """Status and published_at after a transition is applied."""

    status: ArticleStatus
    published_at: datetime | None


def required_roles_for_transition(current: ArticleStatus, target: ArticleStatus) -> RoleSet:
    """
    Roles that may move an article from current to target.

    Keeping the status (including DRAFT -> DRAFT) is a plain content edit and needs
    SUPERVISOR+. Any change that enters or leaves PUBLISHED or ARCHIVED needs ADMIN+.
    """
    if current == target:
        return SUPERVISOR_ROLES
    if current in _PRIVILEGED_STATUSES or target in _PRIVILEGED_STATUSES:
        return ADMIN_ROLES
    return SUPERVISOR_ROLES


def check_transition(
    actor_roles: frozenset[Role],
    current: ArticleStatus,
    target: ArticleStatus,
) -> TransitionDecision:
    required = required_roles_for_transition(current, target)
    return TransitionDecision(allowed=has_any_role(actor_roles, required), required_roles=required)


def apply_transition(
    current: ArticleStatus,
    target: ArticleStatus,
    published_at: datetime | None,
    now: datetime,
) -> TransitionResult:
    """
    Compute the next (status, published_at).

    Entering PUBLISHED from another status stamps now. ARCHIVED -> DRAFT clears the
    stamp. Every other move, PUBLISHED -> ARCHIVED included, keeps it, so an archived
    article remembers when it was last published.
    """
    if target == ArticleStatus.PUBLISHED and current != ArticleStatus.PUBLISHED:
        return TransitionResult(status=target, published_at=now)
    if current == ArticleStatus.ARCHIVED and target == ArticleStatus.DRAFT:
        return TransitionResult(status=target, published_at=None)
    return TransitionResult(status=target, published_at=published_at)


def validate_article_fields(
    title: str | None = None,
    content: str | None = None,
    excerpt: str | None = None,
    *,
    partial: bool = False,
) -> dict[str, str]:
    """
    Field constraints for article writes. Returns {field: message}; empty when valid.

    With partial=True (updates) a None title/content means "not supplied" and is skipped.
    """
    errors: dict[str, str] = {}
    if title is not None or not partial:
        stripped = (title or "").strip()
        if not stripped:
            errors["title"] = "Title is required"
        elif len(stripped) > TITLE_MAX_LEN:
            errors["title"] = f"Title must be at most {TITLE_MAX_LEN} characters"
    if content is not None or not partial:
        if not content:
            errors["content"] = "Content is required"
    if excerpt is not None and len(excerpt) > EXCERPT_MAX_LEN:
        errors["excerpt"] = f"Excerpt must be at most {EXCERPT_MAX_LEN} characters"
    return errors
