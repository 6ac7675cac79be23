"""Turn policy predicates into errors: the enforcement seam used by every service call."""

import logging
from collections.abc import Iterable

from servdesk.core.exceptions import AccountDisabledError, ForbiddenError
from servdesk.models.user import Role
from servdesk.schemas.auth import CurrentUser
from servdesk.services.policy import ACTION_ROLES, can_perform, has_any_role, role_names

logger = logging.getLogger(__name__)


def ensure_active(actor: CurrentUser) -> None:
    """Raise AccountDisabledError for a deactivated account. Checked before any policy."""
    if not actor.is_active:
        logger.info("Rejected request from disabled account user_id=%s", actor.id)
        raise AccountDisabledError()


def authorize(actor: CurrentUser, required_roles: Iterable[Role], action: str | None = None) -> None:
    """Require an active account holding at least one of required_roles."""
    ensure_active(actor)
    required = frozenset(required_roles)
    if not has_any_role(actor.roles, required):
        logger.info(
            "Forbidden: user_id=%s roles=%s required=%s action=%s",
            actor.id,
            role_names(actor.roles),
            role_names(required),
            action,
        )
        raise ForbiddenError(required, action)


def authorize_action(actor: CurrentUser, action: str) -> None:
    """Require an active account allowed to perform a registered action.

    Unregistered actions map to an empty role set, which nobody holds.
    """
    ensure_active(actor)
    if can_perform(actor.roles, action):
        return
    authorize(actor, ACTION_ROLES.get(action, frozenset()), action)
