"""User accounts: session resolution, role-set assignment, and account creation."""

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from servdesk.core.database import atomic
from servdesk.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from servdesk.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
    verify_password,
)
from servdesk.models import Role, User, UserRole
from servdesk.schemas.auth import CurrentUser
from servdesk.services.authorization import authorize_action
from servdesk.services.policy import role_names, session_role_set

logger = logging.getLogger(__name__)


def resolve_session(user: User) -> CurrentUser:
    """Snapshot a User row as the session actor. No stored roles resolves to {AGENT}."""
    return CurrentUser(
        id=user.id,
        username=user.username,
        roles=session_role_set(row.role for row in user.role_rows),
        is_active=bool(user.is_active),
    )


def authenticate(db: Session, username: str, password: str) -> User | None:
    """Return the user when the credentials match, else None."""
    user = db.query(User).filter(User.username == username).first()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def list_users(db: Session, actor: CurrentUser) -> list[User]:
    authorize_action(actor, "users.list")
    return db.query(User).order_by(User.id).all()


def set_user_roles(
    db: Session,
    actor: CurrentUser,
    user_id: int,
    roles: Iterable[Role],
) -> User:
    """Replace a user's role set (SUPER_ADMIN only). The new set must not be empty."""
    authorize_action(actor, "users.manage_roles")
    desired = frozenset(roles)
    if not desired:
        raise ValidationFailedError({"roles": "At least one role is required"})

    with atomic(db):
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User")
        held = {row.role for row in user.role_rows}
        user.role_rows = [row for row in user.role_rows if row.role in desired] + [
            UserRole(role=Role(name), assigned_by_id=actor.id)
            for name in role_names(desired)
            if Role(name) not in held
        ]
    logger.info(
        "Roles updated: user_id=%s roles=%s by user_id=%s",
        user_id,
        role_names(desired),
        actor.id,
    )
    return user


def create_user(
    db: Session,
    username: str,
    password: str,
    roles: Iterable[Role] = (Role.AGENT,),
) -> User:
    """Create an active account with the given role set (used by the bootstrap CLI)."""
    username = username.strip()
    errors: dict[str, str] = {}
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        errors["username"] = "Invalid username length."
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        errors["password"] = f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters."
    desired = frozenset(roles)
    if not desired:
        errors["roles"] = "At least one role is required"
    if errors:
        raise ValidationFailedError(errors)

    with atomic(db):
        if db.query(User.id).filter(User.username == username).first() is not None:
            raise ConflictError(f"User '{username}' already exists.")
        user = User(
            username=username,
            password_hash=hash_password(password),
            is_active=True,
            role_rows=[UserRole(role=Role(name)) for name in role_names(desired)],
        )
        db.add(user)
    return user
