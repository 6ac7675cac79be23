"""JWT login, session resolution (get_current_user), and user/role administration."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from servdesk.core.database import get_db
from servdesk.core.exceptions import UnauthenticatedError
from servdesk.core.security import create_access_token, decode_access_token
from servdesk.models.user import User
from servdesk.schemas.auth import (
    CurrentUser,
    LoginRequest,
    MeResponse,
    TokenResponse,
    UserListItem,
    UserRolesUpdate,
    UsersListResponse,
    user_list_item,
)
from servdesk.services.authorization import ensure_active
from servdesk.services.policy import accessible_routes, permissions_for, role_names
from servdesk.services.users import authenticate, list_users, resolve_session, set_user_roles

router = APIRouter()
security = HTTPBearer(auto_error=False)


@router.post("", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    user = authenticate(db, body.username, body.password)
    if user is None:
        raise UnauthenticatedError("Invalid username or password.")
    session = resolve_session(user)
    ensure_active(session)
    token = create_access_token(sub=user.id, roles=role_names(session.roles))
    return TokenResponse(access_token=token, token_type="bearer")


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """
    Dependency: resolve the Bearer JWT to the current user and their stored role set.

    Raises UnauthenticatedError (401) when the token is missing, invalid or names an
    unknown user. Account state is not checked here; every service call does that.
    """
    if credentials is None:
        raise UnauthenticatedError()
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise UnauthenticatedError("Invalid or expired token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthenticatedError("Invalid token payload")
    user = db.get(User, user_id)
    if user is None:
        raise UnauthenticatedError("User not found")
    return resolve_session(user)


@router.get("/me", response_model=MeResponse)
def me(current_user: Annotated[CurrentUser, Depends(get_current_user)]) -> MeResponse:
    """The session's role set, display role, permission keys and reachable dashboard routes."""
    ensure_active(current_user)
    return MeResponse(
        id=current_user.id,
        username=current_user.username,
        roles=role_names(current_user.roles),
        role=current_user.role,
        permissions=sorted(permissions_for(current_user.roles)),
        routes=accessible_routes(current_user.roles),
    )


@router.get("/users", response_model=UsersListResponse)
def get_users(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (ADMIN and above)."""
    users = list_users(db, current_user)
    return UsersListResponse(users=[user_list_item(u) for u in users])


@router.put("/users/{user_id}/roles", response_model=UserListItem)
def put_user_roles(
    user_id: int,
    body: UserRolesUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserListItem:
    """Replace a user's role set (SUPER_ADMIN only)."""
    user = set_user_roles(db, current_user, user_id, body.roles)
    return user_list_item(user)
