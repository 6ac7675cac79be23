"""Request/response schemas for auth and role-management endpoints."""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from servdesk.models.user import Role
from servdesk.services.policy import highest_role, role_names


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=8, max_length=128, description="Password")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class CurrentUser(BaseModel):
    """
    Resolved session: the acting user and the role set every policy check reads.

    roles is never empty for a session built by get_current_user (an account with no
    stored roles resolves to {AGENT}). role is a display label derived from the set.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    roles: frozenset[Role]
    is_active: bool = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def role(self) -> str | None:
        top = highest_role(self.roles)
        return top.value if top is not None else None


class MeResponse(BaseModel):
    """Response for GET /auth/me."""

    id: int
    username: str
    roles: list[str]
    role: str | None = Field(default=None, description="Highest held role, for display")
    permissions: list[str] = Field(default_factory=list)
    routes: list[str] = Field(default_factory=list, description="Dashboard routes this user may open")


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    is_active: bool
    roles: list[str]
    role: str | None = None


class UsersListResponse(BaseModel):
    """Response for GET /auth/users (admin only)."""

    users: list[UserListItem]


class UserRolesUpdate(BaseModel):
    """Replacement role set for a user (SUPER_ADMIN only)."""

    roles: list[Role] = Field(..., description="Complete new role set; must not be empty")


def user_list_item(user) -> UserListItem:
    """Build the admin list entry for a User row."""
    roles = frozenset(r.role for r in user.role_rows)
    top = highest_role(roles)
    return UserListItem(
        id=user.id,
        username=user.username,
        is_active=user.is_active,
        roles=role_names(roles),
        role=top.value if top is not None else None,
    )


class RouteAccessResponse(BaseModel):
    """Whether the caller may open a dashboard path."""

    path: str
    allowed: bool
