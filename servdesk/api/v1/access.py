"""Route-access checks for the dashboard shell (navigation guards)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from servdesk.api.v1.auth import get_current_user
from servdesk.schemas.auth import CurrentUser, RouteAccessResponse
from servdesk.services.authorization import ensure_active
from servdesk.services.policy import can_access_route

router = APIRouter()


@router.get("/route", response_model=RouteAccessResponse)
def check_route(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    path: Annotated[str, Query(min_length=1, max_length=500)],
) -> RouteAccessResponse:
    """Whether the caller may open a dashboard path."""
    ensure_active(current_user)
    return RouteAccessResponse(path=path, allowed=can_access_route(current_user.roles, path))
