"""Tag endpoints (writes require ADMIN or SUPER_ADMIN)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from servdesk.api.v1.auth import get_current_user
from servdesk.core.database import get_db
from servdesk.schemas.auth import CurrentUser
from servdesk.schemas.taxonomy import TagCreate, TagResponse, TagUpdate
from servdesk.services.tags import create_tag, delete_tag, list_tags, rename_tag

router = APIRouter()


@router.get("", response_model=list[TagResponse])
def get_tags(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[TagResponse]:
    """All tags, most used first."""
    return [TagResponse.model_validate(t) for t in list_tags(db, current_user)]


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
def post_tag(
    body: TagCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TagResponse:
    return TagResponse.model_validate(create_tag(db, current_user, body))


@router.patch("/{tag_id}", response_model=TagResponse)
def patch_tag(
    tag_id: int,
    body: TagUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> TagResponse:
    return TagResponse.model_validate(rename_tag(db, current_user, tag_id, body))


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_tag(
    tag_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    delete_tag(db, current_user, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
