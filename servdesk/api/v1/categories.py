"""Category endpoints (writes require ADMIN or SUPER_ADMIN)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from servdesk.api.v1.auth import get_current_user
from servdesk.core.database import get_db
from servdesk.schemas.auth import CurrentUser
from servdesk.schemas.taxonomy import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from servdesk.services.categories import (
    build_category_tree,
    create_category,
    delete_category,
    get_category,
    list_categories,
    update_category,
)

router = APIRouter()


@router.get("", response_model=list[CategoryResponse])
def get_categories(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[CategoryResponse]:
    return [CategoryResponse.model_validate(c) for c in list_categories(db, current_user)]


@router.get("/tree", response_model=list[CategoryTreeNode])
def get_category_tree(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[CategoryTreeNode]:
    return build_category_tree(list_categories(db, current_user))


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category_by_id(
    category_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CategoryResponse:
    return CategoryResponse.model_validate(get_category(db, current_user, category_id))


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def post_category(
    body: CategoryCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CategoryResponse:
    return CategoryResponse.model_validate(create_category(db, current_user, body))


@router.patch("/{category_id}", response_model=CategoryResponse)
def patch_category(
    category_id: int,
    body: CategoryUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> CategoryResponse:
    return CategoryResponse.model_validate(update_category(db, current_user, category_id, body))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_category(
    category_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """409 while the category still has subcategories; its articles become uncategorized."""
    delete_category(db, current_user, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
