"""Staff article endpoints: list, read, create, update, archive and permanent delete."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.orm import Session

from servdesk.api.v1.auth import get_current_user
from servdesk.core.config import settings
from servdesk.core.database import get_db
from servdesk.models import Article, ArticleStatus
from servdesk.schemas.articles import (
    ArticleCreate,
    ArticleListParams,
    ArticleListResponse,
    ArticleResponse,
    ArticleUpdate,
)
from servdesk.schemas.auth import CurrentUser
from servdesk.services.articles import (
    article_tag_ids,
    create_article,
    get_article,
    hard_delete_article,
    list_articles,
    soft_delete_article,
    tag_ids_by_article,
    update_article,
)
from servdesk.services.view_counter import increment_view_count

router = APIRouter()


def article_response(article: Article, tag_ids: list[int]) -> ArticleResponse:
    response = ArticleResponse.model_validate(article)
    return response.model_copy(update={"tag_ids": tag_ids})


@router.get("", response_model=ArticleListResponse)
def get_articles(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    status_filter: Annotated[ArticleStatus | None, Query(alias="status")] = None,
    category_id: int | None = None,
    tag_id: int | None = None,
    author_id: int | None = None,
    search: Annotated[str | None, Query(max_length=200)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=settings.ARTICLES_MAX_PAGE_SIZE)] = 20,
) -> ArticleListResponse:
    """Articles visible to the caller, newest first. Agents see published articles and their own drafts."""
    params = ArticleListParams(
        status=status_filter,
        category_id=category_id,
        tag_id=tag_id,
        author_id=author_id,
        search=search,
        page=page,
        limit=limit,
    )
    result = list_articles(db, current_user, params)
    tags = tag_ids_by_article(db, [a.id for a in result.items])
    return ArticleListResponse(
        items=[article_response(a, tags[a.id]) for a in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
    )


@router.get("/{article_id}", response_model=ArticleResponse)
def get_article_by_id(
    article_id: int,
    background_tasks: BackgroundTasks,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ArticleResponse:
    """Single article; 404 when absent or not visible. Reading a published article counts a view."""
    article = get_article(db, current_user, article_id)
    if settings.VIEW_COUNT_ENABLED and article.status == ArticleStatus.PUBLISHED:
        background_tasks.add_task(increment_view_count, article.id)
    return article_response(article, article_tag_ids(db, article.id))


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
def post_article(
    body: ArticleCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ArticleResponse:
    article = create_article(db, current_user, body)
    return article_response(article, article_tag_ids(db, article.id))


@router.patch("/{article_id}", response_model=ArticleResponse)
def patch_article(
    article_id: int,
    body: ArticleUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ArticleResponse:
    """Partial update. Changing status needs ADMIN or SUPER_ADMIN."""
    article = update_article(db, current_user, article_id, body)
    return article_response(article, article_tag_ids(db, article.id))


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_article(
    article_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    permanent: bool = False,
) -> Response:
    """Archive the article, or with ?permanent=true remove it (ADMIN and above)."""
    if permanent:
        hard_delete_article(db, current_user, article_id)
    else:
        soft_delete_article(db, current_user, article_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
