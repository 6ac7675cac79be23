"""Unauthenticated knowledge-base reads: published articles only."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from servdesk.core.config import settings
from servdesk.core.database import get_db
from servdesk.schemas.articles import PublicArticleListResponse, PublicArticleResponse
from servdesk.services.articles import get_published_article_by_slug, list_published_articles
from servdesk.services.view_counter import increment_view_count

router = APIRouter()


@router.get("/articles", response_model=PublicArticleListResponse)
def get_public_articles(
    db: Annotated[Session, Depends(get_db)],
    category_id: int | None = None,
    search: Annotated[str | None, Query(max_length=200)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=settings.PUBLIC_ARTICLES_MAX_PAGE_SIZE)] = 10,
) -> PublicArticleListResponse:
    result = list_published_articles(db, page=page, limit=limit, category_id=category_id, search=search)
    return PublicArticleListResponse(
        items=[PublicArticleResponse.model_validate(a) for a in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.get("/articles/{slug}", response_model=PublicArticleResponse)
def get_public_article(
    slug: str,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
) -> PublicArticleResponse:
    """Published article by slug. The view is counted after the response is sent."""
    article = get_published_article_by_slug(db, slug)
    if settings.VIEW_COUNT_ENABLED:
        background_tasks.add_task(increment_view_count, article.id)
    return PublicArticleResponse.model_validate(article)
