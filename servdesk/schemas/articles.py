"""Request/response schemas for knowledge-base articles."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from servdesk.models.article import ArticleStatus


class ArticleCreate(BaseModel):
    """New article. Status is not accepted: every article starts as DRAFT."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    excerpt: str | None = Field(default=None, max_length=500)
    category_id: int | None = Field(default=None, description="Existing category id")
    tag_ids: list[int] = Field(default_factory=list, description="Existing tag ids")


class ArticleUpdate(BaseModel):
    """
    Partial update. Only fields present in the request body are applied, so an
    explicit "category_id": null detaches the category while omitting it keeps it.
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    content: str | None = Field(default=None, min_length=1)
    excerpt: str | None = Field(default=None, max_length=500)
    category_id: int | None = None
    tag_ids: list[int] | None = Field(default=None, description="Replaces the whole tag set")
    status: ArticleStatus | None = None


class ArticleListParams(BaseModel):
    """Filters and paging for the staff article listing."""

    status: ArticleStatus | None = None
    category_id: int | None = None
    tag_id: int | None = None
    author_id: int | None = Field(default=None, description="Honoured for SUPERVISOR and above only")
    search: str | None = Field(default=None, max_length=200)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)


class ArticleResponse(BaseModel):
    """Article as returned to staff."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    status: ArticleStatus
    category_id: int | None = None
    author_id: int
    view_count: int
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    tag_ids: list[int] = Field(default_factory=list)


class ArticleListResponse(BaseModel):
    """One page of articles plus paging totals."""

    items: list[ArticleResponse]
    total: int
    page: int
    limit: int
    pages: int


class PublicArticleResponse(BaseModel):
    """Published article as shown on the public knowledge base (no internal ids)."""

    model_config = ConfigDict(from_attributes=True)

    title: str
    slug: str
    content: str
    excerpt: str | None = None
    view_count: int
    published_at: datetime | None = None
    category_id: int | None = None


class PublicArticleListResponse(BaseModel):
    items: list[PublicArticleResponse]
    total: int
    page: int
    limit: int
