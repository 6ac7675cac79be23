"""Pydantic request/response schemas."""

from servdesk.schemas.articles import (
    ArticleCreate,
    ArticleListParams,
    ArticleListResponse,
    ArticleResponse,
    ArticleUpdate,
    PublicArticleListResponse,
    PublicArticleResponse,
)
from servdesk.schemas.auth import CurrentUser, LoginRequest, TokenResponse
from servdesk.schemas.health import HealthResponse
from servdesk.schemas.taxonomy import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
    TagCreate,
    TagResponse,
    TagUpdate,
)

__all__ = [
    "ArticleCreate",
    "ArticleListParams",
    "ArticleListResponse",
    "ArticleResponse",
    "ArticleUpdate",
    "CategoryCreate",
    "CategoryResponse",
    "CategoryTreeNode",
    "CategoryUpdate",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "PublicArticleListResponse",
    "PublicArticleResponse",
    "TagCreate",
    "TagResponse",
    "TagUpdate",
    "TokenResponse",
]
