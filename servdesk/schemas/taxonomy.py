"""Request/response schemas for knowledge-base categories and tags (the taxonomy articles hang off)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    parent_id: int | None = None
    sort_order: int = Field(default=0, ge=0)


class CategoryUpdate(BaseModel):
    """Partial update; an explicit "parent_id": null moves the category to the root."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    parent_id: int | None = None
    sort_order: int | None = Field(default=None, ge=0)


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: str | None = None
    parent_id: int | None = None
    sort_order: int
    article_count: int


class CategoryTreeNode(CategoryResponse):
    """Category with its children, siblings ordered by (sort_order, name)."""

    children: list["CategoryTreeNode"] = Field(default_factory=list)


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class TagUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


class TagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    article_count: int
    created_at: datetime | None = None
