"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness plus the store and feature state the knowledge base depends on."""

    status: Literal["ok", "degraded"] = Field(
        default="ok",
        description="'degraded' when the database cannot be reached",
    )
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: Literal["connected", "disconnected"]
    view_counting: bool = Field(description="Whether published reads schedule view-count increments")
