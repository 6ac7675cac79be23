"""API v1 routes."""

from fastapi import APIRouter

from servdesk.api.v1 import access, articles, auth, categories, health, public, tags

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(access.router, prefix="/access", tags=["access"])
router.include_router(articles.router, prefix="/kb/articles", tags=["kb"])
router.include_router(categories.router, prefix="/kb/categories", tags=["kb"])
router.include_router(tags.router, prefix="/kb/tags", tags=["kb"])
router.include_router(public.router, prefix="/kb/public", tags=["kb-public"])
