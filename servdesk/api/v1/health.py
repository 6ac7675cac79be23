"""Health check endpoint for load balancers; no authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from servdesk.core.config import settings
from servdesk.core.database import check_db_connected, get_db
from servdesk.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Annotated[Session, Depends(get_db)]) -> HealthResponse:
    """Report 'degraded' instead of failing when the database is unreachable."""
    connected = check_db_connected(db)
    return HealthResponse(
        status="ok" if connected else "degraded",
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
        view_counting=settings.VIEW_COUNT_ENABLED,
    )
