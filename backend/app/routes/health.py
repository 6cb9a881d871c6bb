# backend/app/routes/health.py
"""
Health check endpoint for the application.

Reports database connectivity and the number of open sockets on this
process.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..api.dependencies.database import get_db
from ..core.constants import API_VERSION
from ..services.messaging.connection_manager import connection_manager

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseModel):
    status: str
    version: str
    database: str
    open_sockets: int
    timestamp: datetime


@router.get("/health", response_model=HealthCheckResponse)
def health_check(response: Response, db: Session = Depends(get_db)) -> HealthCheckResponse:
    response.headers["Cache-Control"] = "no-store"
    database = "ok"
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}")
        database = "error"
        response.status_code = 503
    return HealthCheckResponse(
        status="healthy" if database == "ok" else "degraded",
        version=API_VERSION,
        database=database,
        open_sockets=connection_manager.connection_count(),
        timestamp=datetime.now(timezone.utc),
    )
