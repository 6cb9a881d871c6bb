# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .routes import health, prometheus, realtime
from .routes.v1 import (
    conversations as conversations_v1,
    messages as messages_v1,
    notification_preferences as notification_preferences_v1,
    notifications as notifications_v1,
    presence as presence_v1,
)
from .services.messaging.connection_manager import connection_manager

# Configure logging
logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    # Startup
    logger.info(f"{BRAND_NAME} API starting up...")
    init_db()
    if settings.presence_refcount_enabled:
        logger.info("Presence reference counting enabled")

    yield

    # Shutdown
    open_sockets = connection_manager.connection_count()
    connection_manager.reset()
    logger.info(f"{BRAND_NAME} API shutting down ({open_sockets} sockets dropped)")


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)
# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)
logger.info("CORS allow_origins=%s", settings.cors_origin_list)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")

# Mount v1 routes
api_v1.include_router(conversations_v1.router, prefix="/conversations")
api_v1.include_router(messages_v1.router, prefix="/messages")
api_v1.include_router(presence_v1.router, prefix="/presence")
api_v1.include_router(notifications_v1.router, prefix="/notifications")
api_v1.include_router(notification_preferences_v1.router, prefix="/notifications")

app.include_router(api_v1)

# Infrastructure routes (unversioned)
app.include_router(health.router)
app.include_router(prometheus.router)
app.include_router(realtime.router)


__all__ = ["app"]
