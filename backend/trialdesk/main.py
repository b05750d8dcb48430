# backend/trialdesk/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI

from . import __version__
from .core.config import settings
from .core.request_context import attach_request_id_filter
from .database import init_db
from .errors import register_error_handlers
from .middleware.request_id import RequestIdMiddleware
from .routes import health
from .routes.v1 import families as families_v1
from .routes.v1 import sessions as sessions_v1
from .routes.v1 import slots as slots_v1
from .routes.v1 import trials as trials_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
attach_request_id_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info("TrialDesk API starting up...")
    logger.info(f"Environment: {settings.environment}")
    init_db()
    yield
    logger.info("TrialDesk API shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title="TrialDesk API",
        description="Trial lesson scheduling: slots, assignment, lifecycle and session history",
        version=__version__,
        lifespan=app_lifespan,
    )
    register_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(trials_v1.router, prefix="/trials")
    api_v1.include_router(families_v1.router, prefix="/families")
    api_v1.include_router(slots_v1.router, prefix="/slots")
    api_v1.include_router(sessions_v1.router)

    app.include_router(health.router)
    app.include_router(api_v1)
    return app


app = create_app()
