from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from fresq.api.routes.canvas import router as canvas_router
from fresq.api.routes.health import router as health_router
from fresq.api.routes.internal_admin import router as internal_admin_router
from fresq.api.routes.tickets import router as tickets_router
from fresq.core.config import get_settings
from fresq.core.logging import configure_logging
from fresq.db.session import dispose_engine
from fresq.services.live_state import close_redis

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    logger.info("api_started")
    yield
    await close_redis()
    await dispose_engine()
    logger.info("api_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Fresq Canvas API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.include_router(health_router)
    app.include_router(canvas_router)
    app.include_router(tickets_router)
    app.include_router(internal_admin_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "fresq.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
