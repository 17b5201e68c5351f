"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from taskflow.auth.router import router as auth_router
from taskflow.categories.router import router as categories_router
from taskflow.config import get_settings
from taskflow.dashboard.router import router as dashboard_router
from taskflow.database import close_db, init_db
from taskflow.health.router import router as health_router
from taskflow.middleware import setup_middleware
from taskflow.notifications.router import router as notifications_router
from taskflow.redis_client import close_redis, init_redis
from taskflow.tags.router import router as tags_router
from taskflow.tasks.router import router as tasks_router
from taskflow.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)
    logger.info("app_started", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await close_redis()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Taskflow API",
        description="Personal task management: tasks, categories, tags, dashboard and notifications",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(tasks_router)
    app.include_router(categories_router)
    app.include_router(tags_router)
    app.include_router(dashboard_router)
    app.include_router(notifications_router)

    return app


app = create_app()
