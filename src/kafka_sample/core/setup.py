from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from fastapi import APIRouter, FastAPI
from loguru import logger

from ..api import health_router
from .config import EnvironmentOption, Settings
from .logger import setup_logging


def lifespan_factory(
    settings: Settings,
) -> Callable[[FastAPI], AbstractAsyncContextManager[Any]]:
    """Factory to create a lifespan async context manager for a FastAPI app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(settings.LOG_LEVEL)
        logger.info(f"Starting {app.title} ({settings.ENVIRONMENT.value})")
        try:
            yield
        finally:
            logger.info(f"{app.title} shut down")

    return lifespan


def create_application(
    router: APIRouter,
    settings: Settings,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]] | None = None,
    **kwargs: Any,
) -> FastAPI:
    """Creates and configures a FastAPI application.

    The health router is always mounted next to ``router``. Interactive docs
    are only served outside production.
    """
    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        kwargs.update({"docs_url": None, "redoc_url": None, "openapi_url": None})

    application = FastAPI(
        title=kwargs.pop("title", settings.APP_NAME),
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION or "0.1.0",
        contact={"name": settings.CONTACT_NAME, "email": settings.CONTACT_EMAIL} if settings.CONTACT_NAME else None,
        license_info={"name": settings.LICENSE_NAME} if settings.LICENSE_NAME else None,
        lifespan=lifespan or lifespan_factory(settings),
        **kwargs,
    )
    application.include_router(health_router)
    application.include_router(router)
    return application
