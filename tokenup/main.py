import logging
from contextlib import asynccontextmanager
from typing import Optional

from dependency_injector import providers
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from tokenup.config import Settings
from tokenup.containers import Container
from tokenup.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from tokenup.core.exceptions import BaseAPIException
from tokenup.core.logging_middleware import LoggingMiddleware
from tokenup.logging_config import setup_logging
from tokenup.models import Base
from tokenup.routers import (
    admin_router,
    analytics_router,
    auth_router,
    certificate_router,
    health_router,
    leaderboard_router,
    user_router,
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    container = Container()
    if settings is not None:
        container.config.config.override(providers.Object(settings))
    settings = container.config.config()

    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.uses_memory_store and settings.AUTO_CREATE_TABLES:
            Base.metadata.create_all(bind=container.database.engine())
        logger.info(
            f"{settings.APP_NAME} started ({settings.ENVIRONMENT}, storage={settings.STORAGE_BACKEND})"
        )
        yield
        if not settings.uses_memory_store:
            container.database.engine().dispose()

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG, lifespan=lifespan)
    app.container = container  # type: ignore

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(BaseAPIException, handle_base_api_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    for module in (
        auth_router,
        user_router,
        certificate_router,
        leaderboard_router,
        analytics_router,
        admin_router,
        health_router,
    ):
        app.include_router(module.router, prefix=settings.API_V1_STR)

    return app


app = create_app()

handler = Mangum(app)
