from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import TYPE_CHECKING

from fastapi import FastAPI

from leavedesk.api.health import router as health_router
from leavedesk.api.router import api_router
from leavedesk.config import get_settings
from leavedesk.exceptions import setup_exception_handlers
from leavedesk.logging_config import configure_logging
from leavedesk.middleware import setup_middleware
from leavedesk.services.desk import LeaveDesk
from leavedesk.store import SqlDocumentStore, build_document_store

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from leavedesk.config import Settings
    from leavedesk.store import DocumentStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown."""
    settings: Settings = app.state.settings
    store: DocumentStore = app.state.store
    logger.info(
        "Starting %s v%s [%s] with %s document store",
        settings.app_name,
        settings.app_version,
        settings.environment,
        settings.store_backend,
    )
    if isinstance(store, SqlDocumentStore) and settings.store_create_schema:
        store.create_schema()
    yield
    store.close()
    logger.info("Shutting down %s", settings.app_name)


def create_app(
    settings: Settings | None = None,
    store: DocumentStore | None = None,
    *,
    today: Callable[[], date] | None = None,
) -> FastAPI:
    """Application factory.

    The store and desk are built here and attached to ``app.state``; nothing is
    initialised at import time beyond this call.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    store = store if store is not None else build_document_store(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )
    application.state.settings = settings
    application.state.store = store
    application.state.desk = LeaveDesk(store, settings, today=today or date.today)

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()
