import logging
from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded", "error"]
    version: str
    environment: str
    store_backend: str


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    """Return the health status of the API service and its document store."""
    settings = request.app.state.settings
    status: Literal["ok", "degraded", "error"] = "ok"

    try:
        request.app.state.store.ping()
    except Exception:
        logger.exception("Health check: document store connectivity failed")
        status = "degraded"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        environment=settings.environment,
        store_backend=settings.store_backend,
    )
