from typing import Optional

from fastapi import Depends, Header, Query
from fastapi_pagination import Params

from app.config import Settings, get_settings
from app.exceptions import Unauthorized
from app.infra.logging_config import get_logger

logger = get_logger("auth")


def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="x-api-key"),
    settings: Settings = Depends(get_settings),
) -> bool:
    """FastAPI dependency comparing the x-api-key header with the configured secret."""
    if not x_api_key:
        logger.warning("Request missing x-api-key header")
        raise Unauthorized("API Key is missing")

    if not settings.api_key or x_api_key != settings.api_key:
        logger.warning("Request with invalid API key")
        raise Unauthorized("Invalid API Key")

    return True


class PageParams(Params):
    """Page-number pagination read from ``page`` and ``limit`` query parameters."""

    page: int = Query(1, ge=1, description="Page number (1-based)")
    size: int = Query(10, ge=1, le=100, alias="limit", description="Items per page")
