"""Mandatory request header check applied to the product API."""

from __future__ import annotations

from fastapi import HTTPException, Request

from src.shared.config import settings
from src.shared.logging import get_logger

logger = get_logger(__name__)

HEADER_DESCRIPTION = "This header is required for authentication to validate the request."


async def require_api_header(request: Request) -> None:
    """Reject the request with 400 unless the configured header carries the expected value.

    Repeated headers are joined with commas before the containment check.
    """
    values = request.headers.getlist(settings.api_header_name)
    if not values or settings.api_header_value not in ",".join(values):
        logger.warning("Missing or invalid %s header", settings.api_header_name)
        raise HTTPException(status_code=400, detail="Missing or invalid header value.")
