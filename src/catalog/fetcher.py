"""Remote catalog retrieval.

The catalog is a single JSON document shaped like ``{"products": [...]}``.
Fetching is done through a :class:`DocumentFetcher` so the transport can be
swapped out (tests inject doubles, the app uses :class:`HttpDocumentFetcher`).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

import httpx
from opentelemetry.trace import StatusCode
from pydantic import ValidationError

from src.shared.config import settings
from src.shared.logging import get_logger, get_tracer
from src.shared.models import CatalogDocument, Product

logger = get_logger(__name__)
_tracer = get_tracer(__name__)


class CatalogFetchError(Exception):
    """The catalog could not be retrieved or decoded."""


class DocumentFetcher(Protocol):
    async def fetch(self, url: str) -> str: ...


class HttpDocumentFetcher:
    """Fetch documents over HTTP with one GET and no retries."""

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = settings.catalog_timeout if timeout is None else timeout

    async def fetch(self, url: str) -> str:
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text


async def fetch_products(url: str, fetcher: DocumentFetcher) -> list[Product]:
    """Fetch and decode the product catalog at *url*.

    Returns an empty list when the document has no ``products`` array.
    Transport errors, non-success statuses and malformed payloads are logged
    and re-raised as :class:`CatalogFetchError`.
    """
    with _tracer.start_as_current_span("fetch_catalog", attributes={"url": url}) as span:
        try:
            body = await fetcher.fetch(url)
            logger.info("Product fetched successfully at %s", datetime.now(timezone.utc).isoformat())
            logger.debug("Catalog payload: %s", body)
            document = CatalogDocument.model_validate_json(body)
        except (httpx.HTTPError, ValidationError) as exc:
            logger.error("Unable to fetch the product.", exc_info=True)
            span.set_status(StatusCode.ERROR, str(exc))
            raise CatalogFetchError(f"Unable to fetch catalog from {url}") from exc

        products = document.products or []
        span.set_attribute("product_count", len(products))
        logger.info("Fetched %d products", len(products))
        return products
