"""API route definitions."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends

from src.backend.api.headers import require_api_header
from src.catalog.fetcher import DocumentFetcher, HttpDocumentFetcher, fetch_products
from src.catalog.pipeline import filter_products, highlight_products, summarize_products
from src.shared.config import settings
from src.shared.logging import get_logger
from src.shared.models import FilterCriteria, ProductsResponse

logger = get_logger(__name__)

router = APIRouter()
product_router = APIRouter(dependencies=[Depends(require_api_header)])


def get_document_fetcher() -> DocumentFetcher:
    return HttpDocumentFetcher()


def get_filter_criteria(
    minprice: Decimal | None = None,
    maxprice: Decimal | None = None,
    size: str | None = None,
    highlight: str | None = None,
) -> FilterCriteria:
    return FilterCriteria(min_price=minprice, max_price=maxprice, size=size, highlight=highlight)


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok"}


@product_router.get("/product", response_model=ProductsResponse)
async def get_filtered_products(
    criteria: FilterCriteria = Depends(get_filter_criteria),
    fetcher: DocumentFetcher = Depends(get_document_fetcher),
) -> ProductsResponse:
    """Return catalog products filtered by price and size, with keywords highlighted.

    Details are computed from the filtered products before highlighting so
    that the markup never counts as description words.
    """
    logger.info("Product request", extra={"fields": criteria.model_dump(mode="json", exclude_none=True)})

    products = await fetch_products(settings.catalog_url, fetcher)
    products = filter_products(
        products,
        min_price=criteria.min_price,
        max_price=criteria.max_price,
        size=criteria.size,
    )
    details = summarize_products(products)
    products = highlight_products(products, criteria.highlight)

    return ProductsResponse(products=products, details=details)
