"""Catalog transformations: filtering, keyword highlighting, and summary details."""

from __future__ import annotations

import re
from collections import Counter
from decimal import Decimal

from src.shared.logging import get_logger
from src.shared.models import Product, ProductsDetails

logger = get_logger(__name__)

_WORD_SEPARATORS = re.compile(r"[ ,.]+")
_SKIP_TOP_WORDS = 5
_COMMON_WORDS_LIMIT = 10


def parse_csv(value: str | None) -> list[str]:
    """Split a comma-separated value, trimming entries and dropping empties."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------

def filter_products(
    products: list[Product],
    min_price: Decimal | None = None,
    max_price: Decimal | None = None,
    size: str | None = None,
) -> list[Product]:
    """Narrow *products* by inclusive price bounds and accepted sizes.

    Every criterion is optional and applied independently. Sizes compare
    case-insensitively; a product with no declared sizes never matches an
    active size filter. A non-blank size value whose entries are all empty
    (such as ",") is still an active filter and matches nothing. The input
    list is left untouched.
    """
    filtered = list(products)

    if min_price is not None:
        filtered = [p for p in filtered if p.price >= min_price]

    if max_price is not None:
        filtered = [p for p in filtered if p.price <= max_price]

    if size and size.strip():
        wanted = {s.casefold() for s in parse_csv(size)}
        filtered = [
            p for p in filtered
            if any(s.casefold() in wanted for s in p.sizes or [])
        ]

    logger.debug(
        "Filtered %d -> %d products (min=%s, max=%s, size=%r)",
        len(products), len(filtered), min_price, max_price, size,
    )
    return filtered


# ---------------------------------------------------------------------------
# Highlight
# ---------------------------------------------------------------------------

def highlight_words(description: str, word: str) -> str:
    """Wrap every case-insensitive occurrence of *word* in ``<em>`` tags.

    The matched text keeps its own casing.
    """
    if not word:
        return description
    pattern = re.compile(re.escape(word), re.IGNORECASE)
    return pattern.sub(lambda m: f"<em>{m.group(0)}</em>", description)


def highlight_products(products: list[Product], highlight: str | None) -> list[Product]:
    """Return new products whose descriptions have each keyword highlighted.

    Keywords are applied one after another, so a later keyword also matches
    inside markup added for an earlier one. Products without a description
    pass through as they are.
    """
    words = parse_csv(highlight)
    if not words:
        return products

    for word in words:
        products = [
            p.model_copy(update={"description": highlight_words(p.description, word)})
            if p.description is not None else p
            for p in products
        ]
    return products


# ---------------------------------------------------------------------------
# Details
# ---------------------------------------------------------------------------

def get_common_words(products: list[Product]) -> list[str]:
    """Rank description words by frequency, skip the top five, return the next ten.

    Ties keep the order in which the words were first seen.
    """
    counts: Counter[str] = Counter()
    for product in products:
        for token in _WORD_SEPARATORS.split(product.description or ""):
            if token:
                counts[token.lower()] += 1

    ranked = [word for word, _ in counts.most_common()]
    return ranked[_SKIP_TOP_WORDS:_SKIP_TOP_WORDS + _COMMON_WORDS_LIMIT]


def summarize_products(products: list[Product]) -> ProductsDetails:
    """Compute price range, available sizes and common words for *products*."""
    if not products:
        return ProductsDetails()

    sizes = dict.fromkeys(s for p in products for s in p.sizes or [])
    return ProductsDetails(
        min_price=min(p.price for p in products),
        max_price=max(p.price for p in products),
        sizes=list(sizes),
        common_words=get_common_words(products),
    )
