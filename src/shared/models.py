"""Shared data models used across the application."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Prices are exact decimals in memory but plain JSON numbers on the wire.
Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str | None = None
    price: Price = Field(default=Decimal(0), ge=0)
    sizes: list[str] | None = None
    description: str | None = None


class CatalogDocument(BaseModel):
    """Shape of the remote catalog: ``{"products": [...]}``."""

    model_config = ConfigDict(extra="ignore")

    products: list[Product] | None = None


class FilterCriteria(BaseModel):
    """Optional request constraints; CSV fields are kept unparsed."""

    min_price: Decimal | None = None
    max_price: Decimal | None = None
    size: str | None = None
    highlight: str | None = None


class ProductsDetails(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min_price: Price = Decimal(0)
    max_price: Price = Decimal(0)
    sizes: list[str] = Field(default_factory=list)
    common_words: list[str] = Field(default_factory=list)


class ProductsResponse(BaseModel):
    products: list[Product] = Field(default_factory=list)
    details: ProductsDetails = Field(default_factory=ProductsDetails)
