"""Shared test configuration.

Pins the header gate and disables trace export before any application
modules are imported, so tests never depend on a local env file.
"""

from __future__ import annotations

import json
import os

os.environ["API_HEADER_NAME"] = "X-SWS-Header"
os.environ["API_HEADER_VALUE"] = "123"
os.environ["TRACE_CONSOLE"] = "false"
os.environ.pop("OTEL_EXPORTER_OTLP_ENDPOINT", None)

import pytest  # noqa: E402


class StubFetcher:
    """In-memory ``DocumentFetcher`` returning a fixed body and recording URLs."""

    def __init__(self, body: str = "", error: Exception | None = None) -> None:
        self.body = body
        self.error = error
        self.urls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.body


@pytest.fixture
def catalog_payload() -> dict:
    return {
        "products": [
            {
                "title": "A Red Trouser",
                "price": 10,
                "sizes": ["small", "medium", "large"],
                "description": "This trouser perfectly pairs with a green shirt.",
            },
            {
                "title": "A Green Trouser",
                "price": 11,
                "sizes": ["small"],
                "description": "This trouser perfectly pairs with a blue shirt.",
            },
            {
                "title": "A Blue Shirt",
                "price": 25,
                "sizes": ["Medium", "large"],
                "description": "This shirt perfectly pairs with a red hat.",
            },
        ]
    }


@pytest.fixture
def stub_fetcher(catalog_payload: dict) -> StubFetcher:
    return StubFetcher(json.dumps(catalog_payload))


@pytest.fixture
def fetcher_factory() -> type[StubFetcher]:
    return StubFetcher
