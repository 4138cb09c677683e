"""FastAPI application entry point."""

from __future__ import annotations

import time
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse, Response

from src.backend.api.headers import HEADER_DESCRIPTION
from src.backend.api.routes import product_router, router
from src.catalog.fetcher import CatalogFetchError
from src.shared.config import settings
from src.shared.logging import bind_request, get_logger, reset_request, setup_logging, shutdown_tracing

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    logger.info("Serving catalog from %s", settings.catalog_url)
    yield
    shutdown_tracing()


app = FastAPI(
    title="Product Catalog API",
    description="Filters a remote product catalog and highlights description keywords",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """Bind a request id (client-supplied or generated) before any route dependency runs."""
    request_id = request.headers.get(settings.request_id_header) or uuid.uuid4().hex
    token = bind_request(request_id, request.method, request.url.path)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        logger.info(
            "Completed %s", response.status_code,
            extra={"fields": {"status": response.status_code, "duration_ms": elapsed_ms}},
        )
        response.headers[settings.request_id_header] = request_id
        return response
    finally:
        reset_request(token)


app.include_router(router, prefix="/api")
app.include_router(product_router, prefix="/api")


@app.exception_handler(CatalogFetchError)
async def catalog_fetch_error_handler(request: Request, exc: CatalogFetchError) -> JSONResponse:
    logger.error("Catalog unavailable: %s", exc)
    return JSONResponse(status_code=502, content={"detail": "Unable to fetch the product."})


def custom_openapi() -> dict[str, Any]:
    """Build the OpenAPI schema, documenting the mandatory header on gated routes."""
    if app.openapi_schema:
        return app.openapi_schema

    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    header_param = {
        "name": settings.api_header_name,
        "in": "header",
        "required": True,
        "schema": {"type": "string"},
        "description": HEADER_DESCRIPTION,
    }
    gated_paths = {route.path for route in product_router.routes}
    for path, operations in schema.get("paths", {}).items():
        if path.removeprefix("/api") not in gated_paths:
            continue
        for operation in operations.values():
            operation.setdefault("parameters", []).append(dict(header_param))

    app.openapi_schema = schema
    return schema


app.openapi = custom_openapi  # type: ignore[method-assign]


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.backend_host, port=settings.backend_port)


if __name__ == "__main__":
    run()
