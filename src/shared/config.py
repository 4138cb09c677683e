"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "local"
    backend_host: str = "0.0.0.0"
    backend_port: int = 8000
    catalog_url: str = "https://pastebin.com/raw/JucRNpWs"
    catalog_timeout: float = 10.0
    api_header_name: str = "X-SWS-Header"
    api_header_value: str = "123"
    request_id_header: str = "X-Request-ID"
    cors_origins: list[str] = ["*"]
    docs_enabled: bool = True
    log_level: str = "DEBUG"
    log_format: str = "console"
    otel_exporter_endpoint: str = ""
    trace_console: bool = False

    model_config = {"env_file": "config/.env.local", "extra": "ignore"}


settings = Settings()
