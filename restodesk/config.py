"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    api_base_url: str = _get_env("API_BASE_URL", "http://localhost:5000/api/v1")
    api_token: str = _get_env("API_TOKEN", "")
    api_timeout_seconds: float = float(_get_env("API_TIMEOUT_SECONDS", "15"))
    socket_url: str = _get_env("SOCKET_URL", "http://localhost:5000")
    catalog_path: str = _get_env("CATALOG_PATH", "data/menu.json")
    menu_debounce_ms: int = int(_get_env("MENU_DEBOUNCE_MS", "300"))
    list_debounce_ms: int = int(_get_env("LIST_DEBOUNCE_MS", "400"))
    default_page_limit: int = int(_get_env("DEFAULT_PAGE_LIMIT", "10"))
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    cache_ttl_seconds: int = int(_get_env("CACHE_TTL_SECONDS", "300"))
    whatsapp_phone: str = _get_env("WHATSAPP_PHONE", "7696482938")
    helpline_number: str = _get_env("HELPLINE_NUMBER", "+91 9650780199")
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()
