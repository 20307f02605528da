"""Configuration helpers for the asset catalog client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

__all__ = [
    "API_URL_ENV_VAR",
    "AppConfig",
    "DEFAULT_API_URL",
    "DEFAULT_REQUEST_TIMEOUT",
    "TIMEOUT_ENV_VAR",
    "configure",
    "get_config",
]

API_URL_ENV_VAR: Final[str] = "ARVR_ASSETS_API_URL"
"""Environment variable that overrides the default catalog host."""

TIMEOUT_ENV_VAR: Final[str] = "ARVR_ASSETS_TIMEOUT"
"""Environment variable holding the request timeout in seconds."""

DEFAULT_API_URL: Final[str] = "https://cad-backend-ecy3.onrender.com"
"""Catalog service used when no override is supplied."""

DEFAULT_REQUEST_TIMEOUT: Final[float] = 30.0
"""Seconds to wait for the catalog service before giving up."""


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Runtime configuration for the asset catalog client."""

    api_base_url: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        normalized = _normalize_url(self.api_base_url)
        object.__setattr__(self, "api_base_url", normalized)
        if self.request_timeout <= 0:
            raise ValueError("Request timeout must be positive")


_CONFIG: AppConfig | None = None


def get_config() -> AppConfig:
    """Return the cached :class:`AppConfig` instance."""

    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _build_config()
    return _CONFIG


def configure(
    *,
    api_base_url: str | None = None,
    request_timeout: float | None = None,
) -> AppConfig:
    """Rebuild the global configuration with optional overrides."""

    global _CONFIG
    _CONFIG = _build_config(api_base_url=api_base_url, request_timeout=request_timeout)
    return _CONFIG


def _normalize_url(value: str, *, empty_error: str | None = None) -> str:
    text = str(value).strip().rstrip("/")
    if not text:
        raise ValueError(empty_error or "API base URL cannot be empty.")
    return text


def _coerce_timeout(value: str | None) -> float:
    if value is None:
        return DEFAULT_REQUEST_TIMEOUT
    try:
        timeout = float(value.strip())
    except ValueError:
        return DEFAULT_REQUEST_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_REQUEST_TIMEOUT


def _build_config(
    *,
    api_base_url: str | None = None,
    request_timeout: float | None = None,
) -> AppConfig:
    timeout = request_timeout if request_timeout is not None else _coerce_timeout(os.environ.get(TIMEOUT_ENV_VAR))

    if api_base_url is not None:
        normalized = _normalize_url(
            api_base_url,
            empty_error="API URL overrides cannot be empty",
        )
        return AppConfig(api_base_url=normalized, request_timeout=timeout)

    env_value = os.environ.get(API_URL_ENV_VAR)
    if env_value:
        normalized = _normalize_url(
            env_value,
            empty_error="API URL overrides cannot be empty",
        )
        return AppConfig(api_base_url=normalized, request_timeout=timeout)

    return AppConfig(api_base_url=DEFAULT_API_URL, request_timeout=timeout)
