"""Client-side access to the remote asset catalog."""

from __future__ import annotations

from .client import USER_AGENT, CatalogClient, Session
from .downloads import (
    DEFAULT_DOWNLOAD_NAME,
    MIME_EXTENSIONS,
    DownloadDescriptor,
    resolve_download_name,
    save_download,
)

__all__ = [
    "CatalogClient",
    "DEFAULT_DOWNLOAD_NAME",
    "DownloadDescriptor",
    "MIME_EXTENSIONS",
    "Session",
    "USER_AGENT",
    "resolve_download_name",
    "save_download",
]
