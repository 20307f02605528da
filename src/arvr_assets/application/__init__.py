"""Application state and Qt helpers for the asset catalog."""

from .catalog_manager import CatalogManager, Notice, NoticeLevel
from .session import SessionStore

__all__ = [
    "CatalogManager",
    "Notice",
    "NoticeLevel",
    "SessionStore",
]
