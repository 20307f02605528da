"""Persistence helpers for the signed-in session."""

from __future__ import annotations

import logging
from typing import Final, Protocol

from ..api.client import Session

__all__ = [
    "APPLICATION_NAME",
    "ORGANIZATION_NAME",
    "SessionStore",
    "SettingsBackend",
]

logger = logging.getLogger(__name__)

ORGANIZATION_NAME: Final[str] = "ARVRAssets"
"""Organization identifier used when storing Qt settings."""

APPLICATION_NAME: Final[str] = "arvr-assets"
"""Application identifier used when storing Qt settings."""

_TOKEN_KEY: Final[str] = "auth/token"
_USER_KEY: Final[str] = "auth/userId"


class SettingsBackend(Protocol):
    """Subset of :class:`~PySide6.QtCore.QSettings` used by :class:`SessionStore`."""

    def value(self, key: str, defaultValue: object = None) -> object: ...

    def setValue(self, key: str, value: object) -> None: ...

    def remove(self, key: str) -> None: ...

    def sync(self) -> None: ...


def _settings_storage() -> SettingsBackend:
    from PySide6.QtCore import QSettings

    return QSettings(ORGANIZATION_NAME, APPLICATION_NAME)


def _coerce_text(value: object) -> str | None:
    if isinstance(value, str):
        text = value.strip()
        return text or None
    return None


class SessionStore:
    """Keep the auth token and user id across application restarts.

    The backing store is injected so the catalog logic never reads ambient
    global state; the default is the application's ``QSettings``.
    """

    def __init__(self, storage: SettingsBackend | None = None) -> None:
        self._storage = storage

    @property
    def storage(self) -> SettingsBackend:
        if self._storage is None:
            self._storage = _settings_storage()
        return self._storage

    def load(self) -> Session | None:
        """Return the persisted session, or ``None`` when signed out."""

        token = _coerce_text(self.storage.value(_TOKEN_KEY))
        if token is None:
            return None
        return Session(token=token, user_id=_coerce_text(self.storage.value(_USER_KEY)))

    def save(self, session: Session) -> None:
        store = self.storage
        store.setValue(_TOKEN_KEY, session.token)
        if session.user_id is not None:
            store.setValue(_USER_KEY, session.user_id)
        else:
            store.remove(_USER_KEY)
        store.sync()
        logger.info("Stored session for user %s", session.user_id)

    def clear(self) -> None:
        store = self.storage
        store.remove(_TOKEN_KEY)
        store.remove(_USER_KEY)
        store.sync()
        logger.info("Cleared stored session")
