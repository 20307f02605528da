"""In-memory catalog state for the signed-in user."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Literal

from ..api.client import Session
from ..catalog.classifier import filter_by_category
from ..catalog.models import Asset, AssetCategory, UploadOutcome
from ..catalog.preview_state import PreviewStateController
from .session import SessionStore

__all__ = ["CatalogManager", "Notice", "NoticeLevel"]

logger = logging.getLogger(__name__)

NoticeLevel = Literal["info", "success", "error"]


@dataclass(frozen=True, slots=True)
class Notice:
    """Transient message shown to the user."""

    level: NoticeLevel
    text: str


Notifier = Callable[[Notice], None]


class CatalogManager:
    """Own the asset collection and the grid preview context.

    The collection is only changed by completion handlers, each of which
    performs one whole replace, append or filter. Nothing is applied
    speculatively before the service confirms a change.
    """

    def __init__(
        self,
        *,
        session_store: SessionStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._session_store = session_store or SessionStore()
        self._notifier = notifier
        self._assets: tuple[Asset, ...] = ()
        self._session: Session | None = self._session_store.load()
        self._active_category = AssetCategory.MODELS
        self.grid_state = PreviewStateController("grid")

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None and self._session.is_authenticated

    def sign_in(self, session: Session) -> None:
        self._session = session
        self._session_store.save(session)
        self.notify("success", "Logged in successfully")

    def sign_out(self) -> None:
        """Forget the session and everything loaded for it."""

        self._session_store.clear()
        self._session = None
        self._assets = ()
        self.grid_state.reset()
        self.notify("success", "Logged out successfully")

    def can_delete(self, asset: Asset) -> bool:
        """Return ``True`` when the signed-in user owns *asset*."""

        if self._session is None or self._session.user_id is None:
            return False
        return asset.owner == self._session.user_id

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------
    @property
    def assets(self) -> tuple[Asset, ...]:
        return self._assets

    def get(self, asset_id: str) -> Asset | None:
        for asset in self._assets:
            if asset.id == asset_id:
                return asset
        return None

    @property
    def active_category(self) -> AssetCategory:
        return self._active_category

    def select_category(self, category: AssetCategory | str) -> AssetCategory:
        self._active_category = AssetCategory(category)
        return self._active_category

    def visible_assets(self, category: AssetCategory | str | None = None) -> list[Asset]:
        """Return the assets of *category* (the active one by default)."""

        return filter_by_category(self._assets, category or self._active_category)

    def apply_listing(self, assets: Iterable[Asset]) -> None:
        """Replace the collection after a completed list request."""

        self._assets = tuple(assets)
        self.grid_state.reset()
        logger.info("Loaded %d assets", len(self._assets))

    def apply_upload(self, outcome: UploadOutcome) -> Asset | None:
        """Append the uploaded asset unless the service reported a duplicate."""

        if outcome.duplicate:
            self.notify("info", outcome.message)
            return None
        if outcome.asset is None:
            self.notify("error", "Upload response did not include the stored asset")
            return None
        self._assets = (*self._assets, outcome.asset)
        self.notify("success", "File uploaded successfully")
        return outcome.asset

    def request_delete(self, asset_id: str, confirm: Callable[[Asset | None], bool]) -> bool:
        """Return ``True`` when the user confirmed deleting *asset_id*."""

        confirmed = bool(confirm(self.get(asset_id)))
        if not confirmed:
            logger.debug("Deletion of %s cancelled", asset_id)
        return confirmed

    def apply_delete(self, asset_id: str) -> None:
        """Drop *asset_id* after the service confirmed the deletion."""

        self._assets = tuple(asset for asset in self._assets if asset.id != asset_id)
        self.grid_state.discard(asset_id)
        self.notify("success", "Asset deleted successfully")

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------
    def set_notifier(self, notifier: Notifier | None) -> None:
        self._notifier = notifier

    def notify(self, level: NoticeLevel, text: str) -> None:
        notice = Notice(level, text)
        if level == "error":
            logger.warning(text)
        else:
            logger.info(text)
        if self._notifier is not None:
            self._notifier(notice)

    def report_failure(self, prefix: str, error: BaseException) -> None:
        """Surface *error* without touching the collection."""

        detail = getattr(error, "message", None) or str(error) or error.__class__.__name__
        self.notify("error", f"{prefix}: {detail}" if prefix else detail)
