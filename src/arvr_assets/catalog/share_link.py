"""Resolve assets shared through public links into a dedicated preview."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from ..errors import AssetClientError, ValidationFailure
from .classifier import exposes_model_control
from .models import Asset
from .preview_state import PreviewStateController

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..api.client import CatalogClient

__all__ = [
    "DEFAULT_SHARE_ERROR",
    "ShareLinkRequest",
    "ShareLinkResolver",
    "extract_share_token",
]

logger = logging.getLogger(__name__)

DEFAULT_SHARE_ERROR = "Error fetching asset"
"""Message shown when a failure carries no usable description."""

_PUBLIC_SEGMENT = "public"


@dataclass(frozen=True, slots=True)
class ShareLinkRequest:
    """Ticket describing one issued resolution."""

    sequence: int
    token: str


def extract_share_token(raw: str | None) -> str:
    """Return the opaque token contained in *raw*.

    Users may paste either the bare token or the full link produced by
    "Copy Link" (``<host>/assets/public/<token>``); the latter is reduced to
    its trailing segment.
    """

    text = (raw or "").strip()
    if not text:
        return ""

    parsed = urlparse(text)
    if parsed.scheme and parsed.netloc:
        segments = [segment for segment in parsed.path.split("/") if segment]
        if len(segments) >= 2 and segments[-2] == _PUBLIC_SEGMENT:
            return segments[-1]
        return segments[-1] if segments else ""
    return text


class ShareLinkResolver:
    """Fetch one asset by public token, independent of the signed-in catalog.

    Each :meth:`begin` call issues a new sequence number. Only the most
    recently issued request may update the preview; completions of older
    requests are dropped, so concurrent resolutions end with the last one the
    user triggered.
    """

    def __init__(
        self,
        client: CatalogClient | None = None,
        *,
        preview_state: PreviewStateController | None = None,
    ) -> None:
        self._client = client
        self._preview_state = preview_state or PreviewStateController("shared-link")
        self._preview_asset: Asset | None = None
        self._sequence = 0

    @property
    def preview_asset(self) -> Asset | None:
        return self._preview_asset

    @property
    def preview_state(self) -> PreviewStateController:
        return self._preview_state

    @property
    def shows_model_control(self) -> bool:
        return exposes_model_control(self._preview_asset)

    def set_client(self, client: CatalogClient | None) -> None:
        self._client = client

    def is_current(self, request: ShareLinkRequest) -> bool:
        return request.sequence == self._sequence

    def begin(self, raw_token: str | None) -> ShareLinkRequest:
        """Validate *raw_token* and issue a new request ticket."""

        token = extract_share_token(raw_token)
        if not token:
            raise ValidationFailure("Please enter a shared link")
        self._sequence += 1
        return ShareLinkRequest(sequence=self._sequence, token=token)

    def complete(self, request: ShareLinkRequest, asset: Asset) -> bool:
        """Install *asset* as the preview when *request* is still current."""

        if not self.is_current(request):
            logger.debug("Dropping stale shared-link result for %s", request.token)
            return False
        self._preview_asset = asset
        self._preview_state.reset()
        logger.info("Resolved shared asset %s (%s)", asset.id, asset.name)
        return True

    def fail(self, request: ShareLinkRequest, error: BaseException) -> str | None:
        """Return the notice for *error*, leaving the current preview intact.

        ``None`` is returned for failures of superseded requests.
        """

        if not self.is_current(request):
            return None
        if isinstance(error, AssetClientError) and error.message:
            message = error.message
        else:
            message = DEFAULT_SHARE_ERROR
        logger.warning("Shared-link resolution for %s failed: %s", request.token, error)
        return message

    def resolve(self, raw_token: str | None) -> Asset:
        """Synchronously resolve *raw_token* through the configured client."""

        if self._client is None:
            raise RuntimeError("ShareLinkResolver requires a catalog client to resolve tokens.")
        request = self.begin(raw_token)
        try:
            asset = self._client.resolve_public_asset(request.token)
        except AssetClientError as exc:
            self.fail(request, exc)
            raise
        self.complete(request, asset)
        return asset

    def clear(self) -> None:
        """Forget the current preview and invalidate in-flight requests."""

        self._sequence += 1
        self._preview_asset = None
        self._preview_state.reset()
