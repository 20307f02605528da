"""Locate the raw bytes behind an asset preview."""

from __future__ import annotations

import base64
import binascii
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from ..errors import DecodeFailure

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..catalog.models import Asset

__all__ = [
    "EmbeddedPayload",
    "MISSING_PAYLOAD_MESSAGE",
    "PayloadFetcher",
    "PayloadLocator",
    "RemotePayload",
    "data_url",
    "decode_base64",
    "locator_for",
]

MISSING_PAYLOAD_MESSAGE = "Model data is missing."
"""Notice shown when an asset has neither embedded nor downloadable bytes."""

PayloadFetcher = Callable[[str], bytes]


class PayloadLocator(Protocol):
    """Anything able to produce the bytes of one asset on demand."""

    def read(self) -> bytes:
        """Return the asset bytes."""


def decode_base64(text: str) -> bytes:
    """Decode *text*, accepting an optional ``data:`` URL prefix."""

    if text.startswith("data:"):
        _, _, text = text.partition(",")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeFailure("Embedded model data is not valid base64.") from exc


def data_url(payload: str, mime_type: str) -> str:
    """Return the ``data:`` URL for base64 *payload* of type *mime_type*."""

    return f"data:{mime_type};base64,{payload}"


@dataclass(frozen=True, slots=True)
class EmbeddedPayload:
    """Bytes shipped inline with a single-asset fetch."""

    base64_text: str = field(repr=False)
    mime_type: str = "application/octet-stream"

    def read(self) -> bytes:
        return decode_base64(self.base64_text)

    @property
    def url(self) -> str:
        return data_url(self.base64_text, self.mime_type)


@dataclass(frozen=True, slots=True)
class RemotePayload:
    """Bytes downloaded on demand for assets listed without a payload."""

    asset_id: str
    fetch: PayloadFetcher = field(repr=False, compare=False)

    def read(self) -> bytes:
        return self.fetch(self.asset_id)


def locator_for(asset: Asset, fetch: PayloadFetcher | None = None) -> PayloadLocator | None:
    """Return the locator for *asset*, or ``None`` when no bytes are reachable."""

    if asset.payload:
        return EmbeddedPayload(asset.payload, asset.mime_type)
    if fetch is not None:
        return RemotePayload(asset.id, fetch)
    return None
