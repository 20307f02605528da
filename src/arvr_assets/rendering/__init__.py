"""Format resolution, payload access and decoding for asset previews."""

from __future__ import annotations

from .formats import (
    FORMAT_DECODERS,
    NEUTRAL_MATERIAL,
    SCENE_SCALE,
    UNSUPPORTED_MESSAGE,
    DecoderKind,
    DecoderSpec,
    Material,
    is_supported,
    normalize_token,
    resolve_decoder,
)
from .payload import (
    MISSING_PAYLOAD_MESSAGE,
    EmbeddedPayload,
    PayloadLocator,
    RemotePayload,
    data_url,
    decode_base64,
    locator_for,
)

__all__ = [
    "DecoderKind",
    "DecoderSpec",
    "EmbeddedPayload",
    "FORMAT_DECODERS",
    "MISSING_PAYLOAD_MESSAGE",
    "Material",
    "NEUTRAL_MATERIAL",
    "PayloadLocator",
    "RemotePayload",
    "SCENE_SCALE",
    "UNSUPPORTED_MESSAGE",
    "data_url",
    "decode_base64",
    "is_supported",
    "locator_for",
    "normalize_token",
    "resolve_decoder",
]
