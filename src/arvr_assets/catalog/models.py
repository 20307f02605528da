"""In-memory representations of catalog records returned by the service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Final

from ..errors import ValidationFailure

__all__ = [
    "Asset",
    "AssetCategory",
    "CATEGORY_DESCRIPTIONS",
    "DUPLICATE_VERSION_MESSAGE",
    "UploadOutcome",
]

DUPLICATE_VERSION_MESSAGE: Final[str] = "File already exists with the same version"
"""Literal message the catalog returns when an upload is a known version."""


class AssetCategory(str, Enum):
    """Canonical buckets assets are grouped into."""

    MODELS = "models"
    TEXTURES = "textures"
    ANIMATIONS = "animations"
    SOUNDS = "sounds"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def description(self) -> str:
        return CATEGORY_DESCRIPTIONS[self]


CATEGORY_DESCRIPTIONS: Final[dict[AssetCategory, str]] = {
    AssetCategory.MODELS: (
        "3D models are the foundation of AR/VR experiences. Upload and manage GLB, "
        "GLTF, OBJ, and other 3D model formats that bring your virtual worlds to life."
    ),
    AssetCategory.TEXTURES: (
        "Textures add realism and detail to 3D models. Manage image files like PNG, "
        "JPG, and PSD that define how surfaces look with properties like color, "
        "reflectivity, and roughness."
    ),
    AssetCategory.ANIMATIONS: (
        "Animations bring movement and life to static 3D models. Store animation "
        "files that control how characters and objects move within your AR/VR "
        "environment."
    ),
    AssetCategory.SOUNDS: (
        "Sound effects and audio tracks create immersive AR/VR experiences. Manage "
        "audio files like MP3, WAV, and OGG that provide spatial audio for your "
        "virtual environments."
    ),
}


@dataclass(frozen=True, slots=True)
class Asset:
    """A single catalog entry as reported by the remote service."""

    id: str
    name: str
    category: str
    version: int = 0
    owner: str | None = None
    is_public: bool = False
    share_token: str | None = None
    mime_type: str = "application/octet-stream"
    uploaded_at: datetime | None = None
    payload: str | None = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> Asset:
        """Build an :class:`Asset` from the JSON document sent by the service."""

        if not isinstance(data, Mapping):
            raise ValidationFailure("Asset payload must be a JSON object")

        asset_id = data.get("_id", data.get("id"))
        name = data.get("name")
        if asset_id in (None, "") or not isinstance(name, str) or not name:
            raise ValidationFailure("Asset payload is missing its id or name")

        payload = data.get("base64Data")
        return cls(
            id=str(asset_id),
            name=name,
            category=str(data.get("category") or ""),
            version=_coerce_int(data.get("version")),
            owner=_coerce_optional_str(data.get("owner")),
            is_public=_coerce_bool(data.get("isPublic")),
            share_token=_coerce_optional_str(data.get("privateLink")),
            mime_type=str(data.get("type") or "application/octet-stream"),
            uploaded_at=_parse_datetime(data.get("uploadDate")),
            payload=payload if isinstance(payload, str) and payload else None,
        )

    @property
    def format_token(self) -> str:
        """Return the lowercase suffix following the last ``.`` in the name."""

        _, dot, suffix = self.name.rpartition(".")
        if not dot:
            return ""
        return suffix.strip().lower()

    @property
    def canonical_category(self) -> str:
        from .classifier import canonical_category

        return canonical_category(self.category)

    @property
    def has_payload(self) -> bool:
        return self.payload is not None


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    """Result of an upload request."""

    asset: Asset | None
    duplicate: bool
    message: str

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> UploadOutcome:
        message = str(data.get("message") or "")
        if message == DUPLICATE_VERSION_MESSAGE:
            return cls(asset=None, duplicate=True, message=message)

        raw_asset = data.get("asset")
        if not isinstance(raw_asset, Mapping):
            raise ValidationFailure("Upload response did not include the stored asset")
        return cls(asset=Asset.from_payload(raw_asset), duplicate=False, message=message)


def _coerce_int(value: object) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    return 0


def _coerce_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def _coerce_optional_str(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = value.get("_id", value.get("id"))
        if value is None:
            return None
    text = str(value).strip()
    return text or None


def _parse_datetime(candidate: object) -> datetime | None:
    if isinstance(candidate, datetime):
        parsed = candidate
    elif isinstance(candidate, str):
        text = candidate.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed
