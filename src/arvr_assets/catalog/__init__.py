"""Catalog records, classification and preview state."""

from __future__ import annotations

from .classifier import (
    canonical_category,
    exposes_model_control,
    filter_by_category,
    known_category,
    partition_by_category,
)
from .models import (
    CATEGORY_DESCRIPTIONS,
    DUPLICATE_VERSION_MESSAGE,
    Asset,
    AssetCategory,
    UploadOutcome,
)
from .preview_state import PreviewStateController, PreviewTransition
from .share_link import ShareLinkRequest, ShareLinkResolver, extract_share_token

__all__ = [
    "Asset",
    "AssetCategory",
    "CATEGORY_DESCRIPTIONS",
    "DUPLICATE_VERSION_MESSAGE",
    "PreviewStateController",
    "PreviewTransition",
    "ShareLinkRequest",
    "ShareLinkResolver",
    "UploadOutcome",
    "canonical_category",
    "exposes_model_control",
    "extract_share_token",
    "filter_by_category",
    "known_category",
    "partition_by_category",
]
