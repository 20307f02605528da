"""Derive canonical category tokens and filter collections by them."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import Asset, AssetCategory

__all__ = [
    "canonical_category",
    "exposes_model_control",
    "filter_by_category",
    "known_category",
    "partition_by_category",
]

_SEPARATORS = re.compile(r"[\\/]")


def canonical_category(raw: str | None) -> str:
    """Return the final path segment of *raw*.

    Both forward and back slashes separate segments, so ``"uploads\\models"``
    and ``"uploads/models"`` both yield ``"models"``. Applying the function to
    its own output returns the same value.
    """

    if not raw:
        return ""
    return _SEPARATORS.split(str(raw))[-1]


def known_category(raw: str | None) -> AssetCategory | None:
    """Return the :class:`AssetCategory` for *raw* or ``None`` when unknown."""

    token = canonical_category(raw)
    try:
        return AssetCategory(token)
    except ValueError:
        return None


def filter_by_category(assets: Iterable[Asset], category: AssetCategory | str) -> list[Asset]:
    """Return the assets belonging to *category*, preserving their order."""

    try:
        wanted = AssetCategory(category)
    except ValueError:
        return []
    return [asset for asset in assets if known_category(asset.category) is wanted]


def partition_by_category(assets: Iterable[Asset]) -> dict[AssetCategory, list[Asset]]:
    """Group *assets* into every known category; unknown categories are dropped."""

    buckets: dict[AssetCategory, list[Asset]] = {category: [] for category in AssetCategory}
    for asset in assets:
        category = known_category(asset.category)
        if category is not None:
            buckets[category].append(asset)
    return buckets


def exposes_model_control(asset: Asset | None) -> bool:
    """Return ``True`` when *asset* should offer the 3D "Load Model" toggle."""

    if asset is None:
        return False
    return canonical_category(asset.category) == AssetCategory.MODELS.value
