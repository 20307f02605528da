"""Reusable UI widgets for the asset catalog."""

from __future__ import annotations

from .asset_cards import AssetCard, AssetGrid, SharedPreviewCard
from .asset_viewer import FormatDispatchViewer, create_guarded_viewer
from .catalog_page import CatalogPage, CategorySidebar
from .failure_boundary import FALLBACK_MESSAGE, FailureBoundary, SupervisedSubtree
from .login_panel import Credentials, LoginPanel
from .model_viewer import ModelViewer

__all__ = [
    "AssetCard",
    "AssetGrid",
    "CatalogPage",
    "CategorySidebar",
    "Credentials",
    "FALLBACK_MESSAGE",
    "FailureBoundary",
    "FormatDispatchViewer",
    "LoginPanel",
    "ModelViewer",
    "SharedPreviewCard",
    "SupervisedSubtree",
    "create_guarded_viewer",
]
