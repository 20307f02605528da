"""Basic smoke tests for the arvr_assets package."""

from __future__ import annotations

import importlib


def test_package_importable() -> None:
    """Ensure that the top-level package can be imported."""

    module = importlib.import_module("arvr_assets")
    assert module.__version__ == "0.1.0"
