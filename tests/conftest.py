"""Pytest configuration helpers for arvr_assets tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Allow Qt widgets to be created on headless machines (no display server).
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:  # pragma: no cover - dependency availability varies between environments
    from PySide6.QtWidgets import QApplication
except ImportError:  # pragma: no cover - used when Qt is unavailable
    QApplication = None  # type: ignore[assignment]

# Ensure the source directory is importable without requiring an editable install.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


@pytest.fixture(autouse=True)
def reset_app_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure each test runs with the default application configuration."""

    from arvr_assets.config import API_URL_ENV_VAR, TIMEOUT_ENV_VAR, configure

    monkeypatch.delenv(API_URL_ENV_VAR, raising=False)
    monkeypatch.delenv(TIMEOUT_ENV_VAR, raising=False)
    configure()
    yield
    configure()


class ImmediateRunner:
    """Task runner stand-in executing submissions synchronously."""

    def __init__(self) -> None:
        self.submitted: list[object] = []

    def submit(self, func, *args, on_result=None, on_error=None, **kwargs):
        self.submitted.append(func)
        try:
            value = func(*args, **kwargs)
        except Exception as exc:  # noqa: BLE001 - mirrors the worker contract
            if on_error is None:
                raise
            on_error(exc)
        else:
            if on_result is not None:
                on_result(value)
        return len(self.submitted)


@pytest.fixture()
def immediate_runner() -> ImmediateRunner:
    """Provide a runner that completes tasks before ``submit`` returns."""

    return ImmediateRunner()


@pytest.fixture(scope="session")
def qapp():
    """Provide a ``QApplication`` instance for UI-oriented tests."""

    if QApplication is None:
        pytest.skip("PySide6 is unavailable in this environment")

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app
