from __future__ import annotations

import numpy as np
import pytest

pytest.importorskip("PySide6.QtWidgets", exc_type=ImportError)

from arvr_assets.rendering.decoders import build_scene_data
from arvr_assets.rendering.formats import FORMAT_DECODERS, UNSUPPORTED_MESSAGE
from arvr_assets.rendering.payload import MISSING_PAYLOAD_MESSAGE, EmbeddedPayload
from arvr_assets.ui.asset_viewer import (
    PENDING_MESSAGE,
    FormatDispatchViewer,
    create_guarded_viewer,
)
from arvr_assets.ui.model_viewer import ModelViewer


class DeferredRunner:
    """Runner that records submissions without running them."""

    def __init__(self) -> None:
        self.submitted: list[tuple] = []

    def submit(self, func, *args, on_result=None, on_error=None, **kwargs):
        self.submitted.append((func, args, on_result, on_error))
        return len(self.submitted)


class BytesLocator:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.reads = 0

    def read(self) -> bytes:
        self.reads += 1
        return self.data


def test_unsupported_token_shows_notice_without_decoding(qapp, immediate_runner) -> None:
    locator = BytesLocator(b"data")

    viewer = FormatDispatchViewer(locator, "xyz", runner=immediate_runner)

    assert not viewer.is_supported
    assert viewer.notice_text == UNSUPPORTED_MESSAGE
    assert immediate_runner.submitted == []
    assert locator.reads == 0

    viewer.deleteLater()


def test_missing_payload_notice(qapp, immediate_runner) -> None:
    viewer = FormatDispatchViewer(None, "glb", runner=immediate_runner)

    assert viewer.notice_text == MISSING_PAYLOAD_MESSAGE
    assert immediate_runner.submitted == []

    viewer.deleteLater()


def test_supported_token_decodes_in_background(qapp) -> None:
    runner = DeferredRunner()

    viewer = FormatDispatchViewer(EmbeddedPayload("Z2xURg=="), "GLB", runner=runner)

    assert viewer.token == "glb"
    assert viewer.is_pending
    assert viewer.notice_text == PENDING_MESSAGE
    assert len(runner.submitted) == 1

    viewer.deleteLater()


def test_scene_result_mounts_model_viewer(qapp) -> None:
    runner = DeferredRunner()
    viewer = FormatDispatchViewer(BytesLocator(b"x"), "stl", runner=runner)
    ready: list[object] = []
    viewer.sceneReady.connect(ready.append)
    scene = build_scene_data(
        np.eye(3, dtype=np.float32),
        np.array([[0, 1, 2]]),
        FORMAT_DECODERS["stl"],
    )

    _func, _args, on_result, _on_error = runner.submitted[0]
    on_result(scene)

    assert not viewer.is_pending
    assert isinstance(viewer.viewer, ModelViewer)
    assert viewer.viewer.scene is scene
    assert ready == [scene]

    viewer.deleteLater()


def test_decode_failure_is_contained_by_boundary(qapp, immediate_runner) -> None:
    boundary = create_guarded_viewer(BytesLocator(b"\x00 not a model"), "glb", runner=immediate_runner)

    assert boundary.has_failed
    assert boundary.is_showing_fallback()

    boundary.deleteLater()


def test_failure_in_one_viewer_leaves_other_untouched(qapp, immediate_runner) -> None:
    pending_runner = DeferredRunner()
    healthy = create_guarded_viewer(EmbeddedPayload("Z2xURg=="), "glb", runner=pending_runner)
    broken = create_guarded_viewer(BytesLocator(b"garbage"), "stl", runner=immediate_runner)

    assert broken.has_failed
    assert not healthy.has_failed
    assert isinstance(healthy.child, FormatDispatchViewer)
    assert healthy.child.is_pending

    healthy.deleteLater()
    broken.deleteLater()
