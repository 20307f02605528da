from __future__ import annotations

from datetime import UTC, datetime

import pytest

pytest.importorskip("PySide6.QtWidgets", exc_type=ImportError)

from arvr_assets.catalog.models import Asset
from arvr_assets.catalog.preview_state import PreviewStateController
from arvr_assets.errors import DecodeFailure
from arvr_assets.rendering.payload import MISSING_PAYLOAD_MESSAGE
from arvr_assets.ui.asset_cards import (
    AssetCard,
    AssetGrid,
    SharedPreviewCard,
    TexturePreview,
    format_upload_time,
)
from arvr_assets.ui.asset_viewer import FormatDispatchViewer


def _asset(asset_id: str, category: str = "uploads/models", **kwargs) -> Asset:
    kwargs.setdefault("name", f"{asset_id}.glb")
    return Asset(id=asset_id, category=category, **kwargs)


def _viewer_notice(card) -> str:
    boundary = card.viewer_boundary
    assert boundary is not None
    viewer = boundary.child
    assert isinstance(viewer, FormatDispatchViewer)
    return viewer.notice_text


def test_grid_toggle_mounts_single_viewer(qapp) -> None:
    state = PreviewStateController("grid")
    grid = AssetGrid(state)
    grid.set_assets([_asset("a"), _asset("b")])
    card_a, card_b = grid.card("a"), grid.card("b")

    card_a.toggle_button.click()

    assert state.active_id == "a"
    assert card_a.is_expanded
    assert card_a.toggle_button.text() == "Close Model"
    assert _viewer_notice(card_a) == MISSING_PAYLOAD_MESSAGE

    card_b.toggle_button.click()

    assert state.active_id == "b"
    assert not card_a.is_expanded
    assert card_a.viewer_boundary is None
    assert card_a.toggle_button.text() == "View Model"
    assert card_b.is_expanded

    card_b.toggle_button.click()

    assert state.active_id is None
    assert card_b.viewer_boundary is None

    grid.deleteLater()


def test_each_expansion_creates_fresh_viewer(qapp) -> None:
    state = PreviewStateController("grid")
    grid = AssetGrid(state)
    grid.set_assets([_asset("a")])
    card = grid.card("a")

    state.toggle("a")
    first = card.viewer_boundary
    state.toggle("a")
    state.toggle("a")

    assert card.viewer_boundary is not None
    assert card.viewer_boundary is not first

    grid.deleteLater()


def _fail_viewer(card) -> None:
    boundary = card.viewer_boundary
    assert boundary is not None
    viewer = boundary.child
    assert isinstance(viewer, FormatDispatchViewer)
    viewer.renderFailed.emit(DecodeFailure("corrupt mesh"))
    assert boundary.has_failed


def test_rebuilding_grid_keeps_mounted_boundary(qapp) -> None:
    state = PreviewStateController("grid")
    grid = AssetGrid(state)
    grid.set_assets([_asset("a"), _asset("b")])
    card_b = grid.card("b")
    state.toggle("b")
    boundary = card_b.viewer_boundary

    grid.set_assets([_asset("b")])

    assert grid.card("b") is card_b
    assert card_b.viewer_boundary is boundary
    assert grid.card("a") is None
    assert grid.visible_ids() == ["b"]

    grid.deleteLater()


def test_failed_viewer_stays_failed_when_other_asset_removed(qapp) -> None:
    state = PreviewStateController("grid")
    grid = AssetGrid(state)
    grid.set_assets([_asset("a"), _asset("b")])
    card_a = grid.card("a")
    state.toggle("a")
    _fail_viewer(card_a)
    boundary = card_a.viewer_boundary

    grid.set_assets([_asset("a")])

    assert card_a.viewer_boundary is boundary
    assert boundary.has_failed
    assert boundary.is_showing_fallback()
    assert state.active_id == "a"

    grid.deleteLater()


def test_category_switch_hides_cards_without_unmounting(qapp) -> None:
    state = PreviewStateController("grid")
    grid = AssetGrid(state)
    assets = [_asset("m"), _asset("t", "uploads/textures", name="wood.png")]
    grid.set_assets(assets, category="models")
    card_m = grid.card("m")
    state.toggle("m")
    boundary = card_m.viewer_boundary

    grid.set_assets(assets, category="textures")

    assert grid.visible_ids() == ["t"]
    assert card_m.isHidden()
    assert card_m.viewer_boundary is boundary

    grid.set_assets(assets, category="models")

    assert grid.visible_ids() == ["m"]
    assert grid.card("m") is card_m
    assert card_m.viewer_boundary is boundary

    grid.deleteLater()


def test_changed_asset_gets_a_new_card(qapp) -> None:
    state = PreviewStateController("grid")
    grid = AssetGrid(state)
    grid.set_assets([_asset("a", version=1)])
    first = grid.card("a")

    grid.set_assets([_asset("a", version=2)])

    assert grid.card("a") is not first
    assert grid.card("a").asset.version == 2

    grid.deleteLater()



def test_card_controls_depend_on_category_and_owner(qapp) -> None:
    model = AssetCard(_asset("m"), can_delete=True)
    texture = AssetCard(_asset("t", "uploads/textures", name="wood.png"))

    assert model.toggle_button is not None
    assert model.delete_button is not None
    assert texture.toggle_button is None
    assert texture.delete_button is None
    assert texture.findChild(TexturePreview) is not None

    model.deleteLater()
    texture.deleteLater()


def test_card_signals_carry_asset_id(qapp) -> None:
    card = AssetCard(_asset("m"), can_delete=True)
    downloads: list[str] = []
    deletes: list[str] = []
    card.downloadRequested.connect(downloads.append)
    card.deleteRequested.connect(deletes.append)

    card.delete_button.click()
    card.findChild(type(card.delete_button), "downloadButton").click()

    assert deletes == ["m"]
    assert downloads == ["m"]

    card.deleteLater()


def test_texture_without_payload(qapp) -> None:
    preview = TexturePreview(None)

    assert preview.text() == "Texture data is missing."

    preview.deleteLater()


def test_shared_card_model_control_only_for_models(qapp) -> None:
    state = PreviewStateController("shared-link")
    card = SharedPreviewCard(state)

    card.show_asset(_asset("t", "uploads/textures", name="wood.png"), "https://host/assets/public/tok")
    assert card.toggle_button.isHidden()

    card.show_asset(_asset("m"), "https://host/assets/public/tok")
    assert not card.toggle_button.isHidden()
    assert card.toggle_button.text() == "Load Model"

    card.toggle_button.click()
    assert state.active_id == "m"
    assert card.viewer_boundary is not None
    assert card.toggle_button.text() == "Close Model"

    copied: list[str] = []
    card.copyLinkRequested.connect(copied.append)
    card.findChild(type(card.toggle_button), "copyLinkButton").click()
    assert copied == ["https://host/assets/public/tok"]

    card.deleteLater()


def test_shared_and_grid_contexts_are_independent(qapp) -> None:
    grid_state = PreviewStateController("grid")
    shared_state = PreviewStateController("shared-link")
    grid = AssetGrid(grid_state)
    grid.set_assets([_asset("a")])
    shared = SharedPreviewCard(shared_state)
    shared.show_asset(_asset("a"))

    grid_state.toggle("a")
    shared_state.toggle("a")
    shared_state.reset()

    assert grid.card("a").is_expanded
    assert shared.viewer_boundary is None

    grid.deleteLater()
    shared.deleteLater()


def test_format_upload_time() -> None:
    stamped = _asset("a", uploaded_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC))

    assert format_upload_time(_asset("b")) == "Unknown"
    assert format_upload_time(stamped).startswith("2024-01-0")
