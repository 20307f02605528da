from __future__ import annotations

from arvr_assets.catalog.preview_state import PreviewStateController, PreviewTransition


def test_starts_collapsed() -> None:
    controller = PreviewStateController("grid")

    assert controller.active_id is None
    assert not controller.is_expanded


def test_toggle_twice_returns_to_collapsed() -> None:
    controller = PreviewStateController()

    assert controller.toggle("a") == PreviewTransition(unmounted=None, mounted="a")
    assert controller.is_active("a")
    assert controller.toggle("a") == PreviewTransition(unmounted="a", mounted=None)
    assert controller.active_id is None


def test_expanding_another_id_swaps_viewers() -> None:
    controller = PreviewStateController()
    controller.toggle("a")

    transition = controller.toggle("b")

    assert transition == PreviewTransition(unmounted="a", mounted="b")
    assert controller.active_id == "b"
    assert not controller.is_active("a")


def test_reset_collapses() -> None:
    controller = PreviewStateController()
    controller.toggle("a")

    assert controller.reset() == PreviewTransition(unmounted="a", mounted=None)
    assert not controller.reset().changed


def test_discard_only_affects_active_id() -> None:
    controller = PreviewStateController()
    controller.toggle("a")

    assert not controller.discard("b").changed
    assert controller.active_id == "a"

    assert controller.discard("a") == PreviewTransition(unmounted="a", mounted=None)
    assert controller.active_id is None


def test_listeners_receive_changes_only() -> None:
    controller = PreviewStateController()
    seen: list[PreviewTransition] = []
    unsubscribe = controller.subscribe(seen.append)

    controller.toggle("a")
    controller.discard("zzz")
    controller.toggle("b")
    unsubscribe()
    controller.reset()

    assert seen == [
        PreviewTransition(None, "a"),
        PreviewTransition("a", "b"),
    ]


def test_contexts_are_independent() -> None:
    grid = PreviewStateController("grid")
    shared = PreviewStateController("shared-link")

    grid.toggle("a")
    shared.toggle("a")
    shared.reset()

    assert grid.active_id == "a"
    assert shared.active_id is None


def test_failing_listener_does_not_block_others(caplog) -> None:
    controller = PreviewStateController("grid")
    seen: list[PreviewTransition] = []

    def broken(_transition: PreviewTransition) -> None:
        raise RuntimeError("listener exploded")

    controller.subscribe(broken)
    controller.subscribe(seen.append)

    transition = controller.toggle("a")

    assert seen == [transition]
    assert controller.active_id == "a"
    assert "listener failed" in caplog.text
