"""State machine deciding which asset preview is expanded in a context."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

__all__ = [
    "PreviewStateController",
    "PreviewTransition",
    "TransitionListener",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PreviewTransition:
    """Describe the viewer pairs to tear down and create after a state change.

    ``unmounted`` is the id whose viewer must be discarded and ``mounted`` the
    id whose viewer must be created. Either may be ``None``.
    """

    unmounted: str | None
    mounted: str | None

    @property
    def changed(self) -> bool:
        return self.unmounted is not None or self.mounted is not None


TransitionListener = Callable[[PreviewTransition], None]


class PreviewStateController:
    """Track at most one expanded asset id for a single rendering context.

    The controller starts in the ``NoneExpanded`` state. :meth:`toggle`
    either collapses the active id or replaces it with another one, so two
    previews are never open at once within the same context.
    """

    def __init__(self, name: str = "preview") -> None:
        self._name = name
        self._active_id: str | None = None
        self._listeners: list[TransitionListener] = []

    def __repr__(self) -> str:
        return f"PreviewStateController(name={self._name!r}, active_id={self._active_id!r})"

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def name(self) -> str:
        return self._name

    @property
    def active_id(self) -> str | None:
        """Return the expanded asset id, or ``None`` when nothing is open."""

        return self._active_id

    @property
    def is_expanded(self) -> bool:
        return self._active_id is not None

    def is_active(self, asset_id: str) -> bool:
        return self._active_id is not None and self._active_id == asset_id

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def toggle(self, asset_id: str) -> PreviewTransition:
        """Expand *asset_id*, or collapse it when it is already expanded."""

        if self._active_id == asset_id:
            return self._move_to(None)
        return self._move_to(asset_id)

    def reset(self) -> PreviewTransition:
        """Collapse the context because its collection was replaced."""

        return self._move_to(None)

    def discard(self, asset_id: str) -> PreviewTransition:
        """Collapse the context only when *asset_id* is the expanded one."""

        if self._active_id != asset_id:
            return PreviewTransition(None, None)
        return self._move_to(None)

    def subscribe(self, listener: TransitionListener) -> Callable[[], None]:
        """Register *listener* for every non-empty transition.

        Returns a callable removing the listener again.
        """

        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                return

        return unsubscribe

    def _move_to(self, asset_id: str | None) -> PreviewTransition:
        previous = self._active_id
        if previous == asset_id:
            return PreviewTransition(None, None)

        self._active_id = asset_id
        transition = PreviewTransition(unmounted=previous, mounted=asset_id)
        logger.debug("%s preview: %s -> %s", self._name, previous, asset_id)
        for listener in tuple(self._listeners):
            try:
                listener(transition)
            except Exception:  # noqa: BLE001
                logger.exception("%s preview listener failed on %s", self._name, transition)
        return transition
