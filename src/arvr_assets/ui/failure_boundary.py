"""Contain rendering failures of a single viewer instance."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import QLabel, QStackedLayout, QWidget

__all__ = [
    "FALLBACK_MESSAGE",
    "FailureBoundary",
    "SubtreeState",
    "SupervisedSubtree",
    "component_stack",
]

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Failed to load the model. Please try again."
"""Static text replacing a subtree after its first failure."""


class SubtreeState(str, Enum):
    HEALTHY = "healthy"
    FAILED = "failed"


class SupervisedSubtree:
    """Record the first failure of a supervised subtree.

    The state only ever moves from ``HEALTHY`` to ``FAILED``. Later failures
    are ignored, so the diagnostic log contains the original cause only.
    Recovery means creating a new instance.
    """

    def __init__(self, name: str = "subtree") -> None:
        self.name = name
        self._state = SubtreeState.HEALTHY
        self._error: BaseException | None = None
        self._component_stack = ""

    @property
    def state(self) -> SubtreeState:
        return self._state

    @property
    def failed(self) -> bool:
        return self._state is SubtreeState.FAILED

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def component_stack(self) -> str:
        return self._component_stack

    def capture(self, error: BaseException, stack: str = "") -> bool:
        """Translate *error* into the failed state; return ``True`` on first capture."""

        if self.failed:
            logger.debug("Ignoring further failure in %s: %s", self.name, error)
            return False
        self._state = SubtreeState.FAILED
        self._error = error
        self._component_stack = stack
        logger.error(
            "Error in %s: %s\nComponent stack:\n%s",
            self.name,
            error,
            stack or "    (unavailable)",
            exc_info=(type(error), error, error.__traceback__),
        )
        return True

    def guard(self, func: Callable[[], object], stack: str = "") -> object | None:
        """Call *func*, capturing any exception it raises."""

        if self.failed:
            return None
        try:
            return func()
        except Exception as exc:  # noqa: BLE001 - contained by the boundary
            self.capture(exc, stack)
            return None


def component_stack(widget: QWidget | None) -> str:
    """Describe the widget ancestry of *widget*, innermost first."""

    lines: list[str] = []
    current = widget
    while current is not None:
        label = type(current).__name__
        name = current.objectName()
        lines.append(f"    in {label}" + (f" ({name})" if name else ""))
        current = current.parentWidget()
    return "\n".join(lines)


class FailureBoundary(QWidget):
    """Host exactly one child widget and swap in a fallback when it fails.

    The child is created by *factory* inside the boundary. Exceptions raised
    while building it, and any exception the child later reports through a
    ``renderFailed`` signal (for example after an asynchronous decode),
    replace it with :data:`FALLBACK_MESSAGE` for the rest of this boundary's
    lifetime.
    """

    failed = Signal(object)
    """Emitted once with the captured exception."""

    def __init__(
        self,
        factory: Callable[[QWidget], QWidget],
        parent: QWidget | None = None,
        *,
        name: str = "model viewer",
    ) -> None:
        super().__init__(parent)
        self.setObjectName("failureBoundary")
        self._supervisor = SupervisedSubtree(name)
        self._child: QWidget | None = None

        self._layout = QStackedLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)

        self._fallback = QLabel(FALLBACK_MESSAGE, self)
        self._fallback.setObjectName("failureBoundaryFallback")
        self._fallback.setAlignment(Qt.AlignCenter)
        self._fallback.setWordWrap(True)
        self._layout.addWidget(self._fallback)

        try:
            child = factory(self)
        except Exception as exc:  # noqa: BLE001 - contained by the boundary
            self._capture(exc, component_stack(self))
            return

        self._child = child
        self._layout.addWidget(child)
        self._layout.setCurrentWidget(child)
        render_failed = getattr(child, "renderFailed", None)
        if render_failed is not None:
            render_failed.connect(self._handle_child_failure)

    @property
    def supervisor(self) -> SupervisedSubtree:
        return self._supervisor

    @property
    def has_failed(self) -> bool:
        return self._supervisor.failed

    @property
    def child(self) -> QWidget | None:
        return self._child

    @property
    def fallback_text(self) -> str:
        return self._fallback.text()

    def is_showing_fallback(self) -> bool:
        return self._layout.currentWidget() is self._fallback

    @Slot(object)
    def _handle_child_failure(self, error: object) -> None:
        if not isinstance(error, BaseException):
            error = RuntimeError(str(error))
        source = self._child if self._child is not None else self
        self._capture(error, component_stack(source))

    def _capture(self, error: BaseException, stack: str) -> None:
        if not self._supervisor.capture(error, stack):
            return
        self._layout.setCurrentWidget(self._fallback)
        if self._child is not None:
            self._layout.removeWidget(self._child)
            self._child.hide()
            self._child.deleteLater()
            self._child = None
        self.failed.emit(error)
