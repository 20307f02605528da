"""Widget that renders one asset through the decoder matching its format."""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import QLabel, QStackedLayout, QWidget

from ..application.workers import TaskRunner
from ..rendering.decoders import SceneData, decode_scene
from ..rendering.formats import UNSUPPORTED_MESSAGE, normalize_token, resolve_decoder
from ..rendering.payload import MISSING_PAYLOAD_MESSAGE, PayloadLocator
from .failure_boundary import FailureBoundary
from .model_viewer import ModelViewer

__all__ = [
    "FormatDispatchViewer",
    "PENDING_MESSAGE",
    "create_guarded_viewer",
    "load_scene",
]

logger = logging.getLogger(__name__)

PENDING_MESSAGE = "Loading model…"
"""Notice shown while the payload is fetched and decoded."""


def load_scene(locator: PayloadLocator, token: str) -> SceneData:
    """Read the bytes behind *locator* and decode them as *token*."""

    data = locator.read()
    return decode_scene(data, token)


class FormatDispatchViewer(QWidget):
    """Pick the decoder for *token* and show the decoded scene.

    Unsupported tokens and missing payloads produce a plain notice without
    touching the payload. Supported tokens are decoded on the thread pool
    while a pending notice is shown; failures are emitted on
    :attr:`renderFailed` for the enclosing :class:`FailureBoundary`.
    """

    renderFailed = Signal(object)
    """Emitted with the exception that prevented rendering."""

    sceneReady = Signal(object)
    """Emitted with the :class:`SceneData` once the viewer shows it."""

    def __init__(
        self,
        locator: PayloadLocator | None,
        token: str,
        parent: QWidget | None = None,
        *,
        runner: TaskRunner | None = None,
        autostart: bool = True,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("formatDispatchViewer")
        self._locator = locator
        self._token = normalize_token(token)
        self._spec = resolve_decoder(self._token)
        self._runner = runner or TaskRunner(self)
        self._viewer: ModelViewer | None = None
        self._pending = False

        self._layout = QStackedLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._notice = QLabel(self)
        self._notice.setObjectName("viewerNotice")
        self._notice.setAlignment(Qt.AlignCenter)
        self._notice.setWordWrap(True)
        self._layout.addWidget(self._notice)

        if self._spec is None:
            self._notice.setText(UNSUPPORTED_MESSAGE)
        elif self._locator is None:
            self._notice.setText(MISSING_PAYLOAD_MESSAGE)
        else:
            self._notice.setText(PENDING_MESSAGE)
            if autostart:
                self.start()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def token(self) -> str:
        return self._token

    @property
    def is_supported(self) -> bool:
        return self._spec is not None

    @property
    def is_pending(self) -> bool:
        return self._pending

    @property
    def notice_text(self) -> str:
        return self._notice.text()

    @property
    def viewer(self) -> ModelViewer | None:
        return self._viewer

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Begin decoding in the background; no-op when nothing can be decoded."""

        if self._spec is None or self._locator is None or self._pending or self._viewer is not None:
            return
        logger.debug("Decoding %s payload in the background", self._token)
        self._pending = True
        self._runner.submit(
            load_scene,
            self._locator,
            self._token,
            on_result=self.show_scene,
            on_error=self.fail,
        )

    @Slot(object)
    def show_scene(self, scene: SceneData) -> None:
        """Mount the GL viewer for *scene*."""

        self._pending = False
        viewer = ModelViewer(self)
        viewer.setObjectName("modelViewer")
        viewer.renderFailed.connect(self.fail)
        viewer.set_scene(scene)
        self._viewer = viewer
        self._layout.addWidget(viewer)
        self._layout.setCurrentWidget(viewer)
        self.sceneReady.emit(scene)

    @Slot(object)
    def fail(self, error: object) -> None:
        self._pending = False
        logger.debug("Viewer for %s failed: %s", self._token, error)
        self.renderFailed.emit(error)


def create_guarded_viewer(
    locator: PayloadLocator | None,
    token: str,
    parent: QWidget | None = None,
    *,
    runner: TaskRunner | None = None,
) -> FailureBoundary:
    """Return a fresh boundary wrapping a :class:`FormatDispatchViewer`.

    Without *runner* each viewer owns its task runner, so a decode still
    running when the boundary is torn down is dropped together with it.
    Decoding starts only once the boundary listens for failures.
    """

    boundary = FailureBoundary(
        lambda host: FormatDispatchViewer(locator, token, host, runner=runner, autostart=False),
        parent,
        name="ModelViewer",
    )
    viewer = boundary.child
    if isinstance(viewer, FormatDispatchViewer):
        viewer.start()
    return boundary
