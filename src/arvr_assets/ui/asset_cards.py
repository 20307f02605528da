"""Cards presenting catalog assets and the shared-link preview."""

from __future__ import annotations

import html
import logging
from collections.abc import Callable, Iterable

from PySide6.QtCore import QBuffer, QByteArray, QIODevice, Qt, Signal, Slot
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import (
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

try:  # pragma: no cover - optional Qt module
    from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer
except ImportError:  # pragma: no cover - multimedia backend missing
    QAudioOutput = None  # type: ignore[assignment]
    QMediaPlayer = None  # type: ignore[assignment]

from ..application.workers import TaskRunner
from ..catalog.classifier import exposes_model_control, filter_by_category, known_category
from ..catalog.models import Asset, AssetCategory
from ..catalog.preview_state import PreviewStateController, PreviewTransition
from ..rendering.payload import PayloadFetcher, PayloadLocator, locator_for
from ..rendering.thumbnails import TextureThumbnail, build_texture_thumbnail
from .asset_viewer import create_guarded_viewer
from .failure_boundary import FailureBoundary

__all__ = [
    "AssetCard",
    "AssetGrid",
    "AudioControls",
    "SharedPreviewCard",
    "TexturePreview",
    "format_upload_time",
]

logger = logging.getLogger(__name__)

ShareUrlFactory = Callable[[Asset], "str | None"]

GRID_COLUMNS = 3
"""Number of cards per grid row."""


def format_upload_time(asset: Asset) -> str:
    """Return the upload timestamp of *asset* in local time."""

    if asset.uploaded_at is None:
        return "Unknown"
    return asset.uploaded_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _load_texture(locator: PayloadLocator) -> TextureThumbnail:
    return build_texture_thumbnail(locator.read())


class TexturePreview(QLabel):
    """Thumbnail of a texture asset, decoded with Pillow off the UI thread."""

    def __init__(self, locator: PayloadLocator | None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("texturePreview")
        self.setAlignment(Qt.AlignCenter)
        self.setMinimumHeight(120)
        self._thumbnail: TextureThumbnail | None = None
        self._runner = TaskRunner(self)

        if locator is None:
            self.setText("Texture data is missing.")
            return
        self.setText("Loading texture…")
        self._runner.submit(
            _load_texture,
            locator,
            on_result=self._show_thumbnail,
            on_error=self._show_error,
        )

    @property
    def thumbnail(self) -> TextureThumbnail | None:
        return self._thumbnail

    @Slot(object)
    def _show_thumbnail(self, thumbnail: TextureThumbnail) -> None:
        pixmap = QPixmap()
        if not pixmap.loadFromData(thumbnail.png, "PNG"):
            self.setText("Texture preview is not available.")
            return
        self._thumbnail = thumbnail
        self.setPixmap(pixmap)
        self.setToolTip(f"{thumbnail.source_format or 'Image'} {thumbnail.dimensions}")

    @Slot(object)
    def _show_error(self, error: object) -> None:
        logger.debug("Texture preview failed: %s", error)
        self.setText(getattr(error, "message", None) or "Texture preview is not available.")


class AudioControls(QWidget):
    """Play button for sound assets, backed by Qt Multimedia."""

    def __init__(self, locator: PayloadLocator | None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("audioControls")
        self._locator = locator
        self._runner = TaskRunner(self)
        self._player = None
        self._output = None
        self._buffer: QBuffer | None = None
        self._loading = False

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._button = QPushButton("Play", self)
        self._button.setObjectName("audioPlayButton")
        self._button.clicked.connect(self._toggle_playback)
        layout.addWidget(self._button)
        self._status = QLabel(self)
        layout.addWidget(self._status, 1)

        if QMediaPlayer is None:
            self._button.setEnabled(False)
            self._status.setText("Audio playback is not available.")
        elif locator is None:
            self._button.setEnabled(False)
            self._status.setText("Audio data is missing.")

    @property
    def is_playing(self) -> bool:
        if self._player is None:
            return False
        return self._player.playbackState() == QMediaPlayer.PlaybackState.PlayingState

    @Slot()
    def _toggle_playback(self) -> None:
        if self._player is not None:
            if self.is_playing:
                self._player.stop()
            else:
                self._player.play()
            return
        if self._loading or self._locator is None:
            return
        self._loading = True
        self._status.setText("Loading…")
        self._runner.submit(
            self._locator.read,
            on_result=self._start_playback,
            on_error=self._show_error,
        )

    @Slot(object)
    def _start_playback(self, data: bytes) -> None:
        self._loading = False
        self._status.clear()
        self._buffer = QBuffer(self)
        self._buffer.setData(QByteArray(data))
        self._buffer.open(QIODevice.ReadOnly)

        self._output = QAudioOutput(self)
        self._player = QMediaPlayer(self)
        self._player.setAudioOutput(self._output)
        self._player.playbackStateChanged.connect(self._update_button)
        self._player.errorOccurred.connect(self._handle_player_error)
        self._player.setSourceDevice(self._buffer)
        self._player.play()

    @Slot(object)
    def _show_error(self, error: object) -> None:
        self._loading = False
        logger.warning("Unable to load audio: %s", error)
        self._status.setText("Audio could not be loaded.")

    def _update_button(self) -> None:
        self._button.setText("Stop" if self.is_playing else "Play")

    def _handle_player_error(self, *args: object) -> None:
        message = self._player.errorString() if self._player is not None else ""
        logger.warning("Audio playback failed: %s", message)
        self._status.setText(message or "Audio playback failed.")


class _PreviewSlot(QWidget):
    """Container mounting a fresh guarded viewer on every expansion."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._boundary: FailureBoundary | None = None
        self.setMinimumHeight(0)
        self.hide()

    @property
    def boundary(self) -> FailureBoundary | None:
        return self._boundary

    def mount(self, locator: PayloadLocator | None, token: str) -> FailureBoundary:
        self.unmount()
        boundary = create_guarded_viewer(locator, token, self)
        boundary.setMinimumHeight(240)
        self._layout.addWidget(boundary)
        self._boundary = boundary
        self.show()
        return boundary

    def unmount(self) -> None:
        boundary, self._boundary = self._boundary, None
        if boundary is None:
            return
        self._layout.removeWidget(boundary)
        boundary.hide()
        boundary.deleteLater()
        self.hide()


class AssetCard(QFrame):
    """One catalog entry in the asset grid."""

    previewToggleRequested = Signal(str)
    downloadRequested = Signal(str)
    deleteRequested = Signal(str)

    def __init__(
        self,
        asset: Asset,
        *,
        share_url: str | None = None,
        can_delete: bool = False,
        fetch: PayloadFetcher | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("assetCard")
        self.setFrameShape(QFrame.StyledPanel)
        self.setSizePolicy(QSizePolicy.Preferred, QSizePolicy.Maximum)
        self._asset = asset
        self._fetch = fetch
        self._expanded = False

        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        title = QLabel(f"<b>{_escape(asset.name)}</b> <span style='color: gray;'>(v{asset.version})</span>", self)
        title.setObjectName("assetTitle")
        title.setTextFormat(Qt.RichText)
        title.setWordWrap(True)
        header.addWidget(title, 1)

        self._delete_button: QPushButton | None = None
        if can_delete:
            self._delete_button = QPushButton("Delete", self)
            self._delete_button.setObjectName("deleteButton")
            self._delete_button.clicked.connect(lambda: self.deleteRequested.emit(self._asset.id))
            header.addWidget(self._delete_button)
        layout.addLayout(header)

        self._toggle_button: QPushButton | None = None
        self._preview = _PreviewSlot(self)
        category = known_category(asset.category)
        if exposes_model_control(asset):
            self._toggle_button = QPushButton("View Model", self)
            self._toggle_button.setObjectName("viewModelButton")
            self._toggle_button.clicked.connect(lambda: self.previewToggleRequested.emit(self._asset.id))
            layout.addWidget(self._toggle_button)
            layout.addWidget(self._preview)
        elif category is AssetCategory.TEXTURES:
            layout.addWidget(TexturePreview(locator_for(asset, fetch), self))
        elif category is AssetCategory.SOUNDS:
            layout.addWidget(AudioControls(locator_for(asset, fetch), self))

        details = QLabel(self)
        details.setObjectName("assetDetails")
        details.setTextFormat(Qt.RichText)
        details.setOpenExternalLinks(True)
        lines = [
            f"<b>Category:</b> {_escape(asset.canonical_category.upper())}",
            f"<b>Uploaded:</b> {format_upload_time(asset)}",
        ]
        if not asset.is_public and share_url:
            lines.append(f"<b>Private Link:</b> <a href='{_escape(share_url)}'>Share Link</a>")
        details.setText("<br>".join(lines))
        layout.addWidget(details)

        download = QPushButton("Download", self)
        download.setObjectName("downloadButton")
        download.clicked.connect(lambda: self.downloadRequested.emit(self._asset.id))
        layout.addWidget(download)

    @property
    def asset(self) -> Asset:
        return self._asset

    @property
    def is_expanded(self) -> bool:
        return self._expanded

    @property
    def viewer_boundary(self) -> FailureBoundary | None:
        return self._preview.boundary

    @property
    def toggle_button(self) -> QPushButton | None:
        return self._toggle_button

    @property
    def delete_button(self) -> QPushButton | None:
        return self._delete_button

    def set_expanded(self, expanded: bool) -> None:
        """Mount a new viewer when expanded, discard it when collapsed."""

        if self._toggle_button is None:
            return
        self._expanded = expanded
        if expanded:
            self._preview.mount(locator_for(self._asset, self._fetch), self._asset.format_token)
            self._toggle_button.setText("Close Model")
        else:
            self._preview.unmount()
            self._toggle_button.setText("View Model")


class AssetGrid(QScrollArea):
    """Scrollable grid of :class:`AssetCard` widgets bound to one preview context."""

    downloadRequested = Signal(str)
    deleteRequested = Signal(str)

    def __init__(self, preview_state: PreviewStateController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("assetGrid")
        self.setWidgetResizable(True)
        self._preview_state = preview_state
        self._cards: dict[str, AssetCard] = {}
        self._visible: list[str] = []

        self._container = QWidget(self)
        self._layout = QGridLayout(self._container)
        self._layout.setAlignment(Qt.AlignTop)
        self._empty_label = QLabel("No assets in this category yet.", self._container)
        self._empty_label.setAlignment(Qt.AlignCenter)
        self.setWidget(self._container)

        unsubscribe = preview_state.subscribe(self._apply_transition)
        self.destroyed.connect(lambda *_: unsubscribe())
        self._show_empty()

    @property
    def cards(self) -> dict[str, AssetCard]:
        return dict(self._cards)

    @property
    def preview_state(self) -> PreviewStateController:
        return self._preview_state

    def card(self, asset_id: str) -> AssetCard | None:
        return self._cards.get(asset_id)

    def visible_ids(self) -> list[str]:
        """Return the ids of the cards laid out for the active category."""

        return list(self._visible)

    def set_assets(
        self,
        assets: Iterable[Asset],
        *,
        category: AssetCategory | str | None = None,
        can_delete: Callable[[Asset], bool] = lambda _asset: False,
        share_url: ShareUrlFactory | None = None,
        fetch: PayloadFetcher | None = None,
    ) -> None:
        """Synchronise the cards with *assets* and show those of *category*.

        Cards are matched by asset id. A card whose asset is unchanged is kept
        together with its mounted viewer; cards outside *category* are only
        hidden. Viewers are mounted and discarded solely by preview
        transitions.
        """

        assets = list(assets)
        wanted = {asset.id for asset in assets}
        for asset_id in [asset_id for asset_id in self._cards if asset_id not in wanted]:
            self._drop_card(asset_id)

        for asset in assets:
            card = self._cards.get(asset.id)
            if card is not None and card.asset == asset:
                continue
            if card is not None:
                self._drop_card(asset.id)
            card = AssetCard(
                asset,
                share_url=share_url(asset) if share_url is not None else None,
                can_delete=can_delete(asset),
                fetch=fetch,
                parent=self._container,
            )
            card.previewToggleRequested.connect(self._preview_state.toggle)
            card.downloadRequested.connect(self.downloadRequested)
            card.deleteRequested.connect(self.deleteRequested)
            card.hide()
            self._cards[asset.id] = card
            if self._preview_state.is_active(asset.id):
                card.set_expanded(True)

        shown = assets if category is None else filter_by_category(assets, category)
        self._relayout([asset.id for asset in shown])

    def _relayout(self, visible: list[str]) -> None:
        for card in self._cards.values():
            self._layout.removeWidget(card)
        self._layout.removeWidget(self._empty_label)
        self._visible = visible

        shown = set(visible)
        for asset_id, card in self._cards.items():
            if asset_id not in shown:
                card.hide()
        if not visible:
            self._show_empty()
            return
        self._empty_label.hide()
        for index, asset_id in enumerate(visible):
            card = self._cards[asset_id]
            row, column = divmod(index, GRID_COLUMNS)
            self._layout.addWidget(card, row, column)
            card.show()

    def _drop_card(self, asset_id: str) -> None:
        card = self._cards.pop(asset_id)
        self._layout.removeWidget(card)
        card.hide()
        card.deleteLater()

    def _apply_transition(self, transition: PreviewTransition) -> None:
        if transition.unmounted is not None:
            card = self._cards.get(transition.unmounted)
            if card is not None:
                card.set_expanded(False)
        if transition.mounted is not None:
            card = self._cards.get(transition.mounted)
            if card is not None:
                card.set_expanded(True)

    def _show_empty(self) -> None:
        self._layout.addWidget(self._empty_label, 0, 0, 1, GRID_COLUMNS)
        self._empty_label.show()


class SharedPreviewCard(QFrame):
    """Preview of the asset resolved from a shared link.

    The card owns its own preview context, so loading or failing a model
    here never affects the grid.
    """

    copyLinkRequested = Signal(str)
    downloadRequested = Signal(str)

    def __init__(
        self,
        preview_state: PreviewStateController,
        parent: QWidget | None = None,
        *,
        fetch: PayloadFetcher | None = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("sharedPreviewCard")
        self.setFrameShape(QFrame.StyledPanel)
        self._preview_state = preview_state
        self._fetch = fetch
        self._asset: Asset | None = None
        self._share_url: str | None = None

        layout = QVBoxLayout(self)
        self._title = QLabel(self)
        self._title.setObjectName("sharedAssetTitle")
        self._title.setTextFormat(Qt.RichText)
        layout.addWidget(self._title)

        self._toggle_button = QPushButton("Load Model", self)
        self._toggle_button.setObjectName("loadModelButton")
        self._toggle_button.clicked.connect(self._request_toggle)
        layout.addWidget(self._toggle_button)

        self._preview = _PreviewSlot(self)
        layout.addWidget(self._preview)

        buttons = QHBoxLayout()
        self._copy_button = QPushButton("Copy Link", self)
        self._copy_button.setObjectName("copyLinkButton")
        self._copy_button.clicked.connect(self._request_copy)
        buttons.addWidget(self._copy_button)
        self._download_button = QPushButton("Download", self)
        self._download_button.setObjectName("sharedDownloadButton")
        self._download_button.clicked.connect(self._request_download)
        buttons.addWidget(self._download_button)
        buttons.addStretch(1)
        layout.addLayout(buttons)

        unsubscribe = preview_state.subscribe(self._apply_transition)
        self.destroyed.connect(lambda *_: unsubscribe())
        self.hide()

    @property
    def asset(self) -> Asset | None:
        return self._asset

    @property
    def viewer_boundary(self) -> FailureBoundary | None:
        return self._preview.boundary

    @property
    def toggle_button(self) -> QPushButton:
        return self._toggle_button

    def set_fetch(self, fetch: PayloadFetcher | None) -> None:
        """Use *fetch* for shared assets that arrive without embedded data."""

        self._fetch = fetch

    def show_asset(self, asset: Asset | None, share_url: str | None = None) -> None:
        """Display *asset*; ``None`` hides the card."""

        self._preview.unmount()
        self._asset = asset
        self._share_url = share_url
        if asset is None:
            self.hide()
            return

        self._title.setText(f"<b>{_escape(asset.name)}</b> <span style='color: gray;'>(v{asset.version})</span>")
        self._toggle_button.setVisible(exposes_model_control(asset))
        self._toggle_button.setText("Load Model")
        self._copy_button.setEnabled(bool(share_url))
        self.show()
        if self._preview_state.is_active(asset.id):
            self._mount(asset)

    @Slot()
    def _request_toggle(self) -> None:
        if self._asset is not None:
            self._preview_state.toggle(self._asset.id)

    @Slot()
    def _request_copy(self) -> None:
        if self._share_url:
            self.copyLinkRequested.emit(self._share_url)

    @Slot()
    def _request_download(self) -> None:
        if self._asset is not None:
            self.downloadRequested.emit(self._asset.id)

    def _apply_transition(self, transition: PreviewTransition) -> None:
        asset = self._asset
        if asset is None:
            return
        if transition.unmounted == asset.id:
            self._preview.unmount()
            self._toggle_button.setText("Load Model")
        if transition.mounted == asset.id:
            self._mount(asset)

    def _mount(self, asset: Asset) -> None:
        if not exposes_model_control(asset):
            return
        self._preview.mount(locator_for(asset, self._fetch), asset.format_token)
        self._toggle_button.setText("Close Model")


def _escape(text: str) -> str:
    return html.escape(text, quote=True)
