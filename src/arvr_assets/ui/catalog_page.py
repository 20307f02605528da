"""Catalog page: category sidebar, upload and shared-link rows, asset grid."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import (
    QCheckBox,
    QFileDialog,
    QFrame,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from ..catalog.models import AssetCategory
from ..catalog.preview_state import PreviewStateController
from .asset_cards import AssetGrid, SharedPreviewCard

__all__ = ["CatalogPage", "CategorySidebar"]


class CategorySidebar(QListWidget):
    """List of the four catalog categories with their descriptions."""

    categorySelected = Signal(str)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("categorySidebar")
        self.setMaximumWidth(220)
        for category in AssetCategory:
            item = QListWidgetItem(category.label)
            item.setData(Qt.UserRole, category.value)
            item.setToolTip(category.description)
            self.addItem(item)
        self.currentItemChanged.connect(self._handle_current_changed)

    def select(self, category: AssetCategory | str) -> None:
        value = AssetCategory(category).value
        for row in range(self.count()):
            item = self.item(row)
            if item.data(Qt.UserRole) == value:
                self.setCurrentRow(row)
                return

    def current_category(self) -> AssetCategory | None:
        item = self.currentItem()
        if item is None:
            return None
        return AssetCategory(item.data(Qt.UserRole))

    @Slot(QListWidgetItem, QListWidgetItem)
    def _handle_current_changed(self, current: QListWidgetItem | None, _previous: QListWidgetItem | None) -> None:
        if current is not None:
            self.categorySelected.emit(current.data(Qt.UserRole))


class CatalogPage(QWidget):
    """Signed-in view of the catalog.

    The page only gathers input and displays state. Network work is started
    by the main window in response to the request signals.
    """

    uploadRequested = Signal(object, bool)
    previewRequested = Signal(str)
    logoutRequested = Signal()

    def __init__(
        self,
        grid_state: PreviewStateController,
        shared_state: PreviewStateController,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("catalogPage")
        self._selected_file: Path | None = None

        # Header
        self._user_label = QLabel(self)
        self._user_label.setObjectName("userLabel")
        logout = QPushButton("Logout", self)
        logout.setObjectName("logoutButton")
        logout.clicked.connect(self.logoutRequested)
        header = QHBoxLayout()
        title = QLabel("<h2>AR/VR Asset Manager</h2>", self)
        header.addWidget(title)
        header.addStretch(1)
        header.addWidget(self._user_label)
        header.addWidget(logout)

        # Sidebar
        self.sidebar = CategorySidebar(self)
        self._category_description = QLabel(self)
        self._category_description.setObjectName("categoryDescription")
        self._category_description.setWordWrap(True)
        sidebar_panel = QWidget(self)
        sidebar_layout = QVBoxLayout(sidebar_panel)
        sidebar_layout.setContentsMargins(0, 0, 0, 0)
        sidebar_layout.addWidget(QLabel("<b>Categories</b>", sidebar_panel))
        sidebar_layout.addWidget(self.sidebar, 1)
        sidebar_layout.addWidget(self._category_description)
        self.sidebar.categorySelected.connect(self._update_description)

        # Upload row
        upload_box = QGroupBox("Upload New Asset", self)
        self._file_label = QLineEdit(upload_box)
        self._file_label.setObjectName("uploadFileLabel")
        self._file_label.setReadOnly(True)
        self._file_label.setPlaceholderText("No file selected")
        browse = QPushButton("Choose File…", upload_box)
        browse.clicked.connect(self._choose_file)
        self.public_checkbox = QCheckBox("Make Public", upload_box)
        self.public_checkbox.setObjectName("makePublicCheckbox")
        self._upload_button = QPushButton("Upload", upload_box)
        self._upload_button.setObjectName("uploadButton")
        self._upload_button.clicked.connect(self._request_upload)
        upload_layout = QHBoxLayout(upload_box)
        upload_layout.addWidget(self._file_label, 1)
        upload_layout.addWidget(browse)
        upload_layout.addWidget(self.public_checkbox)
        upload_layout.addWidget(self._upload_button)

        # Shared-link row
        share_box = QGroupBox("Preview Shared Asset", self)
        self.share_input = QLineEdit(share_box)
        self.share_input.setObjectName("sharedLinkInput")
        self.share_input.setPlaceholderText("Enter shared link")
        self.share_input.returnPressed.connect(self._request_preview)
        preview = QPushButton("Preview", share_box)
        preview.setObjectName("previewButton")
        preview.clicked.connect(self._request_preview)
        self.shared_card = SharedPreviewCard(shared_state, share_box)
        share_layout = QVBoxLayout(share_box)
        share_row = QHBoxLayout()
        share_row.addWidget(self.share_input, 1)
        share_row.addWidget(preview)
        share_layout.addLayout(share_row)
        share_layout.addWidget(self.shared_card)

        # Grid
        self.grid = AssetGrid(grid_state, self)

        content = QWidget(self)
        content_layout = QVBoxLayout(content)
        content_layout.setContentsMargins(0, 0, 0, 0)
        content_layout.addWidget(upload_box)
        content_layout.addWidget(share_box)
        content_layout.addWidget(self.grid, 1)

        splitter = QSplitter(Qt.Horizontal, self)
        splitter.addWidget(sidebar_panel)
        splitter.addWidget(content)
        splitter.setStretchFactor(1, 1)

        separator = QFrame(self)
        separator.setFrameShape(QFrame.HLine)

        layout = QVBoxLayout(self)
        layout.addLayout(header)
        layout.addWidget(separator)
        layout.addWidget(splitter, 1)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def selected_file(self) -> Path | None:
        return self._selected_file

    def set_selected_file(self, path: Path | str | None) -> None:
        self._selected_file = Path(path) if path else None
        self._file_label.setText(str(self._selected_file) if self._selected_file else "")

    def set_username(self, name: str | None) -> None:
        self._user_label.setText(name or "")

    def set_uploading(self, busy: bool) -> None:
        self._upload_button.setEnabled(not busy)
        self._upload_button.setText("Uploading..." if busy else "Upload")

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------
    @Slot()
    def _choose_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Select Asset File")
        if path:
            self.set_selected_file(path)

    @Slot()
    def _request_upload(self) -> None:
        self.uploadRequested.emit(self._selected_file, self.public_checkbox.isChecked())

    @Slot()
    def _request_preview(self) -> None:
        self.previewRequested.emit(self.share_input.text())

    @Slot(str)
    def _update_description(self, category: str) -> None:
        self._category_description.setText(AssetCategory(category).description)
