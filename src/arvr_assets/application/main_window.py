"""Main Qt window for the AR/VR asset catalog."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from PySide6.QtCore import QCoreApplication, QStandardPaths, Slot
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QMainWindow, QMessageBox, QStackedWidget, QWidget

from ..api.client import CatalogClient, Session
from ..api.downloads import save_download
from ..catalog.models import Asset, AssetCategory, UploadOutcome
from ..catalog.share_link import ShareLinkRequest, ShareLinkResolver
from ..errors import AssetClientError, ValidationFailure
from ..ui.catalog_page import CatalogPage
from ..ui.login_panel import Credentials, LoginPanel
from .catalog_manager import CatalogManager, Notice
from .session import APPLICATION_NAME, ORGANIZATION_NAME, SessionStore
from .workers import TaskRunner

__all__ = ["MainWindow", "NOTICE_TIMEOUT_MS", "WINDOW_TITLE"]

logger = logging.getLogger(__name__)

WINDOW_TITLE = "AR/VR Asset Manager"

NOTICE_TIMEOUT_MS = 4000
"""How long a notice stays in the status bar."""

DELETE_CONFIRMATION = "Are you sure you want to delete this asset?"


class MainWindow(QMainWindow):
    """Route between the sign-in page and the catalog, and run all requests.

    Every network operation is submitted to the task runner; the completion
    handlers run on the UI thread and are the only places that change the
    catalog state.
    """

    def __init__(
        self,
        *,
        client: CatalogClient | None = None,
        session_store: SessionStore | None = None,
        runner: Any | None = None,
        download_dir: Path | str | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle(WINDOW_TITLE)
        self.resize(1200, 820)

        QCoreApplication.setOrganizationName(ORGANIZATION_NAME)
        QCoreApplication.setApplicationName(APPLICATION_NAME)

        self._manager = CatalogManager(
            session_store=session_store or SessionStore(),
            notifier=self._show_notice,
        )
        session = self._manager.session
        self._client = client or CatalogClient()
        if session is not None:
            self._client.token = session.token
        self._resolver = ShareLinkResolver(self._client)
        self._runner = runner or TaskRunner(self)
        self._download_dir = Path(download_dir) if download_dir else None
        self._username: str | None = None
        self._generation = 0
        self._last_notice: Notice | None = None

        self._login_panel = LoginPanel(self)
        self._login_panel.loginRequested.connect(self._login)
        self._login_panel.signupRequested.connect(self._signup)

        self._catalog_page = CatalogPage(
            self._manager.grid_state,
            self._resolver.preview_state,
            self,
        )
        self._catalog_page.shared_card.set_fetch(self._client.fetch_payload)
        self._catalog_page.sidebar.categorySelected.connect(self._select_category)
        self._catalog_page.uploadRequested.connect(self._upload)
        self._catalog_page.previewRequested.connect(self._preview_shared_link)
        self._catalog_page.logoutRequested.connect(self._logout)
        self._catalog_page.grid.downloadRequested.connect(self._download)
        self._catalog_page.grid.deleteRequested.connect(self._delete)
        self._catalog_page.shared_card.downloadRequested.connect(self._download)
        self._catalog_page.shared_card.copyLinkRequested.connect(self._copy_link)

        self._pages = QStackedWidget(self)
        self._pages.addWidget(self._login_panel)
        self._pages.addWidget(self._catalog_page)
        self.setCentralWidget(self._pages)
        self.statusBar()

        self._catalog_page.sidebar.select(self._manager.active_category)
        self._route()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def manager(self) -> CatalogManager:
        return self._manager

    @property
    def client(self) -> CatalogClient:
        return self._client

    @property
    def resolver(self) -> ShareLinkResolver:
        return self._resolver

    @property
    def login_panel(self) -> LoginPanel:
        return self._login_panel

    @property
    def catalog_page(self) -> CatalogPage:
        return self._catalog_page

    @property
    def last_notice(self) -> Notice | None:
        return self._last_notice

    def current_page(self) -> QWidget:
        return self._pages.currentWidget()

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------
    def _route(self) -> None:
        if self._manager.is_authenticated:
            self._pages.setCurrentWidget(self._catalog_page)
            self._catalog_page.set_username(self._username)
            self.refresh_assets()
        else:
            self._pages.setCurrentWidget(self._login_panel)

    def refresh_assets(self) -> None:
        """Reload the catalog listing from the service."""

        self._runner.submit(
            self._client.list_assets,
            on_result=self._for_session(self._handle_listing),
            on_error=self._for_session(self._handle_listing_error),
        )

    def _for_session(self, handler: Callable[[Any], None]) -> Callable[[Any], None]:
        """Wrap *handler* so it is skipped once the current session has ended."""

        generation = self._generation

        def deliver(value: Any) -> None:
            if generation != self._generation:
                logger.debug("Dropping completion from an ended session")
                return
            handler(value)

        return deliver

    def _refresh_grid(self) -> None:
        self._catalog_page.grid.set_assets(
            self._manager.assets,
            category=self._manager.active_category,
            can_delete=self._manager.can_delete,
            share_url=self._client.share_url,
            fetch=self._client.fetch_payload,
        )

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    @Slot(object)
    def _login(self, credentials: Credentials) -> None:
        self._login_panel.set_busy(True)
        self._runner.submit(
            self._client.login,
            credentials.username,
            credentials.password,
            on_result=lambda session: self._handle_login(credentials, session),
            on_error=lambda error: self._handle_auth_error("Error logging in", error),
        )

    def _handle_login(self, credentials: Credentials, session: Session) -> None:
        self._login_panel.set_busy(False)
        self._login_panel.clear_password()
        self._username = credentials.username
        self._manager.sign_in(session)
        self._route()

    @Slot(object)
    def _signup(self, credentials: Credentials) -> None:
        self._login_panel.set_busy(True)
        self._runner.submit(
            self._client.signup,
            credentials.username,
            credentials.password,
            credentials.email,
            on_result=self._handle_signup,
            on_error=lambda error: self._handle_auth_error("Error signing up", error),
        )

    def _handle_signup(self, message: str) -> None:
        self._login_panel.set_busy(False)
        self._login_panel.set_signup_mode(False)
        self._manager.notify("success", message)

    def _handle_auth_error(self, default: str, error: BaseException) -> None:
        self._login_panel.set_busy(False)
        self._manager.notify("error", _message_for(error, default))

    @Slot()
    def _logout(self) -> None:
        self._generation += 1
        self._manager.sign_out()
        self._client.token = None
        self._username = None
        self._resolver.clear()
        self._catalog_page.shared_card.show_asset(None)
        self._catalog_page.share_input.clear()
        self._catalog_page.set_uploading(False)
        self._catalog_page.set_selected_file(None)
        self._refresh_grid()
        self._route()

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def _handle_listing(self, assets: list[Asset]) -> None:
        self._manager.apply_listing(assets)
        self._refresh_grid()

    def _handle_listing_error(self, error: BaseException) -> None:
        logger.warning("Error fetching assets: %s", error)
        self._manager.notify("error", "Error fetching assets")

    @Slot(str)
    def _select_category(self, category: str) -> None:
        self._manager.select_category(AssetCategory(category))
        self._refresh_grid()

    @Slot(object, bool)
    def _upload(self, path: Path | None, is_public: bool) -> None:
        if path is None:
            self._manager.notify("error", "Please choose a file to upload")
            return
        self._catalog_page.set_uploading(True)
        self._runner.submit(
            self._client.upload_asset,
            path,
            category=self._manager.active_category.value,
            is_public=is_public,
            on_result=self._for_session(self._handle_upload),
            on_error=self._for_session(self._handle_upload_error),
        )

    def _handle_upload(self, outcome: UploadOutcome) -> None:
        self._catalog_page.set_uploading(False)
        self._catalog_page.set_selected_file(None)
        if self._manager.apply_upload(outcome) is not None:
            self._refresh_grid()

    def _handle_upload_error(self, error: BaseException) -> None:
        self._catalog_page.set_uploading(False)
        self._catalog_page.set_selected_file(None)
        self._report("Error uploading file", error)

    @Slot(str)
    def _delete(self, asset_id: str) -> None:
        if not self._manager.request_delete(asset_id, self._confirm_delete):
            return
        self._runner.submit(
            self._client.delete_asset,
            asset_id,
            on_result=self._for_session(lambda _result: self._handle_delete(asset_id)),
            on_error=self._for_session(lambda error: self._report("Error deleting asset", error)),
        )

    def _confirm_delete(self, asset: Asset | None) -> bool:
        answer = QMessageBox.question(
            self,
            "Delete Asset",
            DELETE_CONFIRMATION,
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        return answer == QMessageBox.Yes

    def _handle_delete(self, asset_id: str) -> None:
        self._manager.apply_delete(asset_id)
        self._refresh_grid()

    # ------------------------------------------------------------------
    # Shared links
    # ------------------------------------------------------------------
    @Slot(str)
    def _preview_shared_link(self, text: str) -> None:
        try:
            request = self._resolver.begin(text)
        except ValidationFailure as exc:
            self._manager.notify("error", exc.message)
            return
        self._runner.submit(
            self._client.resolve_public_asset,
            request.token,
            on_result=lambda asset: self._handle_shared_asset(request, asset),
            on_error=lambda error: self._handle_shared_error(request, error),
        )

    def _handle_shared_asset(self, request: ShareLinkRequest, asset: Asset) -> None:
        if self._resolver.complete(request, asset):
            self._catalog_page.shared_card.show_asset(asset, self._client.share_url(asset))

    def _handle_shared_error(self, request: ShareLinkRequest, error: BaseException) -> None:
        message = self._resolver.fail(request, error)
        if message is not None:
            self._manager.notify("error", message)

    @Slot(str)
    def _copy_link(self, url: str) -> None:
        QGuiApplication.clipboard().setText(url)
        self._manager.notify("success", "Link copied to clipboard")

    # ------------------------------------------------------------------
    # Downloads
    # ------------------------------------------------------------------
    def download_directory(self) -> Path:
        if self._download_dir is not None:
            return self._download_dir
        location = QStandardPaths.writableLocation(QStandardPaths.DownloadLocation)
        return Path(location) if location else Path.home()

    @Slot(str)
    def _download(self, asset_id: str) -> None:
        self._runner.submit(
            self._save_download,
            asset_id,
            self.download_directory(),
            on_result=self._handle_download,
            on_error=self._handle_download_error,
        )

    def _save_download(self, asset_id: str, directory: Path) -> Path | None:
        descriptor = self._client.download_asset(asset_id)
        return save_download(descriptor, directory)

    def _handle_download(self, path: Path | None) -> None:
        if path is not None:
            self._manager.notify("success", f"Saved {path.name} to {path.parent}")

    def _handle_download_error(self, error: BaseException) -> None:
        logger.warning("Download error: %s", error)
        self._manager.notify("error", "Failed to download file")

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------
    def _report(self, prefix: str, error: BaseException) -> None:
        if isinstance(error, ValidationFailure):
            self._manager.notify("error", error.message)
        else:
            self._manager.report_failure(prefix, error)

    def _show_notice(self, notice: Notice) -> None:
        self._last_notice = notice
        self.statusBar().showMessage(notice.text, NOTICE_TIMEOUT_MS)


def _message_for(error: BaseException, default: str) -> str:
    if isinstance(error, AssetClientError) and error.message and error.message != error.default_message:
        return error.message
    return default
