"""Application bootstrap for the AR/VR asset catalog."""

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from .application.main_window import WINDOW_TITLE, MainWindow

__all__ = ["MainWindow", "main", "WINDOW_TITLE"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Launch the asset catalog Qt application."""

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting AR/VR asset manager")
    app = QApplication.instance()
    owns_application = False

    if app is None:
        app = QApplication(sys.argv)
        owns_application = True

    try:
        window = MainWindow()
    except Exception as exc:
        logger.error("Failed to create MainWindow: %s", exc)
        raise

    window.show()

    if owns_application:
        result = app.exec()
        logger.info("Qt event loop exited with code: %s", result)
        return result

    return 0
