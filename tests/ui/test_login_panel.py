from __future__ import annotations

import pytest

pytest.importorskip("PySide6.QtWidgets", exc_type=ImportError)

from arvr_assets.ui.login_panel import Credentials, LoginPanel


def _fill(panel: LoginPanel, username: str, password: str, email: str = "") -> None:
    panel._username_input.setText(username)
    panel._password_input.setText(password)
    panel._email_input.setText(email)


def test_login_mode_emits_credentials_without_email(qapp) -> None:
    panel = LoginPanel()
    emitted: list[Credentials] = []
    panel.loginRequested.connect(emitted.append)
    _fill(panel, " sam ", "pw", "ignored@example.test")

    panel.submit()

    assert emitted == [Credentials("sam", "pw", "")]
    assert panel._email_input.isHidden()

    panel.deleteLater()


def test_signup_mode_includes_email(qapp) -> None:
    panel = LoginPanel()
    emitted: list[Credentials] = []
    panel.signupRequested.connect(emitted.append)
    panel.toggle_mode()
    _fill(panel, "sam", "pw", "sam@example.test")

    panel.submit()

    assert panel.signup_mode
    assert emitted == [Credentials("sam", "pw", "sam@example.test")]
    assert panel._submit_button.text() == "Sign Up"

    panel.deleteLater()


def test_busy_panel_ignores_submissions(qapp) -> None:
    panel = LoginPanel()
    emitted: list[Credentials] = []
    panel.loginRequested.connect(emitted.append)

    panel.set_busy(True)
    panel.submit()

    assert emitted == []
    assert panel._submit_button.text() == "Logging In..."
    assert not panel._submit_button.isEnabled()

    panel.deleteLater()
