"""Sign-in and sign-up page shown while no session is stored."""

from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import (
    QFormLayout,
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

__all__ = ["Credentials", "LoginPanel"]


@dataclass(frozen=True, slots=True)
class Credentials:
    """Values entered on the sign-in page."""

    username: str
    password: str
    email: str = ""


class LoginPanel(QWidget):
    """Collect credentials and emit them for the selected mode.

    The panel never talks to the network itself; the main window submits the
    request and calls :meth:`set_busy` while it is in flight.
    """

    loginRequested = Signal(object)
    signupRequested = Signal(object)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("loginPanel")
        self._signup_mode = False
        self._busy = False

        card = QFrame(self)
        card.setFrameShape(QFrame.StyledPanel)
        card.setMaximumWidth(420)

        self._heading = QLabel(card)
        self._heading.setObjectName("loginHeading")
        self._heading.setAlignment(Qt.AlignCenter)

        self._email_input = QLineEdit(card)
        self._email_input.setPlaceholderText("Email Address")
        self._username_input = QLineEdit(card)
        self._username_input.setPlaceholderText("Username")
        self._password_input = QLineEdit(card)
        self._password_input.setPlaceholderText("Password")
        self._password_input.setEchoMode(QLineEdit.Password)
        self._password_input.returnPressed.connect(self.submit)

        self._email_label = QLabel("Email:", card)
        form = QFormLayout()
        form.addRow(self._email_label, self._email_input)
        form.addRow(QLabel("Username:", card), self._username_input)
        form.addRow(QLabel("Password:", card), self._password_input)

        self._submit_button = QPushButton(card)
        self._submit_button.setObjectName("submitButton")
        self._submit_button.setDefault(True)
        self._submit_button.clicked.connect(self.submit)
        self._switch_button = QPushButton(card)
        self._switch_button.setObjectName("switchModeButton")
        self._switch_button.clicked.connect(self.toggle_mode)

        buttons = QHBoxLayout()
        buttons.addWidget(self._submit_button)
        buttons.addWidget(self._switch_button)

        card_layout = QVBoxLayout(card)
        card_layout.addWidget(self._heading)
        card_layout.addLayout(form)
        card_layout.addLayout(buttons)

        layout = QVBoxLayout(self)
        layout.addStretch(1)
        layout.addWidget(card, 0, Qt.AlignHCenter)
        layout.addStretch(2)

        self._refresh()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def signup_mode(self) -> bool:
        return self._signup_mode

    @property
    def username(self) -> str:
        return self._username_input.text().strip()

    def credentials(self) -> Credentials:
        return Credentials(
            username=self._username_input.text().strip(),
            password=self._password_input.text(),
            email=self._email_input.text().strip() if self._signup_mode else "",
        )

    @Slot()
    def toggle_mode(self) -> None:
        self._signup_mode = not self._signup_mode
        self._refresh()

    def set_signup_mode(self, enabled: bool) -> None:
        self._signup_mode = bool(enabled)
        self._refresh()

    def set_busy(self, busy: bool) -> None:
        self._busy = bool(busy)
        self._refresh()

    def clear_password(self) -> None:
        self._password_input.clear()

    @Slot()
    def submit(self) -> None:
        if self._busy:
            return
        credentials = self.credentials()
        if self._signup_mode:
            self.signupRequested.emit(credentials)
        else:
            self.loginRequested.emit(credentials)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _refresh(self) -> None:
        signup = self._signup_mode
        self._heading.setText(
            "<h2>Create Your Account</h2>" if signup else "<h2>Welcome Back</h2>"
        )
        self._email_label.setVisible(signup)
        self._email_input.setVisible(signup)
        if self._busy:
            self._submit_button.setText("Signing Up..." if signup else "Logging In...")
        else:
            self._submit_button.setText("Sign Up" if signup else "Log In")
        self._submit_button.setEnabled(not self._busy)
        self._switch_button.setText("Switch to Login" if signup else "Switch to Signup")
