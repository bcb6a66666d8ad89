"""Sign-in dialog with register and password reset pages"""

from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QStackedWidget,
    QWidget,
    QFormLayout,
    QInputDialog,
)
from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QFont

from ...core.config import get_config_manager
from ...core.session import SessionManager
from ...signals import get_app_signals
from ...styles.colors import Palette


class LoginDialog(QDialog):
    """Modal sign-in dialog; accepted once the session is authenticated"""

    PAGE_LOGIN = 0
    PAGE_REGISTER = 1
    PAGE_FORGOT = 2

    def __init__(self, session: SessionManager, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Sign In - MinuteScribe")
        self.setMinimumWidth(420)
        self.setModal(True)
        self.setWindowFlags(self.windowFlags() & ~Qt.WindowContextHelpButtonHint)

        self._session = session
        self._config = get_config_manager()
        self._signals = get_app_signals()

        self._setup_ui()
        self._signals.loading_changed.connect(self._on_loading_changed)

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(16)
        layout.setContentsMargins(24, 24, 24, 24)

        title = QLabel("MinuteScribe")
        title.setFont(QFont("Segoe UI", 18, QFont.DemiBold))
        title.setStyleSheet(f"color: {Palette.TEXT};")
        layout.addWidget(title)

        self.pages = QStackedWidget()
        self.pages.addWidget(self._create_login_page())
        self.pages.addWidget(self._create_register_page())
        self.pages.addWidget(self._create_forgot_page())
        layout.addWidget(self.pages)

        self.error_label = QLabel()
        self.error_label.setObjectName("errorLabel")
        self.error_label.setWordWrap(True)
        self.error_label.setVisible(False)
        layout.addWidget(self.error_label)

        self.info_label = QLabel()
        self.info_label.setObjectName("successLabel")
        self.info_label.setWordWrap(True)
        self.info_label.setVisible(False)
        layout.addWidget(self.info_label)

    def _create_login_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 0, 0, 0)

        form = QFormLayout()
        self.login_email = QLineEdit(self._config.config.last_login_email or "")
        self.login_email.setPlaceholderText("you@example.com")
        form.addRow("Email:", self.login_email)

        self.login_password = QLineEdit()
        self.login_password.setEchoMode(QLineEdit.Password)
        self.login_password.returnPressed.connect(self._on_login)
        form.addRow("Password:", self.login_password)
        layout.addLayout(form)

        self.login_btn = QPushButton("Sign In")
        self.login_btn.setObjectName("primaryButton")
        self.login_btn.setMinimumHeight(36)
        self.login_btn.clicked.connect(self._on_login)
        layout.addWidget(self.login_btn)

        self.google_btn = QPushButton("Sign in with Google...")
        self.google_btn.clicked.connect(self._on_google)
        layout.addWidget(self.google_btn)

        links = QHBoxLayout()
        register_link = QPushButton("Create an account")
        register_link.setFlat(True)
        register_link.clicked.connect(lambda: self._show_page(self.PAGE_REGISTER))
        links.addWidget(register_link)
        links.addStretch()
        forgot_link = QPushButton("Forgot password?")
        forgot_link.setFlat(True)
        forgot_link.clicked.connect(lambda: self._show_page(self.PAGE_FORGOT))
        links.addWidget(forgot_link)
        layout.addLayout(links)
        return page

    def _create_register_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 0, 0, 0)

        form = QFormLayout()
        self.register_name = QLineEdit()
        form.addRow("Name:", self.register_name)
        self.register_email = QLineEdit()
        form.addRow("Email:", self.register_email)
        self.register_password = QLineEdit()
        self.register_password.setEchoMode(QLineEdit.Password)
        form.addRow("Password:", self.register_password)
        self.register_confirm = QLineEdit()
        self.register_confirm.setEchoMode(QLineEdit.Password)
        self.register_confirm.returnPressed.connect(self._on_register)
        form.addRow("Confirm:", self.register_confirm)
        layout.addLayout(form)

        self.register_btn = QPushButton("Create Account")
        self.register_btn.setObjectName("primaryButton")
        self.register_btn.setMinimumHeight(36)
        self.register_btn.clicked.connect(self._on_register)
        layout.addWidget(self.register_btn)

        back = QPushButton("Back to sign in")
        back.setFlat(True)
        back.clicked.connect(lambda: self._show_page(self.PAGE_LOGIN))
        layout.addWidget(back, alignment=Qt.AlignLeft)
        return page

    def _create_forgot_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(0, 0, 0, 0)

        form = QFormLayout()
        self.forgot_email = QLineEdit()
        form.addRow("Email:", self.forgot_email)
        layout.addLayout(form)

        self.forgot_btn = QPushButton("Send Reset Link")
        self.forgot_btn.clicked.connect(self._on_forgot)
        layout.addWidget(self.forgot_btn)

        # Second step: the token from the reset email
        reset_form = QFormLayout()
        self.reset_token = QLineEdit()
        self.reset_token.setPlaceholderText("Code from the reset email")
        reset_form.addRow("Reset code:", self.reset_token)
        self.reset_password = QLineEdit()
        self.reset_password.setEchoMode(QLineEdit.Password)
        reset_form.addRow("New password:", self.reset_password)
        self.reset_confirm = QLineEdit()
        self.reset_confirm.setEchoMode(QLineEdit.Password)
        reset_form.addRow("Confirm:", self.reset_confirm)
        layout.addLayout(reset_form)

        self.reset_btn = QPushButton("Reset Password")
        self.reset_btn.setObjectName("primaryButton")
        self.reset_btn.clicked.connect(self._on_reset)
        layout.addWidget(self.reset_btn)

        back = QPushButton("Back to sign in")
        back.setFlat(True)
        back.clicked.connect(lambda: self._show_page(self.PAGE_LOGIN))
        layout.addWidget(back, alignment=Qt.AlignLeft)
        return page

    def _show_page(self, index: int):
        self._session.clear_error()
        self.error_label.setVisible(False)
        self.info_label.setVisible(False)
        self.pages.setCurrentIndex(index)

    def _show_result(self, ok: bool, success_text: str = ""):
        if ok:
            self.error_label.setVisible(False)
            if success_text:
                self.info_label.setText(success_text)
                self.info_label.setVisible(True)
        else:
            self.info_label.setVisible(False)
            self.error_label.setText(self._session.error or "Something went wrong")
            self.error_label.setVisible(True)

    def _finish_if_authenticated(self, ok: bool):
        self._show_result(ok)
        if ok and self._session.is_authenticated:
            self.accept()

    # ----- actions -----

    def _on_login(self):
        email = self.login_email.text().strip()
        ok = self._session.login(email, self.login_password.text())
        if ok:
            self._config.set_last_login_email(email)
        self.login_password.clear()
        self._finish_if_authenticated(ok)

    def _on_register(self):
        ok = self._session.register(
            self.register_name.text(),
            self.register_email.text(),
            self.register_password.text(),
            self.register_confirm.text(),
        )
        self._finish_if_authenticated(ok)

    def _on_google(self):
        token, accepted = QInputDialog.getText(
            self,
            "Sign in with Google",
            "Paste the Google access token:",
            QLineEdit.Password,
        )
        if not accepted or not token.strip():
            return
        self._finish_if_authenticated(self._session.third_party_login_with_token(token.strip()))

    def _on_forgot(self):
        ok = self._session.forgot_password(self.forgot_email.text())
        self._show_result(ok, "If that email is registered, a reset link is on its way.")

    def _on_reset(self):
        ok = self._session.reset_password(
            self.reset_token.text().strip(),
            self.reset_password.text(),
            self.reset_confirm.text(),
        )
        self._show_result(ok, "Password updated. You can sign in now.")
        if ok:
            self.reset_password.clear()
            self.reset_confirm.clear()

    @Slot(bool)
    def _on_loading_changed(self, loading: bool):
        for btn in (self.login_btn, self.google_btn, self.register_btn, self.forgot_btn, self.reset_btn):
            btn.setEnabled(not loading)

    def done(self, result: int):
        try:
            self._signals.loading_changed.disconnect(self._on_loading_changed)
        except (RuntimeError, TypeError):
            pass
        super().done(result)
