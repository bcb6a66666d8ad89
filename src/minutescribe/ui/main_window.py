"""Main application window"""

from typing import Optional

from PySide6.QtWidgets import (
    QMainWindow,
    QWidget,
    QHBoxLayout,
    QVBoxLayout,
    QStatusBar,
    QLabel,
    QPushButton,
    QMessageBox,
    QDialog,
)
from PySide6.QtCore import QTimer, QByteArray, Slot
from PySide6.QtGui import QFont
from loguru import logger

from ..signals import get_app_signals
from ..styles.colors import Palette
from ..core.config import get_config_manager
from ..core.document_cache import DocumentCache, get_document_cache
from ..core.models import Document
from ..core.pdf_export import PdfExporter
from ..core.session import SessionManager, get_session_manager
from ..core.upload_tracker import UploadProgressTracker
from .widgets.sidebar import SidebarWidget
from .widgets.preview_panel import PreviewPanel
from .dialogs import LoginDialog, UploadDialog, ExportDialog


class MainWindow(QMainWindow):
    """
    Main application window with Notion-style layout.

    Layout:
    - Header bar with app name, signed-in user and logout
    - Left sidebar with the minutes list
    - Right content area with the open document
    - Status bar
    """

    def __init__(
        self,
        session: Optional[SessionManager] = None,
        cache: Optional[DocumentCache] = None,
        exporter: Optional[PdfExporter] = None,
        restore_on_start: bool = True,
    ):
        super().__init__()
        self.signals = get_app_signals()
        self._config = get_config_manager()
        self._session = session or get_session_manager()
        self._cache = cache or get_document_cache()
        self._exporter = exporter or PdfExporter()
        self._tracker = UploadProgressTracker(self._session.api, parent=self)
        self._login_dialog: Optional[LoginDialog] = None

        self._setup_window()
        self._setup_ui()
        self._connect_signals()

        if restore_on_start:
            QTimer.singleShot(0, self._restore_session)

    def _setup_window(self):
        """Configure window properties"""
        self.setWindowTitle("MinuteScribe")
        self.setMinimumSize(960, 640)
        self.resize(1200, 800)

        geometry = self._config.config.last_window_geometry
        if geometry:
            self.restoreGeometry(QByteArray.fromBase64(geometry.encode("ascii")))

    def _setup_ui(self):
        """Set up the main UI layout"""
        central = QWidget()
        central.setObjectName("centralWidget")
        self.setCentralWidget(central)

        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        main_layout.addWidget(self._create_header())

        content_widget = QWidget()
        content_widget.setObjectName("contentArea")
        content_layout = QHBoxLayout(content_widget)
        content_layout.setContentsMargins(0, 0, 0, 0)
        content_layout.setSpacing(0)

        self.sidebar = SidebarWidget(self._cache)
        self.sidebar.document_selected.connect(self._on_document_selected)
        self.sidebar.upload_requested.connect(self._on_upload_clicked)
        content_layout.addWidget(self.sidebar)

        # Right content area with padding for card effect
        right_container = QWidget()
        right_container.setObjectName("contentArea")
        right_layout = QVBoxLayout(right_container)
        right_layout.setContentsMargins(12, 12, 12, 12)

        self.preview_panel = PreviewPanel(self._cache, self._exporter)
        self.preview_panel.export_requested.connect(self._on_export_requested)
        right_layout.addWidget(self.preview_panel)

        content_layout.addWidget(right_container, stretch=1)
        main_layout.addWidget(content_widget, stretch=1)

        self._setup_status_bar()

    def _create_header(self) -> QWidget:
        """Create the header bar"""
        header = QWidget()
        header.setObjectName("headerBar")
        header.setFixedHeight(56)

        layout = QHBoxLayout(header)
        layout.setContentsMargins(20, 0, 20, 0)
        layout.setSpacing(12)

        logo_label = QLabel("MinuteScribe")
        logo_label.setObjectName("logoLabel")
        logo_font = QFont()
        logo_font.setPointSize(14)
        logo_font.setWeight(QFont.Bold)
        logo_label.setFont(logo_font)
        layout.addWidget(logo_label)

        layout.addStretch()

        self.user_label = QLabel("")
        self.user_label.setStyleSheet(f"color: {Palette.TEXT_MUTED};")
        layout.addWidget(self.user_label)

        self.logout_btn = QPushButton("Log Out")
        self.logout_btn.setObjectName("iconButton")
        self.logout_btn.setVisible(False)
        self.logout_btn.clicked.connect(self._on_logout_clicked)
        layout.addWidget(self.logout_btn)

        return header

    def _setup_status_bar(self):
        """Set up the status bar"""
        status_bar = QStatusBar()
        self.setStatusBar(status_bar)

        self.status_label = QLabel("Ready")
        status_bar.addWidget(self.status_label)
        status_bar.addWidget(QWidget(), stretch=1)

        self.progress_label = QLabel("")
        status_bar.addPermanentWidget(self.progress_label)

    def _connect_signals(self):
        """Connect application signals"""
        signals = self.signals

        # Session
        signals.auth_state_changed.connect(self._on_auth_state_changed)
        signals.current_user_changed.connect(self._on_user_changed)
        signals.sign_in_required.connect(self._on_sign_in_required)

        # Documents
        signals.document_error.connect(self._on_document_error)
        signals.document_deleted.connect(self._on_document_deleted)

        # Upload
        signals.upload_progress.connect(self._on_upload_progress)
        signals.upload_succeeded.connect(self._on_upload_succeeded)
        signals.upload_failed.connect(self._on_upload_failed)

        # Export
        signals.export_finished.connect(self._on_export_finished)

    # ----- session -----

    def _restore_session(self):
        """Validate the stored token, or ask the user to sign in"""
        if self._session.restore_session():
            self._cache.fetch_all()
        else:
            self._show_login()

    def _show_login(self):
        if self._login_dialog is not None:
            return
        self._login_dialog = LoginDialog(self._session, self)
        try:
            result = self._login_dialog.exec()
        finally:
            self._login_dialog = None

        if result == QDialog.Accepted and self._session.is_authenticated:
            self._cache.fetch_all()
        elif not self._session.is_authenticated:
            logger.info("Sign-in dismissed")
            self.status_label.setText("Not signed in")

    @Slot(bool)
    def _on_auth_state_changed(self, authenticated: bool):
        self.logout_btn.setVisible(authenticated)
        self.sidebar.setEnabled(authenticated)
        if not authenticated:
            self.user_label.setText("")

    @Slot(object)
    def _on_user_changed(self, user):
        self.user_label.setText(user.name if user is not None else "")

    @Slot()
    def _on_sign_in_required(self):
        self.status_label.setText("Your session has expired. Please sign in again.")
        # Let the failing operation unwind before opening a modal dialog
        QTimer.singleShot(0, self._show_login)

    def _on_logout_clicked(self):
        self._tracker.abandon()
        if not self._session.logout():
            self.status_label.setText(self._session.error or "Logout failed")
        self._show_login()

    # ----- documents -----

    def _on_document_selected(self, document_id: str):
        self._cache.fetch_by_id(document_id)

    @Slot(str)
    def _on_document_error(self, message: str):
        self.status_label.setText(message)

    @Slot(str)
    def _on_document_deleted(self, _document_id: str):
        self.status_label.setText("Summary deleted")

    # ----- upload -----

    def _on_upload_clicked(self):
        if self._tracker.is_running():
            return
        dialog = UploadDialog(self._tracker, self)
        dialog.exec()

    @Slot(int, str)
    def _on_upload_progress(self, percent: int, label: str):
        self.progress_label.setText(f"{label} {percent}%")

    @Slot(str)
    def _on_upload_succeeded(self, document_id: str):
        self.progress_label.setText("")
        self.status_label.setText("Audio processed successfully")
        if self._cache.fetch_all():
            self._cache.fetch_by_id(document_id)

    @Slot(str)
    def _on_upload_failed(self, message: str):
        self.progress_label.setText("")
        self.status_label.setText(message)

    # ----- export -----

    @Slot(object)
    def _on_export_requested(self, document: Document):
        dialog = ExportDialog(document, self._exporter, self)
        dialog.exec()

    @Slot(str)
    def _on_export_finished(self, path: str):
        self.status_label.setText(f"Exported {path}")

    def closeEvent(self, event):
        """Handle window close"""
        if self._tracker.is_running():
            reply = QMessageBox.question(
                self,
                "Confirm Exit",
                "An upload is still being processed. Exit anyway?",
                QMessageBox.Yes | QMessageBox.No,
                QMessageBox.No,
            )
            if reply == QMessageBox.No:
                event.ignore()
                return
            self._tracker.abandon()

        self._config.config.last_window_geometry = bytes(self.saveGeometry().toBase64()).decode("ascii")
        self._config.save()
        self._session.api.close()
        event.accept()
