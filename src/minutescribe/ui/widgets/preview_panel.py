"""Document panel with tabs for editing, previewing and the raw transcription"""

from typing import Optional

from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QTabWidget,
    QTextBrowser,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QApplication,
    QMessageBox,
)
from PySide6.QtCore import Qt, QTimer, Signal, Slot
from PySide6.QtGui import QFont

from ...signals import get_app_signals
from ...styles.colors import Palette
from ...core.document_cache import DocumentCache
from ...core.models import Document, DocumentPatch, format_display_date
from ...core.pdf_export import PdfExporter


class PreviewPanel(QWidget):
    """
    Panel for the open document.
    Tabs: markdown editor, rendered preview, original transcription.
    Save and export report their outcome on separate lines, so a finished
    export never replaces an unread save error.
    """

    export_requested = Signal(object)  # Document

    MESSAGE_TIMEOUT_MS = 5000

    def __init__(self, cache: DocumentCache, exporter: PdfExporter, parent=None):
        super().__init__(parent)
        self.signals = get_app_signals()
        self.setObjectName("previewPanel")

        self._cache = cache
        self._exporter = exporter
        self._document: Optional[Document] = None
        self._saving = False

        self._setup_ui()
        self._message_timer = self._hide_timer(self.message_label)
        self._export_timer = self._hide_timer(self.export_label)
        self._connect_signals()
        self.show_document(None)

    def _setup_ui(self):
        """Set up the panel UI"""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # Header (styled as card header)
        header_widget = QWidget()
        header_widget.setObjectName("previewPanelHeader")
        header_widget.setFixedHeight(56)

        header = QHBoxLayout(header_widget)
        header.setContentsMargins(20, 0, 20, 0)
        header.setSpacing(8)

        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("Meeting title")
        title_font = QFont()
        title_font.setPointSize(12)
        title_font.setWeight(QFont.DemiBold)
        self.title_edit.setFont(title_font)
        header.addWidget(self.title_edit, stretch=1)

        self.save_btn = QPushButton("Save")
        self.save_btn.setObjectName("primaryButton")
        self.save_btn.clicked.connect(self._on_save)
        header.addWidget(self.save_btn)

        self.copy_btn = QPushButton("Copy")
        self.copy_btn.setToolTip("Copy markdown to clipboard")
        self.copy_btn.clicked.connect(self._on_copy)
        header.addWidget(self.copy_btn)

        self.export_btn = QPushButton("Export PDF")
        self.export_btn.clicked.connect(self._on_export)
        header.addWidget(self.export_btn)

        self.delete_btn = QPushButton("Delete")
        self.delete_btn.clicked.connect(self._on_delete)
        header.addWidget(self.delete_btn)

        layout.addWidget(header_widget)

        self.created_label = QLabel()
        self.created_label.setStyleSheet(f"color: {Palette.TEXT_MUTED}; padding: 0 20px 8px 20px;")
        layout.addWidget(self.created_label)

        self.message_label = QLabel()
        self.message_label.setWordWrap(True)
        self.message_label.setVisible(False)
        layout.addWidget(self.message_label)

        self.export_label = QLabel()
        self.export_label.setWordWrap(True)
        self.export_label.setVisible(False)
        layout.addWidget(self.export_label)

        # Tab widget
        self.tabs = QTabWidget()
        self.tabs.setObjectName("previewTabs")
        self.tabs.setDocumentMode(True)

        self.editor = QPlainTextEdit()
        self.editor.setPlaceholderText("Meeting minutes (markdown)")
        self.editor.textChanged.connect(self._on_editor_changed)
        self.tabs.addTab(self.editor, "Meeting Minutes")

        self.preview_view = QTextBrowser()
        self.preview_view.setOpenExternalLinks(True)
        self.tabs.addTab(self.preview_view, "Preview")

        self.transcript_view = QTextBrowser()
        self.transcript_view.setOpenExternalLinks(False)
        self.tabs.addTab(self.transcript_view, "Original Transcription")

        layout.addWidget(self.tabs)

        self.placeholder = QLabel("Select a meeting from the list, or upload a recording.")
        self.placeholder.setAlignment(Qt.AlignCenter)
        self.placeholder.setStyleSheet(f"color: {Palette.TEXT_FAINT};")
        layout.addWidget(self.placeholder, stretch=1)

    def _connect_signals(self):
        """Connect to app signals"""
        self.signals.current_document_changed.connect(self.show_document)
        self.signals.export_started.connect(self._on_export_started)
        self.signals.export_finished.connect(self._on_export_finished)
        self.signals.export_failed.connect(self._on_export_failed)

    @Slot(object)
    def show_document(self, document: Optional[Document]):
        """Load a document (or nothing) into the panel"""
        self._document = document
        has_document = document is not None

        for widget in (self.title_edit, self.save_btn, self.copy_btn, self.export_btn, self.delete_btn):
            widget.setEnabled(has_document)
        self.tabs.setVisible(has_document)
        self.created_label.setVisible(has_document)
        self.placeholder.setVisible(not has_document)

        if not has_document:
            self.title_edit.clear()
            self.editor.blockSignals(True)
            self.editor.clear()
            self.editor.blockSignals(False)
            self.preview_view.clear()
            self.transcript_view.clear()
            return

        self.title_edit.setText(document.title)
        self.created_label.setText(f"Generated on {format_display_date(document.created_at)}")
        self.editor.setPlainText(document.effective_content)
        self.preview_view.setMarkdown(document.effective_content)
        self.transcript_view.setPlainText(document.transcription)

    def _on_editor_changed(self):
        self.preview_view.setMarkdown(self.editor.toPlainText())

    def _hide_timer(self, label: QLabel) -> QTimer:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: label.setVisible(False))
        return timer

    def _flash(self, label: QLabel, timer: QTimer, text: str, error: bool):
        label.setObjectName("errorLabel" if error else "successLabel")
        # Re-polish so the object-name selector applies
        label.style().unpolish(label)
        label.style().polish(label)
        label.setText(text)
        label.setVisible(True)
        timer.start(self.MESSAGE_TIMEOUT_MS)

    def _show_message(self, text: str, error: bool = False):
        """Outcome of save, copy or delete"""
        self._flash(self.message_label, self._message_timer, text, error)

    def _show_export_message(self, text: str, error: bool = False):
        self._flash(self.export_label, self._export_timer, text, error)

    # ----- actions -----

    def _on_save(self):
        if self._document is None or self._saving:
            return
        title = self.title_edit.text()
        if not title.strip():
            self._show_message("Please enter a title", error=True)
            return

        self._saving = True
        self.save_btn.setEnabled(False)
        self.save_btn.setText("Saving...")
        try:
            updated = self._cache.update(
                self._document.id,
                DocumentPatch(title=title.strip(), edited_summary=self.editor.toPlainText()),
            )
        finally:
            self._saving = False
            self.save_btn.setText("Save")
            self.save_btn.setEnabled(self._document is not None)

        if updated is not None:
            self._show_message("Summary saved successfully")
        else:
            self._show_message(f"Error saving summary: {self._cache.error or 'unknown error'}", error=True)

    def _on_copy(self):
        QApplication.clipboard().setText(self.editor.toPlainText())
        self._show_message("Markdown copied to clipboard")

    def _on_export(self):
        if self._document is not None and not self._exporter.is_exporting():
            self.export_requested.emit(self._document)

    def _on_delete(self):
        if self._document is None:
            return
        answer = QMessageBox.question(
            self,
            "Delete Minutes",
            f"Delete \"{self._document.title}\"? This cannot be undone.",
        )
        if answer != QMessageBox.Yes:
            return
        if not self._cache.delete_by_id(self._document.id):
            self._show_message(f"Error deleting summary: {self._cache.error or 'unknown error'}", error=True)

    @Slot(str)
    def _on_export_started(self, _file_name: str):
        self.export_btn.setEnabled(False)
        self.export_btn.setText("Exporting...")

    @Slot(str)
    def _on_export_finished(self, path: str):
        self.export_btn.setText("Export PDF")
        self.export_btn.setEnabled(self._document is not None)
        self._show_export_message(f"PDF exported to {path}")

    @Slot(str)
    def _on_export_failed(self, message: str):
        self.export_btn.setText("Export PDF")
        self.export_btn.setEnabled(self._document is not None)
        self._show_export_message(message, error=True)
