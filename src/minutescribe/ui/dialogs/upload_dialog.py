"""Upload dialog - pick an audio file and follow its processing."""

from pathlib import Path
from typing import Optional

from loguru import logger
from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QProgressBar,
    QFrame,
    QFileDialog,
)
from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QFont

from ...core.errors import ValidationError
from ...core.models import AudioUpload
from ...core.upload_tracker import UploadProgressTracker
from ...styles.colors import Palette

AUDIO_FILE_FILTER = "Audio Files (*.mp3 *.wav *.m4a *.aac *.ogg *.oga *.flac *.webm *.weba);;All Files (*)"


class UploadDialog(QDialog):
    """Dialog for uploading a recording and showing its progress."""

    def __init__(self, tracker: UploadProgressTracker, parent=None):
        super().__init__(parent)

        self._tracker = tracker
        self._upload: Optional[AudioUpload] = None
        self._document_id: str = ""

        self.setWindowTitle("Upload Audio")
        self.setFixedWidth(480)
        self.setWindowFlags(self.windowFlags() & ~Qt.WindowContextHelpButtonHint)

        self._setup_ui()
        self._apply_styles()
        self._connect_signals()

    @property
    def document_id(self) -> str:
        """Id of the summary created by a successful upload"""
        return self._document_id

    def _setup_ui(self):
        """Setup the dialog UI."""
        layout = QVBoxLayout(self)
        layout.setSpacing(16)
        layout.setContentsMargins(24, 24, 24, 24)

        self._title = QLabel("Upload a Recording")
        title_font = QFont()
        title_font.setPointSize(14)
        title_font.setBold(True)
        self._title.setFont(title_font)
        layout.addWidget(self._title)

        # File picker row
        file_row = QHBoxLayout()
        self._file_label = QLabel("No file selected")
        self._file_label.setStyleSheet(f"color: {Palette.TEXT_MUTED};")
        self._file_label.setWordWrap(True)
        file_row.addWidget(self._file_label, stretch=1)

        self._browse_btn = QPushButton("Choose File...")
        self._browse_btn.clicked.connect(self._on_browse)
        file_row.addWidget(self._browse_btn)
        layout.addLayout(file_row)

        title_label = QLabel("Meeting title")
        layout.addWidget(title_label)
        self._title_edit = QLineEdit()
        self._title_edit.setPlaceholderText("Defaults to the file name")
        layout.addWidget(self._title_edit)

        # Progress container
        self._progress_container = QFrame()
        self._progress_container.setVisible(False)
        progress_layout = QVBoxLayout(self._progress_container)
        progress_layout.setContentsMargins(16, 16, 16, 16)
        progress_layout.setSpacing(12)

        self._progress_bar = QProgressBar()
        self._progress_bar.setMinimum(0)
        self._progress_bar.setMaximum(100)
        self._progress_bar.setValue(0)
        self._progress_bar.setTextVisible(True)
        self._progress_bar.setFormat("%p%")
        progress_layout.addWidget(self._progress_bar)

        self._status_label = QLabel("")
        self._status_label.setStyleSheet(f"color: {Palette.TEXT_MUTED};")
        self._status_label.setWordWrap(True)
        progress_layout.addWidget(self._status_label)

        layout.addWidget(self._progress_container)

        self._error_label = QLabel()
        self._error_label.setObjectName("errorLabel")
        self._error_label.setWordWrap(True)
        self._error_label.setVisible(False)
        layout.addWidget(self._error_label)

        # Buttons
        layout.addSpacing(8)
        button_layout = QHBoxLayout()
        button_layout.setSpacing(12)
        button_layout.addStretch()

        self._close_btn = QPushButton("Cancel")
        self._close_btn.setFixedWidth(100)
        self._close_btn.clicked.connect(self.reject)
        button_layout.addWidget(self._close_btn)

        self._upload_btn = QPushButton("Upload")
        self._upload_btn.setObjectName("primaryButton")
        self._upload_btn.setFixedWidth(100)
        self._upload_btn.setEnabled(False)
        self._upload_btn.clicked.connect(self._on_upload)
        button_layout.addWidget(self._upload_btn)

        layout.addLayout(button_layout)

    def _apply_styles(self):
        """Apply styles to the dialog."""
        self.setStyleSheet(f"""
            QDialog {{
                background-color: {Palette.SURFACE};
            }}
            QFrame {{
                background-color: {Palette.SURFACE_MUTED};
                border-radius: 8px;
            }}
            QProgressBar {{
                border: none;
                border-radius: 4px;
                background-color: {Palette.OUTLINE};
                height: 8px;
                text-align: center;
            }}
            QProgressBar::chunk {{
                border-radius: 4px;
                background-color: {Palette.ACCENT};
            }}
        """)

    def _connect_signals(self):
        """Connect to tracker signals."""
        self._tracker.progress_changed.connect(self._on_progress)
        self._tracker.succeeded.connect(self._on_succeeded)
        self._tracker.failed.connect(self._on_failed)

    def select_file(self, path: Path):
        """Select a file to upload (also used by the file picker)"""
        try:
            self._upload = AudioUpload.from_path(path)
        except OSError as e:
            logger.warning(f"Cannot read {path}: {e}")
            self._upload = None
            self._show_error(f"Cannot read file: {e}")
            return

        self._error_label.setVisible(False)
        self._file_label.setText(f"{self._upload.path.name} ({self._upload.size_mb:.1f} MB)")
        self._title_edit.setText(self._upload.title)
        self._upload_btn.setEnabled(True)

    def _on_browse(self):
        path, _ = QFileDialog.getOpenFileName(self, "Select Recording", str(Path.home()), AUDIO_FILE_FILTER)
        if path:
            self.select_file(Path(path))

    def _on_upload(self):
        if self._upload is None:
            self._show_error("Please select an audio file")
            return

        upload = self._upload.model_copy(update={"title": self._title_edit.text().strip()})
        try:
            self._tracker.start(upload)
        except ValidationError as e:
            self._show_error(e.message)
            return

        self._error_label.setVisible(False)
        self._title.setText("Processing Recording...")
        self._progress_container.setVisible(True)
        self._set_inputs_enabled(False)

    def _set_inputs_enabled(self, enabled: bool):
        self._browse_btn.setEnabled(enabled)
        self._title_edit.setEnabled(enabled)
        self._upload_btn.setEnabled(enabled and self._upload is not None)
        self._close_btn.setEnabled(enabled)

    def _show_error(self, message: str):
        self._error_label.setText(message)
        self._error_label.setVisible(True)

    @Slot(int, str)
    def _on_progress(self, percent: int, label: str):
        self._progress_bar.setValue(percent)
        self._status_label.setText(label)

    @Slot(str)
    def _on_succeeded(self, document_id: str):
        self._document_id = document_id
        self._disconnect()
        self.accept()

    @Slot(str)
    def _on_failed(self, message: str):
        self._title.setText("Upload Failed")
        self._show_error(message)
        self._set_inputs_enabled(True)
        self._upload_btn.setText("Retry")

    def _disconnect(self):
        try:
            self._tracker.progress_changed.disconnect(self._on_progress)
            self._tracker.succeeded.disconnect(self._on_succeeded)
            self._tracker.failed.disconnect(self._on_failed)
        except (RuntimeError, TypeError):
            pass

    def reject(self):
        """Refuse to close while the upload is still running"""
        if self._tracker.is_running():
            return
        self._disconnect()
        super().reject()
