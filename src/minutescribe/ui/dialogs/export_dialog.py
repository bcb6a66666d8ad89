"""Export dialog - choose a file name and options for the PDF"""

from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QCheckBox,
    QFormLayout,
    QFileDialog,
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QFont

from ...core.config import get_config_manager
from ...core.errors import ExportError
from ...core.models import Document, ExportRequest
from ...core.pdf_export import PdfExporter, default_file_base_name
from ...styles.colors import Palette


class ExportDialog(QDialog):
    """Dialog for exporting the open document as a PDF"""

    def __init__(self, document: Document, exporter: PdfExporter, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Export PDF")
        self.setMinimumWidth(460)
        self.setModal(True)
        self.setWindowFlags(self.windowFlags() & ~Qt.WindowContextHelpButtonHint)

        self._document = document
        self._exporter = exporter
        self._config = get_config_manager()
        self._directory = exporter.export_directory()
        self.exported_path: Optional[Path] = None

        self._setup_ui()
        self._update_export_enabled()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setSpacing(16)
        layout.setContentsMargins(24, 24, 24, 24)

        title = QLabel("Export PDF")
        title.setFont(QFont("Segoe UI", 16, QFont.DemiBold))
        title.setStyleSheet(f"color: {Palette.TEXT};")
        layout.addWidget(title)

        form = QFormLayout()
        form.setSpacing(12)

        name_row = QHBoxLayout()
        self.name_edit = QLineEdit(default_file_base_name(self._document.title))
        self.name_edit.textChanged.connect(self._update_export_enabled)
        name_row.addWidget(self.name_edit, stretch=1)
        name_row.addWidget(QLabel(".pdf"))
        form.addRow("File name:", name_row)

        dir_row = QHBoxLayout()
        self.dir_label = QLabel(str(self._directory))
        self.dir_label.setStyleSheet(f"color: {Palette.TEXT_MUTED};")
        self.dir_label.setWordWrap(True)
        dir_row.addWidget(self.dir_label, stretch=1)
        browse_btn = QPushButton("Browse...")
        browse_btn.clicked.connect(self._on_browse)
        dir_row.addWidget(browse_btn)
        form.addRow("Save to:", dir_row)

        layout.addLayout(form)

        config = self._config.config
        self.header_check = QCheckBox("Include title header")
        self.header_check.setChecked(config.export_include_header)
        layout.addWidget(self.header_check)

        self.metadata_check = QCheckBox("Include generation date")
        self.metadata_check.setChecked(config.export_include_metadata_date)
        layout.addWidget(self.metadata_check)

        self.error_label = QLabel()
        self.error_label.setObjectName("errorLabel")
        self.error_label.setWordWrap(True)
        self.error_label.setVisible(False)
        layout.addWidget(self.error_label)

        btn_layout = QHBoxLayout()
        btn_layout.addStretch()

        self.cancel_btn = QPushButton("Cancel")
        self.cancel_btn.setMinimumWidth(100)
        self.cancel_btn.clicked.connect(self.reject)
        btn_layout.addWidget(self.cancel_btn)

        self.export_btn = QPushButton("Export")
        self.export_btn.setObjectName("primaryButton")
        self.export_btn.setMinimumWidth(100)
        self.export_btn.clicked.connect(self._on_export)
        btn_layout.addWidget(self.export_btn)

        layout.addLayout(btn_layout)

    def _update_export_enabled(self, *_):
        can_export = bool(self.name_edit.text().strip()) and not self._exporter.is_exporting()
        self.export_btn.setEnabled(can_export)

    def _on_browse(self):
        directory = QFileDialog.getExistingDirectory(self, "Export Directory", str(self._directory))
        if directory:
            self._directory = Path(directory)
            self.dir_label.setText(directory)

    def request(self) -> ExportRequest:
        """The export options as currently entered"""
        return ExportRequest(
            file_base_name=self.name_edit.text().strip(),
            include_header=self.header_check.isChecked(),
            include_metadata_date=self.metadata_check.isChecked(),
        )

    def _on_export(self):
        if not self.name_edit.text().strip() or self._exporter.is_exporting():
            return

        self.export_btn.setEnabled(False)
        self.export_btn.setText("Exporting...")
        self.error_label.setVisible(False)
        try:
            self.exported_path = self._exporter.export_document(self._document, self.request(), self._directory)
        except ExportError as e:
            self.error_label.setText(e.message)
            self.error_label.setVisible(True)
            return
        finally:
            self.export_btn.setText("Export")
            self._update_export_enabled()

        # Remember choices for next time
        config = self._config.config
        config.export_include_header = self.header_check.isChecked()
        config.export_include_metadata_date = self.metadata_check.isChecked()
        self._config.set_export_directory(str(self._directory))
        self.accept()
