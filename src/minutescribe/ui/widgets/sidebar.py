"""Sidebar widget with the document list - Notion style"""

from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QLabel,
)
from PySide6.QtCore import Qt, Signal, Slot

from ...signals import get_app_signals
from ...styles.colors import Palette
from ...core.config import get_config_manager
from ...core.document_cache import DocumentCache
from ...core.models import Document, format_display_datetime


class SidebarWidget(QWidget):
    """
    Left sidebar listing the user's meeting minutes.
    Newest first by default; the sort toggle flips the display order only.
    """

    document_selected = Signal(str)  # Emits document id
    upload_requested = Signal()

    def __init__(self, cache: DocumentCache, parent=None):
        super().__init__(parent)
        self.signals = get_app_signals()
        self._cache = cache
        self._config = get_config_manager()
        self._newest_first = self._config.config.documents_newest_first
        self.setObjectName("sidebar")
        self.setMinimumWidth(240)
        self.setMaximumWidth(320)

        self._setup_ui()
        self._connect_signals()

    def _setup_ui(self):
        """Set up the sidebar UI"""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # Sidebar header section
        header = QWidget()
        header.setObjectName("sidebarHeader")
        header.setStyleSheet("""
            QWidget#sidebarHeader {
                background-color: #FFFFFF;
                border-bottom: 1px solid #E8E8E8;
            }
        """)
        header.setFixedHeight(48)
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(16, 0, 16, 0)

        title = QLabel("Meeting Minutes")
        title.setObjectName("sidebarTitle")
        title.setStyleSheet("""
            font-size: 13px;
            font-weight: 600;
            color: #37352F;
        """)
        header_layout.addWidget(title)

        header_layout.addStretch()

        self.sort_btn = QPushButton()
        self.sort_btn.setFlat(True)
        self.sort_btn.clicked.connect(self._toggle_sort)
        self._update_sort_label()
        header_layout.addWidget(self.sort_btn)

        refresh_btn = QPushButton("↻")
        refresh_btn.setFixedSize(24, 24)
        refresh_btn.setFlat(True)
        refresh_btn.setToolTip("Refresh")
        refresh_btn.clicked.connect(self._refresh)
        header_layout.addWidget(refresh_btn)

        layout.addWidget(header)

        # Search box
        search_container = QWidget()
        search_container.setStyleSheet(f"background-color: {Palette.SURFACE};")
        search_layout = QVBoxLayout(search_container)
        search_layout.setContentsMargins(12, 10, 12, 10)

        self.search_box = QLineEdit()
        self.search_box.setObjectName("searchBox")
        self.search_box.setPlaceholderText("Search minutes...")
        self.search_box.textChanged.connect(self._populate)
        search_layout.addWidget(self.search_box)

        layout.addWidget(search_container)

        self.document_list = QListWidget()
        self.document_list.setObjectName("documentList")
        self.document_list.setStyleSheet("""
            QListWidget {
                background-color: #FFFFFF;
                border: none;
                outline: none;
                font-size: 12px;
            }
            QListWidget::item {
                padding: 6px 8px;
                border-radius: 4px;
                margin: 1px 4px;
            }
            QListWidget::item:hover {
                background-color: #F7F7F5;
            }
            QListWidget::item:selected {
                background-color: #E3F2FD;
                color: #1976D2;
            }
        """)
        self.document_list.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self.document_list, stretch=1)

        self.empty_label = QLabel("No minutes yet.\nUpload a recording to get started.")
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setStyleSheet(f"color: {Palette.TEXT_FAINT}; padding: 24px;")
        layout.addWidget(self.empty_label)

        # Bottom action section
        bottom_section = QWidget()
        bottom_section.setStyleSheet("""
            background-color: #FAFAFA;
            border-top: 1px solid #E8E8E8;
        """)
        bottom_layout = QVBoxLayout(bottom_section)
        bottom_layout.setContentsMargins(12, 10, 12, 10)

        self.upload_btn = QPushButton("Upload Audio...")
        self.upload_btn.setObjectName("primaryButton")
        self.upload_btn.clicked.connect(self.upload_requested.emit)
        bottom_layout.addWidget(self.upload_btn)

        layout.addWidget(bottom_section)
        self._populate()

    def _connect_signals(self):
        """Connect to app signals"""
        self.signals.documents_changed.connect(self._on_documents_changed)
        self.signals.current_document_changed.connect(self._on_current_changed)

    @Slot(list)
    def _on_documents_changed(self, _documents: list):
        self._populate()

    @Slot(object)
    def _on_current_changed(self, document):
        self._select(document.id if document is not None else None)

    def _populate(self, *_):
        """Rebuild the list from the cache in display order"""
        query = self.search_box.text().strip().lower()
        current = self._cache.current

        self.document_list.clear()
        for document in self._cache.sorted_documents(self._newest_first):
            if query and query not in document.title.lower():
                continue
            self.document_list.addItem(self._make_item(document))

        self.empty_label.setVisible(self.document_list.count() == 0)
        self._select(current.id if current is not None else None)

    def _make_item(self, document: Document) -> QListWidgetItem:
        created = format_display_datetime(document.created_at)
        item = QListWidgetItem(f"{document.title or 'Untitled'}\n{created}")
        item.setData(Qt.UserRole, document.id)
        item.setToolTip(document.title)
        return item

    def _select(self, document_id):
        for row in range(self.document_list.count()):
            item = self.document_list.item(row)
            if item.data(Qt.UserRole) == document_id:
                self.document_list.setCurrentItem(item)
                return
        self.document_list.clearSelection()

    def _on_item_clicked(self, item: QListWidgetItem):
        document_id = item.data(Qt.UserRole)
        if document_id:
            self.document_selected.emit(document_id)

    def _toggle_sort(self):
        self._newest_first = not self._newest_first
        self._config.config.documents_newest_first = self._newest_first
        self._config.save()
        self._update_sort_label()
        self._populate()

    def _update_sort_label(self):
        self.sort_btn.setText("Newest First" if self._newest_first else "Oldest First")

    def _refresh(self):
        """Reload the list from the server"""
        self._cache.fetch_all()

    def visible_document_ids(self) -> list[str]:
        """Ids in the order they are shown"""
        return [
            self.document_list.item(row).data(Qt.UserRole)
            for row in range(self.document_list.count())
        ]
