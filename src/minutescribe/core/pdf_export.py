"""PDF export - turns a document's rendered content into a downloadable file.

Pipeline:
1. Derive a safe file base name from the title (the user may override it)
2. Compose the export document: optional centered title header, optional
   "Generated on <date>" line, then the rendered content
3. Rasterize each A4 page of content at 2x scale
4. Embed each page as a JPEG-compressed image into an A4 portrait PDF with
   15mm margins, and write ``<base-name>.pdf`` into the export directory
"""

from __future__ import annotations

import html
import math
import re
from pathlib import Path
from typing import Iterator, List, Optional, Union

from loguru import logger
from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QMarginsF, QRectF, Qt
from PySide6.QtGui import (
    QImage,
    QPageLayout,
    QPageSize,
    QPainter,
    QPdfWriter,
    QTextCursor,
    QTextDocument,
    QTextDocumentFragment,
)

from .config import AppConfig, get_config_manager
from .errors import ExportError
from .models import Document, ExportRequest, format_display_date
from ..signals import AppSignals, get_app_signals


FILE_SUFFIX = "_minutes"
FALLBACK_BASE_NAME = "meeting_minutes"

# A4 portrait with 15mm margins on every side
PAGE_WIDTH_MM = 210.0
PAGE_HEIGHT_MM = 297.0
PAGE_MARGIN_MM = 15.0
CONTENT_WIDTH_MM = PAGE_WIDTH_MM - 2 * PAGE_MARGIN_MM
CONTENT_HEIGHT_MM = PAGE_HEIGHT_MM - 2 * PAGE_MARGIN_MM

CSS_PX_PER_MM = 96 / 25.4
RASTER_SCALE = 2
PDF_RESOLUTION = 300

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE | re.ASCII)


def default_file_base_name(title: str) -> str:
    """File base name for a title: every character outside [a-z0-9] becomes '_',
    the result is lowercased and '_minutes' is appended.

    >>> default_file_base_name("Q3 Planning / Sync!")
    'q3_planning___sync__minutes'
    """
    return _UNSAFE_CHARS.sub("_", title).lower() + FILE_SUFFIX


def sanitize_base_name(name: str) -> str:
    """Clean a user-supplied base name: no directories, no extension, never empty"""
    name = re.split(r"[\\/]", name.strip())[-1].strip()
    if name.lower().endswith(".pdf"):
        name = name[:-4].rstrip()
    return name or FALLBACK_BASE_NAME


def default_request(title: str, config: Optional[AppConfig] = None) -> ExportRequest:
    """Export options pre-filled from the title and the configured defaults"""
    config = config or get_config_manager().config
    return ExportRequest(
        file_base_name=default_file_base_name(title),
        include_header=config.export_include_header,
        include_metadata_date=config.export_include_metadata_date,
    )


# ----- composition -----

def render_markdown(markdown: str) -> QTextDocument:
    """Render markdown into a rich-text document"""
    document = QTextDocument()
    document.setMarkdown(markdown)
    return document


def header_html(title: str) -> str:
    return (
        '<h1 align="center" style="font-size: 24px; margin-bottom: 8px;">'
        f"{html.escape(title)}</h1>"
    )


def metadata_html(created_at_display: str) -> str:
    return (
        '<p style="font-size: 14px; color: #666666; margin-bottom: 24px;">'
        f"Generated on {html.escape(created_at_display)}</p>"
    )


def compose_export_document(
    title: str,
    content: QTextDocument,
    created_at_display: str,
    include_header: bool = True,
    include_metadata_date: bool = True,
) -> QTextDocument:
    """Build the document that gets rasterized: [header] [date line] content"""
    composed = QTextDocument()
    composed.setDefaultStyleSheet("body { font-family: Helvetica, Arial, sans-serif; }")
    composed.setDocumentMargin(0)

    cursor = QTextCursor(composed)
    if include_header:
        cursor.insertHtml(header_html(title))
        cursor.insertBlock()
    if include_metadata_date and created_at_display:
        cursor.insertHtml(metadata_html(created_at_display))
        cursor.insertBlock()
    cursor.insertFragment(QTextDocumentFragment(content))
    return composed


# ----- rasterization -----

def content_width_px() -> int:
    """Layout width of the printable area, in CSS pixels"""
    return round(CONTENT_WIDTH_MM * CSS_PX_PER_MM)


def page_height_px() -> int:
    """Height of one page's printable area, in CSS pixels"""
    return round(CONTENT_HEIGHT_MM * CSS_PX_PER_MM)


def rasterize_pages(document: QTextDocument, scale: int = RASTER_SCALE) -> Iterator[QImage]:
    """Lay the document out at the printable width and paint it page by page"""
    width = content_width_px()
    height = page_height_px()
    document.setTextWidth(width)

    total_height = document.size().height()
    page_count = max(1, math.ceil(total_height / height))
    logger.debug(f"Rasterizing {page_count} page(s) at {scale}x ({width}x{height} px)")

    for index in range(page_count):
        image = QImage(width * scale, height * scale, QImage.Format_RGB32)
        if image.isNull():
            raise ExportError("Not enough memory to render the page")
        image.fill(Qt.white)

        top = index * height
        painter = QPainter(image)
        try:
            painter.setRenderHint(QPainter.Antialiasing)
            painter.setRenderHint(QPainter.TextAntialiasing)
            painter.scale(scale, scale)
            painter.translate(0, -top)
            document.drawContents(painter, QRectF(0, top, width, height))
        finally:
            painter.end()
        yield image


def compress_image(image: QImage, quality: int) -> QImage:
    """Round-trip a page through JPEG so the PDF embeds a compressed image"""
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.WriteOnly)
    if not image.save(buffer, "JPEG", quality):
        raise ExportError("Failed to encode page image")
    buffer.close()

    compressed = QImage.fromData(data, "JPEG")
    if compressed.isNull():
        raise ExportError("Failed to decode page image")
    return compressed


def write_pdf(pages: List[QImage], path: Path, title: str = ""):
    """Write one image per A4 page into ``path``"""
    writer = QPdfWriter(str(path))
    writer.setResolution(PDF_RESOLUTION)
    writer.setPageSize(QPageSize(QPageSize.A4))
    writer.setPageOrientation(QPageLayout.Portrait)
    writer.setPageMargins(
        QMarginsF(PAGE_MARGIN_MM, PAGE_MARGIN_MM, PAGE_MARGIN_MM, PAGE_MARGIN_MM),
        QPageLayout.Millimeter,
    )
    writer.setTitle(title)
    writer.setCreator("MinuteScribe")

    painter = QPainter()
    if not painter.begin(writer):
        raise ExportError(f"Could not open {path} for writing")
    try:
        # Painter origin is the top-left of the printable area
        target = QRectF(0, 0, writer.width(), writer.height())
        for index, page in enumerate(pages):
            if index > 0:
                writer.newPage()
            painter.drawImage(target, page)
    finally:
        painter.end()


# ----- pipeline -----

class PdfExporter:
    """
    Runs the export pipeline for one document at a time.

    A second export while one is in flight is refused. Failures surface as
    ExportError to the caller and never touch document state.
    """

    def __init__(self, config: Optional[AppConfig] = None, signals: Optional[AppSignals] = None):
        self._config = config
        self._signals = signals or get_app_signals()
        self._exporting = False

    @property
    def config(self) -> AppConfig:
        return self._config or get_config_manager().config

    def is_exporting(self) -> bool:
        return self._exporting

    def export_directory(self) -> Path:
        if self.config.export_directory:
            return Path(self.config.export_directory)
        return get_config_manager().get_export_directory()

    def export(
        self,
        title: str,
        content: Union[QTextDocument, str],
        created_at_display: str,
        request: ExportRequest,
        directory: Optional[Path] = None,
    ) -> Path:
        """Export rendered content to ``<directory>/<base-name>.pdf``.

        Args:
            title: document title (used for the header)
            content: rendered content, or markdown to render
            created_at_display: creation date as shown to the user
            request: file name and header/metadata options
            directory: target directory (configured export directory if None)

        Returns:
            Path to the written PDF

        Raises:
            ExportError: export already running, or rendering/writing failed
        """
        if self._exporting:
            raise ExportError("An export is already in progress")

        self._exporting = True
        file_name = f"{sanitize_base_name(request.file_base_name)}.pdf"
        target_dir = Path(directory) if directory is not None else self.export_directory()
        path = target_dir / file_name
        self._signals.export_started.emit(file_name)
        logger.info(f"Exporting '{title}' to {path}")

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            rendered = render_markdown(content) if isinstance(content, str) else content
            composed = compose_export_document(
                title,
                rendered,
                created_at_display,
                include_header=request.include_header,
                include_metadata_date=request.include_metadata_date,
            )
            quality = self.config.export_image_quality
            pages = [compress_image(page, quality) for page in rasterize_pages(composed)]
            write_pdf(pages, path, title)
            if not path.exists():
                raise ExportError(f"PDF was not written to {path}")
        except ExportError as e:
            self._report_failure(e.message)
            raise
        except Exception as e:
            logger.exception("Unexpected error while exporting")
            self._report_failure(str(e) or type(e).__name__)
            raise ExportError(f"Error exporting PDF: {e}") from e
        finally:
            self._exporting = False

        logger.info(f"Exported {len(pages)} page(s) to {path}")
        self._signals.export_finished.emit(str(path))
        return path

    def _report_failure(self, reason: str):
        message = f"Error exporting PDF: {reason}"
        logger.error(message)
        self._signals.export_failed.emit(message)

    def export_document(
        self,
        document: Document,
        request: Optional[ExportRequest] = None,
        directory: Optional[Path] = None,
    ) -> Path:
        """Export a document's effective content with its title and creation date"""
        request = request or default_request(document.title, self.config)
        return self.export(
            document.title,
            render_markdown(document.effective_content),
            format_display_date(document.created_at),
            request,
            directory,
        )
