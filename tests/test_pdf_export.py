from datetime import datetime, timezone

import pytest

from minutescribe.core.config import AppConfig
from minutescribe.core.errors import ExportError
from minutescribe.core.models import Document, ExportRequest
from minutescribe.core.pdf_export import (
    PdfExporter,
    compose_export_document,
    content_width_px,
    default_file_base_name,
    rasterize_pages,
    render_markdown,
    sanitize_base_name,
)


def _document(**fields) -> Document:
    return Document(
        _id="a",
        title=fields.pop("title", "Q3 Planning"),
        createdAt=datetime(2025, 3, 5, 14, 7, tzinfo=timezone.utc),
        summary=fields.pop("summary", "# Decisions\n\n- Ship it"),
        **fields,
    )


def test_default_file_base_name():
    assert default_file_base_name("Q3 Planning / Sync!") == "q3_planning___sync__minutes"
    assert default_file_base_name("Café") == "caf__minutes"
    assert default_file_base_name("") == "_minutes"


def test_sanitize_base_name():
    assert sanitize_base_name("report") == "report"
    assert sanitize_base_name("../secret/report.pdf") == "report"
    assert sanitize_base_name("C:\\Users\\me\\notes") == "notes"
    assert sanitize_base_name("   ") == "meeting_minutes"


def test_compose_includes_header_and_date(qapp):
    composed = compose_export_document("Q3 Planning", render_markdown("Body text"), "March 5, 2025")
    text = composed.toPlainText()
    assert "Q3 Planning" in text
    assert "Generated on March 5, 2025" in text
    assert "Body text" in text


def test_compose_without_header_or_date(qapp):
    composed = compose_export_document(
        "Q3 Planning",
        render_markdown("Body text"),
        "March 5, 2025",
        include_header=False,
        include_metadata_date=False,
    )
    text = composed.toPlainText()
    assert "Q3 Planning" not in text
    assert "Generated on" not in text


def test_long_content_spans_several_pages(qapp):
    markdown = "\n\n".join(f"Paragraph {i} of the meeting discussion." for i in range(400))
    pages = list(rasterize_pages(render_markdown(markdown)))
    assert len(pages) > 1
    assert pages[0].width() == content_width_px() * 2


def test_export_writes_pdf(qapp, signals, tmp_path):
    exporter = PdfExporter(config=AppConfig(), signals=signals)
    finished = []
    signals.export_finished.connect(finished.append)

    path = exporter.export_document(_document(), directory=tmp_path)

    assert path == tmp_path / "q3_planning_minutes.pdf"
    assert path.read_bytes().startswith(b"%PDF")
    assert finished == [str(path)]
    assert not exporter.is_exporting()


def test_export_uses_edited_summary_and_custom_name(qapp, signals, tmp_path):
    exporter = PdfExporter(config=AppConfig(), signals=signals)
    request = ExportRequest(file_base_name="../elsewhere/board.pdf", include_header=False)

    path = exporter.export_document(_document(editedSummary="Edited"), request, directory=tmp_path)

    assert path == tmp_path / "board.pdf"
    assert path.exists()


def test_second_export_while_running_is_refused(qapp, signals, tmp_path):
    exporter = PdfExporter(config=AppConfig(), signals=signals)
    refused = []

    def export_again(_file_name):
        try:
            exporter.export("Other", "text", "", ExportRequest(file_base_name="other"), tmp_path)
        except ExportError as e:
            refused.append(e.message)

    signals.export_started.connect(export_again)
    path = exporter.export_document(_document(), directory=tmp_path)

    assert refused == ["An export is already in progress"]
    assert path.exists()
    assert not (tmp_path / "other.pdf").exists()


def test_failed_write_reports_error(qapp, signals, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file")
    exporter = PdfExporter(config=AppConfig(), signals=signals)
    failures = []
    signals.export_failed.connect(failures.append)

    with pytest.raises(ExportError):
        exporter.export_document(_document(), directory=blocker)

    assert failures
    assert failures[0].startswith("Error exporting PDF: ")
    assert not exporter.is_exporting()


def test_unexpected_failure_is_reported_as_export_error(qapp, signals, tmp_path, monkeypatch):
    def broken_write(pages, path, title):
        raise ValueError("page size mismatch")

    monkeypatch.setattr("minutescribe.core.pdf_export.write_pdf", broken_write)
    exporter = PdfExporter(config=AppConfig(), signals=signals)
    failures = []
    signals.export_failed.connect(failures.append)

    with pytest.raises(ExportError) as excinfo:
        exporter.export_document(_document(), directory=tmp_path)

    assert failures == ["Error exporting PDF: page size mismatch"]
    assert excinfo.value.message == "Error exporting PDF: page size mismatch"
    assert not exporter.is_exporting()
