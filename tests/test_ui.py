from minutescribe.core.errors import NetworkError
from minutescribe.core.document_cache import DocumentCache
from minutescribe.core.pdf_export import PdfExporter
from minutescribe.core.session import SessionManager
from minutescribe.signals import get_app_signals
from minutescribe.ui.dialogs import ExportDialog, LoginDialog
from minutescribe.ui.widgets import PreviewPanel, SidebarWidget

from conftest import make_document


def test_sidebar_lists_newest_first_and_toggles(qtbot, fake_api):
    fake_api.documents = {d.id: d for d in (make_document("old", day=1), make_document("new", day=9))}
    cache = DocumentCache(fake_api, signals=get_app_signals())
    sidebar = SidebarWidget(cache)
    qtbot.addWidget(sidebar)

    cache.fetch_all()
    assert sidebar.visible_document_ids() == ["new", "old"]

    sidebar.sort_btn.click()
    assert sidebar.visible_document_ids() == ["old", "new"]


def test_sidebar_search_filters_titles(qtbot, fake_api):
    fake_api.documents = {
        "a": make_document("a", title="Budget review"),
        "b": make_document("b", title="Standup"),
    }
    cache = DocumentCache(fake_api, signals=get_app_signals())
    sidebar = SidebarWidget(cache)
    qtbot.addWidget(sidebar)
    cache.fetch_all()

    sidebar.search_box.setText("budget")
    assert sidebar.visible_document_ids() == ["a"]


def test_preview_panel_saves_edits(qtbot, fake_api):
    fake_api.documents = {"a": make_document("a")}
    cache = DocumentCache(fake_api, signals=get_app_signals())
    panel = PreviewPanel(cache, PdfExporter())
    qtbot.addWidget(panel)
    cache.fetch_all()
    cache.fetch_by_id("a")

    assert panel.title_edit.text() == "Weekly Sync"
    panel.editor.setPlainText("## Edited minutes")
    panel.save_btn.click()

    assert cache.current.edited_summary == "## Edited minutes"
    assert panel.message_label.text() == "Summary saved successfully"


def test_finished_export_keeps_save_error_visible(qtbot, fake_api):
    fake_api.documents = {"a": make_document("a")}
    cache = DocumentCache(fake_api, signals=get_app_signals())
    panel = PreviewPanel(cache, PdfExporter())
    qtbot.addWidget(panel)
    cache.fetch_all()
    cache.fetch_by_id("a")

    fake_api.errors["update_summary"] = NetworkError("Could not reach the server")
    panel.save_btn.click()
    get_app_signals().export_finished.emit("/tmp/weekly_sync_minutes.pdf")

    assert panel.message_label.text() == "Error saving summary: Failed to update summary"
    assert not panel.message_label.isHidden()
    assert panel.export_label.text() == "PDF exported to /tmp/weekly_sync_minutes.pdf"
    assert not panel.export_label.isHidden()
    assert panel.export_btn.isEnabled()


def test_export_dialog_prefills_name_and_requires_one(qtbot):
    dialog = ExportDialog(make_document("a", title="Q3 Planning / Sync!"), PdfExporter())
    qtbot.addWidget(dialog)

    assert dialog.name_edit.text() == "q3_planning___sync__minutes"
    assert dialog.export_btn.isEnabled()

    dialog.name_edit.setText("   ")
    assert not dialog.export_btn.isEnabled()


def test_login_dialog_shows_validation_error(qtbot, fake_api, token_store, signals):
    session = SessionManager(fake_api, token_store=token_store, signals=signals)
    dialog = LoginDialog(session)
    qtbot.addWidget(dialog)

    dialog.login_email.setText("nobody")
    dialog.login_password.setText("secret")
    dialog.login_btn.click()

    assert dialog.error_label.text() == "Please enter a valid email address"
    assert fake_api.calls == []
