from minutescribe.core.document_cache import DocumentCache
from minutescribe.core.errors import NetworkError
from minutescribe.core.models import DocumentPatch

from conftest import make_document


def _cache(fake_api, signals, *documents):
    for document in documents:
        fake_api.documents[document.id] = document
    return DocumentCache(fake_api, signals=signals)


def test_fetch_all_replaces_list(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"), make_document("b"))
    published = []
    signals.documents_changed.connect(published.append)

    assert cache.fetch_all() is True
    assert [d.id for d in cache.documents] == ["a", "b"]
    assert len(published) == 1


def test_fetch_all_failure_keeps_previous_list(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"))
    cache.fetch_all()
    fake_api.errors["list_summaries"] = NetworkError("down")

    assert cache.fetch_all() is False
    assert [d.id for d in cache.documents] == ["a"]
    assert cache.error == "Failed to fetch summaries"


def test_sorted_documents_by_creation(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("old", day=1), make_document("new", day=9))
    cache.fetch_all()
    assert [d.id for d in cache.sorted_documents()] == ["new", "old"]
    assert [d.id for d in cache.sorted_documents(newest_first=False)] == ["old", "new"]
    assert [d.id for d in cache.documents] == ["old", "new"]


def test_fetch_by_id_sets_current(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"))
    document = cache.fetch_by_id("a")
    assert cache.current is document


def test_fetch_missing_document(fake_api, signals):
    cache = _cache(fake_api, signals)
    assert cache.fetch_by_id("nope") is None
    assert cache.error == "Summary not found"
    assert cache.current is None


def test_update_keeps_list_and_current_identical(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"), make_document("b"))
    cache.fetch_all()
    cache.fetch_by_id("a")

    updated = cache.update("a", DocumentPatch(title="Renamed", edited_summary="## Edited"))

    assert updated is not None
    assert cache.current is updated
    assert cache.get("a") is updated
    assert cache.current.effective_content == "## Edited"


def test_update_with_blank_title_is_rejected_locally(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"))
    assert cache.update("a", DocumentPatch(title="  ")) is None
    assert "update_summary" not in fake_api.calls


def test_update_failure_leaves_state(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"))
    cache.fetch_all()
    before = cache.get("a")
    fake_api.errors["update_summary"] = NetworkError("down")

    assert cache.update("a", DocumentPatch(title="New")) is None
    assert cache.get("a") is before
    assert cache.error == "Failed to update summary"


def test_delete_removes_entry_and_current(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"), make_document("b"))
    cache.fetch_all()
    cache.fetch_by_id("a")
    deleted = []
    signals.document_deleted.connect(deleted.append)

    assert cache.delete_by_id("a") is True
    assert [d.id for d in cache.documents] == ["b"]
    assert cache.current is None
    assert deleted == ["a"]


def test_delete_failure_keeps_entry(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"))
    cache.fetch_all()
    fake_api.errors["delete_summary"] = NetworkError("down")

    assert cache.delete_by_id("a") is False
    assert [d.id for d in cache.documents] == ["a"]
    assert cache.error == "Failed to delete summary"


def test_stale_list_response_is_dropped(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"))
    first_doc = fake_api.documents["a"]

    def newer_fetch_overtakes():
        # A second list call is issued and answers while the first is in flight
        fake_api.documents["b"] = make_document("b")
        assert cache.fetch_all() is True

    fake_api.before_return["list_summaries"] = newer_fetch_overtakes

    assert cache.fetch_all() is False
    assert [d.id for d in cache.documents] == ["a", "b"]
    assert cache.get("a") is first_doc


def test_stale_fetch_by_id_cannot_overwrite_update(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"))
    cache.fetch_all()

    def update_lands_first():
        cache.update("a", DocumentPatch(title="Newer"))

    fake_api.before_return["get_summary"] = update_lands_first

    assert cache.fetch_by_id("a") is None
    assert cache.get("a").title == "Newer"


def test_sign_out_clears_cache(fake_api, signals):
    cache = _cache(fake_api, signals, make_document("a"))
    cache.fetch_all()
    cache.fetch_by_id("a")

    signals.auth_state_changed.emit(False)

    assert cache.documents == []
    assert cache.current is None
