"""In-memory cache of the user's documents.

Keeps the arrival-ordered document list and the single "open" document
consistent across fetch/update/delete calls against the remote service.
The server is the system of record: local state only changes after the
server confirmed a call, and only ever with the server's representation.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from loguru import logger

from .api_client import ApiClient
from .errors import NotFound, ScribeError, ValidationError
from .models import Document, DocumentPatch
from .validation import validate_title
from ..signals import AppSignals, get_app_signals


LIST_KEY = "*"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(document: Document) -> datetime:
    created = document.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


class DocumentCache:
    """
    Owns the document list and the currently open document.

    Every call takes a sequence number for its key (the document id, or
    LIST_KEY for the whole list). When a response arrives for a call that is no
    longer the latest issued for its key, it is dropped instead of applied, so
    an older response can never overwrite newer state.
    """

    def __init__(self, api: ApiClient, signals: Optional[AppSignals] = None):
        self._api = api
        self._signals = signals or get_app_signals()

        self._documents: List[Document] = []
        self._current: Optional[Document] = None
        self._loading = False
        self._error: Optional[str] = None

        self._sequence = 0
        self._latest: Dict[str, int] = {}
        self._lock = threading.Lock()

        # A signed-out user must not keep seeing the previous user's documents
        self._signals.auth_state_changed.connect(self._on_auth_state_changed)

    # ----- read-only view -----

    @property
    def documents(self) -> List[Document]:
        """Documents in the order the server returned them"""
        return list(self._documents)

    @property
    def current(self) -> Optional[Document]:
        return self._current

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    def get(self, document_id: str) -> Optional[Document]:
        """Cached list entry for an id, if any"""
        for document in self._documents:
            if document.id == document_id:
                return document
        return None

    def sorted_documents(self, newest_first: bool = True) -> List[Document]:
        """Documents in display order (by creation time); the stored order is untouched"""
        return sorted(self._documents, key=_sort_key, reverse=newest_first)

    # ----- request sequencing -----

    def _issue(self, key: str) -> int:
        with self._lock:
            self._sequence += 1
            self._latest[key] = self._sequence
            return self._sequence

    def _is_latest(self, key: str, sequence: int) -> bool:
        with self._lock:
            return self._latest.get(key) == sequence

    def _is_stale(self, key: str, sequence: int, action: str) -> bool:
        if self._is_latest(key, sequence):
            return False
        logger.warning(f"Dropping stale {action} response for {key} (request #{sequence})")
        return True

    # ----- state setters -----

    def _set_loading(self, loading: bool):
        if self._loading != loading:
            self._loading = loading
            self._signals.documents_loading_changed.emit(loading)

    def _set_error(self, message: Optional[str]):
        self._error = message
        self._signals.document_error.emit(message or "")

    def clear_error(self):
        if self._error is not None:
            self._set_error(None)

    def _publish_documents(self):
        self._signals.documents_changed.emit(list(self._documents))

    def set_current(self, document: Optional[Document]):
        """Open a document (or close the open one) without a server call"""
        self._current = document
        self._signals.current_document_changed.emit(document)

    def clear(self):
        """Forget everything (used on sign-out)"""
        with self._lock:
            self._latest.clear()
        self._documents = []
        self._error = None
        self._publish_documents()
        if self._current is not None:
            self.set_current(None)

    def _on_auth_state_changed(self, authenticated: bool):
        if not authenticated:
            self.clear()

    # ----- operations -----

    def fetch_all(self) -> bool:
        """Replace the list with the server's current list; the open document is untouched"""
        sequence = self._issue(LIST_KEY)
        self._set_loading(True)
        try:
            documents = self._api.list_summaries()
        except ScribeError as e:
            if not self._is_stale(LIST_KEY, sequence, "list"):
                logger.error(f"Failed to fetch summaries: {e}")
                self._set_error("Failed to fetch summaries")
            return False
        finally:
            self._set_loading(False)

        if self._is_stale(LIST_KEY, sequence, "list"):
            return False

        self._documents = documents
        self._error = None
        logger.info(f"Fetched {len(documents)} summaries")
        self._publish_documents()
        return True

    def fetch_by_id(self, document_id: str) -> Optional[Document]:
        """Open a document using the server's version of it"""
        sequence = self._issue(document_id)
        self._set_loading(True)
        try:
            document = self._api.get_summary(document_id)
        except ScribeError as e:
            if not self._is_stale(document_id, sequence, "fetch"):
                logger.error(f"Failed to fetch summary {document_id}: {e}")
                self._set_error("Summary not found" if isinstance(e, NotFound) else "Failed to fetch summary")
            return None
        finally:
            self._set_loading(False)

        if self._is_stale(document_id, sequence, "fetch"):
            return None

        self._error = None
        self.set_current(document)
        return document

    def update(self, document_id: str, patch: DocumentPatch) -> Optional[Document]:
        """Save changes; on success the list entry and the open document become the same object"""
        if patch.title is not None:
            try:
                validate_title(patch.title)
            except ValidationError as e:
                self._set_error(e.message)
                return None

        sequence = self._issue(document_id)
        self._set_loading(True)
        try:
            updated = self._api.update_summary(document_id, patch)
        except ScribeError as e:
            if not self._is_stale(document_id, sequence, "update"):
                logger.error(f"Failed to update summary {document_id}: {e}")
                self._set_error("Failed to update summary")
            return None
        finally:
            self._set_loading(False)

        if self._is_stale(document_id, sequence, "update"):
            return None

        self._documents = [updated if d.id == document_id else d for d in self._documents]
        self._error = None
        logger.info(f"Updated summary {document_id}")
        self._publish_documents()
        if self._current is not None and self._current.id == document_id:
            self.set_current(updated)
        return updated

    def delete_by_id(self, document_id: str) -> bool:
        """Delete on the server first; local state changes only once that succeeded"""
        sequence = self._issue(document_id)
        self._set_loading(True)
        try:
            self._api.delete_summary(document_id)
        except ScribeError as e:
            if not self._is_stale(document_id, sequence, "delete"):
                logger.error(f"Failed to delete summary {document_id}: {e}")
                self._set_error("Failed to delete summary")
            return False
        finally:
            self._set_loading(False)

        # A confirmed delete always applies; anything still in flight for this id is now stale
        self._issue(document_id)
        self._documents = [d for d in self._documents if d.id != document_id]
        self._error = None
        logger.info(f"Deleted summary {document_id}")
        self._publish_documents()
        if self._current is not None and self._current.id == document_id:
            self.set_current(None)
        self._signals.document_deleted.emit(document_id)
        return True


_document_cache_instance: Optional[DocumentCache] = None


def get_document_cache() -> DocumentCache:
    """Get the singleton document cache, sharing the session's transport"""
    global _document_cache_instance
    if _document_cache_instance is None:
        from .session import get_session_manager
        _document_cache_instance = DocumentCache(get_session_manager().api)
    return _document_cache_instance
