"""Shared fixtures for the MinuteScribe test suite"""

import os
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from minutescribe.core.config import ConfigManager  # noqa: E402
from minutescribe.core.errors import NotFound  # noqa: E402
from minutescribe.core.models import Document, DocumentPatch, UserProfile  # noqa: E402
from minutescribe.core.token_store import TokenStore  # noqa: E402
from minutescribe.signals import AppSignals  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config dir at a temp directory and reload config per test"""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("MINUTESCRIBE_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("MINUTESCRIBE_API_URL", raising=False)
    ConfigManager.reset()
    yield config_dir
    ConfigManager.reset()


@pytest.fixture
def signals(qapp):
    """A private signal hub so tests don't see each other's emissions"""
    return AppSignals()


@pytest.fixture
def token_store(tmp_path):
    return TokenStore(tmp_path / "session.json")


def make_document(document_id: str, title: str = "Weekly Sync", day: int = 1, **fields) -> Document:
    return Document(
        _id=document_id,
        title=title,
        createdAt=datetime(2025, 3, day, 14, 7, tzinfo=timezone.utc),
        transcription=fields.pop("transcription", "hello everyone"),
        summary=fields.pop("summary", "# Minutes\n\n- item"),
        **fields,
    )


class FakeApi:
    """
    In-memory stand-in for ApiClient.

    Each route can be given an exception to raise, and ``before_return`` hooks
    run just before a response is handed back (used to interleave calls).
    """

    def __init__(self):
        self.calls: List[str] = []
        self.token_provider: Optional[Callable[[], Optional[str]]] = None
        self.on_unauthorized: Optional[Callable[[], None]] = None

        self.user = UserProfile(_id="u1", name="Ada", email="ada@example.com")
        self.token = "tok-123"
        self.documents: Dict[str, Document] = {}
        self.errors: Dict[str, Exception] = {}
        self.before_return: Dict[str, Callable[[], None]] = {}

    # transport wiring
    def set_token_provider(self, provider):
        self.token_provider = provider

    def set_on_unauthorized(self, hook):
        self.on_unauthorized = hook

    def close(self):
        pass

    def _route(self, name: str):
        self.calls.append(name)
        error = self.errors.get(name)
        if error is not None:
            raise error

    def _hook(self, name: str):
        hook = self.before_return.pop(name, None)
        if hook is not None:
            hook()

    # auth
    def login(self, email, password):
        self._route("login")
        return self.token

    def register(self, name, email, password):
        self._route("register")
        return self.token

    def google_login(self, google_id, email, name):
        self._route("google_login")
        return self.token

    def logout(self):
        self._route("logout")

    def get_current_user(self):
        self._route("get_current_user")
        return self.user

    def forgot_password(self, email):
        self._route("forgot_password")

    def reset_password(self, reset_token, password):
        self._route("reset_password")

    # summaries
    def list_summaries(self):
        self._route("list_summaries")
        result = list(self.documents.values())
        self._hook("list_summaries")
        return result

    def get_summary(self, document_id):
        self._route("get_summary")
        if document_id not in self.documents:
            raise NotFound("Summary not found")
        result = self.documents[document_id]
        self._hook("get_summary")
        return result

    def update_summary(self, document_id, patch: DocumentPatch):
        self._route("update_summary")
        current = self.documents[document_id]
        updated = current.model_copy(update=patch.model_dump(exclude_none=True))
        self.documents[document_id] = updated
        self._hook("update_summary")
        return updated

    def delete_summary(self, document_id):
        self._route("delete_summary")
        self.documents.pop(document_id, None)

    # audio
    def process_audio(self, upload):
        self._route("process_audio")
        document = make_document("new-doc", title=upload.title)
        self.documents[document.id] = document
        return document


@pytest.fixture
def fake_api():
    return FakeApi()
