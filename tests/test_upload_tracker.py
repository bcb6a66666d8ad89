import threading

import pytest

from minutescribe.core.config import AppConfig
from minutescribe.core.errors import NetworkError, SessionExpired, ValidationError
from minutescribe.core.models import AudioUpload
from minutescribe.core.session import SessionManager
from minutescribe.core.upload_tracker import UploadProgressTracker

MB = 1024 * 1024


def _fast_config() -> AppConfig:
    return AppConfig(progress_tick_ms=10, completion_delay_ms=10)


def _audio(tmp_path) -> AudioUpload:
    path = tmp_path / "standup.mp3"
    path.write_bytes(b"ID3" + b"\x00" * 1024)
    return AudioUpload.from_path(path)


def _gated(fake_api):
    """Hold process_audio until the returned event is set"""
    gate = threading.Event()
    original = fake_api.process_audio

    def process_audio(upload):
        gate.wait(5)
        return original(upload)

    fake_api.process_audio = process_audio
    return gate


def test_progress_is_monotonic_and_holds_at_ceiling(qtbot, fake_api, signals, tmp_path):
    gate = _gated(fake_api)
    tracker = UploadProgressTracker(fake_api, config=_fast_config(), signals=signals)
    seen = []
    tracker.progress_changed.connect(lambda percent, _label: seen.append(percent))

    assert tracker.start(_audio(tmp_path)) is True
    qtbot.waitUntil(lambda: tracker.percent == 95 and not tracker.is_ticking(), timeout=5000)
    assert tracker.is_running()

    with qtbot.waitSignal(tracker.succeeded, timeout=5000) as blocker:
        gate.set()

    assert blocker.args == ["new-doc"]
    assert seen == sorted(seen)
    assert seen[0] == 0
    assert seen[-1] == 100
    assert max(seen[:-1]) <= 95
    assert not tracker.is_running()


def test_success_notifies_app(qtbot, fake_api, signals, tmp_path):
    tracker = UploadProgressTracker(fake_api, config=_fast_config(), signals=signals)
    with qtbot.waitSignal(signals.upload_succeeded, timeout=5000) as blocker:
        tracker.start(_audio(tmp_path))
    assert blocker.args == ["new-doc"]
    assert fake_api.calls == ["process_audio"]


def test_failure_stops_ticking_and_reports(qtbot, fake_api, signals, tmp_path):
    fake_api.errors["process_audio"] = NetworkError("Could not reach the server")
    tracker = UploadProgressTracker(fake_api, config=_fast_config(), signals=signals)

    with qtbot.waitSignal(tracker.failed, timeout=5000) as blocker:
        tracker.start(_audio(tmp_path))

    assert blocker.args[0].startswith("Error processing audio. Please try again.")
    assert not tracker.is_ticking()
    assert not tracker.is_running()
    assert tracker.percent < 100
    assert tracker.error == blocker.args[0]


def test_rejected_file_never_starts(qapp, fake_api, signals, tmp_path):
    tracker = UploadProgressTracker(fake_api, config=_fast_config(), signals=signals)
    oversized = AudioUpload(path=tmp_path / "long.mp3", content_type="audio/mpeg", size_bytes=60 * MB, title="Long")

    with pytest.raises(ValidationError):
        tracker.start(oversized)

    assert fake_api.calls == []
    assert not tracker.is_running()
    assert not tracker.is_ticking()


def test_abandoned_upload_result_is_ignored(qtbot, fake_api, signals, tmp_path):
    gate = _gated(fake_api)
    tracker = UploadProgressTracker(fake_api, config=_fast_config(), signals=signals)
    succeeded = []
    tracker.succeeded.connect(succeeded.append)

    tracker.start(_audio(tmp_path))
    tracker.abandon()
    gate.set()

    qtbot.waitUntil(lambda: fake_api.calls == ["process_audio"], timeout=5000)
    qtbot.wait(100)
    assert succeeded == []
    assert not tracker.is_running()


def test_unauthorized_upload_signs_out_on_main_thread(qtbot, fake_api, signals, token_store, tmp_path):
    session = SessionManager(fake_api, token_store=token_store, signals=signals)
    assert session.login("ada@example.com", "secret")
    on_main_thread = []
    signals.auth_state_changed.connect(
        lambda _authenticated: on_main_thread.append(threading.current_thread() is threading.main_thread())
    )

    def process_audio(upload):
        # The transport reports a 401 from the worker thread, then raises
        fake_api.on_unauthorized()
        raise SessionExpired("Your session has expired. Please sign in again.")

    fake_api.process_audio = process_audio
    tracker = UploadProgressTracker(fake_api, config=_fast_config(), signals=signals)

    with qtbot.waitSignal(signals.sign_in_required, timeout=5000):
        tracker.start(_audio(tmp_path))
    qtbot.waitUntil(lambda: not tracker.is_running(), timeout=5000)

    assert on_main_thread == [True]
    assert not session.is_authenticated
    assert token_store.load() is None
    assert tracker.error == "Your session has expired. Please sign in again."
