"""Upload progress tracker - simulated progress for the audio ingestion call.

The server does not report progress, so while the single upload call is
outstanding a timer advances the percent by a fixed step up to a soft
ceiling. The phase label is derived from the percent alone.

The upload itself runs on a worker thread; its outcome comes back to the Qt
event loop through a queued signal, so the timer and every state change stay
on the loop thread.
"""

from __future__ import annotations

import threading
from typing import Optional

from loguru import logger
from PySide6.QtCore import QObject, QTimer, Signal, Slot

from .api_client import ApiClient
from .config import AppConfig, get_config_manager
from .errors import ScribeError, SessionExpired
from .models import AudioUpload, Document, UploadPhase, UploadProgress
from .validation import validate_audio_upload
from ..signals import AppSignals, get_app_signals


GENERIC_UPLOAD_ERROR = "Error processing audio. Please try again."


class UploadProgressTracker(QObject):
    """
    Drives one upload at a time and publishes a bounded, monotonic percent.

    Signals:
        progress_changed(percent, phase label)
        succeeded(document id)  - emitted after the short pause at 100%
        failed(message)
        finished()              - after either outcome
    """

    progress_changed = Signal(int, str)
    succeeded = Signal(str)
    failed = Signal(str)
    finished = Signal()

    # Worker thread -> event loop
    _call_succeeded = Signal(object)
    _call_failed = Signal(object)

    def __init__(
        self,
        api: ApiClient,
        config: Optional[AppConfig] = None,
        signals: Optional[AppSignals] = None,
        parent=None,
    ):
        super().__init__(parent)
        config = config or get_config_manager().config

        self._api = api
        self._signals = signals or get_app_signals()

        self.increment = config.progress_increment
        self.ceiling = config.progress_ceiling
        self.completion_delay_ms = config.completion_delay_ms
        self.max_upload_bytes = config.max_upload_bytes

        self._progress: Optional[UploadProgress] = None
        self._running = False
        self._attempt = 0
        self._worker_thread: Optional[threading.Thread] = None
        self._error: Optional[str] = None

        self._timer = QTimer(self)
        self._timer.setInterval(config.progress_tick_ms)
        self._timer.timeout.connect(self._on_tick)

        self._call_succeeded.connect(self._on_call_succeeded)
        self._call_failed.connect(self._on_call_failed)

    # ----- read-only view -----

    @property
    def percent(self) -> int:
        return self._progress.percent if self._progress else 0

    @property
    def phase(self) -> UploadPhase:
        return UploadPhase.for_percent(self.percent)

    @property
    def error(self) -> Optional[str]:
        return self._error

    def is_running(self) -> bool:
        return self._running

    def is_ticking(self) -> bool:
        return self._timer.isActive()

    # ----- control -----

    def start(self, upload: Optional[AudioUpload]) -> bool:
        """Validate the file and start uploading it.

        Raises:
            ValidationError: the file was rejected; nothing was sent and the
                tracker did not start
        """
        if self._running:
            logger.warning("Upload already in progress")
            return False

        validate_audio_upload(upload, self.max_upload_bytes)

        self._attempt += 1
        self._running = True
        self._error = None
        self._progress = UploadProgress(percent=0)

        logger.info(f"Uploading {upload.path.name} ({upload.size_mb:.2f} MB) as '{upload.title}'")
        self._signals.upload_started.emit(upload.title)
        self._signals.busy_state_changed.emit(True)
        self._publish()
        self._timer.start()

        self._worker_thread = threading.Thread(
            target=self._upload_worker,
            args=(upload, self._attempt),
            daemon=True,
        )
        self._worker_thread.start()
        return True

    def abandon(self):
        """Stop tracking; a result that arrives later is ignored"""
        if not self._running:
            return
        logger.info("Upload tracking abandoned")
        self._stop()

    def _upload_worker(self, upload: AudioUpload, attempt: int):
        """Worker thread for the ingestion call"""
        try:
            document = self._api.process_audio(upload)
        except Exception as e:
            logger.error(f"Audio processing failed: {e}")
            self._call_failed.emit((attempt, e))
            return
        self._call_succeeded.emit((attempt, document))

    # ----- event loop side -----

    def _publish(self):
        percent = self.percent
        label = UploadPhase.for_percent(percent).label
        self.progress_changed.emit(percent, label)
        self._signals.upload_progress.emit(percent, label)

    def _stop(self):
        self._timer.stop()
        self._running = False
        self._signals.busy_state_changed.emit(False)

    def _is_current(self, attempt: int) -> bool:
        return self._running and attempt == self._attempt

    @Slot()
    def _on_tick(self):
        if not self._running or self._progress is None:
            self._timer.stop()
            return
        if self._progress.percent >= self.ceiling:
            # Hold at the ceiling until the server answers
            self._timer.stop()
            return
        self._progress = UploadProgress(percent=min(self._progress.percent + self.increment, self.ceiling))
        logger.debug(f"Upload progress {self._progress.percent}%")
        self._publish()

    @Slot(object)
    def _on_call_succeeded(self, payload):
        attempt, document = payload
        if not self._is_current(attempt):
            logger.debug("Ignoring result of an abandoned upload")
            return

        self._timer.stop()
        self._progress = UploadProgress(percent=100)
        self._publish()
        logger.info(f"Audio processed, new summary {document.id}")
        QTimer.singleShot(self.completion_delay_ms, self, lambda: self._finish_success(attempt, document))

    def _finish_success(self, attempt: int, document: Document):
        if not self._is_current(attempt):
            return
        self._stop()
        self.succeeded.emit(document.id)
        self._signals.upload_succeeded.emit(document.id)
        self.finished.emit()

    @Slot(object)
    def _on_call_failed(self, payload):
        attempt, error = payload
        if not self._is_current(attempt):
            logger.debug("Ignoring failure of an abandoned upload")
            return

        # Percent stays where it was; the upload is abandoned
        self._stop()
        if isinstance(error, SessionExpired):
            message = error.message
        elif isinstance(error, ScribeError):
            message = f"{GENERIC_UPLOAD_ERROR} ({error.message})"
        else:
            message = GENERIC_UPLOAD_ERROR
        self._error = message
        self.failed.emit(message)
        self._signals.upload_failed.emit(message)
        self.finished.emit()
