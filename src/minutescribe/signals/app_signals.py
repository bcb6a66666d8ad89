"""Application-wide signals for cross-component communication"""

from PySide6.QtCore import QObject, Signal


class AppSignals(QObject):
    """
    Singleton class containing all application-wide signals.
    Use get_app_signals() to access the instance.
    """

    _instance = None

    # ===== Session signals =====
    auth_state_changed = Signal(bool)     # is_authenticated
    current_user_changed = Signal(object)  # UserProfile or None
    sign_in_required = Signal()           # forced sign-out, show the login entry point
    auth_error = Signal(str)              # human-readable message ("" when dismissed)
    loading_changed = Signal(bool)

    # ===== Document signals =====
    documents_changed = Signal(list)            # list[Document], arrival order
    current_document_changed = Signal(object)   # Document or None
    document_error = Signal(str)
    document_deleted = Signal(str)              # document id
    documents_loading_changed = Signal(bool)

    # ===== Upload signals =====
    upload_started = Signal(str)          # title
    upload_progress = Signal(int, str)    # (percent, phase label)
    upload_succeeded = Signal(str)        # new document id
    upload_failed = Signal(str)           # error message

    # ===== Export signals =====
    export_started = Signal(str)          # file name
    export_finished = Signal(str)         # path to written file
    export_failed = Signal(str)           # error message

    # ===== UI signals =====
    busy_state_changed = Signal(bool)

    def __init__(self):
        # Only initialize once
        if not hasattr(self, '_initialized'):
            super().__init__()
            self._initialized = True


# Module-level singleton instance
_app_signals_instance: AppSignals | None = None


def get_app_signals() -> AppSignals:
    """Get the singleton AppSignals instance"""
    global _app_signals_instance
    if _app_signals_instance is None:
        _app_signals_instance = AppSignals()
    return _app_signals_instance
