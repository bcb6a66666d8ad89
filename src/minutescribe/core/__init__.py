"""Core business logic"""

from .config import AppConfig, ConfigManager, get_config_manager
from .errors import (
    ScribeError,
    ValidationError,
    NetworkError,
    NotFound,
    SessionExpired,
    ApiError,
    AuthError,
    AuthErrorKind,
    ExportError,
)
from .models import Document, DocumentPatch, UserProfile, IdentityClaim, AudioUpload, UploadPhase, ExportRequest
from .api_client import ApiClient
from .token_store import TokenStore
from .session import AuthState, SessionState, SessionManager, get_session_manager
from .document_cache import DocumentCache, get_document_cache

# Upload and export
from .upload_tracker import UploadProgressTracker
from .pdf_export import PdfExporter, default_file_base_name

__all__ = [
    "AppConfig",
    "ConfigManager",
    "get_config_manager",
    "ScribeError",
    "ValidationError",
    "NetworkError",
    "NotFound",
    "SessionExpired",
    "ApiError",
    "AuthError",
    "AuthErrorKind",
    "ExportError",
    "Document",
    "DocumentPatch",
    "UserProfile",
    "IdentityClaim",
    "AudioUpload",
    "UploadPhase",
    "ExportRequest",
    "ApiClient",
    "TokenStore",
    "AuthState",
    "SessionState",
    "SessionManager",
    "get_session_manager",
    "DocumentCache",
    "get_document_cache",
    # Upload and export
    "UploadProgressTracker",
    "PdfExporter",
    "default_file_base_name",
]
