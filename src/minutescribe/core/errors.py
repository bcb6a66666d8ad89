"""Error types raised by the client core"""

from enum import Enum
from typing import Optional


class ScribeError(Exception):
    """Base class for all client-side errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(ScribeError):
    """Input rejected locally, before any network call"""


class NetworkError(ScribeError):
    """Transport failure or timeout"""


class SessionExpired(ScribeError):
    """The remote service answered 401 Unauthorized"""

    def __init__(self, message: str, server_message: Optional[str] = None):
        super().__init__(message)
        self.server_message = server_message


class NotFound(ScribeError):
    """The requested resource does not exist on the server"""


class ExportError(ScribeError):
    """Rendering or writing an export file failed"""


class ApiError(ScribeError):
    """Any other non-2xx response from the remote service"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthErrorKind(str, Enum):
    """Reasons an authentication operation can fail"""
    INVALID_CREDENTIALS = "invalid_credentials"
    VALIDATION_FAILED = "validation_failed"  # e.g. duplicate email
    NETWORK_FAILURE = "network_failure"
    THIRD_PARTY_EXCHANGE_FAILED = "third_party_exchange_failed"


class AuthError(ScribeError):
    """Credentials rejected, registration conflict, or identity exchange failure"""

    def __init__(self, message: str, kind: AuthErrorKind = AuthErrorKind.INVALID_CREDENTIALS):
        super().__init__(message)
        self.kind = kind
