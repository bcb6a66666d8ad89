"""Authentication session management for MinuteScribe.

The SessionManager is the single owner of session state: the token, the
signed-in profile, and the persisted copy of the token. Every other component
reads the token through it, and the transport's 401 hook routes back into it.
A 401 reported from a worker thread is queued back to the event loop thread
before any state changes.

State machine:
    UNKNOWN -> VALIDATING -> AUTHENTICATED | ANONYMOUS
    AUTHENTICATED -> ANONYMOUS   (logout, or any 401)
    ANONYMOUS -> AUTHENTICATED   (login, register, third-party login)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from loguru import logger
from PySide6.QtCore import QObject, Signal, Slot

from .api_client import ApiClient
from .config import get_config_manager
from .errors import (
    ApiError,
    AuthError,
    AuthErrorKind,
    NetworkError,
    ScribeError,
    SessionExpired,
    ValidationError,
)
from .identity import GoogleIdentityProvider, IdentityProvider
from .models import IdentityClaim, UserProfile
from .token_store import TokenStore
from .validation import validate_email, validate_login, validate_password, validate_registration
from ..signals import AppSignals, get_app_signals


class AuthState(Enum):
    """Authentication state"""
    UNKNOWN = "unknown"
    VALIDATING = "validating"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass
class SessionState:
    """Snapshot of the authentication session"""
    state: AuthState = AuthState.UNKNOWN
    token: Optional[str] = None
    current_user: Optional[UserProfile] = None
    loading: bool = False
    error: Optional[str] = None
    error_kind: Optional[AuthErrorKind] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED and self.token is not None


class _UnauthorizedRelay(QObject):
    """Runs the 401 handler on the thread that owns the session"""

    reported = Signal()

    def __init__(self, handler: Callable[[], None]):
        super().__init__()
        self._handler = handler
        self.reported.connect(self._on_reported)

    @Slot()
    def _on_reported(self):
        self._handler()


class SessionManager:
    """Owns authentication state and the persisted session token"""

    def __init__(
        self,
        api: ApiClient,
        token_store: Optional[TokenStore] = None,
        identity_provider: Optional[IdentityProvider] = None,
        signals: Optional[AppSignals] = None,
    ):
        self._api = api
        self._store = token_store or TokenStore()
        self._identity_provider = identity_provider
        self._signals = signals or get_app_signals()
        self._state = SessionState()

        # The transport reads the token from here and reports 401s back here
        self._api.set_token_provider(self._get_token)
        # Emitting is a direct call on the loop thread and a queued one elsewhere
        self._unauthorized_relay = _UnauthorizedRelay(self.handle_unauthorized)
        self._api.set_on_unauthorized(self._unauthorized_relay.reported.emit)

    # ----- read-only view -----

    @property
    def state(self) -> AuthState:
        return self._state.state

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def current_user(self) -> Optional[UserProfile]:
        return self._state.current_user

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def error_kind(self) -> Optional[AuthErrorKind]:
        return self._state.error_kind

    @property
    def api(self) -> ApiClient:
        return self._api

    def _get_token(self) -> Optional[str]:
        return self._state.token

    # ----- state transitions -----

    def _set_loading(self, loading: bool):
        if self._state.loading != loading:
            self._state.loading = loading
            self._signals.loading_changed.emit(loading)

    def _set_error(self, message: Optional[str], kind: Optional[AuthErrorKind] = None):
        self._state.error = message
        self._state.error_kind = kind if message else None
        self._signals.auth_error.emit(message or "")

    def clear_error(self):
        """Dismiss the current error message"""
        if self._state.error is not None:
            self._set_error(None)

    def _set_authenticated(self, token: str, user: UserProfile):
        was_authenticated = self.is_authenticated
        self._state.token = token
        self._state.current_user = user
        self._state.state = AuthState.AUTHENTICATED
        self._signals.current_user_changed.emit(user)
        if not was_authenticated:
            self._signals.auth_state_changed.emit(True)

    def _set_anonymous(self):
        was_authenticated = self.is_authenticated
        had_user = self._state.current_user is not None
        self._state.token = None
        self._state.current_user = None
        self._state.state = AuthState.ANONYMOUS
        if had_user:
            self._signals.current_user_changed.emit(None)
        if was_authenticated:
            self._signals.auth_state_changed.emit(False)

    def _discard_session(self):
        """Forget the token everywhere and fall back to ANONYMOUS"""
        self._store.clear()
        self._set_anonymous()

    # ----- operations -----

    def restore_session(self) -> bool:
        """Rehydrate and validate the persisted token (called once at start-up).

        Returns:
            True if the session was restored
        """
        token = self._store.load()
        if not token:
            logger.info("No saved session, starting anonymous")
            self._set_anonymous()
            return False

        self._state.token = token
        self._state.state = AuthState.VALIDATING
        self._set_loading(True)
        try:
            user = self._api.get_current_user()
        except ScribeError as e:
            logger.warning(f"Saved session is no longer valid: {e}")
            self._discard_session()
            return False
        finally:
            self._set_loading(False)

        self._set_authenticated(token, user)
        logger.info(f"Restored session for {user.email}")
        return True

    def login(self, email: str, password: str) -> bool:
        """Sign in with email and password"""
        try:
            validate_login(email, password)
        except ValidationError as e:
            self._set_error(e.message, AuthErrorKind.VALIDATION_FAILED)
            return False

        return self._authenticate(
            lambda: self._api.login(email.strip(), password),
            action="Login",
            rejected_kind=AuthErrorKind.INVALID_CREDENTIALS,
        )

    def register(self, name: str, email: str, password: str, confirm_password: Optional[str] = None) -> bool:
        """Create an account and sign in with it"""
        try:
            validate_registration(name, email, password, confirm_password)
        except ValidationError as e:
            self._set_error(e.message, AuthErrorKind.VALIDATION_FAILED)
            return False

        return self._authenticate(
            lambda: self._api.register(name.strip(), email.strip(), password),
            action="Registration",
            rejected_kind=AuthErrorKind.VALIDATION_FAILED,
        )

    def third_party_login(self, claim: IdentityClaim) -> bool:
        """Sign in with a profile vouched for by a third-party identity provider"""
        return self._authenticate(
            lambda: self._api.google_login(claim.id, claim.email, claim.name),
            action="Google login",
            rejected_kind=AuthErrorKind.THIRD_PARTY_EXCHANGE_FAILED,
        )

    def third_party_login_with_token(self, provider_token: str) -> bool:
        """Exchange a provider bearer token for a profile, then sign in with it"""
        provider = self._identity_provider
        if provider is None:
            provider = GoogleIdentityProvider(get_config_manager().config.identity_userinfo_url)
            self._identity_provider = provider

        self._set_error(None)
        self._set_loading(True)
        try:
            claim = provider.exchange_identity_token(provider_token)
        except AuthError as e:
            self._set_error(e.message, AuthErrorKind.THIRD_PARTY_EXCHANGE_FAILED)
            return False
        finally:
            self._set_loading(False)

        return self.third_party_login(claim)

    def _authenticate(
        self,
        obtain_token: Callable[[], str],
        action: str,
        rejected_kind: AuthErrorKind,
    ) -> bool:
        """Shared flow: obtain a token, persist it, then load the profile.

        Either ends AUTHENTICATED with a profile, or ANONYMOUS with an error set;
        never somewhere in between.
        """
        self._set_error(None)
        self._set_loading(True)
        try:
            try:
                token = obtain_token()
            except ScribeError as e:
                self._fail(action, e, rejected_kind)
                return False

            self._store.save(token)
            self._state.token = token
            self._state.state = AuthState.VALIDATING

            try:
                user = self._api.get_current_user()
            except ScribeError as e:
                self._discard_session()
                self._fail(action, e, AuthErrorKind.INVALID_CREDENTIALS)
                return False

            self._set_authenticated(token, user)
            logger.info(f"{action} succeeded for {user.email}")
            return True
        finally:
            self._set_loading(False)

    def _fail(self, action: str, error: ScribeError, rejected_kind: AuthErrorKind):
        """Record a failed auth operation and make sure the state is ANONYMOUS"""
        message = error.message or f"{action} failed"
        if isinstance(error, NetworkError):
            kind = AuthErrorKind.NETWORK_FAILURE
        elif isinstance(error, AuthError):
            kind = error.kind
        elif isinstance(error, ApiError) and error.status_code is not None and error.status_code >= 500:
            kind = AuthErrorKind.NETWORK_FAILURE
        elif isinstance(error, SessionExpired):
            # 401 from a sign-in route means the credentials were rejected
            kind = rejected_kind
            message = error.server_message or (
                "Invalid email or password"
                if rejected_kind == AuthErrorKind.INVALID_CREDENTIALS
                else f"{action} failed"
            )
        else:
            kind = rejected_kind

        logger.error(f"{action} failed ({kind.value}): {message}")
        self._discard_session()
        self._set_error(message, kind)

    def logout(self) -> bool:
        """Sign out; local state is cleared even if the server call fails.

        Returns:
            False if the server could not be told (the error is surfaced)
        """
        self._set_loading(True)
        succeeded = True
        try:
            self._api.logout()
        except SessionExpired:
            pass  # the server already forgot us
        except ScribeError as e:
            succeeded = False
            logger.warning(f"Logout request failed, clearing local session anyway: {e}")
            self._set_error(e.message or "Logout failed", AuthErrorKind.NETWORK_FAILURE)
        finally:
            self._discard_session()
            self._set_loading(False)

        logger.info("Logged out")
        return succeeded

    def forgot_password(self, email: str) -> bool:
        """Ask the server to email a password reset link"""
        try:
            validate_email(email)
        except ValidationError as e:
            self._set_error(e.message, AuthErrorKind.VALIDATION_FAILED)
            return False
        return self._simple_call(lambda: self._api.forgot_password(email.strip()), "Password reset request")

    def reset_password(self, reset_token: str, password: str, confirm_password: Optional[str] = None) -> bool:
        """Set a new password using the token from the reset email"""
        try:
            if not reset_token:
                raise ValidationError("The reset link is invalid")
            validate_password(password, confirm_password)
        except ValidationError as e:
            self._set_error(e.message, AuthErrorKind.VALIDATION_FAILED)
            return False
        return self._simple_call(lambda: self._api.reset_password(reset_token, password), "Password reset")

    def _simple_call(self, call: Callable[[], None], action: str) -> bool:
        self._set_error(None)
        self._set_loading(True)
        try:
            call()
        except ScribeError as e:
            kind = AuthErrorKind.NETWORK_FAILURE if isinstance(e, NetworkError) else AuthErrorKind.VALIDATION_FAILED
            logger.error(f"{action} failed: {e}")
            self._set_error(e.message or f"{action} failed", kind)
            return False
        finally:
            self._set_loading(False)
        logger.info(f"{action} accepted")
        return True

    def handle_unauthorized(self):
        """Global 401 handler: drop the token and send the user to sign in.

        Called by the transport for any 401, whichever operation triggered it,
        always on the event loop thread.
        """
        had_token = self._state.token is not None
        self._discard_session()
        if had_token:
            logger.warning("Session expired, signing out")
            self._signals.sign_in_required.emit()


_session_manager_instance: Optional[SessionManager] = None


def get_session_manager() -> SessionManager:
    """Get the singleton session manager, wired to the configured service"""
    global _session_manager_instance
    if _session_manager_instance is None:
        config = get_config_manager().config
        api = ApiClient(
            config.api_base_url,
            timeout=config.request_timeout_seconds,
            upload_timeout=config.upload_timeout_seconds,
        )
        _session_manager_instance = SessionManager(
            api,
            identity_provider=GoogleIdentityProvider(config.identity_userinfo_url),
        )
    return _session_manager_instance
