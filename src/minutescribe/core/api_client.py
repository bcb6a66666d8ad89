"""HTTP client for the MinuteScribe service.

Thin wrapper around a requests.Session that:
- prefixes every path with the configured base URL
- attaches ``Authorization: Bearer <token>`` when a token is available
- maps transport failures and error statuses onto the client error types
- reports 401 responses through a hook before raising SessionExpired
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Optional

import requests
from loguru import logger
from pydantic import BaseModel, ValidationError as PydanticValidationError

from .errors import ApiError, NetworkError, NotFound, SessionExpired
from .models import AudioUpload, Document, DocumentPatch, UserProfile


TokenProvider = Callable[[], Optional[str]]
UnauthorizedHook = Callable[[], None]


def _error_message(response: requests.Response, fallback: str) -> str:
    """Pull a human-readable message out of an error response"""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


def _unwrap(body: Any) -> Any:
    """Strip the ``{"success": ..., "data": ...}`` envelope some routes use"""
    if isinstance(body, dict) and "data" in body and ("success" in body or len(body) == 1):
        return body["data"]
    return body


def _parse(model: type[BaseModel], body: Any) -> Any:
    """Validate a response body against a model, as an ApiError on mismatch"""
    try:
        return model.model_validate(body)
    except PydanticValidationError as e:
        logger.error(f"Unexpected {model.__name__} payload: {e}")
        raise ApiError("The server sent an unexpected response") from e


class ApiClient:
    """
    Transport adapter for the remote service.

    The client never stores the token itself; it asks ``token_provider`` on
    every request so the Session Manager stays the only owner of session state.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        timeout: float = 30.0,
        upload_timeout: float = 600.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.upload_timeout = upload_timeout
        self._token_provider = token_provider
        self._on_unauthorized: Optional[UnauthorizedHook] = None

        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def set_token_provider(self, provider: TokenProvider):
        self._token_provider = provider

    def set_on_unauthorized(self, hook: UnauthorizedHook):
        """Register the global handler for 401 responses"""
        self._on_unauthorized = hook

    def close(self):
        self._session.close()

    # ----- core request -----

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send a request and return the decoded (and unwrapped) JSON body.

        Raises:
            NetworkError: connection failure or timeout
            SessionExpired: 401 (after the unauthorized hook ran)
            NotFound: 404
            ApiError: any other non-2xx status
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug(f"{method} {url}")
        try:
            response = self._session.request(
                method,
                url,
                json=json,
                data=data,
                files=files,
                headers=headers,
                timeout=timeout or self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"{method} {path} timed out")
            raise NetworkError("The server took too long to respond") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise NetworkError("Could not reach the server") from e

        if response.status_code == 401:
            logger.warning(f"{method} {path} returned 401, session is no longer valid")
            if self._on_unauthorized is not None:
                self._on_unauthorized()
            server_message = _error_message(response, "")
            raise SessionExpired(
                server_message or "Your session has expired. Please sign in again.",
                server_message=server_message or None,
            )

        if response.status_code == 404:
            raise NotFound(_error_message(response, "Not found"))

        if not response.ok:
            message = _error_message(response, f"Request failed ({response.status_code})")
            logger.debug(f"{method} {path} -> {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return _unwrap(response.json())
        except ValueError as e:
            raise ApiError("The server sent an invalid response", status_code=response.status_code) from e

    # ----- auth routes -----

    def register(self, name: str, email: str, password: str) -> str:
        body = self.request("POST", "/auth/register", json={"name": name, "email": email, "password": password})
        return self._token_from(body)

    def login(self, email: str, password: str) -> str:
        body = self.request("POST", "/auth/login", json={"email": email, "password": password})
        return self._token_from(body)

    def google_login(self, google_id: str, email: str, name: str) -> str:
        body = self.request("POST", "/auth/google", json={"googleId": google_id, "email": email, "name": name})
        return self._token_from(body)

    def logout(self):
        self.request("GET", "/auth/logout")

    def get_current_user(self) -> UserProfile:
        body = self.request("GET", "/auth/me")
        return _parse(UserProfile, body)

    def forgot_password(self, email: str):
        self.request("POST", "/auth/forgotpassword", json={"email": email})

    def reset_password(self, reset_token: str, password: str):
        self.request("PUT", f"/auth/resetpassword/{reset_token}", json={"password": password})

    @staticmethod
    def _token_from(body: Any) -> str:
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise ApiError("The server did not return a session token")
        return token

    # ----- audio / summary routes -----

    def process_audio(self, upload: AudioUpload) -> Document:
        """Upload an audio file; the server transcribes and summarizes it"""
        path = Path(upload.path)
        with open(path, "rb") as f:
            body = self.request(
                "POST",
                "/audio/process",
                data={"title": upload.title},
                files={"audio": (path.name, f, upload.content_type)},
                timeout=self.upload_timeout,
            )
        return _parse(Document, body)

    def list_summaries(self) -> List[Document]:
        body = self.request("GET", "/summary")
        return [_parse(Document, item) for item in body or []]

    def get_summary(self, document_id: str) -> Document:
        body = self.request("GET", f"/summary/{document_id}")
        return _parse(Document, body)

    def update_summary(self, document_id: str, patch: DocumentPatch) -> Document:
        body = self.request("PUT", f"/summary/{document_id}", json=patch.to_payload())
        return _parse(Document, body)

    def delete_summary(self, document_id: str):
        self.request("DELETE", f"/summary/{document_id}")
