"""Third-party identity providers.

A provider turns the bearer token handed back by its sign-in widget into the
profile fields the MinuteScribe service needs for ``POST /auth/google``.
"""

from typing import Optional, Protocol

import requests
from loguru import logger

from .errors import AuthError, AuthErrorKind
from .models import IdentityClaim


class IdentityProvider(Protocol):
    """Capability interface used by the Session Manager"""

    def exchange_identity_token(self, provider_token: str) -> IdentityClaim:
        ...


class GoogleIdentityProvider:
    """Resolves a Google OAuth access token through the userinfo endpoint"""

    DEFAULT_USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"

    def __init__(self, userinfo_url: Optional[str] = None, timeout: float = 15.0):
        self.userinfo_url = userinfo_url or self.DEFAULT_USERINFO_URL
        self.timeout = timeout

    def exchange_identity_token(self, provider_token: str) -> IdentityClaim:
        try:
            response = requests.get(
                self.userinfo_url,
                headers={"Authorization": f"Bearer {provider_token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            info = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Google userinfo request failed: {e}")
            raise AuthError(
                "Google sign in failed. Please try again.",
                kind=AuthErrorKind.THIRD_PARTY_EXCHANGE_FAILED,
            ) from e
        except ValueError as e:
            logger.error(f"Google userinfo returned invalid JSON: {e}")
            raise AuthError(
                "Google sign in failed. Please try again.",
                kind=AuthErrorKind.THIRD_PARTY_EXCHANGE_FAILED,
            ) from e

        if not info.get("sub") or not info.get("email"):
            logger.error("Google userinfo response is missing sub/email")
            raise AuthError(
                "Google did not share your email address.",
                kind=AuthErrorKind.THIRD_PARTY_EXCHANGE_FAILED,
            )

        return IdentityClaim(id=info["sub"], email=info["email"], name=info.get("name") or "")
