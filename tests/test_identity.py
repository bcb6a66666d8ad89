from unittest.mock import MagicMock, patch

import pytest
import requests

from minutescribe.core.errors import AuthError, AuthErrorKind
from minutescribe.core.identity import GoogleIdentityProvider


def _userinfo(body):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = body
    return response


def test_exchange_maps_userinfo_fields():
    provider = GoogleIdentityProvider("https://idp.test/userinfo")
    body = {"sub": "g-1", "email": "ada@example.com", "name": "Ada"}
    with patch("minutescribe.core.identity.requests.get", return_value=_userinfo(body)) as get:
        claim = provider.exchange_identity_token("access-token")

    assert (claim.id, claim.email, claim.name) == ("g-1", "ada@example.com", "Ada")
    assert get.call_args.kwargs["headers"] == {"Authorization": "Bearer access-token"}


def test_exchange_without_email_fails():
    provider = GoogleIdentityProvider()
    with patch("minutescribe.core.identity.requests.get", return_value=_userinfo({"sub": "g-1"})):
        with pytest.raises(AuthError) as excinfo:
            provider.exchange_identity_token("access-token")
    assert excinfo.value.kind == AuthErrorKind.THIRD_PARTY_EXCHANGE_FAILED


def test_exchange_transport_failure():
    provider = GoogleIdentityProvider()
    with patch("minutescribe.core.identity.requests.get", side_effect=requests.exceptions.ConnectionError()):
        with pytest.raises(AuthError) as excinfo:
            provider.exchange_identity_token("access-token")
    assert excinfo.value.kind == AuthErrorKind.THIRD_PARTY_EXCHANGE_FAILED
