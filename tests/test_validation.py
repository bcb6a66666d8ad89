from pathlib import Path

import pytest

from minutescribe.core.errors import ValidationError
from minutescribe.core.models import AudioUpload
from minutescribe.core.validation import (
    is_valid_email,
    validate_audio_upload,
    validate_login,
    validate_registration,
    validate_title,
)

MB = 1024 * 1024


def _upload(content_type="audio/mpeg", size=10 * MB, title="Standup"):
    return AudioUpload(path=Path("standup.mp3"), content_type=content_type, size_bytes=size, title=title)


def test_email_pattern():
    assert is_valid_email("ada@example.com")
    assert is_valid_email("first.last@mail.example.org")
    assert not is_valid_email("ada@")
    assert not is_valid_email("not an email")
    assert not is_valid_email("ada..lovelace@example.com")
    assert not is_valid_email("ada@example.museum")


def test_email_pattern_rejects_long_invalid_input_quickly():
    assert not is_valid_email("a" * 60 + "!")
    assert not is_valid_email("ada@" + "b" * 60 + "!")


def test_login_requires_email_and_password():
    with pytest.raises(ValidationError):
        validate_login("", "secret")
    with pytest.raises(ValidationError):
        validate_login("ada@example.com", "")
    validate_login("ada@example.com", "secret")


def test_registration_rules():
    with pytest.raises(ValidationError, match="Name"):
        validate_registration("  ", "ada@example.com", "secret1")
    with pytest.raises(ValidationError, match="at least 6"):
        validate_registration("Ada", "ada@example.com", "12345")
    with pytest.raises(ValidationError, match="do not match"):
        validate_registration("Ada", "ada@example.com", "secret1", "secret2")
    validate_registration("Ada", "ada@example.com", "secret1", "secret1")


def test_title_required():
    with pytest.raises(ValidationError):
        validate_title("   ")


def test_audio_upload_accepts_reasonable_file():
    validate_audio_upload(_upload())


def test_audio_upload_rejects_non_audio():
    with pytest.raises(ValidationError, match="audio file"):
        validate_audio_upload(_upload(content_type="text/plain"))


def test_audio_upload_rejects_oversized():
    with pytest.raises(ValidationError, match="Maximum size is 50MB"):
        validate_audio_upload(_upload(size=60 * MB))


def test_audio_upload_requires_selection_and_title():
    with pytest.raises(ValidationError, match="select"):
        validate_audio_upload(None)
    with pytest.raises(ValidationError, match="title"):
        validate_audio_upload(_upload(title=""))
