"""Client-side input checks.

Everything here raises ValidationError and runs before any network call.
"""

import re
from typing import Optional

from .errors import ValidationError
from .models import AudioUpload


EMAIL_PATTERN = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}$")
MIN_PASSWORD_LENGTH = 6
MAX_UPLOAD_BYTES = 50 * 1024 * 1024


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def validate_email(email: str):
    if not email.strip():
        raise ValidationError("Email is required")
    if not is_valid_email(email.strip()):
        raise ValidationError("Please enter a valid email address")


def validate_password(password: str, confirm: Optional[str] = None):
    """Password policy; ``confirm`` is checked only when given"""
    if not password:
        raise ValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if confirm is not None and password != confirm:
        raise ValidationError("Passwords do not match")


def validate_login(email: str, password: str):
    validate_email(email)
    if not password:
        raise ValidationError("Password is required")


def validate_registration(name: str, email: str, password: str, confirm: Optional[str] = None):
    if not name.strip():
        raise ValidationError("Name is required")
    validate_email(email)
    validate_password(password, confirm)


def validate_title(title: str):
    if not title.strip():
        raise ValidationError("Please enter a title")


def validate_audio_upload(upload: Optional[AudioUpload], max_bytes: int = MAX_UPLOAD_BYTES):
    """Reject anything that is not an audio file of acceptable size"""
    if upload is None:
        raise ValidationError("Please select an audio file")
    if not upload.content_type.startswith("audio/"):
        raise ValidationError("Please upload an audio file")
    if upload.size_bytes > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        raise ValidationError(f"File is too large. Maximum size is {limit_mb}MB")
    validate_title(upload.title)
