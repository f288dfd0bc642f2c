from __future__ import annotations

import re

from ..core.constants import PASSWORD_MIN_LENGTH, PASSWORD_RULE_MESSAGE, PASSWORD_SPECIAL_CHARS
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: str) -> str:
    email = require_non_empty(value, "Email").lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Email is not valid")
    return email


def is_strong_password(password: str) -> bool:
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        return False
    return (
        any(ch.isupper() for ch in password)
        and any(ch.islower() for ch in password)
        and any(ch.isdigit() for ch in password)
        and any(ch in PASSWORD_SPECIAL_CHARS for ch in password)
    )


def require_strong_password(password: str) -> str:
    if not is_strong_password(password):
        raise ValidationError(PASSWORD_RULE_MESSAGE)
    return password


def require_matching_passwords(password: str, confirm: str) -> None:
    if (password or confirm) and password != confirm:
        raise ValidationError("Passwords do not match.")
