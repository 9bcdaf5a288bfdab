"""Shared utility functions."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from app.shared.exceptions import ValidationException

_PHONE_SEPARATORS = re.compile(r"[\s().\-]")


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize datetime to UTC timezone; naive values are read as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def normalize_search_term(value: str | None) -> str | None:
    """Lowercase and trim a free-text search term, None when empty."""
    if value is None:
        return None
    term = value.strip().casefold()
    return term or None


def normalize_phone(value: str | None) -> str | None:
    """Return the 10 phone digits with separators removed, None when blank."""
    if value is None or not value.strip():
        return None
    digits = _PHONE_SEPARATORS.sub("", value.strip())
    if not re.fullmatch(r"\d{10}", digits):
        raise ValidationException("Phone number must be exactly 10 digits")
    return digits
