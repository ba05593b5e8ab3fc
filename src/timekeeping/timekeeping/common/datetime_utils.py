from __future__ import annotations

from datetime import datetime, timezone

from ..core.exceptions import ValidationError


def now_utc() -> datetime:
    """Current time, timezone-aware.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value, field_name: str) -> datetime:
    """Accept a datetime or an ISO-8601 string; naive values are read as UTC."""
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(text))
        except ValueError:
            pass
    raise ValidationError(f"Invalid {field_name}")
