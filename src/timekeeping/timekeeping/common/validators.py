from __future__ import annotations

import re
from typing import Optional

from ..core.exceptions import ValidationError

DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_work_date(value: str, field_name: str = "workDate") -> str:
    """`YYYY-MM-DD` strings sort lexicographically in date order."""
    value = (value or "").strip() if isinstance(value, str) else value
    if not value or not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        raise ValidationError(f"{field_name} must be YYYY-MM-DD")
    return value


def optional_work_date(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None or value == "":
        return None
    return require_work_date(value, field_name)


def require_id(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid")
    if number <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return number


def optional_id(value, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_id(value, field_name)
