from __future__ import annotations

from typing import Any, Optional


class _Unset:
    """Marker for "field not provided" in patch structures."""

    _instance: Optional["_Unset"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def merge_clearable(patched, current):
    """UNSET keeps `current`; a falsy value clears to None; anything else replaces."""
    if patched is UNSET:
        return current
    return patched or None
