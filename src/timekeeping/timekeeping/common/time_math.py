"""Pure helpers for `HH:mm` arithmetic and paid-minute totals.

Entries never span midnight: end must be strictly after start on the same day.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from ..core.enums import RoundingMode
from ..core.exceptions import InvalidBreak, InvalidRoundingMode, InvalidTimeFormat, InvalidTimeRange

TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")


@dataclass(frozen=True)
class ManualTotals:
    total_minutes: int
    break_minutes: int
    paid_minutes: int
    paid_minutes_rounded: int


def time_to_minutes(hhmm: str) -> int:
    """Convert a zero-padded 24h `HH:mm` string to minutes since midnight."""
    if not isinstance(hhmm, str):
        raise InvalidTimeFormat("Invalid time format (expected HH:mm)")
    match = TIME_PATTERN.fullmatch(hhmm)
    if not match:
        raise InvalidTimeFormat("Invalid time format (expected HH:mm)")
    return int(match.group(1)) * 60 + int(match.group(2))


def _as_rounding_mode(mode: Union[RoundingMode, str]) -> RoundingMode:
    try:
        return RoundingMode(mode)
    except ValueError:
        raise InvalidRoundingMode(f"Unknown rounding mode: {mode!r}")


def round_minutes(minutes: int, increment: int, mode: Union[RoundingMode, str] = RoundingMode.NEAREST) -> int:
    """Round to a multiple of `increment`; 0 or negative means no rounding.

    Integer only: nearest rounds halves up, like floor(x / inc + 0.5) * inc.
    """
    mode = _as_rounding_mode(mode)
    inc = int(increment or 0)
    if inc <= 0:
        return minutes

    if mode is RoundingMode.UP:
        return -(-minutes // inc) * inc
    if mode is RoundingMode.DOWN:
        return (minutes // inc) * inc
    return ((2 * minutes + inc) // (2 * inc)) * inc


def _as_break_minutes(value) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise InvalidBreak("breakMinutes must be a whole number of minutes")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidBreak("breakMinutes must be a whole number of minutes")
    if isinstance(value, float) and value != number:
        raise InvalidBreak("breakMinutes must be a whole number of minutes")
    return max(0, number)


def compute_manual_totals(
    start_time: str,
    end_time: str,
    break_minutes=0,
    rounding_minutes: int = 0,
    rounding_mode: Union[RoundingMode, str] = RoundingMode.NEAREST,
) -> ManualTotals:
    start = time_to_minutes(start_time)
    end = time_to_minutes(end_time)

    if end <= start:
        raise InvalidTimeRange("endTime must be after startTime")

    total = end - start
    brk = _as_break_minutes(break_minutes)
    if brk > total:
        raise InvalidBreak("breakMinutes cannot exceed total shift minutes")

    paid = max(0, total - brk)
    return ManualTotals(
        total_minutes=total,
        break_minutes=brk,
        paid_minutes=paid,
        paid_minutes_rounded=round_minutes(paid, rounding_minutes, rounding_mode),
    )
