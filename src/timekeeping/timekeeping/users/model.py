from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_ROUNDING_MINUTES
from ..core.enums import MemberStatus, Role, RoundingMode


@dataclass(frozen=True)
class Member:
    """Domain entity: a user inside one business.

    Plain data object, no DB access.
    """

    user_id: int
    business_id: int
    username: str
    display_name: str
    password_hash: str
    role: Role
    status: MemberStatus = MemberStatus.ACTIVE

    @property
    def is_usable(self) -> bool:
        return self.status not in (MemberStatus.DISABLED, MemberStatus.DELETED)


@dataclass(frozen=True)
class TimeTrackingSettings:
    rounding_minutes: int = DEFAULT_ROUNDING_MINUTES
    rounding_mode: RoundingMode = RoundingMode.NEAREST


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    business_id: int
    role: Role
    display_name: Optional[str] = None
