from __future__ import annotations

from typing import Optional, Protocol

from .model import Member, TimeTrackingSettings


class MemberRepository(Protocol):
    """Repository interface for business members.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    async def get_in_business(self, business_id: int, user_id: int) -> Optional[Member]:
        raise NotImplementedError

    async def get_by_username(self, username: str) -> Optional[Member]:
        raise NotImplementedError


class SettingsRepository(Protocol):
    async def get_time_tracking(self, business_id: int) -> TimeTrackingSettings:
        """Defaults when the business has no stored settings."""

        raise NotImplementedError
