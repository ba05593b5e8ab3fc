"""Authorization gate shared by the time-entry and shift services."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class Actor:
    """Authenticated caller, resolved upstream from the session."""

    user_id: int
    role: Role

    @property
    def is_manager_like(self) -> bool:
        return self.role.is_manager_like

    def owns(self, user_id) -> bool:
        return user_id is not None and int(user_id) == int(self.user_id)


def require_manager(actor: Actor, message: str) -> None:
    if not actor.is_manager_like:
        raise AuthorizationError(message)


def require_owner_or_manager(actor: Actor, owner_id: int, message: str) -> None:
    if not actor.is_manager_like and not actor.owns(owner_id):
        raise AuthorizationError(message)


def require_same_business(business_id: int, record_business_id: int) -> None:
    if int(business_id) != int(record_business_id):
        raise AuthorizationError("Cross-tenant access is not allowed")
