from __future__ import annotations

import logging

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.exceptions import AuthenticationError
from .model import SessionUser
from .repository import MemberRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate a member (login)."""

    def __init__(self, members: MemberRepository):
        self._members = members

    async def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_non_empty(username, "username")
        member = await self._members.get_by_username(username)
        if not member or not member.is_usable:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(member.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            logger.warning("Failed login for %s", username)
            raise AuthenticationError("Invalid username or password")

        return SessionUser(
            user_id=member.user_id,
            business_id=member.business_id,
            role=member.role,
            display_name=member.display_name,
        )
