from __future__ import annotations

import pytest

from timekeeping.core.enums import Role
from timekeeping.core.exceptions import AuthorizationError, DomainError
from timekeeping.core.permissions import Actor, require_manager, require_owner_or_manager, require_same_business


def test_manager_like_roles():
    assert Actor(1, Role.OWNER).is_manager_like
    assert Actor(1, Role.MANAGER).is_manager_like
    assert not Actor(1, Role.EMPLOYEE).is_manager_like


def test_owns_compares_ids_loosely():
    actor = Actor(5, Role.EMPLOYEE)
    assert actor.owns(5)
    assert actor.owns("5")
    assert not actor.owns(6)
    assert not actor.owns(None)


def test_require_manager():
    require_manager(Actor(1, Role.MANAGER), "nope")
    with pytest.raises(AuthorizationError, match="nope"):
        require_manager(Actor(1, Role.EMPLOYEE), "nope")


def test_require_owner_or_manager():
    require_owner_or_manager(Actor(1, Role.EMPLOYEE), 1, "nope")
    require_owner_or_manager(Actor(2, Role.OWNER), 1, "nope")
    with pytest.raises(AuthorizationError):
        require_owner_or_manager(Actor(2, Role.EMPLOYEE), 1, "nope")


def test_cross_tenant_is_forbidden():
    require_same_business(1, 1)
    with pytest.raises(AuthorizationError) as exc_info:
        require_same_business(1, 2)
    assert exc_info.value.status_code == 403
    assert isinstance(exc_info.value, DomainError)
