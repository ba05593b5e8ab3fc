from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of a member inside one business."""

    OWNER = "owner"
    MANAGER = "manager"
    EMPLOYEE = "employee"

    @property
    def is_manager_like(self) -> bool:
        return self in (Role.OWNER, Role.MANAGER)


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INVITED = "invited"
    DISABLED = "disabled"
    DELETED = "deleted"


class EntryType(str, Enum):
    """Only manual entries are handled; clock rows are legacy data."""

    MANUAL = "manual"
    CLOCK = "clock"


class TimeEntryStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    VOID = "void"
    # Legacy value kept readable for old rows; never written.
    OPEN = "open"

    @property
    def is_editable(self) -> bool:
        return self in (TimeEntryStatus.DRAFT, TimeEntryStatus.REJECTED)


class ShiftStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELED = "canceled"


class RoundingMode(str, Enum):
    NEAREST = "nearest"
    UP = "up"
    DOWN = "down"
