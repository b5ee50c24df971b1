# Overview: Typed read models returned by swap and analytics queries.

"""
Joined result shapes.

Every list/report query returns one of these records instead of an ad hoc
dict, so routes and the CSV export agree on field names.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..models import Shift, SwapRequest, User
from swapdesk.time_utils import to_hhmm, to_utc_z


@dataclass(frozen=True)
class UserSummary:
    id: str
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None
    department: str | None

    @classmethod
    def from_user(cls, user: User | None) -> UserSummary | None:
        if user is None:
            return None
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_image_url=user.profile_image_url,
            department=user.department,
        )

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "profile_image_url": self.profile_image_url,
            "department": self.department,
        }


@dataclass(frozen=True)
class ShiftSummary:
    id: int
    date: str
    start_time: str
    end_time: str
    department: str

    @classmethod
    def from_shift(cls, shift: Shift) -> ShiftSummary:
        return cls(
            id=shift.id,
            date=shift.date.isoformat(),
            start_time=to_hhmm(shift.start_time),
            end_time=to_hhmm(shift.end_time),
            department=shift.department,
        )

    @property
    def time_range(self) -> str:
        return f"{self.start_time}-{self.end_time}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "department": self.department,
        }


@dataclass(frozen=True)
class SwapRequestView:
    """A swap request joined with its shift, requester and (optional) volunteer."""
    id: int
    reason: str
    priority: str
    status: str
    created_at: datetime
    volunteer_id: str | None
    shift: ShiftSummary
    requester: UserSummary
    volunteer: UserSummary | None

    @classmethod
    def from_row(cls, swap: SwapRequest, shift: Shift, requester: User, volunteer: User | None) -> SwapRequestView:
        return cls(
            id=swap.id,
            reason=swap.reason,
            priority=swap.priority,
            status=swap.status,
            created_at=swap.created_at,
            volunteer_id=swap.volunteer_id,
            shift=ShiftSummary.from_shift(shift),
            requester=UserSummary.from_user(requester),
            volunteer=UserSummary.from_user(volunteer),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reason": self.reason,
            "priority": self.priority,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "volunteer_id": self.volunteer_id,
            "shift": self.shift.to_dict(),
            "requester": self.requester.to_dict(),
            "volunteer": self.volunteer.to_dict() if self.volunteer else None,
        }


@dataclass(frozen=True)
class DecisionView:
    """An approved/rejected swap request with shift and requester summaries."""
    id: int
    status: str
    manager_notes: str | None
    approved_by: str | None
    updated_at: datetime
    shift: ShiftSummary
    requester: UserSummary

    @classmethod
    def from_row(cls, swap: SwapRequest, shift: Shift, requester: User) -> DecisionView:
        return cls(
            id=swap.id,
            status=swap.status,
            manager_notes=swap.manager_notes,
            approved_by=swap.approved_by,
            updated_at=swap.updated_at,
            shift=ShiftSummary.from_shift(shift),
            requester=UserSummary.from_user(requester),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "manager_notes": self.manager_notes,
            "approved_by": self.approved_by,
            "updated_at": to_utc_z(self.updated_at),
            "shift": self.shift.to_dict(),
            "requester": self.requester.to_dict(),
        }


@dataclass(frozen=True)
class DepartmentActivity:
    department: str
    swap_count: int

    def to_dict(self) -> dict:
        return {"department": self.department, "swap_count": self.swap_count}
