# Overview: Read-only projections over swap requests for dashboards and reports.

from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime, timedelta

from sqlalchemy import func

from ..extensions import db
from ..models import Shift, SwapRequest, User, DECIDED_STATUSES
from ..validation import NotFoundError
from .swap_service import available_filter
from .views import DecisionView, DepartmentActivity
from swapdesk.time_utils import utcnow


DEFAULT_RECENT_DECISIONS = 10
DEFAULT_WINDOW_DAYS = 7


@dataclass(frozen=True)
class ManagerCounters:
    pending_approvals: int
    approved_week: int
    rejected_week: int
    # None until at least one request has been decided
    coverage_rate: float | None


@dataclass(frozen=True)
class DashboardCounters:
    upcoming_shifts: int
    pending_requests: int
    completed_swaps: int
    available_swaps: int
    manager: ManagerCounters | None = None

    def to_dict(self) -> dict:
        data = {
            "upcoming_shifts": self.upcoming_shifts,
            "pending_requests": self.pending_requests,
            "completed_swaps": self.completed_swaps,
            "available_swaps": self.available_swaps,
        }
        if self.manager is not None:
            data.update(asdict(self.manager))
        return data


def _count(query) -> int:
    return query.scalar() or 0


def _requests_by(user_id: str, status: str) -> int:
    return _count(
        db.session.query(func.count(SwapRequest.id))
        .filter(SwapRequest.requester_id == user_id, SwapRequest.status == status)
    )


def _decided_since(status: str, since: datetime) -> int:
    return _count(
        db.session.query(func.count(SwapRequest.id))
        .filter(SwapRequest.status == status, SwapRequest.updated_at >= since)
    )


def coverage_rate() -> float | None:
    """
    Share of decided swap requests that ended covered: approved with a
    volunteer attached. Percentage rounded to one decimal, or None when
    nothing has been decided yet.
    """
    decided = _count(
        db.session.query(func.count(SwapRequest.id))
        .filter(SwapRequest.status.in_(DECIDED_STATUSES))
    )
    if not decided:
        return None
    covered = _count(
        db.session.query(func.count(SwapRequest.id))
        .filter(SwapRequest.status == "approved", SwapRequest.volunteer_id.isnot(None))
    )
    return round(covered * 100.0 / decided, 1)


def dashboard_counters(
    user_id: str,
    *,
    now: datetime | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> DashboardCounters:
    """
    Per-user dashboard numbers; managers also get approval-queue numbers.

    Raises:
        NotFoundError: unknown user
    """
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")

    now = now or utcnow()

    upcoming_shifts = _count(
        db.session.query(func.count(Shift.id))
        .filter(Shift.user_id == user_id, Shift.date >= now.date())
    )
    available_swaps = _count(
        db.session.query(func.count(SwapRequest.id)).filter(*available_filter(user_id))
    )

    manager = None
    if user.is_manager:
        since = now - timedelta(days=window_days)
        manager = ManagerCounters(
            pending_approvals=_count(
                db.session.query(func.count(SwapRequest.id)).filter(SwapRequest.status == "pending")
            ),
            approved_week=_decided_since("approved", since),
            rejected_week=_decided_since("rejected", since),
            coverage_rate=coverage_rate(),
        )

    return DashboardCounters(
        upcoming_shifts=upcoming_shifts,
        pending_requests=_requests_by(user_id, "pending"),
        completed_swaps=_requests_by(user_id, "approved"),
        available_swaps=available_swaps,
        manager=manager,
    )


def department_activity() -> list[DepartmentActivity]:
    """
    Swap request count per shift department. Left join, so departments whose
    shifts never had a request appear with 0. Busiest first.
    """
    swap_count = func.count(SwapRequest.id)
    rows = (
        db.session.query(Shift.department, swap_count)
        .outerjoin(SwapRequest, SwapRequest.shift_id == Shift.id)
        .group_by(Shift.department)
        .order_by(swap_count.desc(), Shift.department.asc())
        .all()
    )
    return [DepartmentActivity(department=department, swap_count=count) for department, count in rows]


def recent_decisions(limit: int = DEFAULT_RECENT_DECISIONS) -> list[DecisionView]:
    rows = (
        db.session.query(SwapRequest, Shift, User)
        .join(Shift, SwapRequest.shift_id == Shift.id)
        .join(User, SwapRequest.requester_id == User.id)
        .filter(SwapRequest.status.in_(DECIDED_STATUSES))
        .order_by(SwapRequest.updated_at.desc(), SwapRequest.id.desc())
        .limit(limit)
        .all()
    )
    return [DecisionView.from_row(*row) for row in rows]
