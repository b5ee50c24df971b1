# Overview: Service-layer operations for swap requests; encapsulates business logic and database work.

"""
SwapDesk Swap Request Lifecycle Service

================================================================================
PURPOSE: Enforce pending -> approved | rejected for shift swap requests
================================================================================

STATE MACHINE:
    pending -> approved
    pending -> rejected

    pending:  open; one colleague may attach as volunteer (status unchanged)
    approved: manager accepted (terminal, immutable)
    rejected: manager declined (terminal, immutable)

RULES:
1. Only the shift owner can request a swap for it.
2. A shift has at most one pending request at a time.
3. A volunteer is never the requester, and is set at most once.
4. Decisions only apply to pending requests; a second decision is a conflict.
5. Volunteer presence is NOT required to reject (or approve).

CONCURRENCY:
Volunteer and decision transitions are conditional UPDATEs
(compare-and-swap on status / volunteer_id). If another request won the race
the UPDATE matches zero rows and ConflictError is raised; nothing is
overwritten.

AUDIT:
Every mutation appends its audit entry before the single commit, so the
mutation and its entry are persisted together or not at all.

================================================================================
"""

from __future__ import annotations
from typing import Literal

from sqlalchemy import update
from sqlalchemy.orm import aliased

from ..extensions import db
from ..models import Shift, SwapRequest, User, SWAP_PRIORITIES
from ..validation import ConflictError, NotFoundError, ValidationError, require_choice, require_text
from . import audit_service
from .views import SwapRequestView
from swapdesk.time_utils import utcnow


SWAP_ENTITY = "swap_request"
Decision = Literal["approved", "rejected"]


def _coerce_id(value, field: str) -> int:
    if value is None or value == "":
        raise ValidationError(f"{field} is required")
    # JSON floats (3.9) and bools are not ids
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValidationError(f"{field} must be an integer")


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    notes = str(notes).strip()
    return notes or None


def _joined_query():
    requester = aliased(User)
    volunteer = aliased(User)
    query = (
        db.session.query(SwapRequest, Shift, requester, volunteer)
        .join(Shift, SwapRequest.shift_id == Shift.id)
        .join(requester, SwapRequest.requester_id == requester.id)
        .outerjoin(volunteer, SwapRequest.volunteer_id == volunteer.id)
    )
    return query


def _newest_first(query):
    return query.order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc())


def available_filter(caller_id: str) -> tuple:
    """Filter clauses for requests the caller could volunteer for."""
    return (
        SwapRequest.status == "pending",
        SwapRequest.volunteer_id.is_(None),
        SwapRequest.requester_id != caller_id,
    )


def get_swap_request(request_id: int) -> SwapRequest:
    swap = db.session.get(SwapRequest, request_id)
    if swap is None:
        raise NotFoundError(f"Swap request {request_id} not found")
    return swap


def create_swap_request(
    *,
    requester_id: str,
    shift_id: int,
    reason: str,
    priority: str | None = None,
) -> SwapRequest:
    """
    Open a swap request for one of the requester's shifts.

    Raises:
        ValidationError: empty reason, bad priority, unknown shift, or the
            shift is not owned by the requester
        ConflictError: the shift already has a pending request
    """
    reason = require_text(reason, "reason")
    priority = require_choice(priority or "normal", SWAP_PRIORITIES, "priority")
    shift_id = _coerce_id(shift_id, "shift_id")

    shift = db.session.get(Shift, shift_id)
    if shift is None:
        raise ValidationError(f"Shift {shift_id} not found")
    if shift.user_id != requester_id:
        raise ValidationError("You can only request swaps for your own shifts")

    open_request = (
        db.session.query(SwapRequest.id)
        .filter(SwapRequest.shift_id == shift.id, SwapRequest.status == "pending")
        .first()
    )
    if open_request:
        raise ConflictError(f"Shift {shift.id} already has a pending swap request ({open_request.id})")

    now = utcnow()
    try:
        swap = SwapRequest(
            shift_id=shift.id,
            requester_id=requester_id,
            reason=reason,
            priority=priority,
            status="pending",
            created_at=now,
            updated_at=now,
        )
        db.session.add(swap)
        db.session.flush()

        audit_service.append_audit_entry(
            action=audit_service.SWAP_REQUEST_CREATED,
            entity_type=SWAP_ENTITY,
            entity_id=swap.id,
            user_id=requester_id,
            details={"reason": reason, "priority": priority},
        )

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return swap


def volunteer_for_shift(*, request_id: int, volunteer_id: str) -> SwapRequest:
    """
    Attach volunteer_id to a pending request that has no volunteer yet.

    Raises:
        NotFoundError: unknown request or volunteer
        ConflictError: volunteer is the requester, request is decided,
            already has a volunteer, or lost a concurrent race
    """
    swap = get_swap_request(request_id)
    if db.session.get(User, volunteer_id) is None:
        raise NotFoundError(f"User {volunteer_id} not found")

    if swap.requester_id == volunteer_id:
        raise ConflictError("You cannot volunteer for your own swap request")
    if swap.status != "pending":
        raise ConflictError(f"Swap request {swap.id} is already {swap.status}")
    if swap.volunteer_id is not None:
        raise ConflictError(f"Swap request {swap.id} already has a volunteer")

    try:
        result = db.session.execute(
            update(SwapRequest)
            .where(
                SwapRequest.id == swap.id,
                SwapRequest.status == "pending",
                SwapRequest.volunteer_id.is_(None),
                SwapRequest.requester_id != volunteer_id,
            )
            .values(volunteer_id=volunteer_id, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError(f"Swap request {swap.id} is no longer open for volunteers")

        audit_service.append_audit_entry(
            action=audit_service.VOLUNTEERED_FOR_SHIFT,
            entity_type=SWAP_ENTITY,
            entity_id=swap.id,
            user_id=volunteer_id,
            details={"request_id": swap.id},
        )

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    db.session.refresh(swap)
    return swap


def _decide(
    *,
    request_id: int,
    approver_id: str,
    decision: Decision,
    action: str,
    notes: str | None,
) -> SwapRequest:
    swap = get_swap_request(request_id)
    if db.session.get(User, approver_id) is None:
        raise NotFoundError(f"User {approver_id} not found")
    if swap.status != "pending":
        raise ConflictError(f"Swap request {swap.id} is already {swap.status}")

    notes = _clean_notes(notes)
    try:
        result = db.session.execute(
            update(SwapRequest)
            .where(SwapRequest.id == swap.id, SwapRequest.status == "pending")
            .values(
                status=decision,
                approved_by=approver_id,
                manager_notes=notes,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError(f"Swap request {swap.id} was decided concurrently")

        audit_service.append_audit_entry(
            action=action,
            entity_type=SWAP_ENTITY,
            entity_id=swap.id,
            user_id=approver_id,
            details={"notes": notes},
        )

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    db.session.refresh(swap)
    return swap


def approve_swap_request(*, request_id: int, approver_id: str, notes: str | None = None) -> SwapRequest:
    """pending -> approved. Raises NotFoundError / ConflictError."""
    return _decide(
        request_id=request_id,
        approver_id=approver_id,
        decision="approved",
        action=audit_service.SWAP_REQUEST_APPROVED,
        notes=notes,
    )


def reject_swap_request(*, request_id: int, approver_id: str, notes: str | None = None) -> SwapRequest:
    """pending -> rejected. Raises NotFoundError / ConflictError."""
    return _decide(
        request_id=request_id,
        approver_id=approver_id,
        decision="rejected",
        action=audit_service.SWAP_REQUEST_REJECTED,
        notes=notes,
    )


def list_available_swaps(caller_id: str) -> list[SwapRequestView]:
    query = _newest_first(_joined_query().filter(*available_filter(caller_id)))
    return [SwapRequestView.from_row(*row) for row in query.all()]


def list_pending_for_approval() -> list[SwapRequestView]:
    query = _newest_first(_joined_query().filter(SwapRequest.status == "pending"))
    return [SwapRequestView.from_row(*row) for row in query.all()]


def list_user_swap_requests(user_id: str) -> list[SwapRequest]:
    return (
        _newest_first(db.session.query(SwapRequest).filter(SwapRequest.requester_id == user_id))
        .all()
    )
