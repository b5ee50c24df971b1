# Overview: Service-layer operations for shifts; encapsulates business logic and database work.

"""
Shift Service

WHY: A swap request always references one concrete shift owned by the
requester. Shifts are created by their owner and are immutable afterwards.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Shift, User
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_shift,
    validate_payload,
)
from . import audit_service
from swapdesk.time_utils import to_hhmm, utcnow


SHIFT_POLICY = ModelValidationPolicy(
    writable_fields={"date", "start_time", "end_time", "department"},
    required_on_create={"date", "start_time", "end_time"},
)


def get_shift(shift_id: int) -> Shift | None:
    if shift_id is None:
        return None
    return db.session.get(Shift, shift_id)


def create_shift(*, user_id: str, shift_data: dict) -> Shift:
    """
    Create a shift owned by user_id.

    department defaults to the owner's department when omitted.

    Raises:
        NotFoundError: owner does not exist
        ValidationError: malformed date/time, zero-length shift, no department
    """
    owner = db.session.get(User, user_id)
    if owner is None:
        raise NotFoundError(f"User {user_id} not found")

    patch = validate_payload(model=Shift, payload=shift_data, policy=SHIFT_POLICY, partial=False)
    enforce_rules_shift(patch)
    if not patch.get("department"):
        patch["department"] = owner.department
    if not patch["department"]:
        raise ValidationError("department is required")

    try:
        shift = Shift(user_id=owner.id, created_at=utcnow(), **patch)
        db.session.add(shift)
        db.session.flush()

        audit_service.append_audit_entry(
            action=audit_service.SHIFT_CREATED,
            entity_type="shift",
            entity_id=shift.id,
            user_id=owner.id,
            details={
                "date": shift.date.isoformat(),
                "start_time": to_hhmm(shift.start_time),
                "end_time": to_hhmm(shift.end_time),
            },
        )

        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return shift


def list_user_shifts(user_id: str) -> list[Shift]:
    return (
        db.session.query(Shift)
        .filter(Shift.user_id == user_id)
        .order_by(Shift.date, Shift.start_time)
        .all()
    )
