# Overview: Service-layer operations for the audit trail; append-only writes and reads.

from __future__ import annotations

from typing import Any, Optional

from ..extensions import db
from ..models import AuditLog
from swapdesk.time_utils import utcnow
"""
Audit Log Invariants (authoritative)

- Append-only: no updates or deletes of existing entries.
- append_audit_entry() flushes but never commits. The caller owns the
  transaction, so the entry commits (or rolls back) with the mutation it records.
- created_at is assigned in Python (microsecond precision) so ordering within
  one request is stable; id breaks any remaining ties.
"""


# Action tags
SWAP_REQUEST_CREATED = "swap_request_created"
VOLUNTEERED_FOR_SHIFT = "volunteered_for_shift"
SWAP_REQUEST_APPROVED = "swap_request_approved"
SWAP_REQUEST_REJECTED = "swap_request_rejected"
SHIFT_CREATED = "shift_created"

DEFAULT_USER_LOG_LIMIT = 20


def append_audit_entry(
    *,
    action: str,
    entity_type: str,
    entity_id: int | str,
    user_id: str,
    details: Optional[dict[str, Any]] = None,
) -> AuditLog:
    """
    Append-only audit entry.

    - No domain logic here.
    - Joins the caller's transaction (flush only).
    """
    entry = AuditLog(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        user_id=user_id,
        details=details or {},
        created_at=utcnow(),
    )
    db.session.add(entry)
    db.session.flush()
    return entry


def list_for_user(user_id: str, limit: int = DEFAULT_USER_LOG_LIMIT) -> list[AuditLog]:
    return (
        db.session.query(AuditLog)
        .filter(AuditLog.user_id == user_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )


def list_for_entity(entity_type: str, entity_id: int | str) -> list[AuditLog]:
    """Full trail of one entity, oldest first."""
    return (
        db.session.query(AuditLog)
        .filter(AuditLog.entity_type == entity_type, AuditLog.entity_id == str(entity_id))
        .order_by(AuditLog.created_at.asc(), AuditLog.id.asc())
        .all()
    )
