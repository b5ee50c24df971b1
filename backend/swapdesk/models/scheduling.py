from __future__ import annotations

from ..extensions import db
from swapdesk.time_utils import to_utc_z, to_hhmm


SWAP_PRIORITIES = ("normal", "urgent", "emergency")
SWAP_STATUSES = ("pending", "approved", "rejected")
DECIDED_STATUSES = ("approved", "rejected")


class Shift(db.Model):
    """
    A scheduled shift owned by one user.

    IMMUTABLE: Shifts are created by their owner and never updated or deleted.
    A shift may carry at most one pending swap request at a time
    (enforced in swap_service.create_swap_request).
    """
    __tablename__ = "shifts"
    __table_args__ = (
        db.Index("ix_shifts_user_date", "user_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False, index=True)

    date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)

    department = db.Column(db.String(128), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User", backref=db.backref("shifts", lazy=True))

    @property
    def time_range(self) -> str:
        return f"{to_hhmm(self.start_time)}-{to_hhmm(self.end_time)}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "start_time": to_hhmm(self.start_time),
            "end_time": to_hhmm(self.end_time),
            "department": self.department,
            "created_at": to_utc_z(self.created_at),
        }


class SwapRequest(db.Model):
    """
    A request to give away / trade a shift.

    LIFECYCLE:
    - pending:  created by the shift owner; a colleague may volunteer once
    - approved: manager accepted the exchange (terminal)
    - rejected: manager declined the exchange (terminal)

    IMMUTABLE: Once approved/rejected, no field changes. All transitions go
    through swap_service, which uses conditional UPDATEs so a stale or
    concurrent transition fails with ConflictError instead of overwriting.
    """
    __tablename__ = "swap_requests"
    __table_args__ = (
        db.Index("ix_swap_requests_status_created", "status", "created_at"),
        db.Index("ix_swap_requests_requester_status", "requester_id", "status"),
        db.Index("ix_swap_requests_status_updated", "status", "updated_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("shifts.id"), nullable=False, index=True)
    requester_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False, index=True)

    reason = db.Column(db.Text, nullable=False)

    # Priority: normal, urgent, emergency
    priority = db.Column(db.String(16), nullable=False, default="normal")

    # Status: pending, approved, rejected
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)

    volunteer_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=True, index=True)

    # Manager decision
    approved_by = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=True)
    manager_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    shift = db.relationship("Shift", backref=db.backref("swap_requests", lazy=True))
    requester = db.relationship("User", foreign_keys=[requester_id])
    volunteer = db.relationship("User", foreign_keys=[volunteer_id])
    approver = db.relationship("User", foreign_keys=[approved_by])

    @property
    def is_decided(self) -> bool:
        return self.status in DECIDED_STATUSES

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shift_id": self.shift_id,
            "requester_id": self.requester_id,
            "reason": self.reason,
            "priority": self.priority,
            "status": self.status,
            "volunteer_id": self.volunteer_id,
            "approved_by": self.approved_by,
            "manager_notes": self.manager_notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
