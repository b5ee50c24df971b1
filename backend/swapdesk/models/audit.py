from __future__ import annotations

from ..extensions import db
from swapdesk.time_utils import to_utc_z


class AuditLog(db.Model):
    """
    Who did what to which entity, and when.

    IMMUTABLE: Never update or delete. Append-only for audit integrity.

    Entries are written inside the same DB transaction as the mutation they
    record, so a rolled-back mutation leaves no entry and vice versa.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("ix_audit_logs_user_created", "user_id", "created_at"),
        db.Index("ix_audit_logs_entity", "entity_type", "entity_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # e.g. swap_request_created, volunteered_for_shift, swap_request_approved
    action = db.Column(db.String(64), nullable=False, index=True)
    entity_type = db.Column(db.String(64), nullable=False)
    entity_id = db.Column(db.String(64), nullable=False)

    user_id = db.Column(db.String(64), db.ForeignKey("users.id"), nullable=False, index=True)

    details = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    user = db.relationship("User", backref=db.backref("audit_logs", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "details": self.details or {},
            "created_at": to_utc_z(self.created_at),
        }
