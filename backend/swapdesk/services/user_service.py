# Overview: Service-layer operations for user identity sync; encapsulates business logic and database work.

"""
User Identity Service

WHY: Users are owned by the external identity provider. This service keeps a
local copy in sync via an idempotent upsert keyed on the provider's subject id.
Users are never deleted.
"""

from __future__ import annotations

from ..extensions import db
from ..models import User
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_user,
    validate_payload,
)
from swapdesk.time_utils import utcnow


USER_POLICY = ModelValidationPolicy(
    writable_fields={
        "id",
        "email",
        "first_name",
        "last_name",
        "profile_image_url",
        "department",
        "role",
        "is_active",
    },
    required_on_create={"id"},
)


def get_user(user_id: str) -> User | None:
    if not user_id:
        return None
    return db.session.get(User, user_id)


def upsert_user(user_data: dict) -> User:
    """
    Create or update a user keyed on id.

    Only provided fields are written on update, so a partial sync (e.g. a
    changed avatar) does not clobber department or role.

    Raises:
        ValidationError: missing id, unknown/invalid fields, invalid role
    """
    patch = validate_payload(model=User, payload=user_data, policy=USER_POLICY, partial=False)
    enforce_rules_user(patch)

    user_id = patch.pop("id")
    if not user_id:
        raise ValidationError("id is required")

    now = utcnow()
    user = db.session.get(User, user_id)
    if user is None:
        user = User(id=user_id, created_at=now, updated_at=now, **patch)
        user.role = user.role or "staff"
        db.session.add(user)
    else:
        for key, value in patch.items():
            setattr(user, key, value)
        user.updated_at = now

    db.session.commit()
    return user


def list_users(*, department: str | None = None, role: str | None = None) -> list[User]:
    query = db.session.query(User)
    if department:
        query = query.filter(User.department == department)
    if role:
        query = query.filter(User.role == role)
    return query.order_by(User.last_name, User.first_name, User.id).all()
