# Overview: Flask API routes for the authenticated caller's identity and session.

"""
Auth Routes

Login itself belongs to the external identity provider. Users are synced with
`flask users upsert` and sessions are issued with `flask users issue-token`.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth
from ..permissions import capabilities_for_role
from ..services import session_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.get("/user")
@require_auth
def current_user_route():
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "capabilities": sorted(capabilities_for_role(user.role)),
    })


@auth_bp.post("/logout")
@require_auth
def logout_route():
    token = request.headers["Authorization"].split(" ", 1)[1]
    session_service.revoke_session(token)
    return jsonify({"message": "Logged out"})
