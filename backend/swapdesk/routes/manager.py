# Overview: Flask API routes for the manager approval queue; parses input and returns JSON responses.

"""
Manager Routes

SECURITY:
- Every route requires APPROVE_SWAPS (managers only).
- The approver recorded on a decision is always the authenticated caller.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_capability
from ..services import audit_service, swap_service
from ..validation import ConflictError, NotFoundError


manager_bp = Blueprint("manager", __name__, url_prefix="/api/manager")


@manager_bp.get("/pending-requests")
@require_auth
@require_capability("APPROVE_SWAPS")
def pending_requests_route():
    views = swap_service.list_pending_for_approval()
    return jsonify({"swap_requests": [v.to_dict() for v in views], "count": len(views)})


def _decide(decide, request_id: int, verb: str):
    data = request.get_json(silent=True) or {}
    try:
        swap = decide(request_id=request_id, approver_id=g.current_user.id, notes=data.get("notes"))
        return jsonify({"swap_request": swap.to_dict()})
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to %s swap request %s", verb, request_id)
        return jsonify({"error": f"Failed to {verb} request"}), 500


@manager_bp.post("/approve/<int:request_id>")
@require_auth
@require_capability("APPROVE_SWAPS")
def approve_route(request_id: int):
    return _decide(swap_service.approve_swap_request, request_id, "approve")


@manager_bp.post("/reject/<int:request_id>")
@require_auth
@require_capability("APPROVE_SWAPS")
def reject_route(request_id: int):
    return _decide(swap_service.reject_swap_request, request_id, "reject")


@manager_bp.get("/swap-requests/<int:request_id>/audit")
@require_auth
@require_capability("APPROVE_SWAPS")
def swap_request_audit_route(request_id: int):
    try:
        swap_service.get_swap_request(request_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    entries = audit_service.list_for_entity(swap_service.SWAP_ENTITY, request_id)
    return jsonify({"entries": [e.to_dict() for e in entries], "count": len(entries)})
