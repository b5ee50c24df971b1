# Overview: Flask API routes for swap requests; parses input and returns JSON responses.

"""
Swap Request Routes (staff side)

SECURITY:
- Creating/listing own requests requires REQUEST_SWAP.
- Browsing open requests and volunteering requires VOLUNTEER.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_capability
from ..services import swap_service
from ..validation import ConflictError, NotFoundError, ValidationError


swaps_bp = Blueprint("swaps", __name__, url_prefix="/api/swap-requests")


@swaps_bp.get("")
@require_auth
@require_capability("REQUEST_SWAP")
def list_my_swap_requests_route():
    requests_ = swap_service.list_user_swap_requests(g.current_user.id)
    return jsonify({"swap_requests": [r.to_dict() for r in requests_], "count": len(requests_)})


@swaps_bp.post("")
@require_auth
@require_capability("REQUEST_SWAP")
def create_swap_request_route():
    data = request.get_json(silent=True) or {}

    try:
        swap = swap_service.create_swap_request(
            requester_id=g.current_user.id,
            shift_id=data.get("shift_id"),
            reason=data.get("reason"),
            priority=data.get("priority"),
        )
        return jsonify({"swap_request": swap.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create swap request")
        return jsonify({"error": "Failed to create swap request"}), 500


@swaps_bp.get("/available")
@require_auth
@require_capability("VOLUNTEER")
def list_available_route():
    views = swap_service.list_available_swaps(g.current_user.id)
    return jsonify({"swap_requests": [v.to_dict() for v in views], "count": len(views)})


@swaps_bp.get("/<int:request_id>")
@require_auth
@require_capability("REQUEST_SWAP")
def get_swap_request_route(request_id: int):
    try:
        swap = swap_service.get_swap_request(request_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"swap_request": swap.to_dict()})


@swaps_bp.post("/<int:request_id>/volunteer")
@require_auth
@require_capability("VOLUNTEER")
def volunteer_route(request_id: int):
    try:
        swap = swap_service.volunteer_for_shift(request_id=request_id, volunteer_id=g.current_user.id)
        return jsonify({"swap_request": swap.to_dict()})
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to volunteer for shift")
        return jsonify({"error": "Failed to volunteer for shift"}), 500
