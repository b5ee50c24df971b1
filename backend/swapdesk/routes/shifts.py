# Overview: Flask API routes for shifts; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_capability
from ..services import shift_service
from ..validation import NotFoundError, ValidationError


shifts_bp = Blueprint("shifts", __name__, url_prefix="/api/shifts")


@shifts_bp.get("")
@require_auth
@require_capability("MANAGE_OWN_SHIFTS")
def list_shifts_route():
    shifts = shift_service.list_user_shifts(g.current_user.id)
    return jsonify({"shifts": [s.to_dict() for s in shifts], "count": len(shifts)})


@shifts_bp.post("")
@require_auth
@require_capability("MANAGE_OWN_SHIFTS")
def create_shift_route():
    data = request.get_json(silent=True) or {}

    try:
        shift = shift_service.create_shift(user_id=g.current_user.id, shift_data=data)
        return jsonify({"shift": shift.to_dict()}), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create shift")
        return jsonify({"error": "Failed to create shift"}), 500
