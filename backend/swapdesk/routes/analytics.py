# Overview: Flask API routes for dashboards, analytics and export; read-only.

"""
Analytics Routes

SECURITY:
- Dashboard counters and own audit trail require VIEW_DASHBOARD.
- Department activity and recent decisions require VIEW_ANALYTICS.
- CSV export requires EXPORT_DECISIONS.
"""

from flask import Blueprint, Response, request, jsonify, g, current_app

from ..decorators import require_auth, require_capability
from ..services import analytics_service, audit_service, export_service
from ..validation import NotFoundError


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api")


@analytics_bp.get("/dashboard/stats")
@require_auth
@require_capability("VIEW_DASHBOARD")
def dashboard_stats_route():
    try:
        counters = analytics_service.dashboard_counters(
            g.current_user.id,
            window_days=current_app.config["DECISION_WINDOW_DAYS"],
        )
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(counters.to_dict())


@analytics_bp.get("/analytics/departments")
@require_auth
@require_capability("VIEW_ANALYTICS")
def department_activity_route():
    rows = analytics_service.department_activity()
    return jsonify({"departments": [r.to_dict() for r in rows]})


@analytics_bp.get("/analytics/recent-decisions")
@require_auth
@require_capability("VIEW_ANALYTICS")
def recent_decisions_route():
    limit = request.args.get("limit", type=int) or current_app.config["RECENT_DECISIONS_LIMIT"]
    decisions = analytics_service.recent_decisions(limit=min(max(limit, 1), 100))
    return jsonify({"decisions": [d.to_dict() for d in decisions], "count": len(decisions)})


@analytics_bp.get("/export/csv")
@require_auth
@require_capability("EXPORT_DECISIONS")
def export_csv_route():
    decisions = analytics_service.recent_decisions(limit=current_app.config["RECENT_DECISIONS_LIMIT"])
    return Response(
        export_service.decisions_to_csv(decisions),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={export_service.EXPORT_FILENAME}"},
    )


@analytics_bp.get("/audit-logs")
@require_auth
@require_capability("VIEW_DASHBOARD")
def audit_logs_route():
    entries = audit_service.list_for_user(g.current_user.id, limit=current_app.config["AUDIT_LOG_LIMIT"])
    return jsonify({"entries": [e.to_dict() for e in entries], "count": len(entries)})
