# Overview: Liveness and version endpoints for deployment checks.

"""
System Routes

/health runs each probe inside a timer and reports 503 if any probe raised.
/version never exposes secrets, database credentials or internal paths.
"""

import sys
import time
from flask import Blueprint, current_app
from sqlalchemy import func

from ..extensions import db
from ..models import SessionToken, SwapRequest, User
from swapdesk.time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)

API_VERSION = "1.0.0"


def _probe_database() -> dict:
    return {
        "users": db.session.query(func.count(User.id)).scalar(),
        "pending_swap_requests": db.session.query(func.count(SwapRequest.id))
        .filter(SwapRequest.status == "pending")
        .scalar(),
    }


def _probe_sessions() -> dict:
    live = db.session.query(func.count(SessionToken.id)).filter(SessionToken.is_revoked.is_(False))
    return {
        "active_sessions": live.scalar(),
        # Expired but never revoked; harmless, validate_session rejects them
        "expired_pending_cleanup": live.filter(SessionToken.expires_at < utcnow()).scalar(),
    }


def run_check(name: str, probe) -> dict:
    started = time.perf_counter()
    try:
        details = probe()
    except Exception:
        current_app.logger.exception("Health check failed: %s", name)
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "error": f"{name} unavailable",
        }
    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "details": details,
    }


@system_bp.get("/health")
def health():
    """200 when every probe passes, 503 otherwise."""
    started = time.perf_counter()
    checks = {
        "database": run_check("database", _probe_database),
        "session_service": run_check("session_service", _probe_sessions),
    }
    healthy = all(c["status"] == "healthy" for c in checks.values())

    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.perf_counter() - started) * 1000, 2),
        "checks": checks,
    }
    return body, 200 if healthy else 503


@system_bp.get("/version")
def version():
    return {
        "api_version": API_VERSION,
        "environment": "development" if current_app.debug else "production",
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
