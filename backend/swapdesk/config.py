# backend/swapdesk/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/swapdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///swapdesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Analytics windows and page sizes
    RECENT_DECISIONS_LIMIT = int(os.environ.get("RECENT_DECISIONS_LIMIT", "10"))
    AUDIT_LOG_LIMIT = int(os.environ.get("AUDIT_LOG_LIMIT", "20"))
    DECISION_WINDOW_DAYS = int(os.environ.get("DECISION_WINDOW_DAYS", "7"))

    # Browser origins allowed to call the API (comma-separated)
    CORS_ALLOWED_ORIGINS = tuple(
        o.strip()
        for o in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173",
        ).split(",")
        if o.strip()
    )
