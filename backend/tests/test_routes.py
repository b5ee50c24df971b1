"""
HTTP tests for SwapDesk.

Verifies:
- Unauthenticated requests return 401
- Staff denied manager operations (403)
- Lifecycle through the API, including 409 on stale transitions
- CSV export headers and body
"""

from datetime import date, timedelta

import pytest

from conftest import auth_headers_for, make_user


def _create_shift(client, headers, shift_date="2024-06-01", start="09:00", end="17:00"):
    resp = client.post(
        "/api/shifts",
        json={"date": shift_date, "start_time": start, "end_time": end},
        headers=headers,
    )
    assert resp.status_code == 201, resp.json
    return resp.json["shift"]


def _create_request(client, headers, shift_id, reason="doctor appointment", priority="urgent"):
    return client.post(
        "/api/swap-requests",
        json={"shift_id": shift_id, "reason": reason, "priority": priority},
        headers=headers,
    )


# =============================================================================
# UNAUTHENTICATED ACCESS — 401
# =============================================================================


class TestUnauthenticatedAccess:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/user"),
            ("GET", "/api/shifts"),
            ("POST", "/api/shifts"),
            ("GET", "/api/swap-requests"),
            ("POST", "/api/swap-requests"),
            ("GET", "/api/swap-requests/available"),
            ("POST", "/api/swap-requests/1/volunteer"),
            ("GET", "/api/manager/pending-requests"),
            ("POST", "/api/manager/approve/1"),
            ("POST", "/api/manager/reject/1"),
            ("GET", "/api/dashboard/stats"),
            ("GET", "/api/analytics/departments"),
            ("GET", "/api/export/csv"),
            ("GET", "/api/audit-logs"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token(self, client, db_session):
        resp = client.get("/api/auth/user", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_logout_revokes_token(self, client, staff_a_headers):
        assert client.post("/api/auth/logout", headers=staff_a_headers).status_code == 200
        assert client.get("/api/auth/user", headers=staff_a_headers).status_code == 401


# =============================================================================
# STAFF DENIED MANAGER OPERATIONS — 403
# =============================================================================


class TestStaffDenied:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/manager/pending-requests"),
            ("POST", "/api/manager/approve/1"),
            ("POST", "/api/manager/reject/1"),
            ("GET", "/api/manager/swap-requests/1/audit"),
            ("GET", "/api/analytics/departments"),
            ("GET", "/api/analytics/recent-decisions"),
            ("GET", "/api/export/csv"),
        ],
    )
    def test_forbidden(self, client, staff_a_headers, method, path):
        resp = getattr(client, method.lower())(path, headers=staff_a_headers)
        assert resp.status_code == 403
        assert "required_capability" in resp.json

    def test_current_user_lists_capabilities(self, client, staff_a_headers):
        resp = client.get("/api/auth/user", headers=staff_a_headers)
        assert resp.status_code == 200
        assert resp.json["user"]["id"] == "staff-a"
        assert "APPROVE_SWAPS" not in resp.json["capabilities"]
        assert "REQUEST_SWAP" in resp.json["capabilities"]


# =============================================================================
# LIFECYCLE OVER HTTP
# =============================================================================


class TestSwapFlow:

    def test_request_volunteer_approve(self, client, staff_a_headers, staff_b_headers, manager_headers):
        shift = _create_shift(client, staff_a_headers)

        resp = _create_request(client, staff_a_headers, shift["id"])
        assert resp.status_code == 201
        swap_id = resp.json["swap_request"]["id"]
        assert resp.json["swap_request"]["status"] == "pending"

        available = client.get("/api/swap-requests/available", headers=staff_b_headers).json
        assert [r["id"] for r in available["swap_requests"]] == [swap_id]
        assert available["swap_requests"][0]["requester"]["first_name"] == "Alice"

        resp = client.post(f"/api/swap-requests/{swap_id}/volunteer", headers=staff_b_headers)
        assert resp.status_code == 200
        assert resp.json["swap_request"]["volunteer_id"] == "staff-b"

        pending = client.get("/api/manager/pending-requests", headers=manager_headers).json
        assert pending["count"] == 1
        assert pending["swap_requests"][0]["volunteer"]["id"] == "staff-b"

        resp = client.post(f"/api/manager/approve/{swap_id}", json={"notes": "ok"}, headers=manager_headers)
        assert resp.status_code == 200
        body = resp.json["swap_request"]
        assert body["status"] == "approved"
        assert body["approved_by"] == "manager-m"
        assert body["manager_notes"] == "ok"

        trail = client.get(f"/api/manager/swap-requests/{swap_id}/audit", headers=manager_headers).json
        assert [e["action"] for e in trail["entries"]] == [
            "swap_request_created",
            "volunteered_for_shift",
            "swap_request_approved",
        ]

        resp = client.post(f"/api/manager/reject/{swap_id}", json={"notes": "late"}, headers=manager_headers)
        assert resp.status_code == 409

    def test_reject_without_body(self, client, staff_a_headers, manager_headers):
        shift = _create_shift(client, staff_a_headers)
        swap_id = _create_request(client, staff_a_headers, shift["id"]).json["swap_request"]["id"]

        resp = client.post(f"/api/manager/reject/{swap_id}", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json["swap_request"]["status"] == "rejected"
        assert resp.json["swap_request"]["manager_notes"] is None

    def test_create_validation_errors(self, client, staff_a_headers, staff_b_headers):
        shift = _create_shift(client, staff_a_headers)

        assert _create_request(client, staff_a_headers, shift["id"], reason="").status_code == 400
        assert _create_request(client, staff_a_headers, shift["id"], priority="later").status_code == 400
        assert _create_request(client, staff_b_headers, shift["id"]).status_code == 400
        assert _create_request(client, staff_a_headers, 999).status_code == 400

    def test_duplicate_pending_request(self, client, staff_a_headers):
        shift = _create_shift(client, staff_a_headers)
        assert _create_request(client, staff_a_headers, shift["id"]).status_code == 201
        assert _create_request(client, staff_a_headers, shift["id"]).status_code == 409

    def test_volunteer_conflicts(self, client, db_session, staff_a_headers, staff_b_headers):
        shift = _create_shift(client, staff_a_headers)
        swap_id = _create_request(client, staff_a_headers, shift["id"]).json["swap_request"]["id"]

        assert client.post(f"/api/swap-requests/{swap_id}/volunteer", headers=staff_a_headers).status_code == 409
        assert client.post(f"/api/swap-requests/{swap_id}/volunteer", headers=staff_b_headers).status_code == 200

        carol = make_user(db_session, "staff-c", "Carol", "Chen", "Radiology")
        resp = client.post(f"/api/swap-requests/{swap_id}/volunteer", headers=auth_headers_for(carol))
        assert resp.status_code == 409

    def test_not_found(self, client, staff_b_headers, manager_headers):
        assert client.post("/api/swap-requests/555/volunteer", headers=staff_b_headers).status_code == 404
        assert client.post("/api/manager/approve/555", headers=manager_headers).status_code == 404
        assert client.get("/api/swap-requests/555", headers=staff_b_headers).status_code == 404
        assert client.get("/api/manager/swap-requests/555/audit", headers=manager_headers).status_code == 404

    def test_my_requests(self, client, staff_a_headers):
        shift = _create_shift(client, staff_a_headers)
        swap_id = _create_request(client, staff_a_headers, shift["id"]).json["swap_request"]["id"]

        body = client.get("/api/swap-requests", headers=staff_a_headers).json
        assert body["count"] == 1
        assert body["swap_requests"][0]["id"] == swap_id

        single = client.get(f"/api/swap-requests/{swap_id}", headers=staff_a_headers).json
        assert single["swap_request"]["reason"] == "doctor appointment"

    def test_invalid_shift_payload(self, client, staff_a_headers):
        resp = client.post(
            "/api/shifts",
            json={"date": "2024-06-01", "start_time": "09:00", "end_time": "09:00"},
            headers=staff_a_headers,
        )
        assert resp.status_code == 400


# =============================================================================
# DASHBOARD, ANALYTICS, EXPORT
# =============================================================================


class TestReadModels:

    def test_dashboard_stats(self, client, staff_a_headers, manager_headers):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        shift = _create_shift(client, staff_a_headers, shift_date=tomorrow)
        _create_request(client, staff_a_headers, shift["id"])

        stats = client.get("/api/dashboard/stats", headers=staff_a_headers).json
        assert stats == {
            "upcoming_shifts": 1,
            "pending_requests": 1,
            "completed_swaps": 0,
            "available_swaps": 0,
        }

        manager_stats = client.get("/api/dashboard/stats", headers=manager_headers).json
        assert manager_stats["pending_approvals"] == 1
        assert manager_stats["available_swaps"] == 1
        assert manager_stats["coverage_rate"] is None

    def test_departments(self, client, staff_a_headers, manager_headers):
        shift = _create_shift(client, staff_a_headers)
        _create_request(client, staff_a_headers, shift["id"])

        body = client.get("/api/analytics/departments", headers=manager_headers).json
        assert body["departments"] == [{"department": "Pharmacy", "swap_count": 1}]

    def test_csv_export(self, client, staff_a_headers, manager_headers):
        shift = _create_shift(client, staff_a_headers)
        swap_id = _create_request(client, staff_a_headers, shift["id"]).json["swap_request"]["id"]
        client.post(f"/api/manager/approve/{swap_id}", json={"notes": "ok, covered"}, headers=manager_headers)

        resp = client.get("/api/export/csv", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.mimetype == "text/csv"
        assert "attachment" in resp.headers["Content-Disposition"]
        assert "swap-requests-export.csv" in resp.headers["Content-Disposition"]

        lines = resp.get_data(as_text=True).splitlines()
        assert lines[0] == "Date,Requester,Shift Date,Shift Time,Status,Notes"
        assert lines[1].endswith('"Alice Archer","2024-06-01","09:00-17:00","approved","ok, covered"')

    def test_recent_decisions_limit(self, client, staff_a_headers, manager_headers):
        for day in ("2024-06-01", "2024-06-02", "2024-06-03"):
            shift = _create_shift(client, staff_a_headers, shift_date=day)
            swap_id = _create_request(client, staff_a_headers, shift["id"]).json["swap_request"]["id"]
            client.post(f"/api/manager/approve/{swap_id}", headers=manager_headers)

        body = client.get("/api/analytics/recent-decisions?limit=2", headers=manager_headers).json
        assert body["count"] == 2

    def test_own_audit_log(self, client, staff_a_headers):
        shift = _create_shift(client, staff_a_headers)
        _create_request(client, staff_a_headers, shift["id"])

        body = client.get("/api/audit-logs", headers=staff_a_headers).json
        assert [e["action"] for e in body["entries"]] == ["swap_request_created", "shift_created"]


class TestSystem:

    def test_health(self, client, db_session):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"

    def test_version(self, client):
        assert client.get("/version").json["api_version"] == "1.0.0"
