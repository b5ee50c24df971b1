"""
Dashboard counters, department activity, coverage rate and decision export.
"""

from datetime import date, datetime, time, timedelta

from conftest import make_shift, make_user
from swapdesk.services import analytics_service, export_service, swap_service
from swapdesk.time_utils import utcnow


NOW = datetime(2024, 5, 30, 12, 0)


def _request(shift, requester, reason="cover please"):
    return swap_service.create_swap_request(requester_id=requester.id, shift_id=shift.id, reason=reason)


class TestDashboardCounters:

    def test_pending_then_completed(self, db_session, staff_a, staff_b, manager_m, shift_a):
        swap = _request(shift_a, staff_a)

        counters = analytics_service.dashboard_counters(staff_a.id, now=NOW)
        assert counters.pending_requests == 1
        assert counters.completed_swaps == 0

        swap_service.volunteer_for_shift(request_id=swap.id, volunteer_id=staff_b.id)
        swap_service.approve_swap_request(request_id=swap.id, approver_id=manager_m.id)

        counters = analytics_service.dashboard_counters(staff_a.id, now=NOW)
        assert counters.pending_requests == 0
        assert counters.completed_swaps == 1

    def test_upcoming_shifts_counts_today_and_later(self, db_session, staff_a):
        make_shift(db_session, staff_a, date(2024, 5, 29), time(9, 0), time(17, 0))
        make_shift(db_session, staff_a, date(2024, 5, 30), time(9, 0), time(17, 0))
        make_shift(db_session, staff_a, date(2024, 6, 1), time(9, 0), time(17, 0))

        counters = analytics_service.dashboard_counters(staff_a.id, now=NOW)
        assert counters.upcoming_shifts == 2

    def test_available_swaps_excludes_own(self, db_session, staff_a, staff_b, shift_a):
        _request(shift_a, staff_a)

        assert analytics_service.dashboard_counters(staff_a.id, now=NOW).available_swaps == 0
        assert analytics_service.dashboard_counters(staff_b.id, now=NOW).available_swaps == 1

    def test_staff_do_not_get_manager_fields(self, db_session, staff_a):
        data = analytics_service.dashboard_counters(staff_a.id, now=NOW).to_dict()
        assert set(data) == {"upcoming_shifts", "pending_requests", "completed_swaps", "available_swaps"}

    def test_manager_counters(self, db_session, staff_a, staff_b, manager_m):
        s1 = make_shift(db_session, staff_a, date(2024, 6, 1), time(9, 0), time(17, 0))
        s2 = make_shift(db_session, staff_a, date(2024, 6, 2), time(9, 0), time(17, 0))
        s3 = make_shift(db_session, staff_a, date(2024, 6, 3), time(9, 0), time(17, 0))
        r1, r2, r3 = _request(s1, staff_a), _request(s2, staff_a), _request(s3, staff_a)

        swap_service.volunteer_for_shift(request_id=r1.id, volunteer_id=staff_b.id)
        swap_service.approve_swap_request(request_id=r1.id, approver_id=manager_m.id)
        swap_service.reject_swap_request(request_id=r2.id, approver_id=manager_m.id)

        counters = analytics_service.dashboard_counters(manager_m.id)
        assert counters.manager.pending_approvals == 1
        assert counters.manager.approved_week == 1
        assert counters.manager.rejected_week == 1
        assert counters.manager.coverage_rate == 50.0

        data = counters.to_dict()
        assert data["pending_approvals"] == 1
        assert data["coverage_rate"] == 50.0

    def test_decisions_outside_window_not_counted(self, db_session, staff_a, manager_m, shift_a):
        swap = _request(shift_a, staff_a)
        swap_service.approve_swap_request(request_id=swap.id, approver_id=manager_m.id)

        later = utcnow() + timedelta(days=30)
        counters = analytics_service.dashboard_counters(manager_m.id, now=later, window_days=7)
        assert counters.manager.approved_week == 0


class TestCoverageRate:

    def test_none_when_nothing_decided(self, db_session, staff_a, shift_a):
        _request(shift_a, staff_a)
        assert analytics_service.coverage_rate() is None

    def test_approved_without_volunteer_is_not_covered(self, db_session, staff_a, staff_b, manager_m):
        shifts = [make_shift(db_session, staff_a, date(2024, 6, d), time(9, 0), time(17, 0)) for d in (1, 2, 3)]
        covered, bare, rejected = (_request(s, staff_a) for s in shifts)

        swap_service.volunteer_for_shift(request_id=covered.id, volunteer_id=staff_b.id)
        swap_service.approve_swap_request(request_id=covered.id, approver_id=manager_m.id)
        swap_service.approve_swap_request(request_id=bare.id, approver_id=manager_m.id)
        swap_service.reject_swap_request(request_id=rejected.id, approver_id=manager_m.id)

        assert analytics_service.coverage_rate() == 33.3


class TestDepartmentActivity:

    def test_zero_count_departments_and_ordering(self, db_session, staff_a):
        radiology = make_user(db_session, "staff-r", "Ravi", "Rao", "Radiology")
        icu = make_user(db_session, "staff-i", "Ines", "Ito", "ICU")

        p1 = make_shift(db_session, staff_a, date(2024, 6, 1), time(9, 0), time(17, 0))
        p2 = make_shift(db_session, staff_a, date(2024, 6, 2), time(9, 0), time(17, 0))
        r1 = make_shift(db_session, radiology, date(2024, 6, 1), time(9, 0), time(17, 0))
        make_shift(db_session, icu, date(2024, 6, 1), time(9, 0), time(17, 0))

        _request(p1, staff_a)
        _request(p2, staff_a)
        _request(r1, radiology)

        rows = analytics_service.department_activity()
        assert [(r.department, r.swap_count) for r in rows] == [
            ("Pharmacy", 2),
            ("Radiology", 1),
            ("ICU", 0),
        ]

    def test_empty(self, db_session):
        assert analytics_service.department_activity() == []


class TestRecentDecisions:

    def test_only_decided_newest_first(self, db_session, staff_a, manager_m):
        shifts = [make_shift(db_session, staff_a, date(2024, 6, d), time(9, 0), time(17, 0)) for d in (1, 2, 3)]
        first, second, still_pending = (_request(s, staff_a) for s in shifts)

        swap_service.approve_swap_request(request_id=first.id, approver_id=manager_m.id, notes="ok")
        swap_service.reject_swap_request(request_id=second.id, approver_id=manager_m.id, notes="no cover")

        decisions = analytics_service.recent_decisions()
        assert [d.id for d in decisions] == [second.id, first.id]
        assert decisions[0].status == "rejected"
        assert decisions[0].requester.display_name == "Alice Archer"
        assert still_pending.id not in [d.id for d in decisions]

    def test_limit(self, db_session, staff_a, manager_m):
        shifts = [make_shift(db_session, staff_a, date(2024, 6, d), time(9, 0), time(17, 0)) for d in range(1, 5)]
        for s in shifts:
            swap = _request(s, staff_a)
            swap_service.approve_swap_request(request_id=swap.id, approver_id=manager_m.id)

        assert len(analytics_service.recent_decisions(limit=2)) == 2


class TestCsvExport:

    def test_header_and_quoted_rows(self, db_session, staff_a, manager_m, shift_a):
        swap = _request(shift_a, staff_a)
        swap_service.approve_swap_request(
            request_id=swap.id, approver_id=manager_m.id, notes='covered by "Bob", thanks'
        )

        csv_text = export_service.decisions_to_csv(analytics_service.recent_decisions())
        lines = csv_text.splitlines()

        assert lines[0] == "Date,Requester,Shift Date,Shift Time,Status,Notes"
        assert lines[1].startswith('"')
        assert '"Alice Archer","2024-06-01","09:00-17:00","approved"' in lines[1]
        assert lines[1].endswith('"covered by ""Bob"", thanks"')

    def test_header_only_when_no_decisions(self, db_session):
        assert export_service.decisions_to_csv([]) == "Date,Requester,Shift Date,Shift Time,Status,Notes\n"
