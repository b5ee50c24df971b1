"""
Pytest fixtures for SwapDesk backend tests.

Provides an in-memory application, a wiped database per test, the three
users the scenarios revolve around (two staff, one manager) and bearer
headers for each of them.
"""

from datetime import date, time

import pytest
from swapdesk import create_app
from swapdesk.extensions import db
from swapdesk.models import Shift, User
from swapdesk.services import session_service
from swapdesk.time_utils import utcnow


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    # Clear all data but keep schema
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()
    db.session.remove()


def make_user(db_session, user_id: str, first_name: str, last_name: str, department: str, role: str = "staff") -> User:
    now = utcnow()
    user = User(
        id=user_id,
        email=f"{user_id}@example.com",
        first_name=first_name,
        last_name=last_name,
        department=department,
        role=role,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db_session.add(user)
    db_session.commit()
    return user


def make_shift(db_session, owner: User, shift_date: date, start: time, end: time, department: str | None = None) -> Shift:
    shift = Shift(
        user_id=owner.id,
        date=shift_date,
        start_time=start,
        end_time=end,
        department=department or owner.department,
        created_at=utcnow(),
    )
    db_session.add(shift)
    db_session.commit()
    return shift


@pytest.fixture(scope='function')
def staff_a(db_session):
    """Requester in Pharmacy."""
    return make_user(db_session, "staff-a", "Alice", "Archer", "Pharmacy")


@pytest.fixture(scope='function')
def staff_b(db_session):
    """Colleague who volunteers."""
    return make_user(db_session, "staff-b", "Bob", "Baker", "Pharmacy")


@pytest.fixture(scope='function')
def manager_m(db_session):
    return make_user(db_session, "manager-m", "Maya", "Moss", "Pharmacy", role="manager")


@pytest.fixture(scope='function')
def shift_a(db_session, staff_a):
    """Alice's 2024-06-01 09:00-17:00 shift."""
    return make_shift(db_session, staff_a, date(2024, 6, 1), time(9, 0), time(17, 0))


def auth_headers_for(user: User) -> dict:
    """Issue a real session for user and return the Authorization header."""
    _, token = session_service.create_session(user.id)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def staff_a_headers(staff_a):
    return auth_headers_for(staff_a)


@pytest.fixture(scope='function')
def staff_b_headers(staff_b):
    return auth_headers_for(staff_b)


@pytest.fixture(scope='function')
def manager_headers(manager_m):
    return auth_headers_for(manager_m)
