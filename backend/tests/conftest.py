# SPDX-License-Identifier: Apache-2.0
"""pytest fixtures for backend tests: a seeded local record store and an API client bound to it."""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from ukcas.config import settings
from ukcas.core.security import AuthContext
from ukcas.database import create_db_and_tables, make_engine
from ukcas.main import app
from ukcas.models import Course, Institute, Student
from ukcas.services.local_store import LocalRecordStore
from ukcas.services.record_store import get_record_store

INSTITUTE_ID = "inst-1"
OTHER_INSTITUTE_ID = "inst-2"
STUDENT_ID = "stu-1"
SECOND_STUDENT_ID = "stu-2"
COURSE_ID = "course-1"
OTHER_COURSE_ID = "course-x"


@pytest.fixture
def store(tmp_path):
    """Local store on a throwaway SQLite file. Institute inst-1 starts with a balance of 100."""
    engine = make_engine(f"sqlite:///{tmp_path / 'store.db'}")
    create_db_and_tables(engine)
    local = LocalRecordStore(engine)
    local.save(
        Institute(
            id=INSTITUTE_ID,
            name="Northbridge College",
            code="UKCAS-NB-001",
            balance=Decimal("100.00"),
            accreditation_status="Accredited",
            country="United Kingdom",
        ),
        Institute(id=OTHER_INSTITUTE_ID, name="Southgate Academy", balance=Decimal("50.00")),
        Student(id=STUDENT_ID, institute_id=INSTITUTE_ID, name="Amelia Hart", email_address="amelia@example.com"),
        Student(id=SECOND_STUDENT_ID, institute_id=INSTITUTE_ID, name="Oliver Grant"),
        Student(id="stu-9", institute_id=OTHER_INSTITUTE_ID, name="Noah Price"),
        Course(id=COURSE_ID, institute_id=INSTITUTE_ID, course_name="Diploma in Data Analytics", course_code="DDA-1"),
        Course(id=OTHER_COURSE_ID, institute_id=OTHER_INSTITUTE_ID, course_name="Certificate in Welding"),
    )
    yield local
    engine.dispose()


@pytest.fixture
def auth():
    """Institute staff session with inst-1 active."""
    return AuthContext(token="staff-token", institute_id=INSTITUTE_ID, actor="registrar@northbridge.test")


@pytest.fixture
def admin():
    return AuthContext(token="admin-token", actor="admin@ukcas.test", account_type="admin")


@pytest.fixture
def payload():
    return {
        "student_id": STUDENT_ID,
        "course_id": COURSE_ID,
        "issue_date": "2024-06-01",
        "valid_from": "2024-06-01",
        "valid_to": "2027-05-31",
    }


@pytest.fixture
def cost():
    return Decimal(settings.certificate_cost)


@pytest.fixture
def immediate_billing(monkeypatch):
    monkeypatch.setattr(settings, "billing_model", "immediate")


@pytest.fixture
def client(store):
    """FastAPI test client using the seeded store."""
    app.dependency_overrides[get_record_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def staff_headers():
    return {"Authorization": "Bearer staff-token", "X-Institute-Id": INSTITUTE_ID}


@pytest.fixture
def admin_headers():
    return {"Authorization": "Bearer admin-token", "X-Actor": "admin@ukcas.test", "X-Account-Type": "admin"}
