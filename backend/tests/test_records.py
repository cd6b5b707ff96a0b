# SPDX-License-Identifier: Apache-2.0
import pytest

from ukcas.core.exceptions import (
    CertificateNotFound,
    CourseNotFound,
    Forbidden,
    InstituteNotFound,
    InvalidArgument,
    RecordExists,
    StudentNotFound,
    Unauthenticated,
    ValidationError,
)
from ukcas.services import record_service


def test_fetchers_return_records(store):
    assert record_service.get_institute(store, "inst-1").name == "Northbridge College"
    assert record_service.get_course(store, " course-1 ").course_name == "Diploma in Data Analytics"
    assert record_service.get_student(store, "stu-2").name == "Oliver Grant"


def test_missing_record_is_none(store):
    assert record_service.get_certificate(store, "UKCAS-00000000") is None
    assert record_service.get_institute(store, "inst-404") is None


@pytest.mark.parametrize("blank", ["", "   ", None])
def test_blank_id_is_invalid(store, blank):
    with pytest.raises(InvalidArgument):
        record_service.get_course(store, blank)


def test_require_raises_not_found(store):
    with pytest.raises(CertificateNotFound):
        record_service.require_certificate(store, "UKCAS-00000000")
    with pytest.raises(InstituteNotFound):
        record_service.require_institute(store, "x")
    with pytest.raises(CourseNotFound):
        record_service.require_course(store, "x")
    with pytest.raises(StudentNotFound) as exc:
        record_service.require_student(store, "x")
    assert exc.value.status_code == 404


def test_listings_need_auth(store, auth):
    with pytest.raises(Unauthenticated):
        record_service.list_students(store, None, "inst-1")
    assert len(record_service.list_students(store, auth, "inst-1")) == 2
    assert [c.id for c in record_service.list_courses(store, auth, "inst-1")] == ["course-1"]
    assert record_service.list_certificates(store, auth) == []


def test_staff_register_students_and_courses_for_active_institute(store, auth):
    student = record_service.create_student(store, auth, {"name": "Isla Moore", "email_address": "isla@example.com"})
    assert student.institute_id == "inst-1"
    course = record_service.create_course(store, auth, {"courseName": "Certificate in Nursing", "courseCode": "CN-1"})
    assert course.institute_id == "inst-1"
    assert record_service.require_course(store, course.id).course_code == "CN-1"


def test_staff_cannot_register_for_another_institute(store, auth):
    with pytest.raises(Forbidden):
        record_service.create_student(store, auth, {"name": "Ada", "institute_id": "inst-2"})
    assert [s.id for s in store.list_students("inst-2")] == ["stu-9"]


def test_admin_names_the_institute(store, admin):
    with pytest.raises(ValidationError):
        record_service.create_course(store, admin, {"course_name": "Welding II"})
    with pytest.raises(InstituteNotFound):
        record_service.create_course(store, admin, {"course_name": "Welding II", "institute_id": "inst-404"})
    course = record_service.create_course(store, admin, {"course_name": "Welding II", "institute_id": "inst-2"})
    assert course.institute_id == "inst-2"


def test_institutes_are_registered_by_administrators(store, auth, admin):
    with pytest.raises(Forbidden):
        record_service.create_institute(store, auth, {"name": "Rogue College"})
    with pytest.raises(Unauthenticated):
        record_service.create_institute(store, None, {"name": "Rogue College"})
    with pytest.raises(ValidationError):
        record_service.create_institute(store, admin, {"name": ""})
    with pytest.raises(RecordExists):
        record_service.create_institute(store, admin, {"id": "inst-2", "name": "Copy"})

    institute = record_service.create_institute(store, admin, {"id": "inst-3", "name": "Eastfield Institute"})
    assert record_service.require_institute(store, "inst-3").name == institute.name
