# SPDX-License-Identifier: Apache-2.0
"""Typed record fetchers and registration of institutes, students and courses.

A missing record is a normal outcome (None); require_* raise NotFound.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from ukcas.core.exceptions import (
    CertificateNotFound,
    CourseNotFound,
    Forbidden,
    InstituteNotFound,
    InvalidArgument,
    StudentNotFound,
    ValidationError,
)
from ukcas.core.security import AuthContext, require_admin, require_auth
from ukcas.models import Certificate, Course, Institute, Student
from ukcas.schemas import CourseCreate, InstituteCreate, StudentCreate, parse_payload
from ukcas.services.record_store import RecordStore

logger = logging.getLogger("ukcas.records")


def _token(auth: AuthContext | None) -> str | None:
    return auth.token if auth else None


def _clean_id(value, name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise InvalidArgument(f"{name} is required.")
    return text


def get_certificate(store: RecordStore, certificate_id: str, auth: AuthContext | None = None) -> Certificate | None:
    return store.get_certificate(_clean_id(certificate_id, "Certificate ID"), _token(auth))


def get_institute(store: RecordStore, institute_id: str, auth: AuthContext | None = None) -> Institute | None:
    return store.get_institute(_clean_id(institute_id, "Institute ID"), _token(auth))


def get_course(store: RecordStore, course_id: str, auth: AuthContext | None = None) -> Course | None:
    return store.get_course(_clean_id(course_id, "Course ID"), _token(auth))


def get_student(store: RecordStore, student_id: str, auth: AuthContext | None = None) -> Student | None:
    return store.get_student(_clean_id(student_id, "Student ID"), _token(auth))


def require_certificate(store: RecordStore, certificate_id: str, auth: AuthContext | None = None) -> Certificate:
    certificate = get_certificate(store, certificate_id, auth)
    if certificate is None:
        raise CertificateNotFound(certificate_id)
    return certificate


def require_institute(store: RecordStore, institute_id: str, auth: AuthContext | None = None) -> Institute:
    institute = get_institute(store, institute_id, auth)
    if institute is None:
        raise InstituteNotFound(institute_id)
    return institute


def require_course(store: RecordStore, course_id: str, auth: AuthContext | None = None) -> Course:
    course = get_course(store, course_id, auth)
    if course is None:
        raise CourseNotFound(course_id)
    return course


def require_student(store: RecordStore, student_id: str, auth: AuthContext | None = None) -> Student:
    student = get_student(store, student_id, auth)
    if student is None:
        raise StudentNotFound(student_id)
    return student


def list_certificates(
    store: RecordStore, auth: AuthContext | None, institute_id: str | None = None
) -> list[Certificate]:
    """Certificates of one institute, or every certificate when ``institute_id`` is None."""
    auth = require_auth(auth)
    return store.list_certificates(institute_id, auth.token)


def list_courses(store: RecordStore, auth: AuthContext | None, institute_id: str) -> list[Course]:
    auth = require_auth(auth)
    return store.list_courses(_clean_id(institute_id, "Institute ID"), auth.token)


def list_students(store: RecordStore, auth: AuthContext | None, institute_id: str) -> list[Student]:
    auth = require_auth(auth)
    return store.list_students(_clean_id(institute_id, "Institute ID"), auth.token)


def _owning_institute(store: RecordStore, auth: AuthContext, requested: str | None) -> str:
    """Staff register records for their active institute; administrators may name any institute."""
    institute_id = (requested or "").strip() or auth.institute_id
    if not institute_id:
        raise ValidationError("An active institute must be selected.")
    if institute_id != auth.institute_id and not auth.is_admin:
        raise Forbidden(f"Records can only be added to your active institute ({auth.institute_id}).")
    require_institute(store, institute_id, auth)
    return institute_id


def create_institute(store: RecordStore, auth: AuthContext | None, payload: InstituteCreate | Mapping) -> Institute:
    auth = require_admin(auth)
    request = parse_payload(InstituteCreate, payload)
    institute = store.create_institute(
        Institute(id=(request.id or "").strip(), **request.model_dump(exclude={"id"})), auth.token
    )
    logger.info("Institute %s (%s) registered by %s", institute.id, institute.name, auth.actor or "admin")
    return institute


def create_student(store: RecordStore, auth: AuthContext | None, payload: StudentCreate | Mapping) -> Student:
    auth = require_auth(auth)
    request = parse_payload(StudentCreate, payload)
    institute_id = _owning_institute(store, auth, request.institute_id)
    student = Student(
        id=(request.id or "").strip(), institute_id=institute_id, **request.model_dump(exclude={"id", "institute_id"})
    )
    return store.create_student(student, auth.token)


def create_course(store: RecordStore, auth: AuthContext | None, payload: CourseCreate | Mapping) -> Course:
    auth = require_auth(auth)
    request = parse_payload(CourseCreate, payload)
    institute_id = _owning_institute(store, auth, request.institute_id)
    course = Course(
        id=(request.id or "").strip(), institute_id=institute_id, **request.model_dump(exclude={"id", "institute_id"})
    )
    return store.create_course(course, auth.token)
