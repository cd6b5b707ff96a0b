# SPDX-License-Identifier: Apache-2.0
"""SQLModel-backed RecordStore for development, demos and tests.

Enforces the store-side guarantees the core relies on: one Pending/Approved
certificate per triple (partial unique index), status writes only out of
Pending, and atomic balance increments.
"""
from __future__ import annotations

import json
import logging
import secrets
import uuid
from decimal import Decimal

from sqlalchemy import select as sa_select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ukcas.config import CERTIFICATE_ID_PREFIX
from ukcas.core.exceptions import (
    CertificateNotFound,
    DuplicateCertificate,
    InstituteNotFound,
    InsufficientBalance,
    InvalidTransition,
    RecordExists,
)
from ukcas.models import (
    Certificate,
    CertificateDraft,
    CertificateStatus,
    CertificateSummary,
    Course,
    Institute,
    Student,
)
from ukcas.models.certificate import utcnow
from ukcas.services.record_store import RecordStore

logger = logging.getLogger("ukcas.store.local")

CENTS = Decimal("0.01")


class LocalRecordStore(RecordStore):
    def __init__(self, engine: Engine, allow_negative_balance: bool = False):
        self._engine = engine
        self._allow_negative_balance = allow_negative_balance

    def _session(self) -> Session:
        return Session(self._engine, expire_on_commit=False)

    def save(self, *records) -> None:
        """Insert or replace records (institutes, courses, students) directly."""
        with self._session() as session:
            for record in records:
                session.merge(record)
            session.commit()

    # Certificates

    def get_certificate(self, certificate_id: str, token: str | None = None) -> Certificate | None:
        with self._session() as session:
            return session.get(Certificate, certificate_id)

    def find_certificates(
        self, student_id: str, course_id: str, institute_id: str, token: str | None = None
    ) -> list[CertificateSummary]:
        with self._session() as session:
            stmt = (
                select(Certificate)
                .where(
                    Certificate.student_id == student_id,
                    Certificate.course_id == course_id,
                    Certificate.institute_id == institute_id,
                )
                .order_by(Certificate.created_at.asc())
            )
            return [
                CertificateSummary(certificate_id=c.certificate_id, status=c.status)
                for c in session.exec(stmt).all()
            ]

    def list_certificates(self, institute_id: str | None = None, token: str | None = None) -> list[Certificate]:
        with self._session() as session:
            stmt = select(Certificate)
            if institute_id is not None:
                stmt = stmt.where(Certificate.institute_id == institute_id)
            return list(session.exec(stmt.order_by(Certificate.created_at.desc())).all())

    def _new_certificate_id(self, session: Session) -> str:
        while True:
            candidate = f"{CERTIFICATE_ID_PREFIX}{secrets.randbelow(90_000_000) + 10_000_000}"
            if session.get(Certificate, candidate) is None:
                return candidate

    def create_certificate(self, draft: CertificateDraft, token: str | None = None) -> Certificate:
        with self._session() as session:
            certificate = Certificate(
                certificate_id=self._new_certificate_id(session),
                status=CertificateStatus.PENDING.value,
                **draft.model_dump(),
            )
            session.add(certificate)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                blocking = [
                    s
                    for s in self.find_certificates(draft.student_id, draft.course_id, draft.institute_id)
                    if s.status != CertificateStatus.REJECTED.value
                ]
                if not blocking:
                    raise
                raise DuplicateCertificate(blocking[0].status, blocking[0].certificate_id) from None
            session.refresh(certificate)
        logger.info("Created certificate %s for institute %s", certificate.certificate_id, draft.institute_id)
        return certificate

    def set_certificate_status(self, certificate_id: str, status: str, token: str | None = None) -> str:
        target = CertificateStatus.parse(status)
        with self._engine.begin() as conn:
            result = conn.execute(
                update(Certificate)
                .where(
                    Certificate.certificate_id == certificate_id,
                    Certificate.status == CertificateStatus.PENDING.value,
                )
                .values(status=target.value, updated_at=utcnow())
            )
            if result.rowcount == 0:
                current = conn.execute(
                    sa_select(Certificate.status).where(Certificate.certificate_id == certificate_id)
                ).scalar_one_or_none()
                if current is None:
                    raise CertificateNotFound(certificate_id)
                raise InvalidTransition(certificate_id, current, target.value)
        return json.dumps(
            {"status": "success", "message": f"Certificate {certificate_id} {target.value.lower()} successfully."}
        )

    # Institutes, courses, students

    def _insert(self, record):
        if not record.id:
            record.id = uuid.uuid4().hex
        with self._session() as session:
            session.add(record)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise RecordExists(f"{type(record).__name__} {record.id} already exists.") from None
            session.refresh(record)
        logger.info("Created %s %s", type(record).__name__.lower(), record.id)
        return record

    def create_institute(self, institute: Institute, token: str | None = None) -> Institute:
        return self._insert(institute)

    def create_course(self, course: Course, token: str | None = None) -> Course:
        return self._insert(course)

    def create_student(self, student: Student, token: str | None = None) -> Student:
        return self._insert(student)

    def get_institute(self, institute_id: str, token: str | None = None) -> Institute | None:
        with self._session() as session:
            return session.get(Institute, institute_id)

    def get_course(self, course_id: str, token: str | None = None) -> Course | None:
        with self._session() as session:
            return session.get(Course, course_id)

    def list_courses(self, institute_id: str, token: str | None = None) -> list[Course]:
        with self._session() as session:
            return list(session.exec(select(Course).where(Course.institute_id == institute_id)).all())

    def get_student(self, student_id: str, token: str | None = None) -> Student | None:
        with self._session() as session:
            return session.get(Student, student_id)

    def list_students(self, institute_id: str, token: str | None = None) -> list[Student]:
        with self._session() as session:
            return list(session.exec(select(Student).where(Student.institute_id == institute_id)).all())

    # Balance

    def get_balance(self, institute_id: str, token: str | None = None) -> Decimal:
        institute = self.get_institute(institute_id)
        if institute is None:
            raise InstituteNotFound(institute_id)
        return Decimal(institute.balance).quantize(CENTS)

    def adjust_balance(self, institute_id: str, delta: Decimal, token: str | None = None) -> Decimal:
        delta = Decimal(delta)
        with self._engine.begin() as conn:
            stmt = update(Institute).where(Institute.id == institute_id)
            if delta < 0 and not self._allow_negative_balance:
                stmt = stmt.where(Institute.balance + delta >= 0)
            result = conn.execute(stmt.values(balance=Institute.balance + delta))
            current = conn.execute(
                sa_select(Institute.balance).where(Institute.id == institute_id)
            ).scalar_one_or_none()
            if current is None:
                raise InstituteNotFound(institute_id)
            if result.rowcount == 0:
                raise InsufficientBalance(
                    f"Institute {institute_id} balance {Decimal(current).quantize(CENTS)} "
                    f"does not cover {(-delta).quantize(CENTS)}."
                )
        new_balance = Decimal(current).quantize(CENTS)
        logger.info("Institute %s balance adjusted by %s to %s", institute_id, delta, new_balance)
        return new_balance
