# SPDX-License-Identifier: Apache-2.0
"""Certificate issuance: validate, re-check duplicates under a per-triple lock, create Pending."""
from __future__ import annotations

import logging
from collections.abc import Mapping

from ukcas.config import settings
from ukcas.core.exceptions import DuplicateCertificate, InsufficientBalance, ValidationError
from ukcas.core.locks import KeyedLock
from ukcas.core.security import AuthContext, require_auth
from ukcas.models import Certificate, CertificateDraft
from ukcas.schemas import CertificateRequest, parse_payload
from ukcas.services import ledger_service
from ukcas.services.duplicate_guard import check_existing
from ukcas.services.record_service import get_course, get_student
from ukcas.services.record_store import RecordStore

logger = logging.getLogger("ukcas.issuance")

_triple_locks = KeyedLock()


def issue_certificate(store: RecordStore, auth: AuthContext | None, payload: CertificateRequest | Mapping) -> Certificate:
    """Create a Pending certificate for the caller's active institute."""
    auth = require_auth(auth)
    if not auth.institute_id:
        raise ValidationError("An active institute must be selected to issue certificates.")
    request = parse_payload(CertificateRequest, payload)
    institute_id = auth.institute_id

    student = get_student(store, request.student_id, auth)
    if student is None or student.institute_id != institute_id:
        raise ValidationError(f"Student {request.student_id} is not registered with institute {institute_id}.")
    course = get_course(store, request.course_id, auth)
    if course is None or course.institute_id != institute_id:
        raise ValidationError(f"Course {request.course_id} is not offered by institute {institute_id}.")

    cost = ledger_service.issuance_cost()
    draft = CertificateDraft(
        student_id=student.id,
        course_id=course.id,
        institute_id=institute_id,
        issue_date=request.issue_date,
        valid_from=request.valid_from,
        valid_to=request.valid_to,
        created_by=auth.actor,
        cost=cost,
    )

    with _triple_locks.hold((draft.student_id, draft.course_id, institute_id)):
        existing = check_existing(store, auth, draft.student_id, draft.course_id, institute_id)
        if existing is not None:
            logger.info(
                "Refused duplicate certificate for student %s course %s: %s is %s",
                draft.student_id,
                draft.course_id,
                existing.certificate_id,
                existing.status,
            )
            raise DuplicateCertificate(existing.status, existing.certificate_id)

        if settings.billing_model == "immediate":
            balance = store.get_balance(institute_id, auth.token)
            if balance < cost:
                raise InsufficientBalance(
                    f"You need at least {cost:.2f} to issue a certificate. Your current balance is {balance:.2f}."
                )
            ledger_service.charge(store, auth, institute_id, cost, "certificate submission")
            try:
                certificate = store.create_certificate(draft, auth.token)
            except Exception:
                ledger_service.refund(store, auth, institute_id, cost, "certificate creation failed")
                raise
        else:
            certificate = store.create_certificate(draft, auth.token)

    logger.info(
        "Issued certificate %s (Pending) for student %s course %s institute %s",
        certificate.certificate_id,
        draft.student_id,
        draft.course_id,
        institute_id,
    )
    return certificate
