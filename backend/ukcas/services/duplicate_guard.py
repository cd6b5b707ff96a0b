# SPDX-License-Identifier: Apache-2.0
"""Duplicate-issuance guard: is a (student, course, institute) triple already covered?"""
from __future__ import annotations

from ukcas.config import settings
from ukcas.core.exceptions import InvalidArgument
from ukcas.core.security import AuthContext, require_auth
from ukcas.models import CertificateStatus, CertificateSummary
from ukcas.services.record_store import RecordStore


def check_existing(
    store: RecordStore,
    auth: AuthContext | None,
    student_id: str,
    course_id: str,
    institute_id: str,
) -> CertificateSummary | None:
    """First blocking certificate for the triple, or None when issuing is allowed. Read-only."""
    auth = require_auth(auth)
    ids = {"Student ID": student_id, "Course ID": course_id, "Institute ID": institute_id}
    missing = [name for name, value in ids.items() if not str(value or "").strip()]
    if missing:
        raise InvalidArgument(f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required for checking.")
    matches = store.find_certificates(str(student_id).strip(), str(course_id).strip(), str(institute_id).strip(), auth.token)
    for match in matches:
        if match.status == CertificateStatus.REJECTED.value and not settings.rejected_blocks_reissue:
            continue
        return match
    return None
