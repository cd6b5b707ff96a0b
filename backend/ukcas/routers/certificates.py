# SPDX-License-Identifier: Apache-2.0
"""Certificate listing, duplicate check, issuance and status updates."""
from fastapi import APIRouter, Depends, Query, Request

from ukcas.config import settings
from ukcas.core.exceptions import ValidationError
from ukcas.core.security import AuthContext, get_auth_context, rate_limit, require_auth
from ukcas.schemas import CertificateRequest, DuplicateCheck, StatusUpdate
from ukcas.services import record_service
from ukcas.services.approval_service import set_status
from ukcas.services.duplicate_guard import check_existing
from ukcas.services.issuance_service import issue_certificate
from ukcas.services.record_store import RecordStore, get_record_store

router = APIRouter(tags=["certificates"])


@router.get("")
def certificates_list(
    institute_id: str | None = Query(default=None, alias="instituteId"),
    all_institutes: bool = Query(default=False, alias="all"),
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    """Certificates of an institute (default: the active one), or every certificate with all=true."""
    auth = require_auth(auth)
    target = None if all_institutes else (institute_id or auth.institute_id)
    if not all_institutes and not target:
        raise ValidationError("Institute ID is required.")
    certificates = record_service.list_certificates(store, auth, target)
    return {"status": "success", "data": [c.model_dump() for c in certificates]}


@router.get("/check", response_model=DuplicateCheck)
def certificates_check(
    student_id: str = Query(default="", alias="studentId"),
    course_id: str = Query(default="", alias="courseId"),
    institute_id: str | None = Query(default=None, alias="instituteId"),
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    """Reactive duplicate check while the issue form is being filled in."""
    auth = require_auth(auth)
    existing = check_existing(store, auth, student_id, course_id, institute_id or auth.institute_id or "")
    if existing is None:
        return DuplicateCheck(exists=False)
    return DuplicateCheck(
        exists=True,
        certificate_id=existing.certificate_id,
        status=existing.status,
        message=f"A certificate is already {existing.status}: applying again is not allowed.",
    )


@router.post("", status_code=201)
@rate_limit(settings.issue_rate_limit)
def certificates_issue(
    request: Request,
    body: CertificateRequest,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    """Submit a certificate for admin approval."""
    certificate = issue_certificate(store, auth, body)
    return {
        "status": "success",
        "data": certificate.model_dump(),
        "message": f"Certificate {certificate.certificate_id} submitted and pending admin approval.",
    }


@router.get("/{certificate_id}")
def certificates_get(
    certificate_id: str,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    auth = require_auth(auth)
    certificate = record_service.require_certificate(store, certificate_id, auth)
    return {"status": "success", "data": certificate.model_dump()}


@router.post("/{certificate_id}/status")
def certificates_set_status(
    certificate_id: str,
    body: StatusUpdate,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    """Admin approval or rejection of a Pending certificate."""
    confirmation = set_status(store, auth, certificate_id, body.status)
    return {"status": "success", "message": confirmation.message}
