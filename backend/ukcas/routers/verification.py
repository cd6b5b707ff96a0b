# SPDX-License-Identifier: Apache-2.0
"""Public certificate verification. Anonymous; the only route that needs no bearer token."""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ukcas.config import settings
from ukcas.core.exceptions import UkcasError
from ukcas.core.security import rate_limit
from ukcas.services.record_store import RecordStore, get_record_store
from ukcas.services.verification_service import verify

router = APIRouter(tags=["verification"])


@router.get("/{certificate_id}")
@rate_limit(settings.verify_rate_limit)
def verify_certificate(
    request: Request,
    certificate_id: str,
    store: RecordStore = Depends(get_record_store),
):
    """Verified: certificate, institute and course. Otherwise a single "Verification Failed" outcome."""
    try:
        result = verify(store, certificate_id)
    except UkcasError as e:
        return JSONResponse(
            status_code=e.status_code,
            content={
                "status": "error",
                "verified": False,
                "title": "Verification Failed",
                "error": e.code,
                "message": e.message,
            },
        )
    return {
        "status": "success",
        "verified": True,
        "data": {
            "certificate": result.certificate.model_dump(exclude={"cost"}),
            "institute": result.institute.model_dump(exclude={"balance"}),
            "course": result.course.model_dump(),
        },
    }
