# SPDX-License-Identifier: Apache-2.0
"""Public certificate verification by ID.

A certificate is verified when it, its issuing institute and its course can
all be resolved in the authoritative store. There is no signature or hash.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from ukcas.core.exceptions import CertificateNotFound, InvalidArgument, UkcasError, UpstreamError
from ukcas.schemas import VerificationResult
from ukcas.services.record_service import get_certificate, get_course, get_institute
from ukcas.services.record_store import RecordStore

logger = logging.getLogger("ukcas.verification")


def _resolve(operation: str, fetch, record_id: str):
    try:
        record = fetch(record_id)
    except UpstreamError:
        raise
    except UkcasError as e:
        raise UpstreamError(operation, e.message) from e
    if record is None:
        raise UpstreamError(operation, f"record {record_id} not found")
    return record


def verify(store: RecordStore, certificate_id: str) -> VerificationResult:
    """Certificate + institute + course, or an error. Never a partial result."""
    certificate_id = str(certificate_id or "").strip()
    if not certificate_id:
        raise InvalidArgument("Certificate ID is required.")

    certificate = get_certificate(store, certificate_id)
    if certificate is None:
        logger.info("Verification of %s failed: no such certificate", certificate_id)
        raise CertificateNotFound(certificate_id)

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="verify") as pool:
        institute_future = pool.submit(_resolve, "get_institute", lambda i: get_institute(store, i), certificate.institute_id)
        course_future = pool.submit(_resolve, "get_course", lambda c: get_course(store, c), certificate.course_id)
        institute = institute_future.result()
        course = course_future.result()

    logger.info("Verified certificate %s (%s)", certificate_id, certificate.status)
    return VerificationResult(certificate=certificate, institute=institute, course=course)
