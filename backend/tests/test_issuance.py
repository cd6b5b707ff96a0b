# SPDX-License-Identifier: Apache-2.0
"""Issuance workflow: validation, duplicate refusal, billing at submission."""
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from unittest.mock import Mock

import pytest

from ukcas.config import settings
from ukcas.core.exceptions import (
    DuplicateCertificate,
    InsufficientBalance,
    Unauthenticated,
    UpstreamError,
    ValidationError,
)
from ukcas.core.security import AuthContext
from ukcas.services.issuance_service import issue_certificate
from ukcas.services.record_store import RecordStore


def test_issue_creates_pending_certificate(store, auth, payload):
    cert = issue_certificate(store, auth, payload)
    assert cert.status == "Pending"
    assert cert.institute_id == "inst-1"
    assert cert.created_by == "registrar@northbridge.test"
    assert Decimal(cert.cost) == Decimal(settings.certificate_cost)
    # Deferred billing: nothing charged until approval.
    assert store.get_balance("inst-1") == Decimal("100.00")


def test_camel_case_payload_is_accepted(store, auth):
    cert = issue_certificate(
        store,
        auth,
        {"studentId": "stu-2", "courseId": "course-1", "issueDate": "2024-06-01", "fromDate": "2024-06-01", "toDate": "2025-06-01"},
    )
    assert cert.student_id == "stu-2"


def test_second_issue_for_same_triple_is_refused(store, auth, payload):
    first = issue_certificate(store, auth, payload)
    with pytest.raises(DuplicateCertificate) as exc:
        issue_certificate(store, auth, payload)
    assert exc.value.certificate_id == first.certificate_id
    assert exc.value.status == "Pending"
    assert "applying again is not allowed" in exc.value.message


def test_rejected_certificate_blocks_reissue(store, auth, payload):
    first = issue_certificate(store, auth, payload)
    store.set_certificate_status(first.certificate_id, "Rejected")
    with pytest.raises(DuplicateCertificate) as exc:
        issue_certificate(store, auth, payload)
    assert exc.value.status == "Rejected"


def test_rejected_certificate_can_be_reissued_when_allowed(store, auth, payload, monkeypatch):
    monkeypatch.setattr(settings, "rejected_blocks_reissue", False)
    first = issue_certificate(store, auth, payload)
    store.set_certificate_status(first.certificate_id, "Rejected")
    second = issue_certificate(store, auth, payload)
    assert second.certificate_id != first.certificate_id


def test_unauthenticated_touches_nothing(payload):
    store = Mock(spec=RecordStore)
    with pytest.raises(Unauthenticated):
        issue_certificate(store, None, payload)
    with pytest.raises(Unauthenticated):
        issue_certificate(store, AuthContext(token=""), payload)
    assert store.method_calls == []


def test_active_institute_required(store, admin, payload):
    with pytest.raises(ValidationError):
        issue_certificate(store, admin, payload)


@pytest.mark.parametrize(
    "change",
    [
        {"student_id": ""},
        {"course_id": None},
        {"issue_date": "not-a-date"},
        {"valid_from": "2027-06-01"},
    ],
)
def test_invalid_payload(store, auth, payload, change):
    payload.update(change)
    with pytest.raises(ValidationError):
        issue_certificate(store, auth, payload)
    assert store.list_certificates("inst-1") == []


def test_student_of_another_institute_is_refused(store, auth, payload):
    payload["student_id"] = "stu-9"
    with pytest.raises(ValidationError, match="not registered"):
        issue_certificate(store, auth, payload)


def test_course_of_another_institute_is_refused(store, auth, payload):
    payload["course_id"] = "course-x"
    with pytest.raises(ValidationError, match="not offered"):
        issue_certificate(store, auth, payload)


def test_concurrent_submissions_create_one_certificate(store, auth, payload):
    def submit(_):
        try:
            return issue_certificate(store, auth, payload)
        except DuplicateCertificate as e:
            return e

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(submit, range(8)))

    created = [o for o in outcomes if not isinstance(o, DuplicateCertificate)]
    assert len(created) == 1
    assert all(o.certificate_id == created[0].certificate_id for o in outcomes if isinstance(o, DuplicateCertificate))
    assert len(store.find_certificates("stu-1", "course-1", "inst-1")) == 1


def test_immediate_billing_charges_on_submission(store, auth, payload, cost, immediate_billing):
    issue_certificate(store, auth, payload)
    assert store.get_balance("inst-1") == Decimal("100.00") - cost


def test_immediate_billing_needs_balance(store, auth, payload, immediate_billing):
    store.adjust_balance("inst-1", Decimal("-95.00"))
    with pytest.raises(InsufficientBalance):
        issue_certificate(store, auth, payload)
    assert store.list_certificates("inst-1") == []
    assert store.get_balance("inst-1") == Decimal("5.00")


def test_immediate_billing_refunds_when_create_fails(store, auth, payload, immediate_billing, monkeypatch):
    def broken(draft, token=None):
        raise UpstreamError("create_certificate", "HTTP 500")

    monkeypatch.setattr(store, "create_certificate", broken)
    with pytest.raises(UpstreamError):
        issue_certificate(store, auth, payload)
    assert store.get_balance("inst-1") == Decimal("100.00")
