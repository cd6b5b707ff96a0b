# SPDX-License-Identifier: Apache-2.0
from datetime import date

import pytest

from ukcas.config import settings
from ukcas.core.exceptions import InvalidArgument, Unauthenticated
from ukcas.models import CertificateDraft
from ukcas.services.duplicate_guard import check_existing


def _create(store, status=None):
    cert = store.create_certificate(
        CertificateDraft(
            student_id="stu-1",
            course_id="course-1",
            institute_id="inst-1",
            issue_date=date(2024, 6, 1),
            valid_from=date(2024, 6, 1),
            valid_to=date(2027, 5, 31),
        )
    )
    if status:
        store.set_certificate_status(cert.certificate_id, status)
    return cert


def test_no_certificate_allows_issuing(store, auth):
    assert check_existing(store, auth, "stu-1", "course-1", "inst-1") is None


@pytest.mark.parametrize("status", [None, "Approved"])
def test_pending_or_approved_blocks(store, auth, status):
    cert = _create(store, status)
    found = check_existing(store, auth, "stu-1", "course-1", "inst-1")
    assert found.certificate_id == cert.certificate_id
    assert found.status == (status or "Pending")


def test_rejected_blocks_by_default(store, auth):
    cert = _create(store, "Rejected")
    found = check_existing(store, auth, "stu-1", "course-1", "inst-1")
    assert (found.certificate_id, found.status) == (cert.certificate_id, "Rejected")


def test_rejected_may_be_reissued_when_configured(store, auth, monkeypatch):
    monkeypatch.setattr(settings, "rejected_blocks_reissue", False)
    _create(store, "Rejected")
    assert check_existing(store, auth, "stu-1", "course-1", "inst-1") is None


def test_other_triples_do_not_match(store, auth):
    _create(store)
    assert check_existing(store, auth, "stu-2", "course-1", "inst-1") is None
    assert check_existing(store, auth, "stu-1", "course-1", "inst-2") is None


def test_missing_ids(store, auth):
    with pytest.raises(InvalidArgument) as exc:
        check_existing(store, auth, "stu-1", "", " ")
    assert exc.value.message == "Course ID, Institute ID are required for checking."


def test_requires_auth(store):
    with pytest.raises(Unauthenticated):
        check_existing(store, None, "stu-1", "course-1", "inst-1")
