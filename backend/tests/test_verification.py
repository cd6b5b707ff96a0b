# SPDX-License-Identifier: Apache-2.0
"""Verification resolves certificate, institute and course, or fails as a whole."""
import pytest

from ukcas.core.exceptions import CertificateNotFound, InvalidArgument, UpstreamError
from ukcas.services.issuance_service import issue_certificate
from ukcas.services.verification_service import verify


@pytest.fixture
def certificate(store, auth, payload):
    return issue_certificate(store, auth, payload)


def test_verify_joins_institute_and_course(store, certificate):
    result = verify(store, certificate.certificate_id)
    assert result.certificate.certificate_id == certificate.certificate_id
    assert result.institute.name == "Northbridge College"
    assert result.course.course_name == "Diploma in Data Analytics"


def test_pending_certificates_still_verify_with_their_status(store, certificate):
    assert verify(store, certificate.certificate_id).certificate.status == "Pending"


def test_verify_needs_no_auth(store, certificate, monkeypatch):
    tokens = []
    original = store.get_certificate

    def spy(certificate_id, token=None):
        tokens.append(token)
        return original(certificate_id, token)

    monkeypatch.setattr(store, "get_certificate", spy)
    verify(store, certificate.certificate_id)
    assert tokens == [None]


def test_unknown_certificate(store):
    with pytest.raises(CertificateNotFound):
        verify(store, "UKCAS-00000000")


@pytest.mark.parametrize("blank", ["", "  ", None])
def test_blank_id(store, blank):
    with pytest.raises(InvalidArgument):
        verify(store, blank)


def test_missing_institute_fails_closed(store, certificate, monkeypatch):
    monkeypatch.setattr(store, "get_institute", lambda institute_id, token=None: None)
    with pytest.raises(UpstreamError) as exc:
        verify(store, certificate.certificate_id)
    assert exc.value.operation == "get_institute"


def test_course_lookup_error_fails_closed(store, certificate, monkeypatch):
    def broken(course_id, token=None):
        raise UpstreamError("get_course", "HTTP 503")

    monkeypatch.setattr(store, "get_course", broken)
    with pytest.raises(UpstreamError):
        verify(store, certificate.certificate_id)
