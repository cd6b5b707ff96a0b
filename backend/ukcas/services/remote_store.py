# SPDX-License-Identifier: Apache-2.0
"""RecordStore backed by the remote UKCAS REST API."""
from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ukcas.core.exceptions import (
    CertificateNotFound,
    DuplicateCertificate,
    InstituteNotFound,
    InvalidTransition,
    RecordExists,
    Unauthenticated,
    UpstreamError,
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
from ukcas.services.record_store import RecordStore

logger = logging.getLogger("ukcas.store.remote")


def _unwrap(body: Any) -> Any:
    """Strip the ``{status, data, message}`` envelope; bare objects pass through."""
    if isinstance(body, dict) and "status" in body and ("data" in body or body.get("status") == "error"):
        if body.get("status") != "success":
            return None
        return body.get("data")
    return body


def _as_date(value: Any) -> Any:
    if isinstance(value, str) and len(value) >= 10:
        return value[:10]
    return value


_STATUS_FIELDS = {"approved_status", "status", "is_active"}


def _status_of(data: dict) -> str:
    if data.get("approved_status"):
        return CertificateStatus.parse(data["approved_status"]).value
    if data.get("status") and str(data["status"]).lower() in ("pending", "approved", "rejected"):
        return CertificateStatus.parse(data["status"]).value
    return (CertificateStatus.APPROVED if str(data.get("is_active")) == "1" else CertificateStatus.PENDING).value


def _record(model, data: dict, id_fields: tuple[str, ...] = (), date_fields: tuple[str, ...] = ()):
    values = {k: v for k, v in data.items() if k in model.model_fields and v not in (None, "")}
    for key in id_fields:
        if key in values:
            values[key] = str(values[key])
    for key in date_fields:
        if key in values:
            values[key] = _as_date(values[key])
    return model.model_validate(values)


def _certificate(data: dict) -> Certificate:
    issue_date = _as_date(data.get("issue_date") or data.get("created_at"))
    valid_from = _as_date(data.get("from_date") or data.get("valid_from")) or issue_date
    values = {
        "certificate_id": str(data["certificate_id"]),
        "student_id": str(data["student_id"]),
        "course_id": str(data["course_id"]),
        "institute_id": str(data["institute_id"]),
        "issue_date": issue_date,
        "valid_from": valid_from,
        "valid_to": _as_date(data.get("to_date") or data.get("valid_to")) or valid_from,
        "status": _status_of(data),
        "created_by": str(data.get("created_by") or ""),
    }
    if data.get("created_at"):
        values["created_at"] = data["created_at"]
    if data.get("cost") not in (None, ""):
        values["cost"] = data["cost"]
    return Certificate.model_validate(values)


def _institute(data: dict) -> Institute:
    return _record(Institute, data, id_fields=("id",), date_fields=("accreditation_valid_until",))


def _course(data: dict) -> Course:
    return _record(Course, data, id_fields=("id", "institute_id"))


def _student(data: dict) -> Student:
    return _record(Student, data, id_fields=("id", "institute_id"), date_fields=("date_of_birth",))


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


class RemoteRecordStore(RecordStore):
    """Talks to the authoritative store.

    Every call carries the service credential (``X-API-KEY``) and, when given,
    the caller's bearer token. GETs are retried on connection errors and 5xx
    gateway responses; writes are sent exactly once.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        read_retries: int = 2,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        if session is None:
            session = requests.Session()
            retry = Retry(
                total=read_retries,
                backoff_factor=0.2,
                status_forcelist=(502, 503, 504),
                allowed_methods=frozenset({"GET"}),
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self._session = session

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        token: str | None = None,
        params: dict | None = None,
        payload: dict | None = None,
        form: dict | None = None,
    ) -> requests.Response:
        """One HTTP call. ``payload`` is sent as JSON, ``form`` as multipart form fields."""
        headers = {"X-API-KEY": self._api_key}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        kwargs: dict[str, Any] = {"headers": headers, "params": params, "timeout": self._timeout}
        if payload is not None:
            headers["Content-Type"] = "application/json"
            kwargs["json"] = {k: _jsonable(v) for k, v in payload.items()}
        if form is not None:
            kwargs["files"] = {k: (None, str(_jsonable(v))) for k, v in form.items() if v is not None}
        try:
            return self._session.request(method, f"{self.base_url}{path}", **kwargs)
        except requests.Timeout:
            logger.warning("%s timed out after %ss", operation, self._timeout)
            raise UpstreamError(operation, f"timed out after {self._timeout}s") from None
        except requests.RequestException as e:
            logger.warning("%s failed: %s", operation, e)
            raise UpstreamError(operation, str(e)) from e

    @staticmethod
    def _body(operation: str, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            raise UpstreamError(operation, f"malformed response (HTTP {response.status_code})") from None

    @staticmethod
    def _message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"HTTP {response.status_code}"

    def _check(self, operation: str, response: requests.Response) -> None:
        if response.status_code == 401:
            raise Unauthenticated(self._message(response))
        if not response.ok:
            raise UpstreamError(operation, f"HTTP {response.status_code}: {self._message(response)}")

    def _read(self, operation: str, path: str, token: str | None = None, params: dict | None = None) -> Any:
        """GET and unwrap; ``None`` when the store reports the record missing."""
        response = self._request(operation, "GET", path, token, params=params)
        if response.status_code == 404:
            return None
        self._check(operation, response)
        return _unwrap(self._body(operation, response))

    def _map(self, operation: str, mapper, data: Any):
        try:
            return mapper(data)
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(operation, f"malformed record: {e}") from e

    # Certificates

    def get_certificate(self, certificate_id: str, token: str | None = None) -> Certificate | None:
        data = self._read("get_certificate", f"/students-certificates/certificate/{certificate_id}", token)
        if not data:
            return None
        return self._map("get_certificate", _certificate, data)

    def find_certificates(
        self, student_id: str, course_id: str, institute_id: str, token: str | None = None
    ) -> list[CertificateSummary]:
        data = self._read(
            "find_certificates",
            "/students-certificates/institute/check-certificate",
            token,
            params={"student_id": student_id, "course_id": course_id, "institute_id": institute_id},
        )
        if not data or (isinstance(data, dict) and data.get("exists") is False):
            return []
        items = data if isinstance(data, list) else [data]
        return [
            self._map(
                "find_certificates",
                lambda d: CertificateSummary(
                    certificate_id=str(d.get("certificate_id") or d["id"]), status=_status_of(d)
                ),
                item,
            )
            for item in items
        ]

    def list_certificates(self, institute_id: str | None = None, token: str | None = None) -> list[Certificate]:
        path = f"/students-certificates/institute/{institute_id}" if institute_id else "/students-certificates"
        data = self._read("list_certificates", path, token)
        return [self._map("list_certificates", _certificate, item) for item in data or []]

    def create_certificate(self, draft: CertificateDraft, token: str | None = None) -> Certificate:
        operation = "create_certificate"
        payload = {
            "student_id": draft.student_id,
            "course_id": draft.course_id,
            "institute_id": draft.institute_id,
            "issue_date": draft.issue_date,
            "from_date": draft.valid_from,
            "to_date": draft.valid_to,
            "created_by": draft.created_by,
        }
        if draft.cost is not None:
            payload["cost"] = draft.cost
        response = self._request(operation, "POST", "/students-certificates", token, payload=payload)
        if response.status_code == 409:
            body = self._body(operation, response)
            body = body if isinstance(body, dict) else {}
            existing = body.get("data") if isinstance(body.get("data"), dict) else {}
            status = _status_of(existing) if _STATUS_FIELDS & existing.keys() else None
            raise DuplicateCertificate(status, existing.get("certificate_id"), str(body.get("message") or ""))
        self._check(operation, response)
        body = self._body(operation, response)
        if not isinstance(body, dict) or body.get("status") != "success":
            message = body.get("message") if isinstance(body, dict) else None
            raise UpstreamError(operation, message or "Failed to create the certificate.")
        data = body.get("data") or {}
        if not isinstance(data, dict) or not (data.get("certificate_id") or data.get("id")):
            raise UpstreamError(operation, "store did not return a certificate id")
        merged = {**{k: _jsonable(v) for k, v in payload.items()}, **data}
        merged.setdefault("certificate_id", data.get("id"))
        merged.setdefault("approved_status", CertificateStatus.PENDING.value)
        return self._map(operation, _certificate, merged)

    def set_certificate_status(self, certificate_id: str, status: str, token: str | None = None) -> str:
        operation = "set_certificate_status"
        target = CertificateStatus.parse(status)
        response = self._request(
            operation,
            "POST",
            "/students-certificates/approved-status",
            token,
            payload={"certificate_id": certificate_id, "status": target.value.lower()},
        )
        if response.status_code == 404:
            raise CertificateNotFound(certificate_id)
        if response.status_code == 409:
            raise InvalidTransition(certificate_id, "finalized", target.value)
        self._check(operation, response)
        return response.text

    # Institutes, courses, students

    def _create(self, operation: str, path: str, mapper, sent: dict, token: str | None, as_form: bool = False):
        if as_form:
            response = self._request(operation, "POST", path, token, form=sent)
        else:
            response = self._request(operation, "POST", path, token, payload=sent)
        if response.status_code == 409:
            raise RecordExists(self._message(response))
        self._check(operation, response)
        data = _unwrap(self._body(operation, response))
        if not isinstance(data, dict) or not data.get("id"):
            raise UpstreamError(operation, "store did not return an id")
        merged = {**{k: v for k, v in sent.items() if v is not None}, **data}
        return self._map(operation, mapper, merged)

    def create_institute(self, institute: Institute, token: str | None = None) -> Institute:
        sent = institute.model_dump(exclude={"id", "balance", "created_at"}, exclude_none=True)
        return self._create("create_institute", "/institutes", _institute, sent, token, as_form=True)

    def create_course(self, course: Course, token: str | None = None) -> Course:
        sent = course.model_dump(exclude={"id", "created_at"}, exclude_none=True)
        return self._create("create_course", "/institute-courses", _course, sent, token)

    def create_student(self, student: Student, token: str | None = None) -> Student:
        sent = student.model_dump(exclude={"id", "created_at"}, exclude_none=True)
        return self._create("create_student", "/registered-students", _student, sent, token, as_form=True)

    def get_institute(self, institute_id: str, token: str | None = None) -> Institute | None:
        data = self._read("get_institute", f"/institutes/{institute_id}", token)
        if not data:
            return None
        return self._map("get_institute", _institute, data)

    def get_course(self, course_id: str, token: str | None = None) -> Course | None:
        data = self._read("get_course", f"/institute-courses/{course_id}", token)
        if not data:
            return None
        return self._map("get_course", _course, data)

    def list_courses(self, institute_id: str, token: str | None = None) -> list[Course]:
        data = self._read("list_courses", "/institute-courses", token, params={"institute_id": institute_id})
        return [self._map("list_courses", _course, item) for item in data or []]

    def get_student(self, student_id: str, token: str | None = None) -> Student | None:
        data = self._read("get_student", f"/registered-students/{student_id}", token)
        if not data:
            return None
        return self._map("get_student", _student, data)

    def list_students(self, institute_id: str, token: str | None = None) -> list[Student]:
        data = self._read("list_students", f"/registered-students/institute/{institute_id}", token)
        return [self._map("list_students", _student, item) for item in data or []]

    # Balance

    def get_balance(self, institute_id: str, token: str | None = None) -> Decimal:
        data = self._read("get_balance", f"/institute-payments/balance/{institute_id}", token)
        if data is None:
            raise InstituteNotFound(institute_id)
        raw = data.get("balance") if isinstance(data, dict) else data
        try:
            return Decimal(str(raw if raw is not None else 0))
        except InvalidOperation:
            raise UpstreamError("get_balance", f"malformed balance {raw!r}") from None

    def adjust_balance(self, institute_id: str, delta: Decimal, token: str | None = None) -> Decimal:
        # The remote API only accepts absolute balances: read-modify-write, last write wins.
        new_balance = self.get_balance(institute_id, token) + Decimal(delta)
        operation = "adjust_balance"
        response = self._request(operation, "PATCH", f"/institutes/{institute_id}", token, payload={"balance": new_balance})
        if response.status_code == 404:
            raise InstituteNotFound(institute_id)
        self._check(operation, response)
        logger.info("Institute %s balance adjusted by %s to %s", institute_id, delta, new_balance)
        return new_balance
