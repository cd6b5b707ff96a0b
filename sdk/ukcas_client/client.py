# SPDX-License-Identifier: Apache-2.0
"""Main SDK class: UkcasClient. Thin wrapper over the certificate API."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

import requests

from .exceptions import (
    APIError,
    AuthenticationError,
    DuplicateCertificateError,
    NotFoundError,
    PermissionDeniedError,
    RecordExistsError,
    UkcasClientError,
    VerificationFailed,
)

_ERRORS_BY_STATUS = {401: AuthenticationError, 403: PermissionDeniedError, 404: NotFoundError}


def _iso(value: date | str) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


class UkcasClient:
    """Client for the UKCAS certificate API.

    ``token`` is the caller's bearer token; ``institute_id`` selects the active
    institute for issuance and listings; ``account_type="admin"`` marks an
    administrator session for approval, top-ups and institute registration.
    Verification needs none of them.
    """

    def __init__(
        self,
        api_base_url: str = "http://localhost:8000",
        token: str | None = None,
        institute_id: str | None = None,
        account_type: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.token = token
        self.institute_id = institute_id
        self.account_type = account_type
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.institute_id:
            headers["X-Institute-Id"] = self.institute_id
        if self.account_type:
            headers["X-Account-Type"] = self.account_type
        return headers

    def _request(self, method: str, path: str, params: dict | None = None, json: dict | None = None) -> dict[str, Any]:
        url = f"{self.api_base_url}{path}"
        try:
            resp = self._session.request(method, url, headers=self._headers(), params=params, json=json, timeout=self.timeout)
        except requests.RequestException as e:
            raise UkcasClientError(f"{method} {url} failed: {e}") from e
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if resp.status_code >= 400:
            self._raise(resp.status_code, body if isinstance(body, dict) else {})
        return body

    @staticmethod
    def _raise(status_code: int, body: dict) -> None:
        message = body.get("message") or f"HTTP {status_code}"
        code = body.get("error")
        if code == "record_exists":
            raise RecordExistsError(message, status_code, code, body)
        if code == "duplicate_certificate":
            raise DuplicateCertificateError(message, status_code, code, body)
        if "verified" in body:
            raise VerificationFailed(message, status_code, code, body)
        raise _ERRORS_BY_STATUS.get(status_code, APIError)(message, status_code, code, body)

    # Public

    def verify(self, certificate_id: str) -> dict[str, Any]:
        """Return ``{"certificate", "institute", "course"}`` or raise VerificationFailed."""
        return self._request("GET", f"/verify-certificate/{certificate_id}")["data"]

    def get_institute(self, institute_id: str) -> dict[str, Any]:
        return self._request("GET", f"/institutes/{institute_id}")["data"]

    def health(self) -> dict[str, Any]:
        return self._request("GET", "/system/health")

    # Institute staff

    def check_existing(self, student_id: str, course_id: str, institute_id: str | None = None) -> dict[str, Any]:
        params = {"studentId": student_id, "courseId": course_id}
        if institute_id:
            params["instituteId"] = institute_id
        return self._request("GET", "/certificates/check", params=params)

    def issue_certificate(
        self,
        student_id: str,
        course_id: str,
        issue_date: date | str,
        valid_from: date | str,
        valid_to: date | str,
    ) -> dict[str, Any]:
        """Submit a certificate; it stays Pending until an admin approves it."""
        payload = {
            "student_id": student_id,
            "course_id": course_id,
            "issue_date": _iso(issue_date),
            "valid_from": _iso(valid_from),
            "valid_to": _iso(valid_to),
        }
        return self._request("POST", "/certificates", json=payload)["data"]

    def get_certificate(self, certificate_id: str) -> dict[str, Any]:
        return self._request("GET", f"/certificates/{certificate_id}")["data"]

    def list_certificates(self, institute_id: str | None = None, all_institutes: bool = False) -> list[dict[str, Any]]:
        params: dict[str, Any] = {}
        if all_institutes:
            params["all"] = "true"
        elif institute_id:
            params["instituteId"] = institute_id
        return self._request("GET", "/certificates", params=params)["data"]

    def add_student(self, name: str, institute_id: str | None = None, **fields: Any) -> dict[str, Any]:
        """Register a student; the active institute is used unless an admin names another."""
        payload = {"name": name, **fields}
        if institute_id:
            payload["institute_id"] = institute_id
        return self._request("POST", "/students", json=payload)["data"]

    def add_course(self, course_name: str, institute_id: str | None = None, **fields: Any) -> dict[str, Any]:
        payload = {"course_name": course_name, **fields}
        if institute_id:
            payload["institute_id"] = institute_id
        return self._request("POST", "/courses", json=payload)["data"]

    # Admin

    def set_status(self, certificate_id: str, status: str) -> str:
        body = self._request("POST", f"/certificates/{certificate_id}/status", json={"status": status})
        return body.get("message", "")

    def approve(self, certificate_id: str) -> str:
        return self.set_status(certificate_id, "Approved")

    def reject(self, certificate_id: str) -> str:
        return self.set_status(certificate_id, "Rejected")

    def get_balance(self, institute_id: str) -> Decimal:
        data = self._request("GET", f"/institutes/{institute_id}/balance")["data"]
        return Decimal(str(data["balance"]))

    def top_up(self, institute_id: str, amount: Decimal | str | float) -> Decimal:
        data = self._request("POST", f"/institutes/{institute_id}/top-up", json={"amount": str(amount)})["data"]
        return Decimal(str(data["balance"]))

    def add_institute(self, name: str, institute_id: str | None = None, **fields: Any) -> dict[str, Any]:
        payload = {"name": name, **fields}
        if institute_id:
            payload["id"] = institute_id
        return self._request("POST", "/institutes", json=payload)["data"]
