# SPDX-License-Identifier: Apache-2.0
"""SDK-specific exceptions."""


class UkcasClientError(Exception):
    """Base exception for SDK."""


class APIError(UkcasClientError):
    """API request failed (HTTP or error envelope)."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None, body: dict | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.body = body or {}


class AuthenticationError(APIError):
    """Missing or rejected bearer token."""


class NotFoundError(APIError):
    """Certificate, institute, course or student does not exist."""


class DuplicateCertificateError(APIError):
    """A certificate already exists for this student and course."""

    @property
    def certificate_id(self) -> str | None:
        return self.body.get("certificate_id")

    @property
    def certificate_status(self) -> str | None:
        return self.body.get("certificate_status")


class VerificationFailed(APIError):
    """Certificate could not be verified."""


class PermissionDeniedError(APIError):
    """Authenticated, but the action is reserved for administrators or another institute."""


class RecordExistsError(APIError):
    """An institute, student or course with this id is already registered."""
