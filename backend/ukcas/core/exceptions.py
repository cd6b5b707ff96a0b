# SPDX-License-Identifier: Apache-2.0
"""Custom exception classes. Each carries the HTTP status it maps to."""
from __future__ import annotations


class UkcasError(Exception):
    """Base exception for the certificate core."""

    status_code = 500
    code = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.code

    def to_dict(self) -> dict:
        return {"status": "error", "error": self.code, "message": self.message}


class ValidationError(UkcasError):
    """Input validation failed."""

    status_code = 400
    code = "validation_error"


class InvalidArgument(ValidationError):
    """A required argument is missing or out of range."""

    code = "invalid_argument"


class Unauthenticated(UkcasError):
    """Authentication is required."""

    status_code = 401
    code = "unauthenticated"


class Forbidden(UkcasError):
    """This action is reserved for administrators."""

    status_code = 403
    code = "forbidden"


class NotFound(UkcasError):
    """Resource not found."""

    status_code = 404
    code = "not_found"
    entity = "Record"

    def __init__(self, entity_id: str, message: str = ""):
        self.entity_id = entity_id
        super().__init__(message or f'{self.entity} with ID "{entity_id}" not found.')


class CertificateNotFound(NotFound):
    entity = "Certificate"
    code = "certificate_not_found"


class InstituteNotFound(NotFound):
    entity = "Institute"


class CourseNotFound(NotFound):
    entity = "Course"


class StudentNotFound(NotFound):
    entity = "Student"


class RecordExists(UkcasError):
    """A record with this ID already exists."""

    status_code = 409
    code = "record_exists"


class DuplicateCertificate(UkcasError):
    """A certificate already exists for this student, course and institute."""

    status_code = 409
    code = "duplicate_certificate"

    def __init__(self, status: str | None, certificate_id: str | None = None, message: str = ""):
        self.status = status
        self.certificate_id = certificate_id
        if status:
            message = f"A certificate for this student and course is already {status}: applying again is not allowed."
        super().__init__(
            message or "A certificate for this student and course already exists: applying again is not allowed."
        )

    def to_dict(self) -> dict:
        return {**super().to_dict(), "certificate_status": self.status, "certificate_id": self.certificate_id}


class InvalidTransition(UkcasError):
    """Certificate status cannot change from its current state."""

    status_code = 409
    code = "invalid_transition"

    def __init__(self, certificate_id: str, current: str, requested: str):
        self.certificate_id = certificate_id
        self.current = current
        self.requested = requested
        super().__init__(f"Certificate {certificate_id} is already {current}; cannot set it to {requested}.")


class InsufficientBalance(UkcasError):
    """Institute balance does not cover the charge."""

    status_code = 409
    code = "insufficient_balance"


class UpstreamError(UkcasError):
    """Record store unreachable or returned an unusable response."""

    status_code = 502
    code = "upstream_error"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class ConfigurationError(UkcasError):
    """Service is misconfigured."""

    status_code = 500
    code = "configuration_error"
