# SPDX-License-Identifier: Apache-2.0
"""UKCAS client SDK: certificate issuance, approval and public verification over HTTP."""
from .client import UkcasClient
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

__all__ = [
    "UkcasClient",
    "UkcasClientError",
    "APIError",
    "AuthenticationError",
    "NotFoundError",
    "PermissionDeniedError",
    "RecordExistsError",
    "DuplicateCertificateError",
    "VerificationFailed",
]
