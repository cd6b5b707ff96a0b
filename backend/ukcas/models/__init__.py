# SPDX-License-Identifier: Apache-2.0
"""SQLModel record definitions."""
from ukcas.models.certificate import (
    Certificate,
    CertificateDraft,
    CertificateStatus,
    CertificateSummary,
)
from ukcas.models.course import Course
from ukcas.models.institute import Institute
from ukcas.models.student import Student

__all__ = [
    "Certificate",
    "CertificateDraft",
    "CertificateStatus",
    "CertificateSummary",
    "Course",
    "Institute",
    "Student",
]
