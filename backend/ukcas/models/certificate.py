# SPDX-License-Identifier: Apache-2.0
"""Certificate record, status enum and the derived summary/draft shapes."""
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CertificateStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @classmethod
    def parse(cls, value: str) -> "CertificateStatus":
        """Case-insensitive lookup; the remote store speaks lowercase."""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        raise ValueError(f"Unknown certificate status: {value!r}")

    @property
    def terminal(self) -> bool:
        return self is not CertificateStatus.PENDING


class Certificate(SQLModel, table=True):
    __tablename__ = "certificates"
    # Pending and Approved certificates are unique per triple; Rejected ones may repeat.
    __table_args__ = (
        Index(
            "uq_certificates_active_triple",
            "student_id",
            "course_id",
            "institute_id",
            unique=True,
            sqlite_where=text("status != 'Rejected'"),
            postgresql_where=text("status != 'Rejected'"),
        ),
    )
    certificate_id: str = Field(primary_key=True)
    student_id: str = Field(index=True)
    course_id: str = Field(index=True)
    institute_id: str = Field(index=True)
    issue_date: date
    valid_from: date
    valid_to: date
    status: str = CertificateStatus.PENDING.value
    cost: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)
    created_by: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None

    @property
    def lifecycle(self) -> CertificateStatus:
        return CertificateStatus.parse(self.status)


class CertificateSummary(SQLModel):
    certificate_id: str
    status: str


class CertificateDraft(SQLModel):
    """Everything the store needs to create a Pending certificate."""

    student_id: str
    course_id: str
    institute_id: str
    issue_date: date
    valid_from: date
    valid_to: date
    created_by: str = ""
    cost: Decimal | None = None
