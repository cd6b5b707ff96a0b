# SPDX-License-Identifier: Apache-2.0
"""RecordStore: the interface to the store that owns certificates, institutes, courses and students."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from functools import lru_cache

from ukcas.config import settings
from ukcas.core.exceptions import ConfigurationError
from ukcas.models import Certificate, CertificateDraft, CertificateSummary, Course, Institute, Student

logger = logging.getLogger("ukcas.store")


class RecordStore(ABC):
    """Logical operations consumed by the certificate core.

    ``token`` is the caller's bearer credential; ``None`` means an anonymous call
    carrying only the service credential. Single-record reads return ``None``
    when the record does not exist.
    """

    @abstractmethod
    def get_certificate(self, certificate_id: str, token: str | None = None) -> Certificate | None: ...

    @abstractmethod
    def find_certificates(
        self, student_id: str, course_id: str, institute_id: str, token: str | None = None
    ) -> list[CertificateSummary]: ...

    @abstractmethod
    def list_certificates(self, institute_id: str | None = None, token: str | None = None) -> list[Certificate]: ...

    @abstractmethod
    def create_certificate(self, draft: CertificateDraft, token: str | None = None) -> Certificate:
        """Create a Pending certificate. Raises DuplicateCertificate if the store rejects the triple."""

    @abstractmethod
    def set_certificate_status(self, certificate_id: str, status: str, token: str | None = None) -> str:
        """Write a terminal status. Returns the store's raw response body."""

    @abstractmethod
    def create_institute(self, institute: Institute, token: str | None = None) -> Institute:
        """Register an institute; the store assigns the id when none is given. Raises RecordExists."""

    @abstractmethod
    def create_course(self, course: Course, token: str | None = None) -> Course: ...

    @abstractmethod
    def create_student(self, student: Student, token: str | None = None) -> Student: ...

    @abstractmethod
    def get_institute(self, institute_id: str, token: str | None = None) -> Institute | None: ...

    @abstractmethod
    def get_course(self, course_id: str, token: str | None = None) -> Course | None: ...

    @abstractmethod
    def list_courses(self, institute_id: str, token: str | None = None) -> list[Course]: ...

    @abstractmethod
    def get_student(self, student_id: str, token: str | None = None) -> Student | None: ...

    @abstractmethod
    def list_students(self, institute_id: str, token: str | None = None) -> list[Student]: ...

    @abstractmethod
    def get_balance(self, institute_id: str, token: str | None = None) -> Decimal: ...

    @abstractmethod
    def adjust_balance(self, institute_id: str, delta: Decimal, token: str | None = None) -> Decimal:
        """Add ``delta`` (may be negative) to the balance in one update; return the new balance."""


@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    """Build the configured store once (FastAPI dependency)."""
    if settings.store_backend == "remote":
        if not settings.remote_configured:
            raise ConfigurationError("API URL or Key is not configured.")
        from ukcas.services.remote_store import RemoteRecordStore

        logger.info("Using remote record store at %s", settings.store_api_url)
        return RemoteRecordStore(
            settings.store_api_url,
            settings.store_api_key,
            timeout=settings.store_timeout_seconds,
            read_retries=settings.store_read_retries,
        )
    from ukcas.database import create_db_and_tables, engine
    from ukcas.services.local_store import LocalRecordStore

    create_db_and_tables()
    logger.info("Using local record store (%s)", settings.database_url)
    return LocalRecordStore(engine, allow_negative_balance=settings.allow_negative_balance)
