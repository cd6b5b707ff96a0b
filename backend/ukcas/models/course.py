# SPDX-License-Identifier: Apache-2.0
"""Course record."""
from datetime import datetime

from sqlmodel import Field, SQLModel

from ukcas.models.certificate import utcnow


class Course(SQLModel, table=True):
    __tablename__ = "courses"
    id: str = Field(primary_key=True)
    institute_id: str = Field(index=True)
    course_name: str
    course_code: str | None = None
    duration: str | None = None
    description: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
