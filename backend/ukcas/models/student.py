# SPDX-License-Identifier: Apache-2.0
"""Student record."""
from datetime import date, datetime

from sqlmodel import Field, SQLModel

from ukcas.models.certificate import utcnow


class Student(SQLModel, table=True):
    __tablename__ = "students"
    id: str = Field(primary_key=True)
    institute_id: str = Field(index=True)
    name: str
    email_address: str = ""
    phone_number: str = ""
    date_of_birth: date | None = None
    address: str = ""
    country: str = ""
    created_at: datetime = Field(default_factory=utcnow)
