# SPDX-License-Identifier: Apache-2.0
"""Pydantic request/response schemas."""
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Literal, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field as PydanticField, model_validator
from pydantic import ValidationError as PydanticValidationError

from ukcas.core.exceptions import ValidationError
from ukcas.models import Certificate, Course, Institute

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model: type[ModelT], payload: ModelT | Mapping | None) -> ModelT:
    """Validate a dict (or pass through a model instance); pydantic errors become ValidationError."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(dict(payload or {}))
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(details) from None


class CertificateRequest(BaseModel):
    """Issue form. The institute always comes from the caller's active institute."""

    model_config = ConfigDict(extra="ignore")

    student_id: str = PydanticField(..., min_length=1, validation_alias=AliasChoices("student_id", "studentId"))
    course_id: str = PydanticField(..., min_length=1, validation_alias=AliasChoices("course_id", "courseId"))
    issue_date: date = PydanticField(..., validation_alias=AliasChoices("issue_date", "issueDate"))
    valid_from: date = PydanticField(..., validation_alias=AliasChoices("valid_from", "from_date", "fromDate"))
    valid_to: date = PydanticField(..., validation_alias=AliasChoices("valid_to", "to_date", "toDate"))

    @model_validator(mode="after")
    def _check_range(self):
        if self.valid_from > self.valid_to:
            raise ValueError("valid_from must not be after valid_to")
        return self


class InstituteCreate(BaseModel):
    """Admin form for registering an institute. Balance starts at zero; top-ups add to it."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str = PydanticField(..., min_length=1, max_length=200)
    code: str = ""
    type: str = ""
    slug: str = ""
    accreditation_status: Literal["Accredited", "Conditional", "Pending", "Rejected"] = "Pending"
    accreditation_valid_until: date | None = None
    email: str = ""
    phone: str = ""
    website: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    postal_code: str = ""


class StudentCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    institute_id: str | None = PydanticField(default=None, validation_alias=AliasChoices("institute_id", "instituteId"))
    name: str = PydanticField(..., min_length=1, max_length=200)
    email_address: str = ""
    phone_number: str = ""
    date_of_birth: date | None = None
    address: str = ""
    country: str = ""


class CourseCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    institute_id: str | None = PydanticField(default=None, validation_alias=AliasChoices("institute_id", "instituteId"))
    course_name: str = PydanticField(..., min_length=1, max_length=200, validation_alias=AliasChoices("course_name", "courseName"))
    course_code: str | None = PydanticField(default=None, validation_alias=AliasChoices("course_code", "courseCode"))
    duration: str | None = None
    description: str | None = None


class StatusUpdate(BaseModel):
    status: str = PydanticField(..., max_length=20)


class TopUpRequest(BaseModel):
    amount: Decimal


class DuplicateCheck(BaseModel):
    exists: bool
    certificate_id: str | None = None
    status: str | None = None
    message: str | None = None


class VerificationResult(BaseModel):
    """Certificate joined with its issuing institute and course at read time."""

    certificate: Certificate
    institute: Institute
    course: Course
