# SPDX-License-Identifier: Apache-2.0
"""Student registration and lookups for the issue form."""
from fastapi import APIRouter, Depends, Query

from ukcas.core.exceptions import ValidationError
from ukcas.core.security import AuthContext, get_auth_context, require_auth
from ukcas.schemas import StudentCreate
from ukcas.services import record_service
from ukcas.services.record_store import RecordStore, get_record_store

router = APIRouter(tags=["students"])


@router.post("", status_code=201)
def students_create(
    body: StudentCreate,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    """Register a student with the active institute."""
    student = record_service.create_student(store, auth, body)
    return {"status": "success", "data": student.model_dump()}


@router.get("")
def students_list(
    institute_id: str | None = Query(default=None, alias="instituteId"),
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    auth = require_auth(auth)
    target = institute_id or auth.institute_id
    if not target:
        raise ValidationError("Institute ID is required.")
    return {"status": "success", "data": [s.model_dump() for s in record_service.list_students(store, auth, target)]}


@router.get("/{student_id}")
def students_get(
    student_id: str,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    auth = require_auth(auth)
    return {"status": "success", "data": record_service.require_student(store, student_id, auth).model_dump()}
