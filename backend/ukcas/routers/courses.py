# SPDX-License-Identifier: Apache-2.0
"""Course registration and lookups for the issue form."""
from fastapi import APIRouter, Depends, Query

from ukcas.core.exceptions import ValidationError
from ukcas.core.security import AuthContext, get_auth_context, require_auth
from ukcas.schemas import CourseCreate
from ukcas.services import record_service
from ukcas.services.record_store import RecordStore, get_record_store

router = APIRouter(tags=["courses"])


@router.post("", status_code=201)
def courses_create(
    body: CourseCreate,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    course = record_service.create_course(store, auth, body)
    return {"status": "success", "data": course.model_dump()}


@router.get("")
def courses_list(
    institute_id: str | None = Query(default=None, alias="instituteId"),
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    auth = require_auth(auth)
    target = institute_id or auth.institute_id
    if not target:
        raise ValidationError("Institute ID is required.")
    return {"status": "success", "data": [c.model_dump() for c in record_service.list_courses(store, auth, target)]}


@router.get("/{course_id}")
def courses_get(
    course_id: str,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    auth = require_auth(auth)
    return {"status": "success", "data": record_service.require_course(store, course_id, auth).model_dump()}
