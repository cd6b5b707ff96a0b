# SPDX-License-Identifier: Apache-2.0
"""Institute registration, lookup and balance ledger endpoints."""
from fastapi import APIRouter, Depends

from ukcas.core.security import AuthContext, get_auth_context
from ukcas.schemas import InstituteCreate, TopUpRequest
from ukcas.services import ledger_service, record_service
from ukcas.services.record_store import RecordStore, get_record_store

router = APIRouter(tags=["institutes"])


@router.post("", status_code=201)
def institutes_create(
    body: InstituteCreate,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    """Register an institute (administrators only)."""
    institute = record_service.create_institute(store, auth, body)
    return {"status": "success", "data": institute.model_dump(), "message": f"Institute {institute.name} registered."}


@router.get("/{institute_id}")
def institutes_get(institute_id: str, store: RecordStore = Depends(get_record_store)):
    """Public institute profile (balance omitted)."""
    institute = record_service.require_institute(store, institute_id)
    return {"status": "success", "data": institute.model_dump(exclude={"balance"})}


@router.get("/{institute_id}/balance")
def institutes_balance(
    institute_id: str,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    balance = ledger_service.get_balance(store, auth, institute_id)
    return {"status": "success", "data": {"institute_id": institute_id, "balance": balance}}


@router.post("/{institute_id}/top-up")
def institutes_top_up(
    institute_id: str,
    body: TopUpRequest,
    auth: AuthContext | None = Depends(get_auth_context),
    store: RecordStore = Depends(get_record_store),
):
    """Admin top-up: adds to the balance."""
    balance = ledger_service.top_up(store, auth, institute_id, body.amount)
    return {
        "status": "success",
        "data": {"institute_id": institute_id, "balance": balance},
        "message": f"Added {body.amount:.2f} to the balance.",
    }
