# SPDX-License-Identifier: Apache-2.0
"""Health and runtime info."""
from fastapi import APIRouter

from ukcas.config import settings

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    """Liveness/readiness."""
    return {"status": "ok"}


@router.get("/info")
def info():
    """Which store and billing model this deployment runs with."""
    return {
        "store_backend": settings.store_backend,
        "billing_model": settings.billing_model,
        "certificate_cost": str(settings.certificate_cost),
        "rejected_blocks_reissue": settings.rejected_blocks_reissue,
    }
