# SPDX-License-Identifier: Apache-2.0
"""Approval state machine: Pending -> Approved | Rejected, with balance effects applied once.

Billing models:
  deferred  - cost is charged when the certificate is approved; rejection costs nothing.
  immediate - cost was charged at submission; rejection refunds it.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from ukcas.config import settings
from ukcas.core.exceptions import InvalidTransition, ValidationError
from ukcas.core.locks import KeyedLock
from ukcas.core.security import AuthContext, require_admin
from ukcas.models import Certificate, CertificateStatus
from ukcas.services import ledger_service
from ukcas.services.record_service import require_certificate
from ukcas.services.record_store import RecordStore
from ukcas.services.response_normalizer import ConfirmationMessage, normalize_status_response

logger = logging.getLogger("ukcas.approval")

_certificate_locks = KeyedLock()


def parse_target(new_status: str) -> CertificateStatus:
    try:
        target = CertificateStatus.parse(new_status)
    except ValueError:
        target = None
    if target is None or not target.terminal:
        raise ValidationError("Certificate ID and a valid status (Approved or Rejected) are required.")
    return target


def _cost_of(certificate: Certificate) -> Decimal:
    if certificate.cost is not None and Decimal(certificate.cost) > 0:
        return Decimal(certificate.cost)
    return ledger_service.issuance_cost()


def _confirm(certificate: Certificate, target: CertificateStatus, raw: str) -> ConfirmationMessage:
    confirmation = normalize_status_response(raw, default_message=f"Status updated to {target.value} successfully.")
    if not confirmation.ok:
        logger.warning(
            "Certificate %s set to %s; store reported: %s", certificate.certificate_id, target.value, confirmation.message
        )
    return confirmation


def set_status(
    store: RecordStore,
    auth: AuthContext | None,
    certificate_id: str,
    new_status: str,
) -> ConfirmationMessage:
    """Move a Pending certificate to Approved or Rejected. Administrators only."""
    auth = require_admin(auth)
    target = parse_target(new_status)

    with _certificate_locks.hold(certificate_id):
        certificate = require_certificate(store, certificate_id, auth)
        current = certificate.lifecycle
        if current.terminal:
            raise InvalidTransition(certificate.certificate_id, current.value, target.value)

        cost = _cost_of(certificate)
        reason = f"certificate {certificate.certificate_id} {target.value.lower()}"

        if target is CertificateStatus.APPROVED and settings.billing_model == "deferred":
            ledger_service.charge(store, auth, certificate.institute_id, cost, reason)
            try:
                raw = store.set_certificate_status(certificate.certificate_id, target.value, auth.token)
            except Exception:
                ledger_service.refund(store, auth, certificate.institute_id, cost, f"{reason} not recorded")
                raise
            # The write is persisted from here on; the charge stands whatever the body says.
            confirmation = _confirm(certificate, target, raw)
        else:
            raw = store.set_certificate_status(certificate.certificate_id, target.value, auth.token)
            confirmation = _confirm(certificate, target, raw)
            if target is CertificateStatus.REJECTED and settings.billing_model == "immediate":
                ledger_service.refund(store, auth, certificate.institute_id, cost, reason)

    logger.info("Certificate %s: %s -> %s (%s)", certificate_id, current.value, target.value, confirmation.message)
    return confirmation
