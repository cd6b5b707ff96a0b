# SPDX-License-Identifier: Apache-2.0
"""Institute balance ledger: top-ups from admins, charges and refunds from the certificate workflow."""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from ukcas.config import settings
from ukcas.core.exceptions import InvalidArgument
from ukcas.core.security import AuthContext, require_admin, require_auth
from ukcas.services.record_store import RecordStore

logger = logging.getLogger("ukcas.ledger")


def parse_amount(value) -> Decimal:
    """Positive, finite currency amount or InvalidArgument."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f"Amount must be a number, got {value!r}.") from None
    if not amount.is_finite() or amount <= 0:
        raise InvalidArgument("Amount must be a positive value.")
    return amount


def issuance_cost() -> Decimal:
    cost = Decimal(settings.certificate_cost)
    if cost <= 0:
        raise InvalidArgument("Configured certificate cost must be positive.")
    return cost


def get_balance(store: RecordStore, auth: AuthContext | None, institute_id: str) -> Decimal:
    auth = require_auth(auth)
    return store.get_balance(institute_id, auth.token)


def top_up(store: RecordStore, auth: AuthContext | None, institute_id: str, amount) -> Decimal:
    """Add ``amount`` to the institute balance; returns the new balance."""
    auth = require_admin(auth)
    if not str(institute_id or "").strip():
        raise InvalidArgument("Institute ID is required.")
    amount = parse_amount(amount)
    new_balance = store.adjust_balance(institute_id, amount, auth.token)
    logger.info("Top-up of %s for institute %s by %s; balance now %s", amount, institute_id, auth.actor or "admin", new_balance)
    return new_balance


def charge(store: RecordStore, auth: AuthContext, institute_id: str, amount: Decimal, reason: str) -> Decimal:
    """Deduct a certificate cost. The store decides whether the balance may go negative."""
    new_balance = store.adjust_balance(institute_id, -amount, auth.token)
    logger.info("Charged %s to institute %s (%s); balance now %s", amount, institute_id, reason, new_balance)
    return new_balance


def refund(store: RecordStore, auth: AuthContext, institute_id: str, amount: Decimal, reason: str) -> Decimal:
    new_balance = store.adjust_balance(institute_id, amount, auth.token)
    logger.info("Refunded %s to institute %s (%s); balance now %s", amount, institute_id, reason, new_balance)
    return new_balance
