# SPDX-License-Identifier: Apache-2.0
"""Institute record (issuer and balance holder)."""
from datetime import date, datetime
from decimal import Decimal

from sqlmodel import Field, SQLModel

from ukcas.models.certificate import utcnow


class Institute(SQLModel, table=True):
    __tablename__ = "institutes"
    id: str = Field(primary_key=True)
    name: str
    code: str = ""
    type: str = ""
    slug: str = ""
    balance: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    accreditation_status: str = "Pending"
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
    status: str = "Active"
    created_at: datetime = Field(default_factory=utcnow)
