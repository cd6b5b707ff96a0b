# SPDX-License-Identifier: Apache-2.0
"""All configuration via environment variables (12-factor). No hardcoded values."""
from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Record store
    store_backend: Literal["local", "remote"] = Field(default="local", description="Which record store to use")
    store_api_url: str | None = Field(default=None, description="Base URL of the remote record store")
    store_api_key: str | None = Field(default=None, description="Service credential sent as X-API-KEY")
    store_timeout_seconds: float = Field(default=10.0, gt=0, le=120)
    store_read_retries: int = Field(default=2, ge=0, le=10, description="Retries for idempotent reads only")

    # Local store database
    database_url: str = Field(default="sqlite:///./ukcas.db", description="Database URL for the local store")

    # Billing
    certificate_cost: Decimal = Field(default=Decimal("10.00"), description="Fixed issuance cost per certificate")
    billing_model: Literal["deferred", "immediate"] = Field(
        default="deferred",
        description="deferred: charge at approval; immediate: charge at submission, refund on rejection",
    )
    allow_negative_balance: bool = Field(default=False, description="Local store policy for deductions")

    # Issuance policy
    rejected_blocks_reissue: bool = Field(
        default=True,
        description="A Rejected certificate still blocks a new one for the same student/course/institute",
    )

    # HTTP
    environment: str = Field(default="development")
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    issue_rate_limit: str = Field(default="120/minute")
    verify_rate_limit: str = Field(default="300/minute")

    # Logging
    log_level: str = Field(default="INFO")

    @property
    def production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def remote_configured(self) -> bool:
        return bool(self.store_api_url and self.store_api_key)


settings = Settings()

LOGGER_NAME = "ukcas"
CERTIFICATE_ID_PREFIX = "UKCAS-"
