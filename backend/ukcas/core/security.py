# SPDX-License-Identifier: Apache-2.0
"""Auth context, rate limiting, error envelopes, security middleware."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from ukcas.config import settings
from ukcas.core.exceptions import Forbidden, UkcasError, Unauthenticated

_logger = logging.getLogger("ukcas")

_limiter = Limiter(key_func=get_remote_address)

ADMIN_ACCOUNT_TYPE = "admin"


def rate_limit(s: str):
    return _limiter.limit(s)


@dataclass(frozen=True)
class AuthContext:
    """Caller credentials: an opaque bearer token plus the active institute.

    ``account_type`` comes from the session provider (``admin`` for UKCAS
    administrators, anything else for institute staff).
    """

    token: str
    institute_id: str | None = None
    actor: str = ""
    account_type: str = ""

    @property
    def is_admin(self) -> bool:
        return self.account_type.lower() == ADMIN_ACCOUNT_TYPE


def require_auth(auth: AuthContext | None) -> AuthContext:
    """Raise Unauthenticated unless a bearer token is present."""
    if auth is None or not auth.token:
        raise Unauthenticated("Authentication is required.")
    return auth


def require_admin(auth: AuthContext | None) -> AuthContext:
    auth = require_auth(auth)
    if not auth.is_admin:
        raise Forbidden("Only UKCAS administrators may do this.")
    return auth


def get_auth_context(
    authorization: str | None = Header(default=None),
    x_institute_id: str | None = Header(default=None),
    x_actor: str | None = Header(default=None),
    x_account_type: str | None = Header(default=None),
) -> AuthContext | None:
    """Read ``Authorization: Bearer``, ``X-Institute-Id`` and ``X-Account-Type``; ``None`` for anonymous callers."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return AuthContext(
        token=token.strip(),
        institute_id=(x_institute_id or "").strip() or None,
        actor=x_actor or "",
        account_type=(x_account_type or "").strip(),
    )


def add_security_middleware(app: FastAPI) -> None:
    """Register exception handlers, security headers, rate limiting and CORS."""
    app.state.limiter = _limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(UkcasError)
    async def ukcas_error_handler(request: Request, exc: UkcasError):
        if exc.status_code >= 500:
            _logger.warning("%s %s -> %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"status": "error", "error": "validation_error", "message": details or "Invalid request."},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        error_id = str(uuid.uuid4())
        _logger.error("Unhandled exception %s: %s", error_id, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "error": "internal_error", "message": "Internal server error", "error_id": error_id},
        )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Content-Security-Policy"] = "default-src 'self'"
        if settings.production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000"
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
