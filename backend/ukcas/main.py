# SPDX-License-Identifier: Apache-2.0
"""FastAPI app factory. Thin layer: security middleware + routers only."""
import logging

from fastapi import FastAPI

from ukcas.config import LOGGER_NAME, settings
from ukcas.core.security import add_security_middleware
from ukcas.routers import certificates, courses, institutes, students, system, verification


def create_app() -> FastAPI:
    logging.getLogger(LOGGER_NAME).setLevel(settings.log_level.upper())
    app = FastAPI(title="UKCAS Certificate API", version="0.1.0")

    add_security_middleware(app)

    app.include_router(certificates.router, prefix="/certificates")
    app.include_router(verification.router, prefix="/verify-certificate")
    app.include_router(institutes.router, prefix="/institutes")
    app.include_router(courses.router, prefix="/courses")
    app.include_router(students.router, prefix="/students")
    app.include_router(system.router, prefix="/system")

    return app


app = create_app()
