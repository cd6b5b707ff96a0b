# SPDX-License-Identifier: Apache-2.0
"""DB engine for the local record store."""
from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from ukcas.config import settings
from ukcas.models import Certificate, Course, Institute, Student  # noqa: F401 – register all models with SQLModel.metadata


def make_engine(database_url: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args)


engine = make_engine(settings.database_url)


def create_db_and_tables(bind: Engine | None = None) -> None:
    SQLModel.metadata.create_all(bind or engine)
