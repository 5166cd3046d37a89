# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Database handle.

One `Database` is built at process start (see `kcc.app.create_app`) and passed
to the session store and credential verifier. Nothing in the package reaches
for a module-level engine.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kcc.errors import StorageError
from kcc.infra.models import Base

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///data/kcc.db"


def database_url_from_env() -> str:
    return os.getenv("KCC_DATABASE_URL", DEFAULT_DATABASE_URL)


def _engine_for(url: str) -> Engine:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True, pool_recycle=3600)

    database = parsed.database or ""
    if database in ("", ":memory:"):
        # all connections must share the single in-memory database
        return create_engine(
            url, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    Path(database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args={"check_same_thread": False})


class Database:
    def __init__(self, url: Optional[str] = None, *, engine: Optional[Engine] = None) -> None:
        self.url = url or database_url_from_env()
        self.engine = engine or _engine_for(self.url)
        self._sessions = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield an ORM session; commit on success, roll back on error.

        Backend errors are re-raised as `StorageError` with the original
        exception chained.
        """
        s = self._sessions()
        try:
            yield s
            s.commit()
        except SQLAlchemyError as exc:
            s.rollback()
            logger.exception("Database operation failed")
            raise StorageError() from exc
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    def create_all(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as exc:
            raise StorageError() from exc
        logger.info("Database schema ensured")

    def dispose(self) -> None:
        self.engine.dispose()
