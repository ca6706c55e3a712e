"""Per-request database session dependencies."""
from __future__ import annotations

from typing import Generator

from sqlalchemy.orm import Session

from core.db import SessionLocal
from core.logging_config import get_logger

LOGGER = get_logger(__name__)


def get_db() -> Generator[Session, None, None]:
    """
    Yield a session that commits when the request succeeds.

    Any exception raised by the route, including mapped application
    errors, rolls the transaction back before propagating.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        LOGGER.debug("Rolling back request transaction")
        db.rollback()
        raise
    finally:
        db.close()


def get_readonly_db() -> Generator[Session, None, None]:
    """Yield a session whose changes are always discarded."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


__all__ = ["get_db", "get_readonly_db"]
