"""Database connection and session management."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, List

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import NullPool

from core.config import get_settings
from core.logging_config import get_logger

LOGGER = get_logger(__name__)
SETTINGS = get_settings()

# Required tables that MUST exist for the system to function
REQUIRED_TABLES = [
    "organization",
    "user",
    "organization_member",
    "contact_list",
    "contact",
    "notification",
]

_is_sqlite = SETTINGS.database_url.startswith("sqlite")

if _is_sqlite:
    # SQLite with NullPool - no connection pooling to avoid exhaustion issues
    engine = create_engine(
        SETTINGS.database_url,
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest correctly
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=30000")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def begin_sqlite_transaction(conn):
        conn.exec_driver_sql("BEGIN")
else:
    # PostgreSQL/MySQL with connection pooling
    engine = create_engine(
        SETTINGS.database_url,
        pool_size=SETTINGS.db_pool_size,
        max_overflow=SETTINGS.db_max_overflow,
        pool_timeout=SETTINGS.db_pool_timeout,
        pool_pre_ping=True,
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Commits on success, rolls back on any exception.

    Yields:
        SQLAlchemy Session object.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _missing_tables(existing: List[str]) -> List[str]:
    return [t for t in REQUIRED_TABLES if t not in existing]


def init_db(create_missing_only: bool = True) -> Dict[str, Any]:
    """
    Initialize database tables.

    Args:
        create_missing_only: If True, only creates missing tables (safe).
                            If False, creates all tables (use for fresh install).

    Returns:
        Dict with initialization results.
    """
    # Import models to ensure they are registered with Base
    from core import models  # noqa: F401

    result: Dict[str, Any] = {
        "status": "success",
        "tables_created": [],
        "tables_existing": [],
        "warnings": [],
    }

    try:
        existing_tables = set(inspect(engine).get_table_names())

        if create_missing_only and existing_tables:
            missing = set(Base.metadata.tables.keys()) - existing_tables
            if missing:
                Base.metadata.create_all(
                    bind=engine,
                    tables=[Base.metadata.tables[name] for name in missing],
                )
                result["tables_created"] = sorted(missing)
                LOGGER.info(f"Created missing tables: {sorted(missing)}")
        else:
            Base.metadata.create_all(bind=engine)
            new_tables = set(inspect(engine).get_table_names())
            result["tables_created"] = sorted(new_tables - existing_tables)

        result["tables_existing"] = sorted(existing_tables)

        missing_required = _missing_tables(inspect(engine).get_table_names())
        if missing_required:
            result["warnings"].append(f"Missing required tables: {missing_required}")
            result["status"] = "warning"

    except Exception as e:
        result["status"] = "error"
        result["error"] = str(e)
        LOGGER.error(f"init_db failed: {e}")

    return result


def validate_database() -> Dict[str, Any]:
    """
    Validate database connection and required tables.

    Call this at application startup to ensure the database is ready.

    Returns:
        Dict with validation results.
    """
    result: Dict[str, Any] = {
        "status": "ok",
        "database_url": SETTINGS.database_url,
        "tables_found": [],
        "tables_missing": [],
        "errors": [],
    }

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        existing_tables = inspect(engine).get_table_names()
        result["tables_found"] = existing_tables

        missing = _missing_tables(existing_tables)
        result["tables_missing"] = missing
        if missing:
            result["status"] = "missing_tables"
            result["errors"].append(f"Missing required tables: {missing}")

    except Exception as e:
        result["status"] = "error"
        result["errors"].append(str(e))

    return result
