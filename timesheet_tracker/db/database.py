"""Database connection helpers and initialization for the SQLite store backend."""

import logging
import os
import sqlite3
from contextlib import contextmanager

from timesheet_tracker.core.config import settings
from timesheet_tracker.core.exceptions import TimesheetError

logger = logging.getLogger(__name__)


def database_path() -> str:
    """Extract the file path from the DATABASE_URL (strip "sqlite:///")."""
    return settings.DATABASE_URL.replace("sqlite:///", "")


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection with row factory."""
    db_path = database_path()
    logger.trace("Opening database connection to %s", db_path)
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_db():
    """Context manager that yields a database connection and auto-commits/rolls back."""
    conn = get_connection()
    try:
        yield conn
        conn.commit()
        logger.trace("Database transaction committed")
    except TimesheetError as exc:
        logger.info("Database transaction rolled back: %s", exc.detail)
        conn.rollback()
        raise
    except Exception:
        logger.error("Database transaction rolled back", exc_info=True)
        conn.rollback()
        raise
    finally:
        conn.close()
        logger.trace("Database connection closed")


def init_db() -> None:
    """Ensure the database directory exists and create all tables."""
    db_dir = os.path.dirname(database_path()) or "."
    os.makedirs(db_dir, exist_ok=True)
    logger.info("Initializing database schema in %s", db_dir)
    from timesheet_tracker.db import schema
    schema.create_tables()
