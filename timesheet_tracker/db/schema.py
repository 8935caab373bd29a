"""
SQL DDL statements for the timesheet tables.
Tables are created in dependency order so foreign keys resolve correctly.
"""
from timesheet_tracker.db.database import get_connection

# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

CREATE_TIMESHEETS_TABLE = """
CREATE TABLE IF NOT EXISTS timesheets (
    id          TEXT    PRIMARY KEY,
    position    INTEGER NOT NULL,
    week        INTEGER NOT NULL,
    start_date  TEXT    NOT NULL,
    end_date    TEXT    NOT NULL,
    status      TEXT    NOT NULL DEFAULT 'MISSING'
                        CHECK(status IN ('COMPLETED', 'INCOMPLETE', 'MISSING')),
    created_at  TEXT    NOT NULL DEFAULT (datetime('now')),
    updated_at  TEXT    NOT NULL DEFAULT (datetime('now'))
);
"""

CREATE_TIMESHEET_ENTRIES_TABLE = """
CREATE TABLE IF NOT EXISTS timesheet_entries (
    id                TEXT    NOT NULL,
    timesheet_id      TEXT    NOT NULL REFERENCES timesheets(id) ON DELETE CASCADE,
    position          INTEGER NOT NULL,
    project           TEXT    NOT NULL,
    type_of_work      TEXT    NOT NULL,
    task_description  TEXT    NOT NULL DEFAULT '',
    hours             REAL    NOT NULL CHECK(hours > 0),
    entry_date        TEXT    NOT NULL,
    created_at        TEXT    NOT NULL DEFAULT (datetime('now')),
    updated_at        TEXT    NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (timesheet_id, id)
);
"""

CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_timesheet_entries_timesheet ON timesheet_entries(timesheet_id, position)",
]

ALL_TABLES = [
    CREATE_TIMESHEETS_TABLE,
    CREATE_TIMESHEET_ENTRIES_TABLE,
]


def create_tables() -> None:
    """Create all tables and indexes (IF NOT EXISTS – safe on every restart)."""
    conn = get_connection()
    try:
        cursor = conn.cursor()
        for ddl in ALL_TABLES:
            cursor.execute(ddl)
        for ddl in CREATE_INDEXES:
            cursor.execute(ddl)
        conn.commit()
    finally:
        conn.close()
