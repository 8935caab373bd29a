"""
Repository layer for Timesheet persistence.

``TimesheetRepository`` is the store contract the service layer talks to.
Two backends implement it:

* ``InMemoryTimesheetRepository`` – one process-wide instance, created at
  startup and kept on ``app.state``.
* ``SqliteTimesheetRepository`` – one instance per request connection.
  All SQL for the ``timesheets`` and ``timesheet_entries`` tables lives here.

Repositories never validate; every entry mutation also writes the status the
service derived for the resulting entry collection, so the pair is applied
atomically.
"""
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import date, datetime, timezone
from typing import Optional
import copy
import logging
import sqlite3
import threading
import uuid

from timesheet_tracker.core.logging_config import log_store_timing
from timesheet_tracker.models.timesheet import Entry, Timesheet, TimesheetStatus

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


class TimesheetRepository(ABC):
    """Store contract over timesheets and the entries they own."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @abstractmethod
    def list_all(self) -> list[Timesheet]:
        """Return every timesheet in insertion order."""

    @abstractmethod
    def get_by_id(self, timesheet_id: str) -> Optional[Timesheet]:
        """Return a timesheet by id or None if missing."""

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @abstractmethod
    def create(
        self,
        week: int,
        start_date: date,
        end_date: date,
        status: TimesheetStatus,
        timesheet_id: Optional[str] = None,
    ) -> Timesheet:
        """Insert a timesheet with no entries and return it."""

    @abstractmethod
    def update_fields(
        self,
        timesheet_id: str,
        week: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Optional[Timesheet]:
        """Merge the supplied timesheet fields and return the updated record."""

    @abstractmethod
    def add_entry(self, timesheet_id: str, entry: Entry, status: TimesheetStatus) -> Entry:
        """Append *entry* to the timesheet and store *status*."""

    @abstractmethod
    def replace_entry(
        self, timesheet_id: str, entry: Entry, status: TimesheetStatus
    ) -> Optional[Entry]:
        """Overwrite the entry with the same id in place and store *status*."""

    @abstractmethod
    def remove_entry(self, timesheet_id: str, entry_id: str, status: TimesheetStatus) -> bool:
        """Remove an entry if present, store *status*, return True if a row was removed."""


class InMemoryTimesheetRepository(TimesheetRepository):
    """
    Process-wide timesheet store backed by an ordered dict.

    Records handed out are copies; callers change state only through the
    write methods.
    """

    def __init__(self) -> None:
        logger.trace("Initializing InMemoryTimesheetRepository")
        self._timesheets: "OrderedDict[str, Timesheet]" = OrderedDict()
        self._mutex = threading.RLock()

    @log_store_timing
    def list_all(self) -> list[Timesheet]:
        with self._mutex:
            return [copy.deepcopy(t) for t in self._timesheets.values()]

    @log_store_timing
    def get_by_id(self, timesheet_id: str) -> Optional[Timesheet]:
        with self._mutex:
            timesheet = self._timesheets.get(timesheet_id)
            return copy.deepcopy(timesheet) if timesheet else None

    @log_store_timing
    def create(
        self,
        week: int,
        start_date: date,
        end_date: date,
        status: TimesheetStatus,
        timesheet_id: Optional[str] = None,
    ) -> Timesheet:
        timesheet = Timesheet(
            id=timesheet_id or new_id(),
            week=week,
            start_date=start_date,
            end_date=end_date,
            status=status,
        )
        logger.info("Creating timesheet record id=%s week=%s", timesheet.id, week)
        with self._mutex:
            self._timesheets[timesheet.id] = timesheet
            return copy.deepcopy(timesheet)

    @log_store_timing
    def update_fields(
        self,
        timesheet_id: str,
        week: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Optional[Timesheet]:
        with self._mutex:
            timesheet = self._timesheets.get(timesheet_id)
            if timesheet is None:
                return None
            logger.info("Updating timesheet record id=%s", timesheet_id)
            if week is not None:
                timesheet.week = week
            if start_date is not None:
                timesheet.start_date = start_date
            if end_date is not None:
                timesheet.end_date = end_date
            return copy.deepcopy(timesheet)

    @log_store_timing
    def add_entry(self, timesheet_id: str, entry: Entry, status: TimesheetStatus) -> Entry:
        logger.info("Appending entry id=%s to timesheet id=%s", entry.id, timesheet_id)
        with self._mutex:
            timesheet = self._timesheets[timesheet_id]
            timesheet.entries.append(copy.deepcopy(entry))
            timesheet.status = status
            return copy.deepcopy(entry)

    @log_store_timing
    def replace_entry(
        self, timesheet_id: str, entry: Entry, status: TimesheetStatus
    ) -> Optional[Entry]:
        with self._mutex:
            timesheet = self._timesheets[timesheet_id]
            for index, existing in enumerate(timesheet.entries):
                if existing.id == entry.id:
                    logger.info("Replacing entry id=%s in timesheet id=%s", entry.id, timesheet_id)
                    timesheet.entries[index] = copy.deepcopy(entry)
                    timesheet.status = status
                    return copy.deepcopy(entry)
        return None

    @log_store_timing
    def remove_entry(self, timesheet_id: str, entry_id: str, status: TimesheetStatus) -> bool:
        with self._mutex:
            timesheet = self._timesheets[timesheet_id]
            remaining = [e for e in timesheet.entries if e.id != entry_id]
            removed = len(remaining) != len(timesheet.entries)
            timesheet.entries = remaining
            timesheet.status = status
        logger.info("Entry remove id=%s affected %s rows", entry_id, int(removed))
        return removed


class SqliteTimesheetRepository(TimesheetRepository):
    """Data access layer for timesheet records stored in SQLite."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Store the database connection for query execution."""
        logger.trace("Initializing SqliteTimesheetRepository")
        self._conn = conn

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _entries_for(self, timesheet_id: str) -> list[Entry]:
        rows = self._conn.execute(
            "SELECT * FROM timesheet_entries WHERE timesheet_id = ? ORDER BY position",
            (timesheet_id,),
        ).fetchall()
        return [Entry.from_row(row) for row in rows]

    @log_store_timing
    def list_all(self) -> list[Timesheet]:
        logger.trace("Listing timesheets")
        rows = self._conn.execute(
            "SELECT * FROM timesheets ORDER BY position"
        ).fetchall()
        return [Timesheet.from_row(row, self._entries_for(row["id"])) for row in rows]

    @log_store_timing
    def get_by_id(self, timesheet_id: str) -> Optional[Timesheet]:
        logger.trace("Fetching timesheet id=%s", timesheet_id)
        row = self._conn.execute(
            "SELECT * FROM timesheets WHERE id = ?", (timesheet_id,)
        ).fetchone()
        return Timesheet.from_row(row, self._entries_for(row["id"])) if row else None

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @log_store_timing
    def create(
        self,
        week: int,
        start_date: date,
        end_date: date,
        status: TimesheetStatus,
        timesheet_id: Optional[str] = None,
    ) -> Timesheet:
        timesheet_id = timesheet_id or new_id()
        logger.info("Creating timesheet record id=%s week=%s", timesheet_id, week)
        now = datetime.now(tz=timezone.utc).isoformat()
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO timesheets (id, position, week, start_date, end_date, status, created_at, updated_at)
                VALUES (?, (SELECT COALESCE(MAX(position), 0) + 1 FROM timesheets), ?, ?, ?, ?, ?, ?)
                """,
                (
                    timesheet_id,
                    week,
                    start_date.isoformat(),
                    end_date.isoformat(),
                    status.value,
                    now,
                    now,
                ),
            )
        return self.get_by_id(timesheet_id)  # type: ignore[return-value]

    @log_store_timing
    def update_fields(
        self,
        timesheet_id: str,
        week: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Optional[Timesheet]:
        fields: dict = {}
        if week is not None:
            fields["week"] = week
        if start_date is not None:
            fields["start_date"] = start_date.isoformat()
        if end_date is not None:
            fields["end_date"] = end_date.isoformat()

        if not fields:
            logger.trace("No timesheet fields to update id=%s", timesheet_id)
            return self.get_by_id(timesheet_id)

        logger.info("Updating timesheet record id=%s", timesheet_id)
        fields["updated_at"] = datetime.now(tz=timezone.utc).isoformat()
        set_clause = ", ".join(f"{col} = ?" for col in fields)
        values = list(fields.values()) + [timesheet_id]
        with self._conn:
            self._conn.execute(
                f"UPDATE timesheets SET {set_clause} WHERE id = ?", values
            )
        return self.get_by_id(timesheet_id)

    def _write_status(self, timesheet_id: str, status: TimesheetStatus) -> None:
        self._conn.execute(
            "UPDATE timesheets SET status = ?, updated_at = ? WHERE id = ?",
            (status.value, datetime.now(tz=timezone.utc).isoformat(), timesheet_id),
        )

    @log_store_timing
    def add_entry(self, timesheet_id: str, entry: Entry, status: TimesheetStatus) -> Entry:
        logger.info("Appending entry id=%s to timesheet id=%s", entry.id, timesheet_id)
        now = datetime.now(tz=timezone.utc).isoformat()
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO timesheet_entries (
                    id, timesheet_id, position, project, type_of_work,
                    task_description, hours, entry_date, created_at, updated_at
                )
                VALUES (
                    ?, ?,
                    (SELECT COALESCE(MAX(position), 0) + 1 FROM timesheet_entries WHERE timesheet_id = ?),
                    ?, ?, ?, ?, ?, ?, ?
                )
                """,
                (
                    entry.id,
                    timesheet_id,
                    timesheet_id,
                    entry.project,
                    entry.type_of_work.value,
                    entry.task_description,
                    float(entry.hours),
                    entry.date.isoformat(),
                    now,
                    now,
                ),
            )
            self._write_status(timesheet_id, status)
        return entry

    @log_store_timing
    def replace_entry(
        self, timesheet_id: str, entry: Entry, status: TimesheetStatus
    ) -> Optional[Entry]:
        logger.info("Replacing entry id=%s in timesheet id=%s", entry.id, timesheet_id)
        with self._conn:
            cursor = self._conn.execute(
                """
                UPDATE timesheet_entries
                   SET project = ?, type_of_work = ?, task_description = ?,
                       hours = ?, entry_date = ?, updated_at = ?
                 WHERE timesheet_id = ? AND id = ?
                """,
                (
                    entry.project,
                    entry.type_of_work.value,
                    entry.task_description,
                    float(entry.hours),
                    entry.date.isoformat(),
                    datetime.now(tz=timezone.utc).isoformat(),
                    timesheet_id,
                    entry.id,
                ),
            )
            if cursor.rowcount == 0:
                return None
            self._write_status(timesheet_id, status)
        return entry

    @log_store_timing
    def remove_entry(self, timesheet_id: str, entry_id: str, status: TimesheetStatus) -> bool:
        logger.info("Deleting entry record id=%s", entry_id)
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM timesheet_entries WHERE timesheet_id = ? AND id = ?",
                (timesheet_id, entry_id),
            )
            self._write_status(timesheet_id, status)
        logger.info("Entry delete affected %s rows", cursor.rowcount)
        return cursor.rowcount > 0
