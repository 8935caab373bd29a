"""
Domain models for weekly timesheets and the entries logged within them.

``derive_status`` is the single place that maps an entry collection to a
TimesheetStatus.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional
import logging

logger = logging.getLogger(__name__)

TARGET_WEEKLY_HOURS = 40


class TimesheetStatus(str, Enum):
    COMPLETED = "COMPLETED"
    INCOMPLETE = "INCOMPLETE"
    MISSING = "MISSING"


class TypeOfWork(str, Enum):
    BUG_FIXES = "Bug fixes"
    FEATURE_DEVELOPMENT = "Feature development"
    CODE_REVIEW = "Code review"
    TESTING = "Testing"
    DOCUMENTATION = "Documentation"


@dataclass
class Entry:
    id: str
    project: str
    type_of_work: TypeOfWork
    task_description: str
    hours: float
    date: date

    @classmethod
    def from_row(cls, row) -> "Entry":
        """Build an Entry from a sqlite3.Row object."""
        logger.trace("Hydrating Entry from database row")
        return cls(
            id=row["id"],
            project=row["project"],
            type_of_work=TypeOfWork(row["type_of_work"]),
            task_description=row["task_description"],
            hours=float(row["hours"]),
            date=date.fromisoformat(row["entry_date"]),
        )


@dataclass
class Timesheet:
    id: str
    week: int
    start_date: date
    end_date: date
    status: TimesheetStatus = TimesheetStatus.MISSING
    entries: list[Entry] = field(default_factory=list)

    @property
    def total_hours(self) -> float:
        return total_hours(self.entries)

    def contains(self, day: date) -> bool:
        """Return True when *day* lies within the inclusive start/end range."""
        return self.start_date <= day <= self.end_date

    def find_entry(self, entry_id: str) -> Optional[Entry]:
        return next((e for e in self.entries if e.id == entry_id), None)

    @classmethod
    def from_row(cls, row, entries: list[Entry]) -> "Timesheet":
        """Build a Timesheet from a sqlite3.Row object and its entry rows."""
        logger.trace("Hydrating Timesheet from database row")
        return cls(
            id=row["id"],
            week=row["week"],
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]),
            status=TimesheetStatus(row["status"]),
            entries=entries,
        )


def total_hours(entries: Iterable[Entry]) -> float:
    return sum(entry.hours for entry in entries)


def derive_status(entries: list[Entry]) -> TimesheetStatus:
    """
    Map an entry collection to its status.

    MISSING when there are no entries, COMPLETED once the logged hours reach
    TARGET_WEEKLY_HOURS, INCOMPLETE otherwise.
    """
    if not entries:
        return TimesheetStatus.MISSING
    if total_hours(entries) >= TARGET_WEEKLY_HOURS:
        return TimesheetStatus.COMPLETED
    return TimesheetStatus.INCOMPLETE
