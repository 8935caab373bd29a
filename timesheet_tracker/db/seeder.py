"""
Database seeder – loads sample timesheets into an empty store on startup.

⚠️  FOR DEVELOPMENT ONLY.
    Disable with SEED_MOCK_DATA=false before deploying to production.

Seeded statuses are stored exactly as listed; they are recomputed from the
entries the first time an entry in that week is added, changed, or removed.
"""
from datetime import date
import logging

from timesheet_tracker.models.timesheet import Entry, TimesheetStatus, TypeOfWork
from timesheet_tracker.repositories.timesheet_repository import TimesheetRepository

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Seed data – change these values freely during development
# ---------------------------------------------------------------------------
MOCK_TIMESHEETS = [
    {
        "id": "1",
        "week": 1,
        "start_date": date(2024, 1, 1),
        "end_date": date(2024, 1, 5),
        "status": TimesheetStatus.COMPLETED,
        "entries": [
            Entry(
                id="e1",
                project="Homepage Development",
                type_of_work=TypeOfWork.FEATURE_DEVELOPMENT,
                task_description="Implemented responsive navigation",
                hours=4,
                date=date(2024, 1, 1),
            ),
            Entry(
                id="e2",
                project="Homepage Development",
                type_of_work=TypeOfWork.FEATURE_DEVELOPMENT,
                task_description="Added hero section",
                hours=4,
                date=date(2024, 1, 1),
            ),
        ],
    },
    {
        "id": "2",
        "week": 2,
        "start_date": date(2024, 1, 8),
        "end_date": date(2024, 1, 12),
        "status": TimesheetStatus.COMPLETED,
        "entries": [],
    },
    {
        "id": "3",
        "week": 3,
        "start_date": date(2024, 1, 15),
        "end_date": date(2024, 1, 19),
        "status": TimesheetStatus.INCOMPLETE,
        "entries": [
            Entry(
                id="e3",
                project="Homepage Development",
                type_of_work=TypeOfWork.BUG_FIXES,
                task_description="Fixed mobile menu issue",
                hours=2,
                date=date(2024, 1, 15),
            ),
        ],
    },
    {
        "id": "4",
        "week": 4,
        "start_date": date(2024, 1, 22),
        "end_date": date(2024, 1, 26),
        "status": TimesheetStatus.COMPLETED,
        "entries": [],
    },
    {
        "id": "5",
        "week": 5,
        "start_date": date(2024, 1, 29),
        "end_date": date(2024, 2, 2),
        "status": TimesheetStatus.MISSING,
        "entries": [],
    },
]


def seed_timesheets(repo: TimesheetRepository) -> None:
    """
    Insert the sample timesheets if the store is empty.
    Safe to call on every startup – it is a no-op when data is present.
    """
    if repo.list_all():
        logger.info("Seeder: timesheets already present – skipping.")
        return

    for record in MOCK_TIMESHEETS:
        timesheet = repo.create(
            week=record["week"],
            start_date=record["start_date"],
            end_date=record["end_date"],
            status=record["status"],
            timesheet_id=record["id"],
        )
        for entry in record["entries"]:
            repo.add_entry(timesheet.id, entry, record["status"])

    logger.info("Seeder: created %s sample timesheets.", len(MOCK_TIMESHEETS))
