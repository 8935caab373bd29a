import os
import tempfile
from datetime import date

import pytest

# Logging and SQLite files go to a scratch directory before settings load.
_SCRATCH = tempfile.mkdtemp(prefix="timesheet-tracker-tests-")
os.environ.setdefault("LOG_FILE_PATH", os.path.join(_SCRATCH, "app.log"))
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from fastapi.testclient import TestClient  # noqa: E402

from timesheet_tracker.core import logging_config  # noqa: E402,F401
from timesheet_tracker.core.config import settings  # noqa: E402
from timesheet_tracker.core.security import create_access_token  # noqa: E402
from timesheet_tracker.db.seeder import seed_timesheets  # noqa: E402
from timesheet_tracker.main import create_app  # noqa: E402
from timesheet_tracker.repositories.timesheet_repository import (  # noqa: E402
    InMemoryTimesheetRepository,
)
from timesheet_tracker.schemas.timesheet import EntryCreate, TimesheetCreate  # noqa: E402
from timesheet_tracker.services.timesheet_service import (  # noqa: E402
    TimesheetLocks,
    TimesheetService,
)


@pytest.fixture()
def repo():
    return InMemoryTimesheetRepository()


@pytest.fixture()
def service(repo):
    return TimesheetService(repo, locks=TimesheetLocks())


@pytest.fixture()
def week_one(service):
    """An empty timesheet covering 2024-01-01..2024-01-05."""
    return service.create_timesheet(
        TimesheetCreate(week=1, start_date=date(2024, 1, 1), end_date=date(2024, 1, 5))
    )


@pytest.fixture()
def make_entry():
    """Build an EntryCreate payload with sensible defaults."""
    def _make(hours=4, day=date(2024, 1, 1), **overrides) -> EntryCreate:
        fields = {
            "project": "Homepage Development",
            "type_of_work": "Feature development",
            "task_description": "Implemented responsive navigation",
            "hours": hours,
            "date": day,
        }
        fields.update(overrides)
        return EntryCreate(**fields)
    return _make


@pytest.fixture()
def auth_headers():
    token = create_access_token(settings.AUTH_EMAIL, extra_claims={"name": "Test User"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def app(monkeypatch):
    monkeypatch.setattr(settings, "STORE_BACKEND", "memory")
    monkeypatch.setattr(settings, "SEED_MOCK_DATA", True)
    return create_app()


@pytest.fixture()
def client(app, auth_headers):
    with TestClient(app) as test_client:
        test_client.headers.update(auth_headers)
        yield test_client


@pytest.fixture()
def sqlite_app(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "STORE_BACKEND", "sqlite")
    monkeypatch.setattr(settings, "SEED_MOCK_DATA", True)
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{tmp_path / 'timesheets.db'}")
    return create_app()


@pytest.fixture()
def sqlite_client(sqlite_app, auth_headers):
    with TestClient(sqlite_app) as test_client:
        test_client.headers.update(auth_headers)
        yield test_client


@pytest.fixture()
def seeded_repo(repo):
    seed_timesheets(repo)
    return repo
