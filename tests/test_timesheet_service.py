from datetime import date
import threading

from pydantic import ValidationError
import pytest

from timesheet_tracker.core.exceptions import (
    InvalidRangeError,
    InvalidRequestError,
    NotFoundError,
)
from timesheet_tracker.models.timesheet import TimesheetStatus, TypeOfWork, derive_status
from timesheet_tracker.schemas.timesheet import (
    EntryPatch,
    EntrySaveCreate,
    EntrySaveUpdate,
    EntryUpdate,
    TimesheetCreate,
    TimesheetListFilter,
    TimesheetPatch,
)
from timesheet_tracker.services.timesheet_service import TimesheetLocks, TimesheetService


# ---------------------------------------------------------------------------
# Create / read
# ---------------------------------------------------------------------------

def test_create_timesheet_defaults_to_missing(service, week_one):
    assert week_one.status == TimesheetStatus.MISSING
    assert week_one.entries == []
    assert service.get_timesheet(week_one.id) == week_one


def test_create_timesheet_keeps_supplied_status(service):
    timesheet = service.create_timesheet(
        TimesheetCreate(
            week=9,
            start_date=date(2024, 2, 26),
            end_date=date(2024, 3, 1),
            status=TimesheetStatus.COMPLETED,
        )
    )
    assert timesheet.status == TimesheetStatus.COMPLETED


def test_create_timesheet_assigns_unique_ids(service):
    payload = TimesheetCreate(week=1, start_date=date(2024, 1, 1), end_date=date(2024, 1, 5))
    first = service.create_timesheet(payload)
    second = service.create_timesheet(payload)
    assert first.id != second.id
    assert [t.id for t in service.list_timesheets()] == [first.id, second.id]


def test_get_unknown_timesheet_raises_not_found(service):
    with pytest.raises(NotFoundError) as exc_info:
        service.get_timesheet("nope")
    assert exc_info.value.status_code == 404
    assert exc_info.value.code == "NotFound"


# ---------------------------------------------------------------------------
# Add entry
# ---------------------------------------------------------------------------

def test_add_entries_until_completed(service, week_one, make_entry):
    first = service.add_entry(week_one.id, make_entry(hours=4, day=date(2024, 1, 1)))
    assert service.get_timesheet(week_one.id).status == TimesheetStatus.INCOMPLETE

    for day in (2, 3, 4):
        service.add_entry(week_one.id, make_entry(hours=4, day=date(2024, 1, day)))
    assert service.get_timesheet(week_one.id).status == TimesheetStatus.INCOMPLETE

    service.add_entry(week_one.id, make_entry(hours=24, day=date(2024, 1, 5)))
    timesheet = service.get_timesheet(week_one.id)
    assert timesheet.status == TimesheetStatus.COMPLETED
    assert timesheet.total_hours == 40
    assert timesheet.entries[0] == first
    assert [e.date.day for e in timesheet.entries] == [1, 2, 3, 4, 5]


def test_add_entry_out_of_range_leaves_timesheet_untouched(service, week_one, make_entry):
    service.add_entry(week_one.id, make_entry(hours=4))
    before = service.get_timesheet(week_one.id)

    with pytest.raises(InvalidRangeError) as exc_info:
        service.add_entry(week_one.id, make_entry(day=date(2024, 1, 10)))

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Date must be within timesheet range"
    assert service.get_timesheet(week_one.id) == before


def test_add_entry_to_unknown_timesheet(service, make_entry):
    with pytest.raises(NotFoundError):
        service.add_entry("missing", make_entry())


def test_add_entry_allows_duplicates(service, week_one, make_entry):
    payload = make_entry(hours=2)
    a = service.add_entry(week_one.id, payload)
    b = service.add_entry(week_one.id, payload)
    assert a.id != b.id
    assert len(service.get_timesheet(week_one.id).entries) == 2


# ---------------------------------------------------------------------------
# Update / patch entry
# ---------------------------------------------------------------------------

def test_update_with_identical_fields_is_a_no_op(service, week_one, make_entry):
    payload = make_entry(hours=6, day=date(2024, 1, 3))
    created = service.add_entry(week_one.id, payload)

    updated = service.update_entry(
        week_one.id, created.id, EntryUpdate(**payload.model_dump())
    )

    assert updated == created
    assert service.get_timesheet(week_one.id).entries == [created]


def test_update_replaces_fields_and_recomputes_status(service, week_one, make_entry):
    created = service.add_entry(week_one.id, make_entry(hours=4))

    updated = service.update_entry(
        week_one.id,
        created.id,
        EntryUpdate(
            project="API Development",
            type_of_work=TypeOfWork.CODE_REVIEW,
            task_description="Reviewed auth changes",
            hours=40,
            date=date(2024, 1, 2),
        ),
    )

    assert updated.id == created.id
    assert updated.project == "API Development"
    assert updated.type_of_work == TypeOfWork.CODE_REVIEW
    assert service.get_timesheet(week_one.id).status == TimesheetStatus.COMPLETED


def test_update_rejects_date_outside_range(service, week_one, make_entry):
    created = service.add_entry(week_one.id, make_entry())
    with pytest.raises(InvalidRangeError):
        service.update_entry(
            week_one.id, created.id, EntryUpdate(**make_entry(day=date(2024, 1, 6)).model_dump())
        )
    assert service.get_timesheet(week_one.id).entries == [created]


def test_update_unknown_entry_raises_not_found(service, week_one, make_entry):
    with pytest.raises(NotFoundError) as exc_info:
        service.update_entry(week_one.id, "missing", EntryUpdate(**make_entry().model_dump()))
    assert exc_info.value.detail == "Entry not found"


def test_patch_entry_merges_supplied_fields(service, week_one, make_entry):
    created = service.add_entry(week_one.id, make_entry(hours=4))

    patched = service.patch_entry(week_one.id, created.id, EntryPatch(hours=41))

    assert patched.hours == 41
    assert patched.project == created.project
    assert patched.date == created.date
    assert service.get_timesheet(week_one.id).status == TimesheetStatus.COMPLETED


def test_patch_entry_revalidates_date(service, week_one, make_entry):
    created = service.add_entry(week_one.id, make_entry())
    with pytest.raises(InvalidRangeError):
        service.patch_entry(week_one.id, created.id, EntryPatch(date=date(2024, 2, 1)))
    assert service.get_timesheet(week_one.id).entries[0].date == date(2024, 1, 1)


def test_patch_entry_rejects_blank_project(service, week_one, make_entry):
    created = service.add_entry(week_one.id, make_entry())
    with pytest.raises(ValidationError):
        EntryPatch(project="   ")

    patched = service.patch_entry(week_one.id, created.id, EntryPatch(project="  Mobile App "))
    assert patched.project == "Mobile App"


# ---------------------------------------------------------------------------
# Combined save
# ---------------------------------------------------------------------------

def test_save_entry_dispatches_on_operation(service, week_one, make_entry):
    fields = make_entry(hours=3).model_dump()
    created = service.save_entry(
        EntrySaveCreate(operation="create", timesheet_id=week_one.id, **fields)
    )
    assert service.get_timesheet(week_one.id).entries == [created]

    fields["hours"] = 5
    updated = service.save_entry(
        EntrySaveUpdate(
            operation="update", timesheet_id=week_one.id, entry_id=created.id, **fields
        )
    )
    assert updated.id == created.id
    assert updated.hours == 5
    assert len(service.get_timesheet(week_one.id).entries) == 1


# ---------------------------------------------------------------------------
# Delete entry
# ---------------------------------------------------------------------------

def test_delete_last_entry_returns_to_missing(service, week_one, make_entry):
    created = service.add_entry(week_one.id, make_entry(hours=2))
    assert service.get_timesheet(week_one.id).status == TimesheetStatus.INCOMPLETE

    service.delete_entry(week_one.id, created.id)

    timesheet = service.get_timesheet(week_one.id)
    assert timesheet.entries == []
    assert timesheet.status == TimesheetStatus.MISSING


def test_delete_unknown_entry_is_idempotent(service, week_one, make_entry):
    created = service.add_entry(week_one.id, make_entry(hours=2))

    service.delete_entry(week_one.id, "not-there")
    service.delete_entry(week_one.id, "not-there")

    timesheet = service.get_timesheet(week_one.id)
    assert timesheet.entries == [created]
    assert timesheet.status == TimesheetStatus.INCOMPLETE


@pytest.mark.parametrize("timesheet_id, entry_id", [(None, "e1"), ("1", None), ("", "")])
def test_delete_requires_both_identifiers(service, timesheet_id, entry_id):
    with pytest.raises(InvalidRequestError) as exc_info:
        service.delete_entry(timesheet_id, entry_id)
    assert exc_info.value.code == "InvalidRequest"


def test_delete_from_unknown_timesheet(service):
    with pytest.raises(NotFoundError):
        service.delete_entry("missing", "e1")


# ---------------------------------------------------------------------------
# Patch timesheet
# ---------------------------------------------------------------------------

def test_patch_timesheet_week(service, week_one):
    patched = service.patch_timesheet(week_one.id, TimesheetPatch(week=2))
    assert patched.week == 2
    assert patched.start_date == week_one.start_date
    assert patched.status == week_one.status


def test_patch_timesheet_cannot_strand_entries(service, week_one, make_entry):
    service.add_entry(week_one.id, make_entry(day=date(2024, 1, 1)))
    with pytest.raises(InvalidRangeError):
        service.patch_timesheet(week_one.id, TimesheetPatch(start_date=date(2024, 1, 2)))
    assert service.get_timesheet(week_one.id).start_date == date(2024, 1, 1)


def test_patch_unknown_timesheet(service):
    with pytest.raises(NotFoundError):
        service.patch_timesheet("missing", TimesheetPatch(week=3))


# ---------------------------------------------------------------------------
# List filters
# ---------------------------------------------------------------------------

def test_list_without_filters_returns_seed_order(seeded_repo):
    timesheets = TimesheetService(seeded_repo).list_timesheets()
    assert [t.id for t in timesheets] == ["1", "2", "3", "4", "5"]


def test_list_filters_and_sorts(seeded_repo):
    service = TimesheetService(seeded_repo)

    completed = service.list_timesheets(TimesheetListFilter(status=TimesheetStatus.COMPLETED))
    assert [t.id for t in completed] == ["1", "2", "4"]

    window = service.list_timesheets(
        TimesheetListFilter(date_from=date(2024, 1, 10), date_to=date(2024, 1, 22))
    )
    assert [t.id for t in window] == ["2", "3", "4"]

    newest_first = service.list_timesheets(TimesheetListFilter(sort_by="week", order="desc"))
    assert [t.week for t in newest_first] == [5, 4, 3, 2, 1]


def test_list_rejects_inverted_window(service):
    with pytest.raises(InvalidRequestError):
        service.list_timesheets(
            TimesheetListFilter(date_from=date(2024, 2, 1), date_to=date(2024, 1, 1))
        )


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

def _run_in_threads(count, target):
    barrier = threading.Barrier(count)
    errors = []

    def worker(i):
        barrier.wait()
        try:
            target(i)
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert errors == []


def test_concurrent_adds_on_one_timesheet_are_not_lost(service, week_one, make_entry):
    _run_in_threads(10, lambda i: service.add_entry(week_one.id, make_entry(hours=4)))

    timesheet = service.get_timesheet(week_one.id)
    assert len(timesheet.entries) == 10
    assert len({e.id for e in timesheet.entries}) == 10
    assert timesheet.status == derive_status(timesheet.entries)
    assert timesheet.status == TimesheetStatus.COMPLETED


def test_concurrent_adds_on_different_timesheets(service, make_entry):
    timesheets = [
        service.create_timesheet(
            TimesheetCreate(week=w, start_date=date(2024, 1, 1), end_date=date(2024, 1, 5))
        )
        for w in range(1, 5)
    ]

    _run_in_threads(
        8, lambda i: service.add_entry(timesheets[i % 4].id, make_entry(hours=20))
    )

    for timesheet in timesheets:
        stored = service.get_timesheet(timesheet.id)
        assert len(stored.entries) == 2
        assert stored.status == TimesheetStatus.COMPLETED


def test_locks_are_released_after_use(repo, week_one, make_entry):
    locks = TimesheetLocks()
    service = TimesheetService(repo, locks=locks)

    for i in range(50):
        with pytest.raises(NotFoundError):
            service.delete_entry(f"unknown-{i}", "x")
        with pytest.raises(NotFoundError):
            service.patch_timesheet(f"unknown-{i}", TimesheetPatch(week=2))
    service.add_entry(week_one.id, make_entry())

    assert len(locks) == 0


def test_lock_registry_tracks_held_ids():
    locks = TimesheetLocks()
    with locks.lock_for("a"):
        assert len(locks) == 1
        with locks.lock_for("b"):
            assert len(locks) == 2
    assert len(locks) == 0
