"""
Timesheet management service.

Every mutation follows validate-then-apply: ids are resolved and date
containment is checked before the store is touched, and the status written
alongside an entry change is derived from the resulting entry collection.
Mutations on one timesheet are serialized by a per-timesheet lock; reads and
mutations on different timesheets run in parallel.
"""
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Iterator, Optional, Union
import logging
import threading

from timesheet_tracker.core.exceptions import (
    InvalidRangeError,
    InvalidRequestError,
    NotFoundError,
)
from timesheet_tracker.models.timesheet import (
    Entry,
    Timesheet,
    TimesheetStatus,
    derive_status,
)
from timesheet_tracker.repositories.timesheet_repository import (
    TimesheetRepository,
    new_id,
)
from timesheet_tracker.schemas.timesheet import (
    EntryFields,
    EntryPatch,
    EntrySaveCreate,
    EntrySaveUpdate,
    TimesheetCreate,
    TimesheetListFilter,
    TimesheetPatch,
)

logger = logging.getLogger(__name__)


class _LockSlot:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class TimesheetLocks:
    """
    Registry handing out one exclusive lock per timesheet id.

    A lock lives only while some thread holds or waits for it, so ids that
    never resolve leave nothing behind.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: dict[str, _LockSlot] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    @contextmanager
    def lock_for(self, timesheet_id: str) -> Iterator[None]:
        with self._guard:
            slot = self._slots.get(timesheet_id)
            if slot is None:
                slot = self._slots[timesheet_id] = _LockSlot()
            slot.users += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._guard:
                slot.users -= 1
                if slot.users == 0:
                    del self._slots[timesheet_id]


_timesheet_locks = TimesheetLocks()


class TimesheetService:
    def __init__(
        self,
        repo: TimesheetRepository,
        locks: Optional[TimesheetLocks] = None,
    ) -> None:
        logger.trace("Initializing TimesheetService")
        self._repo = repo
        self._locks = locks if locks is not None else _timesheet_locks

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_timesheet(self, timesheet_id: str) -> Timesheet:
        logger.info("Fetching timesheet id=%s", timesheet_id)
        timesheet = self._repo.get_by_id(timesheet_id)
        if not timesheet:
            logger.warning("Timesheet id=%s not found", timesheet_id)
            raise NotFoundError("Timesheet not found")
        return timesheet

    def list_timesheets(
        self, filters: Optional[TimesheetListFilter] = None
    ) -> list[Timesheet]:
        """
        Return timesheets in insertion order.

        Without filters the full collection comes back untouched. With
        filters, timesheets can be narrowed by status or by a date window
        (a timesheet matches when its range overlaps the window) and sorted
        by week or start date.
        """
        logger.info("Listing timesheets")
        timesheets = self._repo.list_all()
        if filters is None:
            return timesheets

        if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
            logger.warning(
                "Invalid list window from=%s to=%s", filters.date_from, filters.date_to
            )
            raise InvalidRequestError("'from' must not be after 'to'")

        if filters.status is not None:
            timesheets = [t for t in timesheets if t.status == filters.status]
        if filters.date_from is not None:
            timesheets = [t for t in timesheets if t.end_date >= filters.date_from]
        if filters.date_to is not None:
            timesheets = [t for t in timesheets if t.start_date <= filters.date_to]

        if filters.sort_by == "week":
            timesheets.sort(key=lambda t: t.week, reverse=filters.order == "desc")
        elif filters.sort_by == "startDate":
            timesheets.sort(key=lambda t: t.start_date, reverse=filters.order == "desc")
        return timesheets

    # ------------------------------------------------------------------
    # Timesheets
    # ------------------------------------------------------------------

    def create_timesheet(self, data: TimesheetCreate) -> Timesheet:
        """
        Create a timesheet with no entries.
        A caller-supplied status is stored as given until the first entry
        mutation recomputes it.
        """
        logger.info("Creating timesheet week=%s", data.week)
        timesheet = self._repo.create(
            week=data.week,
            start_date=data.start_date,
            end_date=data.end_date,
            status=data.status or TimesheetStatus.MISSING,
        )
        logger.info("Timesheet created id=%s", timesheet.id)
        return timesheet

    def patch_timesheet(self, timesheet_id: str, data: TimesheetPatch) -> Timesheet:
        """
        Merge week/start/end into a timesheet.
        The merged range must still contain every existing entry.
        """
        logger.info("Patching timesheet id=%s", timesheet_id)
        with self._locks.lock_for(timesheet_id):
            timesheet = self.get_timesheet(timesheet_id)
            merged = replace(
                timesheet,
                week=data.week if data.week is not None else timesheet.week,
                start_date=data.start_date or timesheet.start_date,
                end_date=data.end_date or timesheet.end_date,
            )
            stranded = [e.id for e in merged.entries if not merged.contains(e.date)]
            if stranded:
                logger.warning(
                    "Timesheet id=%s patch would strand entries %s", timesheet_id, stranded
                )
                raise InvalidRangeError("Existing entries must remain within timesheet range")

            updated = self._repo.update_fields(
                timesheet_id,
                week=data.week,
                start_date=data.start_date,
                end_date=data.end_date,
            )
        logger.info("Timesheet patched id=%s", timesheet_id)
        return updated  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def add_entry(self, timesheet_id: str, data: EntryFields) -> Entry:
        logger.info("Adding entry to timesheet id=%s", timesheet_id)
        with self._locks.lock_for(timesheet_id):
            timesheet = self.get_timesheet(timesheet_id)
            self._check_range(timesheet, data.date)

            entry = Entry(
                id=new_id(),
                project=data.project,
                type_of_work=data.type_of_work,
                task_description=data.task_description,
                hours=data.hours,
                date=data.date,
            )
            status = derive_status(timesheet.entries + [entry])
            created = self._repo.add_entry(timesheet_id, entry, status)
        logger.info(
            "Entry created id=%s timesheet id=%s status=%s",
            created.id,
            timesheet_id,
            status.value,
        )
        return created

    def update_entry(self, timesheet_id: str, entry_id: str, data: EntryFields) -> Entry:
        """Replace every mutable field of an entry; its id is unchanged."""
        logger.info("Updating entry id=%s timesheet id=%s", entry_id, timesheet_id)
        with self._locks.lock_for(timesheet_id):
            timesheet = self.get_timesheet(timesheet_id)
            current = self._get_entry(timesheet, entry_id)
            updated = replace(
                current,
                project=data.project,
                type_of_work=data.type_of_work,
                task_description=data.task_description,
                hours=data.hours,
                date=data.date,
            )
            return self._apply_entry_change(timesheet, updated)

    def patch_entry(self, timesheet_id: str, entry_id: str, data: EntryPatch) -> Entry:
        """
        Merge only the supplied fields into an entry.
        The merged entry goes through the same containment check and status
        recompute as a full update.
        """
        logger.info("Patching entry id=%s timesheet id=%s", entry_id, timesheet_id)
        with self._locks.lock_for(timesheet_id):
            timesheet = self.get_timesheet(timesheet_id)
            current = self._get_entry(timesheet, entry_id)
            changes = data.model_dump(exclude_unset=True, exclude_none=True)
            updated = replace(current, **changes)
            return self._apply_entry_change(timesheet, updated)

    def save_entry(self, data: Union[EntrySaveCreate, EntrySaveUpdate]) -> Entry:
        """Dispatch the combined save call on its ``operation`` tag."""
        logger.info("Saving entry operation=%s", data.operation)
        if isinstance(data, EntrySaveUpdate):
            return self.update_entry(data.timesheet_id, data.entry_id, data)
        return self.add_entry(data.timesheet_id, data)

    def delete_entry(self, timesheet_id: Optional[str], entry_id: Optional[str]) -> None:
        """
        Remove an entry from a timesheet.
        Deleting an id that is not present is a no-op; status is recomputed
        either way.
        """
        if not timesheet_id or not entry_id:
            logger.warning(
                "Delete entry missing identifiers timesheet id=%s entry id=%s",
                timesheet_id,
                entry_id,
            )
            raise InvalidRequestError("Invalid request")

        logger.info("Deleting entry id=%s timesheet id=%s", entry_id, timesheet_id)
        with self._locks.lock_for(timesheet_id):
            timesheet = self.get_timesheet(timesheet_id)
            remaining = [e for e in timesheet.entries if e.id != entry_id]
            status = derive_status(remaining)
            removed = self._repo.remove_entry(timesheet_id, entry_id, status)
        logger.info(
            "Entry delete id=%s removed=%s status=%s", entry_id, removed, status.value
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_entry(self, timesheet: Timesheet, entry_id: str) -> Entry:
        entry = timesheet.find_entry(entry_id)
        if entry is None:
            logger.warning("Entry id=%s not found in timesheet id=%s", entry_id, timesheet.id)
            raise NotFoundError("Entry not found")
        return entry

    def _check_range(self, timesheet: Timesheet, day: date) -> None:
        if not timesheet.contains(day):
            logger.warning(
                "Entry date %s outside timesheet id=%s range %s..%s",
                day,
                timesheet.id,
                timesheet.start_date,
                timesheet.end_date,
            )
            raise InvalidRangeError("Date must be within timesheet range")

    def _apply_entry_change(self, timesheet: Timesheet, updated: Entry) -> Entry:
        self._check_range(timesheet, updated.date)
        entries = [updated if e.id == updated.id else e for e in timesheet.entries]
        status = derive_status(entries)
        saved = self._repo.replace_entry(timesheet.id, updated, status)
        if saved is None:
            logger.warning("Entry id=%s vanished before update", updated.id)
            raise NotFoundError("Entry not found")
        logger.info(
            "Entry updated id=%s timesheet id=%s status=%s",
            saved.id,
            timesheet.id,
            status.value,
        )
        return saved
