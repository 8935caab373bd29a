"""
Timesheet management endpoints (any authenticated user can access):
  GET    /timesheets                                  – List timesheets
  POST   /timesheets                                  – Create a timesheet
  POST   /timesheets/entries                          – Combined create/update entry call
  DELETE /timesheets/entries?timesheetId=&entryId=    – Delete an entry
  GET    /timesheets/{timesheet_id}                   – Get a specific timesheet
  PATCH  /timesheets/{timesheet_id}                   – Patch week/start/end
  GET    /timesheets/{timesheet_id}/report/pdf        – Export a timesheet as PDF
  POST   /timesheets/{timesheet_id}/entries           – Add an entry
  PUT    /timesheets/{timesheet_id}/entries/{entry_id} – Replace an entry
  PATCH  /timesheets/{timesheet_id}/entries/{entry_id} – Patch an entry
"""
from datetime import date
from typing import Annotated, Literal, Optional
import logging

from fastapi import APIRouter, Body, Depends, Query, Response, status
from fastapi.responses import StreamingResponse

from timesheet_tracker.core.dependencies import (
    get_current_active_user,
    get_timesheet_repository,
)
from timesheet_tracker.models.timesheet import TimesheetStatus
from timesheet_tracker.models.user import User
from timesheet_tracker.schemas.timesheet import (
    DeleteResponse,
    EntryCreate,
    EntryPatch,
    EntryResponse,
    EntrySave,
    EntrySaveCreate,
    EntryUpdate,
    TimesheetCreate,
    TimesheetListFilter,
    TimesheetPatch,
    TimesheetResponse,
)
from timesheet_tracker.services.pdf_service import PDFService
from timesheet_tracker.services.timesheet_service import TimesheetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/timesheets", tags=["Timesheets"])


@router.get(
    "",
    response_model=list[TimesheetResponse],
    summary="List timesheets",
)
def list_timesheets(
    status_filter: Optional[TimesheetStatus] = Query(
        None, alias="status", description="Filter by status: COMPLETED, INCOMPLETE or MISSING"
    ),
    date_from: Optional[date] = Query(
        None, alias="from", description="Only timesheets whose range ends on or after this date"
    ),
    date_to: Optional[date] = Query(
        None, alias="to", description="Only timesheets whose range starts on or before this date"
    ),
    sort_by: Optional[Literal["week", "startDate"]] = Query(None, alias="sortBy"),
    order: Literal["asc", "desc"] = Query("asc"),
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """
    Return all timesheets in insertion order.
    Filtering and sorting are applied only when the matching parameters are given.
    """
    logger.info("Listing timesheets")
    filters = None
    if any(value is not None for value in (status_filter, date_from, date_to, sort_by)):
        filters = TimesheetListFilter(
            status=status_filter,
            date_from=date_from,
            date_to=date_to,
            sort_by=sort_by,
            order=order,
        )
    service = TimesheetService(repo)
    return service.list_timesheets(filters)


@router.post(
    "",
    response_model=TimesheetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a timesheet",
)
def create_timesheet(
    data: TimesheetCreate,
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """
    Create an empty timesheet for a week.

    - **week**: week number
    - **startDate** / **endDate**: inclusive date range (YYYY-MM-DD)
    - **status**: optional initial status, defaults to MISSING
    """
    logger.info("Creating timesheet week=%s", data.week)
    service = TimesheetService(repo)
    return service.create_timesheet(data)


@router.post(
    "/entries",
    response_model=EntryResponse,
    summary="Create or update an entry (combined call)",
)
def save_entry(
    response: Response,
    data: Annotated[EntrySave, Body(discriminator="operation")],
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """
    Save an entry through a single call.

    - **operation**: `create` appends a new entry, `update` replaces the entry named by **entryId**
    """
    logger.info("Saving entry operation=%s timesheet id=%s", data.operation, data.timesheet_id)
    service = TimesheetService(repo)
    entry = service.save_entry(data)
    if isinstance(data, EntrySaveCreate):
        response.status_code = status.HTTP_201_CREATED
    return entry


@router.delete(
    "/entries",
    response_model=DeleteResponse,
    summary="Delete an entry",
)
def delete_entry(
    timesheet_id: Optional[str] = Query(None, alias="timesheetId"),
    entry_id: Optional[str] = Query(None, alias="entryId"),
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """
    Delete an entry from a timesheet.
    Deleting an entry that no longer exists still succeeds.
    """
    logger.info("Deleting entry id=%s timesheet id=%s", entry_id, timesheet_id)
    service = TimesheetService(repo)
    service.delete_entry(timesheet_id, entry_id)
    return DeleteResponse()


@router.get(
    "/{timesheet_id}",
    response_model=TimesheetResponse,
    summary="Get a specific timesheet",
)
def get_timesheet(
    timesheet_id: str,
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """Retrieve a timesheet with its entries by ID."""
    logger.info("Fetching timesheet id=%s", timesheet_id)
    service = TimesheetService(repo)
    return service.get_timesheet(timesheet_id)


@router.patch(
    "/{timesheet_id}",
    response_model=TimesheetResponse,
    summary="Update a timesheet",
)
def patch_timesheet(
    timesheet_id: str,
    data: TimesheetPatch,
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """
    Update a timesheet's week number or date range.
    Existing entries must stay inside the new range.
    """
    logger.info("Patching timesheet id=%s", timesheet_id)
    service = TimesheetService(repo)
    return service.patch_timesheet(timesheet_id, data)


@router.get(
    "/{timesheet_id}/report/pdf",
    summary="Export a timesheet as PDF",
    response_class=StreamingResponse,
)
def export_timesheet_pdf(
    timesheet_id: str,
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """Export one timesheet with its entries and weekly totals as a PDF."""
    logger.info("Exporting timesheet PDF id=%s", timesheet_id)
    timesheet = TimesheetService(repo).get_timesheet(timesheet_id)
    pdf_buffer = PDFService().generate_timesheet_report(timesheet)
    return StreamingResponse(
        pdf_buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=timesheet_week_{timesheet.week}.pdf"
        },
    )


@router.post(
    "/{timesheet_id}/entries",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an entry to a timesheet",
)
def add_entry(
    timesheet_id: str,
    data: EntryCreate,
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """
    Add a time entry. The date must fall within the timesheet's range.

    - **project**: project label
    - **typeOfWork**: Bug fixes, Feature development, Code review, Testing or Documentation
    - **taskDescription**: what was done
    - **hours**: hours worked (positive)
    - **date**: day the work was performed (YYYY-MM-DD)
    """
    logger.info("Adding entry to timesheet id=%s", timesheet_id)
    service = TimesheetService(repo)
    return service.add_entry(timesheet_id, data)


@router.put(
    "/{timesheet_id}/entries/{entry_id}",
    response_model=EntryResponse,
    summary="Replace an entry",
)
def update_entry(
    timesheet_id: str,
    entry_id: str,
    data: EntryUpdate,
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """Replace every field of an entry; the entry keeps its id."""
    logger.info("Updating entry id=%s timesheet id=%s", entry_id, timesheet_id)
    service = TimesheetService(repo)
    return service.update_entry(timesheet_id, entry_id, data)


@router.patch(
    "/{timesheet_id}/entries/{entry_id}",
    response_model=EntryResponse,
    summary="Patch an entry",
)
def patch_entry(
    timesheet_id: str,
    entry_id: str,
    data: EntryPatch,
    repo=Depends(get_timesheet_repository),
    _: User = Depends(get_current_active_user),
):
    """Update only the supplied fields of an entry."""
    logger.info("Patching entry id=%s timesheet id=%s", entry_id, timesheet_id)
    service = TimesheetService(repo)
    return service.patch_entry(timesheet_id, entry_id, data)
