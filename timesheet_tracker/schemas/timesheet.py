"""
Pydantic schemas for Timesheet and Entry request/response validation.

Field names travel as camelCase on the wire (``startDate``, ``typeOfWork``)
and are snake_case in Python.
"""
import datetime
from typing import Literal, Optional, Union
import logging

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from timesheet_tracker.models.timesheet import TimesheetStatus, TypeOfWork

logger = logging.getLogger(__name__)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _clean_project(v: str) -> str:
    """Strip surrounding whitespace and reject blank project labels."""
    logger.trace("Validating entry project label")
    if not v.strip():
        logger.warning("Blank project label")
        raise ValueError("Project must not be blank")
    return v.strip()


def _plain_number(value: float) -> Union[int, float]:
    """Render whole-number hours without a trailing .0."""
    return int(value) if float(value).is_integer() else value


# ---------------------------------------------------------------------------
# Request schemas – timesheets
# ---------------------------------------------------------------------------

class TimesheetCreate(CamelModel):
    """Payload for creating timesheets."""

    week: int = Field(..., description="Week number, caller-supplied")
    start_date: datetime.date = Field(..., description="First day of the range (inclusive)")
    end_date: datetime.date = Field(..., description="Last day of the range (inclusive)")
    status: Optional[TimesheetStatus] = Field(
        None, description="Initial status; defaults to MISSING"
    )


class TimesheetPatch(CamelModel):
    """Partial update of timesheet fields. Status is always derived."""

    week: Optional[int] = None
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None


# ---------------------------------------------------------------------------
# Request schemas – entries
# ---------------------------------------------------------------------------

class EntryFields(CamelModel):
    """Mutable fields of an entry."""

    project: str = Field(..., min_length=1, max_length=200)
    type_of_work: TypeOfWork
    task_description: str = Field("", max_length=2000)
    hours: float = Field(..., gt=0, description="Hours worked, must be positive")
    date: datetime.date = Field(..., description="Day the work was performed")

    @field_validator("project")
    @classmethod
    def project_not_blank(cls, v: str) -> str:
        return _clean_project(v)


class EntryCreate(EntryFields):
    """Payload for adding an entry to a timesheet."""


class EntryUpdate(EntryFields):
    """Payload for replacing every mutable field of an entry."""


class EntryPatch(CamelModel):
    """Partial update of entry fields."""

    project: Optional[str] = Field(None, min_length=1, max_length=200)
    type_of_work: Optional[TypeOfWork] = None
    task_description: Optional[str] = Field(None, max_length=2000)
    hours: Optional[float] = Field(None, gt=0)
    date: Optional[datetime.date] = None

    @field_validator("project")
    @classmethod
    def project_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _clean_project(v)


class EntrySaveCreate(EntryFields):
    """Combined save call: create a new entry."""

    operation: Literal["create"]
    timesheet_id: str = Field(..., min_length=1)


class EntrySaveUpdate(EntryFields):
    """Combined save call: update an existing entry in place."""

    operation: Literal["update"]
    timesheet_id: str = Field(..., min_length=1)
    entry_id: str = Field(..., min_length=1)


EntrySave = Union[EntrySaveCreate, EntrySaveUpdate]


# ---------------------------------------------------------------------------
# Query schemas
# ---------------------------------------------------------------------------

class TimesheetListFilter(CamelModel):
    """Optional filtering and ordering for the timesheet list."""

    status: Optional[TimesheetStatus] = None
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None
    sort_by: Optional[Literal["week", "startDate"]] = None
    order: Literal["asc", "desc"] = "asc"


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class EntryResponse(CamelModel):
    """Response model for entry data."""

    id: str
    project: str
    type_of_work: TypeOfWork
    task_description: str
    hours: float
    date: datetime.date

    @field_serializer("hours")
    def serialize_hours(self, hours: float) -> Union[int, float]:
        return _plain_number(hours)


class TimesheetResponse(CamelModel):
    """Response model for timesheet data."""

    id: str
    week: int
    start_date: datetime.date
    end_date: datetime.date
    status: TimesheetStatus
    entries: list[EntryResponse]

    @computed_field(alias="totalHours")
    @property
    def total_hours(self) -> Union[int, float]:
        return _plain_number(sum(entry.hours for entry in self.entries))


class DeleteResponse(BaseModel):
    """Acknowledgement returned after an entry delete."""

    success: bool = True
