"""Event-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class CreateEventRequest(BaseModel):
    """Request schema for creating a ticketed event."""

    name: str = Field(..., min_length=1, description="Ticketed event name")
    starts_at: datetime = Field(..., description="Event start time")
    rows: int = Field(..., ge=1, description="Rows of seats")
    columns: int = Field(..., ge=1, description="Columns of seats")
    hold_duration_seconds: float = Field(..., gt=0, description="Seat hold lifetime in seconds")

    @field_validator("starts_at")
    @classmethod
    def validate_starts_at(cls, v: datetime) -> datetime:
        """Reject event times in the past."""
        now = datetime.now(v.tzinfo) if v.tzinfo else datetime.now()
        if v < now:
            raise ValueError("Cannot create an event time in the past")
        return v


class EventSummary(BaseModel):
    """Ticketed event summary schema."""

    name: str = Field(..., description="Ticketed event name")
    starts_at: datetime = Field(..., description="Event start time")
    rows: int = Field(..., ge=1, description="Rows of seats")
    columns: int = Field(..., ge=1, description="Columns of seats")
    total_seats: int = Field(..., ge=1, description="Total seats")
    available_seats: int = Field(..., ge=0, description="Seats neither held nor reserved")
    active_holds: int = Field(..., ge=0, description="Holds awaiting confirmation")
    reservations: int = Field(..., ge=0, description="Confirmed reservations")
