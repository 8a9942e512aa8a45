"""Hold-related Pydantic schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictInt


class SeatStatus(str, Enum):
    """Seat status enumeration."""
    AVAILABLE = "AVAILABLE"
    HELD = "HELD"
    RESERVED = "RESERVED"

    @property
    def symbol(self) -> str:
        """Single character used when rendering the seat grid."""
        return self.value[0].lower()


class HoldStatus(str, Enum):
    """Hold status enumeration."""
    ACTIVE = "ACTIVE"
    CONFIRMED = "CONFIRMED"
    RELEASED = "RELEASED"


class CreateHoldRequest(BaseModel):
    """Request schema for holding seats."""

    num_seats: StrictInt = Field(..., ge=1, description="Number of seats to hold")
    customer_email: EmailStr = Field(..., description="Customer email address")


class SeatSnapshot(BaseModel):
    """Seat response schema."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    row: int = Field(..., ge=1, description="1-indexed seat row")
    column: int = Field(..., ge=1, description="1-indexed seat column")
    favorability: int = Field(..., ge=0, description="Favorability score, lower is better")
    status: SeatStatus = Field(..., description="Seat status")


class SeatHoldSnapshot(BaseModel):
    """Seat hold response schema."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int = Field(..., ge=0, description="Hold id, unique among active holds")
    customer_email: str = Field(..., description="Customer email address")
    seats: tuple[SeatSnapshot, ...] = Field(..., description="Held seats, most favorable first")
    status: HoldStatus = Field(..., description="Hold status")
    created_at: datetime = Field(..., description="Hold creation time")
    expires_at: datetime = Field(..., description="Hold expiration time")

    @property
    def num_seats(self) -> int:
        return len(self.seats)
