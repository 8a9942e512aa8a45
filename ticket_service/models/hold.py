"""Seat hold model definition."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..schemas.hold import HoldStatus, SeatHoldSnapshot
from .seat import Seat


class ReleaseReason(str, Enum):
    """Why an active hold gave its seats back."""
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


@dataclass(eq=False)
class SeatHold:
    """Hold entity representing a temporary, time-limited claim on seats.

    Instances are owned by the hold registry and only mutated while the
    event lock is held.
    """

    id: int
    customer_email: str
    seats: list[Seat]
    created_at: datetime
    expires_at: datetime
    status: HoldStatus = field(default=HoldStatus.ACTIVE)
    release_reason: Optional[ReleaseReason] = None

    @property
    def num_seats(self) -> int:
        return len(self.seats)

    @property
    def is_active(self) -> bool:
        return self.status == HoldStatus.ACTIVE

    def snapshot(self) -> SeatHoldSnapshot:
        """Return an immutable copy safe to hand to callers."""
        return SeatHoldSnapshot.model_validate(self)

    def __repr__(self) -> str:
        return (
            f"<SeatHold(id={self.id}, customer_email='{self.customer_email}', "
            f"seats={self.num_seats}, status={self.status.value}, expires_at={self.expires_at})>"
        )


def format_seats(seats, per_line: int = 6) -> str:
    """Format seat positions as ``[row,col]`` cells, ``per_line`` to a line."""
    cells = [f"[{seat.row},{seat.column}]" for seat in seats]
    lines = [" ".join(cells[i:i + per_line]) for i in range(0, len(cells), per_line)]
    return "\n".join(lines)
