"""Seat map holding the authoritative per-seat state of one event."""

from collections import Counter
from typing import Iterable

from ..core.exceptions import InvalidArgumentError, InvariantViolationError
from ..models.seat import Seat
from ..schemas.hold import SeatStatus
from .favorability import rank_seats, seat_favorability

STAGE_SIGN = "[[  STAGE  ]]"


class SeatMap:
    """
    Seat grid with a denormalized available-seat counter.

    Not thread-safe on its own; the owning event serializes access.
    """

    def __init__(self, rows: int, columns: int):
        if rows < 1:
            raise InvalidArgumentError("Rows of seats in the event cannot be less than one")
        if columns < 1:
            raise InvalidArgumentError("Columns of seats in the event cannot be less than one")

        self.rows = rows
        self.columns = columns
        self._seats: list[Seat] = [
            Seat(
                row=row + 1,
                column=col + 1,
                favorability=seat_favorability(row, col, rows, columns),
            )
            for row in range(rows)
            for col in range(columns)
        ]
        self._available = len(self._seats)

    @property
    def seats(self) -> list[Seat]:
        """All seats in construction order (front-to-back, left-to-right)."""
        return list(self._seats)

    @property
    def total_seats(self) -> int:
        return self.rows * self.columns

    @property
    def available_count(self) -> int:
        return self._available

    def seat_at(self, row: int, column: int) -> Seat:
        """Return the seat at a 1-indexed position."""
        if not (1 <= row <= self.rows and 1 <= column <= self.columns):
            raise InvalidArgumentError(
                f"Seat [{row},{column}] is outside the {self.rows}x{self.columns} grid"
            )
        return self._seats[(row - 1) * self.columns + (column - 1)]

    def available_seats(self) -> list[Seat]:
        """Available seats ranked from most to least favorable."""
        return rank_seats(seat for seat in self._seats if seat.status == SeatStatus.AVAILABLE)

    def mark(self, seats: Iterable[Seat], status: SeatStatus) -> None:
        """
        Move seats to a new status, keeping the available counter in step.

        Raises:
            InvariantViolationError: If a transition is not allowed
        """
        seats = list(seats)
        for seat in seats:
            if not _transition_allowed(seat.status, status):
                raise InvariantViolationError(
                    f"Seat [{seat.row},{seat.column}] cannot move from "
                    f"{seat.status.value} to {status.value}"
                )

        for seat in seats:
            if seat.status == SeatStatus.AVAILABLE:
                self._available -= 1
            if status == SeatStatus.AVAILABLE:
                self._available += 1
            seat.status = status

    def count_by_status(self) -> dict[SeatStatus, int]:
        counts = Counter(seat.status for seat in self._seats)
        return {status: counts.get(status, 0) for status in SeatStatus}

    def render_grid(self) -> str:
        """Render the grid under a stage banner, one status symbol per seat."""
        padding = "-" * max(0, (self.columns - len(STAGE_SIGN)) // 2)
        lines = [padding + STAGE_SIGN + padding, "-" * self.columns]
        for row in range(self.rows):
            start = row * self.columns
            lines.append(
                "".join(seat.status.symbol for seat in self._seats[start:start + self.columns])
            )
        return "\n".join(lines)


_ALLOWED_TRANSITIONS = {
    (SeatStatus.AVAILABLE, SeatStatus.HELD),
    (SeatStatus.HELD, SeatStatus.RESERVED),
    (SeatStatus.HELD, SeatStatus.AVAILABLE),
}


def _transition_allowed(current: SeatStatus, target: SeatStatus) -> bool:
    return (current, target) in _ALLOWED_TRANSITIONS
