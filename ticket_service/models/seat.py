"""Seat model definition."""

from dataclasses import dataclass, field

from ..schemas.hold import SeatStatus


@dataclass(eq=False)
class Seat:
    """Seat entity representing one position in the event's seat grid."""

    row: int
    column: int
    favorability: int
    status: SeatStatus = field(default=SeatStatus.AVAILABLE)

    @property
    def position(self) -> tuple[int, int]:
        """The (row, column) pair identifying this seat."""
        return (self.row, self.column)

    def __repr__(self) -> str:
        return (
            f"<Seat(row={self.row}, column={self.column}, "
            f"favorability={self.favorability}, status={self.status.value})>"
        )
