"""Reservation model definition."""

from dataclasses import dataclass
from datetime import datetime

from ..schemas.hold import SeatHoldSnapshot


@dataclass(frozen=True)
class Reservation:
    """Reservation entity representing a confirmed, permanent seat hold."""

    confirmation_code: str
    hold: SeatHoldSnapshot
    customer_email: str
    confirmed_at: datetime

    @property
    def num_seats(self) -> int:
        return self.hold.num_seats

    def __repr__(self) -> str:
        return (
            f"<Reservation(confirmation_code='{self.confirmation_code}', hold_id={self.hold.id}, "
            f"customer_email='{self.customer_email}', seats={self.num_seats})>"
        )
