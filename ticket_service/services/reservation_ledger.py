"""Append-only ledger of confirmed reservations."""

import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Iterator, Optional

from ..models.hold import SeatHold
from ..models.reservation import Reservation

logger = logging.getLogger(__name__)


class ReservationLedger:
    """
    Confirmation code to reservation record, in confirmation order.

    Not thread-safe on its own; the owning event serializes access.
    """

    def __init__(self, code_length: int = 8):
        self.code_length = code_length
        self._reservations: dict[str, Reservation] = {}

    def _generate_confirmation_code(self) -> str:
        """Generate a random reservation confirmation code."""
        alphabet = string.ascii_uppercase + string.digits
        return ''.join(secrets.choice(alphabet) for _ in range(self.code_length))

    def record(self, hold: SeatHold) -> Reservation:
        """
        Append a reservation for a hold whose seats are now reserved.

        Args:
            hold: The confirmed hold

        Returns:
            The new reservation carrying a code unique within this ledger
        """
        confirmation_code = self._generate_confirmation_code()
        while confirmation_code in self._reservations:
            confirmation_code = self._generate_confirmation_code()

        reservation = Reservation(
            confirmation_code=confirmation_code,
            hold=hold.snapshot(),
            customer_email=hold.customer_email,
            confirmed_at=datetime.now(timezone.utc),
        )
        self._reservations[confirmation_code] = reservation

        logger.info(
            "Reservation recorded",
            extra={
                "confirmation_code": confirmation_code,
                "hold_id": hold.id,
                "customer_email": hold.customer_email,
                "seats": hold.num_seats,
                "ledger_size": len(self._reservations)
            }
        )

        return reservation

    def get(self, confirmation_code: str) -> Optional[Reservation]:
        """Get a reservation by confirmation code."""
        return self._reservations.get(confirmation_code)

    def reservations(self) -> list[Reservation]:
        """All reservations, oldest first."""
        return list(self._reservations.values())

    def __len__(self) -> int:
        return len(self._reservations)

    def __iter__(self) -> Iterator[Reservation]:
        return iter(self.reservations())

    def __contains__(self, confirmation_code: object) -> bool:
        return confirmation_code in self._reservations
