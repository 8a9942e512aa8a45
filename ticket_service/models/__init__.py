"""Models module exporting the in-memory domain entities."""

from .event import TicketedEvent
from .hold import ReleaseReason, SeatHold
from .reservation import Reservation
from .seat import Seat

__all__ = [
    # Aggregate root
    "TicketedEvent",

    # Seat entities
    "Seat",
    "SeatHold",
    "ReleaseReason",

    # Reservation entity
    "Reservation",
]
