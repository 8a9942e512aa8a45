"""Service layer package."""

from .favorability import rank_seats, seat_favorability
from .hold_registry import HoldIdAllocator, HoldRegistry
from .reservation_ledger import ReservationLedger
from .seat_map import SeatMap
from .ticket_service import TicketService

__all__ = [
    "HoldIdAllocator",
    "HoldRegistry",
    "ReservationLedger",
    "SeatMap",
    "TicketService",
    "rank_seats",
    "seat_favorability",
]
