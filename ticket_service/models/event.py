"""Ticketed event aggregate."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import InvalidArgumentError
from ..schemas.event import CreateEventRequest, EventSummary
from ..schemas.hold import SeatHoldSnapshot
from ..services.hold_registry import HoldRegistry
from ..services.reservation_ledger import ReservationLedger
from ..services.seat_map import SeatMap
from ..workers.expiration_scheduler import ExpirationScheduler
from .hold import format_seats
from .reservation import Reservation

logger = logging.getLogger(__name__)

SECTION_RULE = "=" * 54


class TicketedEvent:
    """
    Aggregate root for one ticketed event.

    Owns the seat map, the hold registry and the reservation ledger, and the
    single lock that guards all three. Name, date and grid dimensions are
    fixed at construction.
    """

    def __init__(
        self,
        name: str,
        starts_at: datetime,
        rows: int,
        columns: int,
        *,
        hold_duration: Optional[timedelta] = None,
        scheduler: Optional[ExpirationScheduler] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Create an event with every seat available.

        Args:
            name: Event name
            starts_at: Event date and time; must not be in the past
            rows: Rows of seats, at least one
            columns: Columns of seats, at least one
            hold_duration: Seat hold lifetime; defaults to the configured one
            scheduler: Expiration scheduler to arm hold timers on; a new,
                started scheduler is created when omitted
            settings: Settings to read defaults from

        Raises:
            InvalidArgumentError: If any construction parameter is invalid
        """
        config = settings or default_settings
        duration = hold_duration if hold_duration is not None else config.hold_duration

        try:
            request = CreateEventRequest(
                name=name,
                starts_at=starts_at,
                rows=rows,
                columns=columns,
                hold_duration_seconds=duration.total_seconds(),
            )
        except PydanticValidationError as exc:
            raise InvalidArgumentError.from_pydantic(exc) from exc

        self._name = request.name
        self._starts_at = request.starts_at
        self.lock = threading.RLock()
        self.seat_map = SeatMap(request.rows, request.columns)
        self.ledger = ReservationLedger(code_length=config.confirmation_code_length)

        if scheduler is None:
            scheduler = ExpirationScheduler()
            scheduler.start()
        self.scheduler = scheduler

        self.holds = HoldRegistry(
            self.seat_map,
            self.ledger,
            self.scheduler,
            lock=self.lock,
            event_name=self._name,
            hold_duration=duration,
            id_ceiling=config.hold_id_ceiling,
        )

        logger.info(
            "Ticketed event created",
            extra={
                "event_name": self._name,
                "starts_at": self._starts_at.isoformat(),
                "rows": self.rows,
                "columns": self.columns,
                "hold_duration_seconds": duration.total_seconds()
            }
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def starts_at(self) -> datetime:
        return self._starts_at

    @property
    def rows(self) -> int:
        return self.seat_map.rows

    @property
    def columns(self) -> int:
        return self.seat_map.columns

    @property
    def total_seats(self) -> int:
        return self.seat_map.total_seats

    @property
    def available_seats(self) -> int:
        with self.lock:
            return self.seat_map.available_count

    @property
    def hold_duration(self) -> timedelta:
        return self.holds.hold_duration

    def active_holds(self) -> list[SeatHoldSnapshot]:
        return self.holds.active_holds()

    def reservations(self) -> list[Reservation]:
        with self.lock:
            return self.ledger.reservations()

    def summary(self) -> EventSummary:
        """Counters describing the event's current state."""
        with self.lock:
            return EventSummary(
                name=self.name,
                starts_at=self.starts_at,
                rows=self.rows,
                columns=self.columns,
                total_seats=self.total_seats,
                available_seats=self.seat_map.available_count,
                active_holds=self.holds.active_count,
                reservations=len(self.ledger),
            )

    def render(self) -> str:
        """Human-readable status: seat grid, active holds and reservations."""
        with self.lock:
            lines = [
                "=" * 78,
                f"{'   TicketedEvent   ':=^78}",
                f"Name: {self.name}",
                f"Date: {self.starts_at:%Y-%m-%d} Time: {self.starts_at:%H:%M:%S}",
                f"Available Seats: {self.seat_map.available_count}",
                self.seat_map.render_grid(),
                "",
                SECTION_RULE,
                "Seat Holds:",
            ]
            for hold in self.holds.active_holds():
                lines.append(f"SeatHold: {hold.id} {hold.customer_email}")
                lines.append(format_seats(hold.seats))

            lines.extend([SECTION_RULE, "Reservations:"])
            for reservation in self.ledger:
                lines.extend([
                    "-" * 55,
                    f"Reservation Confirmation Code: {reservation.confirmation_code}",
                    f"Customer Email: {reservation.customer_email}",
                    f"Seats: {format_seats(reservation.hold.seats)}",
                ])

            return "\n".join(lines) + "\n"

    def close(self) -> None:
        """Stop the expiration scheduler; pending holds stay active."""
        if self.scheduler.is_running:
            self.scheduler.stop()

    def __repr__(self) -> str:
        return (
            f"<TicketedEvent(name='{self.name}', starts_at={self.starts_at}, "
            f"rows={self.rows}, columns={self.columns}, available={self.seat_map.available_count})>"
        )
