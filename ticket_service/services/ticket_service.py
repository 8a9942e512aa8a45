"""Ticket service façade over one ticketed event."""

import logging
from typing import TYPE_CHECKING, Optional

from opentelemetry import trace

from ..core.exceptions import AlreadyBoundError, EventMismatchError, NotBoundError
from ..schemas.hold import SeatHoldSnapshot

if TYPE_CHECKING:
    from ..models.event import TicketedEvent

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class TicketService:
    """
    Public entry point for seat holds and reservations.

    A service is constructed around exactly one event and must be bound to
    that event's name once before use.
    """

    def __init__(self, event: "TicketedEvent"):
        self.event = event
        self._bound_event: Optional[str] = None

    @property
    def bound_event(self) -> Optional[str]:
        return self._bound_event

    @property
    def is_bound(self) -> bool:
        return self._bound_event is not None

    def bind(self, event_name: str) -> None:
        """
        Bind the service to an event name.

        Raises:
            AlreadyBoundError: If the service was bound before, whatever the name
        """
        with self.event.lock:
            if self._bound_event is not None:
                raise AlreadyBoundError(self._bound_event, event_name)
            self._bound_event = event_name

        logger.info(
            "Ticket service bound to event",
            extra={"event_name": event_name}
        )

    def num_seats_available(self) -> int:
        """Number of seats neither held nor reserved."""
        self._require_event()
        return self.event.available_seats

    def find_and_hold_seats(self, num_seats: int, customer_email: str) -> SeatHoldSnapshot:
        """
        Find and hold the best available seats for a customer.

        Args:
            num_seats: Number of seats to find and hold
            customer_email: Unique identifier for the customer

        Returns:
            The new seat hold

        Raises:
            NotBoundError: If the service has not been bound
            EventMismatchError: If the bound name is not the event's name
            InvalidArgumentError: If the seat count or email is invalid
            InsufficientInventoryError: If not enough seats are available
        """
        with tracer.start_as_current_span("ticket_service.find_and_hold_seats") as span:
            self._require_event()
            span.set_attribute("seat_hold.num_seats", num_seats)
            hold = self.event.holds.create_hold(num_seats, customer_email)
            span.set_attribute("seat_hold.id", hold.id)
            return hold

    def reserve_seats(self, seat_hold_id: int, customer_email: str) -> str:
        """
        Commit seats held for a specific customer.

        Args:
            seat_hold_id: The seat hold identifier
            customer_email: The email address of the customer the hold was made for

        Returns:
            A reservation confirmation code

        Raises:
            NotBoundError: If the service has not been bound
            EventMismatchError: If the bound name is not the event's name
            HoldNotFoundError: If the hold does not exist or already expired
        """
        with tracer.start_as_current_span("ticket_service.reserve_seats") as span:
            self._require_event()
            span.set_attribute("seat_hold.id", seat_hold_id)
            reservation = self.event.holds.confirm_hold(seat_hold_id, customer_email)
            return reservation.confirmation_code

    def release_seats(self, seat_hold_id: int, customer_email: str) -> bool:
        """
        Cancel a seat hold and make its seats available again.

        Raises:
            NotBoundError: If the service has not been bound
            EventMismatchError: If the bound name is not the event's name
            HoldNotFoundError: If the hold does not exist or already expired
        """
        with tracer.start_as_current_span("ticket_service.release_seats") as span:
            self._require_event()
            span.set_attribute("seat_hold.id", seat_hold_id)
            return self.event.holds.release_hold(seat_hold_id, customer_email)

    def event_status(self) -> str:
        """Rendered seat grid, active holds and reservations."""
        self._require_event()
        return self.event.render()

    def close(self) -> None:
        self.event.close()

    def __enter__(self) -> "TicketService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_event(self) -> None:
        if self._bound_event is None:
            raise NotBoundError()
        if self._bound_event != self.event.name:
            raise EventMismatchError(self._bound_event, self.event.name)
