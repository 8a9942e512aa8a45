"""Hold registry owning the seat-hold state machine."""

import logging
import threading
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Container, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import (
    HoldIdsExhaustedError,
    HoldNotFoundError,
    InsufficientInventoryError,
    InvalidArgumentError,
    InvariantViolationError,
)
from ..core.observability import MetricsCollector, metrics_collector
from ..models.hold import ReleaseReason, SeatHold
from ..models.reservation import Reservation
from ..schemas.hold import CreateHoldRequest, HoldStatus, SeatHoldSnapshot, SeatStatus
from ..workers.expiration_scheduler import ExpirationScheduler
from .reservation_ledger import ReservationLedger
from .seat_map import SeatMap

logger = logging.getLogger(__name__)

HOLD_REQUEST_MESSAGES = {
    "num_seats": "non-positive seat count",
    "num_seats:int_type": "seat count must be an integer",
    "customer_email": "malformed email",
}


class HoldIdAllocator:
    """
    Bounded hold id counter.

    Ids count up from 0 and wrap back to 0 at ``ceiling``. Because ids
    repeat after wrapping, candidates that belong to an active hold are
    skipped.
    """

    def __init__(self, ceiling: int = 10000):
        if ceiling < 1:
            raise InvalidArgumentError("Hold id ceiling must be at least one")
        self.ceiling = ceiling
        self._next = 0

    @property
    def next_candidate(self) -> int:
        return self._next

    def allocate(self, in_use: Container[int]) -> int:
        """
        Return the next id not present in ``in_use``.

        Raises:
            HoldIdsExhaustedError: If every id below the ceiling is in use
        """
        for _ in range(self.ceiling):
            candidate = self._next
            self._next = (self._next + 1) % self.ceiling
            if candidate not in in_use:
                return candidate

        raise HoldIdsExhaustedError(self.ceiling)


class HoldRegistry:
    """
    Active seat holds of one event and the transitions between their states.

    A hold starts ACTIVE and moves exactly once, to CONFIRMED or RELEASED.
    Explicit calls and expiration timers all funnel into ``_transition``
    under the event lock, so whichever trigger arrives first wins and the
    others observe the hold already gone.
    """

    def __init__(
        self,
        seat_map: SeatMap,
        ledger: ReservationLedger,
        scheduler: ExpirationScheduler,
        *,
        lock: Optional[threading.RLock] = None,
        event_name: str = "",
        hold_duration: timedelta = timedelta(seconds=20),
        id_ceiling: int = 10000,
        metrics: MetricsCollector = metrics_collector,
    ):
        if hold_duration <= timedelta(0):
            raise InvalidArgumentError("Seat hold duration must be positive")

        self.seat_map = seat_map
        self.ledger = ledger
        self.scheduler = scheduler
        self.lock = lock or threading.RLock()
        self.event_name = event_name
        self.hold_duration = hold_duration
        self.id_allocator = HoldIdAllocator(id_ceiling)
        self.metrics = metrics
        self._active: dict[int, SeatHold] = {}

    @property
    def active_count(self) -> int:
        with self.lock:
            return len(self._active)

    def active_holds(self) -> list[SeatHoldSnapshot]:
        """Snapshots of the active holds, in creation order."""
        with self.lock:
            return [hold.snapshot() for hold in self._active.values()]

    def get_hold(self, hold_id: int, customer_email: str) -> Optional[SeatHoldSnapshot]:
        """Snapshot of the active hold matching id and email, if any."""
        with self.lock:
            hold = self._active.get(hold_id)
            if hold is None or hold.customer_email != customer_email:
                return None
            return hold.snapshot()

    def create_hold(self, num_seats: int, customer_email: str) -> SeatHoldSnapshot:
        """
        Hold the most favorable available seats for a customer.

        Args:
            num_seats: Number of seats to hold
            customer_email: Customer email address

        Returns:
            Snapshot of the new active hold

        Raises:
            InvalidArgumentError: If the seat count or email is invalid
            InsufficientInventoryError: If not enough seats are available
        """
        try:
            request = CreateHoldRequest(num_seats=num_seats, customer_email=customer_email)
        except PydanticValidationError as exc:
            raise InvalidArgumentError.from_pydantic(exc, HOLD_REQUEST_MESSAGES) from exc

        with self.lock:
            available = self.seat_map.available_count
            if request.num_seats > available:
                logger.warning(
                    "Hold creation failed - insufficient inventory",
                    extra={
                        "event_name": self.event_name,
                        "requested_seats": request.num_seats,
                        "available_seats": available,
                        "customer_email": customer_email
                    }
                )
                raise InsufficientInventoryError(
                    requested_seats=request.num_seats,
                    available_seats=available,
                    event_name=self.event_name
                )

            seats = self.seat_map.available_seats()[:request.num_seats]
            if len(seats) < request.num_seats:
                raise InsufficientInventoryError(
                    requested_seats=request.num_seats,
                    available_seats=len(seats),
                    event_name=self.event_name
                )

            hold_id = self.id_allocator.allocate(self._active)
            if hold_id in self._active:
                raise InvariantViolationError(f"Hold id {hold_id} is already active")

            created_at = datetime.now(timezone.utc)
            hold = SeatHold(
                id=hold_id,
                customer_email=customer_email,
                seats=seats,
                created_at=created_at,
                expires_at=created_at + self.hold_duration,
            )

            self.seat_map.mark(seats, SeatStatus.HELD)
            self._active[hold_id] = hold

            try:
                self.scheduler.schedule(
                    hold_id,
                    self.hold_duration.total_seconds(),
                    partial(self.expire_hold, hold),
                )
            except Exception:
                self.seat_map.mark(seats, SeatStatus.AVAILABLE)
                del self._active[hold_id]
                raise

            self.metrics.record_hold_created(self.event_name)
            self._update_gauges()

            logger.info(
                "Hold created successfully",
                extra={
                    "event_name": self.event_name,
                    "hold_id": hold_id,
                    "customer_email": hold.customer_email,
                    "seats": hold.num_seats,
                    "expires_at": hold.expires_at.isoformat(),
                    "remaining_seats": self.seat_map.available_count
                }
            )

            return hold.snapshot()

    def confirm_hold(self, hold_id: int, customer_email: str) -> Reservation:
        """
        Turn an active hold into a reservation.

        Args:
            hold_id: Hold id
            customer_email: Email the hold was created for

        Returns:
            The recorded reservation

        Raises:
            HoldNotFoundError: If no active hold matches, including expired ones
        """
        with self.lock:
            hold = self._find_active(hold_id, customer_email)
            self._transition(hold, HoldStatus.CONFIRMED)
            reservation = self.ledger.record(hold)

            self.metrics.record_reservation_confirmed(self.event_name)
            self._update_gauges()

            logger.info(
                "Hold confirmed successfully",
                extra={
                    "event_name": self.event_name,
                    "hold_id": hold_id,
                    "customer_email": customer_email,
                    "confirmation_code": reservation.confirmation_code,
                    "seats": hold.num_seats
                }
            )

            return reservation

    def release_hold(self, hold_id: int, customer_email: str) -> bool:
        """
        Give an active hold's seats back to the available pool.

        Returns:
            True once the hold has been released

        Raises:
            HoldNotFoundError: If no active hold matches, including expired ones
        """
        with self.lock:
            hold = self._find_active(hold_id, customer_email)
            self._transition(hold, HoldStatus.RELEASED, ReleaseReason.CANCELLED)

            self.metrics.record_hold_cancelled(self.event_name)
            self._update_gauges()

            logger.info(
                "Hold released",
                extra={
                    "event_name": self.event_name,
                    "hold_id": hold_id,
                    "customer_email": customer_email,
                    "seats_restored": hold.num_seats,
                    "available_seats": self.seat_map.available_count
                }
            )

            return True

    def expire_hold(self, hold: SeatHold) -> bool:
        """
        Release ``hold`` if it is still the active hold under its id.

        Called from expiration timer threads. A hold that was already
        confirmed or released, or whose id now belongs to a newer hold, is
        left alone.

        Returns:
            True if the hold was released, False if the call was a no-op
        """
        with self.lock:
            if not self._transition(hold, HoldStatus.RELEASED, ReleaseReason.EXPIRED):
                logger.debug(
                    "Expiration ignored - hold no longer active",
                    extra={"event_name": self.event_name, "hold_id": hold.id}
                )
                return False

            self.metrics.record_hold_expired(self.event_name)
            self._update_gauges()

            logger.info(
                "Hold expired and seats restored",
                extra={
                    "event_name": self.event_name,
                    "hold_id": hold.id,
                    "customer_email": hold.customer_email,
                    "seats_restored": hold.num_seats,
                    "available_seats": self.seat_map.available_count
                }
            )

            return True

    def check_invariants(self) -> None:
        """
        Verify the seat map, active holds and ledger agree with each other.

        Raises:
            InvariantViolationError: On the first inconsistency found
        """
        with self.lock:
            counts = self.seat_map.count_by_status()

            if counts[SeatStatus.AVAILABLE] != self.seat_map.available_count:
                raise InvariantViolationError(
                    f"Available counter is {self.seat_map.available_count} but "
                    f"{counts[SeatStatus.AVAILABLE]} seats are available"
                )

            held_seats = set()
            for hold_id, hold in self._active.items():
                if hold.id != hold_id or not hold.is_active:
                    raise InvariantViolationError(f"Registry entry {hold_id} holds {hold!r}")
                for seat in hold.seats:
                    if seat.status != SeatStatus.HELD:
                        raise InvariantViolationError(f"{seat!r} belongs to active hold {hold_id}")
                    if seat.position in held_seats:
                        raise InvariantViolationError(f"{seat!r} appears in two active holds")
                    held_seats.add(seat.position)

            if len(held_seats) != counts[SeatStatus.HELD]:
                raise InvariantViolationError(
                    f"{counts[SeatStatus.HELD]} seats are held but active holds cover {len(held_seats)}"
                )

            reserved = sum(reservation.num_seats for reservation in self.ledger)
            if reserved != counts[SeatStatus.RESERVED]:
                raise InvariantViolationError(
                    f"{counts[SeatStatus.RESERVED]} seats are reserved but the ledger records {reserved}"
                )

    def _find_active(self, hold_id: int, customer_email: str) -> SeatHold:
        """Look up the active hold matching id and email; caller holds the lock."""
        hold = self._active.get(hold_id)
        if hold is None or hold.customer_email != customer_email:
            logger.warning(
                "Hold not found",
                extra={
                    "event_name": self.event_name,
                    "hold_id": hold_id,
                    "customer_email": customer_email
                }
            )
            raise HoldNotFoundError(hold_id, customer_email)

        if hold.id != hold_id or not hold.is_active:
            raise InvariantViolationError(
                f"Registry entry {hold_id} does not hold an active hold with that id: {hold!r}"
            )

        return hold

    def _transition(
        self,
        hold: SeatHold,
        target: HoldStatus,
        reason: Optional[ReleaseReason] = None,
    ) -> bool:
        """
        Apply the single terminal transition of ``hold``; caller holds the lock.

        Returns:
            False if ``hold`` is no longer the active hold under its id
        """
        if self._active.get(hold.id) is not hold:
            return False

        seat_status = SeatStatus.RESERVED if target == HoldStatus.CONFIRMED else SeatStatus.AVAILABLE
        self.seat_map.mark(hold.seats, seat_status)

        hold.status = target
        hold.release_reason = reason
        del self._active[hold.id]
        self.scheduler.cancel(hold.id)
        return True

    def _update_gauges(self) -> None:
        self.metrics.set_inventory(
            self.event_name,
            active_holds=len(self._active),
            available_seats=self.seat_map.available_count,
        )
