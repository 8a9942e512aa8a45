"""Background timers that expire seat holds."""

import logging
import threading
from typing import Callable, Hashable

from ..core.exceptions import InvariantViolationError, SchedulerNotRunningError

logger = logging.getLogger(__name__)


class ExpirationScheduler:
    """
    Arms one single-shot timer per outstanding hold.

    Timers run on daemon threads. When a timer fires it forgets its own
    entry and invokes the callback it was armed with; the callback is
    responsible for deciding, under its own lock, whether the hold is still
    worth expiring. Timers are never retried or re-armed.
    """

    def __init__(self, name: str = "HoldExpiry"):
        """
        Initialize the scheduler.

        Args:
            name: Scheduler name for logging
        """
        self.name = name
        self._running = False
        self._timers: dict[Hashable, threading.Timer] = {}
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending_count(self) -> int:
        """Number of armed timers that have neither fired nor been cancelled."""
        with self._lock:
            return len(self._timers)

    def start(self) -> None:
        """Start accepting timers."""
        with self._lock:
            if self._running:
                logger.warning(f"{self.name} scheduler is already running")
                return
            self._running = True

        logger.info(f"{self.name} scheduler started")

    def stop(self) -> None:
        """Stop the scheduler and cancel every pending timer."""
        with self._lock:
            if not self._running:
                logger.warning(f"{self.name} scheduler is not running")
                return
            self._running = False
            timers = list(self._timers.values())
            self._timers.clear()

        for timer in timers:
            timer.cancel()

        logger.info(
            f"{self.name} scheduler stopped",
            extra={"cancelled_timers": len(timers), "scheduler": self.name}
        )

    def schedule(self, key: Hashable, delay_seconds: float, callback: Callable[[], None]) -> None:
        """
        Arm a timer that invokes ``callback`` once after ``delay_seconds``.

        Args:
            key: Identifier of the hold the timer belongs to
            delay_seconds: Seconds until the timer fires
            callback: Called on the timer thread when the timer fires

        Raises:
            SchedulerNotRunningError: If the scheduler has been stopped
            InvariantViolationError: If a timer is already armed for ``key``
        """
        timer = threading.Timer(delay_seconds, self._fire, args=(key, callback))
        timer.daemon = True
        timer.name = f"{self.name}-{key}"

        with self._lock:
            if not self._running:
                raise SchedulerNotRunningError(self.name)
            if key in self._timers:
                raise InvariantViolationError(
                    f"An expiration timer is already armed for hold {key}"
                )
            self._timers[key] = timer
            timer.start()

        logger.debug(
            "Expiration timer armed",
            extra={"hold_key": key, "delay_seconds": delay_seconds, "scheduler": self.name}
        )

    def cancel(self, key: Hashable) -> bool:
        """
        Cancel the timer armed for ``key``.

        Returns:
            True if a pending timer was cancelled, False if none was armed
            or it has already fired
        """
        with self._lock:
            timer = self._timers.pop(key, None)

        if timer is None:
            return False

        timer.cancel()
        logger.debug(
            "Expiration timer cancelled",
            extra={"hold_key": key, "scheduler": self.name}
        )
        return True

    def _fire(self, key: Hashable, callback: Callable[[], None]) -> None:
        """Timer thread entry point."""
        with self._lock:
            if self._timers.get(key) is threading.current_thread():
                del self._timers[key]

        try:
            callback()
        except Exception as e:
            logger.error(
                f"{self.name} timer error: {str(e)}",
                exc_info=True,
                extra={"hold_key": key, "scheduler": self.name}
            )
