"""Test configuration and fixtures."""

import time
from datetime import datetime, timedelta

import pytest

from ticket_service.models.event import TicketedEvent
from ticket_service.services.ticket_service import TicketService
from ticket_service.workers.expiration_scheduler import ExpirationScheduler


class ManualScheduler(ExpirationScheduler):
    """Expiration scheduler whose timers only fire when a test says so."""

    def __init__(self):
        super().__init__(name="ManualExpiry")
        self.callbacks = {}
        self.start()

    @property
    def pending_count(self) -> int:
        return len(self.callbacks)

    def schedule(self, key, delay_seconds, callback):
        if not self.is_running:
            # Let the base class raise its not-running error
            return super().schedule(key, delay_seconds, callback)
        self.callbacks[key] = callback

    def cancel(self, key):
        return self.callbacks.pop(key, None) is not None

    def stop(self):
        self.callbacks.clear()
        super().stop()

    def fire(self, key) -> None:
        """Fire the timer armed for ``key`` on the calling thread."""
        self.callbacks.pop(key)()

    def take(self, key):
        """Forget the timer for ``key`` and hand back its callback."""
        return self.callbacks.pop(key)


def poll_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def future_start():
    """An event start time safely in the future."""
    return datetime.now() + timedelta(days=30)


@pytest.fixture
def make_event(future_start):
    """Factory for ticketed events that are closed after the test."""
    created = []

    def _make_event(
        name: str = "Amazing-Concert-@-The-Showbox",
        rows: int = 10,
        columns: int = 15,
        hold_duration: timedelta = timedelta(seconds=20),
        scheduler=None,
        starts_at=None,
        **kwargs,
    ) -> TicketedEvent:
        event = TicketedEvent(
            name=name,
            starts_at=starts_at or future_start,
            rows=rows,
            columns=columns,
            hold_duration=hold_duration,
            scheduler=scheduler,
            **kwargs,
        )
        created.append(event)
        return event

    yield _make_event

    for event in created:
        event.close()


@pytest.fixture
def manual_scheduler():
    """Scheduler whose timers fire only on demand."""
    scheduler = ManualScheduler()
    yield scheduler
    if scheduler.is_running:
        scheduler.stop()


@pytest.fixture
def event(make_event):
    """A 10x15 event with the default 20 second hold duration."""
    return make_event()


@pytest.fixture
def manual_event(make_event, manual_scheduler):
    """A 10x15 event whose expiration timers are driven by the test."""
    return make_event(scheduler=manual_scheduler)


@pytest.fixture
def ticket_service(event):
    """A ticket service bound to ``event``."""
    service = TicketService(event)
    service.bind(event.name)
    return service


@pytest.fixture
def sample_hold_data():
    """Sample hold data for testing."""
    return {
        "num_seats": 10,
        "customer_email": "a@b.com",
    }


@pytest.fixture
def wait_for():
    """Poll a predicate until it holds or a timeout passes."""
    return poll_until
