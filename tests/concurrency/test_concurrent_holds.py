"""Concurrency tests for seat holds, confirmations and expirations."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from ticket_service.core.exceptions import HoldNotFoundError, InsufficientInventoryError
from ticket_service.schemas.hold import SeatStatus
from ticket_service.services.ticket_service import TicketService


def test_concurrent_holds_no_overbooking(make_event):
    """Test that concurrent hold requests don't cause overbooking."""
    # Setup
    event = make_event(rows=5, columns=10, hold_duration=timedelta(minutes=5))
    service = TicketService(event)
    service.bind(event.name)

    num_concurrent_requests = 100
    seats_per_request = 1

    def create_hold(customer_id: int):
        """Create a hold for a specific customer."""
        try:
            return service.find_and_hold_seats(seats_per_request, f"customer{customer_id}@example.com")
        except InsufficientInventoryError:
            return None

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(create_hold, range(num_concurrent_requests)))

    successful = [hold for hold in results if hold is not None]

    assert len(successful) == 50
    assert service.num_seats_available() == 0

    positions = [(s.row, s.column) for hold in successful for s in hold.seats]
    assert len(positions) == len(set(positions))
    assert len({hold.id for hold in successful}) == 50
    event.holds.check_invariants()


def test_concurrent_multi_seat_holds(make_event):
    """Test holds of several seats each never share or oversell seats."""
    event = make_event(rows=6, columns=7, hold_duration=timedelta(minutes=5))

    def create_hold(customer_id: int):
        try:
            return event.holds.create_hold(customer_id % 4 + 1, f"c{customer_id}@example.com")
        except InsufficientInventoryError:
            return None

    with ThreadPoolExecutor(max_workers=12) as pool:
        results = [hold for hold in pool.map(create_hold, range(60)) if hold is not None]

    held = sum(hold.num_seats for hold in results)
    assert held + event.available_seats == 42
    positions = [(s.row, s.column) for hold in results for s in hold.seats]
    assert len(positions) == len(set(positions))
    event.holds.check_invariants()


def test_concurrent_confirm_and_release_same_hold(make_event):
    """Test only one of many racing terminal calls wins."""
    event = make_event(hold_duration=timedelta(minutes=5))
    hold = event.holds.create_hold(3, "a@b.com")
    barrier = threading.Barrier(8)

    def attempt(i: int):
        barrier.wait()
        try:
            if i % 2:
                event.holds.confirm_hold(hold.id, "a@b.com")
                return "confirmed"
            event.holds.release_hold(hold.id, "a@b.com")
            return "released"
        except HoldNotFoundError:
            return "missing"

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(8)))

    assert outcomes.count("missing") == 7
    if "confirmed" in outcomes:
        assert event.available_seats == 147
        assert len(event.ledger) == 1
    else:
        assert event.available_seats == 150
        assert len(event.ledger) == 0
    event.holds.check_invariants()


@pytest.mark.parametrize("attempt", range(20))
def test_confirm_races_expiration(make_event, manual_scheduler, attempt):
    """Test a hold confirmed while its timer fires ends up either reserved or released."""
    event = make_event(scheduler=manual_scheduler)
    hold = event.holds.create_hold(4, "a@b.com")
    expire = manual_scheduler.take(hold.id)
    barrier = threading.Barrier(2)
    outcome = {}

    def fire_timer():
        barrier.wait()
        outcome["expired"] = expire()

    def confirm():
        barrier.wait()
        try:
            outcome["code"] = event.holds.confirm_hold(hold.id, "a@b.com").confirmation_code
        except HoldNotFoundError:
            outcome["code"] = None

    threads = [threading.Thread(target=fire_timer), threading.Thread(target=confirm)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(5)

    confirmed = outcome["code"] is not None
    assert confirmed != outcome["expired"]

    statuses = {seat.status for seat in event.seat_map.seats if seat.favorability < 3}
    if confirmed:
        assert event.available_seats == 146
        assert SeatStatus.RESERVED in statuses
        assert len(event.ledger) == 1
    else:
        assert event.available_seats == 150
        assert statuses == {SeatStatus.AVAILABLE}
        assert len(event.ledger) == 0
    event.holds.check_invariants()


@pytest.mark.slow
def test_confirm_races_real_timer(make_event, wait_for):
    """Test confirmations landing around the expiry instant never corrupt state."""
    outcomes = []
    for i in range(10):
        event = make_event(name=f"Race-{i}", hold_duration=timedelta(milliseconds=50))
        hold = event.holds.create_hold(2, "a@b.com")
        time.sleep(0.05)
        try:
            event.holds.confirm_hold(hold.id, "a@b.com")
            outcomes.append("confirmed")
        except HoldNotFoundError:
            outcomes.append("expired")

        assert wait_for(lambda: event.scheduler.pending_count == 0)
        expected = 148 if outcomes[-1] == "confirmed" else 150
        assert event.available_seats == expected
        event.holds.check_invariants()


def test_expirations_concurrent_with_new_holds(make_event, wait_for):
    """Test seats freed by timers are safely reused by concurrent holds."""
    event = make_event(rows=4, columns=5, hold_duration=timedelta(milliseconds=30))

    def churn(customer_id: int):
        made = 0
        for _ in range(10):
            try:
                event.holds.create_hold(2, f"c{customer_id}@example.com")
                made += 1
            except InsufficientInventoryError:
                time.sleep(0.01)
        return made

    with ThreadPoolExecutor(max_workers=6) as pool:
        made = sum(pool.map(churn, range(6)))

    assert made > 0
    assert wait_for(lambda: event.holds.active_count == 0)
    assert event.available_seats == 20
    event.holds.check_invariants()
