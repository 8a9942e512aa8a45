"""Property-based tests for seat inventory invariants."""

from contextlib import contextmanager
from datetime import datetime, timedelta

from hypothesis import given, settings
from hypothesis import strategies as st

from ticket_service.core.exceptions import HoldNotFoundError, InsufficientInventoryError
from ticket_service.models.event import TicketedEvent
from ticket_service.schemas.hold import SeatStatus
from ticket_service.services.favorability import seat_favorability
from ticket_service.services.seat_map import SeatMap

# Strategies for generating test data
row_counts = st.integers(min_value=1, max_value=8)
column_counts = st.integers(min_value=1, max_value=12)
seat_requests = st.integers(min_value=1, max_value=12)
operations = st.lists(
    st.one_of(
        st.tuples(st.just("hold"), seat_requests),
        st.tuples(st.sampled_from(["confirm", "release", "expire"]), st.integers(0, 30)),
    ),
    min_size=1,
    max_size=30,
)


@contextmanager
def open_event(rows: int, columns: int):
    """Yield an event with long-lived holds, closing it afterwards."""
    event = TicketedEvent(
        name="Property-Show",
        starts_at=datetime.now() + timedelta(days=30),
        rows=rows,
        columns=columns,
        hold_duration=timedelta(hours=1),
    )
    try:
        yield event
    finally:
        event.close()


@given(rows=row_counts, columns=column_counts)
def test_seat_count_matches_grid(rows, columns):
    """Test a new seat map has rows x columns available seats."""
    seat_map = SeatMap(rows, columns)

    assert seat_map.total_seats == rows * columns
    assert seat_map.available_count == rows * columns
    assert len({seat.position for seat in seat_map.seats}) == rows * columns


@given(rows=row_counts, columns=column_counts, data=st.data())
def test_favorability_is_deterministic(rows, columns, data):
    """Test a seat's score depends only on its position and the grid shape."""
    row = data.draw(st.integers(0, rows - 1))
    col = data.draw(st.integers(0, columns - 1))

    score = seat_favorability(row, col, rows, columns)

    assert score == seat_favorability(row, col, rows, columns)
    assert score >= 0
    assert SeatMap(rows, columns).seat_at(row + 1, col + 1).favorability == score


@settings(max_examples=50, deadline=None)
@given(rows=row_counts, columns=column_counts, data=st.data())
def test_hold_takes_lowest_scores(rows, columns, data):
    """Test a hold's seats are the n lowest scoring available seats."""
    num_seats = data.draw(st.integers(1, rows * columns))

    with open_event(rows, columns) as event:
        all_scores = sorted(seat.favorability for seat in event.seat_map.seats)

        hold = event.holds.create_hold(num_seats, "a@b.com")

        held_scores = sorted(seat.favorability for seat in hold.seats)
        assert held_scores == all_scores[:num_seats]
        remaining = [seat.favorability for seat in event.seat_map.available_seats()]
        assert not remaining or max(held_scores) <= min(remaining)


@settings(max_examples=50, deadline=None)
@given(rows=row_counts, columns=column_counts, ops=operations)
def test_operations_preserve_invariants(rows, columns, ops):
    """Test any sequence of holds, confirms, releases and expirations stays consistent."""
    with open_event(rows, columns) as event:
        registry = event.holds
        total = rows * columns
        hold_ids = []
        reserved = 0

        for op, arg in ops:
            if op == "hold":
                try:
                    hold_ids.append(registry.create_hold(arg, f"c{len(hold_ids)}@example.com").id)
                except InsufficientInventoryError:
                    assert arg > event.available_seats
            elif hold_ids:
                hold_id = hold_ids[arg % len(hold_ids)]
                email = f"c{hold_ids.index(hold_id)}@example.com"
                if op == "expire":
                    internal = registry._active.get(hold_id)
                    if internal is not None:
                        assert registry.expire_hold(internal) is True
                        assert registry.expire_hold(internal) is False
                else:
                    try:
                        if op == "confirm":
                            reserved += registry.confirm_hold(hold_id, email).num_seats
                        else:
                            registry.release_hold(hold_id, email)
                    except HoldNotFoundError:
                        assert registry.get_hold(hold_id, email) is None

            registry.check_invariants()
            counts = event.seat_map.count_by_status()
            assert sum(counts.values()) == total
            assert counts[SeatStatus.AVAILABLE] == event.available_seats
            assert counts[SeatStatus.RESERVED] == reserved
            assert counts[SeatStatus.HELD] == sum(h.num_seats for h in registry.active_holds())
