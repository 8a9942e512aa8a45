"""Seat favorability scoring and ranking."""

from typing import Iterable

from ..models.seat import Seat


def seat_favorability(row: int, col: int, rows: int, cols: int) -> int:
    """
    Score how desirable a seat is; lower is better.

    Rows closer to the stage and columns closer to the center score lower.

    Args:
        row: 0-indexed row, 0 being the front
        col: 0-indexed column
        rows: Number of rows in the grid
        cols: Number of columns in the grid

    Returns:
        The favorability score
    """
    center = cols // 2
    return row * rows + abs(col - center)


def rank_seats(seats: Iterable[Seat]) -> list[Seat]:
    """Order seats from most to least favorable.

    The sort is stable, so equally scored seats keep their front-to-back,
    left-to-right grid order.
    """
    return sorted(seats, key=lambda seat: seat.favorability)
