# backend/agenda/services/slots/occupancy.py
"""
Buffer-aware overlap and capacity checks.

Both the candidate and every busy booking are padded by the same
buffers before comparison. Intervals are half-open: touching ends
do not overlap.
"""

from datetime import datetime, timedelta
from typing import Iterable

from .models import BookingRecord


def expand(
    start: datetime,
    end: datetime,
    buffer_before: timedelta,
    buffer_after: timedelta,
) -> tuple[datetime, datetime]:
    return start - buffer_before, end + buffer_after


def overlaps(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    return a_start < b_end and a_end > b_start


def count_overlapping(
    candidate_start: datetime,
    candidate_end: datetime,
    bookings: Iterable[BookingRecord],
    buffer_before: timedelta,
    buffer_after: timedelta,
) -> int:
    """
    Count busy bookings overlapping an already buffered candidate interval.

    Non-busy bookings (cancelled, no_show) are ignored.
    """
    count = 0
    for booking in bookings:
        if not booking.is_busy:
            continue
        b_start, b_end = expand(booking.start, booking.end, buffer_before, buffer_after)
        if overlaps(candidate_start, candidate_end, b_start, b_end):
            count += 1
    return count


def has_capacity(occupied: int, capacity: int) -> bool:
    return occupied < capacity
