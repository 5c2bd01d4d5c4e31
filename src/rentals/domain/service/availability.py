"""Domain service: Availability Calculator.

Pure functions over a product's occupying intervals.  No I/O happens
here, so every function can be called while holding a product lock.

Overlap policy: boundaries are inclusive.  A unit returned on day N is
not considered available for a delivery on day N, because same-day
turnaround (cleaning, inspection, transport) cannot be guaranteed.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from rentals.domain.model.reservation import ReservationInterval
from rentals.domain.model.value_objects import DateRange


@dataclass(frozen=True)
class AvailabilityVerdict:
    """Outcome of an admission check over a window."""

    admissible: bool
    peak_reserved: int
    available_quantity: int


@dataclass(frozen=True)
class DayAvailability:
    day: date
    reserved: int
    available: int


def overlaps(a: DateRange, b: DateRange) -> bool:
    """Inclusive-boundary overlap: ``a1 <= b2 and b1 <= a2``."""
    return a.start <= b.end and b.start <= a.end


def _relevant(
    intervals: Iterable[ReservationInterval],
    window: DateRange,
    exclude_order_id: str | None,
) -> list[ReservationInterval]:
    return [
        i
        for i in intervals
        if i.is_occupying
        and i.order_id != exclude_order_id
        and overlaps(i.period, window)
    ]


def peak_reserved(
    intervals: Iterable[ReservationInterval],
    window: DateRange,
    exclude_order_id: str | None = None,
) -> int:
    """Maximum number of units out on any single day of ``window``.

    Sweep-line: each interval, clipped to the window, contributes ``+q`` on
    its first day and ``-q`` on the day after its last.  Removals sort
    before additions on the same day, so an interval ending on day N and
    one starting on day N+1 are never counted together.
    """
    events: list[tuple[date, int]] = []
    for interval in _relevant(intervals, window, exclude_order_id):
        first = max(interval.period.start, window.start)
        last = min(interval.period.end, window.end)
        events.append((first, interval.quantity))
        if last < date.max:  # nothing follows date.max
            events.append((last + timedelta(days=1), -interval.quantity))

    # (day, delta) sorts negatives first within a day.
    events.sort()
    running = peak = 0
    for _, delta in events:
        running += delta
        peak = max(peak, running)
    return peak


def reserved_on(
    intervals: Iterable[ReservationInterval],
    day: date,
    exclude_order_id: str | None = None,
) -> int:
    """Units out on a single day."""
    return peak_reserved(intervals, DateRange.single(day), exclude_order_id)


def evaluate(
    stock_quantity: int,
    intervals: Iterable[ReservationInterval],
    window: DateRange,
    quantity: int,
    exclude_order_id: str | None = None,
) -> AvailabilityVerdict:
    """Would reserving ``quantity`` more units over ``window`` fit in stock?"""
    peak = peak_reserved(intervals, window, exclude_order_id)
    return AvailabilityVerdict(
        admissible=peak + quantity <= stock_quantity,
        peak_reserved=peak,
        available_quantity=max(stock_quantity - peak, 0),
    )


def daily_breakdown(
    stock_quantity: int,
    intervals: Iterable[ReservationInterval],
    window: DateRange,
    exclude_order_id: str | None = None,
) -> list[DayAvailability]:
    """Reserved and available units for each day of ``window``.

    Read-only calendar view; it plays no part in admission.
    """
    deltas: dict[date, int] = {}
    for interval in _relevant(intervals, window, exclude_order_id):
        first = max(interval.period.start, window.start)
        last = min(interval.period.end, window.end)
        deltas[first] = deltas.get(first, 0) + interval.quantity
        if last < date.max:
            after = last + timedelta(days=1)
            deltas[after] = deltas.get(after, 0) - interval.quantity

    result: list[DayAvailability] = []
    running = 0
    for day in window.days():
        running += deltas.get(day, 0)
        result.append(
            DayAvailability(
                day=day,
                reserved=running,
                available=max(stock_quantity - running, 0),
            )
        )
    return result
