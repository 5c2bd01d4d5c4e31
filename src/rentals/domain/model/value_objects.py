"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from rentals.domain.exceptions import ValidationError

# Return date stored for rentals booked without one.
OPEN_ENDED_RETURN = date(2099, 12, 31)


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot reserve zero or negative units.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class DateRange:
    """An inclusive span of calendar days, delivery date to return date.

    A range whose start equals its end is a single-day rental.  Both
    boundaries belong to the range, so a return on day N and a delivery
    on day N overlap.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise ValidationError("Date range boundaries must be dates")
        if self.start > self.end:
            raise ValidationError(
                f"Return date {self.end.isoformat()} is before "
                f"delivery date {self.start.isoformat()}"
            )

    # --- Queries --------------------------------------------------------------

    def overlaps(self, other: DateRange) -> bool:
        return self.start <= other.end and other.start <= self.end

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[date]:
        day = self.start
        while True:
            yield day
            if day >= self.end:
                return
            day += timedelta(days=1)

    @property
    def is_open_ended(self) -> bool:
        return self.end == OPEN_ENDED_RETURN

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def single(day: date) -> DateRange:
        return DateRange(day, day)

    @staticmethod
    def of(start: date, end: date | None) -> DateRange:
        """Build a range, treating a missing return date as open-ended."""
        return DateRange(start, end if end is not None else OPEN_ENDED_RETURN)

    @staticmethod
    def parse(start: str, end: str | None) -> DateRange:
        """Parse ISO ``YYYY-MM-DD`` strings (as stored and typed by users)."""
        try:
            start_day = date.fromisoformat(start)
            end_day = date.fromisoformat(end) if end else None
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid date: {exc}") from exc
        return DateRange.of(start_day, end_day)
