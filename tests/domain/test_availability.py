"""Unit tests for the Availability Calculator."""

from datetime import date, timedelta

from rentals.domain.model.order import OrderStatus
from rentals.domain.model.reservation import ReservationInterval
from rentals.domain.model.value_objects import DateRange
from rentals.domain.service.availability import (
    daily_breakdown,
    evaluate,
    overlaps,
    peak_reserved,
    reserved_on,
)
from tests.fakes import d


def _iv(order_id, qty, start, end, status=OrderStatus.PENDING):
    return ReservationInterval(
        order_id=order_id,
        product_id="P",
        quantity=qty,
        period=DateRange(start, end),
        status=status,
    )


class TestOverlapRule:

    def test_same_day_turnaround_conflicts(self):
        assert overlaps(DateRange(d(5, 10), d(5, 15)), DateRange(d(5, 15), d(5, 20)))

    def test_next_day_does_not_conflict(self):
        assert not overlaps(DateRange(d(5, 10), d(5, 15)), DateRange(d(5, 16), d(5, 20)))

    def test_containment(self):
        assert overlaps(DateRange(d(5, 1), d(5, 30)), DateRange.single(d(5, 12)))


class TestPeakReserved:

    def test_no_intervals(self):
        assert peak_reserved([], DateRange(d(5, 1), d(5, 5))) == 0

    def test_overlapping_intervals_stack(self):
        intervals = [_iv("1", 2, d(5, 1), d(5, 5)), _iv("2", 1, d(5, 3), d(5, 8))]
        assert peak_reserved(intervals, DateRange(d(5, 3), d(5, 5))) == 3

    def test_peak_restricted_to_window(self):
        intervals = [_iv("1", 2, d(5, 1), d(5, 5)), _iv("2", 1, d(5, 3), d(5, 8))]
        assert peak_reserved(intervals, DateRange(d(5, 6), d(5, 8))) == 1

    def test_back_to_back_intervals_do_not_stack(self):
        intervals = [_iv("1", 1, d(5, 1), d(5, 5)), _iv("2", 1, d(5, 6), d(5, 9))]
        assert peak_reserved(intervals, DateRange(d(5, 1), d(5, 9))) == 1

    def test_excluded_order_ignored(self):
        intervals = [_iv("1", 2, d(5, 1), d(5, 5)), _iv("2", 1, d(5, 3), d(5, 8))]
        assert peak_reserved(intervals, DateRange(d(5, 3), d(5, 5)), "1") == 1

    def test_released_intervals_ignored(self):
        intervals = [_iv("1", 2, d(5, 1), d(5, 5), status=OrderStatus.RETURNED)]
        assert peak_reserved(intervals, DateRange(d(5, 1), d(5, 5))) == 0

    def test_single_day_interval(self):
        intervals = [_iv("1", 1, d(5, 4), d(5, 4))]
        assert peak_reserved(intervals, DateRange(d(5, 1), d(5, 9))) == 1
        assert reserved_on(intervals, d(5, 4)) == 1
        assert reserved_on(intervals, d(5, 5)) == 0

    def test_non_overlapping_intervals_inside_window_take_max(self):
        intervals = [
            _iv("1", 2, d(5, 1), d(5, 2)),
            _iv("2", 3, d(5, 5), d(5, 6)),
            _iv("3", 1, d(5, 6), d(5, 9)),
        ]
        assert peak_reserved(intervals, DateRange(d(5, 1), d(5, 9))) == 4


class TestEvaluate:

    def test_return_day_blocks_delivery_same_day(self):
        intervals = [_iv("1", 1, d(5, 10), d(5, 15))]
        verdict = evaluate(1, intervals, DateRange(d(5, 15), d(5, 20)), 1)
        assert not verdict.admissible
        assert verdict.peak_reserved == 1
        assert verdict.available_quantity == 0

    def test_delivery_day_after_return_admitted(self):
        intervals = [_iv("1", 1, d(5, 10), d(5, 15))]
        verdict = evaluate(1, intervals, DateRange(d(5, 16), d(5, 20)), 1)
        assert verdict.admissible
        assert verdict.peak_reserved == 0

    def test_stacked_peak_example(self):
        intervals = [_iv("1", 2, d(1, 1), d(1, 5)), _iv("2", 1, d(1, 3), d(1, 8))]
        assert not evaluate(3, intervals, DateRange(d(1, 3), d(1, 5)), 1).admissible
        assert evaluate(3, intervals, DateRange(d(1, 6), d(1, 8)), 1).admissible

    def test_empty_index_admits_up_to_stock(self):
        window = DateRange(d(5, 1), d(5, 2))
        assert evaluate(2, [], window, 2).admissible
        assert not evaluate(2, [], window, 3).admissible

    def test_available_never_negative_when_overcommitted(self):
        intervals = [_iv("1", 3, d(5, 1), d(5, 5))]
        verdict = evaluate(2, intervals, DateRange(d(5, 1), d(5, 1)), 0)
        assert verdict.available_quantity == 0
        assert not verdict.admissible


class TestDailyBreakdown:

    def test_per_day_counts(self):
        intervals = [_iv("1", 2, d(1, 1), d(1, 5)), _iv("2", 1, d(1, 3), d(1, 8))]
        days = daily_breakdown(3, intervals, DateRange(d(1, 4), d(1, 7)))
        assert [(x.day.day, x.reserved, x.available) for x in days] == [
            (4, 3, 0),
            (5, 3, 0),
            (6, 1, 2),
            (7, 1, 2),
        ]

    def test_matches_peak(self):
        intervals = [
            _iv("1", 2, d(1, 1), d(1, 5)),
            _iv("2", 1, d(1, 3), d(1, 8)),
            _iv("3", 4, d(1, 8), d(1, 8)),
        ]
        window = DateRange(d(1, 1), d(1, 10))
        days = daily_breakdown(10, intervals, window)
        assert max(x.reserved for x in days) == peak_reserved(intervals, window)


class TestLastRepresentableDay:

    def test_peak_with_interval_ending_on_date_max(self):
        intervals = [_iv("1", 1, d(5, 1), date.max)]
        window = DateRange(d(6, 1), date.max)
        assert peak_reserved(intervals, window) == 1
        assert not evaluate(1, intervals, window, 1).admissible

    def test_daily_breakdown_up_to_date_max(self):
        intervals = [_iv("1", 2, date.max - timedelta(days=1), date.max)]
        window = DateRange(date.max - timedelta(days=2), date.max)
        days = daily_breakdown(3, intervals, window)
        assert [x.reserved for x in days] == [0, 2, 2]
