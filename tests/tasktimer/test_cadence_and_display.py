import unittest

from tasktimer import Interval, format_countdown, format_elapsed, next_interval_kind, split_countdown
from tasktimer.cadence import short_breaks_since_long_break
from tasktimer.constants import KIND_LONG_BREAK, KIND_SHORT_BREAK, KIND_WORK


def _history(*kinds: str) -> tuple[Interval, ...]:
    return tuple(
        Interval(start=float(index), kind=kind, finish=float(index) + 1.0)
        for index, kind in enumerate(kinds)
    )


class CadenceTests(unittest.TestCase):
    def test_empty_history_starts_with_work(self) -> None:
        self.assertEqual(KIND_WORK, next_interval_kind((), long_break_every=4))

    def test_work_follows_any_break(self) -> None:
        for last in (KIND_SHORT_BREAK, KIND_LONG_BREAK):
            timers = _history(KIND_WORK, last)
            self.assertEqual(KIND_WORK, next_interval_kind(timers, long_break_every=4))

    def test_short_break_follows_work_below_threshold(self) -> None:
        timers = _history(KIND_WORK, KIND_SHORT_BREAK, KIND_WORK)
        self.assertEqual(KIND_SHORT_BREAK, next_interval_kind(timers, long_break_every=4))

    def test_long_break_after_threshold_short_breaks(self) -> None:
        timers = _history(*([KIND_WORK, KIND_SHORT_BREAK] * 4), KIND_WORK)
        self.assertEqual(4, short_breaks_since_long_break(timers))
        self.assertEqual(KIND_LONG_BREAK, next_interval_kind(timers, long_break_every=4))

    def test_count_restarts_after_long_break(self) -> None:
        timers = _history(
            *([KIND_WORK, KIND_SHORT_BREAK] * 4),
            KIND_WORK,
            KIND_LONG_BREAK,
            KIND_WORK,
            KIND_SHORT_BREAK,
            KIND_WORK,
        )
        self.assertEqual(1, short_breaks_since_long_break(timers))
        self.assertEqual(KIND_SHORT_BREAK, next_interval_kind(timers, long_break_every=4))

    def test_threshold_of_one_allows_a_single_short_break(self) -> None:
        timers = _history(KIND_WORK, KIND_SHORT_BREAK, KIND_WORK)
        self.assertEqual(KIND_LONG_BREAK, next_interval_kind(timers, long_break_every=1))


class DisplayTests(unittest.TestCase):
    def test_split_countdown_rounds_up(self) -> None:
        self.assertEqual((25, 0), split_countdown(1500))
        self.assertEqual((24, 59), split_countdown(1498.2))
        self.assertEqual((0, 1), split_countdown(0.01))
        self.assertEqual((0, 0), split_countdown(-3))

    def test_format_countdown_pads(self) -> None:
        self.assertEqual("05:09", format_countdown(5, 9))
        self.assertEqual("00:00", format_countdown(0, 0))
        self.assertEqual("120:00", format_countdown(120, 0))

    def test_format_elapsed_not_started(self) -> None:
        self.assertEqual("Not started", format_elapsed(0))
        self.assertEqual("Not started", format_elapsed(-5))

    def test_format_elapsed_uses_largest_unit(self) -> None:
        self.assertEqual("1 second", format_elapsed(1))
        self.assertEqual("45 seconds", format_elapsed(45))
        self.assertEqual("1 minute", format_elapsed(89))
        self.assertEqual("2 minutes", format_elapsed(90))
        self.assertEqual("25 minutes", format_elapsed(1500))
        self.assertEqual("1 hour", format_elapsed(3600))
        self.assertEqual("3 days", format_elapsed(3 * 86400 + 100))

    def test_format_elapsed_rounds_half_units_up(self) -> None:
        self.assertEqual("3 minutes", format_elapsed(150))
        self.assertEqual("3 hours", format_elapsed(9000))
        self.assertEqual("5 minutes", format_elapsed(270))


if __name__ == "__main__":
    unittest.main()
