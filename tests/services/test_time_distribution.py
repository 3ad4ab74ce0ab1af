from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from campaign_service.core.exceptions import InsufficientOptimalTimesError, ValidationError
from campaign_service.services import time_distribution
from campaign_service.services.time_distribution import RankedSlot

UTC = timezone.utc
NEW_YORK = ZoneInfo("America/New_York")


def gaps(times):
    return [b - a for a, b in zip(times, times[1:])]


class TestSpreadEvenly:
    def test_inclusive_bounds_and_equal_gaps(self):
        start = datetime(2030, 1, 1, 9, tzinfo=UTC)
        end = datetime(2030, 1, 3, 9, tzinfo=UTC)

        times = time_distribution.spread_evenly(start, end, 5, min_hours_between=4)

        assert times[0] == start
        assert times[-1] == end
        assert set(gaps(times)) == {timedelta(hours=12)}

    def test_tight_window_is_extended_to_respect_min_gap(self):
        start = datetime(2030, 1, 1, 9, tzinfo=UTC)
        end = start + timedelta(hours=6)

        times = time_distribution.spread_evenly(start, end, 4, min_hours_between=4)

        assert times[0] == start
        assert times[-1] == start + timedelta(hours=12)
        assert all(g >= timedelta(hours=4) for g in gaps(times))

    def test_input_order_is_chronological(self):
        start = datetime(2030, 5, 1, tzinfo=UTC)
        times = time_distribution.spread_evenly(start, start + timedelta(days=7), 20, 4)
        assert times == sorted(times)
        assert len(times) == 20


class TestNextOccurrence:
    def test_same_day_later_hour(self):
        # 2030-01-01 is a Tuesday
        origin = datetime(2030, 1, 1, 8, tzinfo=UTC)
        result = time_distribution.next_occurrence(2, 10, origin, ZoneInfo("UTC"))
        assert result == datetime(2030, 1, 1, 10, tzinfo=UTC)

    def test_past_hour_rolls_to_next_week(self):
        origin = datetime(2030, 1, 1, 11, tzinfo=UTC)
        result = time_distribution.next_occurrence(2, 10, origin, ZoneInfo("UTC"))
        assert result == datetime(2030, 1, 8, 10, tzinfo=UTC)

    def test_sunday_is_day_zero(self):
        origin = datetime(2030, 1, 1, 0, tzinfo=UTC)
        result = time_distribution.next_occurrence(0, 12, origin, ZoneInfo("UTC"))
        assert result.weekday() == 6
        assert result == datetime(2030, 1, 6, 12, tzinfo=UTC)

    def test_wall_clock_hour_in_user_timezone(self):
        origin = datetime(2030, 7, 1, tzinfo=UTC)
        result = time_distribution.next_occurrence(3, 14, origin, NEW_YORK)
        local = result.astimezone(NEW_YORK)
        assert (local.hour, time_distribution.sunday_based_weekday(local)) == (14, 3)


class TestPickOptimal:
    origin = datetime(2030, 1, 1, tzinfo=UTC)  # Tuesday midnight

    def test_best_ranked_slots_are_used_and_sorted(self):
        slots = [
            RankedSlot(4, 17, rank=1),
            RankedSlot(2, 10, rank=2),
            RankedSlot(3, 14, rank=3),
            RankedSlot(1, 9, rank=4),
        ]
        times = time_distribution.pick_optimal(slots, 3, 4, self.origin, ZoneInfo("UTC"))

        assert times == sorted(times)
        picked = {(time_distribution.sunday_based_weekday(t), t.hour) for t in times}
        assert picked == {(4, 17), (2, 10), (3, 14)}

    def test_slot_too_close_to_a_taken_one_is_skipped(self):
        slots = [
            RankedSlot(2, 10, rank=1),
            RankedSlot(2, 11, rank=2),
            RankedSlot(2, 15, rank=3),
        ]
        times = time_distribution.pick_optimal(slots, 2, 4, self.origin, ZoneInfo("UTC"))

        assert [t.hour for t in times] == [10, 15]
        assert all(g >= timedelta(hours=4) for g in gaps(times))

    def test_fewer_slots_than_posts_fails(self):
        slots = [RankedSlot(2, 10, rank=1)]
        with pytest.raises(InsufficientOptimalTimesError) as exc_info:
            time_distribution.pick_optimal(slots, 2, 4, self.origin, ZoneInfo("UTC"))
        assert exc_info.value.details["suggested_strategy"] == "EVENLY"

    def test_conflicting_slot_moves_to_the_following_week(self):
        origin = datetime(2030, 1, 6, tzinfo=UTC)  # Sunday midnight
        slots = [
            RankedSlot(2, 10, rank=1),
            RankedSlot(2, 11, rank=2),
            RankedSlot(3, 10, rank=3),
        ]

        times = time_distribution.pick_optimal(slots, 3, 4, origin, ZoneInfo("UTC"))

        assert times == [
            datetime(2030, 1, 8, 10, tzinfo=UTC),
            datetime(2030, 1, 9, 10, tzinfo=UTC),
            datetime(2030, 1, 15, 11, tzinfo=UTC),
        ]
        assert all(g >= timedelta(hours=4) for g in gaps(times))

    def test_duplicate_slots_land_on_separate_weeks(self):
        slots = [RankedSlot(2, 10, rank=1), RankedSlot(2, 10, platform="TWITTER", rank=2)]

        times = time_distribution.pick_optimal(slots, 2, 0, self.origin, ZoneInfo("UTC"))

        assert times == [datetime(2030, 1, 1, 10, tzinfo=UTC), datetime(2030, 1, 8, 10, tzinfo=UTC)]

    def test_enough_slots_always_fit_even_with_a_week_between_posts(self):
        slots = [RankedSlot(2, hour, rank=hour) for hour in range(9, 14)]

        times = time_distribution.pick_optimal(slots, 5, 168, self.origin, ZoneInfo("UTC"))

        assert len(times) == 5
        assert all(g >= timedelta(hours=168) for g in gaps(times))

    def test_deferred_slot_keeps_its_local_hour_across_dst(self):
        origin = datetime(2030, 3, 3, 6, tzinfo=UTC)  # Sunday before the US spring change
        slots = [RankedSlot(0, 9, rank=1), RankedSlot(0, 10, rank=2)]

        times = time_distribution.pick_optimal(slots, 2, 4, origin, NEW_YORK)

        local = [t.astimezone(NEW_YORK) for t in times]
        assert [(t.day, t.hour) for t in local] == [(3, 9), (10, 10)]


class TestCheckManual:
    now = datetime(2030, 1, 1, tzinfo=UTC)

    def test_valid_times_pass(self):
        times = [self.now + timedelta(hours=10), self.now + timedelta(hours=2)]
        assert time_distribution.check_manual(times, 4, self.now) == []

    def test_missing_and_past_times_are_reported_per_post(self):
        errors = time_distribution.check_manual([None, self.now - timedelta(hours=1)], 4, self.now)
        assert [e["field"] for e in errors] == ["posts[0].scheduledFor", "posts[1].scheduledFor"]

    def test_duplicates_and_spacing_are_reported(self):
        t = self.now + timedelta(days=1)
        errors = time_distribution.check_manual([t, t, t + timedelta(hours=1)], 4, self.now)
        messages = [e["message"] for e in errors]
        assert any("Duplicates" in m for m in messages)
        assert any("at least 4 hours" in m for m in messages)


def test_naive_time_is_wall_clock_in_request_timezone():
    instant = time_distribution.to_utc(datetime(2025, 6, 1, 10, 0), NEW_YORK)
    assert instant == datetime(2025, 6, 1, 14, 0, tzinfo=UTC)


def test_unknown_timezone_is_a_validation_error():
    with pytest.raises(ValidationError) as exc_info:
        time_distribution.resolve_timezone("Mars/Olympus_Mons")
    assert exc_info.value.errors[0]["field"] == "config.timezone"
