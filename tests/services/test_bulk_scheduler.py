from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from campaign_service.core.exceptions import InsufficientOptimalTimesError, ValidationError
from campaign_service.db.types import utcnow
from campaign_service.models.enums import Platform, ScheduleStatus, SpreadStrategy
from campaign_service.models.optimal_time_slot import OptimalTimeSlot
from campaign_service.models.scheduled_post import ScheduledPost
from campaign_service.models.scheduling_preferences import SchedulingPreferences
from campaign_service.schemas.schedule import BulkScheduleRequest
from campaign_service.services.bulk_scheduler import BulkScheduler

UTC = timezone.utc


def build_request(count=3, strategy="EVENLY", platform="TWITTER", **config):
    return BulkScheduleRequest.model_validate(
        {
            "posts": [{"content": f"Launch day post number {i}!"} for i in range(count)],
            "platform": platform,
            "config": {"strategy": strategy, **config},
        }
    )


def add_slots(db, slots, user_id="user_123"):
    db.add_all(
        [
            OptimalTimeSlot(
                user_id=user_id, day_of_week=d, hour_of_day=h, platform=p,
                avg_engagement_rate=10, sample_size=30, confidence=75, rank=rank,
                analyzed_from=utcnow(), analyzed_to=utcnow(),
            )
            for rank, (d, h, p) in enumerate(slots, start=1)
        ]
    )
    db.commit()


class TestBulkScheduler:
    def setup_method(self):
        self.scheduler = BulkScheduler()
        self.start = (utcnow() + timedelta(days=2)).replace(minute=0, second=0, microsecond=0)

    @pytest.mark.parametrize("count", [1, 21])
    def test_count_outside_bounds_is_rejected(self, db_session, count):
        request = build_request(count=count, start_date=self.start.isoformat())

        with pytest.raises(ValidationError) as exc_info:
            self.scheduler.schedule(db_session, user_id="user_123", request=request)

        error = exc_info.value.errors[0]
        assert error["field"] == "posts"
        assert ("2" if count == 1 else "20") in error["message"]
        assert db_session.query(ScheduledPost).count() == 0

    @pytest.mark.parametrize("count", [2, 20])
    def test_count_at_bounds_is_accepted(self, db_session, count):
        request = build_request(count=count, start_date=self.start.isoformat())

        posts, summary = self.scheduler.schedule(db_session, user_id="user_123", request=request)

        assert len(posts) == count
        assert summary.total == count

    def test_short_content_is_reported_per_post(self, db_session):
        request = build_request(count=3, start_date=self.start.isoformat())
        request.posts[1].content = "  too   short "

        with pytest.raises(ValidationError) as exc_info:
            self.scheduler.schedule(db_session, user_id="user_123", request=request)

        assert exc_info.value.errors == [
            {"field": "posts[1].content", "message": "Must contain at least 10 non-whitespace characters"}
        ]

    def test_evenly_keeps_order_and_spacing(self, db_session):
        request = build_request(
            count=5,
            start_date=self.start.isoformat(),
            end_date=(self.start + timedelta(hours=8)).isoformat(),
            min_hours_between=4,
        )

        posts, summary = self.scheduler.schedule(db_session, user_id="user_123", request=request)

        times = [p.scheduled_for for p in posts]
        assert [p.content for p in posts] == [p.content for p in request.posts]
        assert all(b - a >= timedelta(hours=4) for a, b in zip(times, times[1:]))
        assert summary.end_date == self.start + timedelta(hours=16)
        assert summary.by_platform == {"TWITTER": 5}
        assert summary.strategy_used == SpreadStrategy.EVENLY
        assert all(p.status == ScheduleStatus.PENDING for p in posts)
        assert len({p.batch_id for p in posts}) == 1

    def test_min_hours_come_from_preferences(self, db_session):
        db_session.add(SchedulingPreferences(user_id="user_123", min_hours_between=10, timezone="UTC"))
        db_session.commit()
        request = build_request(
            count=3, start_date=self.start.isoformat(), end_date=(self.start + timedelta(hours=2)).isoformat()
        )

        posts, _ = self.scheduler.schedule(db_session, user_id="user_123", request=request)

        assert posts[-1].scheduled_for - posts[0].scheduled_for == timedelta(hours=20)

    def test_start_in_the_past_is_rejected(self, db_session):
        request = build_request(count=2, start_date=(utcnow() - timedelta(hours=1)).isoformat())

        with pytest.raises(ValidationError) as exc_info:
            self.scheduler.schedule(db_session, user_id="user_123", request=request)

        assert exc_info.value.errors[0]["field"] == "config.startDate"

    def test_end_before_start_is_rejected(self, db_session):
        request = build_request(
            count=2, start_date=self.start.isoformat(), end_date=(self.start - timedelta(days=1)).isoformat()
        )

        with pytest.raises(ValidationError) as exc_info:
            self.scheduler.schedule(db_session, user_id="user_123", request=request)

        assert exc_info.value.errors[0]["field"] == "config.endDate"

    def test_optimal_uses_ranked_slots_for_the_platform(self, db_session):
        add_slots(
            db_session,
            [(2, 10, Platform.TWITTER), (3, 14, Platform.LINKEDIN), (4, 17, None), (1, 9, Platform.TWITTER)],
        )
        request = build_request(count=3, strategy="OPTIMAL", min_hours_between=4)

        posts, summary = self.scheduler.schedule(db_session, user_id="user_123", request=request)

        tomorrow = (utcnow() + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
        picked = {((p.scheduled_for.weekday() + 1) % 7, p.scheduled_for.hour) for p in posts}
        assert picked == {(2, 10), (4, 17), (1, 9)}
        assert all(p.scheduled_for >= tomorrow for p in posts)
        assert [p.scheduled_for for p in posts] == sorted(p.scheduled_for for p in posts)
        assert summary.strategy_used == SpreadStrategy.OPTIMAL

    def test_optimal_without_enough_slots_fails_atomically(self, db_session):
        add_slots(db_session, [(2, 10, None)])
        request = build_request(count=2, strategy="OPTIMAL")

        with pytest.raises(InsufficientOptimalTimesError):
            self.scheduler.schedule(db_session, user_id="user_123", request=request)

        assert db_session.query(ScheduledPost).count() == 0

    def test_manual_times_round_trip_in_request_timezone(self, db_session):
        base = self.start.astimezone(ZoneInfo("America/New_York")).replace(tzinfo=None)
        request = BulkScheduleRequest.model_validate(
            {
                "posts": [
                    {"content": "First manual post here", "scheduledFor": base.isoformat()},
                    {"content": "Second manual post here", "scheduledFor": (base + timedelta(hours=5)).isoformat()},
                ],
                "platform": "LINKEDIN",
                "config": {"strategy": "MANUAL", "timezone": "America/New_York", "minHoursBetween": 4},
            }
        )

        posts, _ = self.scheduler.schedule(db_session, user_id="user_123", request=request)

        assert posts[0].scheduled_for == self.start
        assert posts[0].timezone == "America/New_York"

    def test_manual_spacing_violation_is_rejected(self, db_session):
        request = BulkScheduleRequest.model_validate(
            {
                "posts": [
                    {"content": "First manual post here", "scheduledFor": self.start.isoformat()},
                    {"content": "Second manual post here", "scheduledFor": (self.start + timedelta(hours=1)).isoformat()},
                ],
                "platform": "TWITTER",
                "config": {"strategy": "MANUAL", "minHoursBetween": 4},
            }
        )

        with pytest.raises(ValidationError):
            self.scheduler.schedule(db_session, user_id="user_123", request=request)

    def test_round_trip_instant_for_new_york(self, db_session):
        request = BulkScheduleRequest.model_validate(
            {
                "posts": [
                    {"content": "Round trip post one", "scheduledFor": "2035-06-01T10:00:00"},
                    {"content": "Round trip post two", "scheduledFor": "2035-06-02T10:00:00"},
                ],
                "platform": "TWITTER",
                "config": {"strategy": "MANUAL", "timezone": "America/New_York"},
            }
        )

        posts, _ = self.scheduler.schedule(db_session, user_id="user_123", request=request)
        db_session.expire_all()
        stored = db_session.get(ScheduledPost, posts[0].id)

        assert stored.scheduled_for == datetime(2035, 6, 1, 14, 0, tzinfo=UTC)
