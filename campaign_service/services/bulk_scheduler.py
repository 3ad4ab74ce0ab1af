# campaign_service/services/bulk_scheduler.py
"""
Bulk scheduling: one request, many posts, one distribution strategy.

Every field violation is collected and raised as a single ValidationError
naming the broken bound. The batch is written atomically, so either all
posts are scheduled or none are.
"""

import logging
import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from campaign_service import crud
from campaign_service.core.config import settings
from campaign_service.core.exceptions import ValidationError
from campaign_service.db.types import utcnow
from campaign_service.models.enums import SpreadStrategy
from campaign_service.models.scheduled_post import ScheduledPost
from campaign_service.schemas.schedule import BulkScheduleRequest, BulkScheduleSummary
from campaign_service.services import time_distribution
from campaign_service.services.time_distribution import RankedSlot

logger = logging.getLogger(__name__)

MIN_POSTS = 2
MAX_POSTS = 20
MIN_CONTENT_CHARS = 10
MAX_MIN_HOURS_BETWEEN = 168
DEFAULT_EVENLY_WINDOW = timedelta(days=7)

_WHITESPACE = re.compile(r"\s+")


def _non_whitespace_length(text: str) -> int:
    return len(_WHITESPACE.sub("", text or ""))


class BulkScheduler:
    def resolve_min_hours(self, db: Session, user_id: str, requested: Optional[float]) -> float:
        if requested is not None:
            return requested
        prefs = crud.scheduling_preferences.get_for_user(db, user_id=user_id)
        if prefs and prefs.min_hours_between is not None:
            return prefs.min_hours_between
        return settings.DEFAULT_MIN_HOURS_BETWEEN

    def validate(self, request: BulkScheduleRequest) -> None:
        errors = []
        count = len(request.posts)
        if count < MIN_POSTS:
            errors.append(
                {"field": "posts", "message": f"At least {MIN_POSTS} posts are required (got {count})"}
            )
        elif count > MAX_POSTS:
            errors.append(
                {"field": "posts", "message": f"At most {MAX_POSTS} posts are allowed (got {count})"}
            )

        for i, post in enumerate(request.posts):
            if _non_whitespace_length(post.content) < MIN_CONTENT_CHARS:
                errors.append(
                    {
                        "field": f"posts[{i}].content",
                        "message": f"Must contain at least {MIN_CONTENT_CHARS} non-whitespace characters",
                    }
                )

        min_hours = request.config.min_hours_between
        if min_hours is not None and not 0 <= min_hours <= MAX_MIN_HOURS_BETWEEN:
            errors.append(
                {
                    "field": "config.minHoursBetween",
                    "message": f"Must be between 0 and {MAX_MIN_HOURS_BETWEEN} hours",
                }
            )

        if errors:
            raise ValidationError(errors)

    def _evenly_window(self, request: BulkScheduleRequest, tz, now: datetime) -> Tuple[datetime, datetime]:
        config = request.config
        if config.start_date is not None:
            start = time_distribution.to_utc(config.start_date, tz)
        else:
            start = (now + timedelta(hours=1)).replace(minute=0, second=0, microsecond=0)
        end = (
            time_distribution.to_utc(config.end_date, tz)
            if config.end_date is not None
            else start + DEFAULT_EVENLY_WINDOW
        )

        errors = []
        if start <= now:
            errors.append({"field": "config.startDate", "message": "Must be in the future"})
        if end <= start:
            errors.append({"field": "config.endDate", "message": "Must be after config.startDate"})
        if errors:
            raise ValidationError(errors)
        return start, end

    def _optimal_times(
        self, db: Session, user_id: str, request: BulkScheduleRequest, tz, now: datetime, min_hours: float
    ) -> List[datetime]:
        origin = time_distribution.start_of_tomorrow(now, tz)
        if request.config.start_date is not None:
            origin = max(origin, time_distribution.to_utc(request.config.start_date, tz))

        stored = crud.optimal_time.list_ranked(db, user_id=user_id, platform=request.platform)
        slots = [
            RankedSlot(
                day_of_week=s.day_of_week,
                hour_of_day=s.hour_of_day,
                platform=s.platform.value if s.platform else None,
                rank=s.rank,
            )
            for s in stored
        ]
        return time_distribution.pick_optimal(slots, len(request.posts), min_hours, origin, tz)

    def compute_times(
        self, db: Session, user_id: str, request: BulkScheduleRequest, min_hours: float, now: datetime
    ) -> List[datetime]:
        tz = time_distribution.resolve_timezone(request.config.timezone)
        strategy = request.config.strategy

        if strategy == SpreadStrategy.EVENLY:
            start, end = self._evenly_window(request, tz, now)
            return time_distribution.spread_evenly(start, end, len(request.posts), min_hours)

        if strategy == SpreadStrategy.OPTIMAL:
            return self._optimal_times(db, user_id, request, tz, now, min_hours)

        times = [
            time_distribution.to_utc(p.scheduled_for, tz) if p.scheduled_for else None
            for p in request.posts
        ]
        errors = time_distribution.check_manual(times, min_hours, now)
        if errors:
            raise ValidationError(errors)
        return times

    def schedule(
        self, db: Session, *, user_id: str, request: BulkScheduleRequest
    ) -> Tuple[List[ScheduledPost], BulkScheduleSummary]:
        """
        Compute a timestamp per post and persist the whole batch as PENDING.

        Raises:
            ValidationError: count, content, spacing, dates or timezone
            InsufficientOptimalTimesError: OPTIMAL lacks enough ranked slots
        """
        self.validate(request)
        now = utcnow()
        min_hours = self.resolve_min_hours(db, user_id, request.config.min_hours_between)
        times = self.compute_times(db, user_id, request, min_hours, now)

        posts = crud.scheduled_post.create_batch(
            db,
            user_id=user_id,
            items=list(zip(request.posts, times)),
            platform=request.platform,
            post_type=request.post_type,
            timezone=request.config.timezone,
            auto_post=request.config.auto_post,
        )
        logger.info(
            "Scheduled %d %s posts for user %s using %s",
            len(posts),
            request.platform.value,
            user_id,
            request.config.strategy.value,
        )

        by_platform = Counter(p.platform.value for p in posts)
        summary = BulkScheduleSummary(
            total=len(posts),
            by_platform=dict(by_platform),
            strategy_used=request.config.strategy,
            start_date=min(times).astimezone(timezone.utc),
            end_date=max(times).astimezone(timezone.utc),
        )
        return posts, summary


bulk_scheduler = BulkScheduler()
