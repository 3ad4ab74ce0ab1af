# campaign_service/services/post_scheduler.py
"""
Single-post scheduling, listing and cancellation.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from campaign_service import crud
from campaign_service.core.config import settings
from campaign_service.core.exceptions import (
    DailyPostLimitError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from campaign_service.db.types import utcnow
from campaign_service.models.enums import Platform, ScheduleStatus
from campaign_service.models.scheduled_post import ScheduledPost
from campaign_service.schemas.schedule import ScheduledPostCreate
from campaign_service.services import time_distribution

logger = logging.getLogger(__name__)


def _day_bounds(now: datetime, tz) -> Tuple[datetime, datetime]:
    start = time_distribution.start_of_tomorrow(now, tz) - timedelta(days=1)
    return start, start + timedelta(days=1)


def schedule_post(db: Session, *, user_id: str, obj_in: ScheduledPostCreate) -> ScheduledPost:
    """
    Schedule one post at least SINGLE_POST_MIN_LEAD_MINUTES ahead.

    Raises:
        ValidationError: bad timezone or a time too close to now
        DailyPostLimitError: the user's daily cap is reached
        NotFoundError: campaignAssetId does not belong to the user
    """
    tz = time_distribution.resolve_timezone(obj_in.timezone, field="timezone")
    now = utcnow()
    scheduled_for = time_distribution.to_utc(obj_in.scheduled_for, tz)

    lead = settings.SINGLE_POST_MIN_LEAD_MINUTES
    if scheduled_for < now + timedelta(minutes=lead):
        raise ValidationError.single(
            "scheduledFor", f"Must be at least {lead} minutes in the future"
        )

    prefs = crud.scheduling_preferences.get_for_user(db, user_id=user_id)
    max_per_day = (
        prefs.max_posts_per_day
        if prefs and prefs.max_posts_per_day is not None
        else settings.DEFAULT_MAX_POSTS_PER_DAY
    )
    pref_tz = time_distribution.resolve_timezone(prefs.timezone) if prefs else tz
    day_start, day_end = _day_bounds(now, pref_tz)
    created_today = crud.scheduled_post.count_created_between(
        db, user_id=user_id, start=day_start, end=day_end
    )
    if created_today >= max_per_day:
        logger.warning("User %s reached the daily post limit (%d)", user_id, max_per_day)
        raise DailyPostLimitError(max_per_day)

    asset = None
    if obj_in.campaign_asset_id:
        asset = crud.campaign_asset.get(db, id=obj_in.campaign_asset_id)
        if asset is None or asset.campaign.user_id != user_id:
            raise NotFoundError("Asset", obj_in.campaign_asset_id)

    post = crud.scheduled_post.create_single(
        db, user_id=user_id, obj_in=obj_in, scheduled_for=scheduled_for, asset=asset
    )
    logger.info("Post %s scheduled for %s", post.id, post.scheduled_for.isoformat())
    return post


def list_posts(
    db: Session,
    *,
    user_id: str,
    status: Optional[ScheduleStatus] = None,
    platform: Optional[Platform] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[ScheduledPost], int]:
    posts = crud.scheduled_post.list_for_user(
        db, user_id=user_id, status=status, platform=platform, skip=offset, limit=limit
    )
    total = crud.scheduled_post.count_for_user(db, user_id=user_id, status=status, platform=platform)
    return posts, total


def cancel_post(db: Session, *, user_id: str, post_id: str) -> ScheduledPost:
    post = crud.scheduled_post.get_for_user(db, post_id=post_id, user_id=user_id)
    if not post:
        raise NotFoundError("Scheduled post", post_id)
    if post.status != ScheduleStatus.PENDING:
        raise InvalidStateTransitionError(
            "scheduled post", ScheduleStatus(post.status).value, ScheduleStatus.CANCELLED.value
        )
    return crud.scheduled_post.mark_cancelled(db, post=post)
