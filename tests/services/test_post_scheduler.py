from datetime import timedelta

import pytest

from campaign_service.core.exceptions import (
    DailyPostLimitError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from campaign_service.db.types import utcnow
from campaign_service.models.campaign_asset import CampaignAsset
from campaign_service.models.enums import AssetStatus, AssetType, Platform, ScheduleStatus
from campaign_service.models.scheduling_preferences import SchedulingPreferences
from campaign_service.schemas.schedule import ScheduledPostCreate
from campaign_service.services import post_scheduler


def post_in(minutes_ahead=60, **kwargs):
    return ScheduledPostCreate(
        content=kwargs.pop("content", "A scheduled post about the launch"),
        platform=kwargs.pop("platform", Platform.TWITTER),
        scheduled_for=utcnow() + timedelta(minutes=minutes_ahead),
        **kwargs,
    )


def test_post_is_created_pending(db_session):
    post = post_scheduler.schedule_post(db_session, user_id="user_123", obj_in=post_in())

    assert post.status == ScheduleStatus.PENDING
    assert post.id.startswith("spost_")


def test_less_than_five_minutes_ahead_is_rejected(db_session):
    with pytest.raises(ValidationError) as exc_info:
        post_scheduler.schedule_post(db_session, user_id="user_123", obj_in=post_in(minutes_ahead=3))

    assert exc_info.value.errors[0]["field"] == "scheduledFor"


def test_daily_cap_comes_from_preferences(db_session):
    db_session.add(SchedulingPreferences(user_id="user_123", max_posts_per_day=2, timezone="UTC"))
    db_session.commit()

    post_scheduler.schedule_post(db_session, user_id="user_123", obj_in=post_in(60))
    post_scheduler.schedule_post(db_session, user_id="user_123", obj_in=post_in(120))

    with pytest.raises(DailyPostLimitError) as exc_info:
        post_scheduler.schedule_post(db_session, user_id="user_123", obj_in=post_in(180))

    assert exc_info.value.error_code == "DAILY_POST_LIMIT"
    assert exc_info.value.status_code == 429


def test_linked_asset_moves_to_scheduled(db_session, campaign_factory):
    campaign = campaign_factory()
    asset = CampaignAsset(
        campaign_id=campaign.id, type=AssetType.SOCIAL_POST, platform=Platform.TWITTER, content="Hello"
    )
    db_session.add(asset)
    db_session.commit()

    post = post_scheduler.schedule_post(
        db_session, user_id="user_123", obj_in=post_in(campaign_asset_id=asset.id)
    )

    db_session.refresh(asset)
    assert post.campaign_asset_id == asset.id
    assert asset.status == AssetStatus.SCHEDULED
    assert asset.scheduled_at == post.scheduled_for


def test_asset_of_another_user_is_not_found(db_session, campaign_factory):
    campaign = campaign_factory(user_id="someone_else")
    asset = CampaignAsset(campaign_id=campaign.id, type=AssetType.EMAIL, content="{}")
    db_session.add(asset)
    db_session.commit()

    with pytest.raises(NotFoundError):
        post_scheduler.schedule_post(db_session, user_id="user_123", obj_in=post_in(campaign_asset_id=asset.id))


def test_only_pending_posts_can_be_cancelled(db_session):
    post = post_scheduler.schedule_post(db_session, user_id="user_123", obj_in=post_in())

    cancelled = post_scheduler.cancel_post(db_session, user_id="user_123", post_id=post.id)
    assert cancelled.status == ScheduleStatus.CANCELLED

    with pytest.raises(InvalidStateTransitionError):
        post_scheduler.cancel_post(db_session, user_id="user_123", post_id=post.id)


def test_listing_filters_and_counts(db_session):
    for minutes in (60, 120, 180):
        post_scheduler.schedule_post(db_session, user_id="user_123", obj_in=post_in(minutes))
    post_scheduler.schedule_post(
        db_session, user_id="user_123", obj_in=post_in(240, platform=Platform.LINKEDIN)
    )

    posts, total = post_scheduler.list_posts(
        db_session, user_id="user_123", platform=Platform.TWITTER, limit=2, offset=0
    )

    assert total == 3
    assert len(posts) == 2
    assert posts[0].scheduled_for < posts[1].scheduled_for
