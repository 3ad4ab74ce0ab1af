# campaign_service/models/scheduled_post.py
"""
ScheduledPost model - a post queued for publishing at an absolute instant.

Created PENDING by the bulk scheduler or single-post scheduling. The
publisher worker (outside this service) moves it to PROCESSING, PUBLISHED
or FAILED; users may CANCEL it while it is still PENDING.
"""

import uuid
from sqlalchemy import Column, String, Integer, Boolean, Text, Enum, ForeignKey, JSON, Index

from campaign_service.db.base_class import Base
from campaign_service.db.types import UTCDateTime, utcnow
from campaign_service.models.enums import Platform, PostType, ScheduleStatus


class ScheduledPost(Base):
    __tablename__ = "scheduled_posts"

    id = Column(String, primary_key=True, default=lambda: f"spost_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, index=True)

    content = Column(Text, nullable=False)
    media_urls = Column(JSON, nullable=False, default=list)
    platform = Column(Enum(Platform, name="platform"), nullable=False)
    post_type = Column(Enum(PostType, name="post_type"), nullable=False)

    scheduled_for = Column(UTCDateTime, nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")
    auto_post = Column(Boolean, nullable=False, default=False)
    status = Column(Enum(ScheduleStatus, name="schedule_status"), nullable=False, default=ScheduleStatus.PENDING)

    # Optional link back to the asset this post was created from
    campaign_asset_id = Column(
        String, ForeignKey("campaign_assets.id", ondelete="SET NULL"), nullable=True
    )
    # Batch id shared by every post of one bulk request
    batch_id = Column(String, nullable=True, index=True)

    # Publisher bookkeeping
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    published_at = Column(UTCDateTime, nullable=True)
    external_url = Column(String(1000), nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_scheduled_posts_user_scheduled", "user_id", "scheduled_for"),
        Index("idx_scheduled_posts_status_scheduled", "status", "scheduled_for"),
    )
