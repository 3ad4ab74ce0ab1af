# campaign_service/schemas/schedule.py
"""
Pydantic schemas for post scheduling: single posts, bulk batches and
their responses.

Field-level business rules (batch size, minimum content length, spacing)
are checked by the bulk scheduler so every violation can be reported
together, with the bound that was broken.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from campaign_service.models.enums import Platform, PostType, ScheduleStatus, SpreadStrategy
from campaign_service.schemas.base import CamelModel


class BulkPostItem(CamelModel):
    content: str
    media_urls: List[str] = Field(default_factory=list)
    # Only used by the MANUAL strategy
    scheduled_for: Optional[datetime] = None


class BulkScheduleConfig(CamelModel):
    strategy: SpreadStrategy = SpreadStrategy.OPTIMAL
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_hours_between: Optional[float] = None
    auto_post: bool = False
    timezone: str = "UTC"


class BulkScheduleRequest(CamelModel):
    posts: List[BulkPostItem]
    platform: Platform
    post_type: PostType = PostType.POST
    config: BulkScheduleConfig = Field(default_factory=BulkScheduleConfig)


class ScheduledPostCreate(CamelModel):
    content: str = Field(..., min_length=1)
    media_urls: List[str] = Field(default_factory=list)
    platform: Platform
    post_type: PostType = PostType.POST
    scheduled_for: datetime
    timezone: str = "UTC"
    auto_post: bool = False
    campaign_asset_id: Optional[str] = None


class ScheduledPostResponse(CamelModel):
    id: str
    content: str
    media_urls: List[str] = Field(default_factory=list)
    platform: Platform
    post_type: PostType
    scheduled_for: datetime
    timezone: str
    status: ScheduleStatus
    auto_post: bool
    campaign_asset_id: Optional[str] = None
    published_at: Optional[datetime] = None
    external_url: Optional[str] = None
    created_at: datetime


class BulkScheduleSummary(CamelModel):
    total: int
    by_platform: Dict[str, int]
    strategy_used: SpreadStrategy
    start_date: datetime
    end_date: datetime


class BulkScheduleResponse(CamelModel):
    scheduled_posts: List[ScheduledPostResponse]
    summary: BulkScheduleSummary


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ScheduledPostListResponse(CamelModel):
    posts: List[ScheduledPostResponse]
    pagination: Pagination
