# campaign_service/services/rate_limiter.py
"""
Sliding-window quota on campaign creation.

The count query and the insert that follows it are not serialized, so two
concurrent requests can at most admit one campaign over the limit.
"""

import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from campaign_service.core.config import settings
from campaign_service.core.exceptions import RateLimitError
from campaign_service.crud import campaign as crud_campaign
from campaign_service.db.types import utcnow

logger = logging.getLogger(__name__)


class CampaignRateLimiter:
    def __init__(self, limit: Optional[int] = None, window_seconds: Optional[int] = None):
        self.limit = limit if limit is not None else settings.CAMPAIGN_RATE_LIMIT
        self.window_seconds = (
            window_seconds if window_seconds is not None else settings.CAMPAIGN_RATE_WINDOW_SECONDS
        )

    def enforce(
        self,
        db: Session,
        user_id: str,
        limit: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ) -> int:
        """
        Raise RateLimitError when `user_id` already created `limit` campaigns
        inside the window. Returns the number of campaigns counted.
        """
        limit = limit if limit is not None else self.limit
        window_seconds = window_seconds if window_seconds is not None else self.window_seconds

        since = utcnow() - timedelta(seconds=window_seconds)
        recent = crud_campaign.count_created_since(db, user_id=user_id, since=since)
        if recent >= limit:
            logger.warning(
                "User %s hit the campaign rate limit (%d in the last %ds)",
                user_id,
                recent,
                window_seconds,
            )
            raise RateLimitError(limit=limit, window_seconds=window_seconds)
        return recent


campaign_rate_limiter = CampaignRateLimiter()
