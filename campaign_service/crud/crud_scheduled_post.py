# campaign_service/crud/crud_scheduled_post.py
"""
CRUD operations for scheduled posts.

Bulk batches are written in a single transaction: either every post of
the batch is stored or none is.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from campaign_service.crud.base import CRUDBase
from campaign_service.models.campaign_asset import CampaignAsset
from campaign_service.models.enums import AssetStatus, Platform, PostType, ScheduleStatus
from campaign_service.models.scheduled_post import ScheduledPost
from campaign_service.schemas.schedule import BulkPostItem, ScheduledPostCreate

logger = logging.getLogger(__name__)


class CRUDScheduledPost(CRUDBase[ScheduledPost, ScheduledPostCreate, ScheduledPostCreate]):
    def create_single(
        self,
        db: Session,
        *,
        user_id: str,
        obj_in: ScheduledPostCreate,
        scheduled_for: datetime,
        asset: Optional[CampaignAsset] = None,
    ) -> ScheduledPost:
        """Store one PENDING post; a linked campaign asset moves to SCHEDULED."""
        post = ScheduledPost(
            user_id=user_id,
            content=obj_in.content,
            media_urls=list(obj_in.media_urls),
            platform=obj_in.platform,
            post_type=obj_in.post_type,
            scheduled_for=scheduled_for,
            timezone=obj_in.timezone,
            auto_post=obj_in.auto_post,
            status=ScheduleStatus.PENDING,
            campaign_asset_id=asset.id if asset else None,
        )
        db.add(post)
        if asset is not None:
            asset.status = AssetStatus.SCHEDULED
            asset.scheduled_at = scheduled_for
        db.commit()
        db.refresh(post)
        return post

    def create_batch(
        self,
        db: Session,
        *,
        user_id: str,
        items: Sequence[Tuple[BulkPostItem, datetime]],
        platform: Platform,
        post_type: PostType,
        timezone: str,
        auto_post: bool,
    ) -> List[ScheduledPost]:
        """Insert a whole bulk batch atomically."""
        batch_id = f"batch_{uuid.uuid4().hex[:12]}"
        posts = [
            ScheduledPost(
                user_id=user_id,
                content=item.content,
                media_urls=list(item.media_urls),
                platform=platform,
                post_type=post_type,
                scheduled_for=scheduled_for,
                timezone=timezone,
                auto_post=auto_post,
                status=ScheduleStatus.PENDING,
                batch_id=batch_id,
            )
            for item, scheduled_for in items
        ]
        try:
            db.add_all(posts)
            db.commit()
        except Exception:
            db.rollback()
            logger.error("Bulk insert of %d posts rolled back for user %s", len(posts), user_id)
            raise
        for post in posts:
            db.refresh(post)
        return posts

    def get_for_user(self, db: Session, *, post_id: str, user_id: str) -> Optional[ScheduledPost]:
        return (
            db.query(ScheduledPost)
            .filter(ScheduledPost.id == post_id, ScheduledPost.user_id == user_id)
            .first()
        )

    def _filtered(
        self,
        db: Session,
        *,
        user_id: str,
        status: Optional[ScheduleStatus] = None,
        platform: Optional[Platform] = None,
    ):
        query = db.query(ScheduledPost).filter(ScheduledPost.user_id == user_id)
        if status:
            query = query.filter(ScheduledPost.status == status)
        if platform:
            query = query.filter(ScheduledPost.platform == platform)
        return query

    def list_for_user(
        self,
        db: Session,
        *,
        user_id: str,
        status: Optional[ScheduleStatus] = None,
        platform: Optional[Platform] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[ScheduledPost]:
        return (
            self._filtered(db, user_id=user_id, status=status, platform=platform)
            .order_by(ScheduledPost.scheduled_for.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_for_user(
        self,
        db: Session,
        *,
        user_id: str,
        status: Optional[ScheduleStatus] = None,
        platform: Optional[Platform] = None,
    ) -> int:
        return self._filtered(db, user_id=user_id, status=status, platform=platform).count()

    def count_created_between(
        self, db: Session, *, user_id: str, start: datetime, end: datetime
    ) -> int:
        return (
            db.query(func.count(ScheduledPost.id))
            .filter(
                ScheduledPost.user_id == user_id,
                ScheduledPost.created_at >= start,
                ScheduledPost.created_at < end,
            )
            .scalar()
        )

    def mark_cancelled(self, db: Session, *, post: ScheduledPost) -> ScheduledPost:
        post.status = ScheduleStatus.CANCELLED
        db.commit()
        db.refresh(post)
        return post


scheduled_post = CRUDScheduledPost(ScheduledPost)
