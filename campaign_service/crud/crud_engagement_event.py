# campaign_service/crud/crud_engagement_event.py

from datetime import datetime
from typing import Iterator, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from campaign_service.models.engagement_event import EngagementEvent
from campaign_service.models.enums import EngagementEventType


class CRUDEngagementEvent:
    def count_in_window(
        self,
        db: Session,
        *,
        user_id: str,
        since: datetime,
        event_type: Optional[EngagementEventType] = EngagementEventType.CLICK,
    ) -> int:
        query = db.query(func.count(EngagementEvent.id)).filter(
            EngagementEvent.user_id == user_id,
            EngagementEvent.occurred_at >= since,
        )
        if event_type:
            query = query.filter(EngagementEvent.event_type == event_type)
        return query.scalar()

    def iter_in_window(
        self, db: Session, *, user_id: str, since: datetime, batch_size: int = 1000
    ) -> Iterator[EngagementEvent]:
        """Stream the user's events oldest first."""
        return (
            db.query(EngagementEvent)
            .filter(EngagementEvent.user_id == user_id, EngagementEvent.occurred_at >= since)
            .order_by(EngagementEvent.occurred_at.asc())
            .yield_per(batch_size)
        )


engagement_event = CRUDEngagementEvent()
