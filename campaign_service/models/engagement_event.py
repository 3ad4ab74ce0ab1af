# campaign_service/models/engagement_event.py
"""
EngagementEvent model - a page view or link click recorded by the
analytics collaborator. CLICK events are the qualifying events for the
optimal time analysis.
"""

import uuid
from sqlalchemy import Column, String, Enum, Index

from campaign_service.db.base_class import Base
from campaign_service.db.types import UTCDateTime, utcnow
from campaign_service.models.enums import EngagementEventType, Platform


class EngagementEvent(Base):
    __tablename__ = "engagement_events"

    id = Column(String, primary_key=True, default=lambda: f"evt_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False)  # Page owner
    page_id = Column(String, nullable=True)
    block_id = Column(String, nullable=True)
    event_type = Column(Enum(EngagementEventType, name="engagement_event_type"), nullable=False)
    # Referring platform when known
    platform = Column(Enum(Platform, name="platform"), nullable=True)
    occurred_at = Column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_engagement_events_user_type_time", "user_id", "event_type", "occurred_at"),
    )
