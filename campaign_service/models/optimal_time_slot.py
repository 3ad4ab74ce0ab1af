# campaign_service/models/optimal_time_slot.py
"""
OptimalTimeSlot model - one ranked (day of week, hour of day) posting
recommendation produced by the optimal time analyzer.

A user's slots are replaced wholesale by every analysis run. `day_of_week`
uses 0=Sunday .. 6=Saturday and both fields are in the user's timezone.
"""

import uuid
from sqlalchemy import Column, String, Integer, Float, Enum, Index

from campaign_service.db.base_class import Base
from campaign_service.db.types import UTCDateTime, utcnow
from campaign_service.models.enums import Platform


class OptimalTimeSlot(Base):
    __tablename__ = "optimal_time_slots"

    id = Column(String, primary_key=True, default=lambda: f"slot_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, index=True)
    # Analysis job that produced this slot
    job_id = Column(String, nullable=True)

    day_of_week = Column(Integer, nullable=False)
    hour_of_day = Column(Integer, nullable=False)
    platform = Column(Enum(Platform, name="platform"), nullable=True)  # NULL = all platforms

    avg_engagement_rate = Column(Float, nullable=False)
    total_views = Column(Integer, nullable=False, default=0)
    total_clicks = Column(Integer, nullable=False, default=0)
    sample_size = Column(Integer, nullable=False, default=0)
    confidence = Column(Float, nullable=False)
    rank = Column(Integer, nullable=False)

    analyzed_from = Column(UTCDateTime, nullable=False)
    analyzed_to = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_optimal_time_slots_user_rank", "user_id", "rank", unique=True),
    )
