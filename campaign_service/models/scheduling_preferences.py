# campaign_service/models/scheduling_preferences.py

import uuid
from sqlalchemy import Column, String, Integer, Float

from campaign_service.db.base_class import Base
from campaign_service.db.types import UTCDateTime, utcnow


class SchedulingPreferences(Base):
    """Per-user scheduling defaults edited from the scheduler settings screen."""

    __tablename__ = "scheduling_preferences"

    id = Column(String, primary_key=True, default=lambda: f"spref_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, unique=True)
    min_hours_between = Column(Float, nullable=True)
    max_posts_per_day = Column(Integer, nullable=True)
    timezone = Column(String(64), nullable=False, default="UTC")
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)
