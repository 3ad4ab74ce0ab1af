# campaign_service/models/campaign_asset.py
"""
CampaignAsset model - one generated content unit (social post, email or
landing-page variant) belonging to a campaign.

Emails and page variants store a JSON-encoded body in `content`. The
performance counters are written by the analytics collaborator.
"""

import uuid
from sqlalchemy import Column, String, Integer, Text, Enum, ForeignKey, text
from sqlalchemy.orm import relationship

from campaign_service.db.base_class import Base
from campaign_service.db.types import UTCDateTime, utcnow
from campaign_service.models.enums import AssetStatus, AssetType, Platform


class CampaignAsset(Base):
    __tablename__ = "campaign_assets"

    id = Column(String, primary_key=True, default=lambda: f"ast_{uuid.uuid4().hex[:12]}")
    campaign_id = Column(
        String, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True
    )

    type = Column(Enum(AssetType, name="asset_type"), nullable=False)
    platform = Column(Enum(Platform, name="platform"), nullable=True)
    content = Column(Text, nullable=False)
    media_url = Column(String(1000), nullable=True)
    status = Column(Enum(AssetStatus, name="asset_status"), nullable=False, default=AssetStatus.DRAFT)

    scheduled_at = Column(UTCDateTime, nullable=True)
    published_at = Column(UTCDateTime, nullable=True)

    # Performance (read-only here)
    views = Column(Integer, nullable=False, default=0, server_default=text("0"))
    clicks = Column(Integer, nullable=False, default=0, server_default=text("0"))
    conversions = Column(Integer, nullable=False, default=0, server_default=text("0"))

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    campaign = relationship("Campaign", back_populates="assets")
