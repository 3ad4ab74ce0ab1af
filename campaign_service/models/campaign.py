# campaign_service/models/campaign.py
"""
Campaign model - one AI generation job seeded by a product, a block or
free-form content.

Status is GENERATING from creation until the asset pipeline settles it to
READY or FAILED; it is never reverted.
"""

import uuid
from sqlalchemy import Column, String, Text, Enum, JSON, Index
from sqlalchemy.orm import relationship

from campaign_service.db.base_class import Base
from campaign_service.db.types import UTCDateTime, utcnow
from campaign_service.models.enums import CampaignStatus


class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(String, primary_key=True, default=lambda: f"cmp_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, index=True)

    # Seed material (exactly one is set)
    product_id = Column(String, nullable=True, index=True)
    block_id = Column(String, nullable=True, index=True)
    custom_content = Column(JSON, nullable=True)

    name = Column(String(300), nullable=False)
    goal = Column(String(30), nullable=True)
    target_audience = Column(Text, nullable=True)

    status = Column(
        Enum(CampaignStatus, name="campaign_status"),
        nullable=False,
        default=CampaignStatus.GENERATING,
    )
    error_message = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    assets = relationship(
        "CampaignAsset",
        back_populates="campaign",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CampaignAsset.created_at",
    )

    __table_args__ = (
        # Rate limiter counts by (user_id, created_at)
        Index("idx_campaigns_user_created", "user_id", "created_at"),
    )

    @property
    def source_type(self) -> str:
        if self.product_id:
            return "PRODUCT"
        if self.block_id:
            return "BLOCK"
        return "CUSTOM"
