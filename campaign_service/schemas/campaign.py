# campaign_service/schemas/campaign.py
"""
Pydantic schemas for AI marketing campaigns.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import Field, model_validator

from campaign_service.models.enums import (
    AssetStatus,
    AssetType,
    CampaignGoal,
    CampaignStatus,
    CampaignTone,
    Platform,
)
from campaign_service.schemas.base import CamelModel

SOCIAL_PLATFORMS = {
    Platform.TWITTER,
    Platform.INSTAGRAM,
    Platform.FACEBOOK,
    Platform.LINKEDIN,
    Platform.TIKTOK,
}


class CustomContent(CamelModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field("", max_length=5000)
    image_url: Optional[str] = None


class GenerateCampaignConfig(CamelModel):
    """Generation parameters chosen in the campaign wizard."""

    social_post_count: int = Field(6, ge=0, le=50)
    email_count: int = Field(3, ge=0, le=10)
    platforms: List[Platform] = Field(default_factory=list)
    page_variants: int = Field(0, ge=0, le=5)
    goal: CampaignGoal = CampaignGoal.LAUNCH
    target_audience: Optional[str] = Field(None, max_length=1000)
    tone: CampaignTone = CampaignTone.PROFESSIONAL

    @model_validator(mode="after")
    def validate_platforms(self) -> "GenerateCampaignConfig":
        non_social = [p.value for p in self.platforms if p not in SOCIAL_PLATFORMS]
        if non_social:
            raise ValueError(f"platforms must be social networks, got: {', '.join(non_social)}")
        # Keep the first occurrence of each platform
        self.platforms = list(dict.fromkeys(self.platforms))
        return self


class CampaignGenerateRequest(CamelModel):
    product_id: Optional[str] = None
    block_id: Optional[str] = None
    custom_content: Optional[CustomContent] = None
    config: GenerateCampaignConfig = Field(default_factory=GenerateCampaignConfig)


class SourceContent(CamelModel):
    """Seed material normalised from a product, a block or custom content."""

    title: str
    description: str = ""
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None


class CampaignGenerateResponse(CamelModel):
    campaign_id: str
    status: CampaignStatus


class ProductSummary(CamelModel):
    id: str
    name: str
    price: Optional[Decimal] = None


class CampaignCounts(CamelModel):
    assets: int
    scheduled_posts: int


class CampaignSummary(CamelModel):
    id: str
    name: str
    status: CampaignStatus
    goal: Optional[str] = None
    source_type: str
    platforms: List[Platform]
    created_at: datetime
    product: Optional[ProductSummary] = None
    counts: CampaignCounts


class CampaignListResponse(CamelModel):
    campaigns: List[CampaignSummary]


class AssetPerformance(CamelModel):
    views: int = 0
    clicks: int = 0
    conversions: int = 0


class CampaignAssetResponse(CamelModel):
    id: str
    type: AssetType
    platform: Optional[Platform] = None
    content: str
    media_url: Optional[str] = None
    status: AssetStatus
    scheduled_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    performance: AssetPerformance


class CampaignDetail(CamelModel):
    id: str
    name: str
    status: CampaignStatus
    goal: Optional[str] = None
    target_audience: Optional[str] = None
    source_type: str
    created_at: datetime
    product: Optional[ProductSummary] = None
    assets: List[CampaignAssetResponse]


class CampaignDetailResponse(CamelModel):
    campaign: CampaignDetail


class CampaignAssetCreate(CamelModel):
    type: AssetType
    platform: Optional[Platform] = None
    content: str = Field(..., min_length=1)
    media_url: Optional[str] = None


class CampaignAssetUpdate(CamelModel):
    type: Optional[AssetType] = None
    platform: Optional[Platform] = None
    content: Optional[str] = Field(None, min_length=1)
    media_url: Optional[str] = None
    status: Optional[AssetStatus] = None


class CampaignAssetEnvelope(CamelModel):
    asset: CampaignAssetResponse


def asset_to_response(asset: Any) -> CampaignAssetResponse:
    return CampaignAssetResponse(
        id=asset.id,
        type=asset.type,
        platform=asset.platform,
        content=asset.content,
        media_url=asset.media_url,
        status=asset.status,
        scheduled_at=asset.scheduled_at,
        published_at=asset.published_at,
        created_at=asset.created_at,
        performance=AssetPerformance(
            views=asset.views or 0,
            clicks=asset.clicks or 0,
            conversions=asset.conversions or 0,
        ),
    )
