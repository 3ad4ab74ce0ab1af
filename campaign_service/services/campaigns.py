# campaign_service/services/campaigns.py
"""
Campaign use cases behind the HTTP layer: generation requests, listing,
detail, deletion and manual asset editing.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from campaign_service import crud
from campaign_service.core.exceptions import DispatchError, NotFoundError, ValidationError
from campaign_service.models.campaign import Campaign
from campaign_service.models.campaign_asset import CampaignAsset
from campaign_service.models.enums import AssetStatus, CampaignStatus
from campaign_service.schemas.campaign import (
    CampaignAssetCreate,
    CampaignAssetUpdate,
    CampaignCounts,
    CampaignDetail,
    CampaignGenerateRequest,
    CampaignSummary,
    GenerateCampaignConfig,
    ProductSummary,
    SourceContent,
    asset_to_response,
)
from campaign_service.services.rate_limiter import campaign_rate_limiter

logger = logging.getLogger(__name__)


def dispatch_generation(campaign_id: str, source: SourceContent, config: GenerateCampaignConfig) -> None:
    """Hand the pipeline run to the Celery worker."""
    from campaign_service.tasks import generate_campaign_assets

    generate_campaign_assets.delay(
        campaign_id,
        source.model_dump(mode="json"),
        config.model_dump(mode="json"),
    )


def validate_seed(request: CampaignGenerateRequest) -> None:
    seeds = [
        name
        for name, value in (
            ("productId", request.product_id),
            ("blockId", request.block_id),
            ("customContent", request.custom_content),
        )
        if value
    ]
    if len(seeds) != 1:
        raise ValidationError.single(
            "source",
            "Exactly one of productId, blockId or customContent is required"
            + (f" (got {', '.join(seeds)})" if seeds else ""),
        )


def resolve_source(db: Session, request: CampaignGenerateRequest) -> SourceContent:
    """Normalise the campaign seed into title/description/price material."""
    if request.product_id:
        product = crud.source.get_product(db, request.product_id)
        if not product:
            raise NotFoundError("Product", request.product_id)
        return SourceContent(
            title=product.name,
            description=product.description or "",
            price=product.price,
            currency=product.currency,
        )
    if request.block_id:
        block = crud.source.get_block(db, request.block_id)
        if not block:
            raise NotFoundError("Block", request.block_id)
        return SourceContent(
            title=block.title or "Untitled",
            description=block.description or "",
            image_url=block.image_url,
        )
    custom = request.custom_content
    return SourceContent(
        title=custom.title,
        description=custom.description,
        image_url=custom.image_url,
    )


def generate_campaign(db: Session, *, user_id: str, request: CampaignGenerateRequest) -> Campaign:
    """
    Create a GENERATING campaign and queue its asset generation.

    Raises:
        ValidationError: zero or several seeds
        RateLimitError: creation quota reached
        NotFoundError: product or block does not exist
        DispatchError: the job could not be queued; the campaign is FAILED
    """
    validate_seed(request)
    campaign_rate_limiter.enforce(db, user_id)
    source = resolve_source(db, request)

    campaign = crud.campaign.create_generating(
        db, user_id=user_id, name=f"{source.title} Campaign", request=request
    )
    logger.info("Campaign %s created for user %s", campaign.id, user_id)

    try:
        dispatch_generation(campaign.id, source, request.config)
    except Exception as e:
        logger.error("Failed to queue generation for campaign %s: %s", campaign.id, e)
        crud.campaign.mark_failed(db, campaign=campaign, error=f"Dispatch failed: {e}")
        raise DispatchError("campaign generation", str(e)) from e

    return campaign


def _product_summaries(db: Session, campaigns: List[Campaign]) -> dict:
    return crud.source.get_products(db, [c.product_id for c in campaigns])


def _summary(campaign: Campaign, product) -> CampaignSummary:
    platforms = list(dict.fromkeys(a.platform for a in campaign.assets if a.platform))
    scheduled = sum(1 for a in campaign.assets if a.status == AssetStatus.SCHEDULED)
    return CampaignSummary(
        id=campaign.id,
        name=campaign.name,
        status=campaign.status,
        goal=campaign.goal,
        source_type=campaign.source_type,
        platforms=platforms,
        created_at=campaign.created_at,
        product=(
            ProductSummary(id=product.id, name=product.name, price=product.price) if product else None
        ),
        counts=CampaignCounts(assets=len(campaign.assets), scheduled_posts=scheduled),
    )


def list_campaigns(
    db: Session, *, user_id: str, status: Optional[CampaignStatus] = None
) -> List[CampaignSummary]:
    campaigns = crud.campaign.list_for_user(db, user_id=user_id, status=status)
    products = _product_summaries(db, campaigns)
    return [_summary(c, products.get(c.product_id)) for c in campaigns]


def get_owned_campaign(db: Session, *, user_id: str, campaign_id: str) -> Campaign:
    campaign = crud.campaign.get_for_user(db, campaign_id=campaign_id, user_id=user_id)
    if not campaign:
        raise NotFoundError("Campaign", campaign_id)
    return campaign


def get_campaign_detail(db: Session, *, user_id: str, campaign_id: str) -> CampaignDetail:
    campaign = get_owned_campaign(db, user_id=user_id, campaign_id=campaign_id)
    product = crud.source.get_product(db, campaign.product_id) if campaign.product_id else None
    return CampaignDetail(
        id=campaign.id,
        name=campaign.name,
        status=campaign.status,
        goal=campaign.goal,
        target_audience=campaign.target_audience,
        source_type=campaign.source_type,
        created_at=campaign.created_at,
        product=(
            ProductSummary(id=product.id, name=product.name, price=product.price) if product else None
        ),
        assets=[asset_to_response(a) for a in campaign.assets],
    )


def delete_campaign(db: Session, *, user_id: str, campaign_id: str) -> None:
    campaign = get_owned_campaign(db, user_id=user_id, campaign_id=campaign_id)
    crud.campaign.remove(db, db_obj=campaign)
    logger.info("Campaign %s deleted by user %s", campaign_id, user_id)


def add_asset(
    db: Session, *, user_id: str, campaign_id: str, obj_in: CampaignAssetCreate
) -> CampaignAsset:
    get_owned_campaign(db, user_id=user_id, campaign_id=campaign_id)
    return crud.campaign_asset.create_for_campaign(db, campaign_id=campaign_id, obj_in=obj_in)


def _owned_asset(db: Session, *, user_id: str, campaign_id: str, asset_id: str) -> CampaignAsset:
    get_owned_campaign(db, user_id=user_id, campaign_id=campaign_id)
    asset = crud.campaign_asset.get_in_campaign(db, asset_id=asset_id, campaign_id=campaign_id)
    if not asset:
        raise NotFoundError("Asset", asset_id)
    return asset


def update_asset(
    db: Session, *, user_id: str, campaign_id: str, asset_id: str, obj_in: CampaignAssetUpdate
) -> CampaignAsset:
    asset = _owned_asset(db, user_id=user_id, campaign_id=campaign_id, asset_id=asset_id)
    return crud.campaign_asset.update(db, db_obj=asset, obj_in=obj_in)


def delete_asset(db: Session, *, user_id: str, campaign_id: str, asset_id: str) -> None:
    asset = _owned_asset(db, user_id=user_id, campaign_id=campaign_id, asset_id=asset_id)
    crud.campaign_asset.remove(db, db_obj=asset)
