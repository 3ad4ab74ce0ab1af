# campaign_service/api/v1/endpoints/campaigns.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from campaign_service.api import deps
from campaign_service.core.limiter import limiter
from campaign_service.db.session import get_db
from campaign_service.models.enums import CampaignStatus
from campaign_service.schemas.campaign import (
    CampaignAssetCreate,
    CampaignAssetEnvelope,
    CampaignAssetUpdate,
    CampaignDetailResponse,
    CampaignGenerateRequest,
    CampaignGenerateResponse,
    CampaignListResponse,
    asset_to_response,
)
from campaign_service.schemas.token import TokenPayload
from campaign_service.services import campaigns as campaign_service

router = APIRouter(prefix="/campaigns", tags=["Campaigns"])


@router.post(
    "/generate",
    response_model=CampaignGenerateResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
@limiter.limit("10/minute")
def generate_campaign(
    request: Request,
    campaign_in: CampaignGenerateRequest,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Start generating a marketing campaign.

    The campaign is created in GENERATING status and its assets are produced
    by a background worker. Poll `GET /campaigns/{id}` to see it settle to
    READY or FAILED.

    **Errors**:
    - 422: zero or several seeds (productId, blockId, customContent)
    - 404: product or block not found
    - 429: campaign creation quota reached
    - 503: the generation job could not be queued
    """
    campaign = campaign_service.generate_campaign(db, user_id=current_user.sub, request=campaign_in)
    return CampaignGenerateResponse(campaign_id=campaign.id, status=campaign.status)


@router.get("", response_model=CampaignListResponse)
def list_campaigns(
    status_filter: Optional[CampaignStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    summaries = campaign_service.list_campaigns(db, user_id=current_user.sub, status=status_filter)
    return CampaignListResponse(campaigns=summaries)


@router.get("/{campaign_id}", response_model=CampaignDetailResponse)
def get_campaign(
    campaign_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    detail = campaign_service.get_campaign_detail(db, user_id=current_user.sub, campaign_id=campaign_id)
    return CampaignDetailResponse(campaign=detail)


@router.delete("/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_campaign(
    campaign_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Delete a campaign together with all of its assets."""
    campaign_service.delete_campaign(db, user_id=current_user.sub, campaign_id=campaign_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{campaign_id}/assets",
    response_model=CampaignAssetEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def add_asset(
    campaign_id: str,
    asset_in: CampaignAssetCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    asset = campaign_service.add_asset(
        db, user_id=current_user.sub, campaign_id=campaign_id, obj_in=asset_in
    )
    return CampaignAssetEnvelope(asset=asset_to_response(asset))


@router.put("/{campaign_id}/assets/{asset_id}", response_model=CampaignAssetEnvelope)
def update_asset(
    campaign_id: str,
    asset_id: str,
    asset_in: CampaignAssetUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    asset = campaign_service.update_asset(
        db, user_id=current_user.sub, campaign_id=campaign_id, asset_id=asset_id, obj_in=asset_in
    )
    return CampaignAssetEnvelope(asset=asset_to_response(asset))


@router.delete("/{campaign_id}/assets/{asset_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_asset(
    campaign_id: str,
    asset_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    campaign_service.delete_asset(
        db, user_id=current_user.sub, campaign_id=campaign_id, asset_id=asset_id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
