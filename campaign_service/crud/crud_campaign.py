# campaign_service/crud/crud_campaign.py
"""
CRUD operations for campaigns.

Status changes go through the campaign state machine so a campaign that
has reached READY or FAILED is never written again.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from campaign_service.crud.base import CRUDBase
from campaign_service.models.campaign import Campaign
from campaign_service.models.enums import CampaignStatus
from campaign_service.schemas.campaign import CampaignGenerateRequest
from campaign_service.services.campaign_state import campaign_state_machine


class CRUDCampaign(CRUDBase[Campaign, CampaignGenerateRequest, CampaignGenerateRequest]):
    def create_generating(
        self,
        db: Session,
        *,
        user_id: str,
        name: str,
        request: CampaignGenerateRequest,
    ) -> Campaign:
        """Create a campaign in GENERATING status."""
        campaign = Campaign(
            user_id=user_id,
            product_id=request.product_id,
            block_id=request.block_id,
            custom_content=(
                request.custom_content.model_dump() if request.custom_content else None
            ),
            name=name,
            goal=request.config.goal.value,
            target_audience=request.config.target_audience,
            status=CampaignStatus.GENERATING,
        )
        db.add(campaign)
        db.commit()
        db.refresh(campaign)
        return campaign

    def get_for_user(self, db: Session, *, campaign_id: str, user_id: str) -> Optional[Campaign]:
        return (
            db.query(Campaign)
            .options(selectinload(Campaign.assets))
            .filter(Campaign.id == campaign_id, Campaign.user_id == user_id)
            .first()
        )

    def list_for_user(
        self, db: Session, *, user_id: str, status: Optional[CampaignStatus] = None
    ) -> List[Campaign]:
        query = (
            db.query(Campaign)
            .options(selectinload(Campaign.assets))
            .filter(Campaign.user_id == user_id)
        )
        if status:
            query = query.filter(Campaign.status == status)
        return query.order_by(Campaign.created_at.desc()).all()

    def count_created_since(self, db: Session, *, user_id: str, since: datetime) -> int:
        """Count campaigns the user created at or after `since`."""
        return (
            db.query(func.count(Campaign.id))
            .filter(Campaign.user_id == user_id, Campaign.created_at >= since)
            .scalar()
        )

    def mark_ready(self, db: Session, *, campaign: Campaign) -> Campaign:
        campaign_state_machine.transition(campaign, CampaignStatus.READY)
        db.commit()
        db.refresh(campaign)
        return campaign

    def mark_failed(self, db: Session, *, campaign: Campaign, error: str) -> Campaign:
        campaign_state_machine.transition(campaign, CampaignStatus.FAILED)
        campaign.error_message = error[:2000]
        db.commit()
        db.refresh(campaign)
        return campaign


campaign = CRUDCampaign(Campaign)
