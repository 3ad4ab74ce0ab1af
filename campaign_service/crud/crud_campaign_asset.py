# campaign_service/crud/crud_campaign_asset.py

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from campaign_service.crud.base import CRUDBase
from campaign_service.models.campaign_asset import CampaignAsset
from campaign_service.models.enums import AssetStatus
from campaign_service.schemas.campaign import CampaignAssetCreate, CampaignAssetUpdate
from campaign_service.services.generated_asset import GeneratedAsset


class CRUDCampaignAsset(CRUDBase[CampaignAsset, CampaignAssetCreate, CampaignAssetUpdate]):
    def create_drafts(
        self, db: Session, *, campaign_id: str, assets: Iterable[GeneratedAsset]
    ) -> List[CampaignAsset]:
        """Insert generated assets as one batch, all in DRAFT."""
        rows = [
            CampaignAsset(
                campaign_id=campaign_id,
                type=asset.type,
                platform=asset.platform,
                content=asset.content,
                status=AssetStatus.DRAFT,
            )
            for asset in assets
        ]
        if not rows:
            return []
        db.add_all(rows)
        db.commit()
        return rows

    def create_for_campaign(
        self, db: Session, *, campaign_id: str, obj_in: CampaignAssetCreate
    ) -> CampaignAsset:
        asset = CampaignAsset(
            campaign_id=campaign_id,
            type=obj_in.type,
            platform=obj_in.platform,
            content=obj_in.content,
            media_url=obj_in.media_url,
            status=AssetStatus.DRAFT,
        )
        db.add(asset)
        db.commit()
        db.refresh(asset)
        return asset

    def get_in_campaign(
        self, db: Session, *, asset_id: str, campaign_id: str
    ) -> Optional[CampaignAsset]:
        return (
            db.query(CampaignAsset)
            .filter(CampaignAsset.id == asset_id, CampaignAsset.campaign_id == campaign_id)
            .first()
        )


campaign_asset = CRUDCampaignAsset(CampaignAsset)
