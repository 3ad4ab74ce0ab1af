from unittest.mock import MagicMock

from campaign_service.crud.crud_campaign import CRUDCampaign
from campaign_service.crud.crud_campaign_asset import CRUDCampaignAsset
from campaign_service.models.campaign import Campaign
from campaign_service.models.campaign_asset import CampaignAsset
from campaign_service.models.enums import AssetStatus, AssetType, CampaignStatus, Platform
from campaign_service.schemas.campaign import CampaignGenerateRequest
from campaign_service.services.generated_asset import GeneratedAsset

campaign_crud = CRUDCampaign(Campaign)
asset_crud = CRUDCampaignAsset(CampaignAsset)


def test_create_generating():
    db_session = MagicMock()
    request = CampaignGenerateRequest.model_validate(
        {"customContent": {"title": "Masterclass"}, "config": {"goal": "PROMOTION"}}
    )

    campaign = campaign_crud.create_generating(
        db_session, user_id="user_123", name="Masterclass Campaign", request=request
    )

    db_session.add.assert_called_once()
    db_session.commit.assert_called_once()
    db_session.refresh.assert_called_once()
    assert campaign.status == CampaignStatus.GENERATING
    assert campaign.goal == "PROMOTION"
    assert campaign.custom_content["title"] == "Masterclass"
    assert campaign.source_type == "CUSTOM"


def test_create_drafts_inserts_one_batch():
    db_session = MagicMock()
    assets = [
        GeneratedAsset(type=AssetType.SOCIAL_POST, platform=Platform.TWITTER, content="one"),
        GeneratedAsset(type=AssetType.EMAIL, content="{}"),
    ]

    rows = asset_crud.create_drafts(db_session, campaign_id="cmp_1", assets=assets)

    db_session.add_all.assert_called_once()
    db_session.commit.assert_called_once()
    assert [r.status for r in rows] == [AssetStatus.DRAFT, AssetStatus.DRAFT]
    assert rows[1].platform is None


def test_create_drafts_with_nothing_skips_the_write():
    db_session = MagicMock()

    assert asset_crud.create_drafts(db_session, campaign_id="cmp_1", assets=[]) == []
    db_session.commit.assert_not_called()
