# campaign_service/services/asset_pipeline.py
"""
Campaign asset generation.

Social posts (one call per platform), the email sequence and the page
variants are requested concurrently. A failing slice is logged and
contributes no assets; the others still land. Everything generated is
inserted as one DRAFT batch, then the campaign is marked READY. Any error
escaping to the top marks the campaign FAILED and is raised as a
PipelineFailure. Assets already inserted by then are kept.
"""

import asyncio
import json
import logging
import math
from typing import Any, Awaitable, Callable, List, Optional

from sqlalchemy.orm import Session

from campaign_service import crud
from campaign_service.core.exceptions import GenerationFailure, NotFoundError, PipelineFailure
from campaign_service.models.enums import AssetType, CampaignStatus, Platform
from campaign_service.schemas.campaign import GenerateCampaignConfig, SourceContent
from campaign_service.services import prompts
from campaign_service.services.content_generator import AIContentGenerator, get_content_generator
from campaign_service.services.generated_asset import GeneratedAsset

logger = logging.getLogger(__name__)

EMAIL_KEYS = ("subject", "preview", "body")
PAGE_VARIANT_KEYS = ("approach", "headline", "subheadline", "cta")


def per_platform_count(social_post_count: int, platform_count: int) -> int:
    if social_post_count <= 0 or platform_count <= 0:
        return 0
    return max(1, math.ceil(social_post_count / platform_count))


def _require_list(result: Any, required_keys=()) -> List[dict]:
    if not isinstance(result, list):
        raise GenerationFailure("Generator did not return a JSON array")
    for item in result:
        if not isinstance(item, dict):
            raise GenerationFailure("Generator returned a non-object array item")
        missing = [k for k in required_keys if k not in item]
        if missing:
            raise GenerationFailure(
                "Generator output is missing keys", details={"missing": missing}
            )
    return result


class AssetPipeline:
    def __init__(self, generator: Optional[AIContentGenerator] = None):
        self._generator = generator

    @property
    def generator(self):
        if self._generator is None:
            self._generator = get_content_generator()
        return self._generator

    async def _call(self, spec: prompts.PromptSpec) -> Any:
        return await self.generator.generate_json(
            system_prompt=spec.system_prompt,
            user_prompt=spec.user_prompt,
            max_tokens=spec.max_tokens,
            temperature=spec.temperature,
        )

    async def generate_social_posts(
        self, platform: Platform, source: SourceContent, config: GenerateCampaignConfig, count: int
    ) -> List[GeneratedAsset]:
        result = await self._call(prompts.social_posts_prompt(platform, source, config, count))
        items = _require_list(result, ("content",))
        return [
            GeneratedAsset(type=AssetType.SOCIAL_POST, platform=platform, content=str(item["content"]))
            for item in items
        ]

    async def generate_email_sequence(
        self, source: SourceContent, config: GenerateCampaignConfig, count: int
    ) -> List[GeneratedAsset]:
        result = await self._call(prompts.email_sequence_prompt(source, config, count))
        items = _require_list(result, EMAIL_KEYS)
        return [
            GeneratedAsset(
                type=AssetType.EMAIL,
                content=json.dumps({k: item[k] for k in EMAIL_KEYS}),
            )
            for item in items
        ]

    async def generate_page_variants(
        self, source: SourceContent, config: GenerateCampaignConfig, count: int
    ) -> List[GeneratedAsset]:
        result = await self._call(prompts.page_variants_prompt(source, config, count))
        items = _require_list(result, PAGE_VARIANT_KEYS)
        return [
            GeneratedAsset(
                type=AssetType.PAGE_VARIANT,
                content=json.dumps({k: item[k] for k in PAGE_VARIANT_KEYS}),
            )
            for item in items
        ]

    async def _isolated(
        self, campaign_id: str, label: str, factory: Callable[[], Awaitable[List[GeneratedAsset]]]
    ) -> List[GeneratedAsset]:
        """Run one slice; its failure yields no assets instead of aborting the others."""
        try:
            return await factory()
        except GenerationFailure as e:
            logger.error("Error generating %s for campaign %s: %s", label, campaign_id, e.message)
        except Exception:
            logger.exception("Unexpected error generating %s for campaign %s", label, campaign_id)
        return []

    async def collect_assets(
        self, campaign_id: str, source: SourceContent, config: GenerateCampaignConfig
    ) -> List[GeneratedAsset]:
        slices = []
        per_platform = per_platform_count(config.social_post_count, len(config.platforms))
        if config.platforms and per_platform:
            for platform in config.platforms:
                slices.append(
                    self._isolated(
                        campaign_id,
                        f"{platform.value} posts",
                        lambda p=platform: self.generate_social_posts(p, source, config, per_platform),
                    )
                )
        if config.email_count > 0:
            slices.append(
                self._isolated(
                    campaign_id,
                    "email sequence",
                    lambda: self.generate_email_sequence(source, config, config.email_count),
                )
            )
        if config.page_variants > 0:
            slices.append(
                self._isolated(
                    campaign_id,
                    "page variants",
                    lambda: self.generate_page_variants(source, config, config.page_variants),
                )
            )

        results = await asyncio.gather(*slices)
        return [asset for chunk in results for asset in chunk]

    async def run(
        self,
        db: Session,
        campaign_id: str,
        source: SourceContent,
        config: GenerateCampaignConfig,
    ) -> int:
        """
        Generate and store the assets of a GENERATING campaign.

        A campaign that is already READY or FAILED is left untouched.

        Returns:
            Number of assets inserted

        Raises:
            PipelineFailure: the campaign was marked FAILED
        """
        try:
            campaign = crud.campaign.get(db, id=campaign_id)
            if campaign is None:
                raise NotFoundError("Campaign", campaign_id)
            if campaign.status != CampaignStatus.GENERATING:
                # Redelivered task for a campaign that already settled
                logger.warning(
                    "Campaign %s is %s, skipping asset generation",
                    campaign_id,
                    CampaignStatus(campaign.status).value,
                )
                return 0

            assets = await self.collect_assets(campaign_id, source, config)
            rows = crud.campaign_asset.create_drafts(db, campaign_id=campaign_id, assets=assets)
            crud.campaign.mark_ready(db, campaign=campaign)
            logger.info("Campaign %s ready with %d assets", campaign_id, len(rows))
            return len(rows)
        except Exception as e:
            logger.error("Error generating campaign assets for %s: %s", campaign_id, e)
            self._mark_failed(db, campaign_id, str(e) or e.__class__.__name__)
            raise PipelineFailure(campaign_id, str(e)) from e

    def _mark_failed(self, db: Session, campaign_id: str, reason: str) -> None:
        db.rollback()
        campaign = crud.campaign.get(db, id=campaign_id)
        if campaign is None:
            return
        if campaign.status == CampaignStatus.GENERATING:
            crud.campaign.mark_failed(db, campaign=campaign, error=reason)


asset_pipeline = AssetPipeline()
