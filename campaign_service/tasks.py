# campaign_service/tasks.py
"""
Celery tasks for work detached from the HTTP request.

- generate_campaign_assets: runs the asset pipeline for a GENERATING campaign
- analyze_optimal_times: runs one optimal time analysis job

Neither task retries. A campaign cannot re-enter GENERATING, and a failed
analysis job is superseded by the next request.
"""

import asyncio
import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from campaign_service.core.exceptions import PipelineFailure
from campaign_service.db.session import SessionLocal
from campaign_service.schemas.campaign import GenerateCampaignConfig, SourceContent
from campaign_service.services.asset_pipeline import asset_pipeline
from campaign_service.services.optimal_time_analyzer import optimal_time_analyzer
from campaign_service.worker import celery_app

logger = logging.getLogger(__name__)


def run_async(coro):
    """Run async coroutine in sync context (for Celery)."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task(name="campaign_service.tasks.generate_campaign_assets")
def generate_campaign_assets(campaign_id: str, source: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
    db: Session = SessionLocal()
    try:
        created = run_async(
            asset_pipeline.run(
                db,
                campaign_id,
                SourceContent.model_validate(source),
                GenerateCampaignConfig.model_validate(config),
            )
        )
        return {"campaign_id": campaign_id, "status": "READY", "assets": created}
    except PipelineFailure as e:
        logger.error("Campaign %s generation failed: %s", e.campaign_id, e.message)
        return {"campaign_id": campaign_id, "status": "FAILED", "error": e.message}
    finally:
        db.close()


@celery_app.task(name="campaign_service.tasks.analyze_optimal_times")
def analyze_optimal_times(job_id: str) -> Dict[str, Any]:
    db: Session = SessionLocal()
    try:
        job = optimal_time_analyzer.run_analysis(db, job_id)
        return {
            "job_id": job.id,
            "status": job.status.value,
            "slots_produced": job.slots_produced,
            "partial": job.partial,
        }
    finally:
        db.close()
