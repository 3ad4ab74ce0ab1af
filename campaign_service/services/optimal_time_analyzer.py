# campaign_service/services/optimal_time_analyzer.py
"""
Optimal posting time analysis.

A request is accepted only with enough CLICK events in the lookback
window. The work then runs on a Celery worker and is tracked by an
AnalysisJob the client polls. A run replaces the user's ranked slots
wholesale. A run that reaches its deadline stops reading events and
persists the ranking built so far, flagged as partial.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from campaign_service import crud
from campaign_service.core.config import settings
from campaign_service.core.exceptions import DispatchError, InsufficientDataError, NotFoundError
from campaign_service.db.types import utcnow
from campaign_service.models.analysis_job import AnalysisJob
from campaign_service.models.enums import AnalysisJobStatus, EngagementEventType, Platform
from campaign_service.models.optimal_time_slot import OptimalTimeSlot
from campaign_service.schemas.optimal_time import DataQuality, OptimalTimeResponse, OptimalTimesResponse
from campaign_service.services import time_distribution
from campaign_service.services.time_distribution import DAY_NAMES

logger = logging.getLogger(__name__)

ESTIMATED_RUNTIME_SECONDS = 90


@dataclass(frozen=True)
class DefaultSlot:
    day_of_week: int
    hour_of_day: int
    platform: Platform
    reason: str


INDUSTRY_DEFAULTS = [
    DefaultSlot(2, 10, Platform.TWITTER, "Industry standard: Tuesday 10 AM"),
    DefaultSlot(2, 15, Platform.TWITTER, "Industry standard: Tuesday 3 PM"),
    DefaultSlot(3, 14, Platform.LINKEDIN, "Industry standard: Wednesday 2 PM"),
    DefaultSlot(4, 17, Platform.INSTAGRAM, "Industry standard: Thursday 5 PM"),
    DefaultSlot(1, 9, Platform.FACEBOOK, "Industry standard: Monday 9 AM"),
]
DEFAULT_CONFIDENCE = 50.0


def confidence_for_sample(sample_size: int) -> float:
    if sample_size >= 50:
        return 95.0
    if sample_size >= 20:
        return 75.0
    if sample_size >= 10:
        return 50.0
    return 25.0


def quality_label(avg_sample_size: float) -> str:
    if avg_sample_size >= 50:
        return "HIGH"
    if avg_sample_size >= 20:
        return "MEDIUM"
    return "LOW"


@dataclass
class Bucket:
    day_of_week: int
    hour_of_day: int
    platform: Optional[Platform]
    clicks: int = 0
    views: int = 0

    @property
    def effective_views(self) -> int:
        return self.views or self.clicks

    @property
    def engagement_rate(self) -> float:
        views = self.effective_views
        return round(self.clicks / views * 100, 2) if views else 0.0


@dataclass
class AnalysisResult:
    buckets: List[Bucket] = field(default_factory=list)
    events_considered: int = 0
    partial: bool = False


def rank_buckets(buckets: List[Bucket]) -> List[Tuple[int, Bucket]]:
    """Rank buckets with clicks: rate, then confidence, then sample size, all descending."""
    candidates = [b for b in buckets if b.clicks > 0]
    candidates.sort(
        key=lambda b: (
            -b.engagement_rate,
            -confidence_for_sample(b.clicks),
            -b.clicks,
            b.day_of_week,
            b.hour_of_day,
            b.platform.value if b.platform else "",
        )
    )
    return [(i + 1, b) for i, b in enumerate(candidates)]


class OptimalTimeAnalyzer:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock

    def _user_timezone(self, db: Session, user_id: str):
        prefs = crud.scheduling_preferences.get_for_user(db, user_id=user_id)
        return time_distribution.resolve_timezone(prefs.timezone if prefs else "UTC")

    def dispatch(self, job: AnalysisJob) -> None:
        from campaign_service.tasks import analyze_optimal_times

        analyze_optimal_times.delay(job.id)

    def request_analysis(self, db: Session, *, user_id: str) -> Tuple[AnalysisJob, bool]:
        """
        Accept an analysis request.

        Returns:
            The job and whether it was created by this call; an active job
            is returned as is.

        Raises:
            InsufficientDataError: fewer qualifying events than required
            DispatchError: the job could not be queued
        """
        active = crud.analysis_job.get_active(db, user_id=user_id)
        if active:
            logger.info("Analysis already in progress for user %s: %s", user_id, active.id)
            return active, False

        since = utcnow() - timedelta(days=settings.ANALYSIS_LOOKBACK_DAYS)
        found = crud.engagement_event.count_in_window(db, user_id=user_id, since=since)
        if found < settings.ANALYSIS_MIN_EVENTS:
            logger.info("Insufficient data for user %s: only %d clicks", user_id, found)
            raise InsufficientDataError(
                found=found,
                required=settings.ANALYSIS_MIN_EVENTS,
                lookback_days=settings.ANALYSIS_LOOKBACK_DAYS,
            )

        job = crud.analysis_job.create(db, user_id=user_id, events_considered=found)
        try:
            self.dispatch(job)
        except Exception as e:
            logger.error("Failed to queue analysis job %s: %s", job.id, e)
            crud.analysis_job.mark_failed(db, job=job, error=f"Dispatch failed: {e}")
            raise DispatchError("optimal time analysis", str(e)) from e
        return job, True

    def collect(
        self, db: Session, user_id: str, since: datetime, tz, deadline: Optional[float]
    ) -> AnalysisResult:
        buckets: Dict[Tuple[int, int, Optional[Platform]], Bucket] = {}
        result = AnalysisResult()
        for event in crud.engagement_event.iter_in_window(db, user_id=user_id, since=since):
            if deadline is not None and self.clock() >= deadline:
                result.partial = True
                break
            local = event.occurred_at.astimezone(tz)
            key = (time_distribution.sunday_based_weekday(local), local.hour, event.platform)
            bucket = buckets.get(key)
            if bucket is None:
                bucket = buckets[key] = Bucket(*key)
            if event.event_type == EngagementEventType.CLICK:
                bucket.clicks += 1
                result.events_considered += 1
            else:
                bucket.views += 1
        result.buckets = list(buckets.values())
        return result

    def run_analysis(self, db: Session, job_id: str, max_runtime_seconds: Optional[float] = None) -> AnalysisJob:
        """Execute a PENDING job and replace the user's slots with its ranking."""
        job = crud.analysis_job.get(db, job_id)
        if job is None:
            raise NotFoundError("Analysis job", job_id)
        if job.status != AnalysisJobStatus.PENDING:
            logger.warning("Analysis job %s is %s, not running it", job_id, job.status.value)
            return job

        crud.analysis_job.mark_running(db, job=job)
        runtime = settings.ANALYSIS_MAX_RUNTIME_SECONDS if max_runtime_seconds is None else max_runtime_seconds
        deadline = self.clock() + runtime

        try:
            analyzed_to = utcnow()
            analyzed_from = analyzed_to - timedelta(days=settings.ANALYSIS_LOOKBACK_DAYS)
            tz = self._user_timezone(db, job.user_id)
            result = self.collect(db, job.user_id, analyzed_from, tz, deadline)

            ranked = rank_buckets(result.buckets)
            slots = [
                OptimalTimeSlot(
                    user_id=job.user_id,
                    job_id=job.id,
                    day_of_week=b.day_of_week,
                    hour_of_day=b.hour_of_day,
                    platform=b.platform,
                    avg_engagement_rate=b.engagement_rate,
                    total_views=b.effective_views,
                    total_clicks=b.clicks,
                    sample_size=b.clicks,
                    confidence=confidence_for_sample(b.clicks),
                    rank=rank,
                    analyzed_from=analyzed_from,
                    analyzed_to=analyzed_to,
                )
                for rank, b in ranked
            ]

            db.refresh(job)
            if job.status != AnalysisJobStatus.RUNNING:
                logger.warning("Analysis job %s was %s before completion; results discarded", job.id, job.status.value)
                return job

            crud.optimal_time.replace_for_user(db, user_id=job.user_id, slots=slots)
            crud.analysis_job.mark_completed(
                db,
                job=job,
                slots_produced=len(slots),
                events_considered=result.events_considered,
                partial=result.partial,
            )
            logger.info(
                "Analysis job %s produced %d slots from %d clicks%s",
                job.id,
                len(slots),
                result.events_considered,
                " (partial)" if result.partial else "",
            )
            return job
        except Exception as e:
            logger.error("Analysis job %s failed: %s", job_id, e)
            db.rollback()
            crud.analysis_job.mark_failed(db, job=job, error=str(e) or e.__class__.__name__)
            raise

    def get_job(self, db: Session, *, user_id: str, job_id: str) -> AnalysisJob:
        job = crud.analysis_job.get_for_user(db, job_id=job_id, user_id=user_id)
        if not job:
            raise NotFoundError("Analysis job", job_id)
        return job

    def get_optimal_times(
        self,
        db: Session,
        *,
        user_id: str,
        platform: Optional[Platform] = None,
        count: int = 10,
        now: Optional[datetime] = None,
    ) -> OptimalTimesResponse:
        """
        Ranked slots for the user, or the industry defaults when no analysis
        has produced any. Never empty.
        """
        now = now or utcnow()
        tz = self._user_timezone(db, user_id)
        slots = crud.optimal_time.list_ranked(db, user_id=user_id, platform=platform, limit=count)

        if not slots:
            return self._defaults(platform, count, now, tz)

        total_sample = sum(s.sample_size for s in slots)
        oldest = min(s.analyzed_from for s in slots)
        days_analyzed = max(0, math.ceil((now - oldest).total_seconds() / 86400))
        times = [
            OptimalTimeResponse(
                day_of_week=s.day_of_week,
                day_name=DAY_NAMES[s.day_of_week],
                hour_of_day=s.hour_of_day,
                platform=s.platform,
                engagement_rate=s.avg_engagement_rate,
                confidence=s.confidence,
                rank=s.rank,
                reason=f"Your audience shows {s.avg_engagement_rate:g}% engagement at this time",
                next_occurrence=time_distribution.next_occurrence(s.day_of_week, s.hour_of_day, now, tz),
            )
            for s in slots
        ]
        return OptimalTimesResponse(
            optimal_times=times,
            source="ANALYSIS",
            data_quality=DataQuality(
                sample_size=total_sample,
                days_analyzed=days_analyzed,
                confidence=quality_label(total_sample / len(slots)),
            ),
        )

    def _defaults(self, platform: Optional[Platform], count: int, now: datetime, tz) -> OptimalTimesResponse:
        defaults = [d for d in INDUSTRY_DEFAULTS if not platform or d.platform == platform]
        if not defaults:
            defaults = list(INDUSTRY_DEFAULTS)
        defaults = defaults[: max(count, 1)]
        times = [
            OptimalTimeResponse(
                day_of_week=d.day_of_week,
                day_name=DAY_NAMES[d.day_of_week],
                hour_of_day=d.hour_of_day,
                platform=d.platform,
                engagement_rate=None,
                confidence=DEFAULT_CONFIDENCE,
                rank=None,
                reason=d.reason,
                next_occurrence=time_distribution.next_occurrence(d.day_of_week, d.hour_of_day, now, tz),
            )
            for d in defaults
        ]
        return OptimalTimesResponse(
            optimal_times=times,
            source="DEFAULT",
            data_quality=DataQuality(
                sample_size=0,
                days_analyzed=0,
                confidence="LOW",
                message=(
                    f"Need at least {settings.ANALYSIS_MIN_EVENTS} clicks in the last "
                    f"{settings.ANALYSIS_LOOKBACK_DAYS} days for reliable recommendations. "
                    "Using industry defaults."
                ),
            ),
        )

    def expire_stale_jobs(self, db: Session, now: Optional[datetime] = None) -> int:
        """Mark PENDING/RUNNING jobs older than the stale threshold FAILED."""
        now = now or utcnow()
        cutoff = now - timedelta(seconds=settings.ANALYSIS_STALE_AFTER_SECONDS)
        stale = crud.analysis_job.list_stale(db, older_than=cutoff)
        for job in stale:
            crud.analysis_job.mark_failed(db, job=job, error="Analysis timed out")
            logger.warning("Analysis job %s for user %s expired", job.id, job.user_id)
        return len(stale)


optimal_time_analyzer = OptimalTimeAnalyzer()
