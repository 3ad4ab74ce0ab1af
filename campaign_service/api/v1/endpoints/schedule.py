# campaign_service/api/v1/endpoints/schedule.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from campaign_service.api import deps
from campaign_service.core.limiter import limiter
from campaign_service.db.session import get_db
from campaign_service.models.analysis_job import AnalysisJob
from campaign_service.models.enums import Platform, ScheduleStatus
from campaign_service.schemas.optimal_time import AnalysisJobResponse, OptimalTimesResponse
from campaign_service.schemas.schedule import (
    BulkScheduleRequest,
    BulkScheduleResponse,
    Pagination,
    ScheduledPostCreate,
    ScheduledPostListResponse,
    ScheduledPostResponse,
)
from campaign_service.schemas.token import TokenPayload
from campaign_service.services import post_scheduler
from campaign_service.services.bulk_scheduler import bulk_scheduler
from campaign_service.services.optimal_time_analyzer import (
    ESTIMATED_RUNTIME_SECONDS,
    optimal_time_analyzer,
)

router = APIRouter(prefix="/schedule", tags=["Scheduling"])


def _job_response(job: AnalysisJob, message: Optional[str] = None) -> AnalysisJobResponse:
    return AnalysisJobResponse(
        job_id=job.id,
        status=job.status,
        message=message,
        estimated_time=ESTIMATED_RUNTIME_SECONDS if job.status.is_active else None,
        replaces_existing=True,
        events_considered=job.events_considered or 0,
        slots_produced=job.slots_produced or 0,
        partial=bool(job.partial),
        error=job.error_message,
        created_at=job.created_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
    )


@router.post("/posts", response_model=ScheduledPostResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def schedule_post(
    request: Request,
    post_in: ScheduledPostCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Schedule a single post at least five minutes ahead."""
    return post_scheduler.schedule_post(db, user_id=current_user.sub, obj_in=post_in)


@router.get("/posts", response_model=ScheduledPostListResponse)
def list_posts(
    status_filter: Optional[ScheduleStatus] = Query(None, alias="status"),
    platform: Optional[Platform] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    posts, total = post_scheduler.list_posts(
        db, user_id=current_user.sub, status=status_filter, platform=platform, limit=limit, offset=offset
    )
    return ScheduledPostListResponse(
        posts=[ScheduledPostResponse.model_validate(p) for p in posts],
        pagination=Pagination(total=total, limit=limit, offset=offset, has_more=offset + len(posts) < total),
    )


@router.post("/posts/{post_id}/cancel", response_model=ScheduledPostResponse)
def cancel_post(
    post_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return post_scheduler.cancel_post(db, user_id=current_user.sub, post_id=post_id)


@router.post("/bulk", response_model=BulkScheduleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def bulk_schedule(
    request: Request,
    bulk_in: BulkScheduleRequest,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Schedule 2 to 20 posts at once.

    **Strategies**:
    - EVENLY: equal gaps over [startDate, endDate], widened to minHoursBetween
    - OPTIMAL: best-ranked analysed slots from tomorrow on
    - MANUAL: per-post scheduledFor, checked for uniqueness and spacing
    """
    posts, summary = bulk_scheduler.schedule(db, user_id=current_user.sub, request=bulk_in)
    return BulkScheduleResponse(
        scheduled_posts=[ScheduledPostResponse.model_validate(p) for p in posts],
        summary=summary,
    )


@router.post("/analyze", response_model=AnalysisJobResponse, status_code=status.HTTP_202_ACCEPTED)
@limiter.limit("5/minute")
def analyze(
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Start an optimal time analysis. The result replaces every previously
    stored time slot. Poll `GET /schedule/analyze/{jobId}` for completion.
    """
    job, created = optimal_time_analyzer.request_analysis(db, user_id=current_user.sub)
    message = (
        "Analyzing your data... This may take 1-2 minutes."
        if created
        else "An analysis is already in progress."
    )
    return _job_response(job, message)


@router.get("/analyze/{job_id}", response_model=AnalysisJobResponse)
def get_analysis_job(
    job_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    job = optimal_time_analyzer.get_job(db, user_id=current_user.sub, job_id=job_id)
    return _job_response(job)


@router.get("/optimal-times", response_model=OptimalTimesResponse)
def get_optimal_times(
    platform: Optional[Platform] = None,
    count: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return optimal_time_analyzer.get_optimal_times(
        db, user_id=current_user.sub, platform=platform, count=count
    )
