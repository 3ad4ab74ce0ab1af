# campaign_service/crud/crud_analysis_job.py

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from campaign_service.db.types import utcnow
from campaign_service.models.analysis_job import AnalysisJob
from campaign_service.models.enums import AnalysisJobStatus

ACTIVE_STATUSES = (AnalysisJobStatus.PENDING, AnalysisJobStatus.RUNNING)


class CRUDAnalysisJob:
    def create(self, db: Session, *, user_id: str, events_considered: int) -> AnalysisJob:
        job = AnalysisJob(
            user_id=user_id,
            status=AnalysisJobStatus.PENDING,
            events_considered=events_considered,
        )
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    def get(self, db: Session, job_id: str) -> Optional[AnalysisJob]:
        return db.query(AnalysisJob).filter(AnalysisJob.id == job_id).first()

    def get_for_user(self, db: Session, *, job_id: str, user_id: str) -> Optional[AnalysisJob]:
        return (
            db.query(AnalysisJob)
            .filter(AnalysisJob.id == job_id, AnalysisJob.user_id == user_id)
            .first()
        )

    def get_active(self, db: Session, *, user_id: str) -> Optional[AnalysisJob]:
        return (
            db.query(AnalysisJob)
            .filter(AnalysisJob.user_id == user_id, AnalysisJob.status.in_(ACTIVE_STATUSES))
            .order_by(AnalysisJob.created_at.desc())
            .first()
        )

    def list_stale(self, db: Session, *, older_than: datetime) -> List[AnalysisJob]:
        return (
            db.query(AnalysisJob)
            .filter(AnalysisJob.status.in_(ACTIVE_STATUSES), AnalysisJob.created_at < older_than)
            .all()
        )

    def mark_running(self, db: Session, *, job: AnalysisJob) -> AnalysisJob:
        job.status = AnalysisJobStatus.RUNNING
        job.started_at = utcnow()
        db.commit()
        db.refresh(job)
        return job

    def mark_completed(
        self, db: Session, *, job: AnalysisJob, slots_produced: int, events_considered: int, partial: bool
    ) -> AnalysisJob:
        job.status = AnalysisJobStatus.COMPLETED
        job.slots_produced = slots_produced
        job.events_considered = events_considered
        job.partial = partial
        job.completed_at = utcnow()
        db.commit()
        db.refresh(job)
        return job

    def mark_failed(self, db: Session, *, job: AnalysisJob, error: str) -> AnalysisJob:
        job.status = AnalysisJobStatus.FAILED
        job.error_message = error[:2000]
        job.completed_at = utcnow()
        db.commit()
        db.refresh(job)
        return job


analysis_job = CRUDAnalysisJob()
