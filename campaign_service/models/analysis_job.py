# campaign_service/models/analysis_job.py
"""
AnalysisJob model - status record for one optimal time analysis run.

Clients poll this record instead of waiting on the request, so the
analysis can later be reported through a webhook without changing the
scheduler contracts.
"""

import uuid
from sqlalchemy import Column, String, Integer, Boolean, Text, Enum

from campaign_service.db.base_class import Base
from campaign_service.db.types import UTCDateTime, utcnow
from campaign_service.models.enums import AnalysisJobStatus


class AnalysisJob(Base):
    __tablename__ = "analysis_jobs"

    id = Column(String, primary_key=True, default=lambda: f"ajob_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, index=True)
    status = Column(
        Enum(AnalysisJobStatus, name="analysis_job_status"),
        nullable=False,
        default=AnalysisJobStatus.PENDING,
    )

    events_considered = Column(Integer, nullable=False, default=0)
    slots_produced = Column(Integer, nullable=False, default=0)
    partial = Column(Boolean, nullable=False, default=False)
    error_message = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    started_at = Column(UTCDateTime, nullable=True)
    completed_at = Column(UTCDateTime, nullable=True)
