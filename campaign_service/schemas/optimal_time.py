# campaign_service/schemas/optimal_time.py

from datetime import datetime
from typing import List, Optional

from campaign_service.models.enums import AnalysisJobStatus, Platform
from campaign_service.schemas.base import CamelModel


class OptimalTimeResponse(CamelModel):
    day_of_week: int  # 0=Sunday .. 6=Saturday
    day_name: str
    hour_of_day: int
    platform: Optional[Platform] = None
    engagement_rate: Optional[float] = None
    confidence: float
    rank: Optional[int] = None
    reason: str
    next_occurrence: datetime


class DataQuality(CamelModel):
    sample_size: int
    days_analyzed: int
    confidence: str  # HIGH | MEDIUM | LOW
    message: Optional[str] = None


class OptimalTimesResponse(CamelModel):
    optimal_times: List[OptimalTimeResponse]
    source: str  # ANALYSIS | DEFAULT
    data_quality: DataQuality


class AnalysisJobResponse(CamelModel):
    job_id: str
    status: AnalysisJobStatus
    message: Optional[str] = None
    estimated_time: Optional[int] = None  # seconds
    replaces_existing: bool = True
    events_considered: int = 0
    slots_produced: int = 0
    partial: bool = False
    error: Optional[str] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
