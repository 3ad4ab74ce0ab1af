# campaign_service/models/__init__.py
# Import all models so SQLAlchemy can resolve relationships and
# Base.metadata knows every table.

from campaign_service.db.base_class import Base
from campaign_service.models.campaign import Campaign
from campaign_service.models.campaign_asset import CampaignAsset
from campaign_service.models.scheduled_post import ScheduledPost
from campaign_service.models.optimal_time_slot import OptimalTimeSlot
from campaign_service.models.engagement_event import EngagementEvent
from campaign_service.models.analysis_job import AnalysisJob
from campaign_service.models.scheduling_preferences import SchedulingPreferences
from campaign_service.models.source import Product, Block
