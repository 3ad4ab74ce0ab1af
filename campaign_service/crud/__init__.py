# campaign_service/crud/__init__.py

from .crud_analysis_job import analysis_job
from .crud_campaign import campaign
from .crud_campaign_asset import campaign_asset
from .crud_engagement_event import engagement_event
from .crud_optimal_time import optimal_time
from .crud_scheduled_post import scheduled_post
from .crud_scheduling_preferences import scheduling_preferences
from .crud_source import source
