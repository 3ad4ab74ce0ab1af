# campaign_service/models/enums.py
"""Closed value sets shared by the models, schemas and services."""

import enum


class Platform(str, enum.Enum):
    TWITTER = "TWITTER"
    INSTAGRAM = "INSTAGRAM"
    FACEBOOK = "FACEBOOK"
    LINKEDIN = "LINKEDIN"
    TIKTOK = "TIKTOK"
    EMAIL = "EMAIL"
    LINK_IN_BIO = "LINK_IN_BIO"


class PostType(str, enum.Enum):
    POST = "POST"
    STORY = "STORY"
    REEL = "REEL"
    THREAD = "THREAD"
    ARTICLE = "ARTICLE"


class CampaignStatus(str, enum.Enum):
    GENERATING = "GENERATING"
    READY = "READY"
    FAILED = "FAILED"


class CampaignGoal(str, enum.Enum):
    LAUNCH = "LAUNCH"
    PROMOTION = "PROMOTION"
    ENGAGEMENT = "ENGAGEMENT"


class CampaignTone(str, enum.Enum):
    PROFESSIONAL = "PROFESSIONAL"
    CASUAL = "CASUAL"
    EXCITED = "EXCITED"
    EDUCATIONAL = "EDUCATIONAL"


class AssetType(str, enum.Enum):
    SOCIAL_POST = "SOCIAL_POST"
    EMAIL = "EMAIL"
    PAGE_VARIANT = "PAGE_VARIANT"


class AssetStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class ScheduleStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class SpreadStrategy(str, enum.Enum):
    EVENLY = "EVENLY"
    OPTIMAL = "OPTIMAL"
    MANUAL = "MANUAL"


class EngagementEventType(str, enum.Enum):
    VIEW = "VIEW"
    CLICK = "CLICK"


class AnalysisJobStatus(str, enum.Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_active(self) -> bool:
        return self in (AnalysisJobStatus.PENDING, AnalysisJobStatus.RUNNING)
