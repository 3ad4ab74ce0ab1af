# campaign_service/core/exceptions.py
"""
Custom exception hierarchy for the campaign service.
All exceptions inherit from CampaignServiceError for consistent handling.
"""

from typing import Any, Dict, List, Optional


class CampaignServiceError(Exception):
    """Base exception for all campaign service errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: str = "CAMPAIGN_SERVICE_ERROR",
        details: Optional[dict] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.error_code, "details": self.details}


# ===========================================
# Request Errors
# ===========================================


class ValidationError(CampaignServiceError):
    """One or more request fields violate a business rule."""

    status_code = 422

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(
            message=f"Validation failed: {summary}",
            error_code="VALIDATION_ERROR",
            details={"errors": errors},
        )

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])


class NotFoundError(CampaignServiceError):
    """Requested resource does not exist or belongs to another user."""

    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} not found",
            error_code="NOT_FOUND",
            details={"resource": resource, "id": resource_id},
        )


class InvalidStateTransitionError(CampaignServiceError):
    """A status change that the lifecycle does not allow."""

    status_code = 409

    def __init__(self, entity: str, current: str, target: str):
        super().__init__(
            message=f"Cannot move {entity} from {current} to {target}",
            error_code="INVALID_STATE_TRANSITION",
            details={"entity": entity, "current": current, "target": target},
        )


# ===========================================
# Rate Limiting Exceptions
# ===========================================


class RateLimitError(CampaignServiceError):
    """User exceeded the campaign creation quota."""

    status_code = 429

    def __init__(self, limit: int, window_seconds: int, error_code: str = "RATE_LIMIT_EXCEEDED"):
        self.limit = limit
        self.window_seconds = window_seconds
        hours = window_seconds / 3600
        period = "hour" if hours == 1 else f"{hours:g} hours"
        super().__init__(
            message=f"Rate limit exceeded. Maximum {limit} campaigns per {period}.",
            error_code=error_code,
            details={"limit": limit, "window_seconds": window_seconds},
        )


class DailyPostLimitError(RateLimitError):
    """User reached the number of posts they may schedule today."""

    def __init__(self, limit: int):
        super().__init__(limit=limit, window_seconds=86400, error_code="DAILY_POST_LIMIT")
        self.message = f"Daily post limit reached ({limit}). Upgrade your plan for more scheduled posts."
        self.args = (self.message,)


# ===========================================
# Scheduling Exceptions
# ===========================================


class InsufficientDataError(CampaignServiceError):
    """Not enough engagement events to rank posting times."""

    status_code = 422

    def __init__(self, found: int, required: int, lookback_days: int):
        super().__init__(
            message=(
                f"Insufficient data for analysis: {found} engagement events in the last "
                f"{lookback_days} days, at least {required} required"
            ),
            error_code="INSUFFICIENT_DATA",
            details={"found": found, "required": required, "lookback_days": lookback_days},
        )


class InsufficientOptimalTimesError(CampaignServiceError):
    """OPTIMAL strategy cannot find enough ranked slots for the batch."""

    status_code = 422

    def __init__(self, needed: int, available: int):
        super().__init__(
            message=(
                f"Only {available} optimal time slots available for {needed} posts. "
                "Use the EVENLY strategy or run a new analysis."
            ),
            error_code="INSUFFICIENT_OPTIMAL_TIMES",
            details={"needed": needed, "available": available, "suggested_strategy": "EVENLY"},
        )


# ===========================================
# Generation Exceptions
# ===========================================


class GenerationFailure(CampaignServiceError):
    """A single generation call failed after exhausting its retries."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, error_code="GENERATION_FAILED", details=details)


class GeneratorUnavailableError(GenerationFailure):
    """The content generator is not configured."""

    def __init__(self):
        super().__init__("Content generation is disabled. Configure ANTHROPIC_API_KEY.")
        self.error_code = "GENERATOR_UNAVAILABLE"


class PipelineFailure(CampaignServiceError):
    """Asset generation aborted; the campaign has been marked FAILED."""

    def __init__(self, campaign_id: str, reason: str):
        self.campaign_id = campaign_id
        super().__init__(
            message=f"Asset generation failed for campaign {campaign_id}: {reason}",
            error_code="PIPELINE_FAILED",
            details={"campaign_id": campaign_id},
        )


class DispatchError(CampaignServiceError):
    """Background work could not be handed to the worker queue."""

    status_code = 503

    def __init__(self, job: str, reason: str):
        super().__init__(
            message=f"Failed to queue {job}. Please try again.",
            error_code="DISPATCH_FAILED",
            details={"job": job, "reason": reason},
        )
