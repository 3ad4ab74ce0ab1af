# campaign_service/services/campaign_state.py
"""
Lifecycle of a campaign record.

    GENERATING ──► READY
         │
         └──────► FAILED

READY and FAILED are terminal. Regenerating content means creating a new
campaign, so nothing moves a campaign back to GENERATING.
"""

import logging
from typing import Dict, FrozenSet

from campaign_service.core.exceptions import InvalidStateTransitionError
from campaign_service.models.enums import CampaignStatus

logger = logging.getLogger(__name__)


class CampaignStateMachine:
    TRANSITIONS: Dict[CampaignStatus, FrozenSet[CampaignStatus]] = {
        CampaignStatus.GENERATING: frozenset({CampaignStatus.READY, CampaignStatus.FAILED}),
        CampaignStatus.READY: frozenset(),
        CampaignStatus.FAILED: frozenset(),
    }

    INITIAL = CampaignStatus.GENERATING

    def can_transition(self, current: CampaignStatus, target: CampaignStatus) -> bool:
        return target in self.TRANSITIONS.get(CampaignStatus(current), frozenset())

    def is_terminal(self, status: CampaignStatus) -> bool:
        return not self.TRANSITIONS.get(CampaignStatus(status))

    def transition(self, campaign, target: CampaignStatus) -> None:
        """Set `campaign.status` to `target` or raise if the move is illegal."""
        current = CampaignStatus(campaign.status)
        if not self.can_transition(current, target):
            raise InvalidStateTransitionError("campaign", current.value, target.value)
        logger.info("Campaign %s: %s -> %s", campaign.id, current.value, target.value)
        campaign.status = target


campaign_state_machine = CampaignStateMachine()
