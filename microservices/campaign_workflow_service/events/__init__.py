"""
Campaign Workflow Service Events

Event models and publisher for the workflow service.
"""

from .models import (
    CampaignWorkflowEventType,
    CampaignStatusChangedEventData,
    AudienceRequestEventData,
)
from .publishers import CampaignWorkflowEventPublisher

__all__ = [
    "CampaignWorkflowEventType",
    "CampaignStatusChangedEventData",
    "AudienceRequestEventData",
    "CampaignWorkflowEventPublisher",
]
