"""
Campaign Workflow Event Data Models

Event type definitions and payloads published by the workflow service.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..models import CampaignStatus, utc_now


class CampaignWorkflowEventType(str, Enum):
    """
    Events published by campaign_workflow_service.

    Other services should reference these when subscribing.
    """
    STATUS_CHANGED = "campaign.status_changed"
    REQUEST_SUBMITTED = "audience_request.submitted"
    REQUEST_APPROVED = "audience_request.approved"
    REQUEST_REJECTED = "audience_request.rejected"


class CampaignStatusChangedEventData(BaseModel):
    """Payload for campaign.status_changed"""
    campaign_id: str
    client_id: str
    from_status: CampaignStatus
    to_status: CampaignStatus
    actor_id: str
    note: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)


class AudienceRequestEventData(BaseModel):
    """Payload for audience_request.* events"""
    request_id: str
    campaign_id: str
    client_id: str
    actor_id: str
    notes: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)


__all__ = [
    "CampaignWorkflowEventType",
    "CampaignStatusChangedEventData",
    "AudienceRequestEventData",
]
