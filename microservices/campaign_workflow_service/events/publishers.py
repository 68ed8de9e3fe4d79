"""
Campaign Workflow Event Publishers

Publishes workflow events to NATS. Publishing is best-effort: failures are
logged and never reach the caller.
"""

import logging
from typing import Optional

from core.nats_client import Event

from ..models import AudienceRequest, Campaign, CampaignStatus
from ..protocols import EventBusProtocol
from .models import (
    AudienceRequestEventData,
    CampaignStatusChangedEventData,
    CampaignWorkflowEventType,
)

logger = logging.getLogger(__name__)


class CampaignWorkflowEventPublisher:
    """Publisher for campaign workflow events"""

    def __init__(self, event_bus: Optional[EventBusProtocol] = None):
        self.event_bus = event_bus
        self.source = "campaign_workflow_service"

    async def publish(self, event_type: CampaignWorkflowEventType, data: dict) -> bool:
        """
        Publish an event.

        Returns:
            True if published successfully, False otherwise
        """
        if not self.event_bus:
            logger.debug(f"Event bus not configured, skipping publish: {event_type.value}")
            return False

        try:
            event = Event(event_type=event_type, source=self.source, data=data)
            published = await self.event_bus.publish_event(event)
            logger.debug(f"Published event: {event_type.value}")
            return bool(published)

        except Exception as e:
            logger.error(f"Failed to publish event {event_type.value}: {e}")
            return False

    async def publish_status_changed(
        self,
        campaign: Campaign,
        from_status: CampaignStatus,
        actor_id: str,
        note: Optional[str] = None,
    ) -> bool:
        data = CampaignStatusChangedEventData(
            campaign_id=campaign.id,
            client_id=campaign.client_id,
            from_status=from_status,
            to_status=campaign.status,
            actor_id=actor_id,
            note=note,
        )
        return await self.publish(
            CampaignWorkflowEventType.STATUS_CHANGED, data.model_dump(mode="json")
        )

    async def publish_request_event(
        self,
        event_type: CampaignWorkflowEventType,
        request: AudienceRequest,
        actor_id: str,
    ) -> bool:
        data = AudienceRequestEventData(
            request_id=request.id,
            campaign_id=request.campaign_id,
            client_id=request.client_id,
            actor_id=actor_id,
            notes=request.notes,
        )
        return await self.publish(event_type, data.model_dump(mode="json"))


__all__ = ["CampaignWorkflowEventPublisher"]
