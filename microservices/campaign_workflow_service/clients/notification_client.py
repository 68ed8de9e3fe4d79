"""
Notification Service Client

Delivers campaign notifications to notification_service, which owns the
e-mail and push transports.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from core.config import WorkflowConfig

logger = logging.getLogger(__name__)


class NotificationClient:
    """Client for notification_service"""

    def __init__(self, config: Optional[WorkflowConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        if config is None:
            config = WorkflowConfig.from_env()

        self.base_url = config.notification_service_url.rstrip("/")
        self.timeout = float(config.notification_timeout)
        self.enabled = config.notification_delivery_enabled
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        )

    async def deliver(
        self,
        recipient_id: str,
        title: str,
        message: str,
        campaign_id: Optional[str] = None,
    ) -> bool:
        """
        Hand a notification to notification_service.

        Args:
            recipient_id: Recipient user ID
            title: Notification title
            message: Notification body
            campaign_id: Related campaign, if any

        Returns:
            True if the service accepted the notification
        """
        if not self.enabled:
            logger.debug(f"Notification delivery disabled, skipping {title!r} for {recipient_id}")
            return False

        payload: Dict[str, Any] = {
            "user_id": recipient_id,
            "channel_type": "in_app",
            "content": {"title": title, "body": message},
        }
        if campaign_id:
            payload["metadata"] = {"campaign_id": campaign_id}

        try:
            async with self._client() as client:
                response = await client.post("/api/v1/notifications", json=payload)
                response.raise_for_status()
                return True

        except httpx.HTTPStatusError as e:
            logger.error(f"Error delivering notification: {e.response.text}")
            raise

        except Exception as e:
            logger.error(f"Error delivering notification: {e}")
            raise

    async def health_check(self) -> bool:
        """Check if notification_service is healthy"""
        try:
            async with self._client() as client:
                response = await client.get("/health")
                return response.status_code == 200
        except httpx.HTTPError:
            return False


__all__ = ["NotificationClient"]
