"""
Notification Emitter

Persists in-app notifications for campaign owners and hands them to the
external notification sink. Emission runs after the workflow change has
committed; failures are logged and never undo that change.
"""

import logging
from typing import List, Optional

from .models import Campaign, CampaignStatus, Notification
from .protocols import NotificationSinkProtocol, WorkflowRepositoryProtocol

logger = logging.getLogger(__name__)


TITLE_STATUS_UPDATED = "Campaign Status Updated"
TITLE_APPROVED = "Campaign Approved"
TITLE_REJECTED = "Campaign Rejected"
TITLE_UPDATE = "Campaign Update"


def _label(status: CampaignStatus) -> str:
    return status.value.replace("_", " ")


def status_changed_message(
    campaign: Campaign, from_status: CampaignStatus, note: Optional[str] = None
) -> str:
    message = (
        f'Your campaign "{campaign.name}" moved from {_label(from_status)} '
        f"to {_label(campaign.status)}."
    )
    if note:
        message += f" Note: {note}"
    return message


def approved_message(campaign: Campaign, notes: Optional[str] = None) -> str:
    message = f'Your campaign "{campaign.name}" has been approved and is now in progress.'
    if notes:
        message += f" Note: {notes}"
    return message


def rejected_message(campaign: Campaign, notes: Optional[str] = None) -> str:
    message = f'Your campaign "{campaign.name}" has been rejected.'
    if notes:
        message += f" Reason: {notes}"
    return message


def update_message(campaign: Campaign, text: str) -> str:
    return f'Update on your campaign "{campaign.name}": {text}'


class NotificationEmitter:
    """Creates notification records and forwards them for delivery"""

    def __init__(
        self,
        repository: WorkflowRepositoryProtocol,
        sink: Optional[NotificationSinkProtocol] = None,
    ):
        self.repository = repository
        self.sink = sink

    async def emit(
        self,
        recipient_id: str,
        title: str,
        message: str,
        campaign_id: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Persist and deliver one notification.

        Returns:
            The stored notification, or None if it could not be stored
        """
        notification = Notification(
            user_id=recipient_id,
            title=title,
            message=message,
            campaign_id=campaign_id,
        )
        try:
            notification = await self.repository.save_notification(notification)
        except Exception as e:
            logger.error(f"Failed to store notification {title!r} for {recipient_id}: {e}")
            return None

        if self.sink:
            try:
                await self.sink.deliver(
                    recipient_id=recipient_id,
                    title=title,
                    message=message,
                    campaign_id=campaign_id,
                )
            except Exception as e:
                logger.error(f"Failed to deliver notification {notification.id}: {e}")

        logger.info(f"Notification {notification.id} ({title}) emitted to {recipient_id}")
        return notification

    # ====================
    # Recipient Operations
    # ====================

    async def list_for(self, recipient_id: str, unread_only: bool = False) -> List[Notification]:
        notifications = await self.repository.list_notifications(recipient_id, unread_only)
        return sorted(notifications, key=lambda n: n.created_at, reverse=True)

    async def get(self, notification_id: str) -> Optional[Notification]:
        return await self.repository.get_notification(notification_id)

    async def mark_read(self, notification_id: str) -> Optional[Notification]:
        return await self.repository.mark_notification_read(notification_id)

    async def mark_all_read(self, recipient_id: str) -> int:
        return await self.repository.mark_all_notifications_read(recipient_id)

    async def delete(self, notification_id: str) -> bool:
        return await self.repository.delete_notification(notification_id)


__all__ = [
    "NotificationEmitter",
    "TITLE_STATUS_UPDATED",
    "TITLE_APPROVED",
    "TITLE_REJECTED",
    "TITLE_UPDATE",
    "status_changed_message",
    "approved_message",
    "rejected_message",
    "update_message",
]
