"""
Campaign Workflow Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from datetime import datetime
from typing import Any, AsyncContextManager, Iterable, List, Optional, Protocol

from .models import (
    ActivityLogEntry,
    AudienceRequest,
    AudienceSegment,
    Campaign,
    CampaignComment,
    CampaignStatus,
    Company,
    CompanyAccountId,
    EntityClass,
    Notification,
    RequestStatus,
    User,
    UserRole,
    WorkflowHistoryEntry,
)


# ====================
# Repository Protocol
# ====================


class WorkflowRepositoryProtocol(Protocol):
    """
    Protocol for the workflow data repository.

    User lookups through this protocol are privileged: they bypass record
    authorization and exist for identity resolution only.
    """

    async def initialize(self) -> None:
        """Initialize repository connection"""
        ...

    async def close(self) -> None:
        """Close repository connection"""
        ...

    async def health_check(self) -> bool:
        """Check repository health"""
        ...

    def transaction(self) -> AsyncContextManager[Any]:
        """Unit of work; writes inside commit or roll back together"""
        ...

    # Companies and users
    async def save_company(self, company: Company) -> Company:
        ...

    async def get_company(self, company_id: str) -> Optional[Company]:
        ...

    async def get_user(self, user_id: str) -> Optional[User]:
        """Privileged user lookup"""
        ...

    async def save_user(self, user: User) -> User:
        ...

    async def update_user_role(self, user_id: str, role: UserRole) -> Optional[User]:
        ...

    async def delete_user(self, user_id: str) -> bool:
        ...

    async def count_company_users(self, company_id: str) -> int:
        ...

    # Reference data
    async def get_segment(self, segment_id: str) -> Optional[AudienceSegment]:
        ...

    async def get_account_id(self, account_ref: str) -> Optional[CompanyAccountId]:
        ...

    # Campaigns
    async def save_campaign(self, campaign: Campaign) -> Campaign:
        ...

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        ...

    async def update_campaign_fields(self, campaign: Campaign) -> Optional[Campaign]:
        """Persist editable fields of a draft campaign"""
        ...

    async def update_campaign_status_if(
        self,
        campaign_id: str,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
    ) -> Optional[Campaign]:
        """Set status only if it still equals expected_status; None otherwise"""
        ...

    async def set_campaign_archived(self, campaign_id: str, archived: bool) -> Optional[Campaign]:
        ...

    async def delete_campaign(self, campaign_id: str) -> bool:
        ...

    async def list_campaigns(
        self,
        company_id: Optional[str] = None,
        include_archived: bool = False,
        status: Optional[CampaignStatus] = None,
    ) -> List[Campaign]:
        """List campaigns whose owner belongs to company_id (all if None)"""
        ...

    # Audience requests
    async def save_request(self, request: AudienceRequest) -> AudienceRequest:
        """Insert a request; raises ConflictingRequestError on a second open request"""
        ...

    async def get_request(self, request_id: str) -> Optional[AudienceRequest]:
        ...

    async def get_open_request(self, campaign_id: str) -> Optional[AudienceRequest]:
        ...

    async def update_request_status_if(
        self,
        request_id: str,
        expected_statuses: Iterable[RequestStatus],
        new_status: RequestStatus,
        notes: Optional[str] = None,
        decided_by: Optional[str] = None,
        decided_at: Optional[datetime] = None,
    ) -> Optional[AudienceRequest]:
        """Set status only if the current status is expected; None otherwise"""
        ...

    async def delete_requests_for_campaign(self, campaign_id: str) -> int:
        ...

    # Audit trail
    async def append_workflow_history(self, entry: WorkflowHistoryEntry) -> WorkflowHistoryEntry:
        """Append an entry and return it with its assigned sequence"""
        ...

    async def list_workflow_history(
        self, campaign_id: str, after_sequence: int = 0
    ) -> List[WorkflowHistoryEntry]:
        ...

    async def append_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        ...

    async def list_activity(self, campaign_id: str) -> List[ActivityLogEntry]:
        ...

    # Comments
    async def save_comment(self, comment: CampaignComment) -> CampaignComment:
        ...

    async def get_comment(self, comment_id: str) -> Optional[CampaignComment]:
        ...

    async def delete_comment(self, comment_id: str) -> bool:
        ...

    async def list_comments(self, campaign_id: str) -> List[CampaignComment]:
        ...

    async def delete_comments_for_campaign(self, campaign_id: str) -> int:
        ...

    # Notifications
    async def save_notification(self, notification: Notification) -> Notification:
        ...

    async def get_notification(self, notification_id: str) -> Optional[Notification]:
        ...

    async def list_notifications(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        ...

    async def mark_notification_read(self, notification_id: str) -> Optional[Notification]:
        ...

    async def mark_all_notifications_read(self, user_id: str) -> int:
        ...

    async def delete_notification(self, notification_id: str) -> bool:
        ...


# ====================
# Event Bus Protocol
# ====================


class EventBusProtocol(Protocol):
    """Protocol for event bus operations"""

    async def publish_event(self, event: Any) -> bool:
        """Publish an event to the event bus"""
        ...

    async def close(self) -> None:
        """Close event bus connection"""
        ...


# ====================
# Notification Sink Protocol
# ====================


class NotificationSinkProtocol(Protocol):
    """Protocol for the external notification transport"""

    async def deliver(
        self,
        recipient_id: str,
        title: str,
        message: str,
        campaign_id: Optional[str] = None,
    ) -> bool:
        """Deliver a notification to its recipient"""
        ...


# ====================
# Exceptions
# ====================


class CampaignWorkflowError(Exception):
    """Base exception for campaign workflow errors"""
    pass


class AccessDeniedError(CampaignWorkflowError):
    """Raised when the policy engine denies an operation"""

    def __init__(
        self,
        message: str,
        entity_class: Optional[EntityClass] = None,
        entity_ref: Optional[str] = None,
    ):
        super().__init__(message)
        self.entity_class = entity_class
        self.entity_ref = entity_ref


class ForbiddenError(AccessDeniedError):
    """Raised when the actor can see a record but is not eligible to act on it"""
    pass


class InvalidTransitionError(CampaignWorkflowError):
    """Raised when a status transition is not in the transition table"""

    def __init__(
        self,
        message: str,
        from_status: Optional[CampaignStatus] = None,
        to_status: Optional[CampaignStatus] = None,
    ):
        super().__init__(message)
        self.from_status = from_status
        self.to_status = to_status


class InvalidStateError(CampaignWorkflowError):
    """Raised when a record is in the wrong state for an operation"""

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(message)
        self.current_status = current_status


class ConflictingRequestError(CampaignWorkflowError):
    """Raised when a campaign already has an open audience request"""

    def __init__(self, message: str, campaign_id: Optional[str] = None):
        super().__init__(message)
        self.campaign_id = campaign_id


class NotFoundError(CampaignWorkflowError):
    """Raised when a record does not exist or is not visible"""

    def __init__(self, message: str, entity_class: Optional[EntityClass] = None):
        super().__init__(message)
        self.entity_class = entity_class


class ConcurrencyConflictError(CampaignWorkflowError):
    """Raised when a conditional write loses to a concurrent update"""
    pass


__all__ = [
    "WorkflowRepositoryProtocol",
    "EventBusProtocol",
    "NotificationSinkProtocol",
    "CampaignWorkflowError",
    "AccessDeniedError",
    "ForbiddenError",
    "InvalidTransitionError",
    "InvalidStateError",
    "ConflictingRequestError",
    "NotFoundError",
    "ConcurrencyConflictError",
]
