"""
Campaign Workflow Service Data Models

Tenants, campaigns, audience requests, audit trail records and
notifications, plus the request/response models of the HTTP surface.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:16]}"


# ====================
# Enums
# ====================


class UserRole(str, Enum):
    """Role of a user within the platform"""
    USER = "user"
    ADMIN = "admin"  # Scoped to the user's own company
    SUPER_ADMIN = "super_admin"  # Platform-wide


class CampaignStatus(str, Enum):
    """Campaign lifecycle status"""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    WAITING_ON_CLIENT = "waiting_on_client"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    FAILED = "failed"
    LIVE = "live"
    PAUSED = "paused"


class RequestStatus(str, Enum):
    """Audience request status"""
    PENDING = "pending"
    REVIEWED = "reviewed"
    APPROVED = "approved"
    REJECTED = "rejected"


class DecisionOutcome(str, Enum):
    """Admin decision on an audience request"""
    APPROVE = "approve"
    REJECT = "reject"


class Operation(str, Enum):
    """Record operation checked by the policy engine"""
    READ = "read"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class EntityClass(str, Enum):
    """Protected entity classes"""
    USER = "user"
    CAMPAIGN = "campaign"
    AUDIENCE_REQUEST = "audience_request"
    CAMPAIGN_COMMENT = "campaign_comment"
    WORKFLOW_HISTORY = "workflow_history"
    ACTIVITY_LOG = "activity_log"
    NOTIFICATION = "notification"
    COMPANY_ACCOUNT_ID = "company_account_id"
    AUDIENCE_SEGMENT = "audience_segment"


class Decision(str, Enum):
    """Authorization outcome"""
    ALLOW = "allow"
    DENY = "deny"


class ActivityKind(str, Enum):
    """Kinds of activity log entries"""
    CREATED = "created"
    UPDATED = "updated"
    AUDIENCE_ADDED = "audience_added"
    AUDIENCE_REMOVED = "audience_removed"
    COMMENT_ADDED = "comment_added"
    COMMENT_DELETED = "comment_deleted"
    REQUEST_SUBMITTED = "request_submitted"
    REQUEST_REVIEWED = "request_reviewed"
    REQUEST_DECIDED = "request_decided"
    STATUS_CHANGED = "status_changed"
    ARCHIVED = "archived"
    UNARCHIVED = "unarchived"
    UPDATE_SENT = "update_sent"


# ====================
# Tenant Models
# ====================


class Company(BaseModel):
    """Tenant"""
    id: str = Field(default_factory=lambda: new_id("cmpy"))
    name: str = Field(..., min_length=1, max_length=255)
    account_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


class User(BaseModel):
    """Platform user"""
    id: str = Field(default_factory=lambda: new_id("usr"))
    email: str
    name: str = ""
    company_id: Optional[str] = None
    role: UserRole = UserRole.USER
    created_at: datetime = Field(default_factory=utc_now)


class CompanyAccountId(BaseModel):
    """Advertising platform account identifier owned by a company"""
    id: str = Field(default_factory=lambda: new_id("acct"))
    company_id: str
    platform: str
    account_id: str
    account_name: Optional[str] = None


class AudienceSegment(BaseModel):
    """Purchasable audience from the shared taxonomy"""
    id: str
    name: str
    description: str = ""
    category: str = ""
    data_supplier: Optional[str] = None
    reach: Optional[int] = None
    cpm: Optional[Decimal] = None


class ActorContext(BaseModel):
    """Resolved identity attributes of the calling user"""
    user_id: str
    company_id: Optional[str] = None
    role: UserRole

    model_config = {"frozen": True}

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.SUPER_ADMIN)

    def administers(self, company_id: Optional[str]) -> bool:
        """True if the actor holds admin rights over the given tenant"""
        if self.is_super_admin:
            return True
        return (
            self.role == UserRole.ADMIN
            and self.company_id is not None
            and self.company_id == company_id
        )


# ====================
# Campaign Models
# ====================


class CampaignPlatforms(BaseModel):
    """Selected delivery platforms"""
    social: List[str] = Field(default_factory=list)
    programmatic: List[str] = Field(default_factory=list)


def _dedupe(values: List[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


class Campaign(BaseModel):
    """Campaign owned by a client user"""
    id: str = Field(default_factory=lambda: new_id("cmp"))
    client_id: str
    name: str = Field(..., min_length=1, max_length=255)
    status: CampaignStatus = CampaignStatus.DRAFT
    budget: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    platforms: CampaignPlatforms = Field(default_factory=CampaignPlatforms)
    audiences: List[str] = Field(default_factory=list, description="Ordered segment ids")
    archived: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("audiences")
    @classmethod
    def unique_audiences(cls, v):
        return _dedupe(v)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class AudienceRequest(BaseModel):
    """Audience/budget request raised when a campaign is submitted"""
    id: str = Field(default_factory=lambda: new_id("req"))
    campaign_id: str
    client_id: str
    audiences: List[str] = Field(default_factory=list)
    platforms: CampaignPlatforms = Field(default_factory=CampaignPlatforms)
    budget: Decimal = Decimal("0")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: RequestStatus = RequestStatus.PENDING
    notes: Optional[str] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_REQUEST_STATUSES

    @classmethod
    def snapshot_of(cls, campaign: Campaign) -> "AudienceRequest":
        """Capture the campaign's current selection"""
        return cls(
            campaign_id=campaign.id,
            client_id=campaign.client_id,
            audiences=list(campaign.audiences),
            platforms=campaign.platforms.model_copy(deep=True),
            budget=campaign.budget,
            start_date=campaign.start_date,
            end_date=campaign.end_date,
        )


OPEN_REQUEST_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.REVIEWED})
DECIDED_REQUEST_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})


# ====================
# Audit Trail Models
# ====================


class WorkflowHistoryEntry(BaseModel):
    """Immutable record of one campaign status transition"""
    id: str = Field(default_factory=lambda: new_id("wfh"))
    campaign_id: str
    from_status: CampaignStatus
    to_status: CampaignStatus
    actor_id: str
    note: Optional[str] = None
    sequence: int = 0
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}


class ActivityLogEntry(BaseModel):
    """Immutable record of a notable campaign action"""
    id: str = Field(default_factory=lambda: new_id("act"))
    campaign_id: str
    actor_id: str
    kind: ActivityKind
    payload: Dict[str, Any] = Field(default_factory=dict)
    sequence: int = 0
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}


class CampaignComment(BaseModel):
    """Comment on a campaign, threaded one level deep"""
    id: str = Field(default_factory=lambda: new_id("cmt"))
    campaign_id: str
    user_id: str
    content: str = Field(..., min_length=1, max_length=5000)
    parent_comment_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


class Notification(BaseModel):
    """In-app notification for a single recipient"""
    id: str = Field(default_factory=lambda: new_id("ntf"))
    user_id: str
    title: str
    message: str
    campaign_id: Optional[str] = None
    read: bool = False
    created_at: datetime = Field(default_factory=utc_now)


# ====================
# Request Models
# ====================


class CampaignCreateRequest(BaseModel):
    """Request to create a draft campaign"""
    name: str = Field(..., min_length=1, max_length=255)
    budget: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    platforms: CampaignPlatforms = Field(default_factory=CampaignPlatforms)
    audiences: List[str] = Field(default_factory=list)


class CampaignUpdateRequest(BaseModel):
    """Partial update of a draft campaign"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    budget: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    platforms: Optional[CampaignPlatforms] = None
    audiences: Optional[List[str]] = None


class TransitionRequest(BaseModel):
    """Manual status transition by an admin"""
    to_status: CampaignStatus
    notes: Optional[str] = Field(None, max_length=2000)


class DecisionRequest(BaseModel):
    """Admin decision on an audience request"""
    outcome: DecisionOutcome
    notes: Optional[str] = Field(None, max_length=2000)


class CommentCreateRequest(BaseModel):
    """New comment or reply"""
    content: str = Field(..., min_length=1, max_length=5000)
    parent_comment_id: Optional[str] = None


class CampaignUpdateMessageRequest(BaseModel):
    """Admin update sent to the campaign owner without a status change"""
    message: str = Field(..., min_length=1, max_length=2000)


class AuthorizeRequest(BaseModel):
    """Authorization check for a record or record class"""
    entity_class: EntityClass
    operation: Operation
    entity_ref: Optional[str] = None


class UserRegisterRequest(BaseModel):
    """Profile creation: self-registration or an admin invitation"""
    user_id: Optional[str] = None
    email: Optional[str] = None
    name: str = ""
    company_id: Optional[str] = None


class RoleChangeRequest(BaseModel):
    """Role change for a user"""
    role: UserRole


class CompanyCreateRequest(BaseModel):
    """New tenant"""
    name: str = Field(..., min_length=1, max_length=255)
    account_id: Optional[str] = None


# ====================
# Response Models
# ====================


class AuthorizationResult(BaseModel):
    """Outcome of a policy evaluation"""
    decision: Decision
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.decision == Decision.ALLOW


class DecisionResult(BaseModel):
    """Campaign and request state after a decision"""
    campaign: Campaign
    request: AudienceRequest
    already_decided: bool = False


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


class ReadinessResponse(BaseModel):
    """Readiness check response"""
    ready: bool
    checks: Dict[str, bool] = Field(default_factory=dict)
    details: Dict[str, str] = Field(default_factory=dict)


class LivenessResponse(BaseModel):
    """Liveness check response"""
    alive: bool
    uptime_seconds: float


__all__ = [
    "utc_now",
    "new_id",
    "UserRole",
    "CampaignStatus",
    "RequestStatus",
    "DecisionOutcome",
    "Operation",
    "EntityClass",
    "Decision",
    "ActivityKind",
    "Company",
    "User",
    "CompanyAccountId",
    "AudienceSegment",
    "ActorContext",
    "CampaignPlatforms",
    "Campaign",
    "AudienceRequest",
    "OPEN_REQUEST_STATUSES",
    "DECIDED_REQUEST_STATUSES",
    "WorkflowHistoryEntry",
    "ActivityLogEntry",
    "CampaignComment",
    "Notification",
    "CampaignCreateRequest",
    "CampaignUpdateRequest",
    "TransitionRequest",
    "DecisionRequest",
    "CommentCreateRequest",
    "CampaignUpdateMessageRequest",
    "AuthorizeRequest",
    "UserRegisterRequest",
    "RoleChangeRequest",
    "CompanyCreateRequest",
    "AuthorizationResult",
    "DecisionResult",
    "HealthResponse",
    "ReadinessResponse",
    "LivenessResponse",
]
