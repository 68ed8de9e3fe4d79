"""
Campaign Workflow Service - Business Logic Layer

Entry point for every workflow operation. Each call resolves the actor
through the tenant directory, checks the policy engine, and then hands
off to the state machine, request workflow, audit trail and notification
emitter.
"""

import logging
from typing import Dict, Iterable, List, Optional

from .audit_trail import AuditTrail
from .authorization import REASON_CROSS_TENANT, PolicyEngine, RecordScope
from .events.publishers import CampaignWorkflowEventPublisher
from .models import (
    ActivityKind,
    ActivityLogEntry,
    ActorContext,
    AudienceRequest,
    AuthorizationResult,
    Campaign,
    CampaignComment,
    CampaignCreateRequest,
    CampaignStatus,
    CampaignUpdateRequest,
    Company,
    Decision,
    DecisionOutcome,
    DecisionResult,
    EntityClass,
    Notification,
    Operation,
    User,
    UserRole,
    WorkflowHistoryEntry,
    utc_now,
)
from .notification_emitter import (
    NotificationEmitter,
    TITLE_STATUS_UPDATED,
    TITLE_UPDATE,
    status_changed_message,
    update_message,
)
from .protocols import (
    EventBusProtocol,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    NotificationSinkProtocol,
    WorkflowRepositoryProtocol,
)
from .record_access import RecordAccess
from .request_workflow import RequestApprovalWorkflow
from .state_machine import CampaignStateMachine, is_terminal
from .tenant_directory import TenantDirectory

logger = logging.getLogger(__name__)

REASON_NOT_FOUND = "not_found"


class CampaignWorkflowService:
    """
    Campaign workflow business logic service.

    Handles:
    - Record authorization decisions
    - Campaign drafting, submission and lifecycle transitions
    - Audience request review and decisions
    - Comments, activity log and workflow history
    - Recipient notification management
    - Tenant membership administration
    """

    def __init__(
        self,
        repository: WorkflowRepositoryProtocol,
        event_bus: Optional[EventBusProtocol] = None,
        notification_sink: Optional[NotificationSinkProtocol] = None,
        super_admin_domains: Iterable[str] = ("boostdata.io",),
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.directory = TenantDirectory(repository, super_admin_domains)
        self.policy = PolicyEngine()
        self.access = RecordAccess(repository, self.directory, self.policy)
        self.audit_trail = AuditTrail(repository)
        self.state_machine = CampaignStateMachine(repository, self.audit_trail)
        self.emitter = NotificationEmitter(repository, notification_sink)
        self.publisher = CampaignWorkflowEventPublisher(event_bus)
        self.requests = RequestApprovalWorkflow(
            repository=repository,
            directory=self.directory,
            access=self.access,
            state_machine=self.state_machine,
            audit_trail=self.audit_trail,
            emitter=self.emitter,
            publisher=self.publisher,
        )

    # ====================
    # Authorization
    # ====================

    async def authorize(
        self,
        actor_id: str,
        entity_class: EntityClass,
        entity_ref: Optional[str],
        operation: Operation,
    ) -> AuthorizationResult:
        """
        Decide whether an actor may perform an operation on a record.

        entity_ref names the record; for workflow history and activity log
        it names the campaign the entries belong to. Without entity_ref the
        check applies to the entity class.
        """
        actor = await self.directory.resolve_actor(actor_id)
        if entity_ref is None:
            return self.policy.evaluate(actor, entity_class, operation)

        scope = await self._scope_for(entity_class, entity_ref)
        if scope is None:
            logger.warning(f"Access denied: {entity_class.value} {entity_ref} does not exist")
            return AuthorizationResult(decision=Decision.DENY, reason=REASON_NOT_FOUND)

        result = self.policy.evaluate(actor, entity_class, operation, scope)
        # Another tenant's record must read exactly like a missing one
        if result.reason == REASON_CROSS_TENANT:
            return AuthorizationResult(decision=Decision.DENY, reason=REASON_NOT_FOUND)
        return result

    async def _scope_for(self, entity_class: EntityClass, entity_ref: str) -> Optional[RecordScope]:
        if entity_class == EntityClass.USER:
            user = await self.directory.get_user(entity_ref)
            return RecordScope(user.company_id, user.id) if user else None

        if entity_class in (EntityClass.CAMPAIGN, EntityClass.WORKFLOW_HISTORY, EntityClass.ACTIVITY_LOG):
            campaign = await self.repository.get_campaign(entity_ref)
            return await self.access.campaign_scope(campaign) if campaign else None

        if entity_class == EntityClass.AUDIENCE_REQUEST:
            request = await self.repository.get_request(entity_ref)
            return await self.access.request_scope(request) if request else None

        if entity_class == EntityClass.CAMPAIGN_COMMENT:
            comment = await self.repository.get_comment(entity_ref)
            if comment is None:
                return None
            campaign = await self.repository.get_campaign(comment.campaign_id)
            if campaign is None:
                return None
            campaign_scope = await self.access.campaign_scope(campaign)
            return RecordScope(campaign_scope.tenant_id, comment.user_id)

        if entity_class == EntityClass.NOTIFICATION:
            notification = await self.repository.get_notification(entity_ref)
            if notification is None:
                return None
            return RecordScope(
                await self.directory.company_of(notification.user_id), notification.user_id
            )

        if entity_class == EntityClass.COMPANY_ACCOUNT_ID:
            account = await self.repository.get_account_id(entity_ref)
            return RecordScope(account.company_id) if account else None

        segment = await self.repository.get_segment(entity_ref)
        return RecordScope(None) if segment else None

    # ====================
    # Campaign Drafting
    # ====================

    async def create_campaign(self, actor_id: str, data: CampaignCreateRequest) -> Campaign:
        """Create a draft campaign owned by the actor"""
        actor = await self.directory.resolve_actor(actor_id)
        self.access.require(actor, EntityClass.CAMPAIGN, Operation.INSERT)
        audiences = await self._validate_segments(data.audiences)

        campaign = Campaign(
            client_id=actor.user_id,
            name=data.name,
            budget=data.budget,
            start_date=data.start_date,
            end_date=data.end_date,
            platforms=data.platforms,
            audiences=audiences,
        )
        async with self.repository.transaction():
            campaign = await self.repository.save_campaign(campaign)
            await self.audit_trail.record_activity(
                campaign.id, actor.user_id, ActivityKind.CREATED, {"name": campaign.name}
            )

        logger.info(f"Campaign {campaign.id} created by {actor_id}")
        return campaign

    async def update_campaign(
        self, campaign_id: str, actor_id: str, data: CampaignUpdateRequest
    ) -> Campaign:
        """
        Edit a draft campaign.

        Audience changes are logged per segment; other field changes are
        logged with their old and new values.
        """
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id, Operation.UPDATE)
        if campaign.status != CampaignStatus.DRAFT:
            raise InvalidStateError(
                f"Only draft campaigns can be edited; campaign is {campaign.status.value}",
                current_status=campaign.status.value,
            )

        changes = data.model_dump(exclude_unset=True)
        # Only the dates can be cleared
        changes = {
            k: v for k, v in changes.items()
            if v is not None or k in ("start_date", "end_date")
        }
        if "audiences" in changes:
            changes["audiences"] = await self._validate_segments(changes["audiences"] or [])

        updated = Campaign.model_validate({**campaign.model_dump(), **changes, "updated_at": utc_now()})

        old_values: Dict[str, str] = {}
        new_values: Dict[str, str] = {}
        for field_name in changes:
            if field_name == "audiences":
                continue
            before = getattr(campaign, field_name)
            after = getattr(updated, field_name)
            if before != after:
                old_values[field_name] = _jsonable(before)
                new_values[field_name] = _jsonable(after)

        added = [a for a in updated.audiences if a not in campaign.audiences]
        removed = [a for a in campaign.audiences if a not in updated.audiences]

        async with self.repository.transaction():
            saved = await self.repository.update_campaign_fields(updated)
            if saved is None:
                current = await self.repository.get_campaign(campaign.id)
                if current is None:
                    raise NotFoundError(f"Campaign not found: {campaign_id}", EntityClass.CAMPAIGN)
                # Left draft between the read and the write, e.g. a concurrent submission
                raise InvalidStateError(
                    f"Only draft campaigns can be edited; campaign is {current.status.value}",
                    current_status=current.status.value,
                )
            if old_values:
                await self.audit_trail.record_activity(
                    campaign.id, actor.user_id, ActivityKind.UPDATED,
                    {"old_values": old_values, "new_values": new_values},
                )
            for segment_id in added:
                await self.audit_trail.record_activity(
                    campaign.id, actor.user_id, ActivityKind.AUDIENCE_ADDED, {"segment_id": segment_id}
                )
            for segment_id in removed:
                await self.audit_trail.record_activity(
                    campaign.id, actor.user_id, ActivityKind.AUDIENCE_REMOVED, {"segment_id": segment_id}
                )

        return saved

    async def get_campaign(self, campaign_id: str, actor_id: str) -> Campaign:
        actor = await self.directory.resolve_actor(actor_id)
        return await self.access.load_campaign(actor, campaign_id)

    async def list_campaigns(
        self,
        actor_id: str,
        include_archived: bool = False,
        status: Optional[CampaignStatus] = None,
    ) -> List[Campaign]:
        """Campaigns visible to the actor"""
        actor = await self.directory.resolve_actor(actor_id)
        if actor.is_super_admin:
            return await self.repository.list_campaigns(None, include_archived, status)
        if actor.company_id is None:
            return []
        return await self.repository.list_campaigns(actor.company_id, include_archived, status)

    async def _validate_segments(self, segment_ids: List[str]) -> List[str]:
        ordered: List[str] = []
        for segment_id in segment_ids:
            if segment_id in ordered:
                continue
            if await self.repository.get_segment(segment_id) is None:
                raise NotFoundError(f"Audience segment not found: {segment_id}", EntityClass.AUDIENCE_SEGMENT)
            ordered.append(segment_id)
        return ordered

    # ====================
    # Requests
    # ====================

    async def submit_campaign(self, campaign_id: str, actor_id: str) -> AudienceRequest:
        return await self.requests.submit(campaign_id, actor_id)

    async def mark_request_under_review(self, request_id: str, actor_id: str) -> AudienceRequest:
        return await self.requests.mark_under_review(request_id, actor_id)

    async def decide_request(
        self,
        request_id: str,
        actor_id: str,
        outcome: DecisionOutcome,
        notes: Optional[str] = None,
    ) -> DecisionResult:
        return await self.requests.decide(request_id, actor_id, outcome, notes)

    async def get_request(self, request_id: str, actor_id: str) -> AudienceRequest:
        actor = await self.directory.resolve_actor(actor_id)
        return await self.access.load_request(actor, request_id)

    # ====================
    # Lifecycle
    # ====================

    async def transition_campaign(
        self,
        campaign_id: str,
        actor_id: str,
        to_status: CampaignStatus,
        notes: Optional[str] = None,
    ) -> Campaign:
        """
        Manual status change by an admin of the owning company.

        Moving to approved or failed closes the campaign's open audience
        request in the same unit of work.
        """
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id)
        scope = await self.access.campaign_scope(campaign)
        self.access.require_admin(actor, EntityClass.CAMPAIGN, scope, campaign_id)
        self.state_machine.validate_transition(campaign, to_status, actor, notes)

        from_status = campaign.status
        async with self.repository.transaction():
            if to_status in (CampaignStatus.APPROVED, CampaignStatus.FAILED):
                await self.requests.resolve_for_transition(campaign.id, actor, to_status, notes)
            updated = await self.state_machine.apply(campaign, to_status, actor, note=notes)

        await self.emitter.emit(
            updated.client_id,
            TITLE_STATUS_UPDATED,
            status_changed_message(updated, from_status, notes),
            updated.id,
        )
        await self.publisher.publish_status_changed(updated, from_status, actor.user_id, notes)
        return updated

    async def archive_campaign(self, campaign_id: str, actor_id: str) -> Campaign:
        return await self._set_archived(campaign_id, actor_id, True)

    async def unarchive_campaign(self, campaign_id: str, actor_id: str) -> Campaign:
        return await self._set_archived(campaign_id, actor_id, False)

    async def _set_archived(self, campaign_id: str, actor_id: str, archived: bool) -> Campaign:
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id, Operation.UPDATE)

        async with self.repository.transaction():
            updated = await self.repository.set_campaign_archived(campaign.id, archived)
            if updated is None:
                raise NotFoundError(f"Campaign not found: {campaign_id}", EntityClass.CAMPAIGN)
            await self.audit_trail.record_activity(
                campaign.id,
                actor.user_id,
                ActivityKind.ARCHIVED if archived else ActivityKind.UNARCHIVED,
            )

        logger.info(f"Campaign {campaign_id} {'archived' if archived else 'unarchived'} by {actor_id}")
        return updated

    async def delete_campaign(self, campaign_id: str, actor_id: str) -> bool:
        """
        Delete a draft or finished campaign.

        Requests and comments go with it; history and activity entries stay.
        """
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id, Operation.DELETE)
        if campaign.status != CampaignStatus.DRAFT and not is_terminal(campaign.status):
            raise InvalidStateError(
                f"Campaign {campaign_id} cannot be deleted while {campaign.status.value}",
                current_status=campaign.status.value,
            )

        async with self.repository.transaction():
            await self.repository.delete_requests_for_campaign(campaign.id)
            await self.repository.delete_comments_for_campaign(campaign.id)
            deleted = await self.repository.delete_campaign(campaign.id)

        logger.info(f"Campaign {campaign_id} deleted by {actor_id}")
        return deleted

    # ====================
    # Audit Trail
    # ====================

    async def list_workflow_history(
        self, campaign_id: str, actor_id: str, after_sequence: int = 0
    ) -> List[WorkflowHistoryEntry]:
        """Status history of a campaign, resumable after a sequence number"""
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id)
        scope = await self.access.campaign_scope(campaign)
        self.access.require(actor, EntityClass.WORKFLOW_HISTORY, Operation.READ, scope, campaign_id)
        return await self.audit_trail.list_workflow_history(campaign.id, after_sequence)

    async def list_activity(self, campaign_id: str, actor_id: str) -> List[ActivityLogEntry]:
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id)
        scope = await self.access.campaign_scope(campaign)
        self.access.require(actor, EntityClass.ACTIVITY_LOG, Operation.READ, scope, campaign_id)
        return await self.audit_trail.list_activity(campaign.id)

    # ====================
    # Comments
    # ====================

    async def add_comment(
        self,
        campaign_id: str,
        actor_id: str,
        content: str,
        parent_comment_id: Optional[str] = None,
    ) -> CampaignComment:
        """Comment on a campaign or reply to a top-level comment"""
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id)
        campaign_scope = await self.access.campaign_scope(campaign)
        self.access.require(
            actor,
            EntityClass.CAMPAIGN_COMMENT,
            Operation.INSERT,
            RecordScope(campaign_scope.tenant_id, actor.user_id),
        )

        if parent_comment_id:
            parent = await self.repository.get_comment(parent_comment_id)
            if parent is None or parent.campaign_id != campaign.id:
                raise NotFoundError(f"Comment not found: {parent_comment_id}", EntityClass.CAMPAIGN_COMMENT)
            if parent.parent_comment_id is not None:
                raise InvalidStateError("Replies can only be made to top-level comments")

        comment = CampaignComment(
            campaign_id=campaign.id,
            user_id=actor.user_id,
            content=content,
            parent_comment_id=parent_comment_id,
        )
        async with self.repository.transaction():
            comment = await self.repository.save_comment(comment)
            await self.audit_trail.record_activity(
                campaign.id,
                actor.user_id,
                ActivityKind.COMMENT_ADDED,
                {"comment_id": comment.id, "parent_comment_id": parent_comment_id},
            )
        return comment

    async def delete_comment(self, comment_id: str, actor_id: str) -> bool:
        """Delete a comment; author or company admin"""
        actor = await self.directory.resolve_actor(actor_id)
        comment = await self.repository.get_comment(comment_id)
        if comment is None:
            raise NotFoundError(f"Comment not found: {comment_id}", EntityClass.CAMPAIGN_COMMENT)
        scope = await self._scope_for(EntityClass.CAMPAIGN_COMMENT, comment_id)
        if scope is None:
            raise NotFoundError(f"Comment not found: {comment_id}", EntityClass.CAMPAIGN_COMMENT)
        self.access.require(actor, EntityClass.CAMPAIGN_COMMENT, Operation.DELETE, scope, comment_id)

        async with self.repository.transaction():
            deleted = await self.repository.delete_comment(comment_id)
            await self.audit_trail.record_activity(
                comment.campaign_id, actor.user_id, ActivityKind.COMMENT_DELETED, {"comment_id": comment_id}
            )
        return deleted

    async def list_comments(self, campaign_id: str, actor_id: str) -> List[CampaignComment]:
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id)
        scope = await self.access.campaign_scope(campaign)
        self.access.require(actor, EntityClass.CAMPAIGN_COMMENT, Operation.READ, scope, campaign_id)
        comments = await self.repository.list_comments(campaign.id)
        return sorted(comments, key=lambda c: c.created_at)

    # ====================
    # Notifications
    # ====================

    async def send_campaign_update(self, campaign_id: str, actor_id: str, message: str) -> Optional[Notification]:
        """
        Admin message to the campaign owner without a status change.

        The message is also kept on the campaign as a comment by the admin.
        """
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id)
        scope = await self.access.campaign_scope(campaign)
        self.access.require_admin(actor, EntityClass.CAMPAIGN, scope, campaign_id)
        self.access.require(
            actor, EntityClass.NOTIFICATION, Operation.INSERT, RecordScope(scope.tenant_id, campaign.client_id)
        )

        async with self.repository.transaction():
            comment = await self.repository.save_comment(
                CampaignComment(campaign_id=campaign.id, user_id=actor.user_id, content=message)
            )
            await self.audit_trail.record_activity(
                campaign.id, actor.user_id, ActivityKind.UPDATE_SENT, {"message": message, "comment_id": comment.id}
            )
        return await self.emitter.emit(
            campaign.client_id, TITLE_UPDATE, update_message(campaign, message), campaign.id
        )

    async def list_notifications(self, actor_id: str, unread_only: bool = False) -> List[Notification]:
        actor = await self.directory.resolve_actor(actor_id)
        return await self.emitter.list_for(actor.user_id, unread_only)

    async def mark_notification_read(self, notification_id: str, actor_id: str) -> Notification:
        actor = await self.directory.resolve_actor(actor_id)
        await self._load_notification(actor, notification_id, Operation.UPDATE)
        updated = await self.emitter.mark_read(notification_id)
        if updated is None:
            raise NotFoundError(f"Notification not found: {notification_id}", EntityClass.NOTIFICATION)
        return updated

    async def mark_all_notifications_read(self, actor_id: str) -> int:
        actor = await self.directory.resolve_actor(actor_id)
        return await self.emitter.mark_all_read(actor.user_id)

    async def delete_notification(self, notification_id: str, actor_id: str) -> bool:
        actor = await self.directory.resolve_actor(actor_id)
        await self._load_notification(actor, notification_id, Operation.DELETE)
        return await self.emitter.delete(notification_id)

    async def _load_notification(
        self, actor: ActorContext, notification_id: str, operation: Operation
    ) -> Notification:
        notification = await self.emitter.get(notification_id)
        if notification is None:
            raise NotFoundError(f"Notification not found: {notification_id}", EntityClass.NOTIFICATION)
        scope = RecordScope(await self.directory.company_of(notification.user_id), notification.user_id)
        self.access.require(actor, EntityClass.NOTIFICATION, operation, scope, notification_id)
        return notification

    # ====================
    # Tenant Administration
    # ====================

    async def create_company(self, actor_id: str, name: str, account_id: Optional[str] = None) -> Company:
        actor = await self.directory.resolve_actor(actor_id)
        if not actor.is_super_admin:
            logger.warning(f"Access denied: {actor_id} tried to create a company")
            raise ForbiddenError("Only super admins can create companies")
        company = await self.repository.save_company(Company(name=name, account_id=account_id))
        logger.info(f"Company {company.id} created by {actor_id}")
        return company

    async def register_user(
        self,
        user_id: str,
        email: str,
        name: str = "",
        company_id: Optional[str] = None,
        invited_by: Optional[str] = None,
    ) -> User:
        """
        Create the profile of a user.

        Without invited_by this is self-registration: user_id and email must
        come from the authenticated identity, and the user joins no company.
        With invited_by, an admin of the target company (or a super admin)
        registers someone else.

        Privileged e-mail domains become super admins only on
        self-registration or when a super admin invites. The first member of
        a company becomes its admin.

        Raises:
            ForbiddenError: Joining a company without an admin's invitation
            AccessDeniedError: The inviter cannot see the target company
            InvalidStateError: The user already exists
        """
        trust_email = True
        if invited_by is None:
            if company_id:
                logger.warning(f"Access denied: {user_id} tried to join company {company_id} uninvited")
                raise ForbiddenError("Joining a company requires an invitation from its admin", EntityClass.USER, user_id)
        else:
            inviter = await self.directory.resolve_actor(invited_by)
            if company_id:
                self.access.require_admin(inviter, EntityClass.USER, RecordScope(company_id, user_id), user_id)
            elif not inviter.is_super_admin:
                logger.warning(f"Access denied: {invited_by} tried to register {user_id} outside any company")
                raise ForbiddenError("Only super admins can register users outside a company", EntityClass.USER, user_id)
            trust_email = inviter.is_super_admin

        if await self.repository.get_user(user_id) is not None:
            raise InvalidStateError(f"User {user_id} is already registered")
        if company_id and await self.repository.get_company(company_id) is None:
            raise NotFoundError(f"Company not found: {company_id}")

        async with self.repository.transaction():
            role = await self.directory.default_role_for(email, company_id, trust_email=trust_email)
            user = await self.repository.save_user(
                User(id=user_id, email=email, name=name, company_id=company_id, role=role)
            )

        logger.info(f"User {user_id} registered as {role.value} (invited_by={invited_by})")
        return user

    async def change_user_role(self, target_id: str, actor_id: str, role: UserRole) -> User:
        """Change a user's role within the actor's company"""
        actor = await self.directory.resolve_actor(actor_id)
        target = await self._load_admin_target(actor, target_id, Operation.UPDATE)
        if role == UserRole.SUPER_ADMIN and not actor.is_super_admin:
            logger.warning(f"Access denied: {actor_id} tried to grant super_admin")
            raise ForbiddenError("Only super admins can grant super_admin", EntityClass.USER, target_id)

        updated = await self.repository.update_user_role(target.id, role)
        if updated is None:
            raise NotFoundError(f"User not found: {target_id}", EntityClass.USER)
        logger.info(f"User {target_id} role changed {target.role.value} -> {role.value} by {actor_id}")
        return updated

    async def remove_user(self, target_id: str, actor_id: str) -> bool:
        actor = await self.directory.resolve_actor(actor_id)
        target = await self._load_admin_target(actor, target_id, Operation.DELETE)
        deleted = await self.repository.delete_user(target.id)
        logger.info(f"User {target_id} removed by {actor_id}")
        return deleted

    async def _load_admin_target(self, actor: ActorContext, target_id: str, operation: Operation) -> User:
        target = await self.directory.get_user(target_id)
        if target is None:
            raise NotFoundError(f"User not found: {target_id}", EntityClass.USER)
        scope = RecordScope(target.company_id, target.id)
        self.access.require_admin(actor, EntityClass.USER, scope, target_id)
        self.access.require(actor, EntityClass.USER, operation, scope, target_id)
        if target.role == UserRole.SUPER_ADMIN and not actor.is_super_admin:
            raise ForbiddenError("Super admins are managed by super admins", EntityClass.USER, target_id)
        return target

    # ====================
    # Health
    # ====================

    async def health_check(self) -> Dict[str, str]:
        healthy = await self.repository.health_check()
        return {
            "status": "healthy" if healthy else "unhealthy",
            "database": "connected" if healthy else "disconnected",
        }


def _jsonable(value) -> str:
    if hasattr(value, "model_dump_json"):
        return value.model_dump_json()
    return "" if value is None else str(value)


__all__ = ["CampaignWorkflowService"]
