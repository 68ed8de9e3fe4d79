"""
Request Approval Workflow

Submission of draft campaigns as audience requests and the admin decision
that drives the campaign state machine. Decisions are conditional writes
on the request status, so concurrent deciders produce exactly one outcome
and every loser observes the winner's result.
"""

import logging
from typing import Optional

from .audit_trail import AuditTrail
from .events.models import CampaignWorkflowEventType
from .events.publishers import CampaignWorkflowEventPublisher
from .models import (
    ActivityKind,
    ActorContext,
    AudienceRequest,
    Campaign,
    CampaignStatus,
    DECIDED_REQUEST_STATUSES,
    DecisionOutcome,
    DecisionResult,
    EntityClass,
    OPEN_REQUEST_STATUSES,
    Operation,
    RequestStatus,
    utc_now,
)
from .notification_emitter import (
    NotificationEmitter,
    TITLE_APPROVED,
    TITLE_REJECTED,
    approved_message,
    rejected_message,
)
from .protocols import (
    ConcurrencyConflictError,
    ConflictingRequestError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    WorkflowRepositoryProtocol,
)
from .record_access import RecordAccess
from .state_machine import CampaignStateMachine
from .tenant_directory import TenantDirectory

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_NOTE = "Audience request rejected"

DECIDABLE_CAMPAIGN_STATUSES = frozenset({CampaignStatus.SUBMITTED, CampaignStatus.PENDING_REVIEW})


class RequestApprovalWorkflow:
    """Submission, review and decision of audience requests"""

    def __init__(
        self,
        repository: WorkflowRepositoryProtocol,
        directory: TenantDirectory,
        access: RecordAccess,
        state_machine: CampaignStateMachine,
        audit_trail: AuditTrail,
        emitter: NotificationEmitter,
        publisher: Optional[CampaignWorkflowEventPublisher] = None,
    ):
        self.repository = repository
        self.directory = directory
        self.access = access
        self.state_machine = state_machine
        self.audit_trail = audit_trail
        self.emitter = emitter
        self.publisher = publisher or CampaignWorkflowEventPublisher()

    # ====================
    # Submission
    # ====================

    async def submit(self, campaign_id: str, actor_id: str) -> AudienceRequest:
        """
        Submit a draft campaign for approval.

        Creates the pending request and moves the campaign to submitted in
        one unit of work.

        Raises:
            ForbiddenError: Actor is not the campaign owner
            InvalidStateError: Campaign is not a draft
            ConflictingRequestError: Campaign already has an open request
        """
        actor = await self.directory.resolve_actor(actor_id)
        campaign = await self.access.load_campaign(actor, campaign_id)

        if campaign.client_id != actor.user_id:
            logger.warning(f"Access denied: {actor_id} tried to submit campaign {campaign_id} they do not own")
            raise ForbiddenError(
                "Only the campaign owner can submit it",
                entity_class=EntityClass.CAMPAIGN,
                entity_ref=campaign_id,
            )
        if campaign.status != CampaignStatus.DRAFT:
            raise InvalidStateError(
                f"Only draft campaigns can be submitted; campaign is {campaign.status.value}",
                current_status=campaign.status.value,
            )

        async with self.repository.transaction():
            if await self.repository.get_open_request(campaign.id) is not None:
                raise ConflictingRequestError(
                    f"Campaign {campaign.id} already has an open audience request",
                    campaign_id=campaign.id,
                )
            request = await self.repository.save_request(AudienceRequest.snapshot_of(campaign))
            submitted = await self.state_machine.apply(
                campaign, CampaignStatus.SUBMITTED, actor, submission=True
            )
            await self.audit_trail.record_activity(
                campaign.id,
                actor.user_id,
                ActivityKind.REQUEST_SUBMITTED,
                {"request_id": request.id, "budget": str(request.budget), "audiences": request.audiences},
            )

        logger.info(f"Campaign {campaign.id} submitted as request {request.id}")
        await self.publisher.publish_status_changed(submitted, CampaignStatus.DRAFT, actor.user_id)
        await self.publisher.publish_request_event(
            CampaignWorkflowEventType.REQUEST_SUBMITTED, request, actor.user_id
        )
        return request

    # ====================
    # Review
    # ====================

    async def mark_under_review(self, request_id: str, actor_id: str) -> AudienceRequest:
        """
        Flag a pending request as under review.

        Moves the request to reviewed and a submitted campaign to
        pending_review. Approval state is unchanged and nobody is notified.
        """
        actor = await self.directory.resolve_actor(actor_id)
        request = await self._load_for_admin(actor, request_id)

        if request.status == RequestStatus.REVIEWED:
            return request
        if request.status != RequestStatus.PENDING:
            raise InvalidStateError(
                f"Request {request_id} is already {request.status.value}",
                current_status=request.status.value,
            )

        async with self.repository.transaction():
            reviewed = await self.repository.update_request_status_if(
                request.id, [RequestStatus.PENDING], RequestStatus.REVIEWED
            )
            if reviewed is None:
                raise ConcurrencyConflictError(f"Request {request.id} changed concurrently")
            campaign = await self._get_campaign(request.campaign_id)
            if campaign.status == CampaignStatus.SUBMITTED:
                await self.state_machine.apply(campaign, CampaignStatus.PENDING_REVIEW, actor)
            await self.audit_trail.record_activity(
                campaign.id, actor.user_id, ActivityKind.REQUEST_REVIEWED, {"request_id": request.id}
            )

        logger.info(f"Request {request.id} marked under review by {actor_id}")
        return reviewed

    # ====================
    # Decision
    # ====================

    async def decide(
        self,
        request_id: str,
        actor_id: str,
        outcome: DecisionOutcome,
        notes: Optional[str] = None,
    ) -> DecisionResult:
        """
        Approve or reject an audience request.

        Deciding an already decided request returns the earlier outcome
        without writing anything. A decision that loses a race is re-checked
        once and reports the winner's outcome.

        Raises:
            ForbiddenError: Actor is not an admin of the owning company
            InvalidStateError: Linked campaign is not awaiting a decision
        """
        # Blank notes count as no notes
        notes = notes.strip() if notes and notes.strip() else None
        actor = await self.directory.resolve_actor(actor_id)
        request = await self._load_for_admin(actor, request_id)

        if request.status in DECIDED_REQUEST_STATUSES:
            return await self._prior_outcome(request)

        try:
            return await self._apply_decision(actor, request, outcome, notes)
        except ConcurrencyConflictError:
            logger.info(f"Decision on request {request_id} lost a race; re-checking")

        current = await self.repository.get_request(request_id)
        if current is None:
            raise NotFoundError(f"Audience request not found: {request_id}", EntityClass.AUDIENCE_REQUEST)
        if current.status in DECIDED_REQUEST_STATUSES:
            return await self._prior_outcome(current)
        return await self._apply_decision(actor, current, outcome, notes)

    async def _apply_decision(
        self,
        actor: ActorContext,
        request: AudienceRequest,
        outcome: DecisionOutcome,
        notes: Optional[str],
    ) -> DecisionResult:
        approve = outcome == DecisionOutcome.APPROVE

        async with self.repository.transaction():
            decided = await self.repository.update_request_status_if(
                request.id,
                OPEN_REQUEST_STATUSES,
                RequestStatus.APPROVED if approve else RequestStatus.REJECTED,
                notes=notes,
                decided_by=actor.user_id,
                decided_at=utc_now(),
            )
            if decided is None:
                raise ConcurrencyConflictError(f"Request {request.id} was decided concurrently")

            # The request row is claimed; the campaign must still be awaiting a decision
            campaign = await self._get_campaign(request.campaign_id)
            if campaign.status not in DECIDABLE_CAMPAIGN_STATUSES:
                raise InvalidStateError(
                    f"Campaign {campaign.id} is {campaign.status.value}, not awaiting a decision",
                    current_status=campaign.status.value,
                )
            original_status = campaign.status

            if approve:
                approved = await self.state_machine.apply(campaign, CampaignStatus.APPROVED, actor, note=notes)
                final = await self.state_machine.apply(approved, CampaignStatus.IN_PROGRESS, actor)
            else:
                final = await self.state_machine.apply(
                    campaign, CampaignStatus.FAILED, actor, note=notes or DEFAULT_REJECTION_NOTE
                )

            await self.audit_trail.record_activity(
                campaign.id,
                actor.user_id,
                ActivityKind.REQUEST_DECIDED,
                {"request_id": request.id, "outcome": outcome.value, "notes": notes},
            )

        logger.info(f"Request {request.id} {decided.status.value} by {actor.user_id}")

        if approve:
            await self.emitter.emit(
                decided.client_id, TITLE_APPROVED, approved_message(final, notes), campaign.id
            )
            event_type = CampaignWorkflowEventType.REQUEST_APPROVED
        else:
            await self.emitter.emit(
                decided.client_id, TITLE_REJECTED, rejected_message(final, notes), campaign.id
            )
            event_type = CampaignWorkflowEventType.REQUEST_REJECTED

        await self.publisher.publish_status_changed(final, original_status, actor.user_id, notes)
        await self.publisher.publish_request_event(event_type, decided, actor.user_id)
        return DecisionResult(campaign=final, request=decided)

    async def _prior_outcome(self, request: AudienceRequest) -> DecisionResult:
        campaign = await self._get_campaign(request.campaign_id)
        return DecisionResult(campaign=campaign, request=request, already_decided=True)

    # ====================
    # Manual Transitions
    # ====================

    async def resolve_for_transition(
        self,
        campaign_id: str,
        actor: ActorContext,
        to_status: CampaignStatus,
        notes: Optional[str] = None,
    ) -> Optional[AudienceRequest]:
        """
        Close the open request of a campaign moving to approved or failed.

        Must run inside the caller's unit of work.
        """
        request = await self.repository.get_open_request(campaign_id)
        if request is None:
            return None
        new_status = RequestStatus.APPROVED if to_status == CampaignStatus.APPROVED else RequestStatus.REJECTED
        decided = await self.repository.update_request_status_if(
            request.id,
            OPEN_REQUEST_STATUSES,
            new_status,
            notes=notes,
            decided_by=actor.user_id,
            decided_at=utc_now(),
        )
        if decided is None:
            raise ConcurrencyConflictError(f"Request {request.id} was decided concurrently")
        return decided

    # ====================
    # Helpers
    # ====================

    async def _load_for_admin(self, actor: ActorContext, request_id: str) -> AudienceRequest:
        request = await self.repository.get_request(request_id)
        if request is None:
            raise NotFoundError(f"Audience request not found: {request_id}", EntityClass.AUDIENCE_REQUEST)
        scope = await self.access.request_scope(request)
        self.access.require_admin(actor, EntityClass.AUDIENCE_REQUEST, scope, request_id)
        self.access.require(actor, EntityClass.AUDIENCE_REQUEST, Operation.UPDATE, scope, request_id)
        return request

    async def _get_campaign(self, campaign_id: str) -> Campaign:
        campaign = await self.repository.get_campaign(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign not found: {campaign_id}", EntityClass.CAMPAIGN)
        return campaign


__all__ = ["RequestApprovalWorkflow", "DEFAULT_REJECTION_NOTE"]
