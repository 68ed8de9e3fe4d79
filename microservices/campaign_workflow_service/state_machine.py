"""
Campaign State Machine

One transition table keyed by (from_status, role) and one
can_transition() consulted by every status change. Applying a transition
is a compare-and-swap on the campaign status plus exactly one workflow
history entry and one status_changed activity entry, in a single unit of
work.
"""

import logging
from typing import TYPE_CHECKING, Dict, FrozenSet, Optional, Tuple

from .models import ActivityKind, ActorContext, Campaign, CampaignStatus, UserRole
from .protocols import (
    ConcurrencyConflictError,
    InvalidStateError,
    InvalidTransitionError,
    WorkflowRepositoryProtocol,
)

if TYPE_CHECKING:
    from .audit_trail import AuditTrail

logger = logging.getLogger(__name__)

S = CampaignStatus

TERMINAL_STATUSES = frozenset({S.COMPLETED, S.FAILED})

# Submission is the only transition available to the campaign owner
OWNER_TRANSITIONS: Dict[CampaignStatus, FrozenSet[CampaignStatus]] = {
    S.DRAFT: frozenset({S.SUBMITTED}),
}

ADMIN_TRANSITIONS: Dict[CampaignStatus, FrozenSet[CampaignStatus]] = {
    S.DRAFT: frozenset({S.SUBMITTED}),
    S.SUBMITTED: frozenset({S.PENDING_REVIEW, S.APPROVED, S.FAILED}),
    S.PENDING_REVIEW: frozenset({S.APPROVED, S.FAILED}),
    S.APPROVED: frozenset({S.IN_PROGRESS, S.FAILED}),
    S.IN_PROGRESS: frozenset({S.WAITING_ON_CLIENT, S.DELIVERED, S.LIVE, S.PAUSED, S.FAILED}),
    S.WAITING_ON_CLIENT: frozenset({S.IN_PROGRESS, S.FAILED}),
    S.DELIVERED: frozenset({S.COMPLETED, S.LIVE, S.PAUSED, S.FAILED}),
    S.LIVE: frozenset({S.PAUSED, S.IN_PROGRESS, S.DELIVERED, S.FAILED}),
    S.PAUSED: frozenset({S.LIVE, S.IN_PROGRESS, S.DELIVERED, S.FAILED}),
    S.COMPLETED: frozenset(),  # Terminal state
    S.FAILED: frozenset(),  # Terminal state
}

TRANSITIONS: Dict[Tuple[CampaignStatus, UserRole], FrozenSet[CampaignStatus]] = {}
for _status in CampaignStatus:
    TRANSITIONS[(_status, UserRole.USER)] = OWNER_TRANSITIONS.get(_status, frozenset())
    TRANSITIONS[(_status, UserRole.ADMIN)] = ADMIN_TRANSITIONS[_status]
    TRANSITIONS[(_status, UserRole.SUPER_ADMIN)] = ADMIN_TRANSITIONS[_status]
del _status


def can_transition(from_status: CampaignStatus, to_status: CampaignStatus, role: UserRole) -> bool:
    """True if the role may move a campaign from from_status to to_status"""
    return to_status in TRANSITIONS.get((from_status, role), frozenset())


def allowed_targets(from_status: CampaignStatus, role: UserRole) -> FrozenSet[CampaignStatus]:
    return TRANSITIONS.get((from_status, role), frozenset())


def is_terminal(status: CampaignStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_known_transition(from_status: CampaignStatus, to_status: CampaignStatus) -> bool:
    """True if any role may perform the transition"""
    return any(can_transition(from_status, to_status, role) for role in UserRole)


def note_required(to_status: CampaignStatus) -> bool:
    return to_status == S.FAILED


class CampaignStateMachine:
    """Validates and applies campaign status transitions"""

    def __init__(self, repository: WorkflowRepositoryProtocol, audit_trail: "AuditTrail"):
        self.repository = repository
        self.audit_trail = audit_trail

    def validate_transition(
        self,
        campaign: Campaign,
        to_status: CampaignStatus,
        actor: ActorContext,
        note: Optional[str] = None,
        submission: bool = False,
    ) -> None:
        """
        Check a transition against the table without touching the record.

        Raises:
            InvalidTransitionError: Pair not allowed for the actor's role
            InvalidStateError: Missing note on a transition to failed
        """
        from_status = campaign.status
        if not can_transition(from_status, to_status, actor.role):
            raise InvalidTransitionError(
                f"Cannot transition campaign {campaign.id} from {from_status.value} to {to_status.value}",
                from_status=from_status,
                to_status=to_status,
            )
        # Submission must go through the request workflow
        if from_status == S.DRAFT and to_status == S.SUBMITTED and not submission:
            raise InvalidTransitionError(
                "Campaigns are submitted through an audience request",
                from_status=from_status,
                to_status=to_status,
            )
        if note_required(to_status) and not (note and note.strip()):
            raise InvalidStateError(
                f"A note is required to move campaign {campaign.id} to {to_status.value}",
                current_status=from_status.value,
            )

    async def apply(
        self,
        campaign: Campaign,
        to_status: CampaignStatus,
        actor: ActorContext,
        note: Optional[str] = None,
        submission: bool = False,
    ) -> Campaign:
        """
        Apply a validated transition.

        The status write is conditional on the status the caller observed;
        losing that race raises ConcurrencyConflictError and nothing is
        written.
        """
        self.validate_transition(campaign, to_status, actor, note, submission)

        async with self.repository.transaction():
            updated = await self.repository.update_campaign_status_if(
                campaign.id, campaign.status, to_status
            )
            if updated is None:
                raise ConcurrencyConflictError(
                    f"Campaign {campaign.id} changed concurrently; expected {campaign.status.value}"
                )
            await self.audit_trail.record_transition(
                campaign_id=campaign.id,
                from_status=campaign.status,
                to_status=to_status,
                actor_id=actor.user_id,
                note=note,
            )
            await self.audit_trail.record_activity(
                campaign.id,
                actor.user_id,
                ActivityKind.STATUS_CHANGED,
                {"from_status": campaign.status.value, "to_status": to_status.value, "note": note},
            )

        logger.info(
            f"Campaign {campaign.id} {campaign.status.value} -> {to_status.value} by {actor.user_id}"
        )
        return updated


__all__ = [
    "CampaignStateMachine",
    "TRANSITIONS",
    "TERMINAL_STATUSES",
    "can_transition",
    "allowed_targets",
    "is_terminal",
    "is_known_transition",
    "note_required",
]
