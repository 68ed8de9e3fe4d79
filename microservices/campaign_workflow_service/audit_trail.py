"""
Audit Trail

Append-only workflow history and activity log. Entries are ordered per
campaign by a repository-assigned sequence; there is no update or delete
path.
"""

import logging
from typing import Any, Dict, List, Optional

from .models import ActivityKind, ActivityLogEntry, CampaignStatus, WorkflowHistoryEntry
from .protocols import InvalidStateError, InvalidTransitionError, WorkflowRepositoryProtocol
from .state_machine import is_known_transition, note_required

logger = logging.getLogger(__name__)


class AuditTrail:
    """Writes and reads immutable audit records"""

    def __init__(self, repository: WorkflowRepositoryProtocol):
        self.repository = repository

    async def record_transition(
        self,
        campaign_id: str,
        from_status: CampaignStatus,
        to_status: CampaignStatus,
        actor_id: str,
        note: Optional[str] = None,
    ) -> WorkflowHistoryEntry:
        """
        Append one workflow history entry.

        Errors propagate so the enclosing transaction rolls back.
        """
        if not is_known_transition(from_status, to_status):
            raise InvalidTransitionError(
                f"Refusing to record unknown transition {from_status.value} -> {to_status.value}",
                from_status=from_status,
                to_status=to_status,
            )
        if note_required(to_status) and not note:
            raise InvalidStateError(f"History entry to {to_status.value} requires a note")

        entry = WorkflowHistoryEntry(
            campaign_id=campaign_id,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor_id,
            note=note,
        )
        return await self.repository.append_workflow_history(entry)

    async def record_activity(
        self,
        campaign_id: str,
        actor_id: str,
        kind: ActivityKind,
        payload: Optional[Dict[str, Any]] = None,
    ) -> ActivityLogEntry:
        entry = ActivityLogEntry(
            campaign_id=campaign_id,
            actor_id=actor_id,
            kind=kind,
            payload=payload or {},
        )
        logger.debug(f"Activity {kind.value} on campaign {campaign_id} by {actor_id}")
        return await self.repository.append_activity(entry)

    async def list_workflow_history(
        self, campaign_id: str, after_sequence: int = 0
    ) -> List[WorkflowHistoryEntry]:
        """History in sequence order, resuming after the given sequence"""
        entries = await self.repository.list_workflow_history(campaign_id, after_sequence)
        return sorted(entries, key=lambda e: e.sequence)

    async def list_activity(self, campaign_id: str) -> List[ActivityLogEntry]:
        entries = await self.repository.list_activity(campaign_id)
        return sorted(entries, key=lambda e: e.sequence)


__all__ = ["AuditTrail"]
