"""
Record Access

Builds the tenant/owner scope of stored records through privileged
lookups and turns policy decisions into exceptions. Denials on records
the actor cannot see surface as AccessDeniedError (reported like a
missing record); denials on visible records surface as ForbiddenError.
"""

import logging
from typing import Optional

from .authorization import PolicyEngine, RecordScope
from .models import (
    ActorContext,
    AudienceRequest,
    Campaign,
    EntityClass,
    Operation,
)
from .protocols import (
    AccessDeniedError,
    ForbiddenError,
    NotFoundError,
    WorkflowRepositoryProtocol,
)
from .tenant_directory import TenantDirectory

logger = logging.getLogger(__name__)


class RecordAccess:
    """Scope resolution and policy enforcement for stored records"""

    def __init__(
        self,
        repository: WorkflowRepositoryProtocol,
        directory: TenantDirectory,
        policy: PolicyEngine,
    ):
        self.repository = repository
        self.directory = directory
        self.policy = policy

    async def campaign_scope(self, campaign: Campaign) -> RecordScope:
        """A campaign belongs to its owner's company"""
        return RecordScope(
            tenant_id=await self.directory.company_of(campaign.client_id),
            owner_id=campaign.client_id,
        )

    async def request_scope(self, request: AudienceRequest) -> RecordScope:
        return RecordScope(
            tenant_id=await self.directory.company_of(request.client_id),
            owner_id=request.client_id,
        )

    def require(
        self,
        actor: ActorContext,
        entity_class: EntityClass,
        operation: Operation,
        scope: Optional[RecordScope] = None,
        entity_ref: Optional[str] = None,
    ) -> None:
        """
        Raise unless the policy allows the operation.

        Raises:
            AccessDeniedError: The actor cannot see the record
            ForbiddenError: The actor can see the record but may not act on it
        """
        if self.policy.evaluate(actor, entity_class, operation, scope).allowed:
            return
        if operation != Operation.READ and self.policy.evaluate(
            actor, entity_class, Operation.READ, scope
        ).allowed:
            raise ForbiddenError(
                f"Not permitted to {operation.value} {entity_class.value}",
                entity_class=entity_class,
                entity_ref=entity_ref,
            )
        raise AccessDeniedError(
            f"{entity_class.value} not found: {entity_ref}",
            entity_class=entity_class,
            entity_ref=entity_ref,
        )

    def require_admin(
        self,
        actor: ActorContext,
        entity_class: EntityClass,
        scope: RecordScope,
        entity_ref: Optional[str] = None,
    ) -> None:
        """Require admin rights over the record's tenant"""
        self.require(actor, entity_class, Operation.READ, scope, entity_ref)
        if not actor.administers(scope.tenant_id):
            logger.warning(
                f"Access denied: actor={actor.user_id} is not an admin of tenant {scope.tenant_id}"
            )
            raise ForbiddenError(
                f"Admin rights required for {entity_class.value}",
                entity_class=entity_class,
                entity_ref=entity_ref,
            )

    async def load_campaign(
        self,
        actor: ActorContext,
        campaign_id: str,
        operation: Operation = Operation.READ,
    ) -> Campaign:
        """Fetch a campaign and check the operation on it"""
        campaign = await self.repository.get_campaign(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign not found: {campaign_id}", EntityClass.CAMPAIGN)
        scope = await self.campaign_scope(campaign)
        self.require(actor, EntityClass.CAMPAIGN, operation, scope, campaign_id)
        return campaign

    async def load_request(self, actor: ActorContext, request_id: str) -> AudienceRequest:
        request = await self.repository.get_request(request_id)
        if request is None:
            raise NotFoundError(f"Audience request not found: {request_id}", EntityClass.AUDIENCE_REQUEST)
        scope = await self.request_scope(request)
        self.require(actor, EntityClass.AUDIENCE_REQUEST, Operation.READ, scope, request_id)
        return request


__all__ = ["RecordAccess"]
