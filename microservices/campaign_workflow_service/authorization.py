"""
Authorization Policy Engine

Decides whether an actor may read or write a record. Evaluation is pure:
the actor's company and role arrive as constants from the tenant
directory and the record's tenant/owner arrive as a RecordScope, so no
evaluation ever triggers another evaluation.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .models import (
    ActorContext,
    AuthorizationResult,
    Decision,
    EntityClass,
    Operation,
    UserRole,
)

logger = logging.getLogger(__name__)


# Deny reasons
REASON_CROSS_TENANT = "cross_tenant"
REASON_NOT_OWNER = "not_owner"
REASON_NOT_RECIPIENT = "not_recipient"
REASON_IMMUTABLE = "immutable"
REASON_READ_ONLY = "read_only"
REASON_SELF_REMOVAL = "self_removal"
REASON_ROLE = "insufficient_role"

AUDIT_CLASSES = frozenset({EntityClass.WORKFLOW_HISTORY, EntityClass.ACTIVITY_LOG})
WRITE_OPERATIONS = frozenset({Operation.INSERT, Operation.UPDATE, Operation.DELETE})

# Classes a plain user may create records of
USER_INSERTABLE = frozenset({
    EntityClass.CAMPAIGN,
    EntityClass.CAMPAIGN_COMMENT,
    EntityClass.AUDIENCE_REQUEST,
})


@dataclass(frozen=True)
class RecordScope:
    """Tenant and owner of a concrete record"""
    tenant_id: Optional[str]
    owner_id: Optional[str] = None


def _allow(reason: str = "") -> AuthorizationResult:
    return AuthorizationResult(decision=Decision.ALLOW, reason=reason)


def _deny(reason: str) -> AuthorizationResult:
    return AuthorizationResult(decision=Decision.DENY, reason=reason)


class PolicyEngine:
    """Role and tenant based record policy"""

    def evaluate(
        self,
        actor: ActorContext,
        entity_class: EntityClass,
        operation: Operation,
        scope: Optional[RecordScope] = None,
    ) -> AuthorizationResult:
        """
        Evaluate one operation.

        Args:
            actor: Resolved identity of the caller
            entity_class: Class of the record
            operation: Requested operation
            scope: Tenant/owner of the record; None checks the class itself

        Returns:
            AuthorizationResult with decision and reason
        """
        result = self._evaluate(actor, entity_class, operation, scope)
        if not result.allowed:
            logger.warning(
                f"Access denied: actor={actor.user_id} role={actor.role.value} "
                f"{operation.value} {entity_class.value} reason={result.reason}"
            )
        return result

    def _evaluate(
        self,
        actor: ActorContext,
        entity_class: EntityClass,
        operation: Operation,
        scope: Optional[RecordScope],
    ) -> AuthorizationResult:
        # Audit entries are append-only for everybody
        if entity_class in AUDIT_CLASSES and operation in (Operation.UPDATE, Operation.DELETE):
            return _deny(REASON_IMMUTABLE)

        if entity_class == EntityClass.AUDIENCE_SEGMENT:
            if operation == Operation.READ or actor.is_super_admin:
                return _allow()
            return _deny(REASON_READ_ONLY)

        if entity_class == EntityClass.NOTIFICATION:
            return self._evaluate_notification(actor, operation, scope)

        if actor.is_super_admin:
            return _allow()

        if scope is None:
            return self._evaluate_class(actor, entity_class, operation)

        if scope.tenant_id is None or scope.tenant_id != actor.company_id:
            return _deny(REASON_CROSS_TENANT)

        if actor.role == UserRole.ADMIN:
            if (
                entity_class == EntityClass.USER
                and operation == Operation.DELETE
                and scope.owner_id == actor.user_id
            ):
                return _deny(REASON_SELF_REMOVAL)
            return _allow()

        # Plain user within their own company
        if operation == Operation.READ:
            return _allow()
        if entity_class == EntityClass.USER and operation != Operation.UPDATE:
            return _deny(REASON_ROLE)
        if entity_class in AUDIT_CLASSES:
            return _deny(REASON_ROLE)
        if scope.owner_id is not None and scope.owner_id == actor.user_id:
            return _allow()
        return _deny(REASON_NOT_OWNER)

    def _evaluate_class(
        self, actor: ActorContext, entity_class: EntityClass, operation: Operation
    ) -> AuthorizationResult:
        """Class-level check; row visibility is filtered separately"""
        if operation == Operation.READ:
            return _allow()
        if actor.role == UserRole.ADMIN:
            return _allow()
        if operation == Operation.INSERT and entity_class in USER_INSERTABLE:
            return _allow()
        return _deny(REASON_ROLE)

    def _evaluate_notification(
        self,
        actor: ActorContext,
        operation: Operation,
        scope: Optional[RecordScope],
    ) -> AuthorizationResult:
        if operation == Operation.INSERT:
            if actor.is_super_admin:
                return _allow()
            if actor.role != UserRole.ADMIN:
                return _deny(REASON_ROLE)
            if scope is None or scope.tenant_id == actor.company_id:
                return _allow()
            return _deny(REASON_CROSS_TENANT)

        if scope is None:
            # Listing is always restricted to the caller's own notifications
            return _allow() if operation == Operation.READ else _deny(REASON_NOT_RECIPIENT)
        if scope.owner_id == actor.user_id:
            return _allow()
        return _deny(REASON_NOT_RECIPIENT)


__all__ = [
    "PolicyEngine",
    "RecordScope",
    "REASON_CROSS_TENANT",
    "REASON_NOT_OWNER",
    "REASON_NOT_RECIPIENT",
    "REASON_IMMUTABLE",
    "REASON_READ_ONLY",
    "REASON_SELF_REMOVAL",
    "REASON_ROLE",
]
