"""
Tenant Directory

Resolves the calling user's company and role through the repository's
privileged lookup. Nothing here consults the policy engine: identity
resolution must never depend on record authorization.
"""

import logging
from typing import Iterable, Optional

from .models import ActorContext, EntityClass, User, UserRole
from .protocols import NotFoundError, WorkflowRepositoryProtocol

logger = logging.getLogger(__name__)


class TenantDirectory:
    """Privileged identity lookups for actors"""

    def __init__(
        self,
        repository: WorkflowRepositoryProtocol,
        super_admin_domains: Iterable[str] = ("boostdata.io",),
    ):
        self.repository = repository
        self.super_admin_domains = tuple(d.lower().lstrip("@") for d in super_admin_domains)

    async def resolve_actor(self, user_id: str) -> ActorContext:
        """
        Resolve an actor's company and role.

        Raises:
            NotFoundError: No such user
        """
        user = await self.repository.get_user(user_id)
        if user is None:
            logger.warning(f"Unknown actor {user_id}")
            raise NotFoundError(f"User not found: {user_id}", EntityClass.USER)
        return ActorContext(user_id=user.id, company_id=user.company_id, role=user.role)

    async def is_super_admin(self, user_id: str) -> bool:
        user = await self.repository.get_user(user_id)
        return user is not None and user.role == UserRole.SUPER_ADMIN

    async def company_of(self, user_id: str) -> Optional[str]:
        """Company of a record owner, None if the user is gone"""
        user = await self.repository.get_user(user_id)
        return user.company_id if user else None

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.repository.get_user(user_id)

    def has_privileged_email(self, email: str) -> bool:
        """True for addresses in a super-admin e-mail domain"""
        domain = email.rsplit("@", 1)[-1].lower() if "@" in email else ""
        return domain in self.super_admin_domains

    async def default_role_for(
        self, email: str, company_id: Optional[str], trust_email: bool = True
    ) -> UserRole:
        """
        Role for a newly registered user.

        Privileged e-mail domains get super_admin when the address is
        trusted, the first member of a company becomes its admin, everyone
        else is a plain user.
        """
        if trust_email and self.has_privileged_email(email):
            return UserRole.SUPER_ADMIN
        if company_id and await self.repository.count_company_users(company_id) == 0:
            return UserRole.ADMIN
        return UserRole.USER


__all__ = ["TenantDirectory"]
