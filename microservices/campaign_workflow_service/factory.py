"""
Campaign Workflow Service Factory

Factory for creating campaign workflow service instances with proper
dependency injection.
"""

import logging
from typing import Optional

from core.config import WorkflowConfig
from core.nats_client import NATSEventBus
from core.postgres_client import PostgresClientWrapper

from .campaign_workflow_service import CampaignWorkflowService
from .clients.notification_client import NotificationClient
from .workflow_repository import WorkflowRepository

logger = logging.getLogger(__name__)


class CampaignWorkflowServiceFactory:
    """Factory for creating campaign workflow service components"""

    def __init__(self, config: Optional[WorkflowConfig] = None):
        self.config = config or WorkflowConfig.from_env()
        self._repository: Optional[WorkflowRepository] = None
        self._service: Optional[CampaignWorkflowService] = None
        self._nats_client: Optional[NATSEventBus] = None
        self._notification_client: Optional[NotificationClient] = None

    async def initialize(self) -> None:
        """Initialize all components"""
        logger.info("Initializing Campaign Workflow Service components...")

        # Initialize repository
        db = PostgresClientWrapper(self.config.service_name, self.config.infrastructure)
        self._repository = WorkflowRepository(db, apply_schema=self.config.debug)
        await self._repository.initialize()

        # Initialize NATS client
        if self.config.infrastructure.nats_enabled:
            try:
                self._nats_client = NATSEventBus(
                    service_name=self.config.service_name,
                    config=self.config.infrastructure,
                )
                await self._nats_client.connect()
                logger.info("NATS client connected")
            except Exception as e:
                logger.warning(f"NATS client initialization failed: {e}")
                self._nats_client = None

        # Initialize service clients
        self._notification_client = NotificationClient(self.config)

        # Initialize main service
        self._service = CampaignWorkflowService(
            repository=self._repository,
            event_bus=self._nats_client,
            notification_sink=self._notification_client,
            super_admin_domains=self.config.super_admin_email_domains,
        )

        logger.info("Campaign Workflow Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Campaign Workflow Service components...")

        if self._nats_client:
            await self._nats_client.close()

        if self._repository:
            await self._repository.close()

        logger.info("Campaign Workflow Service components closed")

    @property
    def repository(self) -> WorkflowRepository:
        """Get workflow repository"""
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def service(self) -> CampaignWorkflowService:
        """Get campaign workflow service"""
        if not self._service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._service

    @property
    def nats_client(self) -> Optional[NATSEventBus]:
        """Get NATS client"""
        return self._nats_client


__all__ = ["CampaignWorkflowServiceFactory"]
