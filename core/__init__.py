#!/usr/bin/env python3
"""
Core Module for the Campaign Workflow Service

Shared infrastructure used by the microservices in this repository.

COMPONENTS:
    - config/: Environment-driven configuration (dotenv + dataclasses)
    - postgres_client.py: asyncpg pool wrapper with task-bound transactions
    - nats_client.py: NATS event bus for event-driven architecture

USAGE:
    from core.config import get_settings
    from core.postgres_client import PostgresClientWrapper
    from core.nats_client import Event, NATSEventBus
"""
