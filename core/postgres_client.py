"""
PostgreSQL Client Wrapper

Thin asyncpg pool wrapper shared by repositories. Connections are bound to
the current task through a ContextVar while a transaction is open, so every
query issued inside ``async with db.transaction():`` uses the same
connection.

Usage:
    from core.postgres_client import PostgresClientWrapper

    db = PostgresClientWrapper("campaign_workflow_service")
    await db.connect()

    async with db.transaction():
        row = await db.query_row("SELECT * FROM campaigns WHERE id = $1", [campaign_id])
"""

import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any, AsyncIterator, Dict, List, Optional

import asyncpg

from core.config import InfraConfig

logger = logging.getLogger(__name__)

_current_connection: ContextVar[Optional[asyncpg.Connection]] = ContextVar(
    "postgres_current_connection", default=None
)


class PostgresClientWrapper:
    """
    PostgreSQL client wrapper around an asyncpg pool.

    Provides:
    - Configuration from InfraConfig with explicit overrides
    - Task-bound transactions (nested calls become savepoints)
    - Dict rows for repository mapping
    """

    def __init__(
        self,
        service_name: str,
        config: Optional[InfraConfig] = None,
        dsn: Optional[str] = None,
    ):
        """
        Initialize PostgreSQL client wrapper.

        Args:
            service_name: Name of the service using this client
            config: Infrastructure config (defaults to environment)
            dsn: Explicit DSN overriding the config
        """
        self.service_name = service_name
        self.config = config or InfraConfig.from_env()
        self.dsn = dsn or self.config.postgres_dsn
        self._pool: Optional[asyncpg.Pool] = None

        logger.info(
            f"PostgreSQL client initialized for {service_name}: "
            f"{self.config.postgres_host}:{self.config.postgres_port}/{self.config.postgres_db}"
        )

    async def connect(self) -> None:
        """Create the connection pool"""
        if self._pool is not None:
            return
        self._pool = await asyncpg.create_pool(
            dsn=self.dsn,
            min_size=self.config.postgres_min_pool,
            max_size=self.config.postgres_max_pool,
        )

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("PostgreSQL client not connected. Call connect() first.")
        return self._pool

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Open a transaction bound to the current task"""
        conn = _current_connection.get()
        if conn is not None:
            async with conn.transaction():
                yield conn
            return

        async with self.pool.acquire() as conn:
            token = _current_connection.set(conn)
            try:
                async with conn.transaction():
                    yield conn
            finally:
                _current_connection.reset(token)

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        conn = _current_connection.get()
        if conn is not None:
            yield conn
            return
        async with self.pool.acquire() as conn:
            yield conn

    async def health_check(self) -> bool:
        """Check database health"""
        try:
            async with self._connection() as conn:
                return await conn.fetchval("SELECT 1") == 1
        except Exception as e:
            logger.error(f"PostgreSQL health check failed: {e}")
            return False

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return results"""
        async with self._connection() as conn:
            rows = await conn.fetch(sql, *(params or []))
            return [dict(row) for row in rows]

    async def query_row(self, sql: str, params: Optional[List[Any]] = None) -> Optional[Dict[str, Any]]:
        """Execute query and return single row"""
        async with self._connection() as conn:
            row = await conn.fetchrow(sql, *(params or []))
            return dict(row) if row else None

    async def execute(self, sql: str, params: Optional[List[Any]] = None) -> str:
        """Execute SQL statement and return the status tag"""
        async with self._connection() as conn:
            return await conn.execute(sql, *(params or []))

    async def close(self):
        """Close the pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
