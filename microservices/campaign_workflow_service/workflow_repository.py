"""
Campaign Workflow Data Repository

Data access layer - PostgreSQL (Async, asyncpg)

User lookups here are privileged and unfiltered; record authorization is
applied by the service layer. Status changes are conditional updates so a
lost race returns no row instead of overwriting the winner.
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional

import asyncpg

from core.postgres_client import PostgresClientWrapper

from .models import (
    ActivityKind,
    ActivityLogEntry,
    AudienceRequest,
    AudienceSegment,
    Campaign,
    CampaignComment,
    CampaignPlatforms,
    CampaignStatus,
    Company,
    CompanyAccountId,
    Notification,
    RequestStatus,
    User,
    UserRole,
    WorkflowHistoryEntry,
)
from .protocols import ConflictingRequestError

logger = logging.getLogger(__name__)


class ExtendedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and datetime types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def json_dumps(obj):
    """JSON dumps with Decimal and datetime support"""
    return json.dumps(obj, cls=ExtendedJSONEncoder)


def _json(value, default):
    if value is None:
        return default
    if isinstance(value, str):
        return json.loads(value)
    return value


class WorkflowRepository:
    """Campaign workflow data repository - PostgreSQL (Async)"""

    SCHEMA_SQL = """
    CREATE SCHEMA IF NOT EXISTS campaign_workflow;

    CREATE TABLE IF NOT EXISTS campaign_workflow.companies (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        account_id TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );

    CREATE TABLE IF NOT EXISTS campaign_workflow.users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL,
        name TEXT NOT NULL DEFAULT '',
        company_id TEXT REFERENCES campaign_workflow.companies(id) ON DELETE CASCADE,
        role TEXT NOT NULL CHECK (role IN ('user', 'admin', 'super_admin')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_users_company_id ON campaign_workflow.users(company_id);

    CREATE TABLE IF NOT EXISTS campaign_workflow.company_account_ids (
        id TEXT PRIMARY KEY,
        company_id TEXT NOT NULL REFERENCES campaign_workflow.companies(id) ON DELETE CASCADE,
        platform TEXT NOT NULL,
        account_id TEXT NOT NULL,
        account_name TEXT
    );
    CREATE INDEX IF NOT EXISTS idx_account_ids_company_id ON campaign_workflow.company_account_ids(company_id);

    CREATE TABLE IF NOT EXISTS campaign_workflow.audience_segments (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        category TEXT NOT NULL DEFAULT '',
        data_supplier TEXT,
        reach BIGINT,
        cpm NUMERIC(12, 4)
    );

    CREATE TABLE IF NOT EXISTS campaign_workflow.campaigns (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL REFERENCES campaign_workflow.users(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'draft',
        budget NUMERIC(14, 2) NOT NULL DEFAULT 0,
        start_date DATE,
        end_date DATE,
        platforms JSONB NOT NULL DEFAULT '{}',
        audiences JSONB NOT NULL DEFAULT '[]',
        archived BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_campaigns_client_id ON campaign_workflow.campaigns(client_id);
    CREATE INDEX IF NOT EXISTS idx_campaigns_status ON campaign_workflow.campaigns(status);

    CREATE TABLE IF NOT EXISTS campaign_workflow.audience_requests (
        id TEXT PRIMARY KEY,
        campaign_id TEXT NOT NULL REFERENCES campaign_workflow.campaigns(id) ON DELETE CASCADE,
        client_id TEXT NOT NULL,
        audiences JSONB NOT NULL DEFAULT '[]',
        platforms JSONB NOT NULL DEFAULT '{}',
        budget NUMERIC(14, 2) NOT NULL DEFAULT 0,
        start_date DATE,
        end_date DATE,
        status TEXT NOT NULL DEFAULT 'pending',
        notes TEXT,
        decided_by TEXT,
        decided_at TIMESTAMPTZ,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_requests_campaign_id ON campaign_workflow.audience_requests(campaign_id);
    CREATE INDEX IF NOT EXISTS idx_requests_status ON campaign_workflow.audience_requests(status);
    CREATE UNIQUE INDEX IF NOT EXISTS uq_requests_one_open_per_campaign
        ON campaign_workflow.audience_requests(campaign_id)
        WHERE status IN ('pending', 'reviewed');

    CREATE TABLE IF NOT EXISTS campaign_workflow.workflow_history (
        sequence BIGSERIAL PRIMARY KEY,
        id TEXT NOT NULL UNIQUE,
        campaign_id TEXT NOT NULL,
        from_status TEXT NOT NULL,
        to_status TEXT NOT NULL,
        actor_id TEXT NOT NULL,
        note TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_history_campaign_id ON campaign_workflow.workflow_history(campaign_id, sequence);

    CREATE TABLE IF NOT EXISTS campaign_workflow.activity_log (
        sequence BIGSERIAL PRIMARY KEY,
        id TEXT NOT NULL UNIQUE,
        campaign_id TEXT NOT NULL,
        actor_id TEXT NOT NULL,
        kind TEXT NOT NULL,
        payload JSONB NOT NULL DEFAULT '{}',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_activity_campaign_id ON campaign_workflow.activity_log(campaign_id, sequence);

    CREATE TABLE IF NOT EXISTS campaign_workflow.campaign_comments (
        id TEXT PRIMARY KEY,
        campaign_id TEXT NOT NULL REFERENCES campaign_workflow.campaigns(id) ON DELETE CASCADE,
        user_id TEXT NOT NULL,
        content TEXT NOT NULL,
        parent_comment_id TEXT REFERENCES campaign_workflow.campaign_comments(id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_comments_campaign_id ON campaign_workflow.campaign_comments(campaign_id);

    CREATE TABLE IF NOT EXISTS campaign_workflow.notifications (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        title TEXT NOT NULL,
        message TEXT NOT NULL,
        campaign_id TEXT,
        read BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
    CREATE INDEX IF NOT EXISTS idx_notifications_user_id ON campaign_workflow.notifications(user_id, read);
    """

    def __init__(self, db: PostgresClientWrapper, apply_schema: bool = False):
        self.db = db
        self.schema = "campaign_workflow"
        self.apply_schema = apply_schema

    async def initialize(self):
        """Initialize database connection"""
        await self.db.connect()
        if self.apply_schema:
            await self.db.execute(self.SCHEMA_SQL)
        logger.info("Campaign workflow repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Campaign workflow repository database connection closed")

    async def health_check(self) -> bool:
        """Check repository health"""
        return await self.db.health_check()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Any]:
        async with self.db.transaction() as conn:
            yield conn

    # ====================
    # Companies and Users
    # ====================

    async def save_company(self, company: Company) -> Company:
        row = await self.db.query_row(
            f"""
            INSERT INTO {self.schema}.companies (id, name, account_id, created_at)
            VALUES ($1, $2, $3, $4) RETURNING *
            """,
            [company.id, company.name, company.account_id, company.created_at],
        )
        return Company(**row)

    async def get_company(self, company_id: str) -> Optional[Company]:
        row = await self.db.query_row(
            f"SELECT * FROM {self.schema}.companies WHERE id = $1", [company_id]
        )
        return Company(**row) if row else None

    async def get_user(self, user_id: str) -> Optional[User]:
        row = await self.db.query_row(
            f"SELECT * FROM {self.schema}.users WHERE id = $1", [user_id]
        )
        return self._row_to_user(row) if row else None

    async def save_user(self, user: User) -> User:
        row = await self.db.query_row(
            f"""
            INSERT INTO {self.schema}.users (id, email, name, company_id, role, created_at)
            VALUES ($1, $2, $3, $4, $5, $6) RETURNING *
            """,
            [user.id, user.email, user.name, user.company_id, user.role.value, user.created_at],
        )
        return self._row_to_user(row)

    async def update_user_role(self, user_id: str, role: UserRole) -> Optional[User]:
        row = await self.db.query_row(
            f"UPDATE {self.schema}.users SET role = $2 WHERE id = $1 RETURNING *",
            [user_id, role.value],
        )
        return self._row_to_user(row) if row else None

    async def delete_user(self, user_id: str) -> bool:
        status = await self.db.execute(f"DELETE FROM {self.schema}.users WHERE id = $1", [user_id])
        return status.endswith(" 1")

    async def count_company_users(self, company_id: str) -> int:
        row = await self.db.query_row(
            f"SELECT COUNT(*) AS n FROM {self.schema}.users WHERE company_id = $1", [company_id]
        )
        return int(row["n"]) if row else 0

    # ====================
    # Reference Data
    # ====================

    async def get_segment(self, segment_id: str) -> Optional[AudienceSegment]:
        row = await self.db.query_row(
            f"SELECT * FROM {self.schema}.audience_segments WHERE id = $1", [segment_id]
        )
        return AudienceSegment(**row) if row else None

    async def get_account_id(self, account_ref: str) -> Optional[CompanyAccountId]:
        row = await self.db.query_row(
            f"SELECT * FROM {self.schema}.company_account_ids WHERE id = $1", [account_ref]
        )
        return CompanyAccountId(**row) if row else None

    # ====================
    # Campaigns
    # ====================

    async def save_campaign(self, campaign: Campaign) -> Campaign:
        row = await self.db.query_row(
            f"""
            INSERT INTO {self.schema}.campaigns (
                id, client_id, name, status, budget, start_date, end_date,
                platforms, audiences, archived, created_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8::jsonb, $9::jsonb, $10, $11, $12)
            RETURNING *
            """,
            [
                campaign.id, campaign.client_id, campaign.name, campaign.status.value,
                campaign.budget, campaign.start_date, campaign.end_date,
                json_dumps(campaign.platforms.model_dump()), json_dumps(campaign.audiences),
                campaign.archived, campaign.created_at, campaign.updated_at,
            ],
        )
        return self._row_to_campaign(row)

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        row = await self.db.query_row(
            f"SELECT * FROM {self.schema}.campaigns WHERE id = $1", [campaign_id]
        )
        return self._row_to_campaign(row) if row else None

    async def update_campaign_fields(self, campaign: Campaign) -> Optional[Campaign]:
        row = await self.db.query_row(
            f"""
            UPDATE {self.schema}.campaigns
            SET name = $2, budget = $3, start_date = $4, end_date = $5,
                platforms = $6::jsonb, audiences = $7::jsonb, updated_at = NOW()
            WHERE id = $1 AND status = 'draft'
            RETURNING *
            """,
            [
                campaign.id, campaign.name, campaign.budget, campaign.start_date, campaign.end_date,
                json_dumps(campaign.platforms.model_dump()), json_dumps(campaign.audiences),
            ],
        )
        return self._row_to_campaign(row) if row else None

    async def update_campaign_status_if(
        self,
        campaign_id: str,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
    ) -> Optional[Campaign]:
        row = await self.db.query_row(
            f"""
            UPDATE {self.schema}.campaigns
            SET status = $3, updated_at = NOW()
            WHERE id = $1 AND status = $2
            RETURNING *
            """,
            [campaign_id, expected_status.value, new_status.value],
        )
        return self._row_to_campaign(row) if row else None

    async def set_campaign_archived(self, campaign_id: str, archived: bool) -> Optional[Campaign]:
        row = await self.db.query_row(
            f"""
            UPDATE {self.schema}.campaigns SET archived = $2, updated_at = NOW()
            WHERE id = $1 RETURNING *
            """,
            [campaign_id, archived],
        )
        return self._row_to_campaign(row) if row else None

    async def delete_campaign(self, campaign_id: str) -> bool:
        status = await self.db.execute(
            f"DELETE FROM {self.schema}.campaigns WHERE id = $1", [campaign_id]
        )
        return status.endswith(" 1")

    async def list_campaigns(
        self,
        company_id: Optional[str] = None,
        include_archived: bool = False,
        status: Optional[CampaignStatus] = None,
    ) -> List[Campaign]:
        conditions = []
        params: List[Any] = []
        if company_id is not None:
            params.append(company_id)
            conditions.append(f"u.company_id = ${len(params)}")
        if not include_archived:
            conditions.append("c.archived = FALSE")
        if status is not None:
            params.append(status.value)
            conditions.append(f"c.status = ${len(params)}")

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        rows = await self.db.query(
            f"""
            SELECT c.* FROM {self.schema}.campaigns c
            JOIN {self.schema}.users u ON u.id = c.client_id
            {where}
            ORDER BY c.created_at DESC
            """,
            params,
        )
        return [self._row_to_campaign(row) for row in rows]

    # ====================
    # Audience Requests
    # ====================

    async def save_request(self, request: AudienceRequest) -> AudienceRequest:
        try:
            row = await self.db.query_row(
                f"""
                INSERT INTO {self.schema}.audience_requests (
                    id, campaign_id, client_id, audiences, platforms, budget,
                    start_date, end_date, status, notes, created_at, updated_at
                ) VALUES ($1, $2, $3, $4::jsonb, $5::jsonb, $6, $7, $8, $9, $10, $11, $12)
                RETURNING *
                """,
                [
                    request.id, request.campaign_id, request.client_id,
                    json_dumps(request.audiences), json_dumps(request.platforms.model_dump()),
                    request.budget, request.start_date, request.end_date,
                    request.status.value, request.notes, request.created_at, request.updated_at,
                ],
            )
        except asyncpg.UniqueViolationError as e:
            raise ConflictingRequestError(
                f"Campaign {request.campaign_id} already has an open audience request",
                campaign_id=request.campaign_id,
            ) from e
        return self._row_to_request(row)

    async def get_request(self, request_id: str) -> Optional[AudienceRequest]:
        row = await self.db.query_row(
            f"SELECT * FROM {self.schema}.audience_requests WHERE id = $1", [request_id]
        )
        return self._row_to_request(row) if row else None

    async def get_open_request(self, campaign_id: str) -> Optional[AudienceRequest]:
        row = await self.db.query_row(
            f"""
            SELECT * FROM {self.schema}.audience_requests
            WHERE campaign_id = $1 AND status IN ('pending', 'reviewed')
            """,
            [campaign_id],
        )
        return self._row_to_request(row) if row else None

    async def update_request_status_if(
        self,
        request_id: str,
        expected_statuses: Iterable[RequestStatus],
        new_status: RequestStatus,
        notes: Optional[str] = None,
        decided_by: Optional[str] = None,
        decided_at: Optional[datetime] = None,
    ) -> Optional[AudienceRequest]:
        row = await self.db.query_row(
            f"""
            UPDATE {self.schema}.audience_requests
            SET status = $3,
                notes = COALESCE($4, notes),
                decided_by = COALESCE($5, decided_by),
                decided_at = COALESCE($6, decided_at),
                updated_at = NOW()
            WHERE id = $1 AND status = ANY($2::text[])
            RETURNING *
            """,
            [
                request_id, [s.value for s in expected_statuses], new_status.value,
                notes, decided_by, decided_at,
            ],
        )
        return self._row_to_request(row) if row else None

    async def delete_requests_for_campaign(self, campaign_id: str) -> int:
        status = await self.db.execute(
            f"DELETE FROM {self.schema}.audience_requests WHERE campaign_id = $1", [campaign_id]
        )
        return int(status.split()[-1])

    # ====================
    # Audit Trail
    # ====================

    async def append_workflow_history(self, entry: WorkflowHistoryEntry) -> WorkflowHistoryEntry:
        row = await self.db.query_row(
            f"""
            INSERT INTO {self.schema}.workflow_history (
                id, campaign_id, from_status, to_status, actor_id, note, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7) RETURNING *
            """,
            [
                entry.id, entry.campaign_id, entry.from_status.value, entry.to_status.value,
                entry.actor_id, entry.note, entry.created_at,
            ],
        )
        return self._row_to_history(row)

    async def list_workflow_history(
        self, campaign_id: str, after_sequence: int = 0
    ) -> List[WorkflowHistoryEntry]:
        rows = await self.db.query(
            f"""
            SELECT * FROM {self.schema}.workflow_history
            WHERE campaign_id = $1 AND sequence > $2
            ORDER BY sequence
            """,
            [campaign_id, after_sequence],
        )
        return [self._row_to_history(row) for row in rows]

    async def append_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        row = await self.db.query_row(
            f"""
            INSERT INTO {self.schema}.activity_log (id, campaign_id, actor_id, kind, payload, created_at)
            VALUES ($1, $2, $3, $4, $5::jsonb, $6) RETURNING *
            """,
            [
                entry.id, entry.campaign_id, entry.actor_id, entry.kind.value,
                json_dumps(entry.payload), entry.created_at,
            ],
        )
        return self._row_to_activity(row)

    async def list_activity(self, campaign_id: str) -> List[ActivityLogEntry]:
        rows = await self.db.query(
            f"SELECT * FROM {self.schema}.activity_log WHERE campaign_id = $1 ORDER BY sequence",
            [campaign_id],
        )
        return [self._row_to_activity(row) for row in rows]

    # ====================
    # Comments
    # ====================

    async def save_comment(self, comment: CampaignComment) -> CampaignComment:
        row = await self.db.query_row(
            f"""
            INSERT INTO {self.schema}.campaign_comments (
                id, campaign_id, user_id, content, parent_comment_id, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6) RETURNING *
            """,
            [
                comment.id, comment.campaign_id, comment.user_id, comment.content,
                comment.parent_comment_id, comment.created_at,
            ],
        )
        return CampaignComment(**row)

    async def get_comment(self, comment_id: str) -> Optional[CampaignComment]:
        row = await self.db.query_row(
            f"SELECT * FROM {self.schema}.campaign_comments WHERE id = $1", [comment_id]
        )
        return CampaignComment(**row) if row else None

    async def delete_comment(self, comment_id: str) -> bool:
        status = await self.db.execute(
            f"DELETE FROM {self.schema}.campaign_comments WHERE id = $1", [comment_id]
        )
        return status.endswith(" 1")

    async def list_comments(self, campaign_id: str) -> List[CampaignComment]:
        rows = await self.db.query(
            f"""
            SELECT * FROM {self.schema}.campaign_comments
            WHERE campaign_id = $1 ORDER BY created_at
            """,
            [campaign_id],
        )
        return [CampaignComment(**row) for row in rows]

    async def delete_comments_for_campaign(self, campaign_id: str) -> int:
        status = await self.db.execute(
            f"DELETE FROM {self.schema}.campaign_comments WHERE campaign_id = $1", [campaign_id]
        )
        return int(status.split()[-1])

    # ====================
    # Notifications
    # ====================

    async def save_notification(self, notification: Notification) -> Notification:
        row = await self.db.query_row(
            f"""
            INSERT INTO {self.schema}.notifications (
                id, user_id, title, message, campaign_id, read, created_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7) RETURNING *
            """,
            [
                notification.id, notification.user_id, notification.title, notification.message,
                notification.campaign_id, notification.read, notification.created_at,
            ],
        )
        return Notification(**row)

    async def get_notification(self, notification_id: str) -> Optional[Notification]:
        row = await self.db.query_row(
            f"SELECT * FROM {self.schema}.notifications WHERE id = $1", [notification_id]
        )
        return Notification(**row) if row else None

    async def list_notifications(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        query = f"SELECT * FROM {self.schema}.notifications WHERE user_id = $1"
        if unread_only:
            query += " AND read = FALSE"
        rows = await self.db.query(query + " ORDER BY created_at DESC", [user_id])
        return [Notification(**row) for row in rows]

    async def mark_notification_read(self, notification_id: str) -> Optional[Notification]:
        row = await self.db.query_row(
            f"UPDATE {self.schema}.notifications SET read = TRUE WHERE id = $1 RETURNING *",
            [notification_id],
        )
        return Notification(**row) if row else None

    async def mark_all_notifications_read(self, user_id: str) -> int:
        status = await self.db.execute(
            f"UPDATE {self.schema}.notifications SET read = TRUE WHERE user_id = $1 AND read = FALSE",
            [user_id],
        )
        return int(status.split()[-1])

    async def delete_notification(self, notification_id: str) -> bool:
        status = await self.db.execute(
            f"DELETE FROM {self.schema}.notifications WHERE id = $1", [notification_id]
        )
        return status.endswith(" 1")

    # ====================
    # Row Mapping
    # ====================

    def _row_to_user(self, row: Dict[str, Any]) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            name=row.get("name") or "",
            company_id=row.get("company_id"),
            role=UserRole(row["role"]),
            created_at=row["created_at"],
        )

    def _row_to_campaign(self, row: Dict[str, Any]) -> Campaign:
        """Convert database row to Campaign model"""
        return Campaign(
            id=row["id"],
            client_id=row["client_id"],
            name=row["name"],
            status=CampaignStatus(row["status"]),
            budget=Decimal(str(row.get("budget") or 0)),
            start_date=row.get("start_date"),
            end_date=row.get("end_date"),
            platforms=CampaignPlatforms(**_json(row.get("platforms"), {})),
            audiences=_json(row.get("audiences"), []),
            archived=row.get("archived", False),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _row_to_request(self, row: Dict[str, Any]) -> AudienceRequest:
        return AudienceRequest(
            id=row["id"],
            campaign_id=row["campaign_id"],
            client_id=row["client_id"],
            audiences=_json(row.get("audiences"), []),
            platforms=CampaignPlatforms(**_json(row.get("platforms"), {})),
            budget=Decimal(str(row.get("budget") or 0)),
            start_date=row.get("start_date"),
            end_date=row.get("end_date"),
            status=RequestStatus(row["status"]),
            notes=row.get("notes"),
            decided_by=row.get("decided_by"),
            decided_at=row.get("decided_at"),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _row_to_history(self, row: Dict[str, Any]) -> WorkflowHistoryEntry:
        return WorkflowHistoryEntry(
            id=row["id"],
            campaign_id=row["campaign_id"],
            from_status=CampaignStatus(row["from_status"]),
            to_status=CampaignStatus(row["to_status"]),
            actor_id=row["actor_id"],
            note=row.get("note"),
            sequence=row["sequence"],
            created_at=row["created_at"],
        )

    def _row_to_activity(self, row: Dict[str, Any]) -> ActivityLogEntry:
        return ActivityLogEntry(
            id=row["id"],
            campaign_id=row["campaign_id"],
            actor_id=row["actor_id"],
            kind=ActivityKind(row["kind"]),
            payload=_json(row.get("payload"), {}),
            sequence=row["sequence"],
            created_at=row["created_at"],
        )


__all__ = ["WorkflowRepository", "json_dumps"]
