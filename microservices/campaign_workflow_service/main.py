"""
Campaign Workflow Service Main Application

FastAPI application for campaign authorization and workflow.
Port: 8251
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from core.config import configure_logging, get_settings

from .factory import CampaignWorkflowServiceFactory
from .models import (
    ActivityLogEntry,
    AudienceRequest,
    AuthorizationResult,
    AuthorizeRequest,
    Campaign,
    CampaignComment,
    CampaignCreateRequest,
    CampaignStatus,
    CampaignUpdateMessageRequest,
    CampaignUpdateRequest,
    CommentCreateRequest,
    Company,
    CompanyCreateRequest,
    DecisionRequest,
    DecisionResult,
    HealthResponse,
    LivenessResponse,
    Notification,
    ReadinessResponse,
    RoleChangeRequest,
    TransitionRequest,
    User,
    UserRegisterRequest,
    WorkflowHistoryEntry,
)
from .protocols import (
    AccessDeniedError,
    ConcurrencyConflictError,
    ConflictingRequestError,
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
)

settings = get_settings()
configure_logging(settings.logging)
logger = logging.getLogger(__name__)

# Service configuration
SERVICE_NAME = "campaign_workflow_service"
SERVICE_PORT = settings.service_port
SERVICE_VERSION = "1.0.0"

# Track startup time for uptime calculation
startup_time = time.time()

# Global factory instance
factory: Optional[CampaignWorkflowServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    logger.info(f"Starting {SERVICE_NAME} on port {SERVICE_PORT}")

    factory = CampaignWorkflowServiceFactory(settings)
    await factory.initialize()

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")
    await factory.close()


# Create FastAPI application
app = FastAPI(
    title="Campaign Workflow Service",
    description="Tenant-scoped authorization and campaign approval workflow",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


@app.exception_handler(ForbiddenError)
async def forbidden_handler(request: Request, exc: ForbiddenError):
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"detail": str(exc)},
    )


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError):
    # Records of other tenants look the same as missing ones
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Not found"},
    )


@app.exception_handler(InvalidTransitionError)
@app.exception_handler(InvalidStateError)
@app.exception_handler(ConflictingRequestError)
@app.exception_handler(ConcurrencyConflictError)
async def conflict_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors(include_url=False, include_context=False, include_input=False)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "type": type(exc).__name__},
    )


# ====================
# Dependencies
# ====================


def get_service():
    """Get campaign workflow service from factory"""
    if not factory:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not initialized",
        )
    return factory.service


def get_actor_id(x_user_id: Optional[str] = Header(None, alias="X-User-ID")) -> str:
    """Authenticated user id forwarded by the gateway"""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-ID header",
        )
    return x_user_id


# ====================
# Health Endpoints
# ====================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    dependencies = {}

    if factory:
        try:
            db_healthy = await factory.repository.health_check()
            dependencies["postgres"] = "healthy" if db_healthy else "unhealthy"
        except Exception:
            dependencies["postgres"] = "unhealthy"

        if factory.nats_client:
            dependencies["nats"] = "healthy" if factory.nats_client.is_connected else "unhealthy"
        else:
            dependencies["nats"] = "not_configured"

    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        port=SERVICE_PORT,
        version=SERVICE_VERSION,
        dependencies=dependencies,
    )


@app.get("/health/ready", response_model=ReadinessResponse, tags=["Health"])
async def readiness_check():
    """Readiness check endpoint"""
    checks = {}
    details = {}

    if factory:
        try:
            db_healthy = await factory.repository.health_check()
            checks["database"] = db_healthy
            details["database"] = "Connected" if db_healthy else "Connection failed"
        except Exception as e:
            checks["database"] = False
            details["database"] = str(e)

        if factory.nats_client:
            checks["nats"] = factory.nats_client.is_connected
            details["nats"] = "Connected" if factory.nats_client.is_connected else "Disconnected"
        else:
            checks["nats"] = True  # Optional
            details["nats"] = "Not configured (optional)"
    else:
        checks["factory"] = False
        details["factory"] = "Factory not initialized"

    ready = all(checks.get(k, False) for k in ["database"])

    return ReadinessResponse(ready=ready, checks=checks, details=details)


@app.get("/health/live", response_model=LivenessResponse, tags=["Health"])
async def liveness_check():
    """Liveness check endpoint"""
    return LivenessResponse(alive=True, uptime_seconds=time.time() - startup_time)


# ====================
# Authorization
# ====================


@app.post("/api/v1/authorize", response_model=AuthorizationResult, tags=["Authorization"])
async def authorize(
    request: AuthorizeRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Check whether the caller may perform an operation on a record"""
    return await service.authorize(actor_id, request.entity_class, request.entity_ref, request.operation)


# ====================
# Campaign Endpoints
# ====================


@app.post(
    "/api/v1/campaigns",
    response_model=Campaign,
    status_code=status.HTTP_201_CREATED,
    tags=["Campaigns"],
)
async def create_campaign(
    request: CampaignCreateRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Create a draft campaign owned by the caller"""
    return await service.create_campaign(actor_id, request)


@app.get("/api/v1/campaigns", response_model=List[Campaign], tags=["Campaigns"])
async def list_campaigns(
    include_archived: bool = Query(False),
    campaign_status: Optional[CampaignStatus] = Query(None, alias="status"),
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.list_campaigns(actor_id, include_archived, campaign_status)


@app.get("/api/v1/campaigns/{campaign_id}", response_model=Campaign, tags=["Campaigns"])
async def get_campaign(
    campaign_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.get_campaign(campaign_id, actor_id)


@app.patch("/api/v1/campaigns/{campaign_id}", response_model=Campaign, tags=["Campaigns"])
async def update_campaign(
    campaign_id: str,
    request: CampaignUpdateRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Edit a draft campaign"""
    return await service.update_campaign(campaign_id, actor_id, request)


@app.delete("/api/v1/campaigns/{campaign_id}", tags=["Campaigns"])
async def delete_campaign(
    campaign_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Delete a draft or finished campaign"""
    deleted = await service.delete_campaign(campaign_id, actor_id)
    return {"success": deleted, "message": "Campaign deleted" if deleted else "Campaign not deleted"}


@app.post(
    "/api/v1/campaigns/{campaign_id}/submit",
    response_model=AudienceRequest,
    status_code=status.HTTP_201_CREATED,
    tags=["Workflow"],
)
async def submit_campaign(
    campaign_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Submit a draft campaign as an audience request"""
    return await service.submit_campaign(campaign_id, actor_id)


@app.post("/api/v1/campaigns/{campaign_id}/transition", response_model=Campaign, tags=["Workflow"])
async def transition_campaign(
    campaign_id: str,
    request: TransitionRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Manual status change by a company admin"""
    return await service.transition_campaign(campaign_id, actor_id, request.to_status, request.notes)


@app.post("/api/v1/campaigns/{campaign_id}/archive", response_model=Campaign, tags=["Campaigns"])
async def archive_campaign(
    campaign_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.archive_campaign(campaign_id, actor_id)


@app.post("/api/v1/campaigns/{campaign_id}/unarchive", response_model=Campaign, tags=["Campaigns"])
async def unarchive_campaign(
    campaign_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.unarchive_campaign(campaign_id, actor_id)


@app.get(
    "/api/v1/campaigns/{campaign_id}/history",
    response_model=List[WorkflowHistoryEntry],
    tags=["Audit"],
)
async def list_workflow_history(
    campaign_id: str,
    after_sequence: int = Query(0, ge=0),
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Status history, resumable with after_sequence"""
    return await service.list_workflow_history(campaign_id, actor_id, after_sequence)


@app.get(
    "/api/v1/campaigns/{campaign_id}/activity",
    response_model=List[ActivityLogEntry],
    tags=["Audit"],
)
async def list_activity(
    campaign_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.list_activity(campaign_id, actor_id)


@app.post(
    "/api/v1/campaigns/{campaign_id}/updates",
    response_model=Optional[Notification],
    tags=["Notifications"],
)
async def send_campaign_update(
    campaign_id: str,
    request: CampaignUpdateMessageRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Send the campaign owner an update without changing status"""
    return await service.send_campaign_update(campaign_id, actor_id, request.message)


# ====================
# Comment Endpoints
# ====================


@app.get(
    "/api/v1/campaigns/{campaign_id}/comments",
    response_model=List[CampaignComment],
    tags=["Comments"],
)
async def list_comments(
    campaign_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.list_comments(campaign_id, actor_id)


@app.post(
    "/api/v1/campaigns/{campaign_id}/comments",
    response_model=CampaignComment,
    status_code=status.HTTP_201_CREATED,
    tags=["Comments"],
)
async def add_comment(
    campaign_id: str,
    request: CommentCreateRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.add_comment(campaign_id, actor_id, request.content, request.parent_comment_id)


@app.delete("/api/v1/comments/{comment_id}", tags=["Comments"])
async def delete_comment(
    comment_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    deleted = await service.delete_comment(comment_id, actor_id)
    return {"success": deleted}


# ====================
# Audience Request Endpoints
# ====================


@app.get("/api/v1/requests/{request_id}", response_model=AudienceRequest, tags=["Workflow"])
async def get_request(
    request_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.get_request(request_id, actor_id)


@app.post("/api/v1/requests/{request_id}/review", response_model=AudienceRequest, tags=["Workflow"])
async def mark_request_under_review(
    request_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Flag a pending request as under review"""
    return await service.mark_request_under_review(request_id, actor_id)


@app.post("/api/v1/requests/{request_id}/decision", response_model=DecisionResult, tags=["Workflow"])
async def decide_request(
    request_id: str,
    request: DecisionRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    """Approve or reject an audience request"""
    return await service.decide_request(request_id, actor_id, request.outcome, request.notes)


# ====================
# Notification Endpoints
# ====================


@app.get("/api/v1/notifications", response_model=List[Notification], tags=["Notifications"])
async def list_notifications(
    unread_only: bool = Query(False),
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.list_notifications(actor_id, unread_only)


@app.post("/api/v1/notifications/read-all", tags=["Notifications"])
async def mark_all_notifications_read(
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    updated = await service.mark_all_notifications_read(actor_id)
    return {"updated": updated}


@app.post(
    "/api/v1/notifications/{notification_id}/read",
    response_model=Notification,
    tags=["Notifications"],
)
async def mark_notification_read(
    notification_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.mark_notification_read(notification_id, actor_id)


@app.delete("/api/v1/notifications/{notification_id}", tags=["Notifications"])
async def delete_notification(
    notification_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    deleted = await service.delete_notification(notification_id, actor_id)
    return {"success": deleted}


# ====================
# Tenant Administration Endpoints
# ====================


@app.post(
    "/api/v1/companies",
    response_model=Company,
    status_code=status.HTTP_201_CREATED,
    tags=["Tenants"],
)
async def create_company(
    request: CompanyCreateRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.create_company(actor_id, request.name, request.account_id)


@app.post(
    "/api/v1/users",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    tags=["Tenants"],
)
async def register_user(
    request: UserRegisterRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
    actor_email: Optional[str] = Header(None, alias="X-User-Email"),
):
    """
    Create a user profile.

    When user_id is omitted or equals the caller, the caller registers
    themselves with the gateway-verified X-User-Email; the body e-mail is
    ignored. Otherwise the caller invites user_id into company_id.
    """
    if request.user_id is None or request.user_id == actor_id:
        if not actor_email:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing X-User-Email header",
            )
        return await service.register_user(actor_id, actor_email, request.name, request.company_id)

    if not request.email:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="email is required when inviting a user",
        )
    return await service.register_user(
        request.user_id, request.email, request.name, request.company_id, invited_by=actor_id
    )


@app.put("/api/v1/users/{user_id}/role", response_model=User, tags=["Tenants"])
async def change_user_role(
    user_id: str,
    request: RoleChangeRequest,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    return await service.change_user_role(user_id, actor_id, request.role)


@app.delete("/api/v1/users/{user_id}", tags=["Tenants"])
async def remove_user(
    user_id: str,
    service=Depends(get_service),
    actor_id: str = Depends(get_actor_id),
):
    deleted = await service.remove_user(user_id, actor_id)
    return {"success": deleted}


def main():
    """Run the service"""
    import uvicorn

    uvicorn.run(
        "microservices.campaign_workflow_service.main:app",
        host=settings.service_host,
        port=SERVICE_PORT,
        reload=settings.debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
