"""
API Test Fixtures for Campaign Workflow Service

Runs the FastAPI app in-process. The module-level factory in main is
replaced with one holding the real service on top of in-memory mocks.
"""

import os
import sys
from types import SimpleNamespace

import httpx
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_workflow_service import main
from microservices.campaign_workflow_service.campaign_workflow_service import CampaignWorkflowService
from microservices.campaign_workflow_service.models import UserRole
from tests.component.campaign_workflow.mocks import (
    MockEventBus,
    MockNotificationSink,
    MockWorkflowRepository,
)
from tests.contracts.campaign_workflow.data_contract import CampaignWorkflowTestDataFactory


# ====================
# Wiring
# ====================


@pytest.fixture
def factory():
    return CampaignWorkflowTestDataFactory()


@pytest.fixture
def mock_repository():
    return MockWorkflowRepository()


@pytest.fixture
def service(mock_repository):
    return CampaignWorkflowService(
        repository=mock_repository,
        event_bus=MockEventBus(),
        notification_sink=MockNotificationSink(),
    )


@pytest.fixture
def app_factory(monkeypatch, service, mock_repository):
    """Stand-in for CampaignWorkflowServiceFactory"""
    fake = SimpleNamespace(service=service, repository=mock_repository, nats_client=None)
    monkeypatch.setattr(main, "factory", fake)
    return fake


@pytest.fixture
async def http_client(app_factory):
    """Async HTTP client bound to the ASGI app"""
    transport = httpx.ASGITransport(app=main.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def bare_client(monkeypatch):
    """Client for an app whose factory never initialized"""
    monkeypatch.setattr(main, "factory", None)
    transport = httpx.ASGITransport(app=main.app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ====================
# Data
# ====================


@pytest.fixture
def seeded(mock_repository, factory):
    """Company C with owner, admin and member; company D with one user"""
    company_c = factory.make_company()
    company_d = factory.make_company()
    owner = factory.make_user(company_id=company_c.id)
    admin = factory.make_user(company_id=company_c.id, role=UserRole.ADMIN)
    member = factory.make_user(company_id=company_c.id)
    outsider = factory.make_user(company_id=company_d.id)
    super_admin = factory.make_user(role=UserRole.SUPER_ADMIN, email="ops@boostdata.io")
    segment = factory.make_segment()

    mock_repository.seed(company_c, company_d, owner, admin, member, outsider, super_admin, segment)

    return SimpleNamespace(
        company_c=company_c,
        company_d=company_d,
        owner=owner,
        admin=admin,
        member=member,
        outsider=outsider,
        super_admin=super_admin,
        segment=segment,
    )


@pytest.fixture
def draft_campaign(mock_repository, seeded, factory):
    campaign = factory.make_campaign(client_id=seeded.owner.id, audiences=[seeded.segment.id])
    mock_repository.seed(campaign)
    return campaign
