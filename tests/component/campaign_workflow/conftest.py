"""
Component Test Fixtures for Campaign Workflow Service

Wires the real service classes onto the in-memory repository, event bus
and notification sink, and seeds two tenants:

    company C: owner U, admin M, second admin M2, member V
    company D: user U2, admin AD
    platform:  super admin S (privileged e-mail domain, no company)
"""

import os
import sys
from types import SimpleNamespace

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_workflow_service.campaign_workflow_service import CampaignWorkflowService
from microservices.campaign_workflow_service.models import CampaignStatus, UserRole
from tests.contracts.campaign_workflow.data_contract import CampaignWorkflowTestDataFactory

from .mocks import MockEventBus, MockNotificationSink, MockWorkflowRepository


@pytest.fixture
def factory():
    return CampaignWorkflowTestDataFactory()


@pytest.fixture
def mock_repository():
    return MockWorkflowRepository()


@pytest.fixture
def mock_event_bus():
    return MockEventBus()


@pytest.fixture
def mock_sink():
    return MockNotificationSink()


@pytest.fixture
def service(mock_repository, mock_event_bus, mock_sink):
    return CampaignWorkflowService(
        repository=mock_repository,
        event_bus=mock_event_bus,
        notification_sink=mock_sink,
        super_admin_domains=("boostdata.io",),
    )


@pytest.fixture
def seeded(mock_repository, factory):
    """Two tenants, their members and the shared segment taxonomy"""
    company_c = factory.make_company(name="Acme Retail")
    company_d = factory.make_company(name="Globex Foods")

    owner = factory.make_user(company_id=company_c.id, name="Uma Owner")
    admin = factory.make_user(company_id=company_c.id, role=UserRole.ADMIN, name="Mo Admin")
    admin_2 = factory.make_user(company_id=company_c.id, role=UserRole.ADMIN, name="Max Admin")
    member = factory.make_user(company_id=company_c.id, name="Val Member")
    other_user = factory.make_user(company_id=company_d.id, name="Ursa Outsider")
    other_admin = factory.make_user(company_id=company_d.id, role=UserRole.ADMIN, name="Ada Outsider")
    super_admin = factory.make_user(
        company_id=None,
        role=UserRole.SUPER_ADMIN,
        email="ops@boostdata.io",
        name="Sam Super",
    )

    segment_auto = factory.make_segment(name="In-market auto intenders")
    segment_travel = factory.make_segment(name="Frequent travellers", category="Travel")
    segment_parents = factory.make_segment(name="New parents", category="Family")
    account = factory.make_account_id(company_c.id)

    mock_repository.seed(
        company_c, company_d,
        owner, admin, admin_2, member, other_user, other_admin, super_admin,
        segment_auto, segment_travel, segment_parents,
        account,
    )

    return SimpleNamespace(
        company_c=company_c,
        company_d=company_d,
        owner=owner,
        admin=admin,
        admin_2=admin_2,
        member=member,
        other_user=other_user,
        other_admin=other_admin,
        super_admin=super_admin,
        segments=[segment_auto, segment_travel, segment_parents],
        account=account,
    )


@pytest.fixture
def draft_campaign(mock_repository, seeded, factory):
    """Draft campaign X owned by U in company C"""
    campaign = factory.make_campaign(
        client_id=seeded.owner.id,
        audiences=[seeded.segments[0].id, seeded.segments[1].id],
    )
    mock_repository.seed(campaign)
    return campaign


@pytest.fixture
async def submitted(service, draft_campaign, seeded):
    """Campaign X submitted by its owner; returns the open request"""
    return await service.submit_campaign(draft_campaign.id, seeded.owner.id)


@pytest.fixture
def campaign_in_status(mock_repository, seeded, factory):
    """Seed a campaign owned by U directly in a given status"""

    def _make(status: CampaignStatus, **overrides):
        campaign = factory.make_campaign(client_id=seeded.owner.id, status=status, **overrides)
        mock_repository.seed(campaign)
        return campaign

    return _make
