"""
Campaign Workflow Service

Authorization and workflow engine for the marketing-audience platform:
- Tenant-scoped record authorization (user / admin / super_admin)
- Campaign lifecycle state machine with an append-only audit trail
- Audience request submission and approval
- In-app notifications for campaign owners

Port: 8251
"""

__version__ = "1.0.0"
__service__ = "campaign_workflow_service"
