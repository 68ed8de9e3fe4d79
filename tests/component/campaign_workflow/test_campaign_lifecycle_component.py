"""
Campaign Workflow - Component Tests (Campaign Lifecycle)

Tests for:
- Draft creation and editing with activity logging
- Submission preconditions
- Under-review marker
- Manual admin transitions
- Archiving and deletion
"""

from decimal import Decimal

import pytest

from microservices.campaign_workflow_service.models import (
    ActivityKind,
    AudienceRequest,
    CampaignPlatforms,
    CampaignStatus,
    DecisionOutcome,
    RequestStatus,
)
from microservices.campaign_workflow_service.notification_emitter import TITLE_STATUS_UPDATED
from microservices.campaign_workflow_service.protocols import (
    AccessDeniedError,
    ConflictingRequestError,
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
)

pytestmark = [pytest.mark.component, pytest.mark.asyncio]


def _kinds(entries):
    return [e.kind for e in entries]


# ============================================================================
# Drafting
# ============================================================================


class TestCreateCampaign:
    """Draft creation"""

    async def test_create_draft_owned_by_actor(self, service, mock_repository, seeded, factory):
        # Given: a create request with a duplicated segment
        segment = seeded.segments[0].id
        data = factory.make_create_request(audiences=[segment, seeded.segments[1].id, segment])

        # When: U creates the campaign
        campaign = await service.create_campaign(seeded.owner.id, data)

        # Then: it is a draft owned by U with de-duplicated audiences
        assert campaign.status == CampaignStatus.DRAFT
        assert campaign.client_id == seeded.owner.id
        assert campaign.audiences == [segment, seeded.segments[1].id]
        assert campaign.id in mock_repository.campaigns

        activity = await service.list_activity(campaign.id, seeded.owner.id)
        assert _kinds(activity) == [ActivityKind.CREATED]

    async def test_create_with_unknown_segment(self, service, mock_repository, seeded, factory):
        data = factory.make_create_request(audiences=["seg_does_not_exist"])

        with pytest.raises(NotFoundError):
            await service.create_campaign(seeded.owner.id, data)

        assert mock_repository.campaigns == {}

    async def test_unknown_actor(self, service, seeded, factory):
        with pytest.raises(NotFoundError):
            await service.create_campaign("usr_ghost", factory.make_create_request())


class TestUpdateCampaign:
    """Editing drafts"""

    async def test_field_changes_logged_with_old_and_new_values(self, service, seeded, draft_campaign, factory):
        update = factory.make_update_request(name="Spring relaunch", budget=Decimal("30000"))

        updated = await service.update_campaign(draft_campaign.id, seeded.owner.id, update)

        assert updated.name == "Spring relaunch"
        assert updated.budget == Decimal("30000")
        activity = await service.list_activity(draft_campaign.id, seeded.owner.id)
        entry = next(e for e in activity if e.kind == ActivityKind.UPDATED)
        assert entry.payload["old_values"]["name"] == "Spring launch"
        assert entry.payload["new_values"]["name"] == "Spring relaunch"
        assert entry.payload["new_values"]["budget"] == "30000"

    async def test_audience_changes_logged_per_segment(self, service, seeded, draft_campaign, factory):
        kept, dropped, added = (s.id for s in seeded.segments)
        update = factory.make_update_request(audiences=[kept, added])

        updated = await service.update_campaign(draft_campaign.id, seeded.owner.id, update)

        assert updated.audiences == [kept, added]
        activity = await service.list_activity(draft_campaign.id, seeded.owner.id)
        added_entries = [e for e in activity if e.kind == ActivityKind.AUDIENCE_ADDED]
        removed_entries = [e for e in activity if e.kind == ActivityKind.AUDIENCE_REMOVED]
        assert [e.payload["segment_id"] for e in added_entries] == [added]
        assert [e.payload["segment_id"] for e in removed_entries] == [dropped]
        assert not any(e.kind == ActivityKind.UPDATED for e in activity)

    async def test_platforms_update(self, service, seeded, draft_campaign, factory):
        update = factory.make_update_request(platforms=CampaignPlatforms(social=["snapchat"]))

        updated = await service.update_campaign(draft_campaign.id, seeded.owner.id, update)

        assert updated.platforms.social == ["snapchat"]
        assert updated.platforms.programmatic == []

    async def test_submitted_campaign_cannot_be_edited(self, service, seeded, submitted, factory):
        with pytest.raises(InvalidStateError):
            await service.update_campaign(
                submitted.campaign_id, seeded.owner.id, factory.make_update_request(name="Too late")
            )

    async def test_edit_losing_to_submission_is_invalid_state(
        self, service, mock_repository, seeded, draft_campaign, factory, monkeypatch
    ):
        # Given: the campaign is submitted between the edit's read and its write
        write_fields = mock_repository.update_campaign_fields

        async def submitted_meanwhile(campaign):
            stored = mock_repository.campaigns[campaign.id]
            mock_repository.campaigns[campaign.id] = stored.model_copy(update={"status": CampaignStatus.SUBMITTED})
            return await write_fields(campaign)

        monkeypatch.setattr(mock_repository, "update_campaign_fields", submitted_meanwhile)

        # When / Then: the edit reports the state, not a missing record
        with pytest.raises(InvalidStateError) as exc_info:
            await service.update_campaign(draft_campaign.id, seeded.owner.id, factory.make_update_request(name="Late"))

        assert exc_info.value.current_status == CampaignStatus.SUBMITTED.value
        assert mock_repository.campaigns[draft_campaign.id].name == draft_campaign.name

    async def test_teammate_cannot_edit(self, service, seeded, draft_campaign, factory):
        with pytest.raises(ForbiddenError):
            await service.update_campaign(
                draft_campaign.id, seeded.member.id, factory.make_update_request(name="Mine now")
            )

    async def test_admin_can_edit(self, service, seeded, draft_campaign, factory):
        updated = await service.update_campaign(
            draft_campaign.id, seeded.admin.id, factory.make_update_request(name="Admin edit")
        )
        assert updated.name == "Admin edit"

    async def test_end_before_start_rejected(self, service, seeded, draft_campaign, factory):
        update = factory.make_update_request(end_date=draft_campaign.start_date.replace(year=2000))

        with pytest.raises(ValueError):
            await service.update_campaign(draft_campaign.id, seeded.owner.id, update)


class TestListCampaigns:
    """Tenant-filtered listing"""

    async def test_user_sees_company_campaigns_only(self, service, mock_repository, seeded, draft_campaign, factory):
        foreign = factory.make_campaign(client_id=seeded.other_user.id)
        mock_repository.seed(foreign)

        mine = await service.list_campaigns(seeded.member.id)
        everything = await service.list_campaigns(seeded.super_admin.id)

        assert [c.id for c in mine] == [draft_campaign.id]
        assert {c.id for c in everything} == {draft_campaign.id, foreign.id}

    async def test_filter_by_status(self, service, seeded, draft_campaign, campaign_in_status):
        live = campaign_in_status(CampaignStatus.LIVE)

        results = await service.list_campaigns(seeded.owner.id, status=CampaignStatus.LIVE)

        assert [c.id for c in results] == [live.id]


# ============================================================================
# Submission and Review
# ============================================================================


class TestSubmit:
    """Submission preconditions"""

    async def test_request_snapshots_campaign(self, service, seeded, draft_campaign):
        request = await service.submit_campaign(draft_campaign.id, seeded.owner.id)

        assert request.campaign_id == draft_campaign.id
        assert request.client_id == seeded.owner.id
        assert request.audiences == draft_campaign.audiences
        assert request.budget == draft_campaign.budget
        assert request.platforms == draft_campaign.platforms
        assert request.start_date == draft_campaign.start_date

    async def test_non_owner_forbidden(self, service, mock_repository, seeded, draft_campaign):
        with pytest.raises(ForbiddenError):
            await service.submit_campaign(draft_campaign.id, seeded.admin.id)

        assert mock_repository.campaigns[draft_campaign.id].status == CampaignStatus.DRAFT

    async def test_other_tenant_sees_not_found(self, service, seeded, draft_campaign):
        with pytest.raises(AccessDeniedError) as exc_info:
            await service.submit_campaign(draft_campaign.id, seeded.other_user.id)
        assert not isinstance(exc_info.value, ForbiddenError)

    async def test_non_draft_invalid_state(self, service, seeded, submitted):
        with pytest.raises(InvalidStateError):
            await service.submit_campaign(submitted.campaign_id, seeded.owner.id)

    async def test_second_open_request_conflicts(self, service, mock_repository, seeded, draft_campaign):
        # Given: a stale open request left against a draft campaign
        await service.submit_campaign(draft_campaign.id, seeded.owner.id)
        campaign = mock_repository.campaigns[draft_campaign.id]
        mock_repository.campaigns[draft_campaign.id] = campaign.model_copy(update={"status": CampaignStatus.DRAFT})

        with pytest.raises(ConflictingRequestError):
            await service.submit_campaign(draft_campaign.id, seeded.owner.id)

        assert len([r for r in mock_repository.requests.values() if r.is_open]) == 1

    async def test_submission_activity(self, service, seeded, submitted):
        activity = await service.list_activity(submitted.campaign_id, seeded.owner.id)
        entry = activity[-1]
        assert entry.kind == ActivityKind.REQUEST_SUBMITTED
        assert entry.payload["request_id"] == submitted.id


class TestMarkUnderReview:
    """Reviewed marker"""

    async def test_marks_request_and_campaign(self, service, mock_repository, mock_sink, seeded, submitted):
        request = await service.mark_request_under_review(submitted.id, seeded.admin.id)

        assert request.status == RequestStatus.REVIEWED
        assert mock_repository.campaigns[submitted.campaign_id].status == CampaignStatus.PENDING_REVIEW
        # No notification for the marker
        assert mock_repository.notifications == {}
        assert mock_sink.delivered == []

    async def test_repeat_is_noop(self, service, mock_repository, seeded, submitted):
        await service.mark_request_under_review(submitted.id, seeded.admin.id)
        history_count = len(mock_repository.history_for(submitted.campaign_id))

        again = await service.mark_request_under_review(submitted.id, seeded.admin_2.id)

        assert again.status == RequestStatus.REVIEWED
        assert len(mock_repository.history_for(submitted.campaign_id)) == history_count

    async def test_decided_request_invalid_state(self, service, seeded, submitted):
        await service.decide_request(submitted.id, seeded.admin.id, DecisionOutcome.REJECT, notes="No")

        with pytest.raises(InvalidStateError):
            await service.mark_request_under_review(submitted.id, seeded.admin.id)

    async def test_reviewed_request_can_be_decided(self, service, seeded, submitted):
        await service.mark_request_under_review(submitted.id, seeded.admin.id)

        result = await service.decide_request(submitted.id, seeded.admin.id, DecisionOutcome.APPROVE)

        assert result.campaign.status == CampaignStatus.IN_PROGRESS

    async def test_owner_cannot_mark(self, service, seeded, submitted):
        with pytest.raises(ForbiddenError):
            await service.mark_request_under_review(submitted.id, seeded.owner.id)


class TestDecidePreconditions:
    """Authorization and state checks on decisions"""

    async def test_plain_user_forbidden(self, service, mock_repository, seeded, submitted):
        with pytest.raises(ForbiddenError):
            await service.decide_request(submitted.id, seeded.member.id, DecisionOutcome.APPROVE)
        assert mock_repository.requests[submitted.id].status == RequestStatus.PENDING

    async def test_other_company_admin_denied(self, service, seeded, submitted):
        with pytest.raises(AccessDeniedError):
            await service.decide_request(submitted.id, seeded.other_admin.id, DecisionOutcome.APPROVE)

    async def test_unknown_request(self, service, seeded):
        with pytest.raises(NotFoundError):
            await service.decide_request("req_missing", seeded.admin.id, DecisionOutcome.APPROVE)

    async def test_campaign_not_awaiting_decision(self, service, mock_repository, seeded, campaign_in_status):
        # Given: an open request whose campaign already moved on
        campaign = campaign_in_status(CampaignStatus.IN_PROGRESS)
        request = AudienceRequest.snapshot_of(campaign)
        mock_repository.seed(request)

        with pytest.raises(InvalidStateError):
            await service.decide_request(request.id, seeded.admin.id, DecisionOutcome.APPROVE)

        # Then: the claimed request is released again
        assert mock_repository.requests[request.id].status == RequestStatus.PENDING
        assert mock_repository.campaigns[campaign.id].status == CampaignStatus.IN_PROGRESS


# ============================================================================
# Manual Transitions
# ============================================================================


class TestTransitionCampaign:
    """Admin-driven status changes"""

    async def test_admin_moves_to_waiting_on_client(self, service, mock_repository, mock_sink, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.IN_PROGRESS)

        updated = await service.transition_campaign(
            campaign.id, seeded.admin.id, CampaignStatus.WAITING_ON_CLIENT, notes="Need creative assets"
        )

        assert updated.status == CampaignStatus.WAITING_ON_CLIENT
        entry = mock_repository.history_for(campaign.id)[-1]
        assert (entry.from_status, entry.to_status) == (CampaignStatus.IN_PROGRESS, CampaignStatus.WAITING_ON_CLIENT)
        assert entry.actor_id == seeded.admin.id
        assert entry.note == "Need creative assets"

        notification = mock_repository.notifications_for(seeded.owner.id)[0]
        assert notification.title == TITLE_STATUS_UPDATED
        assert "Need creative assets" in notification.message
        assert mock_sink.delivered[0]["campaign_id"] == campaign.id

    async def test_transition_logged_as_activity(self, service, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.IN_PROGRESS)

        await service.transition_campaign(campaign.id, seeded.admin.id, CampaignStatus.LIVE)

        activity = await service.list_activity(campaign.id, seeded.owner.id)
        assert _kinds(activity) == [ActivityKind.STATUS_CHANGED]
        assert activity[0].payload["from_status"] == "in_progress"
        assert activity[0].payload["to_status"] == "live"
        assert activity[0].actor_id == seeded.admin.id

    async def test_every_decision_step_logged(self, service, seeded, submitted):
        await service.decide_request(submitted.id, seeded.admin.id, DecisionOutcome.APPROVE)

        activity = await service.list_activity(submitted.campaign_id, seeded.owner.id)
        steps = [
            (e.payload["from_status"], e.payload["to_status"])
            for e in activity
            if e.kind == ActivityKind.STATUS_CHANGED
        ]
        assert steps == [("draft", "submitted"), ("submitted", "approved"), ("approved", "in_progress")]

    async def test_activity_failure_rolls_back_transition(self, service, mock_repository, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.IN_PROGRESS)
        mock_repository.fail_next("append_activity")

        with pytest.raises(RuntimeError):
            await service.transition_campaign(campaign.id, seeded.admin.id, CampaignStatus.LIVE)

        assert mock_repository.campaigns[campaign.id].status == CampaignStatus.IN_PROGRESS
        assert mock_repository.history_for(campaign.id) == []

    async def test_owner_cannot_change_status(self, service, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.IN_PROGRESS)

        with pytest.raises(ForbiddenError):
            await service.transition_campaign(campaign.id, seeded.owner.id, CampaignStatus.DELIVERED)

    async def test_other_tenant_admin_not_found(self, service, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.IN_PROGRESS)

        with pytest.raises(AccessDeniedError) as exc_info:
            await service.transition_campaign(campaign.id, seeded.other_admin.id, CampaignStatus.DELIVERED)
        assert not isinstance(exc_info.value, ForbiddenError)

    async def test_submission_not_available_as_manual_transition(self, service, seeded, draft_campaign):
        with pytest.raises(InvalidTransitionError):
            await service.transition_campaign(draft_campaign.id, seeded.admin.id, CampaignStatus.SUBMITTED)

    async def test_failed_requires_note(self, service, mock_repository, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.IN_PROGRESS)

        with pytest.raises(InvalidStateError):
            await service.transition_campaign(campaign.id, seeded.admin.id, CampaignStatus.FAILED, notes="  ")

        assert mock_repository.campaigns[campaign.id].status == CampaignStatus.IN_PROGRESS

    async def test_terminal_status_has_no_exits(self, service, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.COMPLETED)

        with pytest.raises(InvalidTransitionError):
            await service.transition_campaign(campaign.id, seeded.super_admin.id, CampaignStatus.IN_PROGRESS)

    async def test_manual_approve_resolves_open_request(self, service, mock_repository, seeded, submitted):
        updated = await service.transition_campaign(submitted.campaign_id, seeded.admin.id, CampaignStatus.APPROVED)

        assert updated.status == CampaignStatus.APPROVED
        request = mock_repository.requests[submitted.id]
        assert request.status == RequestStatus.APPROVED
        assert request.decided_by == seeded.admin.id

    async def test_manual_fail_rejects_open_request(self, service, mock_repository, seeded, submitted):
        await service.transition_campaign(
            submitted.campaign_id, seeded.admin.id, CampaignStatus.FAILED, notes="Client withdrew"
        )

        request = mock_repository.requests[submitted.id]
        assert request.status == RequestStatus.REJECTED
        assert request.notes == "Client withdrew"

    async def test_manual_fail_rolls_back_request_on_history_failure(self, service, mock_repository, seeded, submitted):
        mock_repository.fail_next("append_workflow_history")

        with pytest.raises(RuntimeError):
            await service.transition_campaign(
                submitted.campaign_id, seeded.admin.id, CampaignStatus.FAILED, notes="Client withdrew"
            )

        assert mock_repository.requests[submitted.id].status == RequestStatus.PENDING
        assert mock_repository.campaigns[submitted.campaign_id].status == CampaignStatus.SUBMITTED

    async def test_live_pause_cycle(self, service, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.DELIVERED)

        live = await service.transition_campaign(campaign.id, seeded.admin.id, CampaignStatus.LIVE)
        paused = await service.transition_campaign(campaign.id, seeded.admin.id, CampaignStatus.PAUSED)
        resumed = await service.transition_campaign(campaign.id, seeded.admin.id, CampaignStatus.LIVE)

        assert (live.status, paused.status, resumed.status) == (
            CampaignStatus.LIVE, CampaignStatus.PAUSED, CampaignStatus.LIVE,
        )


# ============================================================================
# Archiving and Deletion
# ============================================================================


class TestArchive:
    """Archiving is orthogonal to status"""

    async def test_owner_archives_and_unarchives(self, service, mock_repository, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.COMPLETED)

        archived = await service.archive_campaign(campaign.id, seeded.owner.id)
        assert archived.archived is True
        assert archived.status == CampaignStatus.COMPLETED
        assert await service.list_campaigns(seeded.owner.id) == []
        assert len(await service.list_campaigns(seeded.owner.id, include_archived=True)) == 1

        restored = await service.unarchive_campaign(campaign.id, seeded.owner.id)
        assert restored.archived is False
        assert restored.status == CampaignStatus.COMPLETED

        activity = await service.list_activity(campaign.id, seeded.owner.id)
        assert _kinds(activity) == [ActivityKind.ARCHIVED, ActivityKind.UNARCHIVED]
        assert mock_repository.history_for(campaign.id) == []

    async def test_admin_archives_in_any_status(self, service, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.LIVE)

        archived = await service.archive_campaign(campaign.id, seeded.admin.id)

        assert archived.archived is True
        assert archived.status == CampaignStatus.LIVE

    async def test_teammate_cannot_archive(self, service, seeded, draft_campaign):
        with pytest.raises(ForbiddenError):
            await service.archive_campaign(draft_campaign.id, seeded.member.id)


class TestDelete:
    """Deletion only in draft or terminal states"""

    async def test_owner_deletes_draft(self, service, mock_repository, seeded, draft_campaign):
        assert await service.delete_campaign(draft_campaign.id, seeded.owner.id) is True
        assert draft_campaign.id not in mock_repository.campaigns

    async def test_active_campaign_cannot_be_deleted(self, service, mock_repository, seeded, campaign_in_status):
        campaign = campaign_in_status(CampaignStatus.IN_PROGRESS)

        with pytest.raises(InvalidStateError):
            await service.delete_campaign(campaign.id, seeded.admin.id)

        assert campaign.id in mock_repository.campaigns

    async def test_failed_campaign_deleted_with_requests_and_comments(self, service, mock_repository, seeded, submitted):
        campaign_id = submitted.campaign_id
        await service.add_comment(campaign_id, seeded.owner.id, "Any update?")
        await service.decide_request(submitted.id, seeded.admin.id, DecisionOutcome.REJECT, notes="No inventory")

        assert await service.delete_campaign(campaign_id, seeded.admin.id) is True

        assert campaign_id not in mock_repository.campaigns
        assert mock_repository.requests == {}
        assert mock_repository.comments == {}
        # Audit trail outlives the campaign
        assert len(mock_repository.history_for(campaign_id)) == 2

    async def test_teammate_cannot_delete(self, service, seeded, draft_campaign):
        with pytest.raises(ForbiddenError):
            await service.delete_campaign(draft_campaign.id, seeded.member.id)

    async def test_missing_campaign(self, service, seeded):
        with pytest.raises(NotFoundError):
            await service.delete_campaign("cmp_missing", seeded.owner.id)
