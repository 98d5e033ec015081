"""Tests for the resource submission workflow."""

import threading

import pytest

from civichub.auth.models import Role
from civichub.errors import AlreadyProcessed, NotFound, StoreError, ValidationError
from civichub.moderation.models import ItemRef, SubmissionStatus, TargetKind
from civichub.platform import Platform
from civichub.store import Collection, JsonFileStore, MemoryStore

SAMPLE_RESOURCE = {
    "name": "Food Bank",
    "category": "food",
    "description": "Free groceries every Saturday",
    "address": "12 Main St",
    "phone": "555-0100",
    "email": "info@foodbank.org",
}


class FailingSubmissionStore(MemoryStore):
    """Memory store whose conditional submission updates always fail."""

    def update_if(self, collection, record_id, expected, changes):
        if collection == Collection.submissions:
            raise StoreError("disk full")
        return super().update_if(collection, record_id, expected, changes)


def test_submit_creates_pending_submission(platform, volunteer):
    submission = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)
    assert submission.status == SubmissionStatus.pending
    assert submission.submitted_by == volunteer.id
    assert submission.draft.name == "Food Bank"
    assert platform.workflow.list_submissions()[0].id == submission.id


def test_submit_requires_fields(platform, volunteer):
    with pytest.raises(ValidationError, match="Missing required fields: phone, email"):
        platform.workflow.submit(volunteer, {**SAMPLE_RESOURCE, "phone": "", "email": " "})


def test_approve_featured_submission(platform, admin, volunteer):
    submission = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)

    result = platform.workflow.approve(submission.id, admin, featured=True, admin_notes="Looks good")

    resource = platform.repository.get_resource(result.resource_id)
    assert resource.verified is True
    assert resource.featured is True
    assert resource.name == "Food Bank"
    assert resource.submitted_by == volunteer.id

    stored = platform.workflow.get(submission.id)
    assert stored.status == SubmissionStatus.approved
    assert stored.processed_by == admin.id
    assert stored.processed_at
    assert stored.resource_id == result.resource_id
    assert stored.admin_notes == "Looks good"

    assert platform.users.get_user(volunteer.id).role == Role.organizer

    history = platform.action_log.query_by_item(ItemRef(TargetKind.submission, submission.id))
    assert len(history) == 1
    assert history[0].action.value == "approve"
    assert history[0].admin_id == admin.id
    assert history[0].reason == "Looks good"

    notes = platform.notifier.list_for_user(volunteer.id)
    assert [n.type for n in notes] == ["resource_approved"]
    assert "Food Bank" in notes[0].message


def test_approve_twice_raises_already_processed(platform, admin, volunteer):
    submission = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)
    platform.workflow.approve(submission.id, admin)

    with pytest.raises(AlreadyProcessed):
        platform.workflow.approve(submission.id, admin)
    assert len(platform.repository.list_resources()) == 1


def test_approve_adds_exactly_one_resource(platform, admin, volunteer):
    before = len(platform.repository.list_resources())
    submission = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)
    platform.workflow.approve(submission.id, admin)
    assert len(platform.repository.list_resources()) == before + 1


def test_approve_unknown_submission(platform, admin):
    with pytest.raises(NotFound):
        platform.workflow.approve("nope", admin)


def test_approve_does_not_demote_higher_roles(platform, admin, moderator):
    submission = platform.workflow.submit(moderator, SAMPLE_RESOURCE)
    platform.workflow.approve(submission.id, admin)
    assert platform.users.get_user(moderator.id).role == Role.moderator


def test_reject_publishes_nothing(platform, admin, volunteer):
    submission = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)

    rejected = platform.workflow.reject(submission.id, admin, reason="Duplicate listing")

    assert rejected.status == SubmissionStatus.rejected
    assert rejected.rejection_reason == "Duplicate listing"
    assert rejected.resource_id is None
    assert platform.repository.list_resources() == []
    assert platform.users.get_user(volunteer.id).role == Role.volunteer

    notes = platform.notifier.list_for_user(volunteer.id)
    assert notes[0].type == "resource_denied"
    assert "Reason: Duplicate listing" in notes[0].message

    with pytest.raises(AlreadyProcessed):
        platform.workflow.approve(submission.id, admin)


def test_failed_submission_update_rolls_back_resource():
    platform = Platform.build(FailingSubmissionStore())
    admin = platform.users.create_user("a@x.org", role=Role.admin)
    member = platform.users.create_user("v@x.org")
    submission = platform.workflow.submit(member, SAMPLE_RESOURCE)

    with pytest.raises(StoreError):
        platform.workflow.approve(submission.id, admin)

    assert platform.repository.list_resources() == []
    assert platform.workflow.get(submission.id).is_pending
    assert platform.action_log.list_recent() == []
    assert platform.notifier.list_for_user(member.id) == []


def test_role_upgrade_failure_does_not_fail_approval(platform, admin, volunteer, monkeypatch):
    def broken_promote(*args, **kwargs):
        raise StoreError("users table locked")

    monkeypatch.setattr(platform.users, "promote", broken_promote)
    submission = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)

    result = platform.workflow.approve(submission.id, admin)

    assert platform.repository.get_resource(result.resource_id) is not None
    assert platform.workflow.get(submission.id).status == SubmissionStatus.approved
    assert platform.users.get_user(volunteer.id).role == Role.volunteer
    # The notification hook still runs after the failed upgrade.
    assert len(platform.notifier.list_for_user(volunteer.id)) == 1


def test_concurrent_approvals_publish_once(platform, admin, volunteer):
    submission = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)
    outcomes = []
    barrier = threading.Barrier(8)

    def approve():
        barrier.wait()
        try:
            platform.workflow.approve(submission.id, admin)
            outcomes.append("ok")
        except AlreadyProcessed:
            outcomes.append("already")

    threads = [threading.Thread(target=approve) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("already") == 7
    assert len(platform.repository.list_resources()) == 1
    assert len(platform.action_log.list_recent()) == 1


def test_list_submissions_by_status(platform, admin, volunteer):
    first = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)
    second = platform.workflow.submit(volunteer, {**SAMPLE_RESOURCE, "name": "Shelter"})
    platform.workflow.approve(first.id, admin)

    assert [s.id for s in platform.workflow.list_submissions()] == [second.id]
    assert [s.id for s in platform.workflow.list_submissions("approved")] == [first.id]
    assert [s.id for s in platform.workflow.list_submissions(None)] == [second.id, first.id]
    with pytest.raises(ValidationError):
        platform.workflow.list_submissions("bogus")


def _failing_append(*args, **kwargs):
    raise StoreError("audit log unavailable")


def test_audit_failure_rolls_back_approval(platform, admin, volunteer, monkeypatch):
    submission = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)
    monkeypatch.setattr(platform.repository, "append_action", _failing_append)

    with pytest.raises(StoreError):
        platform.workflow.approve(submission.id, admin, featured=True, admin_notes="ok")

    stored = platform.workflow.get(submission.id)
    assert stored.is_pending
    assert stored.resource_id is None
    assert stored.processed_by is None
    assert platform.repository.list_resources() == []
    assert platform.users.get_user(volunteer.id).role == Role.volunteer
    assert platform.notifier.list_for_user(volunteer.id) == []

    # Once the log is back the same submission can still be approved.
    monkeypatch.undo()
    result = platform.workflow.approve(submission.id, admin)
    assert platform.repository.get_resource(result.resource_id) is not None
    assert platform.users.get_user(volunteer.id).role == Role.organizer


def test_audit_failure_rolls_back_rejection(platform, admin, volunteer, monkeypatch):
    submission = platform.workflow.submit(volunteer, SAMPLE_RESOURCE)
    monkeypatch.setattr(platform.repository, "append_action", _failing_append)

    with pytest.raises(StoreError):
        platform.workflow.reject(submission.id, admin, reason="Duplicate")

    stored = platform.workflow.get(submission.id)
    assert stored.is_pending
    assert stored.rejection_reason is None
    assert platform.notifier.list_for_user(volunteer.id) == []


def test_corrupt_action_log_file_fails_approval_without_data_loss(tmp_path):
    platform = Platform.build(JsonFileStore(tmp_path))
    admin = platform.users.create_user("a@x.org", role=Role.admin)
    member = platform.users.create_user("v@x.org")
    for _ in range(3):
        platform.workflow.approve(platform.workflow.submit(member, SAMPLE_RESOURCE).id, admin)
    log_file = tmp_path / "moderation_actions.json"
    damaged = log_file.read_text()[:40]
    log_file.write_text(damaged)
    submission = platform.workflow.submit(member, SAMPLE_RESOURCE)

    with pytest.raises(StoreError):
        platform.workflow.approve(submission.id, admin)

    assert log_file.read_text() == damaged
    assert platform.workflow.get(submission.id).is_pending
    assert len(platform.repository.list_resources()) == 3
