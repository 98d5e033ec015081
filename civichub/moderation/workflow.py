"""Resource submission workflow.

A member proposes a resource; an admin approves or rejects it exactly once.

Approval publishes a verified resource, closes the submission and records
the decision.  Those steps run under the submission's lock and are
all-or-nothing: if closing the submission or recording the decision fails,
the submission is reopened and the freshly published resource is deleted
before the error propagates.  Rejection reopens the submission the same way
when its decision cannot be recorded.

Promoting the submitter and notifying them happen afterwards as post-commit
hooks, so a failure there never undoes or fails the approval.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from civichub.auth.models import Role, User
from civichub.auth.store import UserStore
from civichub.errors import AlreadyProcessed, NotFound, ValidationError
from civichub.hooks import PostCommitHooks
from civichub.moderation.action_log import ModerationLog
from civichub.moderation.models import (
    REQUIRED_DRAFT_FIELDS,
    ActionType,
    ApprovalResult,
    ItemRef,
    Resource,
    ResourceDraft,
    Submission,
    SubmissionStatus,
    TargetKind,
    parse_enum,
    utc_now,
)
from civichub.notifications import NotificationType, Notifier
from civichub.repository import Repository
from civichub.store import Collection

logger = logging.getLogger(__name__)


class SubmissionWorkflow:
    """Drives submissions from ``pending`` to ``approved`` or ``rejected``."""

    def __init__(
        self,
        repository: Repository,
        users: UserStore,
        action_log: ModerationLog,
        notifier: Notifier,
    ) -> None:
        self._repo = repository
        self._users = users
        self._log = action_log
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Intake and queries
    # ------------------------------------------------------------------

    def submit(self, submitter: User, fields: dict[str, Any]) -> Submission:
        """Stage a new resource proposal for review."""
        missing = [f for f in REQUIRED_DRAFT_FIELDS if not str(fields.get(f) or "").strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        submission = Submission(
            id=str(uuid.uuid4()),
            draft=ResourceDraft.from_dict(fields),
            submitted_by=submitter.id,
        )
        self._repo.create_submission(submission)
        logger.info("Submission %s created by %s", submission.id, submitter.id)
        return submission

    def get(self, submission_id: str) -> Submission:
        submission = self._repo.get_submission(submission_id)
        if submission is None:
            raise NotFound("Submission not found")
        return submission

    def list_submissions(self, status: Any = SubmissionStatus.pending) -> list[Submission]:
        """Return submissions newest first; ``None`` returns every status."""
        if status is not None:
            status = parse_enum(SubmissionStatus, status, "status")
        return self._repo.list_submissions(status)

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def approve(
        self,
        submission_id: str,
        reviewer: User,
        featured: bool = False,
        admin_notes: Optional[str] = None,
    ) -> ApprovalResult:
        """Publish the submission as a verified resource."""
        hooks = PostCommitHooks()

        with self._repo.lock(Collection.submissions, submission_id):
            submission = self._load_pending(submission_id)
            resource = self._repo.create_resource(
                Resource(
                    id=str(uuid.uuid4()),
                    draft=submission.draft,
                    verified=True,
                    featured=bool(featured),
                    submitted_by=submission.submitted_by or None,
                )
            )
            approved: Optional[Submission] = None
            try:
                approved = self._repo.finish_submission(
                    submission_id,
                    SubmissionStatus.approved,
                    processed_by=reviewer.id,
                    processed_at=utc_now(),
                    resource_id=resource.id,
                    admin_notes=(admin_notes or "").strip() or None,
                )
                if approved is None:
                    raise AlreadyProcessed()
                self._log.record(
                    ItemRef(TargetKind.submission, submission_id),
                    ActionType.approve,
                    reviewer.id,
                    reviewer.display_name,
                    reason=approved.admin_notes,
                )
            except Exception:
                if approved is not None:
                    self._repo.reopen_submission(submission_id, SubmissionStatus.approved)
                self._repo.delete_resource(resource.id)
                logger.error(
                    "Rolled back approval of submission %s (resource %s)",
                    submission_id,
                    resource.id,
                )
                raise

        logger.info("Submission %s approved as resource %s", submission_id, resource.id)
        if approved.submitted_by:
            hooks.defer(
                "upgrade_submitter_role",
                self._users.promote,
                approved.submitted_by,
                Role.volunteer,
                Role.organizer,
            )
            hooks.defer(
                "notify_resource_approved",
                self._notifier.send,
                approved.submitted_by,
                NotificationType.resource_approved,
                "Resource Approved",
                f'Your resource "{approved.draft.name}" has been approved and is now live.',
            )
        hooks.run()
        return ApprovalResult(resource_id=resource.id, submission=approved)

    def reject(
        self,
        submission_id: str,
        reviewer: User,
        reason: Optional[str] = None,
    ) -> Submission:
        """Close the submission without publishing anything."""
        reason = (reason or "").strip() or None
        hooks = PostCommitHooks()

        with self._repo.lock(Collection.submissions, submission_id):
            self._load_pending(submission_id)
            rejected = self._repo.finish_submission(
                submission_id,
                SubmissionStatus.rejected,
                processed_by=reviewer.id,
                processed_at=utc_now(),
                rejection_reason=reason,
            )
            if rejected is None:
                raise AlreadyProcessed()
            try:
                self._log.record(
                    ItemRef(TargetKind.submission, submission_id),
                    ActionType.reject,
                    reviewer.id,
                    reviewer.display_name,
                    reason=reason,
                )
            except Exception:
                self._repo.reopen_submission(submission_id, SubmissionStatus.rejected)
                logger.error("Rolled back rejection of submission %s", submission_id)
                raise

        logger.info("Submission %s rejected", submission_id)
        if rejected.submitted_by:
            message = f'Your resource submission "{rejected.draft.name}" was denied.'
            if reason:
                message += f" Reason: {reason}"
            hooks.defer(
                "notify_resource_denied",
                self._notifier.send,
                rejected.submitted_by,
                NotificationType.resource_denied,
                "Resource Submission Denied",
                message,
            )
        hooks.run()
        return rejected

    def _load_pending(self, submission_id: str) -> Submission:
        submission = self.get(submission_id)
        if not submission.is_pending:
            raise AlreadyProcessed()
        return submission
