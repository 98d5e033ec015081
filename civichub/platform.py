"""Wiring of the store and every service into one object."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from civichub.auth.store import UserStore
from civichub.config import Settings
from civichub.moderation.action_log import ModerationLog
from civichub.moderation.bulk import BulkActionCoordinator
from civichub.moderation.flags import FlagRegistry
from civichub.moderation.posts import PostBoard
from civichub.moderation.rules import RuleBook
from civichub.moderation.workflow import SubmissionWorkflow
from civichub.notifications import Notifier
from civichub.repository import Repository
from civichub.store import EntityStore, MemoryStore, open_store


@dataclass
class Platform:
    store: EntityStore
    repository: Repository
    users: UserStore
    notifier: Notifier
    action_log: ModerationLog
    rules: RuleBook
    flags: FlagRegistry
    bulk: BulkActionCoordinator
    workflow: SubmissionWorkflow
    posts: PostBoard

    @classmethod
    def build(cls, store: Optional[EntityStore] = None, settings: Optional[Settings] = None) -> Platform:
        """Assemble the services around *store* (in-memory by default)."""
        settings = settings or Settings()
        store = store if store is not None else MemoryStore()
        repository = Repository(store)
        users = UserStore(store, session_ttl_hours=settings.session_ttl_hours)
        notifier = Notifier(store)
        action_log = ModerationLog(repository)
        return cls(
            store=store,
            repository=repository,
            users=users,
            notifier=notifier,
            action_log=action_log,
            rules=RuleBook(repository),
            flags=FlagRegistry(repository, action_log),
            bulk=BulkActionCoordinator(
                repository,
                action_log,
                notifier,
                default_reject_reason=settings.bulk_reject_reason,
            ),
            workflow=SubmissionWorkflow(repository, users, action_log, notifier),
            posts=PostBoard(repository, action_log, notifier),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Platform:
        return cls.build(open_store(settings.store_backend, settings.data_dir), settings)
