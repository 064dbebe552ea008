"""Publish executor: per-record account fallback against JIRA.

For each linked record the executor walks the resolved accounts in priority
order and runs every enabled action as that account. The first account whose
actions all succeed publishes the record and the walk stops. A failed
account is logged and the next one is tried; a record whose accounts all
fail is left unpublished for this run without failing the job.

Attempts report their outcome as an AttemptResult. JiraClientError is
converted at the attempt boundary and never escapes the executor.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .connectors.jira.client import JiraClient, JiraClientError
from .metrics import (
    publish_attempts_total,
    records_published_total,
    records_unpublished_total,
)
from .models import ExternalIdentity, ExternalRecord, PublishAction

logger = logging.getLogger("doorkeeper.executor")

__all__ = [
    "ACTION_ORDER",
    "AttemptResult",
    "PublishContent",
    "PublishExecutor",
    "RecordOutcome",
]

# Actions always run in this order for one account
ACTION_ORDER = (PublishAction.POST_COMMENT, PublishAction.POST_REMOTE_LINK)


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of one account's attempt on one record.

    Attributes:
        ok: True when every enabled action succeeded
        detail: Failure description for transient errors
        action: Action that failed, if any
    """

    ok: bool
    detail: str | None = None
    action: PublishAction | None = None

    @classmethod
    def success(cls) -> "AttemptResult":
        return cls(ok=True)

    @classmethod
    def transient_error(
        cls, detail: str, action: PublishAction | None = None
    ) -> "AttemptResult":
        return cls(ok=False, detail=detail, action=action)


@dataclass(frozen=True)
class PublishContent:
    """What gets published for one story, composed once per run."""

    comment_body: str
    remote_link: dict[str, Any]


@dataclass
class RecordOutcome:
    """Result of publishing one record.

    Attributes:
        record: The linked record
        published: True if some account succeeded
        account: Account that published the record
        attempts: (user_phid, result) for every account tried, in order
    """

    record: ExternalRecord
    published: bool = False
    account: ExternalIdentity | None = None
    attempts: list[tuple[str, AttemptResult]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "domain": self.record.application_domain,
            "issue_key": self.record.object_id,
            "published": self.published,
            "user_phid": self.account.user_phid if self.account else None,
            "attempts": [
                {"user_phid": user_phid, "ok": result.ok, "detail": result.detail}
                for user_phid, result in self.attempts
            ],
        }


class PublishExecutor:
    """Runs publish attempts for linked records, one account at a time.

    Attributes:
        client: JiraClient used for every request
    """

    def __init__(self, client: JiraClient):
        self.client = client

    def publish(
        self,
        record: ExternalRecord,
        accounts: Sequence[ExternalIdentity],
        actions: Iterable[PublishAction],
        content: PublishContent,
    ) -> RecordOutcome:
        """Publish ``content`` to one record using the first working account.

        Args:
            record: Linked JIRA record
            accounts: Resolved accounts, highest priority first
            actions: Enabled publish actions
            content: Comment body and remote link payload

        Returns:
            RecordOutcome for the record. Never raises for tracker errors.
        """
        requested = set(actions)
        enabled = [action for action in ACTION_ORDER if action in requested]
        outcome = RecordOutcome(record=record)

        for account in accounts:
            result = self.attempt(account, record.object_id, enabled, content)
            outcome.attempts.append((account.user_phid, result))

            if result.ok:
                outcome.published = True
                outcome.account = account
                break

            logger.warning(
                "jira_publish_failed",
                extra={
                    "issue_key": record.object_id,
                    "user_phid": account.user_phid,
                    "action": result.action.value if result.action else None,
                    "error": result.detail,
                },
            )

        domain = record.application_domain
        if outcome.published:
            records_published_total.labels(domain=domain).inc()
            logger.info(
                "jira_record_published",
                extra={
                    "issue_key": record.object_id,
                    "user_phid": outcome.account.user_phid,
                    "attempts": len(outcome.attempts),
                    "actions": [action.value for action in enabled],
                },
            )
        else:
            records_unpublished_total.labels(domain=domain).inc()
            logger.warning(
                "jira_record_unpublished",
                extra={
                    "issue_key": record.object_id,
                    "domain": domain,
                    "attempts": len(outcome.attempts),
                },
            )

        return outcome

    def attempt(
        self,
        account: ExternalIdentity,
        issue_key: str,
        actions: Sequence[PublishAction],
        content: PublishContent,
    ) -> AttemptResult:
        """Run every action in ``actions`` as ``account``.

        With no actions enabled this succeeds without contacting JIRA.
        """
        for action in actions:
            try:
                if action is PublishAction.POST_COMMENT:
                    self.client.post_comment(account, issue_key, content.comment_body)
                else:
                    self.client.post_remote_link(account, issue_key, content.remote_link)
            except JiraClientError as e:
                publish_attempts_total.labels(action=action.value, status="failed").inc()
                return AttemptResult.transient_error(str(e), action=action)
            publish_attempts_total.labels(action=action.value, status="success").inc()

        return AttemptResult.success()
