"""Feed worker that publishes stories onto linked JIRA issues.

Pipeline Flow (one story per run):
1. Require a configured JIRA provider (else permanent failure)
2. Load the story's subject and select its Publisher strategy
3. Resolve linked JIRA issues, grouped by domain
4. Build the ordered candidate list of users to act as
5. Per domain served by the provider: resolve usable accounts, then
   publish each record (records on other domains stay unpublished)

Error Handling:
- No provider / unknown subject: PermanentFailureError, never retried
- No linked issues or no candidates: logged, run completes as skipped
- Per-account JIRA errors: logged, next account tried (see executor.py)
- Records nobody could publish: logged and counted, run still completes
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from .accounts import resolve_accounts
from .candidates import build_candidates
from .config import DoorkeeperConfig, get_config
from .connectors.jira.client import JiraClient
from .connectors.jira.composer import compose_comment_body, compose_remote_link
from .executor import PublishContent, PublishExecutor, RecordOutcome
from .links import resolve_links
from .metrics import jobs_total
from .models import Story
from .publishers import UnsupportedSubjectError, get_publisher
from .stores import Stores

logger = logging.getLogger("doorkeeper.worker")

__all__ = [
    "OMNIPOTENT_VIEWER",
    "JiraFeedWorker",
    "JiraProvider",
    "JobResult",
    "JobState",
    "PermanentFailureError",
]

# Viewer the worker queries stores as
OMNIPOTENT_VIEWER = "PHID-USER-omnipotent"


class PermanentFailureError(Exception):
    """Raised when a story can never be published; the queue must not retry."""

    pass


class JobState(str, Enum):
    """Terminal state of a successful run."""

    SKIPPED_NO_LINKED_RECORDS = "skipped_no_links"
    SKIPPED_NO_CANDIDATES = "skipped_no_candidates"
    COMPLETED = "completed"


@dataclass(frozen=True)
class JiraProvider:
    """The JIRA instance stories are published to.

    Attributes:
        base_url: JIRA instance URL
        provider_type: Account type of identities linked to this provider
        read_timeout: Read timeout in seconds for API requests
        domain: Application domain served by this instance (default: the
            base URL hostname); records on other domains are not published
    """

    base_url: str
    provider_type: str = "jira"
    read_timeout: float = 15.0
    domain: str = ""

    def __post_init__(self):
        if not self.domain:
            host = urlparse(self.base_url).hostname or ""
            object.__setattr__(self, "domain", host.lower())

    @classmethod
    def from_config(cls, config: DoorkeeperConfig) -> "JiraProvider | None":
        """Build the provider from config, or None when no instance is set."""
        if not config.jira_instance_url:
            return None
        return cls(
            base_url=config.jira_instance_url,
            provider_type=config.jira_provider_type,
            read_timeout=config.jira_request_timeout,
            domain=config.instance_domain(),
        )


@dataclass
class JobResult:
    """Result of one worker run."""

    story_id: str
    state: JobState
    outcomes: list[RecordOutcome] = field(default_factory=list)

    @property
    def published(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.published)

    @property
    def unpublished(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.published)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "story_id": self.story_id,
            "state": self.state.value,
            "published": self.published,
            "unpublished": self.unpublished,
            "records": [outcome.to_dict() for outcome in self.outcomes],
        }


class JiraFeedWorker:
    """Publishes feed stories into JIRA, acting as related users.

    Attributes:
        provider: Configured JIRA provider, or None when JIRA is not set up
        stores: Subject, edge, record and account stores
        config: DoorkeeperConfig instance (feature flags)
        viewer: Viewer PHID used for store queries

    Example:
        >>> worker = JiraFeedWorker(JiraProvider.from_config(config), stores)
        >>> try:
        ...     result = worker.run(story)
        ... finally:
        ...     worker.close()
    """

    def __init__(
        self,
        provider: JiraProvider | None,
        stores: Stores,
        config: DoorkeeperConfig | None = None,
        client: JiraClient | None = None,
        viewer: str = OMNIPOTENT_VIEWER,
    ):
        """Initialize the worker.

        Args:
            provider: JIRA provider; None makes every run a permanent failure
            stores: Collaborator stores
            config: Config instance (defaults to get_config())
            client: JiraClient to publish with; created on first use if omitted
            viewer: Viewer PHID for store queries
        """
        self.provider = provider
        self.stores = stores
        self.config = config or get_config()
        self.viewer = viewer
        self._client = client
        self._owns_client = client is None

    def is_enabled(self) -> bool:
        """The worker is enabled when a JIRA provider is configured."""
        return self.provider is not None

    def get_provider(self) -> JiraProvider:
        """Return the configured provider.

        Raises:
            PermanentFailureError: If no JIRA provider is configured.
        """
        if self.provider is None:
            raise PermanentFailureError("No JIRA provider configured.")
        return self.provider

    def get_client(self) -> JiraClient:
        if self._client is None:
            provider = self.get_provider()
            self._client = JiraClient(
                provider.base_url, read_timeout=provider.read_timeout
            )
        return self._client

    def run(self, story: Story) -> JobResult:
        """Publish one story onto every linked JIRA issue.

        Args:
            story: Feed story to publish

        Returns:
            JobResult with the terminal state and per-record outcomes.

        Raises:
            PermanentFailureError: No provider configured, or the story's
                subject cannot be loaded or published.
        """
        try:
            provider = self.get_provider()
            subject = self.stores.subjects.load(self.viewer, story.subject_phid)
            if subject is None:
                raise PermanentFailureError(
                    f"Story object {story.subject_phid} could not be loaded."
                )
            try:
                publisher = get_publisher(subject)
            except UnsupportedSubjectError as e:
                raise PermanentFailureError(str(e)) from e
        except PermanentFailureError as e:
            jobs_total.labels(outcome="permanent_failure").inc()
            logger.error(
                "feed_worker_permanent_failure",
                extra={"story_id": story.story_id, "error": str(e)},
            )
            raise

        records_by_domain = resolve_links(
            subject.phid, self.viewer, self.stores.edges, self.stores.records
        )
        if not records_by_domain:
            return self._finish(story, JobState.SKIPPED_NO_LINKED_RECORDS)

        candidates = build_candidates(story, subject, publisher)
        if not candidates:
            logger.info(
                "no_users_to_act_as",
                extra={"story_id": story.story_id, "subject_phid": subject.phid},
            )
            return self._finish(story, JobState.SKIPPED_NO_CANDIDATES)

        actions = self.config.enabled_actions()
        content = PublishContent(
            comment_body=compose_comment_body(story, subject, publisher),
            remote_link=compose_remote_link(subject, publisher),
        )
        executor = PublishExecutor(self.get_client())

        outcomes = []
        for domain, records in records_by_domain.items():
            if domain != provider.domain:
                # Only the provider domain is reachable through base_url
                logger.warning(
                    "jira_domain_not_served",
                    extra={
                        "domain": domain,
                        "provider_domain": provider.domain,
                        "issue_keys": [record.object_id for record in records],
                    },
                )
                for record in records:
                    outcomes.append(executor.publish(record, [], actions, content))
                continue

            accounts = resolve_accounts(
                domain,
                candidates,
                provider.provider_type,
                self.viewer,
                self.stores.accounts,
            )
            for record in records:
                outcomes.append(executor.publish(record, accounts, actions, content))

        return self._finish(story, JobState.COMPLETED, outcomes)

    def _finish(
        self,
        story: Story,
        state: JobState,
        outcomes: list[RecordOutcome] | None = None,
    ) -> JobResult:
        result = JobResult(story_id=story.story_id, state=state, outcomes=outcomes or [])
        jobs_total.labels(outcome=state.value).inc()
        logger.info(
            "feed_worker_finished",
            extra={
                "story_id": story.story_id,
                "state": state.value,
                "published": result.published,
                "unpublished": result.unpublished,
            },
        )
        return result

    def close(self) -> None:
        """Close the JIRA client if this worker created it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "JiraFeedWorker":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
