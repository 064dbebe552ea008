"""Lookup interfaces for the collaborators the feed worker reads from.

The worker never writes to any of these stores. Each interface has an
in-memory implementation used by scripts/publish_story.py and the tests.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import Capability, ExternalIdentity, ExternalRecord, Subject

logger = logging.getLogger("doorkeeper.stores")

__all__ = [
    "EDGE_TYPE_HAS_JIRA_ISSUE",
    "AccountStore",
    "EdgeStore",
    "ExternalRecordStore",
    "InMemoryAccountStore",
    "InMemoryEdgeStore",
    "InMemoryExternalRecordStore",
    "InMemorySubjectStore",
    "Stores",
    "SubjectStore",
]

# Edge type linking an object to the JIRA issues it implements
EDGE_TYPE_HAS_JIRA_ISSUE = "phob.has-jiraissue"


class SubjectStore(ABC):
    """Loads the object a story is about."""

    @abstractmethod
    def load(self, viewer: str, phid: str) -> Subject | None:
        """Return the subject visible to ``viewer``, or None."""


class EdgeStore(ABC):
    """Edge graph between objects."""

    @abstractmethod
    def load_destination_phids(self, src_phid: str, edge_type: str) -> list[str]:
        """Return destination PHIDs of ``edge_type`` edges from ``src_phid``."""


class ExternalRecordStore(ABC):
    """External (tracker) object rows."""

    @abstractmethod
    def query(self, viewer: str, phids: Iterable[str]) -> list[ExternalRecord]:
        """Return the records among ``phids`` that ``viewer`` can see."""


class AccountStore(ABC):
    """External account bindings of internal users."""

    @abstractmethod
    def query(
        self,
        viewer: str,
        user_phids: Iterable[str],
        account_types: Iterable[str],
        account_domains: Iterable[str],
        capabilities: Iterable[Capability],
    ) -> list[ExternalIdentity]:
        """Return accounts matching every filter on which ``viewer`` holds
        all of ``capabilities``. Result order is unspecified."""


@dataclass
class Stores:
    """Bundle of the stores a worker run reads from."""

    subjects: SubjectStore
    edges: EdgeStore
    records: ExternalRecordStore
    accounts: AccountStore


class InMemorySubjectStore(SubjectStore):
    def __init__(self, subjects: Iterable[Subject] = ()):
        self.subjects: dict[str, Subject] = {s.phid: s for s in subjects}

    def add(self, subject: Subject) -> None:
        self.subjects[subject.phid] = subject

    def load(self, viewer: str, phid: str) -> Subject | None:
        return self.subjects.get(phid)


class InMemoryEdgeStore(EdgeStore):
    def __init__(self):
        self.edges: dict[tuple[str, str], list[str]] = {}

    def add_edge(self, src_phid: str, edge_type: str, dst_phid: str) -> None:
        destinations = self.edges.setdefault((src_phid, edge_type), [])
        if dst_phid not in destinations:
            destinations.append(dst_phid)

    def load_destination_phids(self, src_phid: str, edge_type: str) -> list[str]:
        return list(self.edges.get((src_phid, edge_type), []))


@dataclass
class _VisibleRecord:
    record: ExternalRecord
    # None means visible to every viewer
    viewers: frozenset[str] | None = field(default=None)


class InMemoryExternalRecordStore(ExternalRecordStore):
    """Records keyed by PHID with an optional per-record viewer allowlist."""

    def __init__(self):
        self.records: dict[str, _VisibleRecord] = {}

    def add(
        self, record: ExternalRecord, viewers: Iterable[str] | None = None
    ) -> None:
        allowed = frozenset(viewers) if viewers is not None else None
        self.records[record.phid] = _VisibleRecord(record=record, viewers=allowed)

    def query(self, viewer: str, phids: Iterable[str]) -> list[ExternalRecord]:
        results = []
        for phid in phids:
            entry = self.records.get(phid)
            if entry is None:
                continue
            if entry.viewers is not None and viewer not in entry.viewers:
                logger.debug(
                    "external_record_not_visible",
                    extra={"record_phid": phid, "viewer": viewer},
                )
                continue
            results.append(entry.record)
        return results


class InMemoryAccountStore(AccountStore):
    def __init__(self, accounts: Iterable[ExternalIdentity] = ()):
        self.accounts: list[ExternalIdentity] = list(accounts)
        # Track queries for test assertions
        self.query_calls: list[dict] = []

    def add(self, account: ExternalIdentity) -> None:
        self.accounts.append(account)

    def query(
        self,
        viewer: str,
        user_phids: Iterable[str],
        account_types: Iterable[str],
        account_domains: Iterable[str],
        capabilities: Iterable[Capability],
    ) -> list[ExternalIdentity]:
        users = set(user_phids)
        types = set(account_types)
        domains = set(account_domains)
        required = set(capabilities)
        self.query_calls.append(
            {
                "viewer": viewer,
                "user_phids": users,
                "account_types": types,
                "account_domains": domains,
                "capabilities": required,
            }
        )
        return [
            account
            for account in self.accounts
            if account.user_phid in users
            and account.account_type in types
            and account.account_domain in domains
            and required <= account.capabilities
        ]
