"""Shared pytest fixtures for the Doorkeeper feed worker tests.

Fixture Organization:
    - Sample data fixtures: story, subject, records and accounts
    - Store fixtures: in-memory stores pre-loaded with the sample data
    - Mock fixtures: MockJiraClient standing in for the JIRA REST API
"""

import logging
import sys
from pathlib import Path

import pytest
from prometheus_client import REGISTRY
from pydantic import SecretStr

from doorkeeper.config import DoorkeeperConfig, reset_config
from doorkeeper.logging_config import ROOT_LOGGER
from doorkeeper.models import (
    ExternalIdentity,
    ExternalRecord,
    Story,
    Subject,
    SubjectKind,
)
from doorkeeper.stores import (
    EDGE_TYPE_HAS_JIRA_ISSUE,
    InMemoryAccountStore,
    InMemoryEdgeStore,
    InMemoryExternalRecordStore,
    InMemorySubjectStore,
    Stores,
)

# Add tests directory to sys.path so test modules can import mocks
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

from mocks.jira_mock import MockJiraClient  # noqa: E402

DOMAIN = "jira.example.com"
SUBJECT_PHID = "PHID-DREV-abc"

U1 = "PHID-USER-1"
U2 = "PHID-USER-2"
U3 = "PHID-USER-3"
U4 = "PHID-USER-4"


def make_account(user_phid: str, domain: str = DOMAIN, **kwargs) -> ExternalIdentity:
    """Build an ExternalIdentity for ``user_phid`` on ``domain``."""
    kwargs.setdefault("account_type", "jira")
    kwargs.setdefault("account_id", f"acct-{user_phid[-1]}")
    kwargs.setdefault("access_token", SecretStr(f"token-{user_phid}"))
    return ExternalIdentity(user_phid=user_phid, account_domain=domain, **kwargs)


def metric_value(name: str, **labels) -> float:
    """Current value of a Prometheus sample (0.0 if never incremented)."""
    return REGISTRY.get_sample_value(name, labels) or 0.0


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep the host environment out of DoorkeeperConfig."""
    for key in (
        "JIRA_POST_COMMENT",
        "JIRA_POST_LINK",
        "JIRA_INSTANCE_URL",
        "JIRA_DOMAIN",
        "JIRA_PROVIDER_TYPE",
        "JIRA_REQUEST_TIMEOUT",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def propagate_doorkeeper_logs(monkeypatch):
    """Let caplog (attached to the root logger) see doorkeeper records."""
    monkeypatch.setattr(logging.getLogger(ROOT_LOGGER), "propagate", True)


@pytest.fixture
def make_config():
    """Factory for DoorkeeperConfig instances that ignore any .env file."""

    def _make(**overrides) -> DoorkeeperConfig:
        overrides.setdefault("jira_instance_url", f"https://{DOMAIN}")
        return DoorkeeperConfig(_env_file=None, **overrides)

    return _make


@pytest.fixture
def config(make_config):
    return make_config()


# =============================================================================
# Sample Data
# =============================================================================


@pytest.fixture
def subject():
    """Revision owned by U1, reviewed by U2, followed by U3."""
    return Subject(
        phid=SUBJECT_PHID,
        kind=SubjectKind.REVISION,
        title="Fix login redirect loop",
        monogram="D42",
        uri="https://phab.example.com/D42",
        closed=False,
        owner_phid=U1,
        active_phids=(U2,),
        passive_phids=(),
        follower_phids=(U3,),
    )


@pytest.fixture
def story():
    """Story authored by U2 about the sample subject."""
    return Story(
        story_id="1001",
        subject_phid=SUBJECT_PHID,
        author_phid=U2,
        text="bob accepted D42: Fix login redirect loop.",
    )


@pytest.fixture
def record():
    return ExternalRecord(phid="PHID-XOBJ-1", application_domain=DOMAIN, object_id="PROJ-1")


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def stores(subject, record):
    """In-memory stores: R1 linked on DOMAIN, accounts for U1 and U3 only."""
    edges = InMemoryEdgeStore()
    edges.add_edge(SUBJECT_PHID, EDGE_TYPE_HAS_JIRA_ISSUE, record.phid)

    records = InMemoryExternalRecordStore()
    records.add(record)

    accounts = InMemoryAccountStore([make_account(U1), make_account(U3)])

    return Stores(
        subjects=InMemorySubjectStore([subject]),
        edges=edges,
        records=records,
        accounts=accounts,
    )


@pytest.fixture
def jira():
    """MockJiraClient with no failures configured."""
    return MockJiraClient()
