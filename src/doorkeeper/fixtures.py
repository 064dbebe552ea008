"""Pydantic models for story replay fixtures.

A fixture is a JSON document holding one story plus everything the worker
reads while publishing it: subjects, edges, external records and accounts.
scripts/publish_story.py loads a fixture into the in-memory stores to replay
a story against a real JIRA instance.

Example fixture:
    {
      "story": {"story_id": "1", "subject_phid": "PHID-DREV-1",
                "author_phid": "PHID-USER-2", "text": "bob updated D1."},
      "subjects": [{"phid": "PHID-DREV-1", "kind": "DREV", "title": "Fix",
                    "monogram": "D1", "uri": "https://phab.example.com/D1"}],
      "edges": ["PHID-XOBJ-1"],
      "records": [{"phid": "PHID-XOBJ-1", "application_domain": "jira.example.com",
                   "object_id": "PROJ-1"}],
      "accounts": [{"user_phid": "PHID-USER-2", "account_domain": "jira.example.com",
                    "account_id": "bob", "access_token": "..."}]
    }
"""

from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, ValidationError

from .models import (
    Capability,
    ExternalIdentity,
    ExternalRecord,
    Story,
    Subject,
    SubjectKind,
)
from .stores import (
    EDGE_TYPE_HAS_JIRA_ISSUE,
    InMemoryAccountStore,
    InMemoryEdgeStore,
    InMemoryExternalRecordStore,
    InMemorySubjectStore,
    Stores,
)

__all__ = ["StoryFixture", "load_fixture_from_file"]


class StorySpec(BaseModel):
    story_id: str = Field(..., min_length=1)
    subject_phid: str = Field(..., min_length=1)
    author_phid: str | None = None
    text: str
    uri: str | None = None


class SubjectSpec(BaseModel):
    phid: str = Field(..., min_length=1)
    kind: SubjectKind = SubjectKind.REVISION
    title: str
    monogram: str
    uri: str
    closed: bool = False
    owner_phid: str | None = None
    active_phids: list[str] = Field(default_factory=list)
    passive_phids: list[str] = Field(default_factory=list)
    follower_phids: list[str] = Field(default_factory=list)


class RecordSpec(BaseModel):
    phid: str = Field(..., min_length=1)
    application_domain: str = Field(..., min_length=1)
    object_id: str = Field(..., min_length=1)
    viewers: list[str] | None = Field(
        default=None,
        description="Viewers allowed to see the record (default: everyone)",
    )


class AccountSpec(BaseModel):
    user_phid: str = Field(..., min_length=1)
    account_type: str = "jira"
    account_domain: str = Field(..., min_length=1)
    account_id: str = Field(..., min_length=1)
    access_token: SecretStr = SecretStr("")
    capabilities: list[Capability] = Field(
        default_factory=lambda: [Capability.VIEW, Capability.EDIT]
    )


class StoryFixture(BaseModel):
    """One story and the store contents needed to publish it.

    Attributes:
        story: The feed story
        subjects: Subjects the story may refer to
        edges: PHIDs of JIRA issue records linked to the story's subject
        records: External JIRA records
        accounts: External accounts of candidate users
    """

    story: StorySpec
    subjects: list[SubjectSpec] = Field(default_factory=list)
    edges: list[str] = Field(default_factory=list)
    records: list[RecordSpec] = Field(default_factory=list)
    accounts: list[AccountSpec] = Field(default_factory=list)

    def to_story(self) -> Story:
        return Story(**self.story.model_dump())

    def to_stores(self) -> Stores:
        """Build in-memory stores holding the fixture contents."""
        subjects = InMemorySubjectStore(
            Subject(
                phid=spec.phid,
                kind=spec.kind,
                title=spec.title,
                monogram=spec.monogram,
                uri=spec.uri,
                closed=spec.closed,
                owner_phid=spec.owner_phid,
                active_phids=tuple(spec.active_phids),
                passive_phids=tuple(spec.passive_phids),
                follower_phids=tuple(spec.follower_phids),
            )
            for spec in self.subjects
        )

        edges = InMemoryEdgeStore()
        for dst_phid in self.edges:
            edges.add_edge(self.story.subject_phid, EDGE_TYPE_HAS_JIRA_ISSUE, dst_phid)

        records = InMemoryExternalRecordStore()
        for spec in self.records:
            records.add(
                ExternalRecord(
                    phid=spec.phid,
                    application_domain=spec.application_domain,
                    object_id=spec.object_id,
                ),
                viewers=spec.viewers,
            )

        accounts = InMemoryAccountStore(
            ExternalIdentity(
                user_phid=spec.user_phid,
                account_type=spec.account_type,
                account_domain=spec.account_domain,
                account_id=spec.account_id,
                access_token=spec.access_token,
                capabilities=frozenset(spec.capabilities),
            )
            for spec in self.accounts
        )

        return Stores(subjects=subjects, edges=edges, records=records, accounts=accounts)


def load_fixture_from_file(file_path: Path) -> StoryFixture:
    """Load and validate a story fixture from a JSON file.

    Raises:
        FileNotFoundError: If the fixture file doesn't exist
        ValueError: If JSON is invalid or validation fails
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Fixture file not found: {file_path}")

    json_content = file_path.read_text(encoding="utf-8")

    try:
        return StoryFixture.model_validate_json(json_content)
    except ValidationError as e:
        raise ValueError(f"Failed to validate fixture {file_path.name}: {e}") from e
