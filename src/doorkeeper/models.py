"""Data models for feed stories, subjects and linked JIRA records.

Every model here is read-only to the worker: stories, subjects, external
records and external identities are created upstream and only looked up.
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import SecretStr

__all__ = [
    "Capability",
    "ExternalIdentity",
    "ExternalRecord",
    "PublishAction",
    "Story",
    "Subject",
    "SubjectKind",
]


class SubjectKind(str, Enum):
    """Kinds of objects a feed story can be about.

    Each kind has its own Publisher strategy (see publishers.py).
    """

    REVISION = "DREV"  # Differential revision
    TASK = "TASK"  # Maniphest task
    COMMIT = "CMIT"  # Diffusion commit


class Capability(str, Enum):
    """Policy capabilities the viewer must hold on an external account."""

    VIEW = "view"
    EDIT = "edit"


class PublishAction(str, Enum):
    """Publish actions performed against a linked JIRA issue."""

    POST_COMMENT = "post_comment"
    POST_REMOTE_LINK = "post_remote_link"


@dataclass(frozen=True)
class Story:
    """A feed story describing an update to a subject.

    Attributes:
        story_id: Feed story identifier
        subject_phid: PHID of the object the story is about
        author_phid: PHID of the user who triggered the story (may be None)
        text: Rendered plain-text story body
        uri: Target URI of the story, if any
    """

    story_id: str
    subject_phid: str
    author_phid: str | None
    text: str
    uri: str | None = None


@dataclass(frozen=True)
class Subject:
    """The internal object a story is about.

    Attributes:
        phid: Object identity
        kind: SubjectKind tag used to select a Publisher
        title: Human-readable title (remote link summary)
        monogram: Short name such as D123 (remote link title)
        closed: Whether the object is closed/resolved
        owner_phid: Owner (author) of the object
        active_phids: Users who must act (reviewers, assignees)
        passive_phids: Users who may act (accepted reviewers)
        follower_phids: Subscribers
        uri: Canonical URI of the object
    """

    phid: str
    kind: SubjectKind
    title: str
    monogram: str
    uri: str
    closed: bool = False
    owner_phid: str | None = None
    active_phids: tuple[str, ...] = ()
    passive_phids: tuple[str, ...] = ()
    follower_phids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExternalRecord:
    """One JIRA issue linked to a subject.

    Attributes:
        phid: Identity of the external object row
        application_domain: Tracker instance the issue lives on
        object_id: Tracker-native key (e.g. PROJ-123)
    """

    phid: str
    application_domain: str
    object_id: str


@dataclass(frozen=True)
class ExternalIdentity:
    """Binding of an internal user to a tracker account on one domain.

    Attributes:
        user_phid: Internal user the account belongs to
        account_type: Provider type (e.g. "jira")
        account_domain: Tracker instance the account is valid on
        account_id: Tracker-side account identifier
        access_token: Credential used to act as this account
        capabilities: Capabilities the viewer holds on this binding
    """

    user_phid: str
    account_type: str
    account_domain: str
    account_id: str
    access_token: SecretStr = field(default_factory=lambda: SecretStr(""), repr=False)
    capabilities: frozenset[Capability] = frozenset({Capability.VIEW, Capability.EDIT})
