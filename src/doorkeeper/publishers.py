"""Publisher strategies: a fixed view of a subject for feed publishing.

Each SubjectKind has one Publisher implementation that knows who is related
to the object and how to describe it on the tracker. The worker selects the
strategy with get_publisher(); nothing probes subjects for optional methods.
"""

from dataclasses import dataclass

from .models import Story, Subject, SubjectKind

__all__ = [
    "ApplicationDescriptor",
    "CommitPublisher",
    "Publisher",
    "RevisionPublisher",
    "TaskPublisher",
    "UnsupportedSubjectError",
    "get_publisher",
    "register_publisher",
]

# Icon shown next to remote links on the JIRA issue
DEFAULT_ICON_URL = "https://secure.phabricator.com/rsrc/image/apple-touch-icon.png"


class UnsupportedSubjectError(ValueError):
    """Raised when no Publisher is registered for a subject kind."""

    pass


@dataclass(frozen=True)
class ApplicationDescriptor:
    """Remote link "application" block plus the icon shown on the issue."""

    type: str
    name: str
    icon_title: str
    icon_url: str = DEFAULT_ICON_URL


class Publisher:
    """Base publisher: reads related users and display data off a Subject.

    Subclasses set ``kind`` and ``application`` and may override any of the
    accessors when their object stores related users differently.
    """

    kind: SubjectKind
    application: ApplicationDescriptor

    def owner_of(self, subject: Subject) -> str | None:
        return subject.owner_phid

    def active_users_of(self, subject: Subject) -> list[str]:
        return list(subject.active_phids)

    def passive_users_of(self, subject: Subject) -> list[str]:
        return list(subject.passive_phids)

    def followers_of(self, subject: Subject) -> list[str]:
        return list(subject.follower_phids)

    def uri_of(self, subject: Subject) -> str:
        return subject.uri

    def text_of(self, story: Story, subject: Subject) -> str:
        return story.text

    def title_of(self, subject: Subject) -> str:
        return subject.title

    def short_name_of(self, subject: Subject) -> str:
        return subject.monogram

    def is_closed(self, subject: Subject) -> bool:
        return subject.closed


class RevisionPublisher(Publisher):
    kind = SubjectKind.REVISION
    application = ApplicationDescriptor(
        type="org.phabricator.differential",
        name="Differential",
        icon_title="Revision",
    )


class TaskPublisher(Publisher):
    """Tasks have no passive bucket; accepted users are treated as active."""

    kind = SubjectKind.TASK
    application = ApplicationDescriptor(
        type="org.phabricator.maniphest",
        name="Maniphest",
        icon_title="Task",
    )

    def active_users_of(self, subject: Subject) -> list[str]:
        return list(subject.active_phids) + list(subject.passive_phids)

    def passive_users_of(self, subject: Subject) -> list[str]:
        return []


class CommitPublisher(Publisher):
    kind = SubjectKind.COMMIT
    application = ApplicationDescriptor(
        type="org.phabricator.diffusion",
        name="Diffusion",
        icon_title="Commit",
    )

    def is_closed(self, subject: Subject) -> bool:
        # A commit is always landed
        return True


_PUBLISHERS: dict[SubjectKind, Publisher] = {
    publisher.kind: publisher
    for publisher in (RevisionPublisher(), TaskPublisher(), CommitPublisher())
}


def register_publisher(publisher: Publisher) -> None:
    """Register (or replace) the Publisher used for ``publisher.kind``."""
    _PUBLISHERS[publisher.kind] = publisher


def get_publisher(subject: Subject) -> Publisher:
    """Return the Publisher strategy for a subject's kind.

    Raises:
        UnsupportedSubjectError: If no strategy is registered for the kind.
    """
    try:
        return _PUBLISHERS[subject.kind]
    except KeyError:
        raise UnsupportedSubjectError(
            f"No publisher registered for subject kind '{subject.kind}'"
        ) from None
