"""Payload composers for JIRA comments and remote links.

Remote link format:
https://developer.atlassian.com/server/jira/platform/jira-rest-api-for-remote-issue-links/
"""

from typing import Any

from ...models import Story, Subject
from ...publishers import Publisher

__all__ = ["RELATIONSHIP", "compose_comment_body", "compose_remote_link"]

RELATIONSHIP = "implemented in"


def compose_comment_body(story: Story, subject: Subject, publisher: Publisher) -> str:
    """Compose the comment text: story text, a blank line, then the object URI.

    Example:
        >>> compose_comment_body(story, subject, publisher)
        'alice updated D12: Fix login.\\n\\nhttps://phab.example.com/D12'
    """
    text = publisher.text_of(story, subject)
    uri = publisher.uri_of(subject)
    return f"{text}\n\n{uri}"


def compose_remote_link(subject: Subject, publisher: Publisher) -> dict[str, Any]:
    """Compose the remote link payload for a subject.

    ``globalId`` is derived from the subject PHID, so re-publishing the same
    subject updates the existing link on the issue.

    Args:
        subject: Object to link to
        publisher: Publisher strategy for the subject's kind

    Returns:
        JSON-serializable remote link body.
    """
    application = publisher.application
    return {
        "globalId": f"phabricatorPhid={subject.phid}",
        "application": {
            "type": application.type,
            "name": application.name,
        },
        "relationship": RELATIONSHIP,
        "object": {
            "url": publisher.uri_of(subject),
            "title": publisher.short_name_of(subject),
            "summary": publisher.title_of(subject),
            "icon": {
                "url16x16": application.icon_url,
                "title": application.icon_title,
            },
            "status": {
                "resolved": publisher.is_closed(subject),
            },
        },
    }
