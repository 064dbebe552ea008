"""JIRA integration package.

Provides the REST client and payload composers used to publish feed stories
onto linked JIRA issues.
"""

from .client import JiraClient, JiraClientError
from .composer import compose_comment_body, compose_remote_link

__all__ = [
    "JiraClient",
    "JiraClientError",
    "compose_comment_body",
    "compose_remote_link",
]
