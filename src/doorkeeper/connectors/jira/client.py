"""JIRA REST API client for publishing feed stories.

Provides an httpx-based client for the JIRA REST API v2. One client serves
every acting account: each request carries the acting account's token.

Reference: https://developer.atlassian.com/server/jira/platform/rest-apis/
"""

import logging
from typing import Any

import httpx

from ...models import ExternalIdentity

logger = logging.getLogger("doorkeeper.jira.client")

__all__ = ["JiraClient", "JiraClientError"]


class JiraClientError(Exception):
    """Raised when a JIRA API request fails.

    Wraps httpx transport errors, timeouts and non-2xx responses.

    Attributes:
        status_code: HTTP status of the failed response, None for transport errors
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class JiraClient:
    """JIRA REST API client using a long-lived httpx.Client.

    Attributes:
        base_url: JIRA instance URL (e.g., https://jira.example.com)
        client: Shared httpx.Client instance with connection pooling

    Example:
        >>> with JiraClient("https://jira.example.com") as client:
        ...     client.post_comment(account, "PROJ-1", "Updated D12")
    """

    def __init__(self, base_url: str, read_timeout: float = 15.0) -> None:
        """Initialize JIRA client.

        Args:
            base_url: JIRA instance URL
            read_timeout: Read timeout in seconds for API responses
        """
        self.base_url = base_url.rstrip("/")

        timeout_config = httpx.Timeout(
            connect=3.0,  # Connection establishment timeout
            read=read_timeout,  # Read timeout for API responses
            write=5.0,  # Write timeout for request body
            pool=3.0,  # Pool acquisition timeout
        )

        limits = httpx.Limits(
            max_keepalive_connections=10,
            max_connections=20,
            keepalive_expiry=10.0,
        )

        self.client = httpx.Client(
            timeout=timeout_config,
            limits=limits,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    def post_comment(
        self, account: ExternalIdentity, issue_key: str, body: str
    ) -> dict[str, Any]:
        """Add a comment to an issue as ``account``.

        Sends POST to /rest/api/2/issue/{key}/comment.

        Returns:
            Created comment as returned by JIRA.

        Raises:
            JiraClientError: If the request fails
        """
        return self._post(
            account,
            f"rest/api/2/issue/{issue_key}/comment",
            {"body": body},
            operation="comment",
            issue_key=issue_key,
        )

    def post_remote_link(
        self, account: ExternalIdentity, issue_key: str, link: dict[str, Any]
    ) -> dict[str, Any]:
        """Create or update a remote link on an issue as ``account``.

        Sends POST to /rest/api/2/issue/{key}/remotelink. JIRA updates an
        existing link instead of adding a new one when ``globalId`` matches.

        Returns:
            Remote link id/self as returned by JIRA.

        Raises:
            JiraClientError: If the request fails
        """
        return self._post(
            account,
            f"rest/api/2/issue/{issue_key}/remotelink",
            link,
            operation="remotelink",
            issue_key=issue_key,
        )

    def _post(
        self,
        account: ExternalIdentity,
        path: str,
        payload: dict[str, Any],
        operation: str,
        issue_key: str,
    ) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {account.access_token.get_secret_value()}"
        }
        try:
            response = self.client.post(
                f"{self.base_url}/{path}", json=payload, headers=headers
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(
                "jira_request_timeout",
                extra={"operation": operation, "issue_key": issue_key, "error": str(e)},
            )
            raise JiraClientError(f"JIRA_{operation.upper()}_TIMEOUT") from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                "jira_request_failed",
                extra={
                    "operation": operation,
                    "issue_key": issue_key,
                    "status_code": status_code,
                },
            )
            raise JiraClientError(
                f"JIRA_{operation.upper()}_ERROR: HTTP {status_code}",
                status_code=status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "jira_request_error",
                extra={"operation": operation, "issue_key": issue_key, "error": str(e)},
            )
            raise JiraClientError(f"JIRA_{operation.upper()}_ERROR: {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise JiraClientError(
                f"JIRA_{operation.upper()}_ERROR: invalid JSON response",
                status_code=response.status_code,
            ) from e

    def close(self) -> None:
        """Close the HTTP client connection."""
        if getattr(self, "client", None) is not None:
            self.client.close()

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
