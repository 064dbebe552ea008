"""Configuration management with pydantic-settings for the Doorkeeper feed worker.

Loads from (in order of precedence):
1. Environment variables (highest priority)
2. .env file in the working directory
3. Default values (lowest priority)

The two feature flags mirror the ``jira.post-comment`` and ``jira.post-link``
options. The JIRA provider is described by ``jira_instance_url`` and
``jira_provider_type``; an empty instance URL means no provider is configured.
"""

from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import PublishAction

__all__ = [
    "DEFAULT_PROVIDER_TYPE",
    "JIRA_OPTIONS",
    "DoorkeeperConfig",
    "get_config",
    "reset_config",
]

DEFAULT_PROVIDER_TYPE = "jira"

# Option metadata shown by scripts/show_config.py
JIRA_OPTIONS = {
    "jira.post-comment": {
        "field": "jira_post_comment",
        "default": True,
        "labels": ("Enable commenting", "Disable commenting"),
        "summary": "Post comment on JIRA issues when revision updated.",
        "description": (
            "Each time a revision is updated, Differential can post a comment "
            "on the linked JIRA issue(s). This can be informative, but can "
            "also overwhelm users with notifications if they are also "
            "notified by Phabricator."
        ),
    },
    "jira.post-link": {
        "field": "jira_post_link",
        "default": True,
        "labels": ("Enable remote link", "Disable remote link"),
        "summary": "On JIRA issues add remote links to revisions.",
        "description": (
            "JIRA issues can have Remote Links to web artifacts related to "
            "the given issue. This option adds the revision under "
            '"implemented in" under the Issue Links section of the JIRA ticket.'
        ),
    },
}


class DoorkeeperConfig(BaseSettings):
    """Configuration for the JIRA feed worker.

    Attributes:
        jira_post_comment: Post a comment on linked issues for each story
        jira_post_link: Create a remote link on linked issues for each story
        jira_instance_url: JIRA base URL; empty disables the provider
        jira_domain: Account domain of the instance; empty uses the URL hostname
        jira_provider_type: External account type bound to JIRA identities
        jira_request_timeout: Read timeout in seconds for tracker requests
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json for production, text for development)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    jira_post_comment: bool = Field(
        default=True,
        description="Post comment on JIRA issues when the subject is updated",
    )

    jira_post_link: bool = Field(
        default=True,
        description="Add a remote link to the subject on linked JIRA issues",
    )

    jira_instance_url: str = Field(
        default="",
        description="JIRA instance URL (e.g., https://jira.example.com)",
    )

    jira_domain: str = Field(
        default="",
        description=(
            "Account domain of the JIRA instance (default: instance URL hostname)"
        ),
    )

    jira_provider_type: str = Field(
        default=DEFAULT_PROVIDER_TYPE,
        min_length=1,
        description="External account type used for JIRA identities",
    )

    jira_request_timeout: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="Read timeout in seconds for JIRA API requests",
    )

    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    log_format: str = Field(
        default="json",
        pattern="^(json|text)$",
        description="Log format: json (production), text (development)",
    )

    @field_validator("jira_instance_url", mode="before")
    @classmethod
    def strip_instance_url(cls, v):
        """Normalize instance URL (strip whitespace and trailing slash)."""
        if isinstance(v, str):
            v = v.strip().rstrip("/")
            if v and urlparse(v).scheme not in ("http", "https"):
                raise ValueError(
                    f"JIRA_INSTANCE_URL must be an http(s) URL, got '{v}'"
                )
        return v

    @field_validator("jira_domain", mode="before")
    @classmethod
    def normalize_domain(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
        return v

    def instance_domain(self) -> str:
        """Account domain records and accounts must carry to use this instance."""
        if self.jira_domain:
            return self.jira_domain
        return (urlparse(self.jira_instance_url).hostname or "").lower()

    def enabled_actions(self) -> tuple[PublishAction, ...]:
        """Return the publish actions switched on, in execution order."""
        actions = []
        if self.jira_post_comment:
            actions.append(PublishAction.POST_COMMENT)
        if self.jira_post_link:
            actions.append(PublishAction.POST_REMOTE_LINK)
        return tuple(actions)


@lru_cache(maxsize=1)
def get_config() -> DoorkeeperConfig:
    """Get global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        ValidationError: If configuration values are invalid.
    """
    return DoorkeeperConfig()


def reset_config() -> None:
    """Reset configuration singleton for testing.

    Warning:
        Only use in test code. Production code should not reset config.
    """
    get_config.cache_clear()
