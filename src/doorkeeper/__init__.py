"""Doorkeeper - publishes feed stories onto linked JIRA issues.

Provides the JIRA feed worker through:
- Configuration management with environment overrides
- Candidate and per-domain account resolution
- Comment and remote link publishing with per-account fallback

Python Version: 3.10+ required
"""

# Configure logging before other imports
from .logging_config import StructuredFormatter, configure_logging

configure_logging()

from .__version__ import __version__
from .config import DoorkeeperConfig, get_config, reset_config
from .models import (
    Capability,
    ExternalIdentity,
    ExternalRecord,
    PublishAction,
    Story,
    Subject,
    SubjectKind,
)
from .worker import (
    JiraFeedWorker,
    JiraProvider,
    JobResult,
    JobState,
    PermanentFailureError,
)

__all__ = [
    "Capability",
    "DoorkeeperConfig",
    "ExternalIdentity",
    "ExternalRecord",
    "JiraFeedWorker",
    "JiraProvider",
    "JobResult",
    "JobState",
    "PermanentFailureError",
    "PublishAction",
    "Story",
    "StructuredFormatter",
    "Subject",
    "SubjectKind",
    "__version__",
    "configure_logging",
    "get_config",
    "reset_config",
]
