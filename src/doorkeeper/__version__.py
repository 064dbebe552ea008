"""Version information for the Doorkeeper JIRA feed worker.

Single source of truth for version number.
"""

__version__ = "0.1.0"
__version_info__ = tuple(int(part) for part in __version__.split("."))

# Version history:
# 0.1.0 - Initial release: comment and remote link publishing to JIRA
