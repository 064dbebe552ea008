"""
Prometheus metrics definitions for the Doorkeeper feed worker.

Per-account publish failures are absorbed by the worker and never fail the
job, so these counters are the operator-visible signal for records that
keep going unpublished (e.g. every candidate token revoked).
"""

from prometheus_client import Counter

# ==============================================================================
# COUNTERS - Monotonically increasing values
# ==============================================================================

jobs_total = Counter(
    "doorkeeper_jobs_total",
    "Feed worker runs by terminal outcome",
    ["outcome"],
    # outcome: completed, skipped_no_links, skipped_no_candidates, permanent_failure
)

publish_attempts_total = Counter(
    "doorkeeper_publish_attempts_total",
    "Publish actions attempted against JIRA",
    ["action", "status"],
    # action: post_comment, post_remote_link
    # status: success, failed
)

records_published_total = Counter(
    "doorkeeper_records_published_total",
    "Linked JIRA records updated by some candidate account",
    ["domain"],
)

records_unpublished_total = Counter(
    "doorkeeper_records_unpublished_total",
    "Linked JIRA records left unpublished after every account failed",
    ["domain"],
)
