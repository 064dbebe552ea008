"""Resolution of the JIRA issues linked to a subject."""

import logging

from .models import ExternalRecord
from .stores import EDGE_TYPE_HAS_JIRA_ISSUE, EdgeStore, ExternalRecordStore

logger = logging.getLogger("doorkeeper.links")

__all__ = ["resolve_links"]


def resolve_links(
    subject_phid: str,
    viewer: str,
    edges: EdgeStore,
    records: ExternalRecordStore,
) -> dict[str, list[ExternalRecord]]:
    """Find linked JIRA issues visible to ``viewer``, grouped by domain.

    Args:
        subject_phid: PHID of the story's subject
        viewer: Viewer PHID used for record visibility
        edges: Edge graph store
        records: External record store

    Returns:
        Mapping of application domain to records on that domain, in the
        order the record store returned them. Empty when the subject has no
        linked issues or none of them are readable; neither is an error.
    """
    issue_phids = edges.load_destination_phids(subject_phid, EDGE_TYPE_HAS_JIRA_ISSUE)
    if not issue_phids:
        logger.info(
            "no_linked_jira_issues",
            extra={"subject_phid": subject_phid},
        )
        return {}

    found = records.query(viewer, issue_phids)
    if not found:
        logger.info(
            "no_external_jira_objects",
            extra={"subject_phid": subject_phid, "linked": len(issue_phids)},
        )
        return {}

    grouped: dict[str, list[ExternalRecord]] = {}
    for record in found:
        grouped.setdefault(record.application_domain, []).append(record)

    logger.debug(
        "linked_jira_issues_resolved",
        extra={
            "subject_phid": subject_phid,
            "records": len(found),
            "domains": sorted(grouped),
        },
    )
    return grouped
