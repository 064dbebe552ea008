"""Candidate users to act as when publishing a story into JIRA."""

import logging

from .models import Story, Subject
from .publishers import Publisher

logger = logging.getLogger("doorkeeper.candidates")

__all__ = ["build_candidates"]


def build_candidates(
    story: Story, subject: Subject, publisher: Publisher
) -> list[str]:
    """Return user PHIDs to try as the publishing voice, best first.

    The story author comes first even if they are not otherwise related to
    the subject, so the update is posted in the actor's voice when they
    have a linked account. Then the owner, active users, passive users and
    followers. Empty entries are dropped and each user appears once, at the
    position of their first occurrence.

    Args:
        story: Feed story being published
        subject: Object the story is about
        publisher: Publisher strategy for the subject's kind

    Returns:
        Ordered, duplicate-free list of user PHIDs (possibly empty).
    """
    ordered = [story.author_phid, publisher.owner_of(subject)]
    ordered.extend(publisher.active_users_of(subject))
    ordered.extend(publisher.passive_users_of(subject))
    ordered.extend(publisher.followers_of(subject))

    # dict preserves insertion order
    candidates = list(dict.fromkeys(phid for phid in ordered if phid))

    logger.debug(
        "candidates_built",
        extra={"subject_phid": subject.phid, "candidates": len(candidates)},
    )
    return candidates
