"""Per-domain resolution of the accounts candidates can publish as."""

import logging
from collections.abc import Sequence

from .models import Capability, ExternalIdentity
from .stores import AccountStore

logger = logging.getLogger("doorkeeper.accounts")

__all__ = ["REQUIRED_CAPABILITIES", "resolve_accounts"]

REQUIRED_CAPABILITIES = (Capability.VIEW, Capability.EDIT)


def resolve_accounts(
    domain: str,
    candidates: Sequence[str],
    provider_type: str,
    viewer: str,
    accounts: AccountStore,
) -> list[ExternalIdentity]:
    """Return usable accounts on ``domain`` in candidate priority order.

    Must be called once per domain: which candidates hold an account differs
    between JIRA instances even though the candidate order is shared.

    Args:
        domain: Application domain of the linked records
        candidates: Ordered candidate user PHIDs
        provider_type: Account type of the JIRA provider
        viewer: Viewer PHID used for the capability check
        accounts: Account store

    Returns:
        Accounts ordered as a subsequence of ``candidates``. Candidates with
        no viewable and editable account on the domain are dropped.
    """
    if not candidates:
        return []

    found = accounts.query(
        viewer,
        user_phids=candidates,
        account_types=[provider_type],
        account_domains=[domain],
        capabilities=REQUIRED_CAPABILITIES,
    )

    wanted = set(candidates)
    by_user: dict[str, ExternalIdentity] = {}
    for account in found:
        if (
            account.user_phid not in wanted
            or account.account_type != provider_type
            or account.account_domain != domain
        ):
            continue
        # TODO: pick among several linked accounts once users can link more
        # than one account per domain; the first one wins for now.
        by_user.setdefault(account.user_phid, account)

    # pop so a repeated candidate cannot emit the same account twice
    ordered = [by_user.pop(phid) for phid in candidates if phid in by_user]

    logger.debug(
        "accounts_resolved",
        extra={
            "domain": domain,
            "candidates": len(candidates),
            "accounts": len(ordered),
        },
    )
    return ordered
