#!/usr/bin/env python3
"""Replay one feed story into JIRA.

Loads a story fixture (story, subjects, linked records, accounts) into the
in-memory stores and runs the JIRA feed worker against the configured
JIRA instance.

Usage:
    publish_story.py story.json               # Publish with configured flags
    publish_story.py story.json --dry-run     # Resolve accounts, publish nothing
    publish_story.py story.json --json        # Machine-readable result

Exit codes:
    0 - Run completed (including skipped runs and unpublished records)
    1 - Permanent failure (no JIRA provider, unknown subject) or bad fixture
"""

import argparse
import json
import sys
from pathlib import Path

from doorkeeper.config import get_config
from doorkeeper.fixtures import load_fixture_from_file
from doorkeeper.worker import JiraFeedWorker, JiraProvider, PermanentFailureError


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Publish a feed story onto its linked JIRA issues",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  Set the JIRA instance in .env or the environment:
    JIRA_INSTANCE_URL=https://jira.example.com
    JIRA_POST_COMMENT=true
    JIRA_POST_LINK=true
        """,
    )
    parser.add_argument("fixture", type=Path, help="Path to story fixture JSON")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve candidates and accounts without posting to JIRA",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the job result as JSON",
    )
    return parser.parse_args(argv)


def print_result(result) -> None:
    """Print a human-readable job summary."""
    print("=" * 70)
    print(f"  Story {result.story_id}: {result.state.value}")
    print("=" * 70)
    for outcome in result.outcomes:
        record = outcome.record
        if outcome.published:
            status = f"published as {outcome.account.user_phid}"
        else:
            status = "UNPUBLISHED"
        print(f"  {record.application_domain} {record.object_id}: {status}")
        for user_phid, attempt in outcome.attempts:
            if not attempt.ok:
                print(f"    failed as {user_phid}: {attempt.detail}")
    print("")
    print(f"  Published: {result.published}  Unpublished: {result.unpublished}")
    print("=" * 70)


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    try:
        config = get_config()
    except Exception as e:
        print(f"Error: Failed to load configuration: {e}", file=sys.stderr)
        return 1

    try:
        fixture = load_fixture_from_file(args.fixture)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.dry_run:
        config = config.model_copy(
            update={"jira_post_comment": False, "jira_post_link": False}
        )

    worker = JiraFeedWorker(
        JiraProvider.from_config(config), fixture.to_stores(), config=config
    )
    try:
        result = worker.run(fixture.to_story())
    except PermanentFailureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        worker.close()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
