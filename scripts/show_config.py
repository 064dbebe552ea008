#!/usr/bin/env python3
"""Display the effective Doorkeeper JIRA configuration.

Read-only: prints configured values and the documentation of the two
publishing options.
"""

import sys

from doorkeeper.config import JIRA_OPTIONS, get_config


def main() -> int:
    """Display current configuration."""
    try:
        config = get_config()
    except Exception as e:
        print(f"\nConfiguration Error: {e}\n", file=sys.stderr)
        return 1

    print("\n" + "=" * 70)
    print("  Integration with JIRA")
    print("=" * 70 + "\n")

    print("  Provider:")
    if config.jira_instance_url:
        print(f"    Instance URL:   {config.jira_instance_url}")
        print(f"    Domain:         {config.instance_domain()}")
        print(f"    Provider type:  {config.jira_provider_type}")
        print(f"    Read timeout:   {config.jira_request_timeout}s")
    else:
        print("    (none configured - feed worker will fail permanently)")

    print("\n  Options:")
    for key, option in JIRA_OPTIONS.items():
        value = getattr(config, option["field"])
        enabled_label, disabled_label = option["labels"]
        print(f"    {key}: {enabled_label if value else disabled_label}")
        print(f"      {option['summary']}")

    print("\n  Logging:")
    print(f"    Level:  {config.log_level}")
    print(f"    Format: {config.log_format}")

    print("\n" + "=" * 70 + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
