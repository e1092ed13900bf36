# The MIT License (MIT)
# Copyright © 2025 Entrius

from datetime import datetime, timezone

import pytz

from pr_reviewer.exceptions import ConfigurationError


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_github_timestamp(timestamp: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp (e.g. '2024-01-15T10:30:00Z') into an aware UTC datetime."""
    return datetime.fromisoformat(timestamp.rstrip("Z")).replace(tzinfo=timezone.utc)


def get_timezone(name: str) -> pytz.BaseTzInfo:
    """Look up a timezone by its IANA name.

    Raises:
        ConfigurationError: if the name is not a known timezone
    """
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise ConfigurationError(f"Unknown timezone: {name}") from e
