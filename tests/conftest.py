# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared pytest fixtures for PR Reviewer tests.

Usage:
    def test_something(pr_factory, now):
        pr = pr_factory(labels=[READY_LABEL], updated_at=now - timedelta(days=8))
        ...
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

import pytest

from pr_reviewer.classes import PullRequest

# ============================================================================
# Time Fixtures
# ============================================================================


@pytest.fixture
def now() -> datetime:
    """Fixed reference time so threshold boundaries are exact."""
    return datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# PR Factory Fixture
# ============================================================================


@pytest.fixture
def pr_factory(now) -> Callable[..., PullRequest]:
    """Build PullRequest objects with sensible defaults."""
    counter = {'n': 0}

    def _make(
        labels: Iterable[str] = (),
        updated_at: Optional[datetime] = None,
        days_ago: Optional[float] = None,
        repository: str = 'numenta/nupic',
        title: Optional[str] = None,
        number: Optional[int] = None,
    ) -> PullRequest:
        counter['n'] += 1
        number = number if number is not None else counter['n']
        if updated_at is None:
            updated_at = now - timedelta(days=days_ago if days_ago is not None else 0)
        return PullRequest(
            number=number,
            repository_full_name=repository,
            title=title or f'PR number {number}',
            labels=frozenset(labels),
            updated_at=updated_at,
            html_url=f'https://github.com/{repository}/pull/{number}',
        )

    return _make
