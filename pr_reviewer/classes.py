# The MIT License (MIT)
# Copyright © 2025 Entrius

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, FrozenSet, List

from dateutil.relativedelta import relativedelta

from pr_reviewer.constants import (
    CLOSE_AFTER_MONTHS,
    HELP_WANTED_LABEL,
    IN_PROGRESS_LABEL,
    NOTIFY_AFTER_DAYS,
    READY_LABEL,
    WARN_AFTER_DAYS,
)
from pr_reviewer.utils.datetime_utils import parse_github_timestamp


class TriageAction(Enum):
    """Action bucket a pull request is sorted into"""

    NONE = "none"
    NOTIFY = "notify"
    WARN = "warn"
    CLOSE = "close"


@dataclass(frozen=True)
class TriageLabels:
    """Label names that drive triage"""

    ready: str = READY_LABEL
    in_progress: str = IN_PROGRESS_LABEL
    help_wanted: str = HELP_WANTED_LABEL


@dataclass(frozen=True)
class TriageThresholds:
    """Staleness thresholds measured from a PR's last update.

    The close threshold is in calendar months, so "one month" back from March 31st
    lands on February 28th/29th rather than a fixed number of days.
    """

    notify_days: int = NOTIFY_AFTER_DAYS
    warn_days: int = WARN_AFTER_DAYS
    close_months: int = CLOSE_AFTER_MONTHS

    @property
    def notify_after(self) -> timedelta:
        return timedelta(days=self.notify_days)

    @property
    def warn_after(self) -> timedelta:
        return timedelta(days=self.warn_days)

    @property
    def close_after(self) -> relativedelta:
        return relativedelta(months=self.close_months)


@dataclass(frozen=True)
class PullRequest:
    """An open pull request as fetched for triage. Read-only."""

    number: int
    repository_full_name: str
    title: str
    labels: FrozenSet[str]
    updated_at: datetime
    html_url: str

    def has_label(self, name: str) -> bool:
        return name in self.labels

    def __str__(self) -> str:
        return f"PR #{self.number} in {self.repository_full_name}: {self.title}"

    @classmethod
    def from_github_response(cls, repository_full_name: str, pr_raw: Dict[str, Any]) -> 'PullRequest':
        """Create PullRequest from GitHub REST API response"""
        return cls(
            number=pr_raw['number'],
            repository_full_name=repository_full_name,
            title=pr_raw['title'],
            labels=frozenset(label['name'] for label in pr_raw.get('labels') or []),
            updated_at=parse_github_timestamp(pr_raw['updated_at']),
            html_url=pr_raw['html_url'],
        )


@dataclass
class TriageResult:
    """Outcome of a single triage run"""

    pull_requests: List[PullRequest] = field(default_factory=list)
    close: List[PullRequest] = field(default_factory=list)
    warn: List[PullRequest] = field(default_factory=list)
    notify: List[PullRequest] = field(default_factory=list)

    def add(self, pr: PullRequest, action: TriageAction) -> None:
        self.pull_requests.append(pr)
        if action == TriageAction.CLOSE:
            self.close.append(pr)
        elif action == TriageAction.WARN:
            self.warn.append(pr)
        elif action == TriageAction.NOTIFY:
            self.notify.append(pr)

    def counts(self) -> Dict[str, int]:
        return {
            'total': len(self.pull_requests),
            'close': len(self.close),
            'warn': len(self.warn),
            'notify': len(self.notify),
        }
