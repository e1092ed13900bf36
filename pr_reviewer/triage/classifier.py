# The MIT License (MIT)
# Copyright © 2025 Entrius

from datetime import datetime
from typing import Iterable, Optional

from pr_reviewer.classes import PullRequest, TriageAction, TriageLabels, TriageResult, TriageThresholds
from pr_reviewer.utils.datetime_utils import utc_now

DEFAULT_LABELS = TriageLabels()
DEFAULT_THRESHOLDS = TriageThresholds()


def classify_pull_request(
    pr: PullRequest,
    now: Optional[datetime] = None,
    labels: TriageLabels = DEFAULT_LABELS,
    thresholds: TriageThresholds = DEFAULT_THRESHOLDS,
) -> TriageAction:
    """Decide which action a single open PR calls for.

    Rules, first match wins:
    1. ready PRs untouched for more than the notify threshold need a review reminder.
    2. in-progress / help-wanted PRs untouched for more than the close threshold have expired,
       and those past the warn threshold are about to.
    3. Everything else is left alone.

    A PR carrying both ready and in-progress labels only ever takes the ready branch.
    All thresholds are strict: a PR exactly at a threshold has not passed it.

    Args:
        pr: The pull request to classify
        now: Reference time, defaults to the current UTC time
        labels: Label names that drive triage
        thresholds: Staleness thresholds

    Returns:
        TriageAction: exactly one of NONE, NOTIFY, WARN, CLOSE
    """
    if now is None:
        now = utc_now()

    if pr.has_label(labels.ready):
        if pr.updated_at < now - thresholds.notify_after:
            return TriageAction.NOTIFY
        return TriageAction.NONE

    if pr.has_label(labels.in_progress) or pr.has_label(labels.help_wanted):
        if pr.updated_at < now - thresholds.close_after:
            return TriageAction.CLOSE
        if pr.updated_at < now - thresholds.warn_after:
            return TriageAction.WARN

    return TriageAction.NONE


def bucket_pull_requests(
    prs: Iterable[PullRequest],
    now: Optional[datetime] = None,
    labels: TriageLabels = DEFAULT_LABELS,
    thresholds: TriageThresholds = DEFAULT_THRESHOLDS,
) -> TriageResult:
    """Classify every PR against the same reference time and group them by action."""
    if now is None:
        now = utc_now()

    result = TriageResult()
    for pr in prs:
        result.add(pr, classify_pull_request(pr, now, labels, thresholds))
    return result
