# The MIT License (MIT)
# Copyright © 2025 Entrius

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Protocol

from pr_reviewer.classes import PullRequest
from pr_reviewer.constants import (
    JOB_NAME,
    REVIEW_REMINDER_CLOSING,
    REVIEW_REMINDER_GREETING,
    REVIEW_REMINDER_LINE,
    REVIEW_REMINDER_SUBJECT,
)
from pr_reviewer.exceptions import NotifyError

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, to_email: str, subject: str, body: str) -> None: ...


class ActionHandler(ABC):
    """Handles every PR that landed in one action bucket, once per run."""

    @abstractmethod
    def handle(self, prs: List[PullRequest]) -> None:
        ...


class LogCloseHandler(ActionHandler):
    """Default close action. Logs expired PRs, closes nothing."""

    def handle(self, prs: List[PullRequest]) -> None:
        logger.info(f"Closing {len(prs)} expired open pull requests.")
        for pr in prs:
            logger.info(f"  - {pr} ({pr.html_url})")


class LogWarnHandler(ActionHandler):
    """Default warn action. Logs PRs that are about to expire."""

    def handle(self, prs: List[PullRequest]) -> None:
        logger.info(f"{len(prs)} open pull requests will expire soon.")
        for pr in prs:
            logger.info(f"  - {pr} ({pr.html_url})")


def format_review_reminder(prs: List[PullRequest]) -> tuple[str, str]:
    """Build the (subject, body) of the review reminder mail."""
    subject = REVIEW_REMINDER_SUBJECT.format(count=len(prs))
    body = REVIEW_REMINDER_GREETING
    body += ''.join(REVIEW_REMINDER_LINE.format(title=pr.title, url=pr.html_url) for pr in prs)
    body += REVIEW_REMINDER_CLOSING
    return subject, body


class ReviewReminderHandler(ActionHandler):
    """Mails one batched review reminder for all stale ready PRs."""

    def __init__(self, notifier: Notifier, recipient: Optional[str]):
        self.notifier = notifier
        self.recipient = recipient

    def handle(self, prs: List[PullRequest]) -> None:
        logger.info(f"Sending Review Reminders for {len(prs)} old open pull requests.")

        if not self.recipient:
            logger.error("No one to email PR review emails to!")
            return

        subject, body = format_review_reminder(prs)
        try:
            self.notifier.send(self.recipient, subject, body)
        except NotifyError as e:
            logger.error(f'Error running cron job "{JOB_NAME}" (sending mail): {e}')
            return

        logger.info(f"Review reminder sent to {self.recipient}")
