# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Exceptions raised by the pull request reviewer."""


class PrReviewerError(Exception):
    """Base class for all pull request reviewer errors."""


class ConfigurationError(PrReviewerError):
    """Raised when the job configuration is missing or invalid."""


class FetchError(PrReviewerError):
    """Raised when open pull requests could not be fetched for a repository.

    A single fetch failure aborts the whole run.
    """

    def __init__(self, repository: str, message: str):
        self.repository = repository
        self.message = message
        super().__init__(f"Failed to fetch open pull requests for {repository}: {message}")


class NotifyError(PrReviewerError):
    """Raised when a notification could not be delivered."""
