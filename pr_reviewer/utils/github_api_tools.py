# Entrius 2025
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from pr_reviewer.classes import PullRequest
from pr_reviewer.constants import (
    BASE_GITHUB_API_URL,
    GITHUB_PAGE_SIZE,
    GITHUB_REQUEST_TIMEOUT_SECONDS,
    RATE_LIMIT_MIN_REMAINING,
)
from pr_reviewer.exceptions import FetchError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitInfo:
    """Represents GitHub API rate limit information extracted from response headers."""

    limit: int  # Maximum requests allowed per hour
    remaining: int  # Requests remaining in current window
    reset_timestamp: int  # Unix timestamp when the rate limit resets
    used: int  # Requests used in current window

    @property
    def seconds_until_reset(self) -> int:
        """Calculate seconds until rate limit resets."""
        current_time = int(time.time())
        return max(0, self.reset_timestamp - current_time)

    def __str__(self) -> str:
        return f"RateLimit(remaining={self.remaining}/{self.limit}, resets_in={self.seconds_until_reset}s)"


def parse_rate_limit_headers(response: requests.Response) -> Optional[RateLimitInfo]:
    """
    Parse GitHub API rate limit information from response headers.

    Args:
        response: The HTTP response from GitHub API

    Returns:
        RateLimitInfo object if headers are present, None otherwise
    """
    headers = response.headers

    try:
        limit = int(headers.get('X-RateLimit-Limit', 0))
        remaining = int(headers.get('X-RateLimit-Remaining', 0))
        reset_timestamp = int(headers.get('X-RateLimit-Reset', 0))
        used = int(headers.get('X-RateLimit-Used', 0))

        if limit == 0 and reset_timestamp == 0:
            return None

        return RateLimitInfo(limit=limit, remaining=remaining, reset_timestamp=reset_timestamp, used=used)
    except (ValueError, TypeError) as e:
        logger.debug(f"Could not parse rate limit headers: {e}")
        return None


def check_preemptive_rate_limit(response: requests.Response) -> None:
    """
    Log a warning when we're approaching the GitHub rate limit.
    Nothing waits or backs off here, the next scheduled run simply starts fresh.

    Args:
        response: The HTTP response from GitHub API
    """
    rate_limit_info = parse_rate_limit_headers(response)

    if rate_limit_info:
        if rate_limit_info.remaining <= RATE_LIMIT_MIN_REMAINING:
            logger.warning(
                f"Approaching GitHub API rate limit: {rate_limit_info.remaining} requests remaining, "
                f"resets in {rate_limit_info.seconds_until_reset}s"
            )
        elif rate_limit_info.remaining <= rate_limit_info.limit * 0.1:
            logger.info(f"GitHub API rate limit status: {rate_limit_info}")


def make_headers(token: Optional[str]) -> Dict[str, str]:
    """Build standard GitHub HTTP headers, authenticated when a PAT is given.

    Args:
        token (Optional[str]): Github pat
    Returns:
        Dict[str, str]: Mapping of HTTP header names to values.
    """
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


class GitHubRepoClient:
    """Fetches open pull requests for a single GitHub repository."""

    def __init__(self, repository: str, token: Optional[str] = None, timeout: int = GITHUB_REQUEST_TIMEOUT_SECONDS):
        if repository.count('/') != 1:
            raise ValueError(f"Repository must be in 'owner/repo' format, got: {repository}")
        self.repository = repository
        self.token = token
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"GitHubRepoClient({self.repository})"

    def _get_page(self, page: int) -> List[Dict[str, Any]]:
        try:
            response = requests.get(
                f'{BASE_GITHUB_API_URL}/repos/{self.repository}/pulls',
                headers=make_headers(self.token),
                params={'state': 'open', 'per_page': GITHUB_PAGE_SIZE, 'page': page},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise FetchError(self.repository, str(e)) from e

        if response.status_code != 200:
            raise FetchError(self.repository, f"status {response.status_code}: {response.text}")

        check_preemptive_rate_limit(response)

        try:
            chunk = response.json()
        except ValueError as e:
            raise FetchError(self.repository, f"invalid JSON response: {e}") from e

        if not isinstance(chunk, list):
            raise FetchError(self.repository, f"expected a list of pull requests, got {type(chunk).__name__}")
        return chunk

    def get_all_open_pull_requests(self, include_labels: bool = True) -> List[PullRequest]:
        '''
        Get every open pull request in the repository, following pagination.

        Args:
            include_labels (bool): Keep the label names on each PR. Labels come inline with
                the pulls listing so this costs no extra requests.
        Returns:
            List[PullRequest]: All open pull requests
        Raises:
            FetchError: on any request failure, non-200 response or malformed payload
        '''
        page = 1
        raw_prs: List[Dict[str, Any]] = []
        while True:
            chunk = self._get_page(page)
            raw_prs.extend(chunk)
            if len(chunk) < GITHUB_PAGE_SIZE:
                break
            page += 1

        prs = []
        for pr_raw in raw_prs:
            if not include_labels:
                pr_raw = {**pr_raw, 'labels': []}
            try:
                prs.append(PullRequest.from_github_response(self.repository, pr_raw))
            except (KeyError, TypeError, ValueError) as e:
                raise FetchError(self.repository, f"malformed pull request payload: {e}") from e

        logger.debug(f"Fetched {len(prs)} open PRs from {self.repository} ({page} page(s))")
        return prs


def create_repo_clients(repositories: List[str], token: Optional[str] = None) -> Dict[str, GitHubRepoClient]:
    """Build one client per repository, keyed by the repository name as configured."""
    return {repository: GitHubRepoClient(repository, token=token) for repository in repositories}
