# The MIT License (MIT)
# Copyright © 2025 Entrius

import asyncio
import functools
import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Protocol

from pr_reviewer.classes import PullRequest, TriageResult
from pr_reviewer.exceptions import FetchError
from pr_reviewer.triage.actions import ActionHandler, LogCloseHandler, LogWarnHandler
from pr_reviewer.triage.classifier import bucket_pull_requests
from pr_reviewer.triage.config import TriageConfig
from pr_reviewer.utils.datetime_utils import utc_now
from pr_reviewer.utils.logging import log_triage_summary

logger = logging.getLogger(__name__)


class RepoClient(Protocol):
    def get_all_open_pull_requests(self, include_labels: bool = True) -> List[PullRequest]: ...


class RunCoordinator:
    """Fetches open PRs from every configured repository, triages them and dispatches the actions.

    One run is all-or-nothing: if any repository fetch fails or times out, the run is
    aborted before any action handler is invoked.
    """

    def __init__(
        self,
        config: TriageConfig,
        repo_clients: Mapping[str, RepoClient],
        close_handler: Optional[ActionHandler] = None,
        warn_handler: Optional[ActionHandler] = None,
        notify_handler: Optional[ActionHandler] = None,
    ):
        self.config = config
        self.repo_clients = repo_clients
        self.close_handler = close_handler or LogCloseHandler()
        self.warn_handler = warn_handler or LogWarnHandler()
        self.notify_handler = notify_handler

    def _active_clients(self) -> Dict[str, RepoClient]:
        """Configured repositories that actually have a client. Missing ones are skipped."""
        clients = {}
        for repository in self.config.repositories:
            client = self.repo_clients.get(repository)
            logger.debug(f"Repo / Client: {repository} / {client!r}")
            if client is None:
                logger.warning(f"No client available for {repository}, skipping")
                continue
            clients[repository] = client
        return clients

    async def _fetch_repository(self, repository: str, client: RepoClient, executor: Executor) -> List[PullRequest]:
        loop = asyncio.get_running_loop()
        fetch = functools.partial(client.get_all_open_pull_requests, include_labels=True)
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(executor, fetch),
                timeout=self.config.fetch_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise FetchError(repository, f"timed out after {self.config.fetch_timeout_seconds}s") from e
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(repository, str(e)) from e

    async def fetch_all_open_pull_requests(self) -> List[PullRequest]:
        """Fetch open PRs from all repositories concurrently and concatenate them.

        Waits for every fetch to settle. If any of them failed, the first failure (in
        repository order) is raised and all results are discarded.

        Fetches run on a pool owned by this call. The pool is shut down without waiting,
        so a fetch that outlives its timeout cannot hold up the run.

        Raises:
            FetchError: if any repository could not be fetched
        """
        clients = self._active_clients()
        executor = ThreadPoolExecutor(max_workers=max(len(clients), 1), thread_name_prefix="pr-fetch")
        try:
            results = await asyncio.gather(
                *(self._fetch_repository(repository, client, executor) for repository, client in clients.items()),
                return_exceptions=True,
            )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        prs: List[PullRequest] = []
        for result in results:
            if isinstance(result, BaseException):
                raise result
            prs.extend(result)
        return prs

    def _dispatch(self, result: TriageResult) -> None:
        if result.close:
            self.close_handler.handle(result.close)
        if result.notify:
            if self.notify_handler is not None:
                self.notify_handler.handle(result.notify)
            else:
                logger.warning(f"No notify handler configured, {len(result.notify)} PRs need review")
        if result.warn:
            self.warn_handler.handle(result.warn)

    async def run(self, now: Optional[datetime] = None) -> TriageResult:
        """Execute one complete review run: fetch, triage, act.

        Raises:
            FetchError: if any repository fetch failed. No action has been taken in that case.
        """
        logger.info("Starting open PR review...")

        try:
            prs = await self.fetch_all_open_pull_requests()
        except FetchError as e:
            logger.error(f"Error fetching open pull requests from {e.repository}, aborting run: {e.message}")
            raise

        logger.info(f"Found {len(prs)} open pull requests.")

        result = bucket_pull_requests(
            prs,
            now=now or utc_now(),
            labels=self.config.labels,
            thresholds=self.config.thresholds,
        )
        log_triage_summary(result)

        self._dispatch(result)
        return result

    def run_once(self) -> Optional[TriageResult]:
        """Run synchronously for the scheduler. Failures are logged and never propagate."""
        run_start_time = time.time()
        try:
            result = asyncio.run(self.run())
        except FetchError:
            logger.error("Pull request review run failed, waiting for the next scheduled run")
            return None
        except Exception as e:
            logger.exception(f"Unexpected error during pull request review run: {e}")
            return None

        logger.info(f"Pull request review run completed in {time.time() - run_start_time:.2f}s")
        return result
