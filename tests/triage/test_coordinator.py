# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Tests for the run coordinator: concurrent fetch, all-or-nothing failure policy,
bucketing and once-per-run action dispatch.

Run tests:
    pytest tests/triage/test_coordinator.py -v
"""

import asyncio
import threading
import time
from unittest.mock import Mock

import pytest

from pr_reviewer.constants import IN_PROGRESS_LABEL, READY_LABEL
from pr_reviewer.exceptions import FetchError
from pr_reviewer.triage.actions import ActionHandler, ReviewReminderHandler
from pr_reviewer.triage.config import TriageConfig
from pr_reviewer.triage.coordinator import RunCoordinator

REPO_A = 'numenta/repo-a'
REPO_B = 'numenta/repo-b'


class FakeRepoClient:
    """Stands in for a GitHub client, returning canned PRs or raising."""

    def __init__(self, prs=None, error=None, delay=0.0):
        self.prs = prs or []
        self.error = error
        self.delay = delay
        self.calls = []

    def get_all_open_pull_requests(self, include_labels=True):
        self.calls.append(include_labels)
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.prs)


@pytest.fixture
def config():
    return TriageConfig(repositories=[REPO_A, REPO_B], notify_recipient='committers@example.com')


@pytest.fixture
def handlers():
    return {
        'close_handler': Mock(spec=ActionHandler),
        'warn_handler': Mock(spec=ActionHandler),
        'notify_handler': Mock(spec=ActionHandler),
    }


class TestEndToEndRun:
    def test_two_repositories_bucketed_and_mailed_once(self, config, pr_factory, now):
        pr_a = pr_factory(labels=[READY_LABEL], days_ago=10, repository=REPO_A, title='Add swarming docs')
        pr_b = pr_factory(labels=[IN_PROGRESS_LABEL], days_ago=35, repository=REPO_B)
        notifier = Mock()
        close_handler = Mock(spec=ActionHandler)
        coordinator = RunCoordinator(
            config,
            {REPO_A: FakeRepoClient([pr_a]), REPO_B: FakeRepoClient([pr_b])},
            close_handler=close_handler,
            notify_handler=ReviewReminderHandler(notifier, config.notify_recipient),
        )

        result = asyncio.run(coordinator.run(now=now))

        assert result.notify == [pr_a]
        assert result.close == [pr_b]
        assert result.warn == []
        close_handler.handle.assert_called_once_with([pr_b])
        notifier.send.assert_called_once()
        to_email, subject, body = notifier.send.call_args[0]
        assert to_email == 'committers@example.com'
        assert subject == '1 pull requests need review'
        assert f'- Add swarming docs --- {pr_a.html_url}' in body

    def test_prs_from_all_repositories_are_aggregated(self, config, handlers, pr_factory, now):
        prs_a = [pr_factory(repository=REPO_A) for _ in range(3)]
        prs_b = [pr_factory(repository=REPO_B) for _ in range(2)]
        coordinator = RunCoordinator(config, {REPO_A: FakeRepoClient(prs_a), REPO_B: FakeRepoClient(prs_b)}, **handlers)

        result = asyncio.run(coordinator.run(now=now))

        assert result.pull_requests == prs_a + prs_b

    def test_labels_are_requested(self, config, handlers):
        client_a, client_b = FakeRepoClient(), FakeRepoClient()
        coordinator = RunCoordinator(config, {REPO_A: client_a, REPO_B: client_b}, **handlers)

        asyncio.run(coordinator.fetch_all_open_pull_requests())

        assert client_a.calls == [True]
        assert client_b.calls == [True]

    def test_fetches_run_concurrently(self, config, handlers):
        """Two fetches that each block until the other has started can only finish if run in parallel."""
        barrier = threading.Barrier(2, timeout=5)

        class BarrierClient(FakeRepoClient):
            def get_all_open_pull_requests(self, include_labels=True):
                barrier.wait()
                return []

        coordinator = RunCoordinator(config, {REPO_A: BarrierClient(), REPO_B: BarrierClient()}, **handlers)

        assert asyncio.run(coordinator.fetch_all_open_pull_requests()) == []


class TestActionDispatch:
    def test_each_handler_called_once_with_whole_bucket(self, config, handlers, pr_factory, now):
        ready = [pr_factory(labels=[READY_LABEL], days_ago=d, repository=REPO_A) for d in (8, 9)]
        expired = [pr_factory(labels=[IN_PROGRESS_LABEL], days_ago=d, repository=REPO_B) for d in (40, 50)]
        warned = [pr_factory(labels=[IN_PROGRESS_LABEL], days_ago=27, repository=REPO_B)]
        coordinator = RunCoordinator(
            config, {REPO_A: FakeRepoClient(ready), REPO_B: FakeRepoClient(expired + warned)}, **handlers
        )

        asyncio.run(coordinator.run(now=now))

        handlers['notify_handler'].handle.assert_called_once_with(ready)
        handlers['close_handler'].handle.assert_called_once_with(expired)
        handlers['warn_handler'].handle.assert_called_once_with(warned)

    def test_empty_buckets_invoke_nothing(self, config, handlers, pr_factory, now):
        fresh = [pr_factory(labels=[READY_LABEL], days_ago=1, repository=REPO_A)]
        coordinator = RunCoordinator(config, {REPO_A: FakeRepoClient(fresh), REPO_B: FakeRepoClient()}, **handlers)

        result = asyncio.run(coordinator.run(now=now))

        assert result.counts()['total'] == 1
        for handler in handlers.values():
            handler.handle.assert_not_called()

    def test_default_close_and_warn_handlers_are_noops(self, config, pr_factory, now):
        prs = [
            pr_factory(labels=[IN_PROGRESS_LABEL], days_ago=40, repository=REPO_A),
            pr_factory(labels=[IN_PROGRESS_LABEL], days_ago=27, repository=REPO_A),
        ]
        coordinator = RunCoordinator(config, {REPO_A: FakeRepoClient(prs), REPO_B: FakeRepoClient()})

        result = asyncio.run(coordinator.run(now=now))

        assert len(result.close) == 1
        assert len(result.warn) == 1


class TestFetchFailures:
    def test_one_failed_fetch_aborts_run_before_actions(self, config, handlers, pr_factory, now):
        pr_a = pr_factory(labels=[READY_LABEL], days_ago=10, repository=REPO_A)
        coordinator = RunCoordinator(
            config,
            {REPO_A: FakeRepoClient([pr_a]), REPO_B: FakeRepoClient(error=FetchError(REPO_B, 'status 502'))},
            **handlers,
        )

        with pytest.raises(FetchError) as exc_info:
            asyncio.run(coordinator.run(now=now))

        assert exc_info.value.repository == REPO_B
        for handler in handlers.values():
            handler.handle.assert_not_called()

    def test_unexpected_client_error_is_wrapped(self, config, handlers):
        coordinator = RunCoordinator(
            config, {REPO_A: FakeRepoClient(), REPO_B: FakeRepoClient(error=RuntimeError('boom'))}, **handlers
        )

        with pytest.raises(FetchError) as exc_info:
            asyncio.run(coordinator.fetch_all_open_pull_requests())

        assert exc_info.value.repository == REPO_B
        assert 'boom' in str(exc_info.value)

    def test_slow_fetch_times_out(self, handlers):
        config = TriageConfig(repositories=[REPO_A, REPO_B], fetch_timeout_seconds=0.05)
        coordinator = RunCoordinator(
            config, {REPO_A: FakeRepoClient(), REPO_B: FakeRepoClient(delay=0.5)}, **handlers
        )

        with pytest.raises(FetchError) as exc_info:
            asyncio.run(coordinator.run())

        assert exc_info.value.repository == REPO_B
        assert 'timed out' in str(exc_info.value)
        for handler in handlers.values():
            handler.handle.assert_not_called()

    def test_hung_fetch_does_not_hold_up_run_once(self, handlers):
        config = TriageConfig(repositories=[REPO_A, REPO_B], fetch_timeout_seconds=0.1)
        coordinator = RunCoordinator(
            config, {REPO_A: FakeRepoClient(), REPO_B: FakeRepoClient(delay=2.0)}, **handlers
        )

        start = time.monotonic()
        result = coordinator.run_once()
        elapsed = time.monotonic() - start

        assert result is None
        assert elapsed < 1.0
        for handler in handlers.values():
            handler.handle.assert_not_called()

    def test_run_once_swallows_failure(self, config, handlers):
        coordinator = RunCoordinator(
            config, {REPO_A: FakeRepoClient(error=FetchError(REPO_A, 'down')), REPO_B: FakeRepoClient()}, **handlers
        )

        assert coordinator.run_once() is None

    def test_run_once_returns_result(self, config, handlers, pr_factory):
        pr = pr_factory(repository=REPO_A)
        coordinator = RunCoordinator(config, {REPO_A: FakeRepoClient([pr]), REPO_B: FakeRepoClient()}, **handlers)

        result = coordinator.run_once()

        assert result is not None
        assert result.pull_requests == [pr]


class TestMissingClients:
    def test_repository_without_client_is_skipped(self, config, handlers, pr_factory, now):
        pr_a = pr_factory(repository=REPO_A)
        coordinator = RunCoordinator(config, {REPO_A: FakeRepoClient([pr_a])}, **handlers)

        result = asyncio.run(coordinator.run(now=now))

        assert result.pull_requests == [pr_a]

    def test_clients_for_unconfigured_repositories_are_ignored(self, handlers, pr_factory, now):
        config = TriageConfig(repositories=[REPO_A])
        extra = FakeRepoClient([pr_factory(repository=REPO_B)])
        coordinator = RunCoordinator(config, {REPO_A: FakeRepoClient(), REPO_B: extra}, **handlers)

        result = asyncio.run(coordinator.run(now=now))

        assert result.pull_requests == []
        assert extra.calls == []
