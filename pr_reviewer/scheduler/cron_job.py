# The MIT License (MIT)
# Copyright © 2025 Entrius

import logging
import threading
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from croniter import croniter

from pr_reviewer.constants import JOB_DESCRIPTION, JOB_NAME
from pr_reviewer.utils.datetime_utils import get_timezone

if TYPE_CHECKING:
    from pr_reviewer.triage.config import TriageConfig
    from pr_reviewer.triage.coordinator import RunCoordinator


class CronJob:
    """Calls on_tick on a cron schedule, evaluated in a fixed timezone.

    Ticks run one after another on a single background thread, so two runs of the
    same job never overlap.
    """

    def __init__(
        self,
        name: str,
        description: str,
        cron_time: str,
        on_tick: Callable[[], Any],
        timezone: str = "UTC",
        run_now: bool = False,
    ):
        if not croniter.is_valid(cron_time):
            raise ValueError(f"Invalid cron expression: {cron_time}")

        self.name = name
        self.description = description
        self.cron_time = cron_time
        self.on_tick = on_tick
        self.tz = get_timezone(timezone)
        self.run_now = run_now
        self.logger = logging.getLogger(__name__)

        # State tracking
        self.is_running = False
        self.tick_count = 0
        self.last_run: Optional[datetime] = None
        self.next_run: Optional[datetime] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def next_run_time(self, after: Optional[datetime] = None) -> datetime:
        """Next fire time strictly after `after` (default: now), in the job's timezone."""
        start = (after or self.now()).astimezone(self.tz)
        return croniter(self.cron_time, start).get_next(datetime)

    def _tick(self) -> None:
        self.last_run = self.now()
        self.tick_count += 1
        self.logger.info(f'Running cron job "{self.name}" (tick {self.tick_count})')
        try:
            self.on_tick()
        except Exception as e:
            self.logger.error(f'Error running cron job "{self.name}": {e}')

    def _run_loop(self) -> None:
        self.logger.info(f'Cron job "{self.name}" loop started')

        if self.run_now:
            self._tick()

        scheduled = self.now()
        while not self._stop_event.is_set():
            # Never schedule before the previous fire time, even if the clock reads earlier
            self.next_run = self.next_run_time(max(self.now(), scheduled))
            scheduled = self.next_run
            wait_seconds = max(0.0, (self.next_run - self.now()).total_seconds())
            self.logger.debug(f'Next run of "{self.name}" at {self.next_run.isoformat()} (in {wait_seconds:.0f}s)')

            if self._stop_event.wait(wait_seconds):
                break
            self._tick()

        self.logger.info(f'Cron job "{self.name}" loop stopped')

    def start(self) -> bool:
        """Start firing on schedule in a background thread."""
        if self.is_running:
            self.logger.warning(f'Cron job "{self.name}" is already running')
            return False

        self.logger.info(f'Starting cron job "{self.name}" ({self.cron_time}, {self.tz.zone})')
        self.is_running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name=self.name)
        self._thread.start()
        return True

    def stop(self, timeout: float = 10) -> None:
        """Stop the job, waiting for a tick in progress to finish."""
        if not self.is_running:
            return

        self.logger.info(f'Stopping cron job "{self.name}"...')
        self.is_running = False
        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)

        self.logger.info(f'Cron job "{self.name}" stopped')

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def get_status(self) -> Dict[str, Any]:
        """Get current status of the job."""
        return {
            'name': self.name,
            'description': self.description,
            'cron_time': self.cron_time,
            'timezone': self.tz.zone,
            'running': self.is_running,
            'tick_count': self.tick_count,
            'last_run': self.last_run.isoformat() if self.last_run else None,
            'next_run': self.next_run.isoformat() if self.next_run else None,
        }


def create_pr_reviewer_job(config: 'TriageConfig', coordinator: 'RunCoordinator') -> CronJob:
    """Build the scheduled Pull Request Reviewer job around a coordinator."""
    return CronJob(
        name=JOB_NAME,
        description=JOB_DESCRIPTION,
        cron_time=config.cron_time,
        on_tick=coordinator.run_once,
        timezone=config.timezone,
        run_now=config.run_now,
    )
