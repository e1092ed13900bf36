"""
Pull Request Reviewer Main Entry Point

Runs the scheduled Pull Request Reviewer job until interrupted. All settings come
from the JSON file named by PR_REVIEWER_CONFIG and from environment variables
(a local .env file is honoured).

Usage:
    PR_REVIEWER_CONFIG=config.json pr-reviewer
"""

import logging
import signal
import sys
import time
from typing import Optional

from pr_reviewer import __version__
from pr_reviewer.exceptions import ConfigurationError
from pr_reviewer.scheduler.cron_job import CronJob, create_pr_reviewer_job
from pr_reviewer.triage.actions import ReviewReminderHandler
from pr_reviewer.triage.config import TriageConfig, load_config
from pr_reviewer.triage.coordinator import RunCoordinator
from pr_reviewer.utils.github_api_tools import create_repo_clients
from pr_reviewer.utils.logging import setup_logging
from pr_reviewer.utils.mailer import SmtpMailer
from pr_reviewer.utils.utils import mask_secret

STATUS_LOG_INTERVAL_SECONDS = 3600

# Global job instance
job: Optional[CronJob] = None


def build_coordinator(config: TriageConfig) -> RunCoordinator:
    """Wire the GitHub clients and the review reminder mailer into a coordinator."""
    repo_clients = create_repo_clients(config.repositories, token=config.github_token)
    notify_handler = ReviewReminderHandler(SmtpMailer(config.smtp), config.notify_recipient)
    return RunCoordinator(config, repo_clients, notify_handler=notify_handler)


def signal_handler(signum: int, frame) -> None:
    """Handle shutdown signals."""
    logger = logging.getLogger(__name__)
    logger.info(f"Received signal {signum}, shutting down...")

    global job
    if job:
        job.stop()

    sys.exit(0)


def main():
    """Main entry point."""
    try:
        config = load_config()
    except ConfigurationError as e:
        setup_logging()
        logging.getLogger(__name__).error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(config.log_level, config.log_file)
    logger = logging.getLogger(__name__)

    logger.info(f"Starting Pull Request Reviewer v{__version__}")
    logger.info("Configuration:")
    logger.info(f"  - Repositories: {', '.join(config.repositories)}")
    logger.info(f"  - Notify recipient: {config.notify_recipient or '(none)'}")
    logger.info(f"  - GitHub token: {mask_secret(config.github_token) if config.github_token else '(none)'}")
    logger.info(f"  - Schedule: {config.cron_time} ({config.timezone})")
    logger.info(f"  - Fetch timeout: {config.fetch_timeout_seconds}s")

    global job
    job = create_pr_reviewer_job(config, build_coordinator(config))

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    job.start()

    # Keep the main thread alive
    try:
        last_status_time = time.time()
        while True:
            time.sleep(30)
            if not job.is_alive():
                logger.error("Cron job thread is not alive. Exiting...")
                sys.exit(1)

            if time.time() - last_status_time >= STATUS_LOG_INTERVAL_SECONDS:
                status = job.get_status()
                logger.info(
                    f"Status: Running={status['running']}, Ticks={status['tick_count']}, "
                    f"Last run={status['last_run']}, Next run={status['next_run']}"
                )
                last_status_time = time.time()

    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        job.stop()


if __name__ == '__main__':
    main()
