import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from pr_reviewer.classes import PullRequest, TriageResult

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_RETENTION_SIZE = 10 * 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 10

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=DEFAULT_LOG_RETENTION_SIZE, backupCount=DEFAULT_LOG_BACKUP_COUNT)
        )

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def _log_bucket(name: str, prs: List['PullRequest'], last: bool = False) -> None:
    branch = '└─' if last else '├─'
    stem = '   ' if last else '│  '
    logger.info(f'  {branch} {name}: {len(prs)}')
    for pr in prs:
        logger.debug(f'  {stem} - [{pr.repository_full_name}#{pr.number}] {pr.title} ({pr.html_url})')


def log_triage_summary(result: 'TriageResult') -> None:
    """Log the bucket breakdown of a triage run."""
    logger.info(f'Triaged {len(result.pull_requests)} open pull requests:')
    _log_bucket('Notify', result.notify)
    _log_bucket('Warn', result.warn)
    _log_bucket('Close', result.close, last=True)
