from .actions import ActionHandler, LogCloseHandler, LogWarnHandler, ReviewReminderHandler
from .classifier import bucket_pull_requests, classify_pull_request
from .config import TriageConfig, load_config
from .coordinator import RunCoordinator

__all__ = [
    "ActionHandler",
    "LogCloseHandler",
    "LogWarnHandler",
    "ReviewReminderHandler",
    "bucket_pull_requests",
    "classify_pull_request",
    "TriageConfig",
    "load_config",
    "RunCoordinator",
]
