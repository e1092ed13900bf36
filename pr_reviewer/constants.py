# Entrius 2025
# =============================================================================
# GitHub API
# =============================================================================
BASE_GITHUB_API_URL = "https://api.github.com"
GITHUB_PAGE_SIZE = 100
GITHUB_REQUEST_TIMEOUT_SECONDS = 30

# Rate limit headers are only logged, never waited on
RATE_LIMIT_MIN_REMAINING = 10

# =============================================================================
# Monitored Repositories
# =============================================================================
DEFAULT_REPOSITORIES = [
    "numenta/nupic",
    "numenta/nupic.core",
    "numenta/nupic-linux64",
    "numenta/nupic-darwin64",
]

# =============================================================================
# Triage Labels
# =============================================================================
READY_LABEL = "status:ready"
IN_PROGRESS_LABEL = "status:in progress"
HELP_WANTED_LABEL = "status:help wanted"

# =============================================================================
# Triage Thresholds
# =============================================================================
NOTIFY_AFTER_DAYS = 7  # ready PRs untouched this long get a review reminder
WARN_AFTER_DAYS = 25  # stale in-progress/help-wanted PRs get an expiry warning
CLOSE_AFTER_MONTHS = 1  # calendar months, stale in-progress/help-wanted PRs expire

# =============================================================================
# Scheduling
# =============================================================================
JOB_NAME = "Pull Request Reviewer"
JOB_DESCRIPTION = "Looks for PRs that match certain criteria and takes actions to keep them up-to-date."
DEFAULT_CRON_TIME = "5 * * * *"  # hourly, five past
DEFAULT_TIMEZONE = "America/Los_Angeles"
DEFAULT_FETCH_TIMEOUT_SECONDS = 60

# =============================================================================
# Review Reminder Mail
# =============================================================================
REVIEW_REMINDER_SUBJECT = "{count} pull requests need review"
REVIEW_REMINDER_GREETING = "Hello Committers! Here is a list of pull requests awaiting\nreview:\n\n"
REVIEW_REMINDER_LINE = "- {title} --- {url}\n"
REVIEW_REMINDER_CLOSING = (
    "\nThese pull requests have been ready for review for over a\n"
    "week! Please make it a priority to review these contributions\n"
    "or discuss reasons why they cannot be merged.\n\n"
)

# =============================================================================
# SMTP
# =============================================================================
DEFAULT_SMTP_HOST = "localhost"
DEFAULT_SMTP_PORT = 25
DEFAULT_SMTP_FROM_EMAIL = "pr-reviewer@localhost"
