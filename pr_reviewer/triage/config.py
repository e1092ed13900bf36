# The MIT License (MIT)
# Copyright © 2025 Entrius

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from croniter import croniter
from dotenv import load_dotenv

from pr_reviewer.classes import TriageLabels, TriageThresholds
from pr_reviewer.constants import (
    DEFAULT_CRON_TIME,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_REPOSITORIES,
    DEFAULT_TIMEZONE,
)
from pr_reviewer.exceptions import ConfigurationError
from pr_reviewer.utils.datetime_utils import get_timezone
from pr_reviewer.utils.mailer import SmtpConfig

CONFIG_PATH_ENV = 'PR_REVIEWER_CONFIG'

logger = logging.getLogger(__name__)


@dataclass
class TriageConfig:
    """Everything a pull request review run needs, passed explicitly to the coordinator."""

    repositories: List[str] = field(default_factory=lambda: list(DEFAULT_REPOSITORIES))
    notify_recipient: Optional[str] = None
    github_token: Optional[str] = None
    labels: TriageLabels = field(default_factory=TriageLabels)
    thresholds: TriageThresholds = field(default_factory=TriageThresholds)
    smtp: SmtpConfig = field(default_factory=SmtpConfig)
    cron_time: str = DEFAULT_CRON_TIME
    timezone: str = DEFAULT_TIMEZONE
    run_now: bool = False
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    log_level: str = 'INFO'
    log_file: Optional[str] = None

    def validate(self) -> None:
        """Raise ConfigurationError if any setting cannot work."""
        if not self.repositories:
            raise ConfigurationError("No repositories configured for review")
        for repository in self.repositories:
            if not isinstance(repository, str) or repository.count('/') != 1:
                raise ConfigurationError(f"Repository must be in 'owner/repo' format, got: {repository}")
        if not isinstance(self.cron_time, str) or not croniter.is_valid(self.cron_time):
            raise ConfigurationError(f"Invalid cron expression: {self.cron_time}")
        if not isinstance(self.timezone, str):
            raise ConfigurationError(f"Unknown timezone: {self.timezone!r}")
        get_timezone(self.timezone)
        if not _is_number(self.fetch_timeout_seconds):
            raise ConfigurationError(f"fetch_timeout_seconds must be a number, got: {self.fetch_timeout_seconds!r}")
        if self.fetch_timeout_seconds <= 0:
            raise ConfigurationError("fetch_timeout_seconds must be positive")
        t = self.thresholds
        if not all(_is_number(v) for v in (t.notify_days, t.warn_days, t.close_months)):
            raise ConfigurationError("Triage thresholds must be numbers")
        if t.notify_days < 0 or t.warn_days < 0 or t.close_months < 0:
            raise ConfigurationError("Triage thresholds must not be negative")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _config_from_dict(data: Dict[str, Any]) -> TriageConfig:
    config = TriageConfig()

    if 'repositories' in data:
        config.repositories = list(data['repositories'])

    # Accept the legacy notifications.pr_review layout as well as a flat key
    notifications = data.get('notifications') or {}
    config.notify_recipient = data.get('notify_recipient', notifications.get('pr_review'))

    config.github_token = data.get('github_token')
    config.labels = TriageLabels(**data.get('labels', {}))
    config.thresholds = TriageThresholds(**data.get('thresholds', {}))
    config.smtp = SmtpConfig(**data.get('smtp', {}))

    for key in ('cron_time', 'timezone', 'run_now', 'fetch_timeout_seconds', 'log_level', 'log_file'):
        if key in data:
            setattr(config, key, data[key])

    return config


def _apply_env_overrides(config: TriageConfig) -> None:
    env = os.environ

    if env.get('GITHUB_TOKEN'):
        config.github_token = env['GITHUB_TOKEN']
    if env.get('PR_REVIEW_EMAIL'):
        config.notify_recipient = env['PR_REVIEW_EMAIL']
    if env.get('PR_REVIEWER_LOG_LEVEL'):
        config.log_level = env['PR_REVIEWER_LOG_LEVEL']

    smtp = config.smtp
    if env.get('SMTP_HOST'):
        smtp.host = env['SMTP_HOST']
    if env.get('SMTP_PORT'):
        try:
            smtp.port = int(env['SMTP_PORT'])
        except ValueError as e:
            raise ConfigurationError(f"SMTP_PORT must be an integer, got: {env['SMTP_PORT']}") from e
    if env.get('SMTP_USERNAME'):
        smtp.username = env['SMTP_USERNAME']
    if env.get('SMTP_PASSWORD'):
        smtp.password = env['SMTP_PASSWORD']
    if env.get('SMTP_FROM_EMAIL'):
        smtp.from_email = env['SMTP_FROM_EMAIL']
    if env.get('SMTP_USE_TLS'):
        smtp.use_tls = _parse_bool(env['SMTP_USE_TLS'])


def load_config(config_path: Optional[str] = None) -> TriageConfig:
    """Load configuration from an optional JSON file, then apply environment overrides.

    The file path comes from the argument or the PR_REVIEWER_CONFIG env var. A local
    .env file is loaded first so secrets (GITHUB_TOKEN, SMTP_PASSWORD) can live there.

    Raises:
        ConfigurationError: if the file is unreadable or any setting is invalid
    """
    load_dotenv()

    config_path = config_path or os.environ.get(CONFIG_PATH_ENV)
    if config_path:
        try:
            with open(config_path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Config file not found: {config_path}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse JSON from {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected dict from {config_path}, got {type(data).__name__}")

        try:
            config = _config_from_dict(data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid setting in {config_path}: {e}") from e
        logger.info(f"Loaded configuration from {config_path}")
    else:
        config = TriageConfig()

    _apply_env_overrides(config)
    try:
        config.validate()
    except TypeError as e:
        raise ConfigurationError(f"Invalid setting: {e}") from e
    return config
