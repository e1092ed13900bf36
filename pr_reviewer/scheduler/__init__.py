from .cron_job import CronJob, create_pr_reviewer_job

__all__ = ["CronJob", "create_pr_reviewer_job"]
