"""Scheduled jobs for Monte-Log.

Provides:
- JobScheduler: cron-like runner for in-process async jobs
- Cache maintenance jobs (post page refresh, visitor gate cleanup)
"""

from montelog.jobs.scheduler import (
    SCHEDULE_PRESETS,
    CronExpression,
    JobScheduler,
    ScheduledJob,
)
from montelog.jobs.tasks import (
    CLEAR_VISITOR_GATES,
    REFRESH_POST_CACHE,
    register_default_jobs,
)

__all__ = [
    "CLEAR_VISITOR_GATES",
    "CronExpression",
    "JobScheduler",
    "REFRESH_POST_CACHE",
    "SCHEDULE_PRESETS",
    "ScheduledJob",
    "register_default_jobs",
]
