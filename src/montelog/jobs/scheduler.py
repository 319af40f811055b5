"""Cron-like job scheduler.

Runs async callables on 5-field cron schedules evaluated in UTC. A failing
job is logged and counted; it is not retried before its next tick.

Example:
    scheduler = JobScheduler()
    scheduler.add_job("refresh_post_cache", posts.refresh_post_cache, cron="0 * * * *")
    scheduler.add_job("clear_visitor_gates", visitors.clear_stale_gates, cron="0 0 * * *")

    await scheduler.start()
    ...
    await scheduler.stop()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from montelog.observability.logging import LogContext
from montelog.observability.metrics import record_job_run

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Awaitable[Any]]


@dataclass
class ScheduledJob:
    """A scheduled job definition."""

    name: str
    func: JobFunc
    cron: str
    enabled: bool = True
    last_run: datetime | None = None
    next_run: datetime | None = None
    last_error: str | None = None


class CronExpression:
    """Parse and evaluate cron expressions.

    Supports standard 5-field cron format:
    - minute (0-59)
    - hour (0-23)
    - day of month (1-31)
    - month (1-12)
    - day of week (0-6, 0=Sunday)

    Special characters:
    - * : any value
    - */n : every n values
    - n-m : range from n to m
    - n,m : specific values n and m
    """

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self._parse(expression)

    def _parse(self, expression: str) -> None:
        parts = expression.strip().split()
        if len(parts) != 5:
            raise ValueError(f"Invalid cron expression (expected 5 parts): {expression}")

        self.minute = self._parse_field(parts[0], 0, 59)
        self.hour = self._parse_field(parts[1], 0, 23)
        self.day_of_month = self._parse_field(parts[2], 1, 31)
        self.month = self._parse_field(parts[3], 1, 12)
        self.day_of_week = self._parse_field(parts[4], 0, 6)

    def _parse_field(self, field: str, min_val: int, max_val: int) -> set[int]:
        values: set[int] = set()

        for part in field.split(","):
            if part == "*":
                values.update(range(min_val, max_val + 1))
            elif part.startswith("*/"):
                step = int(part[2:])
                if step <= 0:
                    raise ValueError(f"Invalid cron step: {part}")
                values.update(range(min_val, max_val + 1, step))
            elif "-" in part:
                start, end = map(int, part.split("-"))
                values.update(range(start, end + 1))
            else:
                values.add(int(part))

        if not values or min(values) < min_val or max(values) > max_val:
            raise ValueError(f"Cron field out of range {min_val}-{max_val}: {field}")
        return values

    def matches(self, dt: datetime) -> bool:
        """Check if datetime matches this cron expression."""
        # Cron weekdays count from Sunday=0, Python's from Monday=0
        cron_weekday = (dt.weekday() + 1) % 7
        return (
            dt.minute in self.minute
            and dt.hour in self.hour
            and dt.day in self.day_of_month
            and dt.month in self.month
            and cron_weekday in self.day_of_week
        )

    def next_run(self, after: datetime | None = None) -> datetime:
        """Calculate the first matching minute strictly after the given time."""
        if after is None:
            after = datetime.now(UTC)

        current = after.replace(second=0, microsecond=0)

        for _ in range(366 * 24 * 60):
            current += timedelta(minutes=1)
            if self.matches(current):
                return current

        raise ValueError(f"No matching time found for: {self.expression}")


class JobScheduler:
    """Cron-like scheduler for recurring in-process jobs."""

    def __init__(self, check_interval: float = 30.0) -> None:
        self.check_interval = check_interval
        self._jobs: dict[str, ScheduledJob] = {}
        self._crons: dict[str, CronExpression] = {}
        self._running = False
        self._task: asyncio.Task[None] | None = None

    def add_job(
        self,
        name: str,
        func: JobFunc,
        cron: str = "* * * * *",
        enabled: bool = True,
    ) -> ScheduledJob:
        """Add a scheduled job.

        Args:
            name: Unique job name
            func: Coroutine function run on each tick
            cron: Cron expression (5-field format, UTC)
            enabled: Whether job is active

        Returns:
            ScheduledJob instance
        """
        cron_expr = CronExpression(cron)

        job = ScheduledJob(
            name=name,
            func=func,
            cron=cron,
            enabled=enabled,
            next_run=cron_expr.next_run(),
        )

        self._jobs[name] = job
        self._crons[name] = cron_expr

        logger.info(f"Scheduled job added: {name} ({cron}), next run: {job.next_run}")
        return job

    def remove_job(self, name: str) -> bool:
        if name in self._jobs:
            del self._jobs[name]
            del self._crons[name]
            logger.info(f"Scheduled job removed: {name}")
            return True
        return False

    def enable_job(self, name: str) -> bool:
        if name in self._jobs:
            self._jobs[name].enabled = True
            return True
        return False

    def disable_job(self, name: str) -> bool:
        if name in self._jobs:
            self._jobs[name].enabled = False
            return True
        return False

    def get_job(self, name: str) -> ScheduledJob | None:
        return self._jobs.get(name)

    def list_jobs(self) -> list[ScheduledJob]:
        return list(self._jobs.values())

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the scheduler loop in a background task."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Scheduler started with {len(self._jobs)} jobs")

    async def stop(self) -> None:
        """Stop the scheduler loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Scheduler stopped")

    async def _loop(self) -> None:
        while self._running:
            await self.check_schedules()
            await asyncio.sleep(self.check_interval)

    async def check_schedules(self, now: datetime | None = None) -> list[str]:
        """Run all due jobs. Returns the names of jobs that ran."""
        now = now or datetime.now(UTC)
        ran: list[str] = []

        for name, job in list(self._jobs.items()):
            if not job.enabled or job.next_run is None or now < job.next_run:
                continue

            await self._execute(job)
            job.next_run = self._crons[name].next_run(now)
            ran.append(name)

        return ran

    async def _execute(self, job: ScheduledJob) -> bool:
        with LogContext(job_name=job.name):
            job.last_run = datetime.now(UTC)
            try:
                result = await job.func()
            except Exception as e:
                job.last_error = str(e)
                record_job_run(job.name, "failure")
                logger.exception(f"Scheduled job {job.name} failed")
                return False

            job.last_error = None
            record_job_run(job.name, "success")
            logger.info(f"Scheduled job {job.name} completed: {result}")
            return True

    async def run_now(self, name: str) -> bool:
        """Run a job immediately, outside its schedule.

        Returns True if the job succeeded.

        Raises:
            KeyError: If no job with that name exists
        """
        job = self._jobs.get(name)
        if job is None:
            raise KeyError(name)
        logger.info(f"Manually triggered scheduled job: {name}")
        return await self._execute(job)


SCHEDULE_PRESETS = {
    "every_minute": "* * * * *",
    "every_hour": "0 * * * *",
    "daily_midnight": "0 0 * * *",
}
