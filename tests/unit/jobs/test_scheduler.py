"""Tests for job scheduler functionality."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from montelog.jobs.scheduler import (
    SCHEDULE_PRESETS,
    CronExpression,
    JobScheduler,
    ScheduledJob,
)


class TestCronExpression:
    """Tests for CronExpression parsing and matching."""

    def test_parse_all_wildcards(self) -> None:
        cron = CronExpression("* * * * *")

        assert len(cron.minute) == 60
        assert len(cron.hour) == 24
        assert len(cron.day_of_month) == 31
        assert len(cron.month) == 12
        assert len(cron.day_of_week) == 7

    def test_parse_specific_values(self) -> None:
        cron = CronExpression("30 14 1 6 0")

        assert cron.minute == {30}
        assert cron.hour == {14}
        assert cron.day_of_month == {1}
        assert cron.month == {6}
        assert cron.day_of_week == {0}

    def test_parse_step_values(self) -> None:
        cron = CronExpression("*/15 * * * *")

        assert cron.minute == {0, 15, 30, 45}

    def test_parse_range(self) -> None:
        cron = CronExpression("* 9-17 * * *")

        assert cron.hour == {9, 10, 11, 12, 13, 14, 15, 16, 17}

    def test_parse_list(self) -> None:
        cron = CronExpression("0,30 * * * *")

        assert cron.minute == {0, 30}

    def test_parse_invalid_expression(self) -> None:
        with pytest.raises(ValueError, match="expected 5 parts"):
            CronExpression("* * *")

    def test_parse_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="out of range"):
            CronExpression("60 * * * *")

    def test_parse_zero_step(self) -> None:
        with pytest.raises(ValueError, match="step"):
            CronExpression("*/0 * * * *")

    def test_matches_specific_time(self) -> None:
        cron = CronExpression("30 14 * * *")

        assert cron.matches(datetime(2024, 1, 15, 14, 30, tzinfo=timezone.utc)) is True
        assert cron.matches(datetime(2024, 1, 15, 14, 31, tzinfo=timezone.utc)) is False

    def test_day_of_week_counts_from_sunday(self) -> None:
        """2024-01-14 is a Sunday (cron 0), 2024-01-15 a Monday (cron 1)."""
        sunday = CronExpression("0 0 * * 0")
        monday = CronExpression("0 0 * * 1")

        assert sunday.matches(datetime(2024, 1, 14, tzinfo=timezone.utc))
        assert not sunday.matches(datetime(2024, 1, 15, tzinfo=timezone.utc))
        assert monday.matches(datetime(2024, 1, 15, tzinfo=timezone.utc))

    def test_next_run_hourly(self) -> None:
        cron = CronExpression("0 * * * *")

        after = datetime(2024, 1, 1, 10, 15, 42, tzinfo=timezone.utc)

        assert cron.next_run(after) == datetime(2024, 1, 1, 11, 0, tzinfo=timezone.utc)

    def test_next_run_is_strictly_after(self) -> None:
        cron = CronExpression("0 0 * * *")

        after = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)

        assert cron.next_run(after) == datetime(2024, 1, 2, 0, 0, tzinfo=timezone.utc)


class TestSchedulePresets:
    def test_presets_are_valid(self) -> None:
        for expression in SCHEDULE_PRESETS.values():
            cron = CronExpression(expression)
            assert len(cron.minute) > 0

    def test_daily_midnight_preset(self) -> None:
        cron = CronExpression(SCHEDULE_PRESETS["daily_midnight"])

        assert cron.matches(datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc))
        assert not cron.matches(datetime(2024, 1, 1, 0, 1, tzinfo=timezone.utc))


class TestScheduledJob:
    def test_job_creation(self) -> None:
        func = AsyncMock()
        job = ScheduledJob(name="refresh", func=func, cron="0 * * * *")

        assert job.enabled is True
        assert job.last_run is None
        assert job.last_error is None


class TestJobScheduler:
    """Tests for JobScheduler class."""

    @pytest.fixture
    def scheduler(self) -> JobScheduler:
        return JobScheduler(check_interval=0.01)

    def test_add_job(self, scheduler: JobScheduler) -> None:
        job = scheduler.add_job("refresh", AsyncMock(), cron="0 * * * *")

        assert job.name == "refresh"
        assert job.next_run is not None
        assert scheduler.get_job("refresh") is job

    def test_add_job_rejects_bad_cron(self, scheduler: JobScheduler) -> None:
        with pytest.raises(ValueError):
            scheduler.add_job("bad", AsyncMock(), cron="every hour")

    def test_remove_job(self, scheduler: JobScheduler) -> None:
        scheduler.add_job("refresh", AsyncMock())

        assert scheduler.remove_job("refresh") is True
        assert scheduler.remove_job("refresh") is False
        assert scheduler.get_job("refresh") is None

    def test_enable_disable(self, scheduler: JobScheduler) -> None:
        scheduler.add_job("refresh", AsyncMock(), enabled=False)

        assert scheduler.enable_job("refresh") is True
        assert scheduler.get_job("refresh").enabled is True
        assert scheduler.disable_job("refresh") is True
        assert scheduler.get_job("refresh").enabled is False
        assert scheduler.enable_job("missing") is False

    def test_list_jobs(self, scheduler: JobScheduler) -> None:
        scheduler.add_job("refresh", AsyncMock(), cron="0 * * * *")
        scheduler.add_job("cleanup", AsyncMock(), cron="0 0 * * *")

        assert sorted(j.name for j in scheduler.list_jobs()) == ["cleanup", "refresh"]

    @pytest.mark.asyncio
    async def test_check_schedules_runs_due_jobs(self, scheduler: JobScheduler) -> None:
        func = AsyncMock(return_value={"cached_posts": 7})
        job = scheduler.add_job("refresh", func, cron="0 * * * *")
        due = job.next_run

        ran = await scheduler.check_schedules(now=due)

        assert ran == ["refresh"]
        func.assert_awaited_once()
        assert job.last_run is not None
        assert job.next_run == due + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_check_schedules_skips_future_and_disabled(
        self, scheduler: JobScheduler
    ) -> None:
        future = AsyncMock()
        disabled = AsyncMock()
        job = scheduler.add_job("future", future, cron="0 * * * *")
        scheduler.add_job("disabled", disabled, cron="* * * * *", enabled=False)

        ran = await scheduler.check_schedules(now=job.next_run - timedelta(seconds=1))

        assert ran == []
        future.assert_not_called()
        disabled.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_job_is_recorded_and_rescheduled(
        self, scheduler: JobScheduler
    ) -> None:
        func = AsyncMock(side_effect=RuntimeError("redis down"))
        job = scheduler.add_job("cleanup", func, cron="0 0 * * *")
        due = job.next_run

        ran = await scheduler.check_schedules(now=due)

        assert ran == ["cleanup"]
        assert job.last_error == "redis down"
        assert job.next_run == due + timedelta(days=1)

    @pytest.mark.asyncio
    async def test_run_now(self, scheduler: JobScheduler) -> None:
        func = AsyncMock()
        scheduler.add_job("refresh", func, cron="0 * * * *")

        assert await scheduler.run_now("refresh") is True
        func.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_now_reports_failure(self, scheduler: JobScheduler) -> None:
        scheduler.add_job("refresh", AsyncMock(side_effect=RuntimeError("boom")))

        assert await scheduler.run_now("refresh") is False

    @pytest.mark.asyncio
    async def test_run_now_nonexistent(self, scheduler: JobScheduler) -> None:
        with pytest.raises(KeyError):
            await scheduler.run_now("nonexistent")

    @pytest.mark.asyncio
    async def test_start_and_stop(self, scheduler: JobScheduler) -> None:
        await scheduler.start()
        assert scheduler.running is True

        await scheduler.stop()
        assert scheduler.running is False
