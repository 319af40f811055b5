"""Tests for structured logging."""

import json
import logging

from montelog.observability.logging import JsonFormatter, LogContext, job_name_var


def make_record(message: str = "Post cache refreshed") -> logging.LogRecord:
    return logging.LogRecord(
        name="montelog.jobs.tasks",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )


class TestJsonFormatter:
    def test_basic_fields(self) -> None:
        data = json.loads(JsonFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "montelog.jobs.tasks"
        assert data["message"] == "Post cache refreshed"
        assert "request_id" not in data

    def test_includes_context(self) -> None:
        with LogContext(request_id="req-1", job_name="refresh_post_cache"):
            data = json.loads(JsonFormatter().format(make_record()))

        assert data["request_id"] == "req-1"
        assert data["job"] == "refresh_post_cache"

    def test_extras_are_included(self) -> None:
        record = make_record()
        record.cache_key = "posts_page_1"

        data = json.loads(JsonFormatter().format(record))

        assert data["cache_key"] == "posts_page_1"


class TestLogContext:
    def test_resets_on_exit(self) -> None:
        with LogContext(job_name="clear_visitor_gates"):
            assert job_name_var.get() == "clear_visitor_gates"

        assert job_name_var.get() == ""
