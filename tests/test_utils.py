"""Tests for the shared CLI utilities: exit codes and the error handler."""

import click
import pytest

from sqlaudit.utils import ExitCodes, handle_exceptions
from sqlaudit.utils.constants import ERROR_LOG_FILE


class TestExitCodes:
    def test_descriptions(self):
        assert "without an in-file declaration" in ExitCodes.get_description(
            ExitCodes.MISSING_DECLARATIONS
        )
        assert ExitCodes.get_description(42) == "Unknown exit code: 42"

    def test_pipeline_failure_threshold(self):
        assert not ExitCodes.should_fail_pipeline(ExitCodes.SUCCESS)
        assert not ExitCodes.should_fail_pipeline(ExitCodes.MISSING_DECLARATIONS)
        assert ExitCodes.should_fail_pipeline(ExitCodes.TASK_INCOMPLETE)


class TestHandleExceptions:
    def test_unexpected_error_becomes_click_exception(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        @handle_exceptions
        def explode():
            raise RuntimeError("disk on fire")

        with pytest.raises(click.ClickException) as exc_info:
            explode()

        assert "RuntimeError: disk on fire" in exc_info.value.message
        log_text = (tmp_path / ERROR_LOG_FILE).read_text(encoding="utf-8")
        assert "Error in command: explode" in log_text
        assert "Traceback" in log_text

    def test_click_exceptions_pass_through(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        @handle_exceptions
        def usage():
            raise click.UsageError("bad flag")

        with pytest.raises(click.UsageError):
            usage()
        assert not (tmp_path / ERROR_LOG_FILE).exists()

    def test_return_value_is_preserved(self):
        @handle_exceptions
        def ok():
            return 7

        assert ok() == 7
