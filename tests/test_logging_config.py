"""Tests for logging setup."""

import logging

import pytest

from job_watch.utils.logging_config import LOG_FILENAME, NOISY_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def reset_loggers():
    yield
    for name in ("job_watch", *NOISY_LOGGERS):
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_writes_log_file(self, tmp_path):
        logger = setup_logging(str(tmp_path / "logs"))
        logging.getLogger("job_watch.tracker").info("tracked 3 jobs")
        for handler in logger.handlers:
            handler.flush()

        content = (tmp_path / "logs" / LOG_FILENAME).read_text(encoding="utf-8")
        assert "[INFO] job_watch.tracker: tracked 3 jobs" in content

    def test_repeat_setup_does_not_stack_handlers(self, tmp_path):
        setup_logging(str(tmp_path))
        logger = setup_logging(str(tmp_path))
        assert len(logger.handlers) == 2

    def test_libraries_quiet_by_default(self, tmp_path):
        setup_logging(str(tmp_path))
        assert logging.getLogger("apscheduler").level == logging.WARNING

    def test_libraries_verbose_in_debug(self, tmp_path):
        setup_logging(str(tmp_path), level=logging.DEBUG)
        assert logging.getLogger("urllib3").level == logging.DEBUG
