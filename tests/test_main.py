"""Tests for the command-line entry point."""

from unittest.mock import patch

import pytest

from job_watch.main import main, parse_args


@pytest.fixture(autouse=True)
def no_log_handlers(monkeypatch):
    monkeypatch.setattr("job_watch.main.setup_logging", lambda *args, **kwargs: None)


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.config is None
        assert not args.once
        assert not args.dry_run

    def test_flags(self):
        args = parse_args(["--once", "--dry-run", "-v", "--config", "custom.yaml"])
        assert args.once and args.dry_run and args.verbose
        assert args.config == "custom.yaml"


class TestMain:
    def test_missing_config_file_exits(self):
        with pytest.raises(SystemExit) as exc:
            main(["--config", "nope.yaml"])
        assert exc.value.code == 1

    def test_stats_on_empty_tracker(self, capsys):
        main(["--stats"])
        assert "Total jobs tracked: 0" in capsys.readouterr().out

    def test_test_slack_without_webhook_fails(self):
        with pytest.raises(SystemExit) as exc:
            main(["--test-slack"])
        assert exc.value.code == 1

    def test_once_passes_dry_run(self):
        with patch("job_watch.main.run_pipeline") as run:
            main(["--once", "--dry-run"])
        assert run.call_args.kwargs["dry_run"] is True

    def test_once_without_tokens_exits(self):
        with pytest.raises(SystemExit) as exc:
            main(["--once"])
        assert exc.value.code == 1
