"""Tests for configuration loading."""

import pytest
import yaml

from job_watch.config import DEFAULT_PROFILE, AppConfig, load_config, validate_config


@pytest.fixture
def config_file(tmp_path):
    """Create a temporary config file."""
    config_data = {
        "upwork": {"client_id": "yaml-key", "client_secret": "yaml-secret"},
        "search": {
            "keywords": ["Shopify", "Shopify CRO"],
            "filter_countries": ["United States"],
            "recent_hours": 12,
            "max_notify": 3,
        },
        "qualifier": {"model": "gpt-test", "timeout_seconds": 2},
        "slack": {"webhook_url": "https://hooks.slack.com/services/yaml"},
        "schedule": {"cron": "*/15 * * * *", "run_on_start": False},
        "data_dir": "state",
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config_data), encoding="utf-8")
    return str(path)


def ready_config() -> AppConfig:
    config = AppConfig()
    config.upwork.client_id = "key"
    config.upwork.client_secret = "secret"
    config.upwork.access_token = "access"
    config.upwork.refresh_token = "refresh"
    config.qualifier.openai_api_key = "sk-test"
    config.slack.webhook_url = "https://hooks.slack.com/services/x"
    return config


class TestLoadConfig:
    def test_loads_valid_config(self, config_file):
        config = load_config(config_file)
        assert config.upwork.client_id == "yaml-key"
        assert config.search.keywords == ["Shopify", "Shopify CRO"]
        assert config.search.filter_countries == ["United States"]
        assert config.search.recent_hours == 12
        assert config.search.max_notify == 3
        assert config.qualifier.model == "gpt-test"
        assert config.schedule.cron == "*/15 * * * *"
        assert config.schedule.run_on_start is False
        assert config.snapshot_path.replace("\\", "/") == "state/seen-jobs.json"

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent.yaml")

    def test_no_file_uses_defaults(self):
        config = load_config()
        assert config.search.keywords == ["Shopify"]
        assert config.search.filter_countries is None
        assert config.search.recent_hours == 0
        assert config.qualifier.model == "gpt-4o-mini"
        assert config.qualifier.timeout_seconds == 5.0
        assert config.qualifier.profile == DEFAULT_PROFILE
        assert config.schedule.cron == "0 */6 * * *"
        assert config.snapshot_path.replace("\\", "/") == "data/seen-jobs.json"

    def test_default_config_yaml_is_picked_up(self, tmp_path):
        (tmp_path / "config.yaml").write_text("search:\n  keywords: [Klaviyo]\n", encoding="utf-8")
        assert load_config().search.keywords == ["Klaviyo"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(str(path)).search.keywords == ["Shopify"]


class TestEnvOverrides:
    def test_env_takes_precedence(self, config_file, monkeypatch):
        monkeypatch.setenv("UPWORK_API_KEY", "env-key")
        monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.com/services/env")
        monkeypatch.setenv("CRON_SCHEDULE", "0 9 * * *")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

        config = load_config(config_file)
        assert config.upwork.client_id == "env-key"
        assert config.upwork.client_secret == "yaml-secret"
        assert config.slack.webhook_url == "https://hooks.slack.com/services/env"
        assert config.schedule.cron == "0 9 * * *"
        assert config.qualifier.openai_api_key == "sk-env"

    def test_keyword_list(self, config_file, monkeypatch):
        monkeypatch.setenv("SEARCH_KEYWORDS", " Shopify , Shopify Plus,, ")
        assert load_config(config_file).search.keywords == ["Shopify", "Shopify Plus"]

    def test_legacy_single_keyword(self, monkeypatch):
        monkeypatch.setenv("SEARCH_KEYWORD", "Shopify Plus")
        assert load_config().search.keywords == ["Shopify Plus"]

    def test_keyword_list_beats_legacy(self, monkeypatch):
        monkeypatch.setenv("SEARCH_KEYWORDS", "A,B")
        monkeypatch.setenv("SEARCH_KEYWORD", "C")
        assert load_config().search.keywords == ["A", "B"]

    def test_filter_countries(self, monkeypatch):
        monkeypatch.setenv("FILTER_COUNTRIES", "United States, Canada")
        assert load_config().search.filter_countries == ["United States", "Canada"]

    def test_empty_filter_countries_disables_filter(self, config_file, monkeypatch):
        monkeypatch.setenv("FILTER_COUNTRIES", "")
        assert load_config(config_file).search.filter_countries is None

    def test_dotenv_file_is_read(self, tmp_path, monkeypatch):
        # register the variable with monkeypatch so the value load_dotenv sets is undone
        monkeypatch.setenv("SLACK_WEBHOOK_URL", "placeholder")
        monkeypatch.delenv("SLACK_WEBHOOK_URL")
        (tmp_path / ".env").write_text("SLACK_WEBHOOK_URL=https://hooks.slack.com/services/dotenv\n",
                                       encoding="utf-8")
        assert load_config().slack.webhook_url == "https://hooks.slack.com/services/dotenv"


class TestValidateConfig:
    def test_ready_config_has_no_warnings(self):
        assert validate_config(ready_config()) == []

    def test_missing_credentials_warn(self):
        warnings = validate_config(AppConfig())
        assert any("UPWORK_API_KEY" in w for w in warnings)
        assert any("--auth" in w for w in warnings)

    def test_qualifier_without_key_warns(self):
        config = ready_config()
        config.qualifier.openai_api_key = ""
        warnings = validate_config(config)
        assert any("openai" in w.lower() for w in warnings)

    def test_disabled_qualifier_needs_no_key(self):
        config = ready_config()
        config.qualifier.enabled = False
        config.qualifier.openai_api_key = ""
        assert validate_config(config) == []

    def test_no_webhook_warns(self):
        config = ready_config()
        config.slack.webhook_url = ""
        assert any("slack" in w.lower() for w in validate_config(config))

    def test_no_keywords_warns(self):
        config = ready_config()
        config.search.keywords = []
        assert any("keywords" in w.lower() for w in validate_config(config))

    def test_invalid_cron_warns(self):
        config = ready_config()
        config.schedule.cron = "every now and then"
        assert any("cron" in w.lower() for w in validate_config(config))
