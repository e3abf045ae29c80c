"""YAML config loading and validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

from job_watch.utils.text_processing import split_csv

DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_PROFILE = """Shopify CRO/Developer for Meta-Driven Brands Scaling Ad Spend

I help Shopify brands doing $100k+/month on Meta ads align their marketing message and
customer journey, starting with the PDP, so they can scale ad spend without destroying
efficiency.

Target clients:
- Shopify brands doing $100k+/month (ideal)
- Any Shopify development, migration, or design work (good fit)
- Scaling Meta/Facebook ads with increasing CPAs/CACs
- Need conversion optimization, PDP redesign, A/B testing

NOT a fit:
- Brand-new stores without revenue
- Dropshipping without traction
- Non-Shopify platforms (WordPress, WIX, Squarespace, etc.)
- Generic VA work"""


@dataclass
class UpworkConfig:
    client_id: str = ""
    client_secret: str = ""
    access_token: str = ""
    refresh_token: str = ""
    redirect_uri: str = "http://localhost:3000/callback"
    env_file: str = ".env"  # refreshed tokens are written back here


@dataclass
class SearchConfig:
    keywords: list[str] = field(default_factory=lambda: ["Shopify"])
    filter_countries: Optional[list[str]] = None
    recent_hours: float = 0  # 0 disables the secondary recency gate
    max_notify: int = 5


@dataclass
class QualifierConfig:
    enabled: bool = True
    openai_api_key: str = ""
    model: str = "gpt-4o-mini"
    timeout_seconds: float = 5.0
    profile: str = DEFAULT_PROFILE
    cost_per_job: float = 0.001


@dataclass
class SlackConfig:
    webhook_url: str = ""


@dataclass
class ScheduleConfig:
    cron: str = "0 */6 * * *"
    timezone: str = "America/New_York"
    run_on_start: bool = True


@dataclass
class AppConfig:
    upwork: UpworkConfig = field(default_factory=UpworkConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    qualifier: QualifierConfig = field(default_factory=QualifierConfig)
    slack: SlackConfig = field(default_factory=SlackConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    data_dir: str = "data"
    log_dir: str = "logs"

    @property
    def snapshot_path(self) -> str:
        return str(Path(self.data_dir) / "seen-jobs.json")


def _env_list(name: str) -> Optional[list[str]]:
    value = os.environ.get(name)
    if value is None:
        return None
    return split_csv(value)


def _keywords_from_env() -> Optional[list[str]]:
    keywords = _env_list("SEARCH_KEYWORDS")
    if keywords is not None:
        return keywords
    legacy = os.environ.get("SEARCH_KEYWORD", "").strip()
    return [legacy] if legacy else None


def load_config(config_path: Optional[str] = None, env_file: str = ".env") -> AppConfig:
    """Load configuration from YAML, with environment variables taking precedence.

    ``config_path=None`` falls back to ``config.yaml`` if present and plain
    defaults otherwise; an explicit path that does not exist is an error.
    """
    load_dotenv(env_file, override=False)

    if config_path is None:
        path = Path(DEFAULT_CONFIG_PATH)
        raw = {}
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
    else:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                "Copy config.example.yaml to config.yaml and fill in your settings."
            )
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    config = AppConfig()

    # Upwork credentials (env vars take precedence)
    upwork_raw = raw.get("upwork", {})
    config.upwork = UpworkConfig(
        client_id=os.environ.get("UPWORK_API_KEY", upwork_raw.get("client_id", "")),
        client_secret=os.environ.get("UPWORK_API_SECRET", upwork_raw.get("client_secret", "")),
        access_token=os.environ.get("UPWORK_ACCESS_TOKEN", upwork_raw.get("access_token", "")),
        refresh_token=os.environ.get("UPWORK_REFRESH_TOKEN", upwork_raw.get("refresh_token", "")),
        redirect_uri=os.environ.get(
            "UPWORK_REDIRECT_URI",
            upwork_raw.get("redirect_uri", "http://localhost:3000/callback"),
        ),
        env_file=upwork_raw.get("env_file", env_file),
    )

    # Search
    search_raw = raw.get("search", {})
    keywords = _keywords_from_env() or search_raw.get("keywords") or ["Shopify"]
    countries = _env_list("FILTER_COUNTRIES")
    if countries is None:
        countries = search_raw.get("filter_countries") or None
    config.search = SearchConfig(
        keywords=[str(k).strip() for k in keywords if str(k).strip()],
        filter_countries=countries or None,
        recent_hours=search_raw.get("recent_hours", 0) or 0,
        max_notify=search_raw.get("max_notify", 5),
    )

    # Qualifier
    qualifier_raw = raw.get("qualifier", {})
    config.qualifier = QualifierConfig(
        enabled=qualifier_raw.get("enabled", True),
        openai_api_key=os.environ.get("OPENAI_API_KEY", qualifier_raw.get("openai_api_key", "")),
        model=qualifier_raw.get("model", "gpt-4o-mini"),
        timeout_seconds=qualifier_raw.get("timeout_seconds", 5.0),
        profile=qualifier_raw.get("profile") or DEFAULT_PROFILE,
        cost_per_job=qualifier_raw.get("cost_per_job", 0.001),
    )

    # Slack
    slack_raw = raw.get("slack", {})
    config.slack = SlackConfig(
        webhook_url=os.environ.get("SLACK_WEBHOOK_URL", slack_raw.get("webhook_url", "")),
    )

    # Schedule
    schedule_raw = raw.get("schedule", {})
    config.schedule = ScheduleConfig(
        cron=os.environ.get("CRON_SCHEDULE", schedule_raw.get("cron", "0 */6 * * *")),
        timezone=schedule_raw.get("timezone", "America/New_York"),
        run_on_start=schedule_raw.get("run_on_start", True),
    )

    config.data_dir = raw.get("data_dir", "data")
    config.log_dir = raw.get("log_dir", "logs")

    return config


def validate_config(config: AppConfig) -> list[str]:
    """Return list of validation warnings (empty = OK)."""
    from job_watch.scheduler import validate_cron

    warnings = []

    if not config.upwork.client_id or not config.upwork.client_secret:
        warnings.append("Upwork API key/secret not configured (UPWORK_API_KEY, UPWORK_API_SECRET)")

    if not config.upwork.access_token or not config.upwork.refresh_token:
        warnings.append("Upwork tokens missing - run `job-watch --auth` to authenticate")

    if not config.search.keywords:
        warnings.append("No search keywords configured")

    if config.qualifier.enabled and not config.qualifier.openai_api_key:
        warnings.append("Qualifier enabled but no OpenAI API key configured - jobs will pass through unvetted")

    if not config.slack.webhook_url:
        warnings.append("No Slack webhook configured - notifications disabled")

    if not validate_cron(config.schedule.cron):
        warnings.append(f"Invalid cron schedule: {config.schedule.cron!r}")

    return warnings
