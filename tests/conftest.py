"""Shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from job_watch.jobs.models import ClientInfo, JobPosting
from job_watch.utils.timestamps import format_timestamp

NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)

ENV_VARS = [
    "UPWORK_API_KEY",
    "UPWORK_API_SECRET",
    "UPWORK_ACCESS_TOKEN",
    "UPWORK_REFRESH_TOKEN",
    "UPWORK_REDIRECT_URI",
    "SEARCH_KEYWORDS",
    "SEARCH_KEYWORD",
    "FILTER_COUNTRIES",
    "OPENAI_API_KEY",
    "SLACK_WEBHOOK_URL",
    "CRON_SCHEDULE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env out of config tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def make_job(job_id="1", hours_old=1.0, **kwargs) -> JobPosting:
    created = NOW - timedelta(hours=hours_old)
    defaults = dict(
        job_id=job_id,
        title=f"Shopify job {job_id}",
        created_at=created,
        posted_raw=format_timestamp(created),
        description="Need help with our Shopify store.",
    )
    defaults.update(kwargs)
    return JobPosting(**defaults)


def make_client(**kwargs) -> ClientInfo:
    defaults = dict(
        total_hires=12,
        total_posted_jobs=20,
        total_reviews=9,
        payment_verification_status="VERIFIED",
        country="United States",
    )
    defaults.update(kwargs)
    return ClientInfo(**defaults)
