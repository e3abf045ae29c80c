"""Slack incoming-webhook sender."""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from job_watch.jobs.models import JobPosting
from job_watch.notifications.templates import render_jobs_message, render_test_message
from job_watch.utils.http_client import create_session, describe_http_error

logger = logging.getLogger("job_watch.notifications")


@dataclass
class DeliveryResult:
    success: bool
    count: int = 0
    reason: str = ""


class SlackNotifier:
    """Posts job batches to a Slack webhook. Never raises on delivery failure."""

    def __init__(
        self,
        webhook_url: str,
        max_jobs: int = 5,
        session: Optional[requests.Session] = None,
    ):
        self.webhook_url = webhook_url
        self.max_jobs = max_jobs
        # Webhook posts are not idempotent; don't retry them
        self.session = session or create_session(retry_post=False)

        if not self.enabled:
            logger.warning("Slack notifications disabled (no webhook URL configured)")

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def _post(self, payload: dict) -> Optional[str]:
        """POST a payload; returns None on success or a failure reason."""
        try:
            response = self.session.post(self.webhook_url, json=payload, timeout=30)
        except requests.RequestException as e:
            return describe_http_error(e)
        if response.status_code != 200:
            return f"HTTP {response.status_code}"
        return None

    def notify_new_jobs(self, jobs: list[JobPosting]) -> DeliveryResult:
        if not self.enabled:
            return DeliveryResult(False, reason="Slack notifications disabled")

        payload = render_jobs_message(jobs, max_jobs=self.max_jobs)
        if payload is None:
            logger.info("No new jobs to notify about")
            return DeliveryResult(True, count=0)

        error = self._post(payload)
        if error:
            logger.error("Failed to send Slack notification: %s", error)
            return DeliveryResult(False, reason=error)

        # Jobs past max_jobs only appear in the overflow line
        sent = min(len(jobs), self.max_jobs)
        logger.info("Slack notification sent (%d of %d job%s)", sent, len(jobs), "" if len(jobs) == 1 else "s")
        return DeliveryResult(True, count=sent)

    def send_test_notification(self) -> bool:
        if not self.enabled:
            logger.error("Cannot send test - Slack notifications disabled")
            return False

        error = self._post(render_test_message())
        if error:
            logger.error("Test notification failed: %s", error)
            return False

        logger.info("Test Slack notification sent")
        return True
