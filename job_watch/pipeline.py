"""One watch run: fetch, track, gate by recency, qualify and deliver."""

import logging
import time
import traceback
from typing import Optional

from job_watch.config import AppConfig
from job_watch.jobs.ingestion import SearchProvider, fetch_all_jobs
from job_watch.matching.qualifier import JobQualifier
from job_watch.models import RunSummary
from job_watch.notifications.slack_sender import SlackNotifier
from job_watch.storage.snapshot import SnapshotStore
from job_watch.storage.tracker import RETENTION_WINDOW, JobTracker

logger = logging.getLogger("job_watch.pipeline")


def build_tracker(config: AppConfig) -> JobTracker:
    return JobTracker(SnapshotStore(config.snapshot_path))


def build_provider(config: AppConfig) -> SearchProvider:
    from job_watch.jobs.auth import TokenManager
    from job_watch.jobs.upwork_client import UpworkClient

    tokens = TokenManager(config.upwork)
    tokens.ensure_authenticated()
    return UpworkClient(tokens)


def build_qualifier(config: AppConfig) -> JobQualifier:
    q = config.qualifier
    return JobQualifier(
        api_key=q.openai_api_key,
        model=q.model,
        timeout=q.timeout_seconds,
        profile=q.profile,
        cost_per_job=q.cost_per_job,
        enabled=q.enabled,
    )


def build_notifier(config: AppConfig) -> SlackNotifier:
    return SlackNotifier(config.slack.webhook_url, max_jobs=config.search.max_notify)


def log_run_summary(summary: RunSummary, tracker: JobTracker, config: AppConfig) -> None:
    logger.info("=" * 60)
    if summary.new_jobs == 0:
        logger.info("SEARCH RESULTS - No new jobs found")
    else:
        logger.info(
            "SEARCH RESULTS - %d NEW job%s found", summary.new_jobs, "" if summary.new_jobs == 1 else "s"
        )
    logger.info("  %d jobs already seen (filtered out)", summary.already_seen)
    if summary.too_old:
        logger.info("  %d older jobs filtered (not recently posted)", summary.too_old)
    if len(config.search.keywords) > 1:
        logger.info("  Keywords: %s", ", ".join(config.search.keywords))
    if config.search.filter_countries:
        logger.info("  Location filter: %s", ", ".join(config.search.filter_countries))

    stats = tracker.get_stats()
    logger.info(
        "  Tracking %d jobs (auto-cleanup after %d hours)",
        stats.total_tracked, RETENTION_WINDOW.total_seconds() // 3600,
    )
    logger.info("=" * 60)


def run_pipeline(
    config: AppConfig,
    tracker: Optional[JobTracker] = None,
    provider: Optional[SearchProvider] = None,
    qualifier: Optional[JobQualifier] = None,
    notifier: Optional[SlackNotifier] = None,
    dry_run: bool = False,
) -> RunSummary:
    """Run the watch pipeline once. Collaborators not passed in are built from config."""
    start = time.time()
    summary = RunSummary()

    if tracker is None:
        tracker = build_tracker(config)
    if provider is None:
        provider = build_provider(config)

    try:
        # Step 1: Fetch
        jobs = fetch_all_jobs(provider, config.search.keywords, config.search.filter_countries)
        summary.jobs_fetched = len(jobs)

        # Step 2: Track (cleanup, dedup, mark, persist)
        processed = tracker.process(jobs)
        summary.new_jobs = processed.new_jobs
        summary.already_seen = processed.already_seen
        summary.snapshot_saved = processed.saved
        new_jobs = processed.jobs

        # Step 3: Optional secondary recency gate
        if config.search.recent_hours and new_jobs:
            recent = tracker.filter_recent(new_jobs, config.search.recent_hours)
            summary.too_old = len(new_jobs) - len(recent)
            new_jobs = recent

        log_run_summary(summary, tracker, config)

        if not new_jobs:
            logger.info("All caught up - no new postings this run")
            return summary

        # Step 4: Qualify
        if qualifier is None:
            qualifier = build_qualifier(config)
        report = qualifier.qualify_jobs(new_jobs)
        summary.qualified = len(report.qualified)
        summary.rejected = len(report.rejected)

        for job in report.rejected:
            logger.info("Rejected (tier %d): %s - %s", job.tier, job.title, job.reasoning)

        # Step 5: Deliver
        if dry_run:
            logger.info("DRY RUN - Skipping Slack. Would send %d jobs:", len(report.qualified))
            for i, job in enumerate(report.qualified, 1):
                logger.info("  #%d [tier %s] %s %s", i, job.tier, job.title, job.url)
        elif report.qualified:
            if notifier is None:
                notifier = build_notifier(config)
            result = notifier.notify_new_jobs(report.qualified)
            summary.delivered = result.success
            summary.notified = result.count
            if not result.success:
                logger.error("Delivery failed: %s", result.reason)

        logger.info(
            "Run complete: %d fetched, %d new, %d qualified, %d notified",
            summary.jobs_fetched, summary.new_jobs, summary.qualified, summary.notified,
        )
        return summary

    except Exception as e:
        summary.error_message = f"{type(e).__name__}: {e}"
        logger.error("Pipeline failed: %s\n%s", summary.error_message, traceback.format_exc())
        raise

    finally:
        summary.duration_seconds = round(time.time() - start, 2)
