"""APScheduler setup: runs the watch pipeline on a cron schedule."""

import logging
import signal
import traceback

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MISSED
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from job_watch.config import AppConfig
from job_watch.jobs.auth import AuthError

logger = logging.getLogger("job_watch.scheduler")

JOB_ID = "watch_run"

SCHEDULE_NAMES = {
    "0 */6 * * *": "every 6 hours",
    "0 */3 * * *": "every 3 hours",
    "0 */1 * * *": "every hour",
    "*/30 * * * *": "every 30 minutes",
    "*/15 * * * *": "every 15 minutes",
    "*/10 * * * *": "every 10 minutes",
    "0 9 * * *": "daily at 9:00 AM",
    "0 9,15 * * *": "daily at 9:00 AM and 3:00 PM",
    "0 9 * * 1-5": "weekdays at 9:00 AM",
}


def validate_cron(expression: str) -> bool:
    try:
        CronTrigger.from_crontab(expression)
    except (ValueError, TypeError):
        return False
    return True


def describe_schedule(expression: str) -> str:
    return SCHEDULE_NAMES.get(expression, f"on cron schedule: {expression}")


def execute_watch_run(config: AppConfig, dry_run: bool = False) -> None:
    """One scheduled run. Auth problems propagate; everything else is logged."""
    from job_watch.pipeline import run_pipeline

    logger.info("=== Scheduled run started ===")
    try:
        run_pipeline(config, dry_run=dry_run)
    except AuthError:
        logger.error("Authentication required! Run: job-watch --auth, then restart the scheduler")
        raise
    except Exception:
        logger.error("=== Scheduled run FAILED ===\n%s", traceback.format_exc())
        return
    logger.info("=== Scheduled run completed. Next run: %s ===", describe_schedule(config.schedule.cron))


def start_scheduler(config: AppConfig, dry_run: bool = False) -> int:
    """Run immediately (if configured), then block on the cron schedule.

    Returns a process exit code: 1 when authentication is missing, else 0.
    """
    if not validate_cron(config.schedule.cron):
        logger.error("Invalid cron schedule format: %r (example: \"0 */6 * * *\")", config.schedule.cron)
        return 1

    logger.info("Configuration:")
    logger.info("  Keywords: %s", ", ".join(config.search.keywords))
    logger.info("  Schedule: %s (%s, %s)", describe_schedule(config.schedule.cron),
                config.schedule.cron, config.schedule.timezone)

    if config.schedule.run_on_start:
        logger.info("Running initial job search...")
        try:
            execute_watch_run(config, dry_run=dry_run)
        except AuthError:
            return 1

    scheduler = BlockingScheduler(timezone=config.schedule.timezone)
    exit_code = 0

    def _job_listener(event):
        nonlocal exit_code
        if event.code == EVENT_JOB_MISSED:
            logger.warning("Scheduled run %s MISSED its fire time", event.job_id)
        elif event.exception:
            logger.error("Scheduled run %s FAILED: %s", event.job_id, event.exception)
            if isinstance(event.exception, AuthError):
                exit_code = 1
                scheduler.shutdown(wait=False)
        else:
            logger.debug("Scheduled run %s executed", event.job_id)

    def _stop(signum, frame):
        logger.info("Scheduler stopped (signal %d)", signum)
        scheduler.shutdown(wait=False)

    scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED)
    scheduler.add_job(
        execute_watch_run,
        trigger=CronTrigger.from_crontab(config.schedule.cron, timezone=config.schedule.timezone),
        args=[config],
        kwargs={"dry_run": dry_run},
        id=JOB_ID,
        name="Upwork job watch",
        misfire_grace_time=3600,
        coalesce=True,
        max_instances=1,
        replace_existing=True,
    )

    signal.signal(signal.SIGTERM, _stop)
    logger.info("Scheduler started. Waiting for next scheduled run... (Ctrl+C to stop)")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped by user")

    return exit_code
