"""Orchestrator - CLI entry point for the Upwork job watcher."""

import argparse
import logging
import sys
from typing import Optional

from job_watch.config import AppConfig, load_config, validate_config
from job_watch.jobs.auth import AuthError, TokenManager
from job_watch.notifications.slack_sender import SlackNotifier
from job_watch.pipeline import build_tracker, run_pipeline
from job_watch.scheduler import start_scheduler
from job_watch.utils.logging_config import setup_logging

logger = logging.getLogger("job_watch")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Upwork Job Watch - poll marketplace searches and post new jobs to Slack",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to config file (default: config.yaml if present, else env only)",
    )
    parser.add_argument(
        "--once", action="store_true",
        help="Run a single search and exit instead of starting the scheduler",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Fetch, track and qualify jobs but don't post to Slack",
    )
    parser.add_argument(
        "--stats", action="store_true",
        help="Print seen-job tracker statistics and exit",
    )
    parser.add_argument(
        "--test-slack", action="store_true",
        help="Send a test Slack notification and exit",
    )
    parser.add_argument(
        "--auth", action="store_true",
        help="Authorize with Upwork and save tokens to .env",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def print_stats(config: AppConfig) -> None:
    stats = build_tracker(config).get_stats()
    print("\n=== Job Watch Statistics ===")
    print(f"Total jobs tracked: {stats.total_tracked}")
    if stats.oldest_job:
        print(f"Oldest: {stats.oldest_job.posted_at}  {stats.oldest_job.title}")
    if stats.newest_job:
        print(f"Newest: {stats.newest_job.posted_at}  {stats.newest_job.title}")
    print()


def authenticate(config: AppConfig) -> bool:
    """Interactive OAuth2 authorization: open the URL, paste back the code."""
    if not config.upwork.client_id or not config.upwork.client_secret:
        print("UPWORK_API_KEY and UPWORK_API_SECRET must be set in .env", file=sys.stderr)
        return False

    tokens = TokenManager(config.upwork)
    print("Open this URL in your browser and authorize the application:\n")
    print(f"  {tokens.authorization_url()}\n")
    print(f"After approving you are redirected to {config.upwork.redirect_uri}?code=...")
    code = input("Paste the value of the 'code' parameter: ").strip()
    if not code:
        print("No authorization code given", file=sys.stderr)
        return False

    try:
        tokens.exchange_code(code)
    except AuthError as e:
        print(f"Authentication failed: {e}", file=sys.stderr)
        return False

    print("Authentication complete! Tokens saved.")
    return True


def main(argv: Optional[list[str]] = None):
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.log_dir, level=logging.DEBUG if args.verbose else logging.INFO)

    if args.auth:
        sys.exit(0 if authenticate(config) else 1)

    for w in validate_config(config):
        logger.warning("Config: %s", w)

    if args.stats:
        print_stats(config)
        return

    if args.test_slack:
        notifier = SlackNotifier(config.slack.webhook_url)
        if notifier.send_test_notification():
            print("Test Slack notification sent successfully!")
        else:
            print("Failed to send test notification. Check logs for details.", file=sys.stderr)
            sys.exit(1)
        return

    if args.once:
        try:
            run_pipeline(config, dry_run=args.dry_run)
        except AuthError as e:
            logger.error("%s", e)
            sys.exit(1)
        except Exception:
            sys.exit(1)
        return

    sys.exit(start_scheduler(config, dry_run=args.dry_run))


if __name__ == "__main__":
    main()
