"""Slack Block Kit templates for job notifications."""

from typing import Optional
from zoneinfo import ZoneInfo

from job_watch.jobs.models import JobPosting
from job_watch.utils.text_processing import summarize_description, truncate

DISPLAY_TIMEZONE = ZoneInfo("America/New_York")

# Slack rejects the whole message when a header block exceeds this
HEADER_MAX_CHARS = 150

TIER_BADGES = {
    1: "🎯 *TIER 1 - IDEAL MATCH*",
    2: "💡 *TIER 2 - UPSELL POTENTIAL*",
}


def _section(text: str) -> dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _fields(*texts: str) -> dict:
    return {"type": "section", "fields": [{"type": "mrkdwn", "text": t} for t in texts]}


def format_posted(job: JobPosting) -> str:
    local = job.created_at.astimezone(DISPLAY_TIMEZONE)
    hour = local.strftime("%I").lstrip("0") or "12"
    return f"{local.month}/{local.day}/{local.year}, {hour}:{local.strftime('%M %p')}"


def format_budget(job: JobPosting) -> str:
    budget = job.budget
    return f"💰 {budget.describe()}" if budget else "💰 Not specified"


def format_client(job: JobPosting) -> str:
    if not job.client:
        return ""
    c = job.client
    return (
        f"👤 {c.total_hires} hires • {c.total_posted_jobs} jobs • "
        f"{c.total_reviews} reviews • {c.country or 'Unknown'}"
    )


def render_job_blocks(job: JobPosting) -> list[dict]:
    """Blocks for one job: tier badge, title, insight, facts, description, button."""
    blocks = []

    badge = TIER_BADGES.get(job.tier) if job.reasoning else None
    if badge:
        blocks.append(_section(badge))

    title = truncate(job.title or "Untitled Job", HEADER_MAX_CHARS)
    blocks.append({"type": "header", "text": {"type": "plain_text", "text": title, "emoji": True}})

    if job.reasoning:
        blocks.append(_section(f"💭 *AI Insight:* _{job.reasoning}_"))

    blocks.append(_fields(f"*Posted:*\n{format_posted(job)}", format_budget(job)))

    extras = [t for t in (f"⏱️ {job.duration}" if job.duration else "", format_client(job)) if t]
    if extras:
        blocks.append(_fields(*extras))

    description = summarize_description(job.description)
    if description:
        blocks.append(_section(f"*Description:*\n{description}"))

    blocks.append({
        "type": "actions",
        "elements": [{
            "type": "button",
            "text": {"type": "plain_text", "text": "View Job on Upwork", "emoji": True},
            "url": job.url,
            "style": "primary",
        }],
    })
    blocks.append({"type": "divider"})
    return blocks


def render_jobs_message(jobs: list[JobPosting], max_jobs: int = 5) -> Optional[dict]:
    """Webhook payload for a batch of jobs; None for an empty batch.

    Slack caps a message at 50 blocks, so only ``max_jobs`` jobs are rendered
    and the rest are summarized in a trailing context line.
    """
    if not jobs:
        return None

    count = len(jobs)
    header = "🎯 *1 New Upwork Job Found!*" if count == 1 else f"🎯 *{count} New Upwork Jobs Found!*"
    blocks = [_section(header), {"type": "divider"}]

    for job in jobs[:max_jobs]:
        blocks.extend(render_job_blocks(job))

    if count > max_jobs:
        blocks.append({
            "type": "context",
            "elements": [{
                "type": "mrkdwn",
                "text": f"_... and {count - max_jobs} more jobs. Check the logs for details._",
            }],
        })

    return {
        "blocks": blocks,
        "text": f"{count} new Upwork job{'' if count == 1 else 's'} found!",
    }


def render_test_message() -> dict:
    return {
        "blocks": [_section(
            "✅ *Upwork Job Watch Connected!*\n\n"
            "Your watcher is now monitoring Upwork and will send notifications for new jobs."
        )],
        "text": "Upwork Job Watch Connected!",
    }
