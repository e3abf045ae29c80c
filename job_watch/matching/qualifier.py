"""OpenAI job qualification (optional, requires API key).

Each job is sorted into a tier:
  1 - ideal match (accept)
  2 - upsell potential (accept)
  3 - hard reject (filter out)
  0 - not scored because the classifier is off or failed; allowed through
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from job_watch.jobs.models import JobPosting

logger = logging.getLogger("job_watch.matching.qualifier")

TIER_UNVETTED = 0
TIER_IDEAL = 1
TIER_UPSELL = 2
TIER_REJECT = 3

VALID_TIERS = (TIER_IDEAL, TIER_UPSELL, TIER_REJECT)

SYSTEM_PROMPT = """You are a job qualification assistant for a freelancer. Evaluate Upwork job postings against the freelancer profile below and classify each into one of 3 tiers:

**TIER 1 - Ideal Match (Always Accept)**
- Squarely inside the freelancer's core services
- Established client with clear revenue or traction
- Budget: $50+/hr or $500+ fixed price

**TIER 2 - Upsell Potential (Accept)**
- Adjacent or smaller work in the same platform/niche
- Quick fixes that can lead to larger projects
- Reasonable client history, even if not high-value

**TIER 3 - Hard Reject (Filter Out)**
- Extremely low budgets with no growth potential
- Wrong niche or platform, or explicitly excluded work
- Spam, unclear, or irrelevant descriptions
- Very high hire counts (200+) combined with extremely low budgets

Be generous with Tier 2. Only filter out the truly bad fits (Tier 3).

FREELANCER PROFILE:
{profile}

Respond ONLY with valid JSON in this exact format:
{{"tier": 1, "reasoning": "Brief explanation"}}"""


@dataclass
class QualificationResult:
    job: JobPosting
    qualified: bool
    tier: int
    reasoning: str


@dataclass
class QualificationStats:
    total: int = 0
    qualified: int = 0
    rejected: int = 0
    tier1: int = 0
    tier2: int = 0
    tier3: int = 0
    unvetted: int = 0
    time_seconds: float = 0.0
    cost_estimate: float = 0.0


@dataclass
class QualificationReport:
    qualified: list[JobPosting] = field(default_factory=list)
    rejected: list[JobPosting] = field(default_factory=list)
    results: list[QualificationResult] = field(default_factory=list)
    stats: QualificationStats = field(default_factory=QualificationStats)


def build_user_prompt(job: JobPosting) -> str:
    """Describe one job for the classifier."""
    budget = job.budget
    budget_text = budget.describe() if budget else "Not specified"

    if job.client:
        client_text = (
            "Client Info:\n"
            f"- Total Hires: {job.client.total_hires}\n"
            f"- Total Jobs Posted: {job.client.total_posted_jobs}\n"
            f"- Location: {job.client.country or 'Unknown'}\n"
            f"- Reviews: {job.client.total_reviews}"
        )
    else:
        client_text = "No client info available"

    return (
        "Evaluate this Upwork job posting:\n\n"
        f"Title: {job.title}\n\n"
        f"Budget: {budget_text}\n\n"
        f"Duration: {job.duration or 'Not specified'}\n\n"
        f"{client_text}\n\n"
        f"Description:\n{job.description or 'No description provided'}\n\n"
        "Should this job be accepted? Respond with JSON only."
    )


def parse_tier_response(content: str) -> tuple[int, str]:
    """Extract (tier, reasoning) from the model's reply. Raises ValueError if invalid."""
    content = (content or "").strip()
    # Handle potential markdown code blocks
    if content.startswith("```"):
        content = content.split("\n", 1)[1].rsplit("```", 1)[0].strip()

    result = json.loads(content)
    if not isinstance(result, dict):
        raise ValueError("Response is not a JSON object")

    tier = result.get("tier")
    if isinstance(tier, bool) or tier not in VALID_TIERS:
        raise ValueError(f"Invalid tier in response: {tier!r}")

    reasoning = str(result.get("reasoning") or "No reasoning provided")
    return int(tier), reasoning


class JobQualifier:
    """Vets jobs with a chat-completion call, failing open on any error."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "gpt-4o-mini",
        timeout: float = 5.0,
        profile: str = "",
        cost_per_job: float = 0.001,
        client=None,
        max_workers: int = 8,
        enabled: bool = True,
    ):
        self.model = model
        self.timeout = timeout
        self.profile = profile
        self.cost_per_job = cost_per_job
        self.max_workers = max_workers

        if not enabled:
            logger.info("Qualification disabled by config - jobs pass through unvetted")
            self.client = None
        elif client is not None:
            self.client = client
        elif api_key:
            from openai import OpenAI
            self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            logger.warning("OpenAI API key not provided. Qualification disabled.")
            self.client = None

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def qualify_job(self, job: JobPosting) -> QualificationResult:
        if not self.enabled:
            return QualificationResult(job, True, TIER_UNVETTED, "Qualification disabled - allowing through")

        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT.format(profile=self.profile)},
                    {"role": "user", "content": build_user_prompt(job)},
                ],
                temperature=0.3,
                max_tokens=150,
                response_format={"type": "json_object"},
                timeout=self.timeout,
            )
            tier, reasoning = parse_tier_response(completion.choices[0].message.content)
        except Exception as e:
            logger.warning("Qualifier error for job %r: %s", job.title, e)
            return QualificationResult(
                job, True, TIER_UNVETTED,
                f"Classifier unavailable ({e}) - allowing through unvetted",
            )

        logger.debug("Tier %d for %r: %s", tier, job.title, reasoning)
        return QualificationResult(job, tier in (TIER_IDEAL, TIER_UPSELL), tier, reasoning)

    def qualify_jobs(self, jobs: list[JobPosting]) -> QualificationReport:
        """Classify every job concurrently and split them into qualified and rejected."""
        if not jobs:
            return QualificationReport()

        if not self.enabled:
            logger.info("Qualification disabled - all %d jobs allowed through", len(jobs))
            results = [self.qualify_job(job) for job in jobs]
            return QualificationReport(
                qualified=[r.job.with_qualification(r.tier, r.reasoning) for r in results],
                results=results,
                stats=QualificationStats(
                    total=len(jobs), qualified=len(jobs), unvetted=len(jobs),
                ),
            )

        logger.info("Qualifying %d job%s with %s...", len(jobs), "" if len(jobs) == 1 else "s", self.model)
        start = time.monotonic()

        workers = max(1, min(self.max_workers, len(jobs)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="qualify") as pool:
            results = list(pool.map(self.qualify_job, jobs))

        elapsed = round(time.monotonic() - start, 2)

        qualified = [r.job.with_qualification(r.tier, r.reasoning) for r in results if r.qualified]
        rejected = [r.job.with_qualification(r.tier, r.reasoning) for r in results if not r.qualified]

        stats = QualificationStats(
            total=len(jobs),
            qualified=len(qualified),
            rejected=len(rejected),
            tier1=sum(1 for r in results if r.tier == TIER_IDEAL),
            tier2=sum(1 for r in results if r.tier == TIER_UPSELL),
            tier3=sum(1 for r in results if r.tier == TIER_REJECT),
            unvetted=sum(1 for r in results if r.tier == TIER_UNVETTED),
            time_seconds=elapsed,
            cost_estimate=round(len(jobs) * self.cost_per_job, 4),
        )

        logger.info("Qualification complete in %.2fs (est. cost: $%.4f)", elapsed, stats.cost_estimate)
        logger.info("  Tier 1 (Ideal): %d", stats.tier1)
        logger.info("  Tier 2 (Upsell): %d", stats.tier2)
        logger.info("  Tier 3 (Reject): %d", stats.tier3)
        if stats.unvetted:
            logger.info("  Unvetted (Error): %d", stats.unvetted)

        return QualificationReport(qualified=qualified, rejected=rejected, results=results, stats=stats)
