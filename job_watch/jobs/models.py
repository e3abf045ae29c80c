"""Job posting data model for marketplace search results."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from job_watch.utils.timestamps import parse_timestamp

logger = logging.getLogger("job_watch.jobs")

JOB_BASE_URL = "https://www.upwork.com/jobs/"


def _raw_value(obj) -> Optional[float]:
    """Read a ``{rawValue: ...}`` money field; None when absent, empty or zero."""
    if not isinstance(obj, dict):
        return None
    value = obj.get("rawValue")
    if value in (None, ""):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number or None


def _format_money(value: float) -> str:
    return f"{value:g}" if value == int(value) else f"{value:.2f}"


def build_job_url(job_id: str, ciphertext: str = "") -> str:
    """Canonical listing link. The ciphertext already carries its ``~`` prefix."""
    if ciphertext:
        return f"{JOB_BASE_URL}{ciphertext}"
    return f"{JOB_BASE_URL}~{job_id}"


@dataclass(frozen=True)
class Budget:
    """One pricing shape, picked in the order hourly range, fixed amount, weekly."""

    kind: str  # "hourly", "fixed", "weekly"
    amount: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def describe(self) -> str:
        if self.kind == "hourly":
            low = _format_money(self.minimum) if self.minimum else "?"
            high = _format_money(self.maximum) if self.maximum else "?"
            return f"${low}-{high}/hr"
        if self.kind == "fixed":
            return f"${_format_money(self.amount)} fixed"
        return f"${_format_money(self.amount)}/week"


@dataclass
class ClientInfo:
    total_hires: int = 0
    total_posted_jobs: int = 0
    total_reviews: int = 0
    total_charges: Optional[float] = None
    payment_verification_status: str = ""
    country: str = ""

    @classmethod
    def from_node(cls, node: dict) -> "ClientInfo":
        location = node.get("location") or {}
        return cls(
            total_hires=node.get("totalHires") or 0,
            total_posted_jobs=node.get("totalPostedJobs") or 0,
            total_reviews=node.get("totalReviews") or 0,
            total_charges=_raw_value(node.get("totalCharges")),
            payment_verification_status=node.get("paymentVerificationStatus") or "",
            country=location.get("country") or "",
        )


@dataclass
class JobPosting:
    """A marketplace job as returned by the search API.

    ``created_at`` is the parsed creation instant; ``posted_raw`` keeps the
    source string so it can be written to the snapshot unchanged.
    """

    job_id: str
    title: str
    created_at: datetime
    posted_raw: str = ""
    description: str = ""
    ciphertext: str = ""
    duration: str = ""
    hourly_min: Optional[float] = None
    hourly_max: Optional[float] = None
    fixed_amount: Optional[float] = None
    weekly_budget: Optional[float] = None
    client: Optional[ClientInfo] = None
    tier: Optional[int] = None
    reasoning: str = ""

    @classmethod
    def from_node(cls, node: dict) -> Optional["JobPosting"]:
        """Build a posting from a GraphQL ``node``.

        Returns None (and logs) when the node has no id or its creation
        timestamp cannot be parsed.
        """
        job_id = node.get("id")
        if not job_id:
            logger.warning("Skipping job without id: %r", node.get("title"))
            return None

        raw_created = node.get("createdDateTime")
        created_at = parse_timestamp(raw_created)
        if created_at is None:
            logger.warning(
                "Skipping job %s: unparseable createdDateTime %r", job_id, raw_created
            )
            return None

        client = node.get("client")
        return cls(
            job_id=str(job_id),
            title=node.get("title") or "",
            created_at=created_at,
            posted_raw=raw_created if isinstance(raw_created, str) else created_at.isoformat(),
            description=node.get("description") or "",
            ciphertext=node.get("ciphertext") or "",
            duration=node.get("duration") or "",
            hourly_min=_raw_value(node.get("hourlyBudgetMin")),
            hourly_max=_raw_value(node.get("hourlyBudgetMax")),
            fixed_amount=_raw_value(node.get("amount")),
            weekly_budget=_raw_value(node.get("weeklyBudget")),
            client=ClientInfo.from_node(client) if isinstance(client, dict) else None,
        )

    @property
    def url(self) -> str:
        return build_job_url(self.job_id, self.ciphertext)

    @property
    def country(self) -> Optional[str]:
        if self.client and self.client.country:
            return self.client.country
        return None

    @property
    def budget(self) -> Optional[Budget]:
        if self.hourly_min or self.hourly_max:
            return Budget("hourly", minimum=self.hourly_min, maximum=self.hourly_max)
        if self.fixed_amount:
            return Budget("fixed", amount=self.fixed_amount)
        if self.weekly_budget:
            return Budget("weekly", amount=self.weekly_budget)
        return None

    def with_qualification(self, tier: int, reasoning: str) -> "JobPosting":
        """Return a copy carrying the classifier's tier and rationale."""
        return replace(self, tier=tier, reasoning=reasoning)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging and serialization."""
        budget = self.budget
        return {
            "job_id": self.job_id,
            "title": self.title,
            "url": self.url,
            "created_at": self.created_at.isoformat(),
            "budget": budget.describe() if budget else None,
            "duration": self.duration,
            "country": self.country,
            "tier": self.tier,
            "reasoning": self.reasoning,
        }
