"""Result records returned by the tracker and the pipeline."""

from dataclasses import dataclass, field
from typing import Optional

from job_watch.jobs.models import JobPosting

from .seen_job import SeenJobRecord


@dataclass
class ProcessResult:
    total_jobs: int
    new_jobs: int
    already_seen: int
    jobs: list[JobPosting] = field(default_factory=list)
    saved: bool = True  # False when the snapshot write after marking failed


@dataclass
class TrackerStats:
    total_tracked: int
    oldest_job: Optional[SeenJobRecord] = None
    newest_job: Optional[SeenJobRecord] = None


@dataclass
class RunSummary:
    """Outcome of one scheduled run."""

    jobs_fetched: int = 0
    new_jobs: int = 0
    already_seen: int = 0
    too_old: int = 0
    qualified: int = 0
    rejected: int = 0
    notified: int = 0
    delivered: bool = False
    snapshot_saved: bool = True
    error_message: Optional[str] = None
    duration_seconds: float = 0.0
