"""Seen-job tracking: deduplication, retention cleanup and snapshot persistence."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable

from job_watch.jobs.models import JobPosting, build_job_url
from job_watch.models import ProcessResult, SeenJobRecord, TrackerStats
from job_watch.storage.snapshot import SnapshotError, SnapshotStore
from job_watch.utils.timestamps import format_timestamp, utc_now

logger = logging.getLogger("job_watch.tracker")

# Tracked jobs are forgotten once their posting time falls outside this window
RETENTION_WINDOW = timedelta(hours=48)


class JobTracker:
    """Remembers which jobs have already been reported.

    State is one mapping of job id to :class:`SeenJobRecord`, loaded from the
    snapshot store on construction and rewritten in full after mutations.
    A missing or corrupt snapshot starts the tracker empty; a failed write is
    logged and leaves the in-memory state as is.

    Runs must be serialized: nothing guards against two processes sharing a
    snapshot file.
    """

    def __init__(
        self,
        store: SnapshotStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.clock = clock
        self.seen_jobs: dict[str, SeenJobRecord] = self._load()

    def _load(self) -> dict[str, SeenJobRecord]:
        if not self.store.exists():
            logger.info("No seen-jobs snapshot at %s, starting empty", self.store.path)
            return {}

        try:
            raw = self.store.load()
        except SnapshotError as e:
            logger.error("Error loading seen jobs, starting empty: %s", e)
            return {}

        records = {}
        for job_id, entry in raw.items():
            if not isinstance(entry, dict):
                logger.warning("Dropping malformed snapshot entry for job %s", job_id)
                continue
            records[str(job_id)] = SeenJobRecord.from_dict(entry)

        logger.info("Loaded %d seen jobs from %s", len(records), self.store.path)
        return records

    def save(self) -> bool:
        """Persist the full mapping. Returns False (after logging) if the write failed."""
        try:
            self.store.save({job_id: rec.to_dict() for job_id, rec in self.seen_jobs.items()})
        except SnapshotError as e:
            logger.error("Error saving seen jobs: %s", e)
            return False
        return True

    def has_seen(self, job_id: str) -> bool:
        return job_id in self.seen_jobs

    def mark_seen(self, job_id: str, job: JobPosting) -> SeenJobRecord:
        """Insert or overwrite the record for ``job_id``. Does not persist."""
        record = SeenJobRecord(
            seen_at=format_timestamp(self.clock()),
            posted_at=job.posted_raw or format_timestamp(job.created_at),
            title=job.title,
            url=build_job_url(job.job_id, job.ciphertext),
        )
        self.seen_jobs[job_id] = record
        return record

    def filter_new(self, jobs: Iterable[JobPosting]) -> list[JobPosting]:
        """Jobs whose id is not tracked yet, in input order."""
        return [job for job in jobs if not self.has_seen(job.job_id)]

    def filter_recent(self, jobs: Iterable[JobPosting], window_hours: float) -> list[JobPosting]:
        """Jobs created within the last ``window_hours``, in input order."""
        cutoff = self.clock() - timedelta(hours=window_hours)
        return [job for job in jobs if job.created_at >= cutoff]

    def cleanup(self) -> int:
        """Drop records posted before the retention cutoff; returns how many were removed."""
        cutoff = self.clock() - RETENTION_WINDOW
        stale = []

        for job_id, record in self.seen_jobs.items():
            posted = record.posted_time
            if posted is None:
                logger.warning(
                    "Dropping seen job %s with unparseable postedAt %r", job_id, record.posted_at
                )
                stale.append(job_id)
            elif posted < cutoff:
                stale.append(job_id)

        for job_id in stale:
            del self.seen_jobs[job_id]

        if stale:
            logger.info(
                "Cleaned up %d old jobs (older than %d hours)",
                len(stale), RETENTION_WINDOW.total_seconds() // 3600,
            )
            self.save()

        return len(stale)

    def process(self, jobs: list[JobPosting]) -> ProcessResult:
        """Clean up, pick out unseen jobs, mark them and persist once."""
        self.cleanup()

        new_jobs = []
        for job in self.filter_new(jobs):
            # The same id twice in one batch is reported once
            if self.has_seen(job.job_id):
                continue
            self.mark_seen(job.job_id, job)
            new_jobs.append(job)

        saved = self.save()
        if not saved:
            logger.warning(
                "%d new jobs are marked in memory only; they may be reported again next run",
                len(new_jobs),
            )

        return ProcessResult(
            total_jobs=len(jobs),
            new_jobs=len(new_jobs),
            already_seen=len(jobs) - len(new_jobs),
            jobs=new_jobs,
            saved=saved,
        )

    def get_stats(self) -> TrackerStats:
        oldest = newest = None
        oldest_time = newest_time = None

        for record in self.seen_jobs.values():
            posted = record.posted_time
            if posted is None:
                continue
            if oldest_time is None or posted < oldest_time:
                oldest, oldest_time = record, posted
            if newest_time is None or posted > newest_time:
                newest, newest_time = record, posted

        return TrackerStats(
            total_tracked=len(self.seen_jobs),
            oldest_job=oldest,
            newest_job=newest,
        )

    def __len__(self) -> int:
        return len(self.seen_jobs)

    def __contains__(self, job_id: str) -> bool:
        return self.has_seen(job_id)
