"""Multi-keyword fan-out: fetch concurrently, filter by location, merge and sort."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Protocol

from job_watch.jobs.models import JobPosting

logger = logging.getLogger("job_watch.jobs.ingestion")


class SearchProvider(Protocol):
    def search_jobs(self, keyword: str) -> list[JobPosting]:
        ...


def _search_keyword(provider: SearchProvider, keyword: str) -> list[JobPosting]:
    """Run one keyword search; any failure becomes an empty result."""
    try:
        jobs = provider.search_jobs(keyword)
    except Exception as e:
        logger.error("Search failed for %r: %s", keyword, e)
        return []

    if jobs:
        logger.info("  %r: %d jobs", keyword, len(jobs))
    else:
        logger.info("  %r: no jobs", keyword)
    return list(jobs)


def filter_by_country(jobs: Iterable[JobPosting], countries: Optional[list[str]]) -> list[JobPosting]:
    """Keep jobs whose client country is in ``countries``.

    With no allow-list every job passes; with one, jobs lacking a
    country are dropped.
    """
    if not countries:
        return list(jobs)
    allowed = set(countries)
    return [job for job in jobs if job.country and job.country in allowed]


def merge_results(result_sets: Iterable[list[JobPosting]]) -> list[JobPosting]:
    """Union of the result sets by job id; the first occurrence of an id wins."""
    merged: dict[str, JobPosting] = {}
    for jobs in result_sets:
        for job in jobs:
            if job.job_id not in merged:
                merged[job.job_id] = job
    return list(merged.values())


def sort_newest_first(jobs: Iterable[JobPosting]) -> list[JobPosting]:
    """Order by creation time, newest first; equal times fall back to job id."""
    by_id = sorted(jobs, key=lambda j: j.job_id)
    return sorted(by_id, key=lambda j: j.created_at, reverse=True)


def fetch_all_jobs(
    provider: SearchProvider,
    keywords: list[str],
    filter_countries: Optional[list[str]] = None,
    max_workers: Optional[int] = None,
) -> list[JobPosting]:
    """Search every keyword at once and return one deduplicated, newest-first batch.

    Waits for every keyword to finish, successful or not.
    """
    if not keywords:
        logger.warning("No search keywords configured")
        return []

    logger.info("Searching %d keyword(s) in parallel...", len(keywords))
    workers = max_workers or len(keywords)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="search") as pool:
        result_sets = list(pool.map(lambda kw: _search_keyword(provider, kw), keywords))

    fetched = sum(len(jobs) for jobs in result_sets)

    if filter_countries:
        result_sets = [filter_by_country(jobs, filter_countries) for jobs in result_sets]
        logger.info(
            "Location filter %s kept %d/%d jobs",
            ", ".join(filter_countries), sum(len(jobs) for jobs in result_sets), fetched,
        )

    jobs = sort_newest_first(merge_results(result_sets))
    logger.info("Total unique jobs fetched: %d (from %d results)", len(jobs), fetched)
    return jobs
