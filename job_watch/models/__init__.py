"""Records kept and reported by the job tracker."""

from .results import ProcessResult, RunSummary, TrackerStats
from .seen_job import SeenJobRecord

__all__ = [
    "SeenJobRecord",
    "ProcessResult",
    "TrackerStats",
    "RunSummary",
]
