"""Seen job record: one entry of the tracker's persisted snapshot."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from job_watch.utils.timestamps import parse_timestamp


@dataclass
class SeenJobRecord:
    seen_at: str
    posted_at: str
    title: str = ""
    url: str = ""

    @property
    def posted_time(self) -> Optional[datetime]:
        return parse_timestamp(self.posted_at)

    def to_dict(self) -> dict:
        return {
            "seenAt": self.seen_at,
            "postedAt": self.posted_at,
            "title": self.title,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SeenJobRecord":
        return cls(
            seen_at=data.get("seenAt") or "",
            posted_at=data.get("postedAt") or "",
            title=data.get("title") or "",
            url=data.get("url") or "",
        )
