"""Text cleanup helpers for job descriptions and list-valued settings."""

import re

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Replace runs of whitespace (including newlines) with single spaces."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def truncate(text: str, limit: int, suffix: str = "...") -> str:
    """Cut text to at most ``limit`` characters, marking the cut with ``suffix``."""
    if len(text) <= limit:
        return text
    return text[: max(limit - len(suffix), 0)] + suffix


def summarize_description(text: str, limit: int = 300) -> str:
    """Single-line, length-bounded version of a free-text job description."""
    return collapse_whitespace(truncate(text or "", limit))


def split_csv(value: str) -> list[str]:
    """Split a comma-separated setting, dropping blanks."""
    return [part.strip() for part in (value or "").split(",") if part.strip()]
