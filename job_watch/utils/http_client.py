"""HTTP session factory with retry logic for the JSON APIs we talk to."""

import logging

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger("job_watch.http")

USER_AGENT = "job-watch/0.1 (+https://www.upwork.com/developer)"


def create_session(
    max_retries: int = 3,
    backoff_factor: float = 1.0,
    retry_post: bool = True,
) -> requests.Session:
    """Create a requests session that retries throttled and 5xx responses.

    GraphQL searches and token refreshes are POSTs but safe to repeat, so
    POST is retried unless ``retry_post`` is False (webhooks).
    """
    session = requests.Session()

    allowed = ["GET", "POST"] if retry_post else ["GET"]
    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=allowed,
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    })

    return session


def describe_http_error(error: requests.RequestException) -> str:
    """One-line description of a failed request, including the response body when present."""
    response = getattr(error, "response", None)
    if response is None:
        return str(error)
    body = response.text[:500] if response.text else ""
    return f"HTTP {response.status_code}: {body}".strip()
