"""Upwork marketplace job search over the GraphQL API."""

import json
import logging
from typing import Optional

import requests

from job_watch.jobs.auth import TokenManager
from job_watch.jobs.models import JobPosting
from job_watch.utils.http_client import create_session, describe_http_error

logger = logging.getLogger("job_watch.jobs.upwork")

GRAPHQL_ENDPOINT = "https://api.upwork.com/graphql"

SEARCH_QUERY = """
query MarketplaceJobSearch(
  $titleExpression: String
  $searchType: MarketplaceJobPostingSearchType
  $sortAttributes: [MarketplaceJobPostingSearchSortAttribute]
) {
  marketplaceJobPostingsSearch(
    marketPlaceJobFilter: { titleExpression_eq: $titleExpression }
    searchType: $searchType
    sortAttributes: $sortAttributes
  ) {
    totalCount
    edges {
      node {
        id
        title
        createdDateTime
        description
        ciphertext
        weeklyBudget { rawValue }
        amount { rawValue }
        hourlyBudgetMin { rawValue }
        hourlyBudgetMax { rawValue }
        duration
        client {
          totalHires
          totalPostedJobs
          totalReviews
          totalCharges { rawValue }
          paymentVerificationStatus
          location { country }
        }
      }
    }
  }
}
"""

_AUTH_ERROR_MARKERS = ("authentication", "Unauthorized", "token")


class UpworkAPIError(Exception):
    """GraphQL errors or an unexpected response shape."""


def _is_auth_error(errors: list) -> bool:
    for err in errors:
        message = (err or {}).get("message") or ""
        if any(marker in message for marker in _AUTH_ERROR_MARKERS):
            return True
    return False


class UpworkClient:
    """Search provider: one GraphQL query per keyword."""

    def __init__(
        self,
        tokens: TokenManager,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        self.tokens = tokens
        self.session = session or create_session()
        self.timeout = timeout

    def graphql(self, query: str, variables: Optional[dict] = None, retry_on_auth_error: bool = True) -> dict:
        """POST a GraphQL request, refreshing the token once on auth failures.

        The token that was sent is handed to ``refresh`` so concurrent searches
        hitting the same expiry share a single refresh.
        """
        sent_token = self.tokens.access_token
        try:
            response = self.session.post(
                GRAPHQL_ENDPOINT,
                json={"query": query, "variables": variables or {}},
                headers={
                    "Authorization": f"Bearer {sent_token}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
            if response.status_code == 401 and retry_on_auth_error:
                logger.info("Access token expired, refreshing...")
                self.tokens.refresh(sent_token)
                return self.graphql(query, variables, retry_on_auth_error=False)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise UpworkAPIError(f"GraphQL request failed: {describe_http_error(e)}") from e
        except ValueError as e:
            raise UpworkAPIError("GraphQL endpoint returned invalid JSON") from e

        errors = payload.get("errors")
        if errors:
            logger.error("GraphQL errors: %s", json.dumps(errors, indent=2))
            if _is_auth_error(errors) and retry_on_auth_error:
                logger.info("Authentication error detected, refreshing token and retrying...")
                self.tokens.refresh(sent_token)
                return self.graphql(query, variables, retry_on_auth_error=False)
            raise UpworkAPIError(f"GraphQL error: {errors[0].get('message')}")

        return payload

    def search_jobs(self, keyword: str) -> list[JobPosting]:
        """Most recent marketplace jobs whose title matches ``keyword``."""
        logger.info("Searching for %r...", keyword)
        payload = self.graphql(SEARCH_QUERY, {
            "titleExpression": keyword,
            "searchType": "USER_JOBS_SEARCH",
            "sortAttributes": [{"field": "RECENCY"}],
        })

        search = (payload.get("data") or {}).get("marketplaceJobPostingsSearch")
        if not isinstance(search, dict):
            raise UpworkAPIError("Unexpected response format from Upwork API")

        jobs = []
        for edge in search.get("edges") or []:
            node = (edge or {}).get("node")
            if not isinstance(node, dict):
                continue
            job = JobPosting.from_node(node)
            if job:
                jobs.append(job)

        logger.info(
            "Fetched %d jobs for %r (%s total matches)",
            len(jobs), keyword, search.get("totalCount", "?"),
        )
        return jobs
