import json
from collections.abc import Mapping
from typing import Any

import httpx


CONTRIBUTION_CALENDAR_QUERY = """
query($login: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $login) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            date
            contributionCount
            color
          }
        }
      }
    }
  }
}
"""

CONTRIBUTION_YEARS_QUERY = """
query($login: String!) {
  user(login: $login) {
    contributionsCollection {
      contributionYears
    }
  }
}
"""


class GitHubAPIError(Exception):
    """Base class for failures talking to the GitHub GraphQL API."""


class MissingCredentialError(GitHubAPIError):
    """Raised when no GitHub token is configured."""


class UpstreamHTTPError(GitHubAPIError):
    """Raised when GitHub answers with a non-success status or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamGraphQLError(GitHubAPIError):
    """Raised when a successful GraphQL response carries an `errors` field."""

    def __init__(self, errors: Any) -> None:
        super().__init__(f"GitHub API errors: {json.dumps(errors)}")
        self.errors = errors


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


async def post_graphql(
    client: httpx.AsyncClient,
    graphql_url: str,
    token: str | None,
    query: str,
    variables: dict[str, Any],
    user_agent: str,
) -> Mapping[str, Any]:
    """Send one GraphQL request and return the decoded response body.

    Raises:
        MissingCredentialError: If `token` is empty.
        UpstreamHTTPError: On transport failure, non-2xx status or invalid JSON.
        UpstreamGraphQLError: If the body contains an `errors` field.
    """

    if not token or not token.strip():
        raise MissingCredentialError("Missing GITHUB_TOKEN secret")

    headers = {
        "Authorization": f"Bearer {token.strip()}",
        "Content-Type": "application/json",
        "User-Agent": user_agent,
    }

    try:
        response = await client.post(
            graphql_url,
            json={"query": query, "variables": variables},
            headers=headers,
        )
    except httpx.HTTPError as exc:
        raise UpstreamHTTPError(f"GitHub API request failed: {exc}") from exc

    if not response.is_success:
        raise UpstreamHTTPError(
            f"GitHub API error: {response.status_code} {response.text}",
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as exc:
        raise UpstreamHTTPError(
            "GitHub API returned invalid JSON", status_code=response.status_code
        ) from exc

    if not isinstance(payload, Mapping):
        raise UpstreamHTTPError(
            "GitHub GraphQL response is invalid", status_code=response.status_code
        )

    if payload.get("errors") is not None:
        raise UpstreamGraphQLError(payload["errors"])

    return payload


async def fetch_contribution_days(
    client: httpx.AsyncClient,
    username: str,
    token: str | None,
    graphql_url: str,
    from_timestamp: str,
    to_timestamp: str,
    user_agent: str,
) -> list[dict[str, str | int]]:
    """Fetch contribution days between two ISO-8601 timestamps for a user."""

    payload = await post_graphql(
        client,
        graphql_url=graphql_url,
        token=token,
        query=CONTRIBUTION_CALENDAR_QUERY,
        variables={"login": username, "from": from_timestamp, "to": to_timestamp},
        user_agent=user_agent,
    )

    data = _mapping(payload.get("data"))
    user = _mapping(data.get("user"))
    collection = _mapping(user.get("contributionsCollection"))
    calendar = _mapping(collection.get("contributionCalendar"))
    weeks = calendar.get("weeks")
    if not isinstance(weeks, list):
        return []

    days: list[dict[str, str | int]] = []
    for week in weeks:
        if not isinstance(week, Mapping):
            continue
        contribution_days = week.get("contributionDays")
        if not isinstance(contribution_days, list):
            continue
        for item in contribution_days:
            if not isinstance(item, Mapping):
                continue
            raw_date = item.get("date")
            raw_count = item.get("contributionCount") or 0
            if isinstance(raw_date, str) and isinstance(raw_count, int):
                days.append({"date": raw_date, "count": raw_count})

    return days


async def fetch_contribution_years(
    client: httpx.AsyncClient,
    username: str,
    token: str | None,
    graphql_url: str,
    user_agent: str,
) -> list[int]:
    """Fetch the years in which a user has any recorded contributions."""

    payload = await post_graphql(
        client,
        graphql_url=graphql_url,
        token=token,
        query=CONTRIBUTION_YEARS_QUERY,
        variables={"login": username},
        user_agent=user_agent,
    )

    data = _mapping(payload.get("data"))
    user = _mapping(data.get("user"))
    collection = _mapping(user.get("contributionsCollection"))
    years = collection.get("contributionYears")
    if not isinstance(years, list):
        return []

    return [year for year in years if isinstance(year, int)]
