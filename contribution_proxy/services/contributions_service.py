import logging
import re
from dataclasses import dataclass
from datetime import datetime
from datetime import UTC
from enum import Enum

import httpx
import sentry_sdk

from contribution_proxy.api.schemas.contributions import ContributionsByDate
from contribution_proxy.api.schemas.contributions import YearSummary
from contribution_proxy.github_api import GitHubAPIError
from contribution_proxy.github_api import MissingCredentialError
from contribution_proxy.github_api import UpstreamGraphQLError
from contribution_proxy.github_api import fetch_contribution_days
from contribution_proxy.github_api import fetch_contribution_years as fetch_years
from contribution_proxy.settings import Settings


logger = logging.getLogger(__name__)

PLACEHOLDER_TOKEN = "contribution"
MIN_YEAR = 1
MAX_YEAR = 9999
YEAR_PATTERN = re.compile(r"[+-]?[0-9]+")


class ErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    UPSTREAM_HTTP = "upstream_http"
    UPSTREAM_GRAPHQL = "upstream_graphql"


@dataclass(frozen=True)
class UpstreamFailure:
    """Failed upstream call, returned instead of raised."""

    kind: ErrorKind
    message: str


def current_utc_year() -> int:
    return datetime.now(UTC).year


def resolve_year(raw_year: str | None, default_year: int | None = None) -> int:
    """Parse the `year` query value, falling back to the current UTC year.

    Missing, non-integer and out-of-range values are never rejected.
    """

    fallback = default_year if default_year is not None else current_utc_year()
    if raw_year is None:
        return fallback

    candidate = raw_year.strip()
    if not YEAR_PATTERN.fullmatch(candidate):
        return fallback

    year = int(candidate)
    if year < MIN_YEAR or year > MAX_YEAR:
        return fallback
    return year


def year_window(year: int) -> tuple[str, str]:
    """Return ISO-8601 UTC timestamps bounding the calendar year."""

    start = datetime(year, 1, 1, 0, 0, 0, tzinfo=UTC)
    end = datetime(year, 12, 31, 23, 59, 59, tzinfo=UTC)
    return (
        start.isoformat().replace("+00:00", "Z"),
        end.isoformat().replace("+00:00", "Z"),
    )


def build_contributions_by_date(
    contribution_days: list[dict[str, str | int]],
) -> ContributionsByDate:
    """Expand each non-zero day count into a list of placeholder tokens."""

    result: ContributionsByDate = {}
    for item in contribution_days:
        raw_day = item.get("date")
        raw_count = item.get("count")
        if not isinstance(raw_day, str) or not isinstance(raw_count, int):
            continue
        if raw_count <= 0:
            continue
        result[raw_day] = [PLACEHOLDER_TOKEN] * raw_count
    return result


def build_year_summary(years: list[int], default_year: int | None = None) -> YearSummary:
    """Sort years ascending; an empty list becomes the current UTC year."""

    if not years:
        this_year = default_year if default_year is not None else current_utc_year()
        return YearSummary(start_year=this_year, end_year=this_year, years=[this_year])

    ordered = sorted(years)
    return YearSummary(start_year=ordered[0], end_year=ordered[-1], years=ordered)


def _failure_from(exc: GitHubAPIError) -> UpstreamFailure:
    if isinstance(exc, MissingCredentialError):
        kind = ErrorKind.MISSING_CREDENTIAL
    elif isinstance(exc, UpstreamGraphQLError):
        kind = ErrorKind.UPSTREAM_GRAPHQL
    else:
        kind = ErrorKind.UPSTREAM_HTTP

    logger.warning("GitHub request failed (%s): %s", kind.value, exc)
    sentry_sdk.capture_exception(exc, tags={"github_error_kind": kind.value})
    return UpstreamFailure(kind=kind, message=str(exc) or "failed")


async def fetch_contributions_for_year(
    client: httpx.AsyncClient,
    settings: Settings,
    year: int,
) -> ContributionsByDate | UpstreamFailure:
    """Fetch the configured user's contributions for one UTC calendar year."""

    from_timestamp, to_timestamp = year_window(year)
    try:
        contribution_days = await fetch_contribution_days(
            client,
            username=settings.github_username,
            token=settings.github_token,
            graphql_url=settings.github_graphql_url,
            from_timestamp=from_timestamp,
            to_timestamp=to_timestamp,
            user_agent=settings.user_agent,
        )
    except GitHubAPIError as exc:
        return _failure_from(exc)

    contributions = build_contributions_by_date(contribution_days)
    logger.debug(
        "Fetched %d active days for %s in %d",
        len(contributions),
        settings.github_username,
        year,
    )
    return contributions


async def fetch_contribution_years(
    client: httpx.AsyncClient,
    settings: Settings,
) -> YearSummary | UpstreamFailure:
    """Fetch the years with recorded activity for the configured user."""

    try:
        years = await fetch_years(
            client,
            username=settings.github_username,
            token=settings.github_token,
            graphql_url=settings.github_graphql_url,
            user_agent=settings.user_agent,
        )
    except GitHubAPIError as exc:
        return _failure_from(exc)

    return build_year_summary(years)
