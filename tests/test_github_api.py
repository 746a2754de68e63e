import asyncio
import json

import httpx
import pytest

from contribution_proxy.github_api import CONTRIBUTION_YEARS_QUERY
from contribution_proxy.github_api import MissingCredentialError
from contribution_proxy.github_api import UpstreamGraphQLError
from contribution_proxy.github_api import UpstreamHTTPError
from contribution_proxy.github_api import fetch_contribution_days
from contribution_proxy.github_api import fetch_contribution_years


GRAPHQL_URL = "https://api.github.test/graphql"


def call_with(handler, make_call):
    async def runner():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await make_call(client)

    return asyncio.run(runner())


def years_call(token: str | None = "token"):
    return lambda client: fetch_contribution_years(
        client,
        username="octocat",
        token=token,
        graphql_url=GRAPHQL_URL,
        user_agent="test-agent",
    )


def test_fetch_contribution_years_posts_query_to_configured_url() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(
            200,
            json={
                "data": {"user": {"contributionsCollection": {"contributionYears": [2020]}}}
            },
        )

    years = call_with(handler, years_call())

    assert years == [2020]
    assert captured[0].method == "POST"
    assert str(captured[0].url) == GRAPHQL_URL
    assert json.loads(captured[0].content) == {
        "query": CONTRIBUTION_YEARS_QUERY,
        "variables": {"login": "octocat"},
    }


@pytest.mark.parametrize("token", [None, "", "   "])
def test_blank_token_raises_missing_credential(token: str | None) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    with pytest.raises(MissingCredentialError, match="GITHUB_TOKEN"):
        call_with(handler, years_call(token))


def test_non_json_body_raises_upstream_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(UpstreamHTTPError) as exc_info:
        call_with(handler, years_call())

    assert exc_info.value.status_code == 200


def test_upstream_http_error_carries_status_and_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="rate limited")

    with pytest.raises(UpstreamHTTPError) as exc_info:
        call_with(handler, years_call())

    assert exc_info.value.status_code == 403
    assert str(exc_info.value) == "GitHub API error: 403 rate limited"


def test_missing_user_reads_as_empty_calendar() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"user": None}})

    days = call_with(
        handler,
        lambda client: fetch_contribution_days(
            client,
            username="ghost",
            token="token",
            graphql_url=GRAPHQL_URL,
            from_timestamp="2024-01-01T00:00:00Z",
            to_timestamp="2024-12-31T23:59:59Z",
            user_agent="test-agent",
        ),
    )

    assert days == []


def test_missing_contribution_count_is_treated_as_zero() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "data": {
                    "user": {
                        "contributionsCollection": {
                            "contributionCalendar": {
                                "weeks": [
                                    {
                                        "contributionDays": [
                                            {"date": "2024-01-01"},
                                            {"date": "2024-01-02", "contributionCount": 2},
                                        ]
                                    }
                                ]
                            }
                        }
                    }
                }
            },
        )

    days = call_with(
        handler,
        lambda client: fetch_contribution_days(
            client,
            username="octocat",
            token="token",
            graphql_url=GRAPHQL_URL,
            from_timestamp="2024-01-01T00:00:00Z",
            to_timestamp="2024-12-31T23:59:59Z",
            user_agent="test-agent",
        ),
    )

    assert days == [
        {"date": "2024-01-01", "count": 0},
        {"date": "2024-01-02", "count": 2},
    ]


def test_empty_errors_list_still_counts_as_graphql_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "data": {"user": {"contributionsCollection": {"contributionYears": [2024]}}},
                "errors": [],
            },
        )

    with pytest.raises(UpstreamGraphQLError, match=r"GitHub API errors: \[\]"):
        call_with(handler, years_call())
