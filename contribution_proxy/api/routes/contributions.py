from collections.abc import AsyncIterator

import httpx
from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import Request
from fastapi.responses import JSONResponse

from contribution_proxy.api.schemas.contributions import ErrorResponse
from contribution_proxy.api.schemas.contributions import HealthResponse
from contribution_proxy.core.responses import render_json
from contribution_proxy.services.contributions_service import UpstreamFailure
from contribution_proxy.services.contributions_service import (
    fetch_contribution_years,
)
from contribution_proxy.services.contributions_service import (
    fetch_contributions_for_year,
)
from contribution_proxy.services.contributions_service import resolve_year
from contribution_proxy.settings import Settings


router = APIRouter(prefix="/api")

# Endpoints dispatch on path alone; OPTIONS never reaches them.
PATH_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


def get_settings(request: Request) -> Settings:
    """Return the settings object the application was created with."""

    return request.app.state.settings


async def get_http_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    """Open an outbound client scoped to a single request."""

    async with httpx.AsyncClient(timeout=settings.github_timeout_seconds) as client:
        yield client


def failure_response(failure: UpstreamFailure, request: Request) -> JSONResponse:
    # Every failure kind maps to the same status and body shape.
    body = ErrorResponse(error=failure.message)
    return render_json(body.model_dump(), 500, request)


@router.api_route("/health", methods=PATH_METHODS)
async def health(request: Request) -> JSONResponse:
    """Return liveness response for health checks."""

    return render_json(HealthResponse().model_dump(), 200, request)


@router.api_route("/contributions", methods=PATH_METHODS)
async def get_contributions(
    request: Request,
    year: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> JSONResponse:
    """Return `{date: ["contribution", ...]}` for one UTC calendar year."""

    result = await fetch_contributions_for_year(client, settings, resolve_year(year))
    if isinstance(result, UpstreamFailure):
        return failure_response(result, request)

    return render_json(result, 200, request, settings.contributions_max_age_seconds)


@router.api_route("/years", methods=PATH_METHODS)
async def get_years(
    request: Request,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> JSONResponse:
    """Return the range and list of years with recorded contributions."""

    result = await fetch_contribution_years(client, settings)
    if isinstance(result, UpstreamFailure):
        return failure_response(result, request)

    return render_json(
        result.model_dump(by_alias=True),
        200,
        request,
        settings.years_max_age_seconds,
    )
