from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.responses import Response


class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"


def cors_headers(request: Request) -> dict[str, str]:
    """Build CORS headers, echoing the caller's Origin or `*` when absent."""

    origin = request.headers.get("origin") or "*"
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Max-Age": "86400",
    }


def render_json(
    payload: Any,
    status_code: int,
    request: Request,
    max_age_seconds: int = 0,
) -> JSONResponse:
    """Serialize `payload` with CORS headers and an optional public cache header."""

    headers = cors_headers(request)
    if max_age_seconds > 0:
        headers["Cache-Control"] = f"public, max-age={max_age_seconds}"
    return UTF8JSONResponse(content=payload, status_code=status_code, headers=headers)


def render_preflight(request: Request) -> Response:
    return Response(status_code=204, headers=cors_headers(request))
