from collections.abc import Awaitable
from collections.abc import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from contribution_proxy.core.responses import render_preflight


class CorsPreflightMiddleware(BaseHTTPMiddleware):
    """Answer every OPTIONS request with an empty 204 carrying CORS headers."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        # Preflight applies to any path, including ones without a route.
        if request.method != "OPTIONS":
            return await call_next(request)

        return render_preflight(request)
