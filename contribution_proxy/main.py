import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from contribution_proxy.api.routes.contributions import router as contributions_router
from contribution_proxy.core.middleware import CorsPreflightMiddleware
from contribution_proxy.core.observability import configure_logging
from contribution_proxy.core.observability import init_sentry
from contribution_proxy.core.responses import render_json
from contribution_proxy.settings import Settings


logger = logging.getLogger(__name__)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == 404:
        response = render_json({"message": "Not Found"}, 404, request)
    else:
        response = render_json({"message": exc.detail}, exc.status_code, request)

    if exc.headers:
        response.headers.update(exc.headers)
    return response


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around an explicit settings object."""

    app_settings = settings if settings is not None else Settings()
    configure_logging(app_settings)
    init_sentry(app_settings)

    app = FastAPI(title="github-contribution-proxy")
    app.state.settings = app_settings
    app.add_middleware(CorsPreflightMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.include_router(contributions_router)

    if not app_settings.github_token:
        logger.warning("GITHUB_TOKEN is not set; upstream endpoints will return 500")
    return app


app = create_app()
