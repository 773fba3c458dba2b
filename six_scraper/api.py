"""
HTTP front for the schedule service.

Routes are plain `def` handlers so they run on the server's thread pool,
one request per thread, all sharing the same ScheduleService and cache.
"""
import logging
import time

import orjson
from fastapi import FastAPI, Request, Response
from fastapi.datastructures import QueryParams

from six_scraper.cache import ScheduleCache
from six_scraper.config import Settings, load_settings
from six_scraper.engine import SCHEDULE_FILTERS, ScheduleService
from six_scraper.errors import (
    MissingSessionTokenError,
    NotFoundError,
    ScraperError,
    UpstreamError,
    ValidationError,
)
from six_scraper.models import APIResponse, Meta
from six_scraper.portal import PortalClient

logger = logging.getLogger(__name__)


def _status_for(error: ScraperError) -> int:
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, (MissingSessionTokenError, UpstreamError)):
        return 502
    return 500


def _first(query: QueryParams, name: str) -> str:
    # A repeated parameter counts by its first value, QueryParams.get would give the last
    values = query.getlist(name)
    return values[0] if values else ""


def _json(envelope: APIResponse, status_code: int = 200) -> Response:
    body = envelope.model_dump(mode="json", by_alias=True, exclude_none=True)
    return Response(content=orjson.dumps(body), status_code=status_code, media_type="application/json")


def create_app(service: ScheduleService | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Builds the API. Without a service one is created from the settings,
    with a fresh cache that lives as long as the app does.
    """
    if service is None:
        settings = settings or load_settings()
        service = ScheduleService(PortalClient(base_url=settings.base_url, timeout=settings.timeout), ScheduleCache())

    app = FastAPI(title="SIX Schedule API")
    app.state.service = service

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s status=%d duration=%.3fs",
            request.method, request.url, response.status_code, time.perf_counter() - started,
        )
        return response

    @app.exception_handler(ScraperError)
    async def scraper_error_handler(request: Request, error: ScraperError) -> Response:
        return _json(APIResponse(success=False, error=str(error)), status_code=_status_for(error))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, error: Exception) -> Response:
        logger.exception("unhandled error on %s %s", request.method, request.url)
        return _json(APIResponse(success=False, error="internal error"), status_code=500)

    @app.get("/api/user")
    def get_user(request: Request) -> Response:
        identity = request.app.state.service.resolve_user(request.cookies)
        return _json(APIResponse(success=True, data=identity.model_dump()))

    @app.get("/api/schedule")
    def get_schedule(request: Request) -> Response:
        query = request.query_params
        filters = {name: _first(query, name) for name in SCHEDULE_FILTERS}

        result = request.app.state.service.resolve_schedule(
            student_id=_first(query, "student_id"),
            semester=_first(query, "semester"),
            cookies=request.cookies,
            filters=filters,
            refresh=_first(query, "refresh") == "true",
        )
        return _json(APIResponse(
            success=True,
            data=[c.model_dump(mode="json", by_alias=True) for c in result.classes],
            meta=Meta(fetched_at=result.fetched_at, cached=result.cached),
        ))

    return app
