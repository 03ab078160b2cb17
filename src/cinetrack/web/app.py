from __future__ import annotations

import asyncio
import contextlib
import logging
import typing as t
from collections.abc import AsyncIterator

import httpx
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from ..cache import CachedValue
from ..container import Services
from ..errors import InvalidRequestError, UpstreamError
from ..scheduler import NotificationProcessor, NotificationSink, PeriodicRunner, TBAProcessor, WatchlistLookup
from ..store import KeyValueStore
from ..utils.config import AppConfig

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _services(request: Request) -> Services:
    return request.app.state.services


def cached_response(result: CachedValue) -> JSONResponse:
    return JSONResponse(result.value, headers={**NO_STORE_HEADERS, "X-Cache": result.status.header_value})


async def discover(request: Request) -> Response:
    return cached_response(await _services(request).metadata.discover())


async def search(request: Request) -> Response:
    return cached_response(await _services(request).metadata.search(request.query_params.get("q")))


async def details(request: Request) -> Response:
    p = request.path_params
    return cached_response(await _services(request).metadata.details(p["media_type"], p["media_id"]))


async def season(request: Request) -> Response:
    p = request.path_params
    return cached_response(await _services(request).metadata.season(p["tv_id"], p["season_number"]))


async def providers(request: Request) -> Response:
    p = request.path_params
    return cached_response(await _services(request).metadata.providers(p["media_type"], p["media_id"]))


async def recommendations(request: Request) -> Response:
    p = request.path_params
    return cached_response(await _services(request).metadata.recommendations(p["media_type"], p["media_id"]))


async def images(request: Request) -> Response:
    p = request.path_params
    return cached_response(await _services(request).metadata.images(p["media_type"], p["media_id"]))


async def schedule(request: Request) -> Response:
    return JSONResponse(await _services(request).scheduler.snapshot(), headers=NO_STORE_HEADERS)


async def health(request: Request) -> Response:
    return JSONResponse({"status": "ok", "storeAvailable": _services(request).store.is_available()})


async def invalid_request(request: Request, exc: Exception) -> Response:
    return JSONResponse({"message": str(exc)}, status_code=400)


async def upstream_error(request: Request, exc: Exception) -> Response:
    logger.error("Upstream error on %s: %s", request.url.path, exc)
    return JSONResponse({"message": "Upstream metadata service error"}, status_code=502)


tmdb_routes = [
    Route("/discover", discover),
    Route("/search", search),
    Route("/details/{media_type}/{media_id}", details),
    Route("/season/{tv_id}/{season_number}", season),
    Route("/providers/{media_type}/{media_id}", providers),
    Route("/recommendations/{media_type}/{media_id}", recommendations),
    Route("/images/{media_type}/{media_id}", images),
]


def create_app(
    config: t.Optional[AppConfig] = None,
    *,
    store: t.Optional[KeyValueStore] = None,
    tmdb_transport: t.Optional[httpx.AsyncBaseTransport] = None,
    watchlist: t.Optional[WatchlistLookup] = None,
    sink: t.Optional[NotificationSink] = None,
) -> Starlette:
    """Build the ASGI app.

    The notification job only runs when both watchlist and sink collaborators
    are supplied; the TBA job runs when ``config.scheduler.run_tba_processor``.
    """
    config = config or AppConfig.from_env()
    services = Services.build(config, store=store, tmdb_transport=tmdb_transport)

    runners: t.List[PeriodicRunner] = []
    if watchlist is not None and sink is not None:
        processor = NotificationProcessor(services.scheduler, watchlist, sink, services.tracker)
        runners.append(PeriodicRunner("notifications", processor.process_due, config.scheduler.due_interval_seconds))
    if config.scheduler.run_tba_processor:
        tba = TBAProcessor(services.scheduler, services.tracker)
        runners.append(PeriodicRunner("tba", tba.process, config.scheduler.tba_interval_seconds))

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        if not await services.start():
            logger.warning("Key-value store unavailable at startup; serving without cache")
        tasks = [asyncio.create_task(runner.run(), name=runner.name) for runner in runners]
        logger.info("Application started")
        try:
            yield
        finally:
            logger.info("Application shutting down...")
            for task in tasks:
                task.cancel()
            for task in tasks:
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            await services.close()

    app = Starlette(
        routes=[
            Mount("/api/tmdb", routes=tmdb_routes),
            Route("/api/schedule", schedule),
            Route("/health", health),
        ],
        exception_handlers={
            InvalidRequestError: invalid_request,
            UpstreamError: upstream_error,
        },
        lifespan=lifespan,
    )
    app.state.services = services
    return app
