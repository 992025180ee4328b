"""HTTP API: validate the request, hand it to the worker pool, relay the result.

The pool always resolves to exactly one ScrapeResult; this layer only maps
its error kind to an HTTP status and writes one JSON response.
"""
import logging

from aiohttp import web

from .. import __version__
from ..engine.errors import ErrorKind, ValidationError
from ..models import ScrapeResult, iso_utc
from ..targets import profile_url, validate_target_url

log = logging.getLogger(__name__)

POOL_KEY = web.AppKey("pool", object)

EXAMPLE_BODY = {"url": "https://x.com/username"}

STATUS_BY_KIND = {
    ErrorKind.VALIDATION.value: 400,
    ErrorKind.WORKER_TIMEOUT.value: 408,
}


def status_for(result: ScrapeResult) -> int:
    if result.success:
        return 200
    return STATUS_BY_KIND.get(result.error_kind, 500)


def _validation_response(e: ValidationError) -> web.Response:
    return web.json_response({"error": str(e), "example": EXAMPLE_BODY}, status=400)


async def _scrape(request: web.Request, url: str) -> web.Response:
    pool = request.app[POOL_KEY]
    result = await pool.run(url)
    return web.json_response(result.to_dict(), status=status_for(result))


async def health(request: web.Request) -> web.Response:
    pool = request.app[POOL_KEY]
    return web.json_response({
        "status": "Timeline Scraper API is running",
        "version": __version__,
        "timestamp": iso_utc(),
        "workers": pool.stats,
    })


async def scrape_post(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except ValueError:
        return _validation_response(ValidationError("Request body must be JSON"))
    if not isinstance(body, dict):
        return _validation_response(ValidationError("Request body must be a JSON object"))
    try:
        url = validate_target_url(body.get("url"))
    except ValidationError as e:
        return _validation_response(e)
    return await _scrape(request, url)


async def scrape_username(request: web.Request) -> web.Response:
    try:
        url = profile_url(request.match_info["username"])
    except ValidationError as e:
        return _validation_response(e)
    return await _scrape(request, url)


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception:
        log.exception(f"Server error on {request.method} {request.path}")
        return web.json_response({"error": "Internal server error"}, status=500)


def create_app(pool) -> web.Application:
    app = web.Application(middlewares=[error_middleware], client_max_size=10 * 1024 * 1024)
    app[POOL_KEY] = pool
    app.router.add_get("/", health)
    app.router.add_post("/scrape", scrape_post)
    app.router.add_get("/scrape/{username}", scrape_username)
    return app
