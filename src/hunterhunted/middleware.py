"""HTTP middleware for the relay: CORS, rate limiting and stale-data eviction.

CORS sits outermost, so preflights never reach the rate limiter and every other
response, including 429s and 500s, carries the CORS headers. Unlike Starlette's
CORSMiddleware, an unlisted origin is not refused; it gets the first allowed
origin back, which the browser then rejects on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

from fastapi import Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from hunterhunted.dependencies import get_clock, get_rate_limiter, get_source_id, get_store
from hunterhunted.errors import RateLimitError

logger = logging.getLogger(__name__)

ALLOWED_METHODS = 'GET, POST, OPTIONS'
ALLOWED_HEADERS = 'Content-Type'
MAX_AGE_SECONDS = 86400

CallNext = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Request, CallNext], Awaitable[Response]]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'error': message})


def cors_headers(origin: str | None, allowed_origins: Sequence[str]) -> dict[str, str]:
    allowed_origin = origin if origin in allowed_origins else allowed_origins[0]
    return {
        'Access-Control-Allow-Origin': allowed_origin,
        'Access-Control-Allow-Methods': ALLOWED_METHODS,
        'Access-Control-Allow-Headers': ALLOWED_HEADERS,
        'Access-Control-Max-Age': str(MAX_AGE_SECONDS),
    }


def make_cors_middleware(allowed_origins: Sequence[str]) -> Middleware:
    """Build an ``http`` middleware that answers preflights and decorates responses.

    Unhandled exceptions are rendered here as a 500 so they get CORS headers too.
    """

    async def cors_middleware(request: Request, call_next: CallNext) -> Response:
        headers = cors_headers(request.headers.get('Origin'), allowed_origins)
        if request.method == 'OPTIONS':
            return Response(status_code=204, headers=headers)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception('Unhandled error on %s %s', request.method, request.url.path)
            response = error_response(500, 'Internal server error')
        response.headers.update(headers)
        return response

    return cors_middleware


async def rate_limit_middleware(request: Request, call_next: CallNext) -> Response:
    """Count every request against its source, then sweep expired data.

    Runs for unmatched paths and wrong methods as well as routed requests.
    """
    clock = get_clock(request)
    limiter = get_rate_limiter(request)
    now = clock()
    try:
        limiter.check(get_source_id(request), now)
    except RateLimitError as exc:
        return error_response(RateLimitError.status_code, exc.message)

    await run_in_threadpool(get_store(request).evict, now)
    limiter.prune(now)
    return await call_next(request)
