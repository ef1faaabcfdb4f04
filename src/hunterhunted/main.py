from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hunterhunted.clock import Clock, system_clock
from hunterhunted.config import RelaySettings
from hunterhunted.dependencies import get_store
from hunterhunted.errors import HunterHuntedError, ValidationError
from hunterhunted.middleware import error_response, make_cors_middleware, rate_limit_middleware
from hunterhunted.ratelimit import RateLimiter
from hunterhunted.routers import locations
from hunterhunted.schemas.response import HealthResponse
from hunterhunted.store import PositionStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

VERSION = '0.1.0'

# Friendlier names for fields in validation messages.
_FIELD_LABELS = {'lat': 'latitude', 'lon': 'longitude'}


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return 'Invalid request data'
    first = errors[0]
    loc = [part for part in first.get('loc', ()) if isinstance(part, str)]
    if len(loc) < 2:
        return 'Invalid request data'
    source, name = loc[0], loc[-1]
    if first.get('type') == 'missing':
        if source == 'query':
            return f'Missing {name} parameter'
        return f'Missing required field: {name}'
    return f'Invalid {_FIELD_LABELS.get(name, name)}'


async def _handle_domain_error(request: Request, exc: HunterHuntedError) -> JSONResponse:
    status_code = getattr(exc, 'status_code', None) or 400
    return error_response(status_code, exc.message)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(_describe_validation_error(exc))
    return await _handle_domain_error(request, error)


async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = 'Endpoint not found' if exc.status_code == 404 else str(exc.detail)
    return error_response(exc.status_code, message)


def create_app(settings: RelaySettings | None = None, clock: Clock = system_clock) -> FastAPI:
    """Build a relay app with its own store and rate limiter."""
    settings = settings or RelaySettings.from_env()

    app = FastAPI(
        title='HunterHunted',
        description='Position relay for the Hunter vs Hunted location game',
        version=VERSION,
    )
    app.state.settings = settings
    app.state.clock = clock
    app.state.store = PositionStore.from_url(
        settings.database_url, max_age_ms=settings.max_position_age_ms
    )
    app.state.rate_limiter = RateLimiter(
        limit=settings.rate_limit, window_ms=settings.rate_window_ms
    )

    # The last registered middleware is outermost.
    app.middleware('http')(rate_limit_middleware)
    app.middleware('http')(make_cors_middleware(settings.allowed_origins))

    app.add_exception_handler(
        RequestValidationError, _handle_request_validation  # type: ignore[arg-type]
    )
    app.add_exception_handler(ValidationError, _handle_domain_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)  # type: ignore[arg-type]

    app.include_router(locations.router)

    @app.get('/', response_model=HealthResponse)
    @app.get('/health', response_model=HealthResponse)
    def health(store: PositionStore = Depends(get_store)) -> HealthResponse:
        return HealthResponse(version=VERSION, active_games=store.active_games())

    return app


app = create_app()
