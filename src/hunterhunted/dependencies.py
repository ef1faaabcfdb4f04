"""Shared FastAPI dependencies for the relay API."""

from __future__ import annotations

from fastapi import Request

from hunterhunted.clock import Clock
from hunterhunted.config import RelaySettings
from hunterhunted.ratelimit import RateLimiter
from hunterhunted.store import PositionStore


def get_settings(request: Request) -> RelaySettings:
    return request.app.state.settings


def get_store(request: Request) -> PositionStore:
    return request.app.state.store


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_source_id(request: Request) -> str:
    """Identify the caller for rate limiting.

    Proxy headers are only honoured when ``trust_proxy_headers`` is set.
    """
    if get_settings(request).trust_proxy_headers:
        forwarded = request.headers.get('CF-Connecting-IP') or request.headers.get(
            'X-Forwarded-For'
        )
        if forwarded:
            return forwarded.split(',')[0].strip()
    if request.client:
        return request.client.host
    return 'unknown'
