"""Runtime settings for the relay and the game client.

Both settings models carry the game's defaults and can be overridden from
``HUNTERHUNTED_*`` environment variables via ``from_env()``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

ENV_PREFIX = 'HUNTERHUNTED_'


def _read_env(
    environ: Mapping[str, str] | None, names: dict[str, str]
) -> dict[str, Any]:
    environ = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for field, env_name in names.items():
        raw = environ.get(ENV_PREFIX + env_name)
        if raw is not None and raw != '':
            values[field] = raw
    return values


class RelaySettings(BaseModel):
    """Settings for the position relay server."""

    max_position_age_ms: int = Field(default=15 * 60 * 1000, gt=0)
    rate_limit: int = Field(default=60, ge=1, description='Accepted requests per window.')
    rate_window_ms: int = Field(default=60_000, gt=0)
    allowed_origins: list[str] = Field(
        default_factory=lambda: ['http://localhost:8000'],
        min_length=1,
        description='CORS allow list. The first entry is the fallback origin.',
    )
    database_url: str = 'sqlite://'
    trust_proxy_headers: bool = Field(
        default=False,
        description='Key rate limits on CF-Connecting-IP / X-Forwarded-For instead of the peer.',
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RelaySettings:
        values = _read_env(
            environ,
            {
                'max_position_age_ms': 'MAX_POSITION_AGE_MS',
                'rate_limit': 'RATE_LIMIT',
                'rate_window_ms': 'RATE_WINDOW_MS',
                'allowed_origins': 'ALLOWED_ORIGINS',
                'database_url': 'DATABASE_URL',
                'trust_proxy_headers': 'TRUST_PROXY_HEADERS',
            },
        )
        if 'allowed_origins' in values:
            values['allowed_origins'] = [
                origin.strip() for origin in values['allowed_origins'].split(',') if origin.strip()
            ]
        return cls.model_validate(values)


class GameSettings(BaseModel):
    """Settings for the client-side engine and runner."""

    backend_url: str = 'http://localhost:8000'
    update_interval_ms: int = Field(default=5_000, gt=0)
    tick_interval_ms: int = Field(default=1_000, gt=0)
    position_delay_ms: int = Field(default=120_000, ge=0)
    game_duration_ms: int = Field(default=600_000, gt=0)
    capture_distance_m: float = Field(default=50.0, ge=0)
    max_accuracy_m: float = Field(default=100.0, ge=0)
    gps_timeout_ms: int = Field(default=10_000, gt=0)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GameSettings:
        values = _read_env(
            environ,
            {
                'backend_url': 'BACKEND_URL',
                'update_interval_ms': 'UPDATE_INTERVAL_MS',
                'tick_interval_ms': 'TICK_INTERVAL_MS',
                'position_delay_ms': 'POSITION_DELAY_MS',
                'game_duration_ms': 'GAME_DURATION_MS',
                'capture_distance_m': 'CAPTURE_DISTANCE_M',
                'max_accuracy_m': 'MAX_ACCURACY_M',
                'gps_timeout_ms': 'GPS_TIMEOUT_MS',
            },
        )
        return cls.model_validate(values)
