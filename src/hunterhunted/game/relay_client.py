"""Async client for the position relay."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from hunterhunted.errors import NetworkError
from hunterhunted.game.session import LocalGameSession
from hunterhunted.models.types import OwnPosition
from hunterhunted.schemas.request import LocationUpdateRequest
from hunterhunted.schemas.response import (
    LocationListResponse,
    LocationUpdateResponse,
    PlayerLocation,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0


class RelayClient:
    """Thin wrapper around httpx that turns every failure into NetworkError."""

    def __init__(self, base_url: str, *, client: httpx.AsyncClient | None = None):
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip('/'), timeout=DEFAULT_TIMEOUT_S
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RelayClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(f'Relay unreachable: {e}') from e
        if resp.status_code >= 400:
            try:
                detail = resp.json().get('error', resp.text)
            except (ValueError, AttributeError):
                detail = resp.text
            raise NetworkError(f'HTTP error {resp.status_code}: {detail}', resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise NetworkError('Relay returned a non-JSON body') from e

    async def update_location(self, session: LocalGameSession, position: OwnPosition) -> int:
        """Push the local player's accepted fix. Returns the game's player count."""
        body = LocationUpdateRequest(
            player_id=session.player_id or '',
            player_name=session.player_name or '',
            role=session.role,
            game_code=session.game_code or '',
            lat=position.lat,
            lon=position.lon,
            accuracy=position.accuracy,
            timestamp=position.timestamp,
        )
        data = await self._request(
            'POST', '/updateLocation', json=body.model_dump(mode='json', by_alias=True)
        )
        try:
            return LocationUpdateResponse.model_validate(data).player_count
        except PydanticValidationError as e:
            raise NetworkError('Unexpected response from relay') from e

    async def get_locations(self, game_code: str) -> list[PlayerLocation]:
        data = await self._request('GET', '/locations', params={'gameCode': game_code})
        try:
            return LocationListResponse.model_validate(data).locations
        except PydanticValidationError as e:
            raise NetworkError('Unexpected response from relay') from e
