"""Position upsert and snapshot endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from hunterhunted.clock import Clock
from hunterhunted.dependencies import get_clock, get_store
from hunterhunted.schemas.common import normalize_game_code
from hunterhunted.schemas.request import LocationUpdateRequest
from hunterhunted.schemas.response import (
    ErrorResponse,
    LocationListResponse,
    LocationUpdateResponse,
    PlayerLocation,
)
from hunterhunted.store import PositionStore

router = APIRouter(
    tags=['locations'],
    responses={
        400: {'model': ErrorResponse, 'description': 'Invalid request data.'},
        429: {'model': ErrorResponse, 'description': 'Rate limit exceeded.'},
    },
)


@router.post('/updateLocation', response_model=LocationUpdateResponse)
def update_location(
    body: LocationUpdateRequest,
    store: PositionStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> LocationUpdateResponse:
    """Overwrite the caller's position, stamped with the relay's receipt time."""
    player_count = store.upsert(body, received_at=clock())
    return LocationUpdateResponse(player_count=player_count)


@router.get('/locations', response_model=LocationListResponse)
def list_locations(
    game_code: str = Query(alias='gameCode', min_length=1),
    store: PositionStore = Depends(get_store),
) -> LocationListResponse:
    """Every stored position for a game. Unknown codes yield an empty list."""
    positions = store.snapshot(normalize_game_code(game_code))
    locations = [PlayerLocation.from_model(p) for p in positions]
    return LocationListResponse(locations=locations, count=len(locations))
