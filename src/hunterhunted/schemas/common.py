"""Shared schema types used across both requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

GAME_CODE_MAX_LENGTH = 10
PLAYER_ID_MAX_LENGTH = 50
PLAYER_NAME_MAX_LENGTH = 20


class WireModel(BaseModel):
    """Base for JSON bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def normalize_game_code(code: str) -> str:
    """Uppercase and cap a game code the way the relay partitions on it."""
    return code.strip().upper()[:GAME_CODE_MAX_LENGTH]
