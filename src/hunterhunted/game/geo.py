"""Distance and display formatting helpers."""

from __future__ import annotations

import math

EARTH_RADIUS_M = 6_371_000


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres between two points given in decimal degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def format_time(milliseconds: int) -> str:
    """Format a duration as ``m:ss``. Negative durations show as ``0:00``."""
    total_seconds = int(max(0, milliseconds) // 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f'{minutes}:{seconds:02d}'


def format_accuracy(accuracy: float) -> str:
    if accuracy < 1000:
        return f'{round(accuracy)}m'
    return f'{accuracy / 1000:.1f}km'
