from __future__ import annotations

from collections.abc import Iterable

from hunterhunted.game.engine import VisibleOpponent
from hunterhunted.game.interfaces import MapSurface, Marker
from hunterhunted.models.types import OwnPosition, PlayerRole

SELF_MARKER_ID = 'self'


class MarkerLayer:
    """Keeps the map surface in step with the local player and visible opponents."""

    def __init__(self, surface: MapSurface):
        self.surface = surface
        self._self_shown = False
        self._opponents: set[str] = set()

    @property
    def opponent_ids(self) -> set[str]:
        return set(self._opponents)

    def update_self(self, position: OwnPosition, role: PlayerRole) -> None:
        marker = Marker(
            lat=position.lat,
            lon=position.lon,
            role=role,
            label=f'You ({role})',
            accuracy_radius=position.accuracy,
            is_self=True,
        )
        if self._self_shown:
            self.surface.update_marker(SELF_MARKER_ID, marker)
        else:
            self.surface.add_marker(SELF_MARKER_ID, marker)
            self._self_shown = True

    def sync(self, visible: Iterable[VisibleOpponent], opponent_ids: set[str]) -> None:
        """Draw visible opponents and retract those gone from the snapshot.

        An opponent still in the snapshot but not yet visible keeps whatever
        marker it already has.
        """
        for opponent in visible:
            position = opponent.position
            marker = Marker(
                lat=position.lat,
                lon=position.lon,
                role=position.role,
                label=f'{position.player_name} ({position.role}), {opponent.age // 1000}s ago',
            )
            if opponent.player_id in self._opponents:
                self.surface.update_marker(opponent.player_id, marker)
            else:
                self.surface.add_marker(opponent.player_id, marker)
                self._opponents.add(opponent.player_id)

        for player_id in sorted(self._opponents - opponent_ids):
            self.surface.remove_marker(player_id)
            self._opponents.discard(player_id)

    def clear(self) -> None:
        for player_id in sorted(self._opponents):
            self.surface.remove_marker(player_id)
        self._opponents.clear()
        if self._self_shown:
            self.surface.remove_marker(SELF_MARKER_ID)
            self._self_shown = False
