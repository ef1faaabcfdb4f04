from __future__ import annotations

import re

import pytest

from hunterhunted.errors import SessionError
from hunterhunted.game.session import LocalGameSession, Outcome, generate_player_id
from hunterhunted.models.types import OutcomeReason, PlayerRole, PositionSample, SessionStatus
from tests.conftest import T0


def _started(role: PlayerRole = PlayerRole.hunter) -> LocalGameSession:
    session = LocalGameSession()
    session.start('  Alice ', ' abc123 ', role, T0)
    return session


def test_generate_player_id_format():
    assert re.fullmatch(rf'p_{T0}_[a-z0-9]{{9}}', generate_player_id(T0))


def test_start_moves_idle_to_active():
    session = _started()
    assert session.status == SessionStatus.active
    assert session.is_active
    assert session.player_name == 'Alice'
    assert session.game_code == 'ABC123'
    assert session.role == PlayerRole.hunter
    assert session.start_time == T0
    assert session.player_id.startswith(f'p_{T0}_')


def test_start_accepts_role_string():
    session = LocalGameSession()
    session.start('Bob', 'XYZ', 'hunted', T0)
    assert session.role == PlayerRole.hunted


@pytest.mark.parametrize(
    ('name', 'code', 'role'),
    [
        ('', 'ABC', PlayerRole.hunter),
        ('   ', 'ABC', PlayerRole.hunter),
        ('Alice', '', PlayerRole.hunter),
        ('Alice', 'ABC', None),
        ('Alice', 'ABC', 'referee'),
    ],
)
def test_start_requires_complete_form(name, code, role):
    session = LocalGameSession()
    with pytest.raises(SessionError):
        session.start(name, code, role, T0)
    assert session.status == SessionStatus.idle
    assert session.player_id is None


def test_cannot_start_twice():
    session = _started()
    with pytest.raises(SessionError):
        session.start('Alice', 'ABC', PlayerRole.hunter, T0)


def test_end_is_terminal():
    session = _started()
    session.end(Outcome.left())
    assert session.status == SessionStatus.ended
    assert session.outcome.reason == OutcomeReason.left
    assert session.outcome.message == 'You left the game.'

    with pytest.raises(SessionError):
        session.end(Outcome.timeout())
    with pytest.raises(SessionError):
        session.start('Alice', 'ABC', PlayerRole.hunter, T0)


def test_end_requires_active_session():
    with pytest.raises(SessionError):
        LocalGameSession().end(Outcome.timeout())


def test_reset_returns_to_idle():
    session = _started()
    session.accept_fix(PositionSample(lat=1, lon=2, accuracy=5), T0, max_accuracy_m=100)
    session.end(Outcome.timeout())

    session.reset()
    assert session.status == SessionStatus.idle
    assert session.player_id is None
    assert session.last_known_position is None
    assert session.outcome is None

    session.start('Carol', 'NEW', PlayerRole.hunted, T0 + 1)
    assert session.is_active


def test_reset_refused_while_active():
    session = _started()
    with pytest.raises(SessionError):
        session.reset()


# ── Accuracy gate ─────────────────────────────────────────────────────────────


def test_accept_fix_within_threshold():
    session = _started()
    sample = PositionSample(lat=1, lon=2, accuracy=100)
    assert session.accept_fix(sample, T0 + 5, max_accuracy_m=100)
    position = session.last_known_position
    assert (position.lat, position.lon, position.accuracy) == (1, 2, 100)
    assert position.timestamp == T0 + 5


def test_low_accuracy_fix_keeps_previous_position():
    session = _started()
    session.accept_fix(PositionSample(lat=1, lon=2, accuracy=10), T0, max_accuracy_m=100)

    accepted = session.accept_fix(
        PositionSample(lat=9, lon=9, accuracy=100.5), T0 + 1, max_accuracy_m=100
    )
    assert not accepted
    assert session.last_known_position.lat == 1
    assert session.last_known_position.timestamp == T0


@pytest.mark.parametrize(
    'sample',
    [
        PositionSample(lat=9, lon=9, accuracy=float('nan')),
        PositionSample(lat=9, lon=9, accuracy=float('inf')),
        PositionSample(lat=float('nan'), lon=9, accuracy=5),
    ],
)
def test_non_finite_fix_is_discarded(sample: PositionSample):
    session = _started()
    session.accept_fix(PositionSample(lat=1, lon=2, accuracy=10), T0, max_accuracy_m=100)

    assert not session.accept_fix(sample, T0 + 1, max_accuracy_m=100)
    assert session.last_known_position.lat == 1
    assert session.last_known_position.timestamp == T0
