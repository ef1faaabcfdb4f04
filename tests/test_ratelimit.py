from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from hunterhunted.config import RelaySettings
from hunterhunted.errors import RateLimitError
from hunterhunted.main import create_app
from hunterhunted.ratelimit import RateLimiter
from tests.conftest import ALLOWED_ORIGINS, T0, FakeClock, location_body

# ── RateLimiter ───────────────────────────────────────────────────────────────


def test_limiter_allows_up_to_limit():
    limiter = RateLimiter(limit=3, window_ms=60_000)
    for _ in range(3):
        limiter.check('1.2.3.4', T0)
    with pytest.raises(RateLimitError):
        limiter.check('1.2.3.4', T0 + 1)


def test_limiter_window_resets_after_reset_time():
    limiter = RateLimiter(limit=1, window_ms=60_000)
    limiter.check('1.2.3.4', T0)
    with pytest.raises(RateLimitError):
        limiter.check('1.2.3.4', T0 + 60_000)
    limiter.check('1.2.3.4', T0 + 60_001)


def test_limiter_sources_are_independent():
    limiter = RateLimiter(limit=1, window_ms=60_000)
    limiter.check('1.2.3.4', T0)
    limiter.check('5.6.7.8', T0)
    with pytest.raises(RateLimitError):
        limiter.check('1.2.3.4', T0)


def test_limiter_prune_forgets_expired_windows():
    limiter = RateLimiter(limit=5, window_ms=60_000)
    limiter.check('old', T0)
    limiter.check('new', T0 + 30_000)
    limiter.prune(T0 + 60_001)
    assert len(limiter) == 1


# ── HTTP ──────────────────────────────────────────────────────────────────────


def test_61st_request_in_window_is_rejected(client: TestClient, clock: FakeClock):
    for i in range(60):
        resp = client.post('/updateLocation', json=location_body(lat=10 + i * 0.001))
        assert resp.status_code == 200

    resp = client.post('/updateLocation', json=location_body(lat=45.0))
    assert resp.status_code == 429
    assert resp.json() == {'error': 'Rate limit exceeded. Please try again later.'}

    # The rejected request must not have touched the store.
    clock.advance(60_001)
    resp = client.get('/locations', params={'gameCode': 'ABC123'})
    assert resp.status_code == 200
    assert resp.json()['locations'][0]['lat'] == pytest.approx(10.059)


def test_proxy_headers_are_ignored_by_default(client: TestClient):
    for i in range(60):
        resp = client.get('/health', headers={'X-Forwarded-For': f'10.0.0.{i}'})
        assert resp.status_code == 200

    resp = client.get('/health', headers={'X-Forwarded-For': '10.0.1.1'})
    assert resp.status_code == 429
    resp = client.get('/health', headers={'CF-Connecting-IP': '10.0.1.2'})
    assert resp.status_code == 429


def test_rate_limit_is_per_source_behind_trusted_proxy(clock: FakeClock):
    settings = RelaySettings(allowed_origins=ALLOWED_ORIGINS, trust_proxy_headers=True)
    with TestClient(create_app(settings, clock=clock)) as client:
        for _ in range(60):
            client.get('/health', headers={'CF-Connecting-IP': '10.0.0.1'})

        assert client.get('/health', headers={'CF-Connecting-IP': '10.0.0.1'}).status_code == 429
        assert client.get('/health', headers={'CF-Connecting-IP': '10.0.0.2'}).status_code == 200
        forwarded = {'X-Forwarded-For': '10.0.0.3, 10.0.0.1'}
        assert client.get('/health', headers=forwarded).status_code == 200


def test_unrouted_requests_count_towards_the_limit(client: TestClient):
    for _ in range(30):
        assert client.get('/nope').status_code == 404
        assert client.delete('/health').status_code == 405

    resp = client.get('/health', headers={'Origin': ALLOWED_ORIGINS[1]})
    assert resp.status_code == 429
    assert resp.json() == {'error': 'Rate limit exceeded. Please try again later.'}
    assert resp.headers['Access-Control-Allow-Origin'] == ALLOWED_ORIGINS[1]


def test_preflight_is_not_rate_limited(client: TestClient):
    for _ in range(60):
        client.get('/health')
    assert client.options('/updateLocation').status_code == 204
