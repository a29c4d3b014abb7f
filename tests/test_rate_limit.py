# =============================================================================
# tests/test_rate_limit.py - Fixed-window limiter
# =============================================================================

from unittest.mock import patch

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from studentpath.core.rate_limit import RateLimiter, rate_limit


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestRateLimiter:

    def test_allows_up_to_limit(self):
        limiter = RateLimiter(clock=FakeClock())
        results = [limiter.check("ip", limit=3, window_seconds=60) for _ in range(4)]
        assert results == [True, True, True, False]

    def test_window_resets(self):
        clock = FakeClock()
        limiter = RateLimiter(clock=clock)
        for _ in range(3):
            limiter.check("ip", limit=2, window_seconds=60)

        clock.now += 61

        assert limiter.check("ip", limit=2, window_seconds=60) is True

    def test_keys_are_independent(self):
        limiter = RateLimiter(clock=FakeClock())
        assert limiter.check("login:a", limit=1) is True
        assert limiter.check("login:b", limit=1) is True
        assert limiter.check("login:a", limit=1) is False

    def test_reset_clears_counters(self):
        limiter = RateLimiter(clock=FakeClock())
        limiter.check("ip", limit=1)
        limiter.reset()
        assert limiter.check("ip", limit=1) is True


# =============================================================================
# Dependency
# =============================================================================

def make_request(host="10.0.0.1", forwarded=None):
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({"type": "http", "headers": headers, "client": (host, 5000)})


class TestRateLimitDependency:

    def test_window_argument_is_used(self):
        clock = FakeClock()
        dependency = rate_limit(1, window=10, message="Slow down")

        with patch("studentpath.core.rate_limit.limiter", RateLimiter(clock=clock)):
            dependency(make_request())
            with pytest.raises(HTTPException) as exc:
                dependency(make_request())
            assert exc.value.status_code == 429
            assert exc.value.detail == "Slow down"

            clock.now += 11
            dependency(make_request())

    def test_key_is_client_address(self):
        first = rate_limit(2)
        second = rate_limit(2)

        with patch("studentpath.core.rate_limit.limiter", RateLimiter(clock=FakeClock())):
            first(make_request(forwarded="203.0.113.5, 10.0.0.1"))
            second(make_request(host="10.9.9.9", forwarded="203.0.113.5"))
            with pytest.raises(HTTPException):
                first(make_request(forwarded="203.0.113.5"))
            # Another address has its own counter
            first(make_request(host="10.0.0.2"))


class TestSharedBudgetAcrossRoutes:

    def test_logins_count_against_registration(self, client):
        for _ in range(3):
            assert client.post("/api/auth/login", json={}).status_code == 400

        response = client.post("/api/auth/register-student", json={})

        assert response.status_code == 429
        assert response.json()["detail"] == "Too many registration attempts"

    def test_registrations_count_against_login(self, client):
        for _ in range(3):
            client.post("/api/auth/register-student", json={})
        client.post("/api/auth/login-college", json={})
        client.post("/api/auth/login", json={})

        assert client.post("/api/auth/login", json={}).status_code == 429
