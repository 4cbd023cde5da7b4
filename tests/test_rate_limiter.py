"""Tests for the fixed-window request limiter."""

from routes.auth import logout
from utils.rate_limiter import FixedWindowRateLimiter, client_address, rate_limiter
from helpers import make_request, invoke, payload


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestFixedWindow:
    def test_allows_up_to_points(self):
        limiter = FixedWindowRateLimiter(points=3, duration=60, clock=FakeClock())

        results = [limiter.consume("1.2.3.4")[0] for _ in range(4)]

        assert results == [True, True, True, False]

    def test_retry_after_counts_down(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(points=1, duration=60, clock=clock)
        limiter.consume("k")

        clock.now += 20
        allowed, retry_after = limiter.consume("k")

        assert allowed is False
        assert retry_after == 40

    def test_window_resets(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(points=1, duration=60, clock=clock)
        limiter.consume("k")
        assert limiter.consume("k")[0] is False

        clock.now += 60

        assert limiter.consume("k") == (True, 0)

    def test_keys_are_independent(self):
        limiter = FixedWindowRateLimiter(points=1, duration=60, clock=FakeClock())

        assert limiter.consume("a")[0] is True
        assert limiter.consume("b")[0] is True

    def test_reset(self):
        limiter = FixedWindowRateLimiter(points=1, duration=60, clock=FakeClock())
        limiter.consume("a")
        limiter.consume("b")

        limiter.reset("a")
        assert limiter.consume("a")[0] is True
        assert limiter.consume("b")[0] is False

        limiter.reset()
        assert limiter.consume("b")[0] is True

    def test_expired_windows_are_evicted(self):
        """Clients that never return do not keep their window forever."""
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(points=5, duration=60, clock=clock)
        for i in range(5000):
            limiter.consume(f"10.0.{i // 256}.{i % 256}")

        clock.now += 10_000
        limiter.consume("192.0.2.1")

        assert list(limiter._windows) == ["192.0.2.1"]

    def test_live_windows_survive_eviction(self):
        clock = FakeClock()
        limiter = FixedWindowRateLimiter(points=1, duration=60, clock=clock)
        limiter.consume("stale")
        clock.now += 50
        limiter.consume("busy")

        clock.now += 20
        limiter.consume("other")

        assert "stale" not in limiter._windows
        assert limiter.consume("busy")[0] is False


class TestClientAddress:
    def test_first_forwarded_hop_without_port(self):
        req = make_request("GET", "ping", headers={"X-Forwarded-For": "198.51.100.2:443, 10.0.0.1"})

        assert client_address(req) == "198.51.100.2"

    def test_ipv6_kept_whole(self):
        req = make_request("GET", "ping", headers={"X-Forwarded-For": "2001:db8::1"})

        assert client_address(req) == "2001:db8::1"

    def test_bracketed_ipv6_port_removed(self):
        req = make_request("GET", "ping", headers={"X-Forwarded-For": "[2001:db8::1]:443"})

        assert client_address(req) == "2001:db8::1"

    def test_source_port_does_not_reset_budget(self):
        limiter = FixedWindowRateLimiter(points=1, duration=60, clock=FakeClock())
        first = make_request("GET", "ping", headers={"X-Forwarded-For": "[2001:db8::1]:50001"})
        second = make_request("GET", "ping", headers={"X-Forwarded-For": "[2001:db8::1]:50002"})

        assert limiter.consume(client_address(first))[0] is True
        assert limiter.consume(client_address(second))[0] is False


class TestRateLimitedDecorator:
    def test_rejects_after_budget(self):
        for _ in range(rate_limiter.points):
            assert invoke(logout, make_request("POST", "auth/logout")).status_code == 200

        resp = invoke(logout, make_request("POST", "auth/logout"))

        assert resp.status_code == 429
        assert int(resp.headers.get("Retry-After")) >= 1
        body = payload(resp)
        assert body["success"] is False
        assert body["retryAfter"] == int(resp.headers.get("Retry-After"))

    def test_preflight_not_counted(self):
        for _ in range(rate_limiter.points + 5):
            invoke(logout, make_request("OPTIONS", "auth/logout"))

        assert invoke(logout, make_request("POST", "auth/logout")).status_code == 200

    def test_other_clients_unaffected(self):
        for _ in range(rate_limiter.points + 1):
            invoke(logout, make_request("POST", "auth/logout"))

        other = make_request("POST", "auth/logout", headers={"X-Forwarded-For": "192.0.2.99"})
        assert invoke(logout, other).status_code == 200
