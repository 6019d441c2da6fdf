"""
Tests for the Redis-backed rate limiting middleware.
"""
import pytest
import redis
from fastapi.testclient import TestClient

from resumehub.main import create_app
from resumehub.middleware.rate_limit import RATE_LIMITS, RateLimitMiddleware, classify_request
from tests.factories import ACME_HOST


class FakeRedis:
    """Just enough of redis.Redis for fixed-window counters."""

    def __init__(self, available=True, fail_on_incr=False, expire_failures=0):
        self.available = available
        self.fail_on_incr = fail_on_incr
        self.expire_failures = expire_failures
        self.counters = {}
        self.expiries = {}

    def ping(self):
        if not self.available:
            raise redis.ConnectionError("Connection refused")
        return True

    def incr(self, key):
        if self.fail_on_incr:
            raise redis.RedisError("READONLY")
        self.counters[key] = self.counters.get(key, 0) + 1
        return self.counters[key]

    def expire(self, key, seconds):
        if self.expire_failures:
            self.expire_failures -= 1
            raise redis.ConnectionError("Connection reset by peer")
        self.expiries[key] = seconds
        return True

    def ttl(self, key):
        return self.expiries.get(key, -1)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def limited_client(settings, engine, notifier, fake_redis):
    settings.RATE_LIMIT_ENABLED = True
    app = create_app(settings, engine=engine, redis_client=fake_redis, notification_service=notifier)
    yield TestClient(app, base_url=f"http://{ACME_HOST}")
    app.state.event_bus.shutdown()


@pytest.mark.parametrize("method,path,bucket", [
    ("POST", "/api/v1/auth/login", "login"),
    ("POST", "/api/v1/resumes", "upload"),
    ("POST", "/api/v1/resumes/", "upload"),
    ("POST", "/api/v1/resumes/abc/analysis", "analysis"),
    ("GET", "/api/v1/resumes/abc/analysis", "api"),
    ("GET", "/api/v1/resumes", "api"),
    ("POST", "/api/v1/auth/register", "api"),
    ("GET", "/", "default"),
])
def test_classify_request(method, path, bucket):
    assert classify_request(method, path) == bucket


def test_login_bucket_blocks_after_limit(limited_client, acme, fake_redis):
    max_attempts, window = RATE_LIMITS["login"]
    payload = {"email": "nobody@example.com", "password": "whatever-password"}

    for _ in range(max_attempts):
        assert limited_client.post("/api/v1/auth/login", json=payload).status_code == 401

    response = limited_client.post("/api/v1/auth/login", json=payload)

    assert response.status_code == 429
    assert response.json()["retry_after"] == window
    assert response.headers["Retry-After"] == str(window)
    assert list(fake_redis.expiries.values()) == [window]


def test_remaining_attempts_are_reported(limited_client, acme):
    response = limited_client.get("/api/v1/resumes")

    assert response.headers["X-RateLimit-Limit"] == str(RATE_LIMITS["api"][0])
    assert response.headers["X-RateLimit-Remaining"] == str(RATE_LIMITS["api"][0] - 1)


def test_counters_are_namespaced_by_tenant(limited_client, acme, fake_redis):
    limited_client.get("/api/v1/resumes")

    (key,) = fake_redis.counters
    assert key.startswith(f"resumehub_tenant_{acme.id}:rate_limit:")


def test_unknown_tenant_is_rejected_before_counting(limited_client, acme, fake_redis):
    response = limited_client.get("http://unknown.resumehub.example/api/v1/resumes")

    assert response.status_code == 404
    assert fake_redis.counters == {}


def test_unreachable_redis_lets_requests_through(settings, engine, notifier, acme):
    settings.RATE_LIMIT_ENABLED = True
    app = create_app(settings, engine=engine, redis_client=FakeRedis(available=False), notification_service=notifier)
    client = TestClient(app, base_url=f"http://{ACME_HOST}")
    try:
        payload = {"email": "nobody@example.com", "password": "whatever-password"}
        responses = [client.post("/api/v1/auth/login", json=payload) for _ in range(RATE_LIMITS["login"][0] + 1)]
    finally:
        app.state.event_bus.shutdown()

    assert {r.status_code for r in responses} == {401}
    assert "X-RateLimit-Limit" not in responses[-1].headers


def test_redis_errors_fail_open(settings, engine, notifier, acme):
    settings.RATE_LIMIT_ENABLED = True
    app = create_app(settings, engine=engine, redis_client=FakeRedis(fail_on_incr=True), notification_service=notifier)
    try:
        response = TestClient(app, base_url=f"http://{ACME_HOST}").get("/api/v1/resumes")
    finally:
        app.state.event_bus.shutdown()

    assert response.status_code != 429


def test_counter_left_without_expiry_gets_one():
    fake = FakeRedis(expire_failures=1)
    middleware = RateLimitMiddleware(None, redis_client=fake, cache_prefix="resumehub")

    results = [middleware._hit("k", 2, 60) for _ in range(4)]

    # The failed EXPIRE fails open; the next hit sets the missing TTL
    assert results[0] == (True, 2, 0)
    assert results[1] == (True, 0, 0)
    assert results[2] == (False, 0, 60)
    assert fake.ttl("k") == 60
