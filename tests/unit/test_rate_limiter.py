"""Unit tests for the rate limiter, in-memory and Redis-backed"""

import asyncio
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from app.utils.rate_limiter import RateLimiter


def make_request(user_id=None, host="10.0.0.1"):
    request = MagicMock()
    request.headers = {"X-User-Id": user_id} if user_id else {}
    request.client.host = host
    return request


class FakeCache:
    """Counter store with the CacheService interface"""

    def __init__(self, available=True, broken=False):
        self.available = available
        self.broken = broken
        self.counts = {}

    def increment(self, key, ttl):
        if self.broken:
            return None
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]


def hit(limiter, request, times):
    for _ in range(times):
        asyncio.run(limiter.check_rate_limit(request))


class TestClientId:

    def test_prefers_user_header(self):
        limiter = RateLimiter()

        assert limiter._get_client_id(make_request("alice")) == "user:alice"
        assert limiter._get_client_id(make_request(host="1.2.3.4")) == "ip:1.2.3.4"


class TestInMemory:

    def test_minute_limit(self):
        limiter = RateLimiter(requests_per_minute=3, requests_per_hour=100)
        request = make_request("alice")

        hit(limiter, request, 3)

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(limiter.check_rate_limit(request))

        assert exc_info.value.status_code == 429
        assert exc_info.value.detail["retry_after"] == 60

    def test_limits_are_per_client(self):
        limiter = RateLimiter(requests_per_minute=1, requests_per_hour=100)

        hit(limiter, make_request("alice"), 1)
        hit(limiter, make_request("bob"), 1)


class TestRedisBacked:

    def test_counts_in_redis(self):
        cache = FakeCache()
        limiter = RateLimiter(requests_per_minute=2, requests_per_hour=100, cache=cache)
        request = make_request("alice")

        hit(limiter, request, 2)

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(limiter.check_rate_limit(request))

        assert exc_info.value.detail["error"] == "rate_limit_exceeded"
        assert limiter.minute_tracker == {}

    def test_hour_limit(self):
        limiter = RateLimiter(requests_per_minute=100, requests_per_hour=2, cache=FakeCache())
        request = make_request("alice")

        hit(limiter, request, 2)

        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(limiter.check_rate_limit(request))

        assert exc_info.value.detail["retry_after"] == 3600

    def test_falls_back_when_redis_errors(self):
        limiter = RateLimiter(requests_per_minute=5, requests_per_hour=100, cache=FakeCache(broken=True))

        hit(limiter, make_request("alice"), 1)

        assert len(limiter.minute_tracker["user:alice"]) == 1

    def test_unavailable_cache_is_skipped(self):
        cache = FakeCache(available=False)
        limiter = RateLimiter(requests_per_minute=5, requests_per_hour=100, cache=cache)

        hit(limiter, make_request("alice"), 1)

        assert cache.counts == {}
