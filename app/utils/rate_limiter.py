"""
Per-client request throttling for the API
"""
import time
from collections import defaultdict
from fastapi import Request, HTTPException
from typing import Dict, List, Optional
import logging

from app.config import settings
from app.utils.cache import CacheService, cache_service

logger = logging.getLogger(__name__)

MINUTE = 60
HOUR = 3600


class RateLimiter:
    """
    Minute and hour request limits per caller

    Callers are keyed by X-User-Id, or by IP for anonymous requests.
    With Redis available the counters are shared by every worker;
    otherwise each process keeps its own sliding-window timestamps.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        cache: Optional[CacheService] = None
    ):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.cache = cache

        # {client_id: [request timestamps]}
        self.minute_tracker: Dict[str, List[float]] = defaultdict(list)
        self.hour_tracker: Dict[str, List[float]] = defaultdict(list)

    def _windows(self):
        return (
            ("minute", MINUTE, self.requests_per_minute, self.minute_tracker),
            ("hour", HOUR, self.requests_per_hour, self.hour_tracker),
        )

    def _get_client_id(self, request: Request) -> str:
        user_id = request.headers.get("X-User-Id", "").strip()
        if user_id:
            return f"user:{user_id}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def _prune(self, tracker: Dict[str, List[float]], window_seconds: int, now: float):
        """Drop timestamps that fell out of the window, and callers left with none"""
        cutoff = now - window_seconds
        for client_id in list(tracker.keys()):
            recent = [ts for ts in tracker[client_id] if ts > cutoff]
            if recent:
                tracker[client_id] = recent
            else:
                del tracker[client_id]

    def _reject(self, limit: int, unit: str, retry_after: int, client_id: str):
        logger.warning(f"Rate limit exceeded ({limit}/{unit}): {client_id}")
        raise HTTPException(
            status_code=429,
            detail={
                "error": "rate_limit_exceeded",
                "message": f"Too many requests. Limit: {limit} requests per {unit}",
                "retry_after": retry_after
            }
        )

    def _check_redis(self, client_id: str) -> bool:
        """
        Fixed-window counters in Redis, one key per caller per window

        Returns:
            False if Redis could not count this request
        """
        now = int(time.time())
        for unit, seconds, limit, _ in self._windows():
            count = self.cache.increment(f"ratelimit:{client_id}:{unit}:{now // seconds}", seconds)
            if count is None:
                return False
            if count > limit:
                self._reject(limit, unit, seconds, client_id)
        return True

    def _check_memory(self, client_id: str) -> None:
        now = time.time()
        windows = self._windows()

        for unit, seconds, limit, tracker in windows:
            self._prune(tracker, seconds, now)
            if len(tracker[client_id]) >= limit:
                self._reject(limit, unit, seconds, client_id)

        for _, _, _, tracker in windows:
            tracker[client_id].append(now)

    async def check_rate_limit(self, request: Request) -> None:
        """
        Count this request against the caller's limits

        Raises:
            HTTPException: 429 with retry_after once a limit is reached
        """
        client_id = self._get_client_id(request)

        if self.cache is not None and self.cache.available and self._check_redis(client_id):
            return

        self._check_memory(client_id)


rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR,
    cache=cache_service
)
