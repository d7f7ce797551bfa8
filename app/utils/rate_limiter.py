"""
Rate limiting middleware for API endpoints
"""
import time
from collections import defaultdict, deque
from itertools import takewhile
from fastapi import Request, HTTPException
from typing import Deque, Dict, List, Optional
import logging

from app.config import settings

logger = logging.getLogger(__name__)


def resolve_client_ip(request: Request, trusted_proxies: Optional[List[str]] = None) -> str:
    """
    Socket peer address, or the first X-Forwarded-For hop when the peer is a
    trusted proxy
    """
    if trusted_proxies is None:
        trusted_proxies = settings.TRUSTED_PROXIES

    peer = request.client.host if request.client else "unknown"
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded and peer in trusted_proxies:
        return forwarded.split(",")[0].strip()
    return peer


class RateLimiter:
    """
    In-memory sliding-window rate limiter keyed by client IP
    Per process only; run behind a shared limiter when scaling out
    """

    SWEEP_INTERVAL_SECONDS = 60

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        trusted_proxies: Optional[List[str]] = None,
    ):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.trusted_proxies = trusted_proxies

        # {client_id: timestamps within the last hour}
        self.history: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_sweep = 0.0

    def _get_client_id(self, request: Request) -> str:
        return resolve_client_ip(request, self.trusted_proxies)

    @staticmethod
    def _trim(timestamps: Deque[float], cutoff: float) -> None:
        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()

    def _cleanup_old_entries(self, now: float) -> None:
        """Trim every client's window and drop clients with nothing left"""
        cutoff = now - 3600
        for client_id in list(self.history.keys()):
            self._trim(self.history[client_id], cutoff)
            if not self.history[client_id]:
                del self.history[client_id]
        self._last_sweep = now

    def _reject(self, client_id: str, limit: int, window: str, retry_after: int):
        logger.warning(f"Rate limit exceeded ({window}): {client_id}")
        raise HTTPException(
            status_code=429,
            detail=f"Too many requests. Limit: {limit} requests per {window}",
            headers={"Retry-After": str(retry_after)},
        )

    async def check_rate_limit(self, request: Request) -> None:
        """
        Raises:
            HTTPException: 429 if rate limit exceeded
        """
        client_id = self._get_client_id(request)
        now = time.time()

        if now - self._last_sweep >= self.SWEEP_INTERVAL_SECONDS:
            self._cleanup_old_entries(now)

        timestamps = self.history[client_id]
        self._trim(timestamps, now - 3600)

        if len(timestamps) >= self.requests_per_hour:
            self._reject(client_id, self.requests_per_hour, "hour", 3600)

        minute_requests = sum(1 for _ in takewhile(lambda ts: ts > now - 60, reversed(timestamps)))
        if minute_requests >= self.requests_per_minute:
            self._reject(client_id, self.requests_per_minute, "minute", 60)

        timestamps.append(now)


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)
