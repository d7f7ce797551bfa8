"""
Redis keyed locks for per-(subject, topic) critical sections
"""
import redis
import logging
from contextlib import contextmanager
from app.config import settings
from app.exceptions import RequestInProgress

logger = logging.getLogger(__name__)


class KeyedLockService:
    """
    Redis-based mutual exclusion keyed by an arbitrary string

    Degrades to a no-op when Redis is not configured or unreachable; callers
    must still rely on storage constraints for correctness.
    """

    KEY_PREFIX = "quizlock:"

    def __init__(self, redis_url: str = None):
        redis_url = settings.REDIS_URL if redis_url is None else redis_url
        self.redis_client = None
        if not redis_url:
            logger.info("Redis not configured. Keyed locks disabled.")
            return

        try:
            self.redis_client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established for keyed locks")
        except Exception as e:
            logger.warning(f"Redis connection failed: {str(e)}. Keyed locks disabled.")
            self.redis_client = None

    @staticmethod
    def quiz_key(subject_id: str, topic_id: str) -> str:
        return f"quiz:{subject_id}:{topic_id}"

    @contextmanager
    def hold(self, key: str):
        """
        Hold the lock for ``key`` for the duration of the block

        Raises:
            RequestInProgress: another holder kept the lock past the wait timeout
        """
        lock = None
        if self.redis_client:
            try:
                lock = self.redis_client.lock(
                    f"{self.KEY_PREFIX}{key}",
                    timeout=settings.KEYED_LOCK_TTL_SECONDS,
                    blocking_timeout=settings.KEYED_LOCK_WAIT_SECONDS,
                )
                if not lock.acquire():
                    logger.warning(f"Keyed lock busy: {key}")
                    raise RequestInProgress()
            except redis.RedisError as e:
                logger.warning(f"Keyed lock unavailable for {key}: {str(e)}")
                lock = None

        try:
            yield
        finally:
            if lock is not None:
                try:
                    lock.release()
                except redis.RedisError as e:
                    # Lease expiry releases it anyway
                    logger.warning(f"Keyed lock release failed for {key}: {str(e)}")


# Global instance
keyed_locks = KeyedLockService()
