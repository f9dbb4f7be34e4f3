import logging

from app.config import settings
from app.redis_client import get_redis_client

logger = logging.getLogger(__name__)


class LoginRateLimiter:
    """Counts failed logins per email in Redis; blocks after too many in the window"""

    key_prefix = "emslab:login_failures"

    def __init__(self, max_attempts: int | None = None, window_minutes: int | None = None):
        self.max_attempts = max_attempts or settings.rate_limit_failed_logins
        self.window_minutes = window_minutes or settings.rate_limit_window_minutes

    @property
    def redis(self):
        return get_redis_client()

    def _key(self, email: str) -> str:
        return f"{self.key_prefix}:{email.strip().lower()}"

    def is_blocked(self, email: str) -> bool:
        return self.get_attempts(email) >= self.max_attempts

    def record_failed_attempt(self, email: str) -> int:
        """Record a failed login and return the count within the window"""
        pipe = self.redis.pipeline()
        pipe.incr(self._key(email))
        pipe.expire(self._key(email), self.window_minutes * 60)
        attempts = pipe.execute()[0]
        if attempts >= self.max_attempts:
            logger.warning("Login blocked for %s after %d failed attempts", email, attempts)
        return attempts

    def reset(self, email: str):
        self.redis.delete(self._key(email))

    def get_attempts(self, email: str) -> int:
        attempts = self.redis.get(self._key(email))
        return int(attempts) if attempts else 0


rate_limiter = LoginRateLimiter()
