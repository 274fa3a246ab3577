"""Failed-attempt counter with a lockout window for credential and answer checks."""

import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional

import structlog

from portal.config import Settings, get_settings
from portal.core.exceptions import TooManyAttempts

logger = structlog.get_logger(__name__)


class AttemptLimiter:
    """Counts failures per key; ``max_attempts`` of 0 disables limiting."""

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        lockout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.max_attempts = settings.AUTH_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.lockout_seconds = (
            settings.AUTH_LOCKOUT_MINUTES * 60 if lockout_seconds is None else lockout_seconds
        )
        self._clock = clock
        self._failures: Dict[str, List[float]] = defaultdict(list)

    @property
    def enabled(self) -> bool:
        return self.max_attempts > 0

    def _recent(self, key: str) -> List[float]:
        cutoff = self._clock() - self.lockout_seconds
        recent = [t for t in self._failures.get(key, []) if t > cutoff]
        if recent:
            self._failures[key] = recent
        else:
            self._failures.pop(key, None)
        return recent

    def check(self, key: str) -> None:
        if not self.enabled:
            return
        if len(self._recent(key)) >= self.max_attempts:
            logger.warning("Attempt limit reached", key=key)
            raise TooManyAttempts()

    def record_failure(self, key: str) -> None:
        if self.enabled:
            self._failures[key].append(self._clock())

    def reset(self, key: str) -> None:
        self._failures.pop(key, None)
