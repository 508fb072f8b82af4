"""
Retry helper for callers of the directory and ledger.

Only errors flagged ``retryable`` (VersionConflict, StorageFailure) are
worth retrying; everything else is terminal for a single call.
"""

import functools
import logging
import random
import time
from typing import Any, Callable, Optional, Tuple, Type

from gatekeeper.app.config import settings
from gatekeeper.core.errors import StorageFailure

logger = logging.getLogger(__name__)


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        max_delay: float = 2.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
    ):
        self.max_attempts = max_attempts if max_attempts is not None else settings.RETRY_MAX_ATTEMPTS
        self.base_delay = base_delay if base_delay is not None else settings.RETRY_BASE_DELAY
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter

    def delay_for(self, attempt: int) -> float:
        """Backoff before the next attempt (attempt is 1-based)."""
        delay = min(self.base_delay * (self.exponential_base ** (attempt - 1)), self.max_delay)
        if self.jitter:
            delay *= random.uniform(0.5, 1.0)
        return delay


def retry_on_exception(
    exceptions: Tuple[Type[BaseException], ...] = (StorageFailure,),
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable:
    """Decorator retrying a synchronous call on the given exceptions."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            cfg = config or RetryConfig()
            for attempt in range(1, cfg.max_attempts + 1):
                try:
                    result = func(*args, **kwargs)
                    if attempt > 1:
                        logger.info(f"Retry succeeded for {func.__name__} on attempt {attempt}")
                    return result
                except exceptions as e:
                    if attempt == cfg.max_attempts:
                        logger.error(
                            f"{func.__name__} failed after {attempt} attempts: {e}"
                        )
                        raise
                    delay = cfg.delay_for(attempt)
                    logger.warning(
                        f"{func.__name__} attempt {attempt}/{cfg.max_attempts} failed "
                        f"({type(e).__name__}), retrying in {delay:.3f}s"
                    )
                    sleep(delay)

        return wrapper

    return decorator
