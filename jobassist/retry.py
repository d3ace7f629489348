"""Retry with exponential backoff for transient provider failures.

Providers never retry on their own; the pipeline wraps adapter calls with
``call_with_backoff`` when ``Settings.retry_attempts`` is above one. Only
``ProviderUnreachable`` is worth retrying there: a malformed reply or a
missing credential will not fix itself on the next attempt.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Tuple, Type

from jobassist.log import get_logger

log = get_logger(__name__)


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    backoff_factor: float,
    jitter: bool,
) -> float:
    """Seconds to wait after failed *attempt* (1-based)."""
    delay = min(base_delay * (backoff_factor ** (attempt - 1)), max_delay)
    return delay * (0.5 + random.random()) if jitter else delay


@dataclass(frozen=True)
class Backoff:
    attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    factor: float = 2.0
    jitter: bool = True

    def waits(self) -> Iterator[float]:
        """One wait per retry, i.e. ``attempts - 1`` values."""
        for attempt in range(1, max(1, self.attempts)):
            yield backoff_delay(attempt, self.base_delay, self.max_delay, self.factor, self.jitter)


def call_with_backoff(
    fn: Callable[..., Any],
    *args: Any,
    policy: Backoff,
    retryable: Tuple[Type[BaseException], ...],
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> Any:
    name = getattr(fn, "__qualname__", repr(fn))
    total = max(1, policy.attempts)
    waits = policy.waits()
    attempt = 1
    while True:
        try:
            return fn(*args, **kwargs)
        except retryable as exc:
            wait = next(waits, None)
            if wait is None:
                if total > 1:
                    log.error("%s gave up after %d attempts: %s", name, total, exc)
                raise
            log.warning("%s attempt %d/%d: %s; next try in %.1fs", name, attempt, total, exc, wait)
            sleep(wait)
            attempt += 1
