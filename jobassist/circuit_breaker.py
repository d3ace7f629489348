"""Per-provider circuit breaker.

Reset policy: after ``failure_threshold`` consecutive failures the circuit
opens and rejects calls for ``reset_seconds``; the next call after that is a
single half-open trial. Success closes the circuit, failure re-opens it.
State lives only in memory, so a new process always starts closed.
"""
from __future__ import annotations

import threading
import time
from enum import Enum
from typing import Callable

from jobassist.log import get_logger

log = get_logger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    def __init__(
        self,
        name: str,
        failure_threshold: int = 1,
        reset_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.failure_threshold = max(1, failure_threshold)
        self.reset_seconds = reset_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0
        self._trial_in_flight = False
        self.last_failure: str | None = None

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._current_state()

    def _current_state(self) -> CircuitState:
        if self._state == CircuitState.OPEN and self._clock() - self._opened_at >= self.reset_seconds:
            self._transition(CircuitState.HALF_OPEN)
        return self._state

    def _transition(self, new_state: CircuitState) -> None:
        if new_state == self._state:
            return
        log.info("Circuit '%s' %s -> %s", self.name, self._state.value, new_state.value)
        self._state = new_state
        self._trial_in_flight = False
        if new_state == CircuitState.OPEN:
            self._opened_at = self._clock()
        elif new_state == CircuitState.CLOSED:
            self._failures = 0

    def allow(self) -> bool:
        """Return True if a call may proceed now."""
        with self._lock:
            state = self._current_state()
            if state == CircuitState.CLOSED:
                return True
            if state == CircuitState.HALF_OPEN and not self._trial_in_flight:
                self._trial_in_flight = True
                return True
            return False

    def retry_in(self) -> float:
        with self._lock:
            if self._state != CircuitState.OPEN:
                return 0.0
            return max(0.0, self.reset_seconds - (self._clock() - self._opened_at))

    def record_success(self) -> None:
        with self._lock:
            self._failures = 0
            self._transition(CircuitState.CLOSED)

    def record_failure(self, reason: str = "") -> None:
        with self._lock:
            self.last_failure = reason or None
            self._failures += 1
            if self._state == CircuitState.HALF_OPEN or self._failures >= self.failure_threshold:
                self._transition(CircuitState.OPEN)
                self._opened_at = self._clock()

    def release_trial(self) -> None:
        """Give back a half-open trial slot whose call said nothing about health.

        The circuit stays half-open and the next call becomes the trial.
        """
        with self._lock:
            self._trial_in_flight = False
