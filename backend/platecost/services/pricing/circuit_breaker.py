"""
Per-provider circuit breaker.
closed -> open after `failure_threshold` failures inside `window_s`;
open -> half-open once `reset_s` has passed; a success closes it, a failure reopens it.
"""

import threading
import time
from collections import deque
from enum import Enum
from typing import Callable

from platecost.logging import get_logger

logger = get_logger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    def __init__(
        self,
        name: str,
        failure_threshold: int = 3,
        window_s: float = 60.0,
        reset_s: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self._threshold = max(1, failure_threshold)
        self._window = window_s
        self._reset = reset_s
        self._clock = clock
        self._failures: deque[float] = deque()
        self._state = CircuitState.CLOSED
        self._opened_at = 0.0
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._current_state_locked()

    def allow_request(self) -> bool:
        with self._lock:
            return self._current_state_locked() != CircuitState.OPEN

    def record_success(self) -> None:
        with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info("circuit.closed provider=%s", self.name)
            self._state = CircuitState.CLOSED
            self._failures.clear()

    def record_failure(self) -> None:
        with self._lock:
            now = self._clock()
            state = self._current_state_locked()
            if state == CircuitState.HALF_OPEN:
                self._open_locked(now)
                return
            self._failures.append(now)
            while self._failures and now - self._failures[0] > self._window:
                self._failures.popleft()
            if len(self._failures) >= self._threshold:
                self._open_locked(now)

    def _open_locked(self, now: float) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = now
        self._failures.clear()
        logger.warning("circuit.opened provider=%s reset_s=%s", self.name, self._reset)

    def _current_state_locked(self) -> CircuitState:
        if self._state == CircuitState.OPEN and self._clock() - self._opened_at >= self._reset:
            self._state = CircuitState.HALF_OPEN
        return self._state
