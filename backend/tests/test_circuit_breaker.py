from platecost.services.pricing.circuit_breaker import CircuitBreaker, CircuitState


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_opens_after_threshold_failures():
    clock = FakeClock()
    breaker = CircuitBreaker("kroger", failure_threshold=3, window_s=60, reset_s=30, clock=clock)
    for _ in range(2):
        breaker.record_failure()
    assert breaker.state == CircuitState.CLOSED
    breaker.record_failure()
    assert breaker.state == CircuitState.OPEN
    assert not breaker.allow_request()


def test_failures_outside_window_do_not_count():
    clock = FakeClock()
    breaker = CircuitBreaker("kroger", failure_threshold=3, window_s=60, clock=clock)
    breaker.record_failure()
    clock.now = 10
    breaker.record_failure()
    clock.now = 100
    breaker.record_failure()
    assert breaker.state == CircuitState.CLOSED


def test_half_open_after_reset_then_success_closes():
    clock = FakeClock()
    breaker = CircuitBreaker("kroger", failure_threshold=1, reset_s=30, clock=clock)
    breaker.record_failure()
    assert breaker.state == CircuitState.OPEN
    clock.now = 30
    assert breaker.state == CircuitState.HALF_OPEN
    assert breaker.allow_request()
    breaker.record_success()
    assert breaker.state == CircuitState.CLOSED


def test_half_open_failure_reopens():
    clock = FakeClock()
    breaker = CircuitBreaker("kroger", failure_threshold=2, reset_s=30, clock=clock)
    breaker.record_failure()
    breaker.record_failure()
    clock.now = 31
    assert breaker.allow_request()
    breaker.record_failure()
    assert breaker.state == CircuitState.OPEN
    clock.now = 40
    assert not breaker.allow_request()


def test_success_resets_failure_count():
    breaker = CircuitBreaker("kroger", failure_threshold=2, clock=FakeClock())
    breaker.record_failure()
    breaker.record_success()
    breaker.record_failure()
    assert breaker.state == CircuitState.CLOSED
