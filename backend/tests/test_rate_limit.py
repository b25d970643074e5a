from prima_fpa.core.rate_limit import SlidingWindowLimiter


def test_budget_is_per_client_across_paths() -> None:
    limiter = SlidingWindowLimiter(max_requests=2, window_seconds=60)
    assert limiter.allow("10.0.0.1", now=0.0) is True
    assert limiter.allow("10.0.0.1", now=1.0) is True
    assert limiter.allow("10.0.0.1", now=2.0) is False
    assert limiter.allow("10.0.0.2", now=2.0) is True
    assert len(limiter) == 2


def test_window_expiry_restores_budget() -> None:
    limiter = SlidingWindowLimiter(max_requests=1, window_seconds=10)
    assert limiter.allow("client", now=0.0) is True
    assert limiter.allow("client", now=5.0) is False
    assert limiter.allow("client", now=10.5) is True


def test_idle_clients_are_swept() -> None:
    limiter = SlidingWindowLimiter(max_requests=5, window_seconds=10)
    for index in range(500):
        limiter.allow(f"client-{index}", now=1.0)
    assert len(limiter) == 500

    limiter.allow("late", now=30.0)
    assert len(limiter) == 1


def test_map_stays_bounded_under_churn() -> None:
    limiter = SlidingWindowLimiter(max_requests=5, window_seconds=10)
    for tick in range(1000):
        limiter.allow(f"client-{tick}", now=float(tick))
    assert len(limiter) <= 22
