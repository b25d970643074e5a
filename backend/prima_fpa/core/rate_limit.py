from collections import deque
import time


class SlidingWindowLimiter:
    """Per-client request budget over a rolling window.

    Buckets that drain to empty are dropped, and every window the whole map is
    swept so clients that stop calling do not linger.
    """

    def __init__(self, max_requests: int, window_seconds: float) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._buckets: dict[str, deque[float]] = {}
        self._last_sweep: float | None = None

    def __len__(self) -> int:
        return len(self._buckets)

    def _prune(self, bucket: deque[float], now: float) -> None:
        while bucket and now - bucket[0] > self.window_seconds:
            bucket.popleft()

    def sweep(self, now: float) -> None:
        for key in list(self._buckets):
            bucket = self._buckets[key]
            self._prune(bucket, now)
            if not bucket:
                del self._buckets[key]
        self._last_sweep = now

    def allow(self, client: str, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        if self._last_sweep is None or now - self._last_sweep > self.window_seconds:
            self.sweep(now)

        bucket = self._buckets.get(client)
        if bucket is not None:
            self._prune(bucket, now)
        else:
            bucket = self._buckets[client] = deque()
        if len(bucket) >= self.max_requests:
            return False
        bucket.append(now)
        return True
