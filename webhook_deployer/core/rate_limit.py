"""Per-client sliding-window rate limiting for the deploy endpoint."""

import time
from collections import deque
from collections.abc import Callable

from webhook_deployer.core.exceptions import RateLimitExceededError


class RateLimiter:
    """Allows ``max_requests`` per client within ``window_seconds``."""

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def _prune(self, client: str, now: float) -> deque[float]:
        """Drop expired hits. Clients left with none are forgotten."""
        hits = self._hits.get(client)
        if hits is None:
            return deque()
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if not hits:
            del self._hits[client]
        return hits

    def _sweep(self, now: float) -> None:
        # At most once per window, so idle clients cannot accumulate
        if now - self._last_sweep < self.window_seconds:
            return
        for client in list(self._hits):
            self._prune(client, now)
        self._last_sweep = now

    def remaining(self, client: str) -> int:
        hits = self._prune(client, self._clock())
        return max(0, self.max_requests - len(hits))

    def check(self, client: str) -> None:
        """Record a hit for ``client`` or raise when over the limit."""
        now = self._clock()
        self._sweep(now)
        hits = self._prune(client, now)
        if len(hits) >= self.max_requests:
            retry_after = self.window_seconds - (now - hits[0])
            raise RateLimitExceededError(client, round(retry_after, 1))
        hits.append(now)
        self._hits[client] = hits

    def __len__(self) -> int:
        """Number of clients currently tracked."""
        return len(self._hits)

    def reset(self) -> None:
        self._hits.clear()
