"""Client-side throttling for Kubernetes and object store calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])


class Throttle:
    """Spaces calls to one API at least ``1 / per_second`` seconds apart.

    kopf runs sync handlers on a thread pool, so each caller reserves its
    slot under the lock and sleeps outside of it. Two workers can never be
    handed the same slot.
    """

    def __init__(self, api_type: str, per_second: float) -> None:
        self.api_type = api_type
        self.interval = 1.0 / per_second
        self._next_slot = 0.0
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Block until the next free slot and return the time slept."""
        with self._lock:
            now = time.monotonic()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self.interval

        delay = slot - now
        if delay > 0:
            metrics.throttled_calls_total.labels(api_type=self.api_type).inc()
            time.sleep(delay)
        return delay

    def __call__(self, func: _F) -> _F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            self.wait()
            return func(*args, **kwargs)

        return wrapper  # type: ignore


k8s_throttle = Throttle("k8s", float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0")))
s3_throttle = Throttle("s3", float(os.getenv("S3_RATE_LIMIT_PER_SECOND", "5.0")))


def rate_limit_backoff(error: Exception, attempt: int, max_retries: int = 3) -> float | None:
    """Compute the backoff before retrying a throttled Kubernetes call.

    The retry count is owned by the caller, so concurrent lookups do not
    share one budget.

    Args:
        error: Exception raised by the API call
        attempt: Number of retries the caller already made
        max_retries: Retries allowed per call

    Returns:
        Seconds to wait (1, 2, 4, ...), or None when the error is not a rate
        limit or the retries are used up
    """
    status = getattr(error, "status", None)
    throttled = status == 429 or (status == 503 and "rate limit" in str(error).lower())
    if not throttled or attempt >= max_retries:
        return None
    return float(2**attempt)
