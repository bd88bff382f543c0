"""Short-lived cache for Kubernetes objects read while reconciling."""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Hashable


class TTLCache:
    """Thread-safe mapping whose entries expire ``ttl`` seconds after insertion."""

    def __init__(self, ttl: float) -> None:
        self.ttl = ttl
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if time.monotonic() >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = (time.monotonic() + self.ttl, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


# Provider objects keyed by (namespace, name)
provider_cache = TTLCache(float(os.getenv("K8S_CACHE_TTL_SECONDS", "30")))
