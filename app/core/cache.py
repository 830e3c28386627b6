from __future__ import annotations

from time import time
from typing import Any, Dict, Optional, Tuple
import threading

from app.config.settings import settings


class TTLCache:
    """Small in-memory TTL cache.

    - Capacity-bounded; evicts entries closest to expiry first when over capacity.
    - Thread-safe using a simple lock.
    - Expired entries are purged on every write.
    """

    def __init__(self, max_items: int = 256, default_ttl_seconds: float = 900.0) -> None:
        self._data: Dict[Any, Tuple[float, Any]] = {}
        self._max = max_items
        self._default_ttl = default_ttl_seconds
        self._lock = threading.Lock()

    def _purge(self) -> None:
        now = time()
        with self._lock:
            expired = [k for k, (exp, _) in self._data.items() if exp < now]
            for k in expired:
                self._data.pop(k, None)
            if len(self._data) > self._max:
                over = len(self._data) - self._max
                for k, _ in sorted(self._data.items(), key=lambda kv: kv[1][0])[:over]:
                    self._data.pop(k, None)

    def get(self, key: Any) -> Optional[Any]:
        with self._lock:
            item = self._data.get(key)
            if not item:
                return None
            exp, val = item
            if exp < time():
                self._data.pop(key, None)
                return None
            return val

    def pop(self, key: Any) -> Optional[Any]:
        """Remove and return a live entry."""
        with self._lock:
            item = self._data.pop(key, None)
        if not item:
            return None
        exp, val = item
        return val if exp >= time() else None

    def set(self, key: Any, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._data[key] = (time() + float(ttl), value)
        self._purge()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


# Import previews wait here until the user confirms or abandons them
IMPORT_PREVIEW_CACHE = TTLCache(
    max_items=settings.import_preview_cache_size,
    default_ttl_seconds=settings.import_preview_ttl_seconds,
)
