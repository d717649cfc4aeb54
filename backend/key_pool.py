"""Round-robin selection over a fixed set of upstream API keys."""
import logging
import threading
from typing import List, NamedTuple, Optional

logger = logging.getLogger(__name__)


class ApiKey(NamedTuple):
    index: int
    value: str

    def masked(self) -> str:
        return f"{self.value[:10]}..."


class ApiKeyPool:
    """Rotating cursor over keys with a health flag per slot.

    Unhealthy slots are skipped. When every slot is unhealthy the flags are
    all reset before the next selection, so a bad key is retried after a
    full cycle of failures.
    """

    def __init__(self, keys: List[str]):
        self._keys = tuple(keys)
        self._healthy = [True] * len(self._keys)
        self._cursor = -1
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._keys)

    def next(self) -> Optional[ApiKey]:
        with self._lock:
            if not self._keys:
                logger.error("No API keys configured")
                return None
            if not any(self._healthy):
                logger.warning("All %d API keys marked unhealthy, resetting pool", len(self._keys))
                self._healthy = [True] * len(self._keys)
            for _ in range(len(self._keys)):
                self._cursor = (self._cursor + 1) % len(self._keys)
                if self._healthy[self._cursor]:
                    return ApiKey(self._cursor, self._keys[self._cursor])
            return None

    def mark_unhealthy(self, index: int):
        with self._lock:
            if 0 <= index < len(self._keys):
                self._healthy[index] = False
                logger.warning("API key %d marked unhealthy", index + 1)

    @property
    def health(self) -> List[bool]:
        return list(self._healthy)
