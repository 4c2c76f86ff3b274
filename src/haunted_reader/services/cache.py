"""Size-bounded LRU cache of generated interpretations."""

from __future__ import annotations

import hashlib
from collections import OrderedDict
from dataclasses import dataclass

from loguru import logger

from ..models import Interpretation, OperationType

DEFAULT_MAX_SIZE_BYTES = 50 * 1024 * 1024
DEFAULT_ENTRY_OVERHEAD_BYTES = 500


def cache_key(text: str, persona_id: str, operation: OperationType | str) -> str:
    """Deterministic key over the exact text, persona and operation.

    Whitespace is significant: texts that differ only in trailing spaces
    get different keys.
    """
    operation = operation.value if isinstance(operation, OperationType) else str(operation)
    digest = hashlib.sha256()
    for part in (persona_id, operation, text):
        encoded = part.encode("utf-8")
        # Length prefix keeps ("a:b", "c") and ("a", "b:c") apart
        digest.update(len(encoded).to_bytes(8, "big"))
        digest.update(encoded)
    return digest.hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    """A cached interpretation and its tracked size"""

    key: str
    value: Interpretation
    size_bytes: int


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache usage"""

    entries: int
    size_bytes: int
    max_size_bytes: int
    utilization_percent: float

    def to_dict(self) -> dict:
        return {
            "entries": self.entries,
            "size_bytes": self.size_bytes,
            "max_size_bytes": self.max_size_bytes,
            "utilization_percent": self.utilization_percent,
        }


class ResultCache:
    """Strict LRU cache bounded by approximate byte size, no TTL.

    None of the methods await, so concurrent generations on one event loop
    never observe half-updated size accounting.
    """

    def __init__(
        self,
        max_size_bytes: int = DEFAULT_MAX_SIZE_BYTES,
        entry_overhead_bytes: int = DEFAULT_ENTRY_OVERHEAD_BYTES,
    ):
        if max_size_bytes <= 0:
            raise ValueError("max_size_bytes must be positive")
        self.max_size_bytes = max_size_bytes
        self.entry_overhead_bytes = entry_overhead_bytes
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._size_bytes = 0

    def estimate_size(self, interpretation: Interpretation) -> int:
        """Approximate footprint: encoded content plus fixed overhead"""
        return len(interpretation.content.encode("utf-8")) + self.entry_overhead_bytes

    def get(
        self, text: str, persona_id: str, operation: OperationType | str
    ) -> Interpretation | None:
        """Get a cached interpretation and mark it most recently used"""
        key = cache_key(text, persona_id, operation)
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for {persona_id}/{operation}")
            return None
        self._entries.move_to_end(key)
        logger.debug(f"Cache hit for {persona_id}/{operation}")
        return entry.value

    def set(
        self,
        text: str,
        persona_id: str,
        operation: OperationType | str,
        interpretation: Interpretation,
    ) -> None:
        """Insert or replace an entry, then evict LRU entries over budget.

        An entry larger than the whole budget evicts everything, itself
        included.
        """
        key = cache_key(text, persona_id, operation)
        previous = self._entries.pop(key, None)
        if previous is not None:
            self._size_bytes -= previous.size_bytes

        entry = CacheEntry(key=key, value=interpretation, size_bytes=self.estimate_size(interpretation))
        self._entries[key] = entry
        self._size_bytes += entry.size_bytes

        while self._size_bytes > self.max_size_bytes and self._entries:
            evicted_key, evicted = self._entries.popitem(last=False)
            self._size_bytes -= evicted.size_bytes
            if evicted_key == key:
                logger.warning(
                    f"Entry of {evicted.size_bytes} bytes exceeds cache budget "
                    f"of {self.max_size_bytes} bytes, not cached"
                )
            else:
                logger.debug(f"Evicted {evicted.value.persona_id}/{evicted.value.operation.value}")

    def has(self, text: str, persona_id: str, operation: OperationType | str) -> bool:
        """Check for an entry without touching LRU order"""
        return cache_key(text, persona_id, operation) in self._entries

    def clear(self) -> None:
        """Drop every entry"""
        self._entries.clear()
        self._size_bytes = 0

    def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._entries),
            size_bytes=self._size_bytes,
            max_size_bytes=self.max_size_bytes,
            utilization_percent=round(self._size_bytes / self.max_size_bytes * 100, 2),
        )

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide cache instance
_default_cache: ResultCache | None = None


def get_default_cache() -> ResultCache:
    """Get the shared process-wide cache"""
    global _default_cache
    if _default_cache is None:
        _default_cache = ResultCache()
    return _default_cache
