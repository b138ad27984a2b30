"""
talent_graph/cache.py — TTL / LRU result cache with in-flight de-duplication.

Two instances are wired into the pipeline at different granularities:

    graph cache  keyed by the collection-size signature (coarse: any size
                 change invalidates, same-size content edits do not)
    query cache  keyed by (rootId, sortMethod, maxDistance, layoutType,
                 serialised filters), tagged with the dataset signature

Instances are passed in explicitly; there are no module-level singletons.

Expiry is lazy (checked on read) plus an opportunistic sweep whenever
sweep_interval has elapsed on the cache clock. The clock is injectable so
tests can simulate the passage of time.

get_or_compute() shares one computation between concurrent callers of the
same key: the first caller computes, the others wait on the same Future.
"""

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    expires_at: float
    tags: frozenset = field(default_factory=frozenset)


class ResultCache:
    """
    Thread-safe key/value cache with per-entry TTL, LRU capacity and tags.

    Args:
        default_ttl:    Seconds an entry lives when set() gets no ttl.
        max_entries:    LRU capacity; the least recently used entry is evicted
                        when exceeded. None = unbounded.
        sweep_interval: Seconds between opportunistic sweeps of expired
                        entries. None disables sweeping (lazy expiry only).
        clock:          Zero-argument callable returning seconds
                        (time.monotonic by default).
        name:           Label used in log records.
    """

    def __init__(
        self,
        default_ttl: float = 300.0,
        max_entries: int | None = 256,
        sweep_interval: float | None = 300.0,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ):
        if default_ttl <= 0:
            raise ValueError(f"default_ttl must be positive, got {default_ttl}")
        if max_entries is not None and max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.default_ttl = float(default_ttl)
        self.max_entries = max_entries
        self.sweep_interval = sweep_interval
        self.name = name
        self._clock = clock
        self._entries: OrderedDict[Hashable, _Entry] = OrderedDict()
        self._in_flight: dict[Hashable, Future] = {}
        self._lock = threading.RLock()
        self._next_sweep = clock() + sweep_interval if sweep_interval else None
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    # ── Core operations ───────────────────────────────────────────────────────

    def set(
        self,
        key: Hashable,
        value: Any,
        ttl: float | None = None,
        tags: Iterable[str] = (),
    ) -> None:
        """Store value under key for ttl seconds (last write wins)."""
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        with self._lock:
            self._maybe_sweep()
            self._entries[key] = _Entry(value, self._clock() + ttl, frozenset(tags))
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    self._evictions += 1
                    logger.debug("[%s] LRU evicted '%s'.", self.name, evicted)

    def get(self, key: Hashable) -> Any | None:
        """Value for key, or None on miss or expiry."""
        with self._lock:
            self._maybe_sweep()
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                self._expirations += 1
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def has(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_tag(self, tag: str) -> int:
        """Drop every entry carrying tag. Returns the number dropped."""
        with self._lock:
            doomed = [k for k, e in self._entries.items() if tag in e.tags]
            for key in doomed:
                del self._entries[key]
            if doomed:
                logger.debug("[%s] Invalidated %d entries tagged '%s'.", self.name, len(doomed), tag)
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Remove all expired entries now. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if now >= e.expires_at]
            for key in expired:
                del self._entries[key]
            self._expirations += len(expired)
            if self.sweep_interval:
                self._next_sweep = now + self.sweep_interval
            return len(expired)

    def _maybe_sweep(self) -> None:
        if self._next_sweep is not None and self._clock() >= self._next_sweep:
            removed = self.sweep()
            if removed:
                logger.debug("[%s] Periodic sweep removed %d expired entries.", self.name, removed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.has(key)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "expirations": self._expirations,
                "inFlight": len(self._in_flight),
            }

    # ── Shared computation ────────────────────────────────────────────────────

    def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], Any],
        ttl: float | None = None,
        tags: Iterable[str] = (),
    ) -> Any:
        """
        Cached value for key, computing it at most once across concurrent callers.

        The first caller to miss runs compute() and stores the result; callers
        arriving while it runs block on the same Future and receive the same
        object. If compute() raises, every waiter sees the exception and
        nothing is cached. A None result is returned but not cached.
        """
        with self._lock:
            cached = self.get(key)
            if cached is not None:
                return cached
            future = self._in_flight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._in_flight[key] = future

        if not owner:
            logger.debug("[%s] Joining in-flight computation for '%s'.", self.name, key)
            return future.result()

        try:
            value = compute()
        except BaseException as exc:
            with self._lock:
                self._in_flight.pop(key, None)
            future.set_exception(exc)
            raise

        with self._lock:
            if value is not None:
                self.set(key, value, ttl=ttl, tags=tags)
            self._in_flight.pop(key, None)
        future.set_result(value)
        return value
