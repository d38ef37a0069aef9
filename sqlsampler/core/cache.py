"""Caching of prepared statements per connection.

Preparing a statement costs a round trip on most drivers, and load tests run
the same query text over and over on the same connection. Each connection
gets its own LRU cache of statement handles, keyed by the exact query text.

Components:
- CacheStats: hit/miss/eviction counters
- PerConnectionCache: bounded LRU map of query text to handle, closing evicted handles
- StatementCache: process-wide map of connection token to PerConnectionCache
"""

import threading
from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Callable, Final, Optional

from mypy_extensions import mypyc_attr

from sqlsampler.config import DEFAULT_MAX_OPEN_PREPARED_STATEMENTS, get_global_config
from sqlsampler.core.parameters import ParameterStyle
from sqlsampler.driver._common import close_quietly
from sqlsampler.driver.statement import CallableStatement, PreparedStatement
from sqlsampler.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlsampler.protocols import ConnectionProtocol

__all__ = (
    "CacheStats",
    "PerConnectionCache",
    "StatementCache",
    "connection_token",
    "get_statement_cache",
    "reset_statement_cache",
)

logger = get_logger("sqlsampler.core.cache")

CACHE_STATS_SLOTS: Final = ("evictions", "hits", "misses")


def connection_token(connection: Any) -> int:
    """Opaque identity of a connection.

    Cached handles keep their connection alive, so a token cannot be reused
    by another connection while entries exist for it.
    """
    return id(connection)


@mypyc_attr(allow_interpreted_subclasses=False)
class CacheStats:
    """Cache statistics tracking."""

    __slots__ = CACHE_STATS_SLOTS

    def __init__(self, hits: int = 0, misses: int = 0, evictions: int = 0) -> None:
        self.hits = hits
        self.misses = misses
        self.evictions = evictions

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate as percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def record_eviction(self) -> None:
        self.evictions += 1

    def __add__(self, other: "CacheStats") -> "CacheStats":
        return CacheStats(self.hits + other.hits, self.misses + other.misses, self.evictions + other.evictions)

    def __repr__(self) -> str:
        return (
            f"CacheStats(hit_rate={self.hit_rate:.1f}%, "
            f"hits={self.hits}, misses={self.misses}, evictions={self.evictions})"
        )


@mypyc_attr(allow_interpreted_subclasses=False)
class PerConnectionCache:
    """LRU map of query text to prepared statement for one connection.

    Both lookups and inserts touch an entry. When an insert would exceed the
    capacity the least recently used handle is closed, then removed. A failure
    to close is logged and never reaches the caller.

    Args:
        max_size: Maximum number of open handles.
        on_evict: Called with each evicted handle; defaults to closing it.
    """

    __slots__ = ("_entries", "_lock", "_max_size", "_on_evict", "_stats")

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_OPEN_PREPARED_STATEMENTS,
        on_evict: "Optional[Callable[[PreparedStatement], Any]]" = None,
    ) -> None:
        if max_size <= 0:
            msg = f"max_size must be positive, got {max_size}"
            raise ValueError(msg)
        self._entries: OrderedDict[str, PreparedStatement] = OrderedDict()
        self._lock = threading.RLock()
        self._max_size = max_size
        self._on_evict = on_evict or _close_evicted
        self._stats = CacheStats()

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, sql: str) -> Optional[PreparedStatement]:
        with self._lock:
            entry = self._entries.get(sql)
            if entry is None:
                self._stats.record_miss()
                return None
            self._entries.move_to_end(sql)
            self._stats.record_hit()
            return entry

    def put(self, sql: str, statement: PreparedStatement) -> None:
        with self._lock:
            if sql in self._entries:
                previous = self._entries[sql]
                self._entries.move_to_end(sql)
                self._entries[sql] = statement
                if previous is not statement:
                    self._release(previous)
                return
            while len(self._entries) >= self._max_size:
                self._evict_oldest()
            self._entries[sql] = statement

    def get_or_create(self, sql: str, factory: "Callable[[], PreparedStatement]") -> PreparedStatement:
        """Get the handle for ``sql``, or create and insert one with ``factory``."""
        with self._lock:
            statement = self.get(sql)
            if statement is None:
                statement = factory()
                self.put(sql, statement)
                logger.debug("Prepared %s for %r", statement.__class__.__name__, sql)
            return statement

    def _evict_oldest(self) -> None:
        oldest_sql = next(iter(self._entries))
        self._release(self._entries[oldest_sql])
        del self._entries[oldest_sql]
        self._stats.record_eviction()
        logger.debug("Evicted prepared statement %r", oldest_sql)

    def _release(self, statement: PreparedStatement) -> None:
        try:
            self._on_evict(statement)
        except Exception:
            logger.warning("Error releasing evicted statement %r", statement, exc_info=True)

    def clear(self) -> None:
        """Close every handle and empty the cache."""
        with self._lock:
            for statement in self._entries.values():
                self._release(statement)
            self._entries.clear()

    def keys(self) -> "list[str]":
        """Query texts from least to most recently used."""
        with self._lock:
            return list(self._entries)

    def get_stats(self) -> CacheStats:
        return self._stats

    def __contains__(self, sql: object) -> bool:
        with self._lock:
            return sql in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> "Iterator[str]":
        return iter(self.keys())


def _close_evicted(statement: PreparedStatement) -> None:
    close_quietly(statement, "PreparedStatement")


@mypyc_attr(allow_interpreted_subclasses=False)
class StatementCache:
    """Prepared statements of every connection in the process.

    The connection map is shared by all sampling threads. A connection is
    used by one thread at a time, but its per-connection cache is locked as
    well in case two threads briefly address the same connection.

    Args:
        max_open_prepared_statements: Capacity of each per-connection cache.
        parameter_style: Paramstyle new statements rewrite their markers to.
    """

    __slots__ = ("_caches", "_lock", "_max_size", "_parameter_style")

    def __init__(
        self,
        max_open_prepared_statements: int = DEFAULT_MAX_OPEN_PREPARED_STATEMENTS,
        parameter_style: ParameterStyle = ParameterStyle.QMARK,
    ) -> None:
        self._caches: dict[int, PerConnectionCache] = {}
        self._lock = threading.Lock()
        self._max_size = max_open_prepared_statements
        self._parameter_style = parameter_style

    @property
    def max_open_prepared_statements(self) -> int:
        return self._max_size

    def _cache_for(self, connection: "ConnectionProtocol") -> PerConnectionCache:
        token = connection_token(connection)
        cache = self._caches.get(token)
        if cache is None:
            with self._lock:
                cache = self._caches.get(token)
                if cache is None:
                    cache = PerConnectionCache(self._max_size)
                    self._caches[token] = cache
        return cache

    def acquire(self, connection: "ConnectionProtocol", sql: str, callable_: bool = False) -> PreparedStatement:
        """Get the cached handle for ``sql`` on ``connection``, preparing it on a miss.

        The query text is the key as written; texts differing only in
        whitespace or case are distinct entries.

        Args:
            connection: DB-API connection the handle belongs to.
            sql: Query text with ``?`` markers.
            callable_: Prepare a ``CallableStatement`` instead of a ``PreparedStatement``.

        Returns:
            A handle with no parameters bound.
        """
        statement_type = CallableStatement if callable_ else PreparedStatement
        statement = self._cache_for(connection).get_or_create(
            sql, lambda: statement_type(connection, sql, self._parameter_style)
        )
        statement.clear_parameters()
        return statement

    def flush(self, connection: "ConnectionProtocol") -> None:
        """Close and forget every handle of ``connection``."""
        with self._lock:
            cache = self._caches.pop(connection_token(connection), None)
        if cache is not None:
            cache.clear()

    def flush_all(self) -> None:
        """Close and forget every handle of every connection."""
        with self._lock:
            caches = list(self._caches.values())
            self._caches.clear()
        for cache in caches:
            cache.clear()
        logger.debug("Flushed statement caches of %d connection(s)", len(caches))

    def get_cache(self, connection: "ConnectionProtocol") -> Optional[PerConnectionCache]:
        return self._caches.get(connection_token(connection))

    def get_stats(self) -> CacheStats:
        """Statistics summed over all connections."""
        with self._lock:
            caches = list(self._caches.values())
        total = CacheStats()
        for cache in caches:
            total = total + cache.get_stats()
        return total

    def __len__(self) -> int:
        """Number of connections with a cache."""
        return len(self._caches)


_statement_cache: Optional[StatementCache] = None
_cache_lock = threading.Lock()


def get_statement_cache() -> StatementCache:
    """Get the process-wide statement cache, sized from the global configuration."""
    global _statement_cache
    if _statement_cache is None:
        with _cache_lock:
            if _statement_cache is None:
                config = get_global_config()
                _statement_cache = StatementCache(config.max_open_prepared_statements, config.parameter_style)
    return _statement_cache


def reset_statement_cache() -> None:
    """Flush and discard the process-wide statement cache."""
    global _statement_cache
    with _cache_lock:
        cache, _statement_cache = _statement_cache, None
    if cache is not None:
        cache.flush_all()
