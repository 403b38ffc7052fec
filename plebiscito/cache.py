"""
Caching layer using the Storage abstraction.

Provides a cache-aside accessor: a value is read from storage if present,
otherwise produced by a caller-supplied function, written back with an
expiry, and returned. Callers always learn whether the value came from the
cache and, when the store can tell, how long it has left.

Storage trouble never fails a call. Every store operation is turned into an
explicit result (see Lookup) and anything short of a hit falls through to
the producer. Producer errors, on the other hand, propagate untouched.
"""
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from plebiscito.storage import Session, Storage
from plebiscito.utils import say

DEFAULT_TTL = 3600


class Origin(Enum):
    CACHE_HIT = 'cache_hit'
    FRESH = 'fresh'


@dataclass(frozen=True)
class Fetched:
    """A resolved value and where it came from."""
    value: Any
    origin: Origin
    ttl: Optional[int] = None

    @property
    def from_cache(self) -> bool:
        return self.origin is Origin.CACHE_HIT


class LookupStatus(Enum):
    HIT = 'hit'
    MISS = 'miss'
    UNAVAILABLE = 'unavailable'


@dataclass(frozen=True)
class Lookup:
    """Outcome of reading one key from the store."""
    status: LookupStatus
    value: Any = None
    ttl: Optional[int] = None
    error: Optional[BaseException] = None

    @classmethod
    def hit(cls, value, ttl: Optional[int]) -> 'Lookup':
        return cls(LookupStatus.HIT, value=value, ttl=ttl)

    @classmethod
    def miss(cls) -> 'Lookup':
        return cls(LookupStatus.MISS)

    @classmethod
    def unavailable(cls, error: BaseException) -> 'Lookup':
        return cls(LookupStatus.UNAVAILABLE, error=error)


class Cache:
    """
    Cache-aside accessor over an optional storage backend.

    Every resolve() opens its own session on the storage and releases it
    before returning, whatever happens in between. With no storage the
    accessor simply produces on every call.
    """

    def __init__(self, storage: Optional[Storage]):
        """
        Initialize cache with a storage backend.

        Args:
            storage: Storage instance to use for caching, or None to disable it
        """
        self.storage = storage

    def resolve(self, key: str, produce: Callable[[], Any], bypass: bool = False,
                ttl: int = DEFAULT_TTL) -> Fetched:
        """
        Get a value from the cache or produce and store it.

        Args:
            key: Cache key; must uniquely identify the query
            produce: Zero-argument function returning a JSON-serializable value
            bypass: Skip the lookup and overwrite whatever is cached
            ttl: Expiry for a newly written entry, in seconds

        Returns:
            Fetched with origin CACHE_HIT (and the remaining ttl if known)
            or FRESH

        Raises:
            ValueError: If key is empty or ttl is not positive
            Whatever produce raises
        """
        if not key:
            raise ValueError('Cache key must not be empty')
        if ttl <= 0:
            raise ValueError(f'Cache ttl must be positive, got {ttl}')

        if self.storage is None:
            return Fetched(produce(), Origin.FRESH)

        session = self._connect(key)
        try:
            if session is not None and not bypass:
                lookup = self._lookup(session, key)
                if lookup.status is LookupStatus.HIT:
                    return Fetched(lookup.value, Origin.CACHE_HIT, lookup.ttl)

            value = produce()

            if session is not None:
                self._store(session, key, value, ttl)
            return Fetched(value, Origin.FRESH)
        finally:
            if session is not None:
                self._disconnect(session, key)

    def _connect(self, key: str) -> Optional[Session]:
        try:
            return self.storage.connect()
        except Exception as e:
            say(f'Cache unavailable for {key}', e)
            return None

    def _lookup(self, session: Session, key: str) -> Lookup:
        try:
            data = session.get(key)
            if data is None:
                return Lookup.miss()
            remaining = session.ttl(key)
        except Exception as e:
            say(f'Cache read failed for {key}', e)
            return Lookup.unavailable(e)

        try:
            value = json.loads(data)
        except ValueError as e:
            say(f'Discarding undecodable cache entry {key}', e)
            return Lookup.miss()

        return Lookup.hit(value, remaining)

    def _store(self, session: Session, key: str, value, ttl: int) -> None:
        try:
            session.put(key, json.dumps(value).encode('utf-8'), ttl)
        except Exception as e:
            say(f'Cache write failed for {key}', e)

    def _disconnect(self, session: Session, key: str) -> None:
        try:
            session.disconnect()
        except Exception as e:
            say(f'Cache disconnect failed for {key}', e)


class NoOpCache(Cache):
    """Cache implementation that never caches - always produces fresh data."""

    def __init__(self):
        """Initialize a no-op cache with no storage behind it."""
        super().__init__(None)
