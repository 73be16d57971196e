"""Expiring cache map for Yahoo Weather.

Each key is bound to a producer. Values are produced lazily on read and
reused until they are older than the cache TTL, so expensive or rate-limited
producers (remote queries) run at most once per TTL window per key.

Failure policy: when a producer raises or returns None, ``get`` returns None
and leaves the previous entry untouched. The entry keeps its last successful
timestamp, so it stays stale and the next read retries. Readers that were
queued behind the failed attempt share its result instead of running the
producer again one after another.

``put_value`` is the one exception to the timestamp rule: it stamps a value
that no producer ran for, so seeded values expire like produced ones.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from homeassistant.util import dt as dt_util

_LOGGER = logging.getLogger(__name__)


class InvalidKeyError(KeyError):
    """Raised when a key is used that was never registered with ``put``."""


class Producer(ABC):
    """Computes a fresh value for one cache key."""

    @abstractmethod
    async def async_produce(self) -> Optional[str]:
        """Return a fresh value; raise (or return None) on failure."""


@dataclass
class CacheEntry:
    """A producer, its last value and when that value was produced."""

    key: str
    producer: Producer
    value: Optional[str] = None
    last_populated_at: Optional[datetime] = None
    invalidated: bool = False
    completed_attempts: int = 0
    last_attempt_failed: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool:
        if self.invalidated or self.value is None or self.last_populated_at is None:
            return False
        return (now - self.last_populated_at) <= ttl


class ExpiringCacheMap:
    """Map of string keys to lazily produced, time-expiring string values."""

    def __init__(
        self,
        ttl: timedelta,
        clock: Callable[[], datetime] = dt_util.utcnow,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("Cache TTL must be positive")
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def put(self, key: str, producer: Producer) -> None:
        """Register (or replace) the producer for ``key`` without invoking it.

        Replacing a producer drops the value produced by the previous one.
        """
        self._entries[key] = CacheEntry(key=key, producer=producer)

    def put_value(self, key: str, value: str) -> None:
        """Store ``value`` for a registered key as if it had just been produced.

        The entry is stamped with the current time although no producer ran.
        """
        entry = self._entry(key)
        entry.value = value
        entry.last_populated_at = self._clock()
        entry.invalidated = False

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def invalidate(self, key: str) -> None:
        """Force the next ``get`` for ``key`` to run the producer."""
        self._entry(key).invalidated = True

    def invalidate_all(self) -> None:
        for entry in self._entries.values():
            entry.invalidated = True

    async def refresh(self, key: str) -> Optional[str]:
        """Invalidate ``key`` and produce a fresh value."""
        self.invalidate(key)
        return await self.get(key)

    async def get(self, key: str) -> Optional[str]:
        """Return the value for ``key``, producing it if missing or stale.

        Concurrent readers of a stale key share one producer invocation: they
        queue on the entry lock and find the fresh value (or None, if it
        failed) once the first reader is done.
        """
        entry = self._entry(key)
        attempt = entry.completed_attempts

        if entry.is_fresh(self._clock(), self._ttl):
            return entry.value

        async with entry.lock:
            if entry.is_fresh(self._clock(), self._ttl):
                _LOGGER.debug("Using value produced by concurrent reader for %s", key)
                return entry.value

            if entry.completed_attempts != attempt and entry.last_attempt_failed:
                _LOGGER.debug("Concurrent reader already failed to produce %s", key)
                return None

            _LOGGER.debug("Cache entry %s missing or expired; producing", key)
            entry.last_attempt_failed = True
            try:
                value = await entry.producer.async_produce()
            except Exception as exc:
                _LOGGER.debug("Producer for %s failed: %s", key, exc, exc_info=True)
                return None
            finally:
                entry.completed_attempts += 1

            if value is None:
                _LOGGER.debug("Producer for %s returned no value", key)
                return None

            entry.value = value
            entry.last_populated_at = self._clock()
            entry.invalidated = False
            entry.last_attempt_failed = False
            return value

    def _entry(self, key: str) -> CacheEntry:
        try:
            return self._entries[key]
        except KeyError:
            raise InvalidKeyError(key) from None
