# structree/cache.py

"""
Caches shared by the traversal engines.

Two independent caches live in a :class:`TraversalCache` session: one maps a
path to its ``os.stat_result``, the other maps a directory to the gitignore
rule set governing it (or to :data:`ABSENT` when no ``.gitignore`` applies).
Entries are immutable once inserted; they leave the cache on TTL expiry or on
an explicit :meth:`TraversalCache.clear`.
"""


from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class _Absent:
    """Marker cached for keys whose lookup found nothing."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()
_MISSING = object()


@dataclass(frozen=True)
class CacheRecord:
    value: Any
    inserted_at: float
    ttl: float | None

    def expired(self, now: float) -> bool:
        return self.ttl is not None and now - self.inserted_at > self.ttl


class TTLCache:
    """
    Keyed cache whose entries optionally expire.

    Parameters
    ----------
    default_ttl : float | None, optional
        Lifetime in seconds applied when :meth:`set` gets no ``ttl``.
        ``None`` keeps entries until :meth:`clear`.
    clock : Callable[[], float], optional
        Monotonic time source, overridable in tests.
    """

    def __init__(
        self,
        default_ttl: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._records: dict[Hashable, CacheRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def get(self, key: Hashable, default: Any = None) -> Any:
        record = self._records.get(key)
        if record is None:
            return default
        if record.expired(self._clock()):
            del self._records[key]
            return default
        return record.value

    def set(self, key: Hashable, value: Any, ttl: float | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._records[key] = CacheRecord(value, self._clock(), ttl)

    def delete(self, key: Hashable) -> None:
        self._records.pop(key, None)

    def prune(self) -> int:
        """Drop expired records and return how many were removed."""
        now = self._clock()
        stale = [k for k, r in self._records.items() if r.expired(now)]
        for key in stale:
            del self._records[key]
        return len(stale)

    def clear(self) -> None:
        self._records.clear()


class TraversalCache:
    """
    Stat and gitignore caches for one traversal session.

    A fresh session is created per traversal unless the caller passes one in
    to share lookups across several traversals of an unchanged tree. Call
    :meth:`clear` when the session ends so that later traversals observe
    filesystem changes.
    """

    def __init__(
        self,
        ttl: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stats = TTLCache(ttl, clock=clock)
        self.gitignore = TTLCache(ttl, clock=clock)

    def stat(self, path: Path) -> os.stat_result | None:
        """
        Return ``os.stat`` for ``path``, from the cache when possible.

        Symlinks are followed, so a broken link yields ``None``. Failures are
        not cached.
        """

        cached = self.stats.get(path)
        if cached is not None:
            return cached
        try:
            st = os.stat(path)
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", path, exc)
            return None
        self.stats.set(path, st)
        return st

    def clear(self) -> None:
        logger.debug(
            "Clearing traversal cache (%d stats, %d gitignore entries)",
            len(self.stats),
            len(self.gitignore),
        )
        self.stats.clear()
        self.gitignore.clear()
