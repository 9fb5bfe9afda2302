"""On-disk identifier cache with a single cache-wide TTL."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import orjson

from linctl.constants import CACHE_TTL_SECS

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)

TEAMS = "teams"


class IdentifierCache:
    """Maps ``(kind, lookup key)`` to a resolved identifier.

    The file holds one map per kind and one ``timestamp`` that is bumped on
    every :meth:`put`. Once the timestamp is older than the TTL the whole
    cache counts as empty; entries are never aged individually.

    Nothing here raises: a cache that cannot be read or written behaves as
    an empty one.
    """

    def __init__(
        self,
        path: Path,
        ttl: int = CACHE_TTL_SECS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = path
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, dict[str, dict[str, Any]]] = {}
        self.timestamp: int = 0

    @classmethod
    def load(
        cls,
        path: Path,
        ttl: int = CACHE_TTL_SECS,
        clock: Callable[[], float] = time.time,
    ) -> IdentifierCache:
        """Read the cache file, returning an empty cache on any problem."""
        cache = cls(path, ttl=ttl, clock=clock)
        if not path.exists():
            return cache

        try:
            data = orjson.loads(path.read_bytes())
        except (OSError, orjson.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", path, e)
            return cache

        if not isinstance(data, dict) or not isinstance(data.get("timestamp", 0), int):
            logger.warning("Ignoring malformed cache file %s", path)
            return cache

        cache.timestamp = data.get("timestamp", 0)
        if not cache.is_fresh():
            logger.debug("Cache at %s is stale, discarding", path)
            cache.timestamp = 0
            return cache

        for kind, entries in data.items():
            if kind == "timestamp" or not isinstance(entries, dict):
                continue
            cache._entries[kind] = {
                key: entry
                for key, entry in entries.items()
                if isinstance(entry, dict) and isinstance(entry.get("id"), str)
            }
        return cache

    def is_fresh(self) -> bool:
        return self._clock() - self.timestamp <= self.ttl

    def get(self, kind: str, key: str) -> str | None:
        """Return the cached id, or None when absent or the cache is stale.

        An exact key match wins; otherwise keys compare case-insensitively.
        """
        if not self.is_fresh():
            return None
        entries = self._entries.get(kind, {})
        entry = entries.get(key)
        if entry is None:
            folded = key.casefold()
            entry = next(
                (e for k, e in entries.items() if k.casefold() == folded),
                None,
            )
        return entry["id"] if entry else None

    def put(self, kind: str, key: str, id_: str, **extra: str) -> None:
        """Store (or overwrite) an entry and refresh the cache timestamp."""
        if not self.is_fresh():
            self._entries.clear()
        self._entries.setdefault(kind, {})[key] = {"id": id_, "key": key, **extra}
        self.timestamp = int(self._clock())

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {TEAMS: {}}
        data.update(self._entries)
        data["timestamp"] = self.timestamp
        return data

    def save(self) -> None:
        """Write the cache file; failures are logged and ignored."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            data = orjson.dumps(self.to_dict(), option=orjson.OPT_INDENT_2)
            self.path.write_bytes(data)
        except OSError as e:
            logger.warning("Could not write cache file %s: %s", self.path, e)
