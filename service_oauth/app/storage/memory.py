"""
In-memory ordered key-value store with expiry and optional file persistence.
"""

import asyncio
import json
import os
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Sequence, Tuple, Union

from sortedcontainers import SortedDict

from shared.errors import PersistenceError
from shared.logging import get_logger
from .keys import join_key, split_key


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a key search: match flag and match-or-insertion index."""
    found: bool
    index: int


class MemoryStorage:
    """Sorted key-value store keyed by flat keys.

    Entries are held as ``{"value": ..., "expiry": <epoch ms>}`` dicts in a
    sorted map so iteration order always follows flat key order. Expired
    entries are dropped lazily when read through ``get`` and skipped by
    ``scan``.

    When ``persist`` is set the full ordered state is written to that file
    after every mutation and loaded from it on construction. Saves from one
    instance are serialized and replace the file atomically. Separate
    processes sharing one file are not coordinated and the last save wins.
    """

    def __init__(
        self,
        persist: Optional[Union[str, Path]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.persist = Path(persist) if persist else None
        self.clock = clock
        self.logger = get_logger("oauth.storage.memory")

        self._store: SortedDict = SortedDict()
        self._save_lock = asyncio.Lock()

        if self.persist is not None and self.persist.exists():
            self._load()

    def __len__(self) -> int:
        return len(self._store)

    def keys(self) -> List[str]:
        """Return a snapshot of the flat keys in sorted order."""
        return list(self._store.keys())

    def search(self, flat_key: str) -> SearchResult:
        """Binary search for a flat key."""
        index = self._store.bisect_left(flat_key)
        found = index < len(self._store) and self._store.peekitem(index)[0] == flat_key
        return SearchResult(found=found, index=index)

    async def get(self, key: Sequence[str]) -> Optional[Any]:
        """Return the value stored under ``key``, or None if absent or expired."""
        flat_key = join_key(key)
        entry = self._store.get(flat_key)
        if entry is None:
            return None

        if self._is_expired(entry, self._now_ms()):
            del self._store[flat_key]
            self.logger.debug("Expired entry removed on read", key=split_key(flat_key))
            await self._save()
            return None

        return entry["value"]

    async def set(self, key: Sequence[str], value: Any, expiry: Optional[datetime] = None) -> None:
        """Insert or replace the value stored under ``key``."""
        flat_key = join_key(key)
        entry: Dict[str, Any] = {"value": value}
        if expiry is not None:
            entry["expiry"] = int(expiry.timestamp() * 1000)

        match = self.search(flat_key)
        self._store[flat_key] = entry
        self.logger.debug(
            "Entry replaced" if match.found else "Entry inserted",
            index=match.index,
            expires=expiry is not None,
        )

        await self._save()

    async def remove(self, key: Sequence[str]) -> None:
        """Remove ``key`` if present."""
        flat_key = join_key(key)
        if not self.search(flat_key).found:
            return

        del self._store[flat_key]
        await self._save()

    async def scan(self, prefix: Sequence[str]) -> AsyncIterator[Tuple[List[str], Any]]:
        """Yield ``(key, value)`` pairs stored under ``prefix`` in key order.

        Matching is on whole segments, so ``["a", "b"]`` does not match
        ``["a", "bc"]``. Expired entries are skipped but left in place. The
        result is built from a snapshot, so callers may mutate the store
        while consuming it.
        """
        now = self._now_ms()
        prefix = list(prefix)
        flat_prefix = join_key(prefix)

        matches = []
        for flat_key in self._store.irange(minimum=flat_prefix):
            if not flat_key.startswith(flat_prefix):
                break
            segments = split_key(flat_key)
            if segments[:len(prefix)] != prefix:
                continue
            entry = self._store[flat_key]
            if self._is_expired(entry, now):
                continue
            matches.append((segments, entry["value"]))

        for item in matches:
            yield item

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    @staticmethod
    def _is_expired(entry: Dict[str, Any], now_ms: int) -> bool:
        expiry = entry.get("expiry")
        return expiry is not None and now_ms >= expiry

    def _load(self) -> None:
        """Load the persisted ordered sequence verbatim."""
        try:
            entries = json.loads(self.persist.read_text(encoding="utf-8"))
            for flat_key, entry in entries:
                self._store[flat_key] = entry
        except (OSError, ValueError, TypeError) as e:
            self.logger.error("Failed to load persisted store", path=str(self.persist), error=str(e))
            raise PersistenceError(
                f"Could not load store from {self.persist}",
                details={"path": str(self.persist), "error": str(e)}
            ) from e

        self.logger.info("Store loaded", path=str(self.persist), entries=len(self._store))

    async def _save(self) -> None:
        """Write the full ordered state to the persistence file."""
        if self.persist is None:
            return

        # Snapshot under the lock so a later save never writes older state
        async with self._save_lock:
            try:
                payload = json.dumps([[flat_key, entry] for flat_key, entry in self._store.items()])
                await asyncio.to_thread(self._write_atomic, payload)
            except (OSError, TypeError, ValueError) as e:
                self.logger.error("Failed to persist store", path=str(self.persist), error=str(e))
                raise PersistenceError(
                    f"Could not save store to {self.persist}",
                    details={"path": str(self.persist), "error": str(e)}
                ) from e

    def _write_atomic(self, payload: str) -> None:
        tmp_path = self.persist.with_name(f"{self.persist.name}.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self.persist)
