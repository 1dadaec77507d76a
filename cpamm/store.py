"""Pool record persistence.

The store owns the per-pool critical section: everything the controller
does between ``load`` and ``save`` happens while holding ``locked(pool_id)``,
so no other instruction on the same pool can interleave.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol, runtime_checkable

from cpamm.state import Pool


@runtime_checkable
class PoolStore(Protocol):
    """Load/store of pool records keyed by quote asset."""

    def load(self, pool_id: str) -> Pool | None: ...

    def save(self, pool: Pool) -> None: ...

    def locked(self, pool_id: str) -> AbstractContextManager[None]: ...


class InMemoryPoolStore:
    """Dict-backed store with one reentrant lock per pool."""

    def __init__(self) -> None:
        self._pools: dict[str, Pool] = {}
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def load(self, pool_id: str) -> Pool | None:
        return self._pools.get(pool_id)

    def save(self, pool: Pool) -> None:
        self._pools[pool.pool_id] = pool

    def pool_ids(self) -> list[str]:
        return sorted(self._pools)

    @contextmanager
    def locked(self, pool_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(pool_id, threading.RLock())
        with lock:
            yield
