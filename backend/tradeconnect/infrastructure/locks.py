"""Keyed Locks - in-process asyncio locks for check-then-insert sections.

Invariants:
    - One lock per (event loop, key) while any coroutine holds a reference
    - Locks nobody references are dropped; the registry never grows with
      the number of events seen

Design Decisions:
    - Complements the SELECT ... FOR UPDATE row lock, which SQLite ignores;
      multi-worker Postgres deployments rely on the row lock
"""

import asyncio
import weakref
from collections.abc import Hashable

_registry: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, weakref.WeakValueDictionary]" = (
    weakref.WeakKeyDictionary()
)


def keyed_lock(*key: Hashable) -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    locks = _registry.get(loop)
    if locks is None:
        locks = _registry[loop] = weakref.WeakValueDictionary()
    lock = locks.get(key)
    if lock is None:
        lock = locks[key] = asyncio.Lock()
    return lock


def held_lock_count() -> int:
    """Locks currently registered for the running loop."""
    locks = _registry.get(asyncio.get_running_loop())
    return len(locks) if locks is not None else 0
