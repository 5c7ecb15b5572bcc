from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class IdentityLocks:
    """Per-identity asyncio locks for one process.

    Serializes reconciliation of the same alert group so two concurrent firing
    notifications cannot both observe "no open issue". Entries are dropped once
    nobody holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, identity: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(identity, asyncio.Lock())
        self._users[identity] = self._users.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[identity] -= 1
            if self._users[identity] == 0:
                del self._users[identity]
                del self._locks[identity]

    def __len__(self) -> int:
        return len(self._locks)
