from __future__ import annotations

from typing import Any, List, Optional

from loguru import logger

from quizgate.core.errors import NotConfigured
from quizgate.db.kv import KeyValueStore
from quizgate.schemas import Hit, LedgerStats

HITS_KEY = "hits"
VIEWS_KEY = "total_views"
REGISTRATIONS_KEY = "total_registrations"


class AnalyticsLedger:
    """
    Recent-visit ring buffer plus view/registration counters in the KV store.

    Every mutation is a plain read-modify-write with no lock or version
    check: two concurrent writers that read the same snapshot will lose one
    update. Callers that need exact counts under load need a store with an
    atomic increment/append.
    """

    def __init__(self, store: Optional[KeyValueStore], capacity: int = 50) -> None:
        self._store = store
        self._capacity = capacity

    @property
    def store(self) -> KeyValueStore:
        if self._store is None:
            raise NotConfigured("Analytics store is not configured")
        return self._store

    async def _read_counter(self, key: str) -> int:
        value = await self.store.get(key)
        return int(value) if value else 0

    async def _increment(self, key: str) -> int:
        value = await self._read_counter(key) + 1
        await self.store.put(key, value)
        return value

    async def _read_hits(self) -> List[dict[str, Any]]:
        value = await self.store.get(HITS_KEY)
        return list(value) if value else []

    async def record_hit(self, hit: Hit) -> None:
        hits = await self._read_hits()
        hits.insert(0, hit.model_dump(by_alias=True))
        await self.store.put(HITS_KEY, hits[: self._capacity])
        views = await self._increment(VIEWS_KEY)
        logger.debug("Recorded hit on {} (views={})", hit.path, views)

    async def record_registration(self) -> int:
        return await self._increment(REGISTRATIONS_KEY)

    async def read_stats(self) -> LedgerStats:
        hits = [Hit.model_validate(h) for h in await self._read_hits()]
        return LedgerStats(
            hits=hits,
            total_views=await self._read_counter(VIEWS_KEY),
            total_registrations=await self._read_counter(REGISTRATIONS_KEY),
            # rough guess, not a session count
            estimated_active_users=max(1, len(hits) // 4),
        )
