# shopmuse/domain/repositories/recent_search_repo.py
from __future__ import annotations
from typing import List

from shopmuse.domain.repositories.kv_store import KeyValueStore
from shopmuse.domain.services.constants import KEY_RECENT_SEARCHES, MAX_RECENT_SEARCHES


class RecentSearchRepo:
    def __init__(self, store: KeyValueStore, cap: int = MAX_RECENT_SEARCHES):
        self.store = store
        self.cap = cap

    async def list(self) -> List[str]:
        return (await self.store.get(KEY_RECENT_SEARCHES) or [])[: self.cap]

    async def push(self, query: str) -> List[str]:
        """Move `query` to the front, dropping duplicates and anything past the cap."""
        current = await self.list()
        updated = [query] + [s for s in current if s != query]
        updated = updated[: self.cap]
        await self.store.set(KEY_RECENT_SEARCHES, updated)
        return updated
