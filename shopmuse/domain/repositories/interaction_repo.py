# shopmuse/domain/repositories/interaction_repo.py
from __future__ import annotations
from typing import List, Optional
import uuid

from shopmuse.domain.models.product import InteractionType, UserInteraction
from shopmuse.domain.repositories.kv_store import KeyValueStore
from shopmuse.domain.services.constants import KEY_INTERACTIONS


class InteractionRepo:
    """
    Append-only interaction log kept as one list under `userInteractions`.
    Writes go through the store's atomic append, so concurrent sessions never drop records.
    Records are never updated or removed; the log grows until the store is cleared.
    """
    def __init__(self, store: KeyValueStore, key: str = KEY_INTERACTIONS):
        self.store = store
        self.key = key

    async def add(self, session_id: str, product_id: str, interaction_type: InteractionType) -> UserInteraction:
        interaction = UserInteraction(
            interaction_id=uuid.uuid4().hex,
            session_id=session_id,
            product_id=product_id,
            interaction_type=interaction_type,
        )
        await self.store.append(self.key, interaction.model_dump(mode="json"))
        return interaction

    async def list(self, session_id: Optional[str] = None) -> List[UserInteraction]:
        log = await self.store.get_list(self.key)
        items = [UserInteraction.model_validate(d) for d in log]
        if session_id:
            return [i for i in items if i.session_id == session_id]
        return items
