# shopmuse/domain/repositories/profile_repo.py
from __future__ import annotations
from typing import Optional

from shopmuse.domain.models.chat import UserContext
from shopmuse.domain.models.profile import UserProfile
from shopmuse.domain.repositories.kv_store import KeyValueStore
from shopmuse.domain.services.constants import KEY_USER_CONTEXT, KEY_USER_PROFILE


class ProfileRepo:
    """Session-scoped documents: the user profile and the chat context."""
    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_profile(self) -> Optional[UserProfile]:
        doc = await self.store.get(KEY_USER_PROFILE)
        return UserProfile.model_validate(doc) if doc else None

    async def save_profile(self, profile: UserProfile) -> None:
        await self.store.set(KEY_USER_PROFILE, profile.model_dump(mode="json"))

    async def get_context(self) -> Optional[UserContext]:
        doc = await self.store.get(KEY_USER_CONTEXT)
        return UserContext.model_validate(doc) if doc else None

    async def save_context(self, context: UserContext) -> None:
        await self.store.set(KEY_USER_CONTEXT, context.model_dump(mode="json"))
