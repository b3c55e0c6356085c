# shopmuse/core/lifespan.py
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI

from shopmuse.core.config import Settings
from shopmuse.db import redis as r
from shopmuse.domain.repositories.kv_store import MemoryKeyValueStore, RedisKeyValueStore
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.domain.services.intent_svc import build_classifier
from shopmuse.domain.services.providers import build_chat_client, build_provider
from shopmuse.domain.services.session import AppContainer

logger = logging.getLogger(__name__)


async def build_container(settings: Settings, redis_client=None) -> AppContainer:
    if settings.STORAGE_BACKEND == "memory":
        store = MemoryKeyValueStore()
    elif settings.STORAGE_BACKEND == "redis":
        store = RedisKeyValueStore(redis_client, prefix=settings.storage_prefix)
    else:
        raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")

    catalog = ProductRepo.from_json(settings.CATALOG_PATH or None)
    provider = build_provider(settings)
    chat = build_chat_client(settings) if settings.INTENT_CLASSIFIER == "llm" else None
    classifier = build_classifier(settings, chat)
    logger.info(
        "Container ready: storage=%s provider=%s classifier=%s",
        settings.STORAGE_BACKEND, provider.name, classifier.name,
    )
    return AppContainer(settings, store, catalog, provider, classifier)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # --- Startup ---
    redis_client = None
    if settings.STORAGE_BACKEND == "redis":
        redis_client = await r.connect(settings.REDIS_URL)
    app.state.redis = redis_client
    app.state.container = await build_container(settings, redis_client)

    # Application runs
    yield

    # --- Shutdown ---
    await app.state.container.aclose()
    await r.disconnect(redis_client)
