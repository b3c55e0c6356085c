"""
Shared pytest fixtures and configuration.
"""
import random
from datetime import datetime, timezone

import pytest

from shopmuse.core.config import Settings
from shopmuse.domain.repositories.kv_store import MemoryKeyValueStore
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.domain.services.intent_svc import KeywordIntentClassifier
from shopmuse.domain.services.providers import StubAIProvider
from shopmuse.domain.services.session import AppContainer

FIXED_NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class ZeroRandom(random.Random):
    """random() always returns 0.0: no jitter, no noise."""
    def random(self):
        return 0.0


class MaxRandom(random.Random):
    """random() sits just under 1.0: maximum jitter."""
    def random(self):
        return 0.999999


class FailingProvider:
    """Provider whose every call blows up, to exercise the fallbacks."""
    name = "failing"

    async def _fail(self, *args, **kwargs):
        raise RuntimeError("provider unavailable")

    generate_response = _fail
    search_products = _fail
    get_personalized_recommendations = _fail
    answer_product_question = _fail
    analyze_product = _fail


@pytest.fixture(scope="session")
def catalog():
    """The packaged 82-product catalog."""
    return ProductRepo.from_json()


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def stub():
    return StubAIProvider(delay_s=0)


@pytest.fixture
def settings():
    return Settings(AI_STUB_DELAY_S=0, _env_file=None)


@pytest.fixture
def make_container(settings, store, catalog, rng, clock):
    """Factory so a test can swap in another provider."""
    def _make(provider=None):
        return AppContainer(
            settings,
            store,
            catalog,
            provider or StubAIProvider(delay_s=0),
            KeywordIntentClassifier(),
            rng=rng,
            clock=clock,
        )
    return _make


@pytest.fixture
def container(make_container):
    return make_container()
