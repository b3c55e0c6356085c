import random

import pytest

from shopmuse.domain.models.ai import AIRecommendations
from shopmuse.domain.models.product import RecommendationRequest
from shopmuse.domain.repositories.interaction_repo import InteractionRepo
from shopmuse.domain.services.providers import StubAIProvider
from shopmuse.domain.services.recommendation_svc import (
    RecommendationEngine,
    get_recommendations_api,
    score_candidate,
    session_signals,
)

from conftest import FailingProvider, MaxRandom, ZeroRandom


class PickingProvider:
    """Returns fixed catalog products as its recommendations."""
    name = "picking"

    def __init__(self, catalog, ids):
        self.products = catalog.get_many_by_product_ids(ids)

    async def get_personalized_recommendations(self, preferences, products):
        return AIRecommendations(
            products=self.products,
            explanations=[f"picked {p.product_id}" for p in self.products],
            confidence=90,
        )


@pytest.fixture
def interactions(store):
    return InteractionRepo(store)


@pytest.fixture
def engine(catalog, interactions, rng):
    return RecommendationEngine(catalog, interactions, StubAIProvider(delay_s=0), rng=rng)


async def test_liked_product_is_excluded(engine, interactions):
    await interactions.add("s1", "p1", "like")
    recs = await engine.generate_local_recommendations("s1", 3)
    assert len(recs) == 3
    assert "p1" not in [r.product.product_id for r in recs]


async def test_viewed_and_liked_never_returned(engine, interactions):
    for pid in ("p1", "p2", "p3"):
        await interactions.add("s1", pid, "view")
    await interactions.add("s1", "p4", "like")
    await interactions.add("s1", "p5", "click")
    recs = await engine.generate_recommendations("s1", 10)
    ids = {r.product.product_id for r in recs}
    assert len(recs) == 10
    assert not ids & {"p1", "p2", "p3", "p4"}


async def test_size_is_min_of_limit_and_unseen(engine, interactions, catalog):
    all_ids = [p.product_id for p in catalog.all()]
    for pid in all_ids[:-2]:
        await interactions.add("s1", pid, "view")
    recs = await engine.generate_local_recommendations("s1", 5)
    assert sorted(r.product.product_id for r in recs) == sorted(all_ids[-2:])


async def test_other_sessions_do_not_leak(engine, interactions):
    await interactions.add("other", "p1", "like")
    recs = await engine.generate_local_recommendations("s1", 82)
    assert "p1" in [r.product.product_id for r in recs]


async def test_scores_sorted_and_clipped(engine, interactions):
    await interactions.add("s1", "p2", "view")
    recs = await engine.generate_local_recommendations("s1", 20)
    scores = [r.score for r in recs]
    assert scores == sorted(scores, reverse=True)
    assert all(50 <= r.score <= 100 for r in recs)
    assert all(60 <= r.confidence <= 100 for r in recs)
    assert all(r.explanation for r in recs)


async def test_provider_failure_falls_back_to_local(catalog, interactions):
    engine = RecommendationEngine(catalog, interactions, FailingProvider(), rng=random.Random(1))
    await interactions.add("s1", "p1", "like")
    recs = await engine.generate_recommendations("s1", 3)
    assert len(recs) == 3
    assert "p1" not in [r.product.product_id for r in recs]


async def test_provider_results_ranked_first_and_filled(catalog, interactions, rng):
    provider = PickingProvider(catalog, ["p1", "p2", "p3"])
    engine = RecommendationEngine(catalog, interactions, provider, rng=rng)
    await interactions.add("s1", "p1", "view")

    recs = await engine.generate_recommendations("s1", 4)
    ids = [r.product.product_id for r in recs]
    assert ids[:2] == ["p2", "p3"]
    assert [r.score for r in recs[:2]] == [95, 90]
    assert recs[0].explanation == "picked p2"
    assert recs[0].confidence == 90
    assert len(ids) == 4 and len(set(ids)) == 4
    assert "p1" not in ids


async def test_recommendations_api_wrapper(engine, interactions):
    await interactions.add("s1", "p1", "like")
    recs = await get_recommendations_api(engine, RecommendationRequest(session_id="s1"))
    assert len(recs) == 3
    assert "p1" not in [r.product.product_id for r in recs]


async def test_session_signals(interactions, catalog):
    await interactions.add("s1", "p13", "view")   # Fashion, 8999
    await interactions.add("s1", "p1", "view")    # Electronics, 24999
    await interactions.add("s1", "p2", "like")    # Electronics
    signals = session_signals(await interactions.list("s1"), catalog.all())
    # catalog order within the viewed group
    assert signals.preferred_categories == ["Electronics", "Fashion"]
    assert signals.avg_price == pytest.approx((8999 + 24999) / 2)
    assert signals.seen == {"p13", "p1", "p2"}


def test_session_signals_default_price(catalog):
    signals = session_signals([], catalog.all(), default_avg_price=15000)
    assert signals.avg_price == 15000
    assert signals.preferred_categories == []


def test_score_candidate_bounds(catalog):
    smart_watch = catalog.get_by_product_id("p2")     # Electronics, 15999, fitness/smart
    assert score_candidate(smart_watch, ["Electronics"], 15999, MaxRandom()) == (100, 100)

    tshirt = catalog.get_by_product_id("p14")         # Fashion, 999, no popular tag
    assert score_candidate(tshirt, ["Electronics"], 15000, ZeroRandom()) == (50, 60)
