from datetime import timedelta

import pytest

from shopmuse.domain.repositories.profile_repo import ProfileRepo
from shopmuse.domain.services.personalization_svc import (
    SHOPPING_MOODS,
    PersonalizationService,
    seasonal_suggestions,
)

from conftest import FIXED_NOW, FailingProvider


@pytest.fixture
async def svc(store, stub, rng, clock):
    service = PersonalizationService(ProfileRepo(store.namespace("session:s1")), stub, rng=rng, clock=clock)
    await service.load()
    return service


async def test_new_profile_defaults(svc):
    profile = svc.get_user_profile()
    assert profile.profile_id.startswith("user_")
    assert profile.preferences.priorities == ["quality", "price"]
    assert profile.preferences.price_range.max == 100000
    assert profile.ai_profile.learning_stage == "new"


async def test_product_view_moves_category_to_front(svc, catalog):
    await svc.track_interaction("product_view", catalog.get_by_product_id("p13"))   # Fashion
    await svc.track_interaction("product_view", catalog.get_by_product_id("p1"))    # Electronics
    await svc.track_interaction("product_view", catalog.get_by_product_id("p14"))   # Fashion
    assert svc.profile.preferences.categories == ["Fashion", "Electronics"]


async def test_categories_capped_at_ten(svc):
    for i in range(15):
        await svc.track_interaction("category_browse", f"cat{i}")
    cats = svc.profile.preferences.categories
    assert len(cats) == 10
    assert cats[0] == "cat14"
    assert "cat4" not in cats


async def test_update_profile_keeps_identity(svc):
    profile_id = svc.profile.profile_id
    created_at = svc.profile.created_at
    updated = await svc.update_profile({
        "profile_id": "user_other",
        "created_at": "2020-01-01T00:00:00Z",
        "preferences": {"brands": ["acme"]},
    })
    assert updated.profile_id == profile_id
    assert updated.created_at == created_at
    assert updated.preferences.brands == ["acme"]


async def test_view_slightly_above_range_widens_ceiling(svc, catalog):
    await svc.update_profile({"preferences": {"price_range": {"min": 0, "max": 20000}}})
    await svc.track_interaction("product_view", catalog.get_by_product_id("p1"))    # 24999
    assert svc.profile.preferences.price_range.max == pytest.approx(24999 * 1.2)

    # far above 1.5x the ceiling: unchanged
    await svc.update_profile({"preferences": {"price_range": {"min": 0, "max": 1000}}})
    await svc.track_interaction("product_view", catalog.get_by_product_id("p1"))
    assert svc.profile.preferences.price_range.max == 1000


async def test_search_keywords_capped_at_fifty(svc):
    for i in range(60):
        await svc.track_interaction("search", f"Query {i}")
    keywords = svc.profile.behavior.search_patterns.common_keywords
    assert len(keywords) == 50
    assert keywords[-1] == "query 59"
    assert keywords[0] == "query 10"


async def test_purchase_aggregates(svc, catalog):
    await svc.track_interaction("purchase", {"product": catalog.get_by_product_id("p1"), "amount": 24999})
    await svc.track_interaction("purchase", {"product": catalog.get_by_product_id("p13"), "amount": 8999})
    await svc.track_interaction("purchase", {"product": catalog.get_by_product_id("p14"), "amount": 999})
    history = svc.profile.behavior.purchase_history
    assert history.order_count == 3
    assert history.total_spent == 24999 + 8999 + 999
    assert history.average_order_value == pytest.approx((24999 + 8999 + 999) / 3)
    assert history.most_purchased_category == "Fashion"


async def test_personality_rules(svc):
    await svc.update_personality_type()
    # price is a default priority and nothing has been bought yet
    assert svc.profile.ai_profile.personality_type == "bargain_hunter"

    await svc.update_profile({"preferences": {"priorities": ["quality"]}})
    for i in range(6):
        await svc.track_interaction("category_browse", f"cat{i}")
    await svc.update_personality_type()
    assert svc.profile.ai_profile.personality_type == "explorer"

    await svc.update_profile({"preferences": {"priorities": ["quality"], "brands": ["a", "b", "c", "d"]}})
    await svc.update_personality_type()
    assert svc.profile.ai_profile.personality_type == "brand_loyal"

    await svc.update_profile({"preferences": {"priorities": ["quality"]}})
    await svc.update_personality_type()
    assert svc.profile.ai_profile.personality_type == "trendsetter"


async def test_confidence_and_learning_stage(svc):
    for i in range(6):
        await svc.track_interaction("category_browse", f"cat{i}")
    svc.profile.behavior.browsing_patterns.session_duration = 4.4
    await svc.update_personality_type()
    assert svc.profile.ai_profile.confidence_score == pytest.approx(0.5)
    assert svc.profile.ai_profile.learning_stage == "established"

    svc.profile.behavior.browsing_patterns.session_duration = 60
    await svc.update_personality_type()
    assert svc.profile.ai_profile.confidence_score == 1.0
    assert svc.profile.ai_profile.learning_stage == "expert"


async def test_close_records_session_duration(store, stub, rng):
    now = [FIXED_NOW]
    service = PersonalizationService(ProfileRepo(store), stub, rng=rng, clock=lambda: now[0])
    await service.load()
    now[0] = FIXED_NOW + timedelta(minutes=12)
    await service.close()
    assert service.profile.behavior.browsing_patterns.session_duration == pytest.approx(12)


async def test_moods(svc):
    assert len(svc.get_shopping_moods()) == 6
    mood = await svc.set_shopping_mood("gift_hunting")
    assert mood.name == "Perfect Gift"
    assert svc.get_current_mood() == mood
    assert await svc.set_shopping_mood("nope") is None
    assert svc.get_current_mood() == mood


def test_mood_presets_are_unique():
    assert len({m.id for m in SHOPPING_MOODS}) == len(SHOPPING_MOODS)


@pytest.mark.parametrize(
    "month, first",
    [(11, "Traditional wear"), (4, "Cooling appliances"), (8, "Monsoon gear"), (1, "Winter clothing")],
)
def test_seasonal_suggestions(month, first):
    assert seasonal_suggestions(month)[0] == first


async def test_seasonal_recommendations_use_clock(svc):
    assert svc.get_seasonal_recommendations()[0] == "Winter clothing"


async def test_profile_persists(svc, store, stub, rng, clock, catalog):
    await svc.track_interaction("product_view", catalog.get_by_product_id("p1"))
    again = PersonalizationService(ProfileRepo(store.namespace("session:s1")), stub, rng=rng, clock=clock)
    profile = await again.load()
    assert profile.profile_id == svc.profile.profile_id
    assert profile.preferences.categories == ["Electronics"]


async def test_local_recommendations_respect_category_and_range(svc, catalog):
    await svc.track_interaction("category_browse", "Fashion")
    # the stub only recommends rated products and the catalog has no ratings
    recs = await svc.get_personalized_recommendations(catalog.all())
    assert 0 < len(recs.products) <= 3
    assert all(p.category == "Fashion" for p in recs.products)
    assert len(recs.explanations) == len(recs.products)


async def test_mood_changes_categories_and_budget(svc, catalog):
    await svc.track_interaction("category_browse", "Fashion")
    await svc.update_profile({"preferences": {"categories": ["Fashion"], "price_range": {"min": 0, "max": 10000}}})
    mood = next(m for m in SHOPPING_MOODS if m.id == "fitness_motivated")
    recs = await svc.get_personalized_recommendations(catalog.all(), mood)
    assert recs.products
    assert all(p.category in mood.categories for p in recs.products)
    assert all(p.price <= 10000 * mood.price_modifier for p in recs.products)


async def test_provider_failure_uses_local(store, rng, clock, catalog):
    service = PersonalizationService(ProfileRepo(store), FailingProvider(), rng=rng, clock=clock)
    await service.load()
    recs = await service.get_personalized_recommendations(catalog.all())
    assert len(recs.products) == 3
