import pytest

from shopmuse.domain.models.profile import Preferences, UserProfile
from shopmuse.domain.services.comparison_svc import ComparisonEngine, comparison_factors

from conftest import ZeroRandom


def _profile(budget=None):
    return UserProfile(profile_id="u1", preferences=Preferences(budget=budget))


@pytest.mark.parametrize("budget", [None, "budget", "moderate", "premium"])
def test_weights_sum_to_one(budget):
    factors = comparison_factors(_profile(budget))
    assert sum(f.weight for f in factors) == pytest.approx(1.0)
    assert [f.name for f in factors] == ["Price", "Quality", "Features", "Brand", "Reviews"]


def test_budget_and_premium_adjustments():
    budget = {f.name: f.weight for f in comparison_factors(_profile("budget"))}
    premium = {f.name: f.weight for f in comparison_factors(_profile("premium"))}
    assert budget["Price"] == 0.40
    assert premium["Quality"] == 0.35
    # the rest keep their relative proportions
    assert budget["Quality"] / budget["Reviews"] == pytest.approx(2.5)


def test_cache_returns_identical_object_for_unordered_ids(catalog, rng):
    engine = ComparisonEngine(catalog, rng=rng)
    first = engine.compare_products(["p1", "p3", "p2"])
    second = engine.compare_products(["p2", "p1", "p3"])
    assert first is second


def test_cache_ignores_profile(catalog, rng):
    engine = ComparisonEngine(catalog, rng=rng)
    first = engine.compare_products(["p1", "p2"])
    assert engine.compare_products(["p2", "p1"], _profile("premium")) is first


def test_result_is_sorted_and_winner_is_first(catalog, rng):
    result = ComparisonEngine(catalog, rng=rng).compare_products(["p1", "p5", "p9", "p14"])
    scores = [p.score for p in result.products]
    assert scores == sorted(scores, reverse=True)
    assert result.winner == result.products[0].product_id
    assert result.reasoning.startswith(result.products[0].name)
    assert all(p.pros and p.cons for p in result.products)


def test_reasoning_names_top_weighted_factor(catalog, rng):
    engine = ComparisonEngine(catalog, rng=rng)
    assert "superior price" in engine.compare_products(["p1", "p2"]).reasoning
    assert "superior quality" in engine.compare_products(["p3", "p4"], _profile("premium")).reasoning


def test_catalog_products_use_tags_as_features(catalog, rng):
    result = ComparisonEngine(catalog, rng=rng).compare_products(["p1", "p2"])
    by_id = {p.product_id: p for p in result.products}
    assert by_id["p1"].features == ["audio", "wireless", "premium"]
    assert by_id["p1"].price == 24999
    assert 3 <= by_id["p1"].rating <= 5


def test_unknown_ids_are_synthesized(catalog, rng):
    result = ComparisonEngine(catalog, rng=rng).compare_products(["x1", "x2"])
    names = sorted(p.name for p in result.products)
    assert names == ["Product x1", "Product x2"]
    assert all(50 <= p.price <= 250 for p in result.products)


def test_fixed_price_scale_floors_price_component(catalog):
    # every catalog price is far above 300, so the price term contributes nothing
    engine = ComparisonEngine(catalog, price_scale=300, rng=ZeroRandom())
    result = engine.compare_products(["p1", "p2"])
    # rating 3.0: quality .6*.25 + features 1*.2 + brand 0 + reviews .6*.1
    assert [p.score for p in result.products] == [0.41, 0.41]


def test_derived_price_scale_rewards_cheaper_product(catalog):
    engine = ComparisonEngine(catalog, rng=ZeroRandom())
    result = engine.compare_products(["p1", "p3"])   # 24999 vs 4999, both 3 tags
    assert result.winner == "p3"
    assert any("price difference" in r for r in result.recommendations)


def test_budget_profile_adds_refurbished_tip(catalog, rng):
    result = ComparisonEngine(catalog, rng=rng).compare_products(["p7", "p8"], _profile("budget"))
    assert "Look for refurbished or open-box alternatives" in result.recommendations
