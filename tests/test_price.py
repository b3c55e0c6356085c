from datetime import timedelta

import pytest

from shopmuse.domain.models.assistance import PricePoint
from shopmuse.domain.services.price_svc import (
    PricePredictor,
    price_trend,
    seasonal_factor,
    volatility,
)

from conftest import FIXED_NOW, ZeroRandom


def _history(prices):
    start = FIXED_NOW - timedelta(days=len(prices) - 1)
    return [PricePoint(date=start + timedelta(days=i), price=p) for i, p in enumerate(prices)]


@pytest.fixture
def predictor(clock):
    # FIXED_NOW is in January: seasonal factor -0.10
    return PricePredictor(rng=ZeroRandom(), clock=clock)


def test_flat_history_is_stable(predictor):
    history = _history([100] * 31)
    predictor.set_history("p1", history)
    prediction = predictor.predict_price("p1")

    assert price_trend(history) == 0
    assert prediction.price_direction == "stable"
    assert prediction.predicted_price == 100
    assert prediction.current_price == 100
    assert prediction.best_buy_time == "now"
    assert prediction.confidence == 1.0


def test_trend_compares_last_week_with_previous_week():
    history = _history([100] * 7 + [110] * 7)
    assert price_trend(history) == pytest.approx(0.10)
    assert price_trend(_history([100])) == 0
    # fewer than 8 points: no previous week to compare against
    assert price_trend(_history([100, 120, 90])) == 0


def test_volatility_is_clipped():
    assert volatility(_history([100] * 10)) == 1.0
    assert volatility(_history([100, 200] * 5)) == 2.0
    assert volatility(_history([100, 101])) == pytest.approx(1.05)


def test_seasonal_table():
    assert seasonal_factor(1) == -0.10
    assert seasonal_factor(11) == 0.15
    assert seasonal_factor(12) == 0.20


def test_unknown_product(predictor):
    prediction = predictor.predict_price("nope")
    assert prediction.current_price == 0
    assert prediction.predicted_price == 0
    assert prediction.price_direction == "stable"
    assert prediction.price_history == []


def test_falling_prices_predict_drop(predictor):
    predictor.set_history("p1", _history([100] * 24 + [98] * 7))
    prediction = predictor.predict_price("p1")
    assert prediction.price_direction == "down"
    assert prediction.predicted_price < 98
    assert prediction.best_buy_time.startswith("in ")
    assert 0.6 <= prediction.confidence <= 1.0
    assert len(prediction.seasonal_trends) == 5


def test_horizon_scales_the_change(predictor):
    predictor.set_history("p1", _history([100] * 24 + [98] * 7))
    month = predictor.predict_price("p1", days=30)
    fortnight = predictor.predict_price("p1", days=15)
    assert 98 - fortnight.predicted_price == pytest.approx((98 - month.predicted_price) / 2, abs=0.01)


def test_seed_from_catalog(catalog, clock):
    predictor = PricePredictor(history_days=30, clock=clock)
    predictor.seed_from_catalog(catalog.all())
    history = predictor.get_history("p1")
    assert len(history) == 31
    assert history[-1].date == FIXED_NOW
    assert all(p.price >= 10 for p in history)
    # ±5% a day for 31 days stays within a loose band of the catalog price
    assert 24999 * 0.2 < history[-1].price < 24999 * 5


def test_price_alerts_for_confident_drops(predictor):
    predictor.set_history("p1", _history([100] * 24 + [98] * 7))
    predictor.set_history("p2", _history([100] * 31))
    insights = predictor.get_price_alerts(["p1", "p2", "p1"], {"p1": "Wireless Headphones"})
    assert len(insights) == 1
    insight = insights[0]
    assert insight.type == "price_trend"
    assert insight.title == "Price Drop Expected"
    assert insight.description.startswith("Wireless Headphones is expected to drop by")
    assert insight.savings_amount > 0
    assert insight.confidence > 0.7
