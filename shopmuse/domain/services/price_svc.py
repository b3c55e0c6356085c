# shopmuse/domain/services/price_svc.py
"""
Toy price forecasting over a synthetic price history.

History is a random walk seeded from each catalog price at startup. The
projection mixes a short-term trend, a fixed month table and noise, scaled by
the observed volatility. Not a statistical model: no error bounds, no backtest.
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence
import logging
import math
import random

from shopmuse.domain.models.assistance import PricePoint, PricePrediction, SeasonalTrend, ShoppingInsight
from shopmuse.domain.models.product import Product
from shopmuse.domain.services.constants import (
    NOISE_OFFSET, NOISE_WEIGHT, PRICE_ALERT_MIN_CONFIDENCE, SEASONAL_FACTORS, SEASONAL_WEIGHT,
    TREND_WEIGHT, VOLATILITY_MAX, VOLATILITY_MIN,
)
from shopmuse.utils.money import rupees

logger = logging.getLogger(__name__)

TREND_WINDOW = 7
DAILY_VARIATION = 0.10          # walk step in [-5%, +5%]
MIN_SYNTHETIC_PRICE = 10.0
HORIZON_BASE_DAYS = 30

SEASONAL_TRENDS: List[SeasonalTrend] = [
    SeasonalTrend(season="winter", average_discount=15, best_deal_months=["January", "February"]),
    SeasonalTrend(season="spring", average_discount=10, best_deal_months=["March", "April"]),
    SeasonalTrend(season="summer", average_discount=5, best_deal_months=["July", "August"]),
    SeasonalTrend(season="fall", average_discount=20, best_deal_months=["November", "December"]),
    SeasonalTrend(season="holiday", average_discount=25, best_deal_months=["November", "December"]),
]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def price_trend(history: Sequence[PricePoint]) -> float:
    """Relative change of the last-7 average over the previous-7 average."""
    if len(history) < 2:
        return 0.0
    recent = [p.price for p in history[-TREND_WINDOW:]]
    older = [p.price for p in history[-2 * TREND_WINDOW:-TREND_WINDOW]]
    if not older:
        return 0.0
    older_avg = _mean(older)
    if older_avg == 0:
        return 0.0
    return (_mean(recent) - older_avg) / older_avg


def volatility(history: Sequence[PricePoint]) -> float:
    if len(history) < 2:
        return 1.0
    changes = [
        abs((cur.price - prev.price) / prev.price)
        for prev, cur in zip(history, history[1:])
        if prev.price
    ]
    if not changes:
        return 1.0
    return max(VOLATILITY_MIN, min(VOLATILITY_MAX, 1 + _mean(changes) * 5))


def is_flat(history: Sequence[PricePoint]) -> bool:
    return len({p.price for p in history}) <= 1


def seasonal_factor(month: int) -> float:
    """`month` is 1-12."""
    return SEASONAL_FACTORS[month - 1]


def random_walk(
    start_price: float, days: int, rng: random.Random, end: datetime, source: str = "marketplace"
) -> List[PricePoint]:
    """`days + 1` daily points ending at `end`, ±5% per step, floored at 10."""
    points: List[PricePoint] = []
    price = start_price
    for i in range(days, -1, -1):
        price = max(MIN_SYNTHETIC_PRICE, price * (1 + (rng.random() - 0.5) * DAILY_VARIATION))
        points.append(PricePoint(date=end - timedelta(days=i), price=round(price, 2), source=source))
    return points


class PricePredictor:

    def __init__(
        self,
        *,
        history_days: int = 30,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.history_days = history_days
        self.rng = rng or random.Random()
        self.clock = clock
        self._history: Dict[str, List[PricePoint]] = {}

    def seed_from_catalog(self, products: Iterable[Product]) -> None:
        now = self.clock()
        count = 0
        for p in products:
            self._history[p.product_id] = random_walk(p.price, self.history_days, self.rng, now)
            count += 1
        logger.info("price history seeded products=%s days=%s", count, self.history_days)

    def set_history(self, product_id: str, history: Sequence[PricePoint]) -> None:
        self._history[product_id] = list(history)

    def get_history(self, product_id: str) -> List[PricePoint]:
        return list(self._history.get(product_id, []))

    def predict_price(self, product_id: str, days: int = 30) -> PricePrediction:
        history = self._history.get(product_id, [])
        current = history[-1].price if history else 0.0

        if is_flat(history):
            # no movement, no signal
            change = 0.0
        else:
            change = (
                price_trend(history) * TREND_WEIGHT
                + seasonal_factor(self.clock().month) * SEASONAL_WEIGHT
                + self.rng.random() * NOISE_WEIGHT
                - NOISE_OFFSET
            ) * volatility(history) * (days / HORIZON_BASE_DAYS)

        predicted = round(max(0.0, current * (1 + change)), 2)
        if predicted > current:
            direction = "up"
        elif predicted < current:
            direction = "down"
        else:
            direction = "stable"

        return PricePrediction(
            product_id=product_id,
            current_price=current,
            predicted_price=predicted,
            price_direction=direction,
            confidence=round(max(0.6, 1 - abs(change) * 2), 2),
            best_buy_time=self._best_buy_time(predicted, current),
            price_history=history[-self.history_days:],
            seasonal_trends=list(SEASONAL_TRENDS),
        )

    def _best_buy_time(self, predicted: float, current: float) -> str:
        if predicted < current:
            return f"in {math.ceil(self.rng.random() * 14) + 1} days"
        return "now"

    def get_price_alerts(self, product_ids: Iterable[str], names: Optional[Dict[str, str]] = None) -> List[ShoppingInsight]:
        """Price-drop insights for the watched products the model is confident about."""
        names = names or {}
        insights: List[ShoppingInsight] = []
        for pid in dict.fromkeys(product_ids):
            prediction = self.predict_price(pid)
            if prediction.price_direction != "down" or prediction.confidence <= PRICE_ALERT_MIN_CONFIDENCE:
                continue
            savings = round(prediction.current_price - prediction.predicted_price, 2)
            pct = savings / prediction.current_price * 100 if prediction.current_price else 0
            insights.append(ShoppingInsight(
                type="price_trend",
                title="Price Drop Expected",
                description=f"{names.get(pid, pid)} is expected to drop by {pct:.1f}% ({rupees(savings)})",
                action=f"Wait {prediction.best_buy_time} for better price",
                priority="high",
                savings_amount=savings,
                confidence=prediction.confidence,
            ))
        return insights
