# shopmuse/domain/services/assistance_svc.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional
import logging
import time

from shopmuse.domain.models.assistance import ShoppingInsight
from shopmuse.domain.models.profile import UserProfile
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.domain.services.budget_svc import BudgetPlanner
from shopmuse.domain.services.comparison_svc import ComparisonEngine
from shopmuse.domain.services.price_svc import PricePredictor
from shopmuse.domain.services.stock_alert_svc import StockAlertService

logger = logging.getLogger(__name__)

PRIORITY_RANK = {"high": 2, "medium": 1, "low": 0}


def seasonal_insights(month: int) -> List[ShoppingInsight]:
    if month >= 11 or month <= 2:
        return [ShoppingInsight(
            type="seasonal_advice",
            title="Holiday Shopping Season",
            description="Major discounts available on electronics and clothing",
            action="Check for year-end and festive sale deals",
            priority="high",
            confidence=0.9,
        )]
    if 7 <= month <= 9:
        return [ShoppingInsight(
            type="seasonal_advice",
            title="Back-to-School Season",
            description="Great deals on laptops, supplies, and clothing",
            action="Shop for educational discounts and student deals",
            priority="medium",
            confidence=0.8,
        )]
    return []


def alternative_insights(profile: Optional[UserProfile]) -> List[ShoppingInsight]:
    insights = [ShoppingInsight(
        type="alternative_product",
        title="Consider Generic Brands",
        description="Generic alternatives can save 20-40% with similar quality",
        action="Compare store brands and lesser-known manufacturers",
        priority="medium",
        savings_amount=25,
        confidence=0.7,
    )]
    if profile and profile.preferences.sustainability == "high":
        insights.append(ShoppingInsight(
            type="alternative_product",
            title="Eco-Friendly Alternatives",
            description="Sustainable options available with minimal price premium",
            action="Filter for eco-certified and sustainable products",
            priority="medium",
            confidence=0.8,
        ))
    return insights


class IntelligentAssistanceService:
    """
    Planning tools shared by every session: comparison, budgets, stock alerts,
    price forecasts, and the insight feed that aggregates them.
    """

    def __init__(
        self,
        catalog: ProductRepo,
        comparison: ComparisonEngine,
        budgets: BudgetPlanner,
        stock_alerts: StockAlertService,
        prices: PricePredictor,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.catalog = catalog
        self.comparison = comparison
        self.budgets = budgets
        self.stock_alerts = stock_alerts
        self.prices = prices
        self.clock = clock

    async def get_price_alerts(self, user_id: str, watched: Iterable[str] = ()) -> List[ShoppingInsight]:
        """Watched products are the user's stock-alert products plus `watched`."""
        alerts = await self.stock_alerts.list_stock_alerts(user_id)
        ids = [a.product_id for a in alerts] + list(watched)
        names = {p.product_id: p.name for p in self.catalog.get_many_by_product_ids(ids)}
        return self.prices.get_price_alerts(ids, names)

    async def get_smart_recommendations(
        self, user_id: str, profile: Optional[UserProfile] = None, watched: Iterable[str] = ()
    ) -> List[ShoppingInsight]:
        t0 = time.perf_counter()
        insights: List[ShoppingInsight] = []
        insights += await self.get_price_alerts(user_id, watched)
        for plan in await self.budgets.list_budget_plans(user_id):
            insights += await self.budgets.get_budget_insights(user_id, plan.plan_id)
        insights += seasonal_insights(self.clock().month)
        insights += alternative_insights(profile)

        # stable: equal priorities keep their source order
        insights.sort(key=lambda i: PRIORITY_RANK[i.priority], reverse=True)
        logger.info("insights user=%s count=%s time=%.3fs", user_id, len(insights), time.perf_counter() - t0)
        return insights
