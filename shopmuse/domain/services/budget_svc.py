# shopmuse/domain/services/budget_svc.py
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import uuid

from shopmuse.domain.models.assistance import BudgetAlert, BudgetCategory, BudgetPlan, ShoppingInsight
from shopmuse.domain.repositories.planning_repo import BudgetPlanRepo
from shopmuse.domain.services.constants import BUDGET_INSIGHT_UTILIZATION, BUDGET_NEAR_LIMIT, BUDGET_OVERSPEND
from shopmuse.utils.money import rupees

logger = logging.getLogger(__name__)

# (name, share of total, priority)
DEFAULT_CATEGORIES: Tuple[Tuple[str, float, str], ...] = (
    ("Electronics", 0.30, "high"),
    ("Clothing", 0.20, "medium"),
    ("Home & Garden", 0.20, "medium"),
    ("Books & Media", 0.10, "low"),
    ("Sports & Outdoors", 0.15, "medium"),
    ("Other", 0.05, "low"),
)
DEFAULT_PLAN_NAME = "My Budget Plan"
DEFAULT_TOTAL_BUDGET = 1000.0
DEFAULT_PLAN_DAYS = 30


def default_categories(total_budget: float) -> List[BudgetCategory]:
    return [
        BudgetCategory(
            name=name,
            allocated_amount=round(total_budget * share, 2),
            percentage=round(share * 100, 2),
            priority=priority,
        )
        for name, share, priority in DEFAULT_CATEGORIES
    ]


def _utilization(spent: float, allocated: float) -> float:
    if allocated > 0:
        return spent / allocated
    return float("inf") if spent > 0 else 0.0


def budget_alerts(plan: BudgetPlan, now: datetime) -> List[BudgetAlert]:
    """Alerts are a pure function of the current totals; nothing carries over."""
    alerts: List[BudgetAlert] = []

    overall = _utilization(plan.spent_amount, plan.total_budget)
    if overall >= BUDGET_OVERSPEND:
        alerts.append(BudgetAlert(type="overspend", message="Budget exceeded!", severity="error", timestamp=now))
    elif overall >= BUDGET_NEAR_LIMIT:
        alerts.append(BudgetAlert(
            type="nearLimit", message=f"{round(overall * 100)}% of budget used", severity="warning", timestamp=now,
        ))

    for c in plan.categories:
        used = _utilization(c.spent_amount, c.allocated_amount)
        if used >= BUDGET_OVERSPEND:
            alerts.append(BudgetAlert(
                type="overspend", message=f"{c.name} budget exceeded", severity="error",
                category=c.name, timestamp=now,
            ))
        elif used >= BUDGET_NEAR_LIMIT:
            alerts.append(BudgetAlert(
                type="nearLimit", message=f"{c.name} budget {round(used * 100)}% used", severity="warning",
                category=c.name, timestamp=now,
            ))
    return alerts


def budget_insights(plan: BudgetPlan) -> List[ShoppingInsight]:
    insights: List[ShoppingInsight] = []

    used = _utilization(plan.spent_amount, plan.total_budget)
    if used > BUDGET_INSIGHT_UTILIZATION:
        insights.append(ShoppingInsight(
            type="budget_tip",
            title="Budget Alert",
            description=f"You've used {round(used * 100)}% of your budget",
            action="Consider reducing spending or adjusting budget",
            priority="high",
            confidence=1.0,
        ))

    for c in plan.categories:
        if c.spent_amount > c.allocated_amount:
            insights.append(ShoppingInsight(
                type="budget_tip",
                title=f"{c.name} Over Budget",
                description=f"Overspent by {rupees(round(c.spent_amount - c.allocated_amount, 2))}",
                action=f"Reduce {c.name} spending or reallocate budget",
                priority="medium",
                confidence=1.0,
            ))
    return insights


class BudgetPlanner:
    """Budget plans per user, persisted through BudgetPlanRepo."""

    def __init__(self, repo: BudgetPlanRepo, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.repo = repo
        self.clock = clock

    async def create_budget_plan(
        self,
        user_id: str,
        name: str = DEFAULT_PLAN_NAME,
        total_budget: float = DEFAULT_TOTAL_BUDGET,
        categories: Optional[Sequence[BudgetCategory]] = None,
        end_date: Optional[datetime] = None,
    ) -> BudgetPlan:
        now = self.clock()
        cats = [c.model_copy() for c in categories] if categories else default_categories(total_budget)
        spent = sum(c.spent_amount for c in cats)
        plan = BudgetPlan(
            plan_id=f"budget_{uuid.uuid4().hex[:12]}",
            name=name or DEFAULT_PLAN_NAME,
            total_budget=total_budget,
            spent_amount=spent,
            remaining_amount=total_budget - spent,
            categories=cats,
            created_at=now,
            end_date=end_date or now + timedelta(days=DEFAULT_PLAN_DAYS),
        )
        plan.alerts = budget_alerts(plan, now)
        await self.repo.save(user_id, plan)
        logger.info("budget plan created user=%s plan=%s total=%s", user_id, plan.plan_id, total_budget)
        return plan

    async def list_budget_plans(self, user_id: str) -> List[BudgetPlan]:
        return await self.repo.list(user_id)

    async def get_budget_plan(self, user_id: str, plan_id: str) -> Optional[BudgetPlan]:
        return await self.repo.get(user_id, plan_id)

    async def update_budget_spending(
        self, user_id: str, plan_id: str, category: str, amount: float
    ) -> Optional[BudgetPlan]:
        """
        Book `amount` against `category` and recompute totals and alerts.
        Returns None for an unknown plan; a non-positive amount leaves the plan unchanged.
        """
        plan = await self.repo.get(user_id, plan_id)
        if plan is None:
            return None
        if amount <= 0:
            logger.debug("ignoring non-positive spend plan=%s amount=%s", plan_id, amount)
            return plan

        target = next((c for c in plan.categories if c.name == category), None)
        if target is None:
            target = BudgetCategory(name=category, allocated_amount=0, priority="low")
            plan.categories.append(target)
        target.spent_amount += amount

        plan.spent_amount = sum(c.spent_amount for c in plan.categories)
        plan.remaining_amount = plan.total_budget - plan.spent_amount
        plan.alerts = budget_alerts(plan, self.clock())

        await self.repo.save(user_id, plan)
        logger.info(
            "budget spend user=%s plan=%s category=%s amount=%s remaining=%s alerts=%s",
            user_id, plan_id, category, amount, plan.remaining_amount, len(plan.alerts),
        )
        return plan

    async def get_budget_insights(self, user_id: str, plan_id: str) -> List[ShoppingInsight]:
        plan = await self.repo.get(user_id, plan_id)
        return budget_insights(plan) if plan else []
