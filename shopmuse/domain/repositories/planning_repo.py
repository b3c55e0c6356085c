# shopmuse/domain/repositories/planning_repo.py
from __future__ import annotations
from typing import List, Optional

from shopmuse.domain.models.assistance import BudgetPlan, StockAlert
from shopmuse.domain.repositories.kv_store import KeyValueStore
from shopmuse.domain.services.constants import KEY_BUDGET_PLANS, KEY_STOCK_ALERTS


class BudgetPlanRepo:
    """Budget plans per user, stored as a list under `budgetPlans:<user_id>`."""
    def __init__(self, store: KeyValueStore):
        self.store = store

    def key(self, user_id: str) -> str:
        return f"{KEY_BUDGET_PLANS}:{user_id}"

    async def list(self, user_id: str) -> List[BudgetPlan]:
        docs = await self.store.get(self.key(user_id)) or []
        return [BudgetPlan.model_validate(d) for d in docs]

    async def get(self, user_id: str, plan_id: str) -> Optional[BudgetPlan]:
        return next((p for p in await self.list(user_id) if p.plan_id == plan_id), None)

    async def save(self, user_id: str, plan: BudgetPlan) -> None:
        """Insert or replace by plan_id, keeping creation order."""
        plans = await self.list(user_id)
        for i, p in enumerate(plans):
            if p.plan_id == plan.plan_id:
                plans[i] = plan
                break
        else:
            plans.append(plan)
        await self.store.set(self.key(user_id), [p.model_dump(mode="json") for p in plans])


class StockAlertRepo:
    """Stock alerts per user under `stockAlerts:<user_id>`."""
    def __init__(self, store: KeyValueStore):
        self.store = store

    def key(self, user_id: str) -> str:
        return f"{KEY_STOCK_ALERTS}:{user_id}"

    async def list(self, user_id: str) -> List[StockAlert]:
        docs = await self.store.get(self.key(user_id)) or []
        return [StockAlert.model_validate(d) for d in docs]

    async def save_all(self, user_id: str, alerts: List[StockAlert]) -> None:
        await self.store.set(self.key(user_id), [a.model_dump(mode="json") for a in alerts])
