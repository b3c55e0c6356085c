# shopmuse/api/v1/routers/assistance.py
"""
Planning tools. Budgets and stock alerts are stored per user (the session's
profile id) in the shared store, outside the session namespace.
"""
import logging
from typing import List
from fastapi import APIRouter, HTTPException, Query

from shopmuse.api.deps import ContainerDep, SessionDep
from shopmuse.api.v1.schemas.requests import BudgetPlanIn, CompareIn, SpendIn, StockAlertIn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assistance"])


def _user_id(session) -> str:
    return session.personalization.profile.profile_id


@router.post("/compare")
async def compare(body: CompareIn, session: SessionDep, container: ContainerDep):
    """Weighted comparison; the same set of ids (in any order) returns the cached result."""
    return container.comparison.compare_products(body.product_ids, session.personalization.get_user_profile())


# ---- budgets ----------------------------------------------------------------

@router.post("/budgets", status_code=201)
async def create_budget(body: BudgetPlanIn, session: SessionDep, container: ContainerDep):
    return await container.assistance.budgets.create_budget_plan(
        _user_id(session), body.name, body.total_budget, body.categories, body.end_date
    )


@router.get("/budgets")
async def list_budgets(session: SessionDep, container: ContainerDep):
    items = await container.assistance.budgets.list_budget_plans(_user_id(session))
    return {"items": items, "count": len(items)}


@router.get("/budgets/{plan_id}")
async def get_budget(plan_id: str, session: SessionDep, container: ContainerDep):
    plan = await container.assistance.budgets.get_budget_plan(_user_id(session), plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Budget plan not found.")
    return plan


@router.post("/budgets/{plan_id}/spend")
async def spend(plan_id: str, body: SpendIn, session: SessionDep, container: ContainerDep):
    plan = await container.assistance.budgets.update_budget_spending(
        _user_id(session), plan_id, body.category, body.amount
    )
    if plan is None:
        raise HTTPException(status_code=404, detail="Budget plan not found.")
    return plan


@router.get("/budgets/{plan_id}/insights")
async def budget_insights(plan_id: str, session: SessionDep, container: ContainerDep):
    planner = container.assistance.budgets
    if await planner.get_budget_plan(_user_id(session), plan_id) is None:
        raise HTTPException(status_code=404, detail="Budget plan not found.")
    return {"items": await planner.get_budget_insights(_user_id(session), plan_id)}


# ---- stock alerts -----------------------------------------------------------

@router.post("/stock-alerts", status_code=201)
async def create_stock_alert(body: StockAlertIn, session: SessionDep, container: ContainerDep):
    return await container.assistance.stock_alerts.create_stock_alert(
        _user_id(session), body.product_id, body.alert_type, body.threshold, body.product_name
    )


@router.get("/stock-alerts")
async def list_stock_alerts(session: SessionDep, container: ContainerDep):
    items = await container.assistance.stock_alerts.list_stock_alerts(_user_id(session))
    return {"items": items, "count": len(items)}


@router.post("/stock-alerts/check")
async def check_stock_alerts(session: SessionDep, container: ContainerDep):
    fired = await container.assistance.stock_alerts.check_stock_alerts(_user_id(session))
    return {"triggered": fired, "count": len(fired)}


# ---- prices and insights ----------------------------------------------------

@router.get("/products/{product_id}/price-prediction")
async def price_prediction(product_id: str, container: ContainerDep, days: int = Query(30, ge=1, le=365)):
    if container.catalog.get_by_product_id(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found.")
    return container.prices.predict_price(product_id, days)


@router.get("/insights")
async def insights(
    session: SessionDep,
    container: ContainerDep,
    watch: List[str] = Query([], description="Extra product ids to watch for price drops"),
):
    items = await container.assistance.get_smart_recommendations(
        _user_id(session), session.personalization.get_user_profile(), watch
    )
    return {"items": items, "count": len(items)}
