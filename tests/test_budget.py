import pytest

from shopmuse.domain.models.assistance import BudgetCategory
from shopmuse.domain.repositories.planning_repo import BudgetPlanRepo
from shopmuse.domain.services.budget_svc import BudgetPlanner

from conftest import FIXED_NOW


@pytest.fixture
def planner(store, clock):
    return BudgetPlanner(BudgetPlanRepo(store), clock=clock)


async def test_default_plan(planner):
    plan = await planner.create_budget_plan("u1")
    assert plan.name == "My Budget Plan"
    assert plan.total_budget == 1000
    assert plan.remaining_amount == 1000
    assert plan.spent_amount == 0
    assert plan.alerts == []
    assert (plan.end_date - FIXED_NOW).days == 30
    allocations = {c.name: c.allocated_amount for c in plan.categories}
    assert allocations == {
        "Electronics": 300, "Clothing": 200, "Home & Garden": 200,
        "Books & Media": 100, "Sports & Outdoors": 150, "Other": 50,
    }


async def test_default_categories_scale_with_total(planner):
    plan = await planner.create_budget_plan("u1", total_budget=50000)
    electronics = next(c for c in plan.categories if c.name == "Electronics")
    assert electronics.allocated_amount == 15000
    assert electronics.priority == "high"


async def test_trip_scenario_alerts(planner):
    plan = await planner.create_budget_plan("u1", name="Trip", total_budget=1000)
    plan = await planner.update_budget_spending("u1", plan.plan_id, "Electronics", 850)

    assert plan.spent_amount == 850
    assert plan.remaining_amount == 150
    kinds = {(a.type, a.category, a.severity) for a in plan.alerts}
    assert kinds == {("nearLimit", None, "warning"), ("overspend", "Electronics", "error")}


async def test_remaining_invariant_over_spend_sequence(planner):
    plan = await planner.create_budget_plan("u1", total_budget=2500)
    for category, amount in [
        ("Electronics", 100), ("Clothing", 250.5), ("Other", 40), ("Electronics", -5),
        ("Travel", 700), ("Books & Media", 0), ("Home & Garden", 1999.99),
    ]:
        plan = await planner.update_budget_spending("u1", plan.plan_id, category, amount)
        assert plan.spent_amount == pytest.approx(sum(c.spent_amount for c in plan.categories))
        assert plan.remaining_amount == pytest.approx(plan.total_budget - plan.spent_amount)
    assert plan.spent_amount == pytest.approx(100 + 250.5 + 40 + 700 + 1999.99)


async def test_non_positive_spend_is_ignored(planner):
    plan = await planner.create_budget_plan("u1")
    same = await planner.update_budget_spending("u1", plan.plan_id, "Electronics", -50)
    assert same.spent_amount == 0
    assert same.remaining_amount == 1000


async def test_unknown_plan_returns_none(planner):
    assert await planner.update_budget_spending("u1", "budget_missing", "Electronics", 10) is None
    assert await planner.get_budget_insights("u1", "budget_missing") == []


async def test_unknown_category_is_created_and_flagged(planner):
    plan = await planner.create_budget_plan("u1")
    plan = await planner.update_budget_spending("u1", plan.plan_id, "Travel", 10)
    travel = next(c for c in plan.categories if c.name == "Travel")
    assert travel.allocated_amount == 0 and travel.spent_amount == 10
    assert any(a.type == "overspend" and a.category == "Travel" for a in plan.alerts)


async def test_alerts_are_recomputed_not_accumulated(planner):
    plan = await planner.create_budget_plan("u1")
    await planner.update_budget_spending("u1", plan.plan_id, "Electronics", 850)
    plan = await planner.update_budget_spending("u1", plan.plan_id, "Electronics", 10)
    assert len(plan.alerts) == 2


async def test_category_near_limit(planner):
    plan = await planner.create_budget_plan("u1")
    plan = await planner.update_budget_spending("u1", plan.plan_id, "Clothing", 170)
    assert [(a.type, a.category) for a in plan.alerts] == [("nearLimit", "Clothing")]


async def test_overall_overspend(planner):
    plan = await planner.create_budget_plan(
        "u1", total_budget=100, categories=[BudgetCategory(name="Food", allocated_amount=500)]
    )
    plan = await planner.update_budget_spending("u1", plan.plan_id, "Food", 120)
    assert [(a.type, a.severity) for a in plan.alerts] == [("overspend", "error")]
    assert plan.remaining_amount == -20


async def test_budget_insights(planner):
    plan = await planner.create_budget_plan("u1")
    await planner.update_budget_spending("u1", plan.plan_id, "Electronics", 850)
    insights = await planner.get_budget_insights("u1", plan.plan_id)
    titles = [i.title for i in insights]
    assert titles == ["Budget Alert", "Electronics Over Budget"]
    assert insights[0].priority == "high"
    assert "85%" in insights[0].description


async def test_plans_persist_in_store(planner, store, clock):
    plan = await planner.create_budget_plan("u1", name="Trip")
    await planner.update_budget_spending("u1", plan.plan_id, "Other", 20)

    reopened = BudgetPlanner(BudgetPlanRepo(store), clock=clock)
    loaded = await reopened.get_budget_plan("u1", plan.plan_id)
    assert loaded.name == "Trip"
    assert loaded.spent_amount == 20
    assert await reopened.list_budget_plans("u2") == []
