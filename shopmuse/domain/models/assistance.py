from datetime import datetime, timezone
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

BudgetPriority = Literal["high", "medium", "low"]
AlertType = Literal["overspend", "nearLimit", "goodDeal", "budgetGoal"]
Severity = Literal["info", "warning", "error"]
StockAlertType = Literal["back_in_stock", "low_stock", "price_drop", "deal_alert"]
PriceDirection = Literal["up", "down", "stable"]
Importance = Literal["critical", "important", "moderate", "minor"]
InsightType = Literal["price_trend", "deal_opportunity", "budget_tip", "seasonal_advice", "alternative_product"]
InsightPriority = Literal["high", "medium", "low"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Budget planning ---------------------------------------------------------

class BudgetCategory(BaseModel):
    name: str
    allocated_amount: float = Field(ge=0)
    spent_amount: float = 0
    percentage: float = 0
    priority: BudgetPriority = "medium"


class BudgetAlert(BaseModel):
    type: AlertType
    message: str
    severity: Severity
    category: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class BudgetPlan(BaseModel):
    plan_id: str
    name: str
    total_budget: float = Field(gt=0)
    spent_amount: float = 0
    remaining_amount: float
    categories: List[BudgetCategory]
    alerts: List[BudgetAlert] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    end_date: datetime


# --- Stock alerts ------------------------------------------------------------

class StockAlert(BaseModel):
    alert_id: str
    product_id: str
    product_name: str
    alert_type: StockAlertType = "back_in_stock"
    threshold: Optional[float] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    triggered_at: Optional[datetime] = None


# --- Price prediction --------------------------------------------------------

class PricePoint(BaseModel):
    date: datetime
    price: float
    source: str = "marketplace"


class SeasonalTrend(BaseModel):
    season: Literal["spring", "summer", "fall", "winter", "holiday", "backtoschool"]
    average_discount: float
    best_deal_months: List[str]


class PricePrediction(BaseModel):
    product_id: str
    current_price: float
    predicted_price: float
    price_direction: PriceDirection
    confidence: float
    best_buy_time: str
    price_history: List[PricePoint]
    seasonal_trends: List[SeasonalTrend]


# --- Comparison --------------------------------------------------------------

class ComparisonFactor(BaseModel):
    name: str
    weight: float
    importance: Importance


class ProductComparison(BaseModel):
    product_id: str
    name: str
    price: float
    rating: float
    features: List[str]
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)
    score: float = 0
    value_rating: float


class ComparisonResult(BaseModel):
    products: List[ProductComparison]
    winner: str
    reasoning: str
    factors: List[ComparisonFactor]
    recommendations: List[str]


# --- Insights ----------------------------------------------------------------

class ShoppingInsight(BaseModel):
    type: InsightType
    title: str
    description: str
    action: str
    priority: InsightPriority
    savings_amount: Optional[float] = None
    confidence: float
