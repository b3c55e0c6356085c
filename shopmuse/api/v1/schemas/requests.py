# api/v1/schemas/requests.py
from datetime import datetime
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from shopmuse.domain.models.assistance import BudgetCategory, StockAlertType
from shopmuse.domain.models.product import InteractionType


class InteractionIn(BaseModel):
    product_id: str
    interaction_type: InteractionType


class ProfileEventIn(BaseModel):
    kind: Literal["product_view", "search", "category_browse", "purchase"]
    product_id: Optional[str] = None
    query: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[float] = Field(default=None, gt=0)


class MoodIn(BaseModel):
    mood_id: str


class ChatIn(BaseModel):
    message: str = Field(..., min_length=1)


class CompareIn(BaseModel):
    product_ids: List[str] = Field(..., min_length=2)


class BudgetPlanIn(BaseModel):
    name: str = "My Budget Plan"
    total_budget: float = Field(default=1000, gt=0)
    categories: Optional[List[BudgetCategory]] = None
    end_date: Optional[datetime] = None


class SpendIn(BaseModel):
    category: str
    amount: float


class StockAlertIn(BaseModel):
    product_id: str
    alert_type: StockAlertType = "back_in_stock"
    threshold: Optional[float] = None
    product_name: Optional[str] = None
