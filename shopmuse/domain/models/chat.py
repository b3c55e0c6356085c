from datetime import datetime, timezone
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from shopmuse.domain.models.product import Product
from shopmuse.domain.models.profile import PriceRange

Intent = Literal[
    "product_search",
    "product_comparison",
    "recommendation",
    "budget_shopping",
    "price_inquiry",
    "help_request",
    "trending_inquiry",
    "general_chat",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IntentAnalysis(BaseModel):
    intent: Intent
    entities: List[str] = Field(default_factory=list)
    confidence: float = Field(ge=0, le=1)


class ChatMetadata(BaseModel):
    products: Optional[List[Product]] = None
    suggestions: Optional[List[str]] = None
    confidence: Optional[float] = None
    action_type: Optional[str] = None


class ChatMessage(BaseModel):
    message_id: str
    text: str
    sender: Literal["user", "ai"]
    timestamp: datetime = Field(default_factory=_utcnow)
    type: Literal["text", "product", "recommendation", "comparison"] = "text"
    metadata: Optional[ChatMetadata] = None


class ContextPreferences(BaseModel):
    categories: List[str] = Field(default_factory=list)
    price_range: PriceRange = Field(default_factory=PriceRange)
    style: List[str] = Field(default_factory=list)
    language: Literal["en", "hi", "ta", "bn"] = "en"


class ShoppingHistory(BaseModel):
    viewed: List[str] = Field(default_factory=list)     # max 50
    liked: List[str] = Field(default_factory=list)
    purchased: List[str] = Field(default_factory=list)
    searches: List[str] = Field(default_factory=list)   # max 20


class CurrentSession(BaseModel):
    intent: str = ""
    context: List[str] = Field(default_factory=list)
    last_activity: datetime = Field(default_factory=_utcnow)


class UserContext(BaseModel):
    name: Optional[str] = None
    preferences: ContextPreferences = Field(default_factory=ContextPreferences)
    shopping_history: ShoppingHistory = Field(default_factory=ShoppingHistory)
    current_session: CurrentSession = Field(default_factory=CurrentSession)
