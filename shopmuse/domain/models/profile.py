# shopmuse/domain/models/profile.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

Priority = Literal["price", "quality", "brand", "reviews", "features"]
PersonalityType = Literal["explorer", "researcher", "bargain_hunter", "brand_loyal", "trendsetter"]
LearningStage = Literal["new", "learning", "established", "expert"]
Urgency = Literal["low", "medium", "high"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PriceRange(BaseModel):
    min: float = 0
    max: float = 100000


class Demographics(BaseModel):
    age: Optional[int] = None
    gender: Optional[Literal["male", "female", "other", "prefer_not_to_say"]] = None
    location: Optional[str] = None
    occupation: Optional[str] = None
    income_range: Optional[Literal["under_25k", "25k_50k", "50k_100k", "100k_plus"]] = None


class Preferences(BaseModel):
    categories: List[str] = Field(default_factory=list)     # most recent first, max 10
    brands: List[str] = Field(default_factory=list)
    price_range: PriceRange = Field(default_factory=PriceRange)
    style: List[str] = Field(default_factory=list)
    priorities: List[Priority] = Field(default_factory=lambda: ["quality", "price"])
    shopping_frequency: Literal["daily", "weekly", "monthly", "occasional"] = "monthly"
    preferred_delivery: Literal["fast", "standard", "eco_friendly"] = "standard"
    budget: Optional[Literal["budget", "moderate", "premium"]] = None
    sustainability: Optional[Literal["low", "medium", "high"]] = None


class BrowsingPatterns(BaseModel):
    time_of_day: List[str] = Field(default_factory=list)
    days_of_week: List[str] = Field(default_factory=list)
    session_duration: float = 0       # minutes, last closed session
    pages_per_session: int = 0


class PurchaseHistory(BaseModel):
    total_spent: float = 0
    order_count: int = 0
    average_order_value: float = 0
    most_purchased_category: str = ""
    category_counts: Dict[str, int] = Field(default_factory=dict)
    seasonal_trends: Dict[str, List[str]] = Field(default_factory=dict)


class SearchPatterns(BaseModel):
    common_keywords: List[str] = Field(default_factory=list)  # max 50, oldest dropped first
    search_to_click_ratio: float = 0
    refinement_patterns: List[str] = Field(default_factory=list)


class Behavior(BaseModel):
    browsing_patterns: BrowsingPatterns = Field(default_factory=BrowsingPatterns)
    purchase_history: PurchaseHistory = Field(default_factory=PurchaseHistory)
    search_patterns: SearchPatterns = Field(default_factory=SearchPatterns)


class AIProfile(BaseModel):
    personality_type: PersonalityType = "explorer"
    confidence_score: float = 0.1
    learning_stage: LearningStage = "new"
    preferences_accuracy: float = 0
    last_model_update: datetime = Field(default_factory=_utcnow)


class ShoppingContext(BaseModel):
    current_mood: Optional[str] = None
    current_need: Optional[Literal["gift", "personal", "work", "home", "special_occasion"]] = None
    budget_context: Optional[Literal["tight", "normal", "flexible", "unlimited"]] = None
    time_context: Optional[Literal["immediate", "planned", "future"]] = None


class GiftGivingHabits(BaseModel):
    occasions: List[str] = Field(default_factory=list)
    typical_budget: float = 5000
    preferred_categories: List[str] = Field(default_factory=list)


class SeasonalPreferences(BaseModel):
    festival_preferences: List[str] = Field(default_factory=list)
    seasonal_items: Dict[str, List[str]] = Field(default_factory=dict)
    gift_giving_habits: GiftGivingHabits = Field(default_factory=GiftGivingHabits)


class UserProfile(BaseModel):
    profile_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    last_active: datetime = Field(default_factory=_utcnow)

    demographics: Demographics = Field(default_factory=Demographics)
    preferences: Preferences = Field(default_factory=Preferences)
    behavior: Behavior = Field(default_factory=Behavior)
    ai_profile: AIProfile = Field(default_factory=AIProfile)
    context: ShoppingContext = Field(default_factory=ShoppingContext)
    seasonal: SeasonalPreferences = Field(default_factory=SeasonalPreferences)


class ShoppingMood(BaseModel):
    id: str
    name: str
    description: str
    keywords: List[str]
    categories: List[str]           # empty = all categories
    price_modifier: float
    urgency: Urgency

    model_config = {"frozen": True}
