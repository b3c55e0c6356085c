from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from shopmuse.domain.models.product import Product
from shopmuse.domain.models.profile import PriceRange


class AIPreferences(BaseModel):
    """Preference bundle handed to a RecommendationProvider."""
    categories: List[str] = Field(default_factory=list)
    price_range: PriceRange = Field(default_factory=PriceRange)
    previous_purchases: List[str] = Field(default_factory=list)
    browsed_products: List[str] = Field(default_factory=list)
    mood: Optional[str] = None
    urgency: Optional[str] = None


class AIResponse(BaseModel):
    text: str
    confidence: float
    suggestions: List[str] = Field(default_factory=list)


class SearchResults(BaseModel):
    results: List[Product]
    explanation: str
    confidence: float
    suggestions: List[str] = Field(default_factory=list)
    search_intent: str


class AIRecommendations(BaseModel):
    products: List[Product]
    explanations: List[str]
    confidence: float


class ProductAnalysis(BaseModel):
    analysis: str
    pros: List[str]
    cons: List[str]
    confidence: float
    ai_insight: str
    recommended_for: List[str] = Field(default_factory=list)


class SearchSuggestion(BaseModel):
    text: str
    type: Literal["recent", "trending", "ai"]
