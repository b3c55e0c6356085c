# shopmuse/domain/services/personalization_svc.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
import random
import uuid

from shopmuse.domain.models.ai import AIPreferences, AIRecommendations
from shopmuse.domain.models.product import Product
from shopmuse.domain.models.profile import LearningStage, PriceRange, ShoppingMood, UserProfile
from shopmuse.domain.repositories.profile_repo import ProfileRepo
from shopmuse.domain.services.constants import (
    BARGAIN_AOV, BRAND_LOYAL_BRANDS, EXPLORER_CATEGORIES, MAX_COMMON_KEYWORDS,
    MAX_PROFILE_CATEGORIES, RESEARCHER_KEYWORDS,
)
from shopmuse.domain.services.providers import RecommendationProvider
from shopmuse.utils.money import format_inr

logger = logging.getLogger(__name__)

# budgets and stock alerts are stored under the profile id
IMMUTABLE_PROFILE_FIELDS = ("profile_id", "created_at")

SHOPPING_MOODS: List[ShoppingMood] = [
    ShoppingMood(
        id="cozy_weekend",
        name="Cozy Weekend",
        description="Looking for comfort items for a relaxing weekend",
        keywords=["comfort", "relaxing", "cozy", "weekend", "home"],
        categories=["Home & Kitchen", "Fashion", "Books & Stationery"],
        price_modifier=0.8,
        urgency="low",
    ),
    ShoppingMood(
        id="work_mode",
        name="Work Essentials",
        description="Professional items to enhance productivity",
        keywords=["professional", "work", "office", "productivity", "business"],
        categories=["Electronics", "Books & Stationery", "Fashion"],
        price_modifier=1.2,
        urgency="medium",
    ),
    ShoppingMood(
        id="fitness_motivated",
        name="Fitness Journey",
        description="Ready to invest in health and fitness",
        keywords=["fitness", "health", "workout", "active", "strong"],
        categories=["Sports & Fitness", "Personal Care"],
        price_modifier=1.1,
        urgency="medium",
    ),
    ShoppingMood(
        id="festive_celebration",
        name="Festival Ready",
        description="Preparing for festivals and celebrations",
        keywords=["festival", "celebration", "traditional", "festive", "special"],
        categories=["Fashion", "Home & Kitchen", "Accessories"],
        price_modifier=1.3,
        urgency="high",
    ),
    ShoppingMood(
        id="gift_hunting",
        name="Perfect Gift",
        description="Finding the ideal gift for someone special",
        keywords=["gift", "present", "surprise", "special", "thoughtful"],
        categories=["Electronics", "Fashion", "Accessories", "Books & Stationery"],
        price_modifier=1.15,
        urgency="high",
    ),
    ShoppingMood(
        id="bargain_hunting",
        name="Smart Savings",
        description="Looking for the best deals and value",
        keywords=["deal", "bargain", "save", "budget", "value"],
        categories=[],
        price_modifier=0.6,
        urgency="low",
    ),
]


def get_mood(mood_id: str) -> Optional[ShoppingMood]:
    return next((m for m in SHOPPING_MOODS if m.id == mood_id), None)


def seasonal_suggestions(month: int) -> List[str]:
    """Indian shopping seasons; `month` is 1-12."""
    if 10 <= month <= 12:
        return ["Traditional wear", "Home decor", "Gifts", "Electronics deals"]
    if 3 <= month <= 6:
        return ["Cooling appliances", "Summer clothing", "Travel accessories", "Health products"]
    if 7 <= month <= 9:
        return ["Monsoon gear", "Indoor entertainment", "Comfort food", "Home essentials"]
    return ["Winter clothing", "Warm accessories", "Health supplements", "Comfort items"]


def _learning_stage(confidence: float) -> LearningStage:
    if confidence < 0.25:
        return "new"
    if confidence < 0.5:
        return "learning"
    if confidence < 0.8:
        return "established"
    return "expert"


def _touch(items: List[str], value: str, cap: int) -> None:
    """Move or insert `value` at the front, keep at most `cap` entries."""
    if value in items:
        items.remove(value)
    items.insert(0, value)
    del items[cap:]


def new_profile() -> UserProfile:
    now = datetime.now(timezone.utc)
    return UserProfile(profile_id=f"user_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:8]}")


class PersonalizationService:
    """
    Owns one shopper's UserProfile: tracked interactions, moods, archetype and
    profile-based recommendations. Every mutation is written back to the store.
    """

    def __init__(
        self,
        repo: ProfileRepo,
        provider: RecommendationProvider,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.repo = repo
        self.provider = provider
        self.rng = rng or random.Random()
        self.clock = clock
        self.profile: Optional[UserProfile] = None
        self.session_data: Dict[str, Any] = {}

    # ---- lifecycle ----------------------------------------------------------

    async def load(self) -> UserProfile:
        self.profile = await self.repo.get_profile()
        if self.profile is None:
            self.profile = new_profile()
            logger.info("profile created id=%s", self.profile.profile_id)
        self.session_data = {"start_time": self.clock(), "page_views": 0, "interactions": 0, "search_queries": []}
        await self._touch_active()
        return self.profile

    async def close(self) -> None:
        """Record session duration and refresh the archetype."""
        if not self.profile:
            return
        start = self.session_data.get("start_time") or self.clock()
        bp = self.profile.behavior.browsing_patterns
        bp.session_duration = max(0.0, (self.clock() - start).total_seconds() / 60)
        bp.pages_per_session = self.session_data.get("page_views", 0)
        await self.update_personality_type()

    async def _save(self) -> None:
        if self.profile:
            await self.repo.save_profile(self.profile)

    async def _touch_active(self) -> None:
        if self.profile:
            self.profile.last_active = self.clock()
            await self._save()

    # ---- profile ------------------------------------------------------------

    def get_user_profile(self) -> Optional[UserProfile]:
        return self.profile

    async def update_profile(self, updates: Dict[str, Any]) -> Optional[UserProfile]:
        """Shallow merge of top-level sections, validated as a whole. Identity fields are kept."""
        if not self.profile:
            return None
        updates = {k: v for k, v in updates.items() if k not in IMMUTABLE_PROFILE_FIELDS}
        merged = {**self.profile.model_dump(), **updates}
        self.profile = UserProfile.model_validate(merged)
        await self._touch_active()
        return self.profile

    async def track_interaction(self, kind: str, data: Any) -> None:
        if not self.profile:
            return
        self.session_data["interactions"] = self.session_data.get("interactions", 0) + 1

        if kind == "product_view":
            self._track_product_view(data)
        elif kind == "search":
            self._track_search(data)
        elif kind == "category_browse":
            _touch(self.profile.preferences.categories, data, MAX_PROFILE_CATEGORIES)
        elif kind == "purchase":
            self._track_purchase(data["product"], float(data["amount"]))
        else:
            logger.debug("untracked interaction kind=%s", kind)

        await self._touch_active()

    def _track_product_view(self, product: Product) -> None:
        prefs = self.profile.preferences
        self.session_data["page_views"] = self.session_data.get("page_views", 0) + 1
        _touch(prefs.categories, product.category, MAX_PROFILE_CATEGORIES)

        # widen the ceiling when the shopper looks slightly above it
        pr = prefs.price_range
        if pr.min < product.price < pr.max * 1.5:
            pr.max = max(pr.max, product.price * 1.2)

    def _track_search(self, query: str) -> None:
        keywords = self.profile.behavior.search_patterns.common_keywords
        keywords.append(query.lower())
        del keywords[:-MAX_COMMON_KEYWORDS]
        self.session_data.setdefault("search_queries", []).append(query)

    def _track_purchase(self, product: Product, amount: float) -> None:
        history = self.profile.behavior.purchase_history
        history.total_spent += amount
        history.order_count += 1
        history.average_order_value = history.total_spent / history.order_count
        history.category_counts[product.category] = history.category_counts.get(product.category, 0) + 1
        history.most_purchased_category = max(history.category_counts, key=history.category_counts.get)

    async def update_personality_type(self) -> None:
        if not self.profile:
            return
        behavior = self.profile.behavior
        prefs = self.profile.preferences
        ai = self.profile.ai_profile

        if "price" in prefs.priorities and behavior.purchase_history.average_order_value < BARGAIN_AOV:
            ai.personality_type = "bargain_hunter"
        elif len(prefs.categories) > EXPLORER_CATEGORIES:
            ai.personality_type = "explorer"
        elif len(behavior.search_patterns.common_keywords) > RESEARCHER_KEYWORDS:
            ai.personality_type = "researcher"
        elif len(prefs.brands) > BRAND_LOYAL_BRANDS:
            ai.personality_type = "brand_loyal"
        else:
            ai.personality_type = "trendsetter"

        ai.confidence_score = min(
            1.0, (behavior.browsing_patterns.session_duration + len(prefs.categories) * 0.1) / 10
        )
        ai.learning_stage = _learning_stage(ai.confidence_score)
        ai.last_model_update = self.clock()
        await self._save()

    # ---- moods --------------------------------------------------------------

    def get_shopping_moods(self) -> List[ShoppingMood]:
        return list(SHOPPING_MOODS)

    async def set_shopping_mood(self, mood_id: str) -> Optional[ShoppingMood]:
        mood = get_mood(mood_id)
        if mood and self.profile:
            self.profile.context.current_mood = mood.name
            await self._save()
        return mood

    def get_current_mood(self) -> Optional[ShoppingMood]:
        if not self.profile or not self.profile.context.current_mood:
            return None
        return next((m for m in SHOPPING_MOODS if m.name == self.profile.context.current_mood), None)

    def get_seasonal_recommendations(self) -> List[str]:
        return seasonal_suggestions(self.clock().month)

    # ---- recommendations ----------------------------------------------------

    def build_ai_preferences(self, mood: Optional[ShoppingMood] = None) -> AIPreferences:
        prefs = self.profile.preferences
        if not mood:
            return AIPreferences(categories=list(prefs.categories), price_range=prefs.price_range.model_copy())
        return AIPreferences(
            categories=list(mood.categories) or list(prefs.categories),
            price_range=PriceRange(
                min=prefs.price_range.min * mood.price_modifier,
                max=prefs.price_range.max * mood.price_modifier,
            ),
            mood=mood.name,
            urgency=mood.urgency,
        )

    async def get_personalized_recommendations(
        self, products: Sequence[Product], mood: Optional[ShoppingMood] = None
    ) -> AIRecommendations:
        if not self.profile:
            return AIRecommendations(
                products=list(products[:3]), explanations=["Getting to know your preferences"], confidence=0.1
            )
        try:
            result = await self.provider.get_personalized_recommendations(self.build_ai_preferences(mood), products)
        except Exception as e:
            logger.warning("AI recommendations failed, using local personalization: %s", e)
            return self.get_local_personalized_recommendations(products, mood)
        if not result.products:
            return self.get_local_personalized_recommendations(products, mood)
        return result

    def get_local_personalized_recommendations(
        self, products: Sequence[Product], mood: Optional[ShoppingMood] = None
    ) -> AIRecommendations:
        prefs = self.profile.preferences
        filtered = list(products)

        if prefs.categories:
            allowed = mood.categories if mood and mood.categories else prefs.categories
            filtered = [p for p in filtered if p.category in allowed]

        low, high = prefs.price_range.min, prefs.price_range.max
        if mood:
            low, high = low * mood.price_modifier, high * mood.price_modifier
        filtered = [p for p in filtered if low <= p.price <= high]

        scored = sorted(filtered, key=lambda p: self.relevance_score(p, mood), reverse=True)[:3]
        return AIRecommendations(
            products=scored,
            explanations=[self._explanation(p, mood) for p in scored],
            confidence=self.profile.ai_profile.confidence_score,
        )

    def relevance_score(self, product: Product, mood: Optional[ShoppingMood] = None) -> float:
        prefs = self.profile.preferences
        score = 0.0

        # more recent categories weigh more
        if product.category in prefs.categories:
            score += (MAX_PROFILE_CATEGORIES - prefs.categories.index(product.category)) * 0.2

        mid = (prefs.price_range.min + prefs.price_range.max) / 2
        if mid > 0:
            score += max(0.0, 1 - abs(product.price - mid) / mid) * 0.3

        if mood and mood.keywords:
            text = f"{product.name} {product.description} {' '.join(product.tags)}".lower()
            hits = sum(1 for k in mood.keywords if k.lower() in text)
            score += hits / len(mood.keywords) * 0.3

        return score + self.rng.random() * 0.2

    def _explanation(self, product: Product, mood: Optional[ShoppingMood]) -> str:
        options = [
            f"Perfect match for your {product.category.lower()} preferences",
            f"Great value at ₹{format_inr(product.price)} within your budget",
            "Highly rated product that aligns with your shopping patterns",
            "Trending choice among users with similar preferences",
        ]
        if mood:
            options.insert(0, f"Ideal for your {mood.name.lower()} mood")
        return self.rng.choice(options)
