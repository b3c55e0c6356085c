# shopmuse/domain/services/recommendation_svc.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple
import logging
import random
import time

from shopmuse.domain.models.ai import AIPreferences
from shopmuse.domain.models.product import Product, Recommendation, RecommendationRequest, UserInteraction
from shopmuse.domain.models.profile import PriceRange
from shopmuse.domain.repositories.interaction_repo import InteractionRepo
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.domain.services.constants import (
    CONFIDENCE_BASE, CONFIDENCE_CATEGORY_BONUS, CONFIDENCE_JITTER, CONFIDENCE_MAX, CONFIDENCE_MIN,
    CONFIDENCE_PRICE_BONUS, CONFIDENCE_TAG_BONUS, DEFAULT_AVG_PRICE, POPULAR_TAGS, PRICE_BAND_HIGH,
    PRICE_BAND_LOW, PRICE_PROXIMITY, PROVIDER_SCORE_STEP, PROVIDER_TOP_SCORE, SCORE_BASE,
    SCORE_CATEGORY_BONUS, SCORE_JITTER, SCORE_MAX, SCORE_MIN, SCORE_PRICE_BONUS, SCORE_TAG_BONUS,
)
from shopmuse.domain.services.providers import RecommendationProvider
from shopmuse.utils.money import format_inr

logger = logging.getLogger(__name__)


@dataclass
class SessionSignals:
    """What a session's interaction log says about the shopper."""
    viewed_ids: List[str]
    liked_ids: List[str]
    preferred_categories: List[str]
    avg_price: float

    @property
    def seen(self) -> Set[str]:
        return set(self.viewed_ids) | set(self.liked_ids)


def session_signals(
    interactions: Sequence[UserInteraction],
    catalog: Sequence[Product],
    default_avg_price: float = DEFAULT_AVG_PRICE,
) -> SessionSignals:
    viewed = [i.product_id for i in interactions if i.interaction_type == "view"]
    liked = [i.product_id for i in interactions if i.interaction_type == "like"]
    viewed_set, liked_set = set(viewed), set(liked)

    viewed_products = [p for p in catalog if p.product_id in viewed_set]
    liked_products = [p for p in catalog if p.product_id in liked_set]

    # viewed categories first, then liked, deduped in order
    categories = list(dict.fromkeys([p.category for p in viewed_products] + [p.category for p in liked_products]))

    prices = [p.price for p in viewed_products]
    avg_price = sum(prices) / len(prices) if prices else default_avg_price
    return SessionSignals(viewed, liked, categories, avg_price)


def score_candidate(
    product: Product,
    preferred_categories: Sequence[str],
    avg_price: float,
    rng: random.Random,
) -> Tuple[int, int]:
    """
    Weighted linear score and self-reported confidence for one product.
    Returns (score in [50, 100], confidence in [60, 100]), both rounded.
    """
    score: float = SCORE_BASE
    confidence: float = CONFIDENCE_BASE

    if product.category in preferred_categories:
        score += SCORE_CATEGORY_BONUS
        confidence += CONFIDENCE_CATEGORY_BONUS

    if avg_price > 0 and abs(product.price - avg_price) / avg_price < PRICE_PROXIMITY:
        score += SCORE_PRICE_BONUS
        confidence += CONFIDENCE_PRICE_BONUS

    if any(t in POPULAR_TAGS for t in product.tags):
        score += SCORE_TAG_BONUS
        confidence += CONFIDENCE_TAG_BONUS

    # diversity
    score += rng.random() * SCORE_JITTER
    confidence += rng.random() * CONFIDENCE_JITTER

    score = min(SCORE_MAX, max(SCORE_MIN, score))
    confidence = min(CONFIDENCE_MAX, max(CONFIDENCE_MIN, confidence))
    return round(score), round(confidence)


def explain(product: Product, preferred_categories: Sequence[str], rank: int) -> str:
    price = f"₹{format_inr(product.price)}"
    interest = preferred_categories[0] if preferred_categories else "quality products"
    templates = (
        f"Based on your interest in {interest}, this {product.name} is an excellent choice. "
        f"It offers great value at {price} and has features that align with your preferences.",

        f"This {product.name} caught our AI's attention because it matches your browsing patterns. "
        f"With a price of {price}, it's positioned well within your preferred range and offers the quality you're looking for.",

        f"Our recommendation engine selected this {product.name} specifically for you. "
        f"It's in the {product.category} category and priced at {price}, making it a smart choice based on your shopping behavior.",

        f"Perfect match! This {product.name} aligns with your preferences for {product.category.lower()} products. "
        f"At {price}, it offers excellent features: {', '.join(product.tags[:2])}.",

        f"Highly recommended based on your activity! This {product.name} combines quality and value at {price}. "
        f"It's popular among users with similar preferences in {product.category.lower()}.",
    )
    return templates[rank % len(templates)]


def rank_local(
    catalog: Sequence[Product],
    signals: SessionSignals,
    limit: int,
    rng: random.Random,
) -> List[Recommendation]:
    """
    Rule-based recommendations for one session.

    - Never returns viewed or liked products.
    - Candidates match a preferred category (any, when there are none) OR sit in
      [0.5 x avg, 1.5 x avg]; with fewer than `limit` candidates, every unseen product competes.
    - Output size is min(limit, number of competing products).
    """
    seen = signals.seen
    unseen = [p for p in catalog if p.product_id not in seen]

    def eligible(p: Product) -> bool:
        category_match = not signals.preferred_categories or p.category in signals.preferred_categories
        price_match = signals.avg_price * PRICE_BAND_LOW <= p.price <= signals.avg_price * PRICE_BAND_HIGH
        return category_match or price_match

    candidates = [p for p in unseen if eligible(p)]
    if len(candidates) < limit:
        candidates = unseen

    scored = []
    for p in candidates:
        score, confidence = score_candidate(p, signals.preferred_categories, signals.avg_price, rng)
        scored.append((p, score, confidence))
    scored.sort(key=lambda x: x[1], reverse=True)

    return [
        Recommendation(
            product=p,
            score=score,
            confidence=confidence,
            explanation=explain(p, signals.preferred_categories, rank),
        )
        for rank, (p, score, confidence) in enumerate(scored[:limit])
    ]


class RecommendationEngine:
    """
    Session recommendations: ask the provider first, fill or replace with the local heuristic.
    """

    def __init__(
        self,
        catalog: ProductRepo,
        interactions: InteractionRepo,
        provider: RecommendationProvider,
        *,
        default_avg_price: float = DEFAULT_AVG_PRICE,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.interactions = interactions
        self.provider = provider
        self.default_avg_price = default_avg_price
        self.rng = rng or random.Random()

    async def _signals(self, session_id: str) -> SessionSignals:
        history = await self.interactions.list(session_id)
        return session_signals(history, self.catalog.all(), self.default_avg_price)

    async def generate_recommendations(self, session_id: str, limit: int = 3) -> List[Recommendation]:
        t0 = time.perf_counter()
        signals = await self._signals(session_id)
        preferences = AIPreferences(
            categories=signals.preferred_categories,
            price_range=PriceRange(
                min=max(0.0, signals.avg_price * PRICE_BAND_LOW),
                max=signals.avg_price * PRICE_BAND_HIGH,
            ),
            previous_purchases=signals.liked_ids,
            browsed_products=signals.viewed_ids,
        )

        try:
            ai = await self.provider.get_personalized_recommendations(preferences, self.catalog.all())
        except Exception as e:
            logger.warning("AI recommendations failed, falling back to local: session=%s err=%s", session_id, e)
            return rank_local(self.catalog.all(), signals, limit, self.rng)

        seen = signals.seen
        responses: List[Recommendation] = []
        for i, product in enumerate(ai.products):
            if product.product_id in seen:
                continue
            responses.append(Recommendation(
                product=product,
                explanation=ai.explanations[i] if i < len(ai.explanations) else "Recommended based on your preferences",
                score=max(0, PROVIDER_TOP_SCORE - len(responses) * PROVIDER_SCORE_STEP),
                confidence=ai.confidence,
            ))

        if len(responses) < limit:
            taken = {r.product.product_id for r in responses}
            local = rank_local(self.catalog.all(), signals, limit + len(taken), self.rng)
            responses += [r for r in local if r.product.product_id not in taken][: limit - len(responses)]

        logger.info(
            "recommendations session=%s provider=%s count=%s time=%.3fs",
            session_id, self.provider.name, min(limit, len(responses)), time.perf_counter() - t0,
        )
        return responses[:limit]

    async def generate_local_recommendations(self, session_id: str, limit: int = 3) -> List[Recommendation]:
        signals = await self._signals(session_id)
        return rank_local(self.catalog.all(), signals, limit, self.rng)


async def get_recommendations_api(engine: RecommendationEngine, request: RecommendationRequest) -> List[Recommendation]:
    return await engine.generate_recommendations(request.session_id, request.limit or 3)
