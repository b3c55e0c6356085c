# shopmuse/domain/services/providers.py
"""
RecommendationProvider implementations.

`StubAIProvider` emulates a model call: it waits a configured delay and answers with
canned text, mostly ignoring the input. `OpenAIProvider` answers the same calls with a
chat model. Callers treat both as unreliable and keep a local heuristic fallback.
"""
from __future__ import annotations
from typing import List, Optional, Protocol, Sequence
import asyncio
import logging

from openai import AsyncOpenAI
from pydantic import BaseModel, Field

from shopmuse.core.config import Settings
from shopmuse.domain.models.ai import (
    AIPreferences,
    AIRecommendations,
    AIResponse,
    ProductAnalysis,
    SearchResults,
)
from shopmuse.domain.models.product import Product
from shopmuse.domain.services.llm_client import ChatClient, json_minify
from shopmuse.domain.services.prompts import recommend_task, search_task, system_prompt

logger = logging.getLogger(__name__)

SEARCH_SUGGESTIONS = ["Show more", "Filter by price", "Sort by rating"]
ANSWER_SUGGESTIONS = ["Tell me more", "Compare with others", "Show similar products"]
MAX_LLM_CANDIDATES = 40


class RecommendationProvider(Protocol):
    name: str

    async def generate_response(self, prompt: str) -> AIResponse: ...
    async def search_products(self, query: str, products: Sequence[Product]) -> SearchResults: ...
    async def get_personalized_recommendations(
        self, preferences: AIPreferences, products: Sequence[Product]
    ) -> AIRecommendations: ...
    async def answer_product_question(
        self, question: str, product: Optional[Product] = None, context: str = ""
    ) -> AIResponse: ...
    async def analyze_product(self, product: Product) -> ProductAnalysis: ...


def _name_matches(query: str, products: Sequence[Product]) -> List[Product]:
    q = query.lower()
    return [p for p in products if q in p.name.lower()]


class StubAIProvider:
    name = "stub"

    def __init__(self, delay_s: float = 0.0):
        self.delay_s = max(0.0, delay_s)

    async def _latency(self) -> None:
        if self.delay_s:
            await asyncio.sleep(self.delay_s)

    async def generate_response(self, prompt: str) -> AIResponse:
        await self._latency()
        return AIResponse(
            text="I can help with product recommendations and shopping assistance!",
            confidence=80,
            suggestions=["Show products", "Compare items", "Find deals"],
        )

    async def search_products(self, query: str, products: Sequence[Product]) -> SearchResults:
        await self._latency()
        found = _name_matches(query, products)
        return SearchResults(
            results=found[:10],
            explanation=f"Found {len(found)} products.",
            confidence=85,
            suggestions=list(SEARCH_SUGGESTIONS),
            search_intent=f'Looking for products matching "{query}"',
        )

    async def get_personalized_recommendations(
        self, preferences: AIPreferences, products: Sequence[Product]
    ) -> AIRecommendations:
        await self._latency()
        picks = [p for p in products if (p.rating or 0) >= 4.0][:5]
        return AIRecommendations(
            products=picks,
            explanations=[f"{p.name} - Great choice based on your preferences" for p in picks],
            confidence=80,
        )

    async def answer_product_question(
        self, question: str, product: Optional[Product] = None, context: str = ""
    ) -> AIResponse:
        await self._latency()
        text = (
            f"Based on {product.name}, I can help answer your question about this product."
            if product else "I can help answer your product-related questions!"
        )
        return AIResponse(text=text, confidence=75, suggestions=list(ANSWER_SUGGESTIONS))

    async def analyze_product(self, product: Product) -> ProductAnalysis:
        await self._latency()
        rating = product.rating if product.rating is not None else "unrated"
        return ProductAnalysis(
            analysis=f"{product.name} appears to be a good choice with {rating}/5 rating.",
            pros=["Good rating", "Popular choice"],
            cons=["Consider checking reviews"],
            confidence=82,
            ai_insight=f"This product has strong customer satisfaction based on its {rating}/5 rating.",
            recommended_for=["General users", "Value seekers"],
        )


# =============================================================================
#                               OPENAI PROVIDER
# =============================================================================

class _Pick(BaseModel):
    product_id: str = Field(..., min_length=1)
    explanation: str = ""


class _PickResponse(BaseModel):
    results: List[_Pick]
    confidence: float = Field(default=80, ge=0, le=100)


class _SearchSummary(BaseModel):
    search_intent: str
    suggestions: List[str] = Field(default_factory=list)


class _Analysis(BaseModel):
    analysis: str
    pros: List[str]
    cons: List[str]
    recommended_for: List[str] = Field(default_factory=list)


def _compact(p: Product) -> dict:
    return {
        "product_id": p.product_id,
        "name": p.name,
        "category": p.category,
        "price": p.price,
        "tags": p.tags,
        "description": p.description[:160],
    }


def _shortlist(preferences: AIPreferences, products: Sequence[Product]) -> List[Product]:
    """Trim the catalog before prompting: drop seen items, prefer matching categories/prices."""
    seen = set(preferences.browsed_products) | set(preferences.previous_purchases)
    pool = [p for p in products if p.product_id not in seen]
    pr = preferences.price_range
    cats = set(preferences.categories)
    preferred = [p for p in pool if (not cats or p.category in cats) and pr.min <= p.price <= pr.max]
    rest = [p for p in pool if p not in preferred]
    return (preferred + rest)[:MAX_LLM_CANDIDATES]


class OpenAIProvider:
    name = "openai"

    def __init__(self, chat: ChatClient, limit: int = 5):
        self.chat = chat
        self.limit = limit

    async def generate_response(self, prompt: str) -> AIResponse:
        text = await self.chat.complete(
            [{"role": "system", "content": system_prompt("answer")}, {"role": "user", "content": prompt}],
            max_tokens=400,
        )
        return AIResponse(text=text.strip(), confidence=80, suggestions=["Show products", "Compare items", "Find deals"])

    async def search_products(self, query: str, products: Sequence[Product]) -> SearchResults:
        found = _name_matches(query, products)
        summary = await self.chat.complete_json(
            [
                {"role": "system", "content": system_prompt("search")},
                {"role": "user", "content": json_minify({"query": query, "task": search_task()})},
            ],
            _SearchSummary,
            max_tokens=200,
        )
        return SearchResults(
            results=found[:10],
            explanation=f"Found {len(found)} products.",
            confidence=85,
            suggestions=summary.suggestions[:3] or list(SEARCH_SUGGESTIONS),
            search_intent=summary.search_intent,
        )

    async def get_personalized_recommendations(
        self, preferences: AIPreferences, products: Sequence[Product]
    ) -> AIRecommendations:
        candidates = _shortlist(preferences, products)
        if not candidates:
            return AIRecommendations(products=[], explanations=[], confidence=0)
        payload = {
            "shopper": preferences.model_dump(mode="json"),
            "candidates": [_compact(p) for p in candidates],
            "task": recommend_task(self.limit),
        }
        ranked = await self.chat.complete_json(
            [
                {"role": "system", "content": system_prompt("recommend")},
                {"role": "user", "content": json_minify(payload)},
            ],
            _PickResponse,
        )
        by_id = {p.product_id: p for p in candidates}
        picks: List[Product] = []
        explanations: List[str] = []
        for r in ranked.results:
            # ignore hallucinated ids and duplicates
            if r.product_id in by_id and by_id[r.product_id] not in picks:
                picks.append(by_id[r.product_id])
                explanations.append(r.explanation or "Recommended based on your preferences")
        logger.info("openai recommendations picked=%s of candidates=%s", len(picks), len(candidates))
        return AIRecommendations(
            products=picks[: self.limit], explanations=explanations[: self.limit], confidence=ranked.confidence
        )

    async def answer_product_question(
        self, question: str, product: Optional[Product] = None, context: str = ""
    ) -> AIResponse:
        parts = []
        if context:
            parts.append(f"Shopper context: {context}")
        if product:
            parts.append(f"Product: {json_minify(_compact(product))}")
        parts.append(f"Question: {question}")
        text = await self.chat.complete(
            [{"role": "system", "content": system_prompt("answer")}, {"role": "user", "content": "\n".join(parts)}],
            max_tokens=400,
        )
        return AIResponse(text=text.strip(), confidence=75, suggestions=list(ANSWER_SUGGESTIONS))

    async def analyze_product(self, product: Product) -> ProductAnalysis:
        out = await self.chat.complete_json(
            [
                {"role": "system", "content": system_prompt("answer")},
                {"role": "user", "content": (
                    "Analyze this product. Return JSON "
                    '{"analysis":"...","pros":["..."],"cons":["..."],"recommended_for":["..."]}\n'
                    + json_minify(_compact(product))
                )},
            ],
            _Analysis,
        )
        return ProductAnalysis(
            analysis=out.analysis,
            pros=out.pros,
            cons=out.cons,
            confidence=82,
            ai_insight=out.analysis,
            recommended_for=out.recommended_for,
        )


def build_chat_client(settings: Settings) -> ChatClient:
    if not settings.OPENAI_API_KEY:
        raise ValueError("OPENAI_API_KEY is required for the openai provider/classifier")
    return ChatClient(
        AsyncOpenAI(api_key=settings.OPENAI_API_KEY),
        model=settings.OPENAI_CHAT_MODEL,
        timeout_s=settings.openai_timeout_s,
    )


def build_provider(settings: Settings) -> RecommendationProvider:
    """Select the provider named by AI_PROVIDER."""
    if settings.AI_PROVIDER == "stub":
        return StubAIProvider(delay_s=settings.AI_STUB_DELAY_S)
    if settings.AI_PROVIDER == "openai":
        return OpenAIProvider(build_chat_client(settings))
    raise ValueError(f"Unknown AI_PROVIDER: {settings.AI_PROVIDER}")
