# shopmuse/domain/services/chatbot_svc.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Optional
import logging
import random
import re
import time
import uuid

from shopmuse.domain.models.chat import ChatMessage, ChatMetadata, IntentAnalysis, UserContext
from shopmuse.domain.models.product import Product
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.domain.repositories.profile_repo import ProfileRepo
from shopmuse.domain.services.comparison_svc import ComparisonEngine
from shopmuse.domain.services.constants import MAX_CONTEXT_SEARCHES, MAX_CONTEXT_VIEWED
from shopmuse.domain.services.intent_svc import IntentClassifier
from shopmuse.domain.services.providers import RecommendationProvider
from shopmuse.domain.services.recommendation_svc import RecommendationEngine
from shopmuse.utils.money import first_number, format_inr, rupees

logger = logging.getLogger(__name__)

HistoryKind = Literal["viewed", "liked", "purchased", "searched"]

MAX_SHOWN = 3
MAX_BUDGET_PRODUCTS = 5
MAX_COMPARED = 3
STOP_WORDS = frozenset({
    "the", "and", "for", "with", "which", "what", "between", "compare", "difference", "better", "are", "than",
})

DEFAULT_QUICK_RESPONSES = [
    "What's trending in electronics?",
    "Find budget smartphones",
    "Recommend fitness products",
    "Compare laptop options",
    "Show me deals under ₹5000",
]


def _words(message: str) -> List[str]:
    return [w for w in re.findall(r"[a-z0-9]+", message.lower()) if len(w) >= 3 and w not in STOP_WORDS]


def relevant_products(message: str, products: List[Product], limit: int = MAX_COMPARED) -> List[Product]:
    """Products named in the message first, then category or tag matches."""
    words = _words(message)
    by_name = [p for w in words for p in products if w in p.name.lower()]
    by_meta = [
        p for w in words for p in products
        if w in p.category.lower() or any(w in t.lower() for t in p.tags)
    ]
    return list(dict.fromkeys(by_name + by_meta))[:limit]


class ChatbotService:
    """
    Conversational front door for one session. Each message is classified and
    answered on its own; only `userContext` (recent searches, last intent,
    preferences) carries over between messages.
    """

    def __init__(
        self,
        repo: ProfileRepo,
        catalog: ProductRepo,
        provider: RecommendationProvider,
        classifier: IntentClassifier,
        recommendations: RecommendationEngine,
        comparison: ComparisonEngine,
        session_id: str,
        *,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.repo = repo
        self.catalog = catalog
        self.provider = provider
        self.classifier = classifier
        self.recommendations = recommendations
        self.comparison = comparison
        self.session_id = session_id
        self.rng = rng or random.Random()
        self.clock = clock
        self.context: Optional[UserContext] = None
        self.history: List[ChatMessage] = []

    async def load(self) -> UserContext:
        self.context = await self.repo.get_context()
        if self.context is None:
            self.context = UserContext()
            await self._save()
        return self.context

    async def _save(self) -> None:
        if self.context:
            await self.repo.save_context(self.context)

    # ---- context ------------------------------------------------------------

    def get_user_context(self) -> Optional[UserContext]:
        return self.context

    async def update_user_context(self, updates: Dict[str, Any]) -> Optional[UserContext]:
        if not self.context:
            return None
        self.context = UserContext.model_validate({**self.context.model_dump(), **updates})
        await self._save()
        return self.context

    async def add_to_history(self, kind: HistoryKind, value: str) -> None:
        """Newest first; values already present are left where they are."""
        if not self.context:
            return
        h = self.context.shopping_history
        target, cap = {
            "viewed": (h.viewed, MAX_CONTEXT_VIEWED),
            "liked": (h.liked, None),
            "purchased": (h.purchased, None),
            "searched": (h.searches, MAX_CONTEXT_SEARCHES),
        }[kind]
        if value not in target:
            target.insert(0, value)
            if cap:
                del target[cap:]
        await self._save()

    def get_conversation_history(self) -> List[ChatMessage]:
        return list(self.history)

    def clear_history(self) -> None:
        self.history = []

    def get_quick_responses(self) -> List[str]:
        if not self.context:
            return list(DEFAULT_QUICK_RESPONSES)
        responses = [
            "What's new in my favorite categories?",
            "Find products similar to my recent purchases",
            "Show me deals in my budget range",
            "What's trending this week?",
            "Help me find a gift",
        ]
        if self.context.preferences.categories:
            responses.append(f"Find new {self.context.preferences.categories[0]} products")
        return responses

    def context_string(self) -> str:
        if not self.context:
            return ""
        return (
            f"User has shown interest in: {', '.join(self.context.preferences.categories)}. "
            f"Recent searches: {', '.join(self.context.shopping_history.searches[:3])}"
        )

    # ---- messages -----------------------------------------------------------

    def _message(self, text: str, sender: str, metadata: Optional[ChatMetadata] = None) -> ChatMessage:
        kind = "product" if metadata and metadata.products else "text"
        return ChatMessage(
            message_id=uuid.uuid4().hex, text=text, sender=sender,
            timestamp=self.clock(), type=kind, metadata=metadata,
        )

    async def process_message(self, message: str) -> ChatMessage:
        t0 = time.perf_counter()
        if self.context is None:
            await self.load()
        self.history.append(self._message(message, "user"))

        analysis = await self.classifier.classify(message)
        await self.add_to_history("searched", message)
        session = self.context.current_session
        session.intent = analysis.intent
        session.context.append(message)
        session.last_activity = self.clock()
        await self._save()

        try:
            text, metadata = await self._route(message, analysis)
            reply = self._message(text, "ai", metadata)
        except Exception as e:
            logger.warning("chat handler failed, using canned reply: intent=%s err=%s", analysis.intent, e)
            reply = self._message(self.contextual_response(analysis), "ai")

        self.history.append(reply)
        logger.info(
            "chat session=%s intent=%s confidence=%s time=%.3fs",
            self.session_id, analysis.intent, analysis.confidence, time.perf_counter() - t0,
        )
        return reply

    async def _route(self, message: str, analysis: IntentAnalysis):
        products = self.catalog.all()
        intent = analysis.intent

        if intent == "product_search":
            found = await self.provider.search_products(message, products)
            text = (
                f"{found.search_intent}\n\nI found {len(found.results)} products that match your criteria. "
                "Here are my top recommendations:"
            )
            return text, ChatMetadata(
                products=found.results[:MAX_SHOWN], suggestions=found.suggestions, action_type="search",
            )

        if intent == "recommendation":
            recs = await self.recommendations.generate_recommendations(self.session_id, MAX_SHOWN)
            text = "Based on your preferences and shopping history, here are my personalized recommendations:\n\n"
            text += "\n\n".join(r.explanation for r in recs)
            confidence = sum(r.confidence for r in recs) / len(recs) if recs else None
            return text, ChatMetadata(
                products=[r.product for r in recs], confidence=confidence, action_type="recommend",
            )

        if intent == "product_comparison":
            picked = relevant_products(message, products)
            if len(picked) < 2:
                return (
                    "I'd be happy to help you compare products! Please specify which products you'd like "
                    "to compare, or I can suggest similar products to compare."
                ), None
            result = self.comparison.compare_products([p.product_id for p in picked])
            lines = [f"{i + 1}. {c.name} - {rupees(c.price)} (score {c.score})" for i, c in enumerate(result.products)]
            return f"{result.reasoning}\n\n" + "\n".join(lines), ChatMetadata(
                products=picked, suggestions=result.recommendations, action_type="compare",
            )

        if intent == "budget_shopping":
            cheap = self.budget_products(message)
            lines = [f"{i + 1}. {p.name} - {rupees(p.price)}" for i, p in enumerate(cheap)]
            return "Here are some excellent budget-friendly options that offer great value:\n\n" + "\n".join(lines), \
                ChatMetadata(products=cheap, action_type="budget")

        if intent == "trending_inquiry":
            trending = self.rng.sample(products, min(MAX_SHOWN, len(products)))
            lines = [f"{i + 1}. {p.name} - Popular in {p.category}" for i, p in enumerate(trending)]
            return "Here's what's trending right now based on user activity and seasonal patterns:\n\n" + \
                "\n".join(lines), ChatMetadata(products=trending, action_type="trending")

        answer = await self.provider.answer_product_question(
            message, products[0] if products else None, self.context_string()
        )
        return answer.text, ChatMetadata(suggestions=answer.suggestions, confidence=answer.confidence)

    def budget_products(self, message: str) -> List[Product]:
        """Cheapest products at or under the first number in the message (or the context ceiling)."""
        ceiling = first_number(message)
        if ceiling is None:
            ceiling = self.context.preferences.price_range.max if self.context else 10000
        under = [p for p in self.catalog.all() if p.price <= ceiling]
        return sorted(under, key=lambda p: p.price)[:MAX_BUDGET_PRODUCTS]

    def contextual_response(self, analysis: IntentAnalysis) -> str:
        if not self.context:
            return "I'd be happy to help you with your shopping needs!"
        searches = self.context.shopping_history.searches
        prefs = self.context.preferences

        if analysis.intent == "product_search" and searches:
            return f"I see you've been looking for {searches[0]} recently. Let me help you find what you're looking for now!"
        if analysis.intent == "recommendation" and prefs.categories:
            return f"Based on your interest in {', '.join(prefs.categories)}, I can suggest some great products!"
        if analysis.intent == "budget_shopping":
            return (
                f"I understand you're looking for value! Your typical budget range seems to be "
                f"₹{format_inr(prefs.price_range.min)}-₹{format_inr(prefs.price_range.max)}. "
                "Let me find great deals in that range."
            )
        if analysis.intent == "trending_inquiry":
            return "Great question! Based on your preferences and current trends, here's what's popular..."
        if analysis.intent in ("product_search", "recommendation"):
            return "How can I assist you with your shopping today?"
        return "I'm here to help you find the perfect products for your needs!"
