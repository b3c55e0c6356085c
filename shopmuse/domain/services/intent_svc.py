# shopmuse/domain/services/intent_svc.py
from __future__ import annotations
from typing import List, Optional, Protocol, Tuple
import logging

from pydantic import BaseModel, Field

from shopmuse.core.config import Settings
from shopmuse.domain.models.chat import Intent, IntentAnalysis
from shopmuse.domain.services.llm_client import ChatClient, json_minify
from shopmuse.domain.services.prompts import INTENTS, intent_task, system_prompt
from shopmuse.utils.money import first_number

logger = logging.getLogger(__name__)

# Checked in this order; the first rule with a matching keyword wins.
INTENT_RULES: Tuple[Tuple[Intent, Tuple[str, ...], float], ...] = (
    ("product_search", ("find", "search", "looking for"), 0.9),
    ("product_comparison", ("compare", "vs", "difference"), 0.85),
    ("recommendation", ("recommend", "suggest"), 0.8),
    ("budget_shopping", ("budget", "cheap", "affordable"), 0.85),
    ("price_inquiry", ("price", "cost", "expensive"), 0.8),
    ("help_request", ("help", "how to", "guide"), 0.9),
    ("trending_inquiry", ("trending", "popular", "best selling"), 0.85),
)
FALLBACK_CONFIDENCE = 0.6

ENTITY_CATEGORIES = (
    "electronics", "fashion", "home", "kitchen", "sports", "fitness",
    "books", "accessories", "personal care", "grocery", "baby", "kids",
)
ENTITY_PRODUCTS = ("laptop", "phone", "headphones", "shoes", "shirt", "watch", "bag", "camera")


def extract_entities(message: str) -> List[str]:
    """`category:X`, `product:X` tags by substring, then `price:N` for the first number."""
    lower = message.lower()
    entities = [f"category:{c}" for c in ENTITY_CATEGORIES if c in lower]
    entities += [f"product:{p}" for p in ENTITY_PRODUCTS if p in lower]
    price = first_number(lower)
    if price is not None:
        entities.append(f"price:{price}")
    return entities


class IntentClassifier(Protocol):
    name: str

    async def classify(self, message: str) -> IntentAnalysis: ...


class KeywordIntentClassifier:
    name = "keyword"

    def classify_sync(self, message: str) -> IntentAnalysis:
        lower = message.lower()
        for intent, keywords, confidence in INTENT_RULES:
            if any(k in lower for k in keywords):
                return IntentAnalysis(intent=intent, entities=extract_entities(message), confidence=confidence)
        return IntentAnalysis(intent="general_chat", entities=[], confidence=FALLBACK_CONFIDENCE)

    async def classify(self, message: str) -> IntentAnalysis:
        return self.classify_sync(message)


class _IntentOut(BaseModel):
    intent: Intent
    confidence: float = Field(default=0.7, ge=0, le=1)


class LLMIntentClassifier:
    """
    Chat-model classifier. Entities still come from `extract_entities`.
    Any model or validation failure falls back to the keyword rules.
    """
    name = "llm"

    def __init__(self, chat: ChatClient, fallback: Optional[KeywordIntentClassifier] = None):
        self.chat = chat
        self.fallback = fallback or KeywordIntentClassifier()

    async def classify(self, message: str) -> IntentAnalysis:
        try:
            out = await self.chat.complete_json(
                [
                    {"role": "system", "content": system_prompt("intent")},
                    {"role": "user", "content": json_minify({"message": message, "task": intent_task(INTENTS)})},
                ],
                _IntentOut,
                max_tokens=60,
            )
        except Exception as e:
            logger.warning("LLM intent classification failed, using keywords: %s", e)
            return await self.fallback.classify(message)

        entities = extract_entities(message) if out.intent != "general_chat" else []
        return IntentAnalysis(intent=out.intent, entities=entities, confidence=out.confidence)


def build_classifier(settings: Settings, chat: Optional[ChatClient] = None) -> IntentClassifier:
    if settings.INTENT_CLASSIFIER == "keyword":
        return KeywordIntentClassifier()
    if settings.INTENT_CLASSIFIER == "llm":
        if chat is None:
            raise ValueError("INTENT_CLASSIFIER=llm requires an OpenAI chat client")
        return LLMIntentClassifier(chat)
    raise ValueError(f"Unknown INTENT_CLASSIFIER: {settings.INTENT_CLASSIFIER}")
