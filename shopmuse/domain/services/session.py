# shopmuse/domain/services/session.py
"""
Explicit wiring instead of module-level singletons.

`AppContainer` holds what every session shares (settings, store, catalog,
provider, classifier, planning tools). `ShopSession` holds what belongs to one
shopper (profile, chat context, recommendation engine, search) and lives
between `open_session` and `close_session`.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, Dict, Optional
import logging
import random
import uuid

from shopmuse.core.config import Settings
from shopmuse.domain.repositories.interaction_repo import InteractionRepo
from shopmuse.domain.repositories.kv_store import KeyValueStore
from shopmuse.domain.repositories.planning_repo import BudgetPlanRepo, StockAlertRepo
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.domain.repositories.profile_repo import ProfileRepo
from shopmuse.domain.repositories.recent_search_repo import RecentSearchRepo
from shopmuse.domain.services.assistance_svc import IntelligentAssistanceService
from shopmuse.domain.services.budget_svc import BudgetPlanner
from shopmuse.domain.services.chatbot_svc import ChatbotService
from shopmuse.domain.services.comparison_svc import ComparisonEngine
from shopmuse.domain.services.intent_svc import IntentClassifier
from shopmuse.domain.services.personalization_svc import PersonalizationService
from shopmuse.domain.services.price_svc import PricePredictor
from shopmuse.domain.services.providers import RecommendationProvider
from shopmuse.domain.services.recommendation_svc import RecommendationEngine
from shopmuse.domain.services.search_svc import SmartSearch
from shopmuse.domain.services.stock_alert_svc import StockAlertService

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_session_id() -> str:
    return f"session_{uuid.uuid4().hex}"


class ShopSession:
    def __init__(self, container: "AppContainer", session_id: str):
        self.session_id = session_id
        self.store = container.store.namespace(f"session:{session_id}")
        rng, clock = container.rng, container.clock

        profiles = ProfileRepo(self.store)
        self.personalization = PersonalizationService(profiles, container.provider, rng=rng, clock=clock)
        self.recommendations = RecommendationEngine(
            container.catalog,
            container.interactions,
            container.provider,
            default_avg_price=container.settings.default_avg_price,
            rng=rng,
        )
        self.chatbot = ChatbotService(
            profiles,
            container.catalog,
            container.provider,
            container.classifier,
            self.recommendations,
            container.comparison,
            session_id,
            rng=rng,
            clock=clock,
        )
        self.search = SmartSearch(
            container.catalog, RecentSearchRepo(self.store), container.provider, self.personalization
        )

    async def open(self) -> "ShopSession":
        await self.personalization.load()
        await self.chatbot.load()
        return self

    async def close(self) -> None:
        await self.personalization.close()


class AppContainer:
    """Process-wide services. Build once at startup; close at shutdown."""

    def __init__(
        self,
        settings: Settings,
        store: KeyValueStore,
        catalog: ProductRepo,
        provider: RecommendationProvider,
        classifier: IntentClassifier,
        *,
        rng: Optional[random.Random] = None,
        clock: Clock = utcnow,
    ):
        self.settings = settings
        self.store = store
        self.catalog = catalog
        self.provider = provider
        self.classifier = classifier
        self.rng = rng or random.Random()
        self.clock = clock

        # interactions are one global log filtered by session id
        self.interactions = InteractionRepo(store)
        self.comparison = ComparisonEngine(catalog, price_scale=settings.COMPARISON_PRICE_SCALE, rng=self.rng)
        self.prices = PricePredictor(history_days=settings.price_history_days, rng=self.rng, clock=clock)
        self.prices.seed_from_catalog(catalog.all())
        self.assistance = IntelligentAssistanceService(
            catalog,
            self.comparison,
            BudgetPlanner(BudgetPlanRepo(store), clock=clock),
            StockAlertService(StockAlertRepo(store), catalog, rng=self.rng, clock=clock),
            self.prices,
            clock=clock,
        )
        self.sessions: Dict[str, ShopSession] = {}

    async def open_session(self, session_id: Optional[str] = None) -> ShopSession:
        """Return the live session for `session_id`, opening (or creating) it when needed."""
        session_id = session_id or generate_session_id()
        if session_id in self.sessions:
            return self.sessions[session_id]
        session = await ShopSession(self, session_id).open()
        self.sessions[session_id] = session
        logger.info("session opened id=%s live=%s", session_id, len(self.sessions))
        return session

    async def open_transient_session(self) -> ShopSession:
        """One-request session under a fresh id. Not registered; the caller closes it."""
        session = await ShopSession(self, generate_session_id()).open()
        logger.debug("transient session opened id=%s", session.session_id)
        return session

    async def close_session(self, session_id: str) -> bool:
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        await session.close()
        logger.info("session closed id=%s live=%s", session_id, len(self.sessions))
        return True

    async def aclose(self) -> None:
        for session_id in list(self.sessions):
            await self.close_session(session_id)
