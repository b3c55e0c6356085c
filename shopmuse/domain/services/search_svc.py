# shopmuse/domain/services/search_svc.py
from __future__ import annotations
from typing import List, Optional
import logging
import time

from shopmuse.domain.models.ai import SearchResults, SearchSuggestion
from shopmuse.domain.models.product import Product
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.domain.repositories.recent_search_repo import RecentSearchRepo
from shopmuse.domain.services.personalization_svc import PersonalizationService
from shopmuse.domain.services.providers import RecommendationProvider

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 6
MAX_PRODUCT_SUGGESTIONS = 3

DEFAULT_SUGGESTIONS = (
    SearchSuggestion(text="wireless bluetooth headphones", type="trending"),
    SearchSuggestion(text="laptop under 50000", type="trending"),
    SearchSuggestion(text="smart fitness tracker", type="ai"),
    SearchSuggestion(text="premium smartphone accessories", type="ai"),
)

# (trigger words, suggestions)
CONTEXT_SUGGESTIONS = (
    (("wireless", "bluetooth"), ("wireless bluetooth earbuds", "wireless charging pad")),
    (("laptop", "computer"), ("laptop under 30000", "laptop accessories bundle")),
    (("phone", "mobile"), ("smartphone under 20000", "phone case and screen protector")),
)


def _matches(query: str, p: Product, with_description: bool = False) -> bool:
    return (
        query in p.name.lower()
        or query in p.category.lower()
        or any(query in t.lower() for t in p.tags)
        or (with_description and query in p.description.lower())
    )


class SmartSearch:
    """Provider-backed product search with recent searches and suggestions."""

    def __init__(
        self,
        catalog: ProductRepo,
        recent: RecentSearchRepo,
        provider: RecommendationProvider,
        personalization: Optional[PersonalizationService] = None,
    ):
        self.catalog = catalog
        self.recent = recent
        self.provider = provider
        self.personalization = personalization

    async def search(self, query: str) -> Optional[SearchResults]:
        """None for a blank query; nothing is recorded in that case."""
        q = (query or "").strip()
        if not q:
            return None

        t0 = time.perf_counter()
        await self.recent.push(q)
        if self.personalization:
            await self.personalization.track_interaction("search", q)

        try:
            results = await self.provider.search_products(q, self.catalog.all())
        except Exception as e:
            logger.warning("AI search failed, using catalog match: query=%r err=%s", q, e)
            lower = q.lower()
            found = [p for p in self.catalog.all() if _matches(lower, p, with_description=True)]
            results = SearchResults(
                results=found,
                explanation=f"Found {len(found)} products.",
                confidence=50,
                search_intent=f'Found {len(found)} products matching "{q}"',
            )

        logger.info("search query=%r results=%s time=%.3fs", q, len(results.results), time.perf_counter() - t0)
        return results

    async def recent_searches(self) -> List[str]:
        return await self.recent.list()

    async def default_suggestions(self) -> List[SearchSuggestion]:
        recent = [SearchSuggestion(text=s, type="recent") for s in await self.recent.list()]
        return (recent + list(DEFAULT_SUGGESTIONS))[:MAX_SUGGESTIONS]

    async def suggestions(self, query: str = "") -> List[SearchSuggestion]:
        lower = (query or "").strip().lower()
        if not lower:
            return await self.default_suggestions()

        out: List[SearchSuggestion] = []
        for triggers, texts in CONTEXT_SUGGESTIONS:
            if any(t in lower for t in triggers):
                out += [SearchSuggestion(text=t, type="ai") for t in texts]

        products = [p for p in self.catalog.all() if _matches(lower, p)][:MAX_PRODUCT_SUGGESTIONS]
        out += [SearchSuggestion(text=p.name, type="trending") for p in products]
        return out[:MAX_SUGGESTIONS]
