# shopmuse/domain/services/comparison_svc.py
from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import random

from shopmuse.domain.models.assistance import ComparisonFactor, ComparisonResult, ProductComparison
from shopmuse.domain.models.profile import UserProfile
from shopmuse.domain.repositories.product_repo import ProductRepo
from shopmuse.utils.money import rupees

logger = logging.getLogger(__name__)

# (name, weight, importance); weights sum to 1.0
BASE_FACTORS: Tuple[Tuple[str, float, str], ...] = (
    ("Price", 0.30, "critical"),
    ("Quality", 0.25, "critical"),
    ("Features", 0.20, "important"),
    ("Brand", 0.15, "moderate"),
    ("Reviews", 0.10, "moderate"),
)
BUDGET_PRICE_WEIGHT = 0.40
PREMIUM_QUALITY_WEIGHT = 0.35
FEATURE_TARGET = 3
SCALE_HEADROOM = 1.5
PRICE_GAP_NOTE = 50


def _pin(name: str, weight: float) -> List[ComparisonFactor]:
    """Set one factor's weight and rescale the others so the total stays 1.0."""
    rest = sum(w for n, w, _ in BASE_FACTORS if n != name)
    scale = (1.0 - weight) / rest
    return [
        ComparisonFactor(name=n, weight=weight if n == name else w * scale, importance=imp)
        for n, w, imp in BASE_FACTORS
    ]


def comparison_factors(profile: Optional[UserProfile] = None) -> List[ComparisonFactor]:
    budget = profile.preferences.budget if profile else None
    if budget == "budget":
        return _pin("Price", BUDGET_PRICE_WEIGHT)
    if budget == "premium":
        return _pin("Quality", PREMIUM_QUALITY_WEIGHT)
    return [ComparisonFactor(name=n, weight=w, importance=imp) for n, w, imp in BASE_FACTORS]


def price_scale_for(products: Sequence[ProductComparison], configured: Optional[float]) -> float:
    if configured:
        return configured
    top = max((p.price for p in products), default=0)
    return top * SCALE_HEADROOM or 1.0


class ComparisonEngine:
    """
    Weighted-factor comparison of two or more products.

    Results are cached by the unordered set of ids: a repeated call returns the
    very same ComparisonResult object, whatever profile is passed. The cache is
    never invalidated.
    """

    def __init__(
        self,
        catalog: ProductRepo,
        *,
        price_scale: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        self.catalog = catalog
        self.price_scale = price_scale
        self.rng = rng or random.Random()
        self._cache: Dict[Tuple[str, ...], ComparisonResult] = {}

    def cache_key(self, product_ids: Sequence[str]) -> Tuple[str, ...]:
        return tuple(sorted(product_ids))

    def compare_products(self, product_ids: Sequence[str], profile: Optional[UserProfile] = None) -> ComparisonResult:
        key = self.cache_key(product_ids)
        if key in self._cache:
            logger.debug("comparison cache hit key=%s", key)
            return self._cache[key]

        products = [self._describe(pid) for pid in key]
        factors = comparison_factors(profile)
        scale = price_scale_for(products, self.price_scale)
        weights = {f.name: f.weight for f in factors}

        for p in products:
            p.score = self._score(p, weights, scale)
        products.sort(key=lambda p: p.score, reverse=True)
        self._annotate(products)

        result = ComparisonResult(
            products=products,
            winner=products[0].product_id if products else "",
            reasoning=self._reasoning(products, factors),
            factors=factors,
            recommendations=self._recommendations(products, profile),
        )
        self._cache[key] = result
        logger.info("comparison computed ids=%s winner=%s", list(key), result.winner)
        return result

    def _describe(self, product_id: str) -> ProductComparison:
        product = self.catalog.get_by_product_id(product_id)
        if product:
            rating = product.rating if product.rating is not None else 3 + self.rng.random() * 2
            return ProductComparison(
                product_id=product.product_id,
                name=product.name,
                price=product.price,
                rating=round(rating, 1),
                features=list(product.tags[:FEATURE_TARGET]),
                value_rating=round(3 + self.rng.random() * 2, 1),
            )
        # not in the catalog: synthetic placeholder
        features = ["Feature A", "Feature B", "Feature C"][: self.rng.randint(1, 3)]
        return ProductComparison(
            product_id=product_id,
            name=f"Product {product_id}",
            price=round(50 + self.rng.random() * 200, 2),
            rating=round(3 + self.rng.random() * 2, 1),
            features=features,
            value_rating=round(3 + self.rng.random() * 2, 1),
        )

    def _score(self, p: ProductComparison, weights: Dict[str, float], scale: float) -> float:
        price = max(0.0, (scale - p.price) / scale)
        quality = p.rating / 5
        features = min(1.0, len(p.features) / FEATURE_TARGET)
        brand = self.rng.random()
        reviews = p.rating / 5
        score = (
            price * weights["Price"]
            + quality * weights["Quality"]
            + features * weights["Features"]
            + brand * weights["Brand"]
            + reviews * weights["Reviews"]
        )
        return round(score, 2)

    def _annotate(self, products: List[ProductComparison]) -> None:
        """Pros and cons relative to the rest of the group."""
        if not products:
            return
        cheapest = min(p.price for p in products)
        priciest = max(p.price for p in products)
        best_rating = max(p.rating for p in products)
        most_features = max(len(p.features) for p in products)

        for p in products:
            pros: List[str] = []
            cons: List[str] = []
            if p.price == cheapest:
                pros.append("Lowest price in this comparison")
            elif p.price == priciest:
                cons.append("Most expensive option")
            if p.rating == best_rating:
                pros.append(f"Top rated at {p.rating}/5")
            elif p.rating < 3.5:
                cons.append(f"Lower rating ({p.rating}/5)")
            if len(p.features) == most_features:
                pros.append("Most complete feature set")
            elif len(p.features) < FEATURE_TARGET:
                cons.append("Fewer listed features")
            p.pros = pros or ["Balanced all-rounder"]
            p.cons = cons or ["No major drawbacks found"]

    def _reasoning(self, products: List[ProductComparison], factors: List[ComparisonFactor]) -> str:
        if not products:
            return "No products to compare"
        top = max(factors, key=lambda f: f.weight)
        winner = products[0]
        return f"{winner.name} wins primarily due to its superior {top.name.lower()}, scoring {winner.score} overall."

    def _recommendations(self, products: List[ProductComparison], profile: Optional[UserProfile]) -> List[str]:
        out: List[str] = []
        if len(products) > 1:
            gap = abs(products[0].price - products[1].price)
            if gap > PRICE_GAP_NOTE:
                out.append(f"Consider if the {rupees(round(gap, 2))} price difference is worth the additional features")
        out.append("Check for current promotions and discounts")
        out.append("Read recent customer reviews for updated feedback")
        if profile and profile.preferences.budget == "budget":
            out.append("Look for refurbished or open-box alternatives")
        return out
