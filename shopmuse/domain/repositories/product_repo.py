# shopmuse/domain/repositories/product_repo.py

from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Optional
import json
import logging

from shopmuse.domain.models.product import Product

logger = logging.getLogger(__name__)

PACKAGED_CATALOG = Path(__file__).resolve().parents[2] / "data" / "products.json"


class ProductRepo:
    """
    Read-only product catalog loaded once from JSON.
    Order of the source file is preserved by every accessor.
    """

    def __init__(self, products: Iterable[Product]):
        self._products: List[Product] = list(products)
        self._by_id = {p.product_id: p for p in self._products}

    @classmethod
    def from_json(cls, path: Optional[str] = None) -> "ProductRepo":
        """
        Load the catalog from `path`, or from the packaged products.json when empty.
        """
        if path:
            raw = Path(path).read_text(encoding="utf-8")
        else:
            raw = PACKAGED_CATALOG.read_text(encoding="utf-8")
        products = [Product.model_validate(d) for d in json.loads(raw)]
        logger.info("Catalog loaded: %s products from %s", len(products), path or "package data")
        return cls(products)

    def __len__(self) -> int:
        return len(self._products)

    def all(self) -> List[Product]:
        return list(self._products)

    def get_by_product_id(self, product_id: str) -> Optional[Product]:
        return self._by_id.get(product_id)

    def get_many_by_product_ids(self, ids: Iterable[str]) -> List[Product]:
        wanted = set(ids)
        return [p for p in self._products if p.product_id in wanted]

    def get_by_category(self, category: str) -> List[Product]:
        return [p for p in self._products if p.category == category]

    def search(self, query: str) -> List[Product]:
        """Case-insensitive substring match on name, description and tags."""
        q = query.lower()
        return [
            p for p in self._products
            if q in p.name.lower()
            or q in p.description.lower()
            or any(q in t.lower() for t in p.tags)
        ]

    def categories(self) -> List[str]:
        # dict keeps first-seen order
        return list(dict.fromkeys(p.category for p in self._products))

    def get_by_price_range(self, min_price: float, max_price: float) -> List[Product]:
        return [p for p in self._products if min_price <= p.price <= max_price]
