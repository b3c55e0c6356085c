# shopmuse/api/v1/routers/catalog.py
from typing import Optional
import logging
from fastapi import APIRouter, HTTPException, Query

from shopmuse.api.deps import ContainerDep
from shopmuse.api.v1.schemas.responses import ProductListOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])


@router.get("/products", response_model=ProductListOut)
async def list_products(
    container: ContainerDep,
    category: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Substring of name, description or tags"),
    min_price: float = Query(0, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
):
    catalog = container.catalog
    items = catalog.search(q) if q else catalog.all()
    if category:
        items = [p for p in items if p.category == category]
    items = [p for p in items if p.price >= min_price and (max_price is None or p.price <= max_price)]
    return ProductListOut(items=items, count=len(items))


@router.get("/products/categories")
async def list_categories(container: ContainerDep):
    return {"categories": container.catalog.categories()}


@router.get("/products/{product_id}")
async def get_product(product_id: str, container: ContainerDep):
    product = container.catalog.get_by_product_id(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found.")
    return product


@router.get("/products/{product_id}/analysis")
async def analyze_product(product_id: str, container: ContainerDep):
    product = container.catalog.get_by_product_id(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found.")
    return await container.provider.analyze_product(product)
