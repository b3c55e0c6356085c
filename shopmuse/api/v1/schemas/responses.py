# api/v1/schemas/responses.py
from pydantic import BaseModel
from typing import List, Optional

from shopmuse.domain.models.ai import SearchResults, SearchSuggestion
from shopmuse.domain.models.product import Product, Recommendation


class SessionOut(BaseModel):
    session_id: str
    profile_id: str


class ProductListOut(BaseModel):
    items: List[Product]
    count: int


class RecommendationsOut(BaseModel):
    session_id: str
    items: List[Recommendation]
    count: int


class SearchOut(BaseModel):
    query: str
    results: Optional[SearchResults] = None
    recent_searches: List[str]


class SuggestionsOut(BaseModel):
    items: List[SearchSuggestion]
