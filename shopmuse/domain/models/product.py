from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime, timezone

InteractionType = Literal["view", "click", "like"]

class Product(BaseModel):
    product_id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    category: str
    tags: List[str] = []
    image_url: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    created_at: Optional[datetime] = None

    model_config = {"frozen": True}  # catalog is read-only after load

class UserInteraction(BaseModel):
    interaction_id: str
    session_id: str
    product_id: str
    interaction_type: InteractionType
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}  # append-only log

class Recommendation(BaseModel):
    product: Product
    explanation: str
    score: float = Field(ge=0)
    confidence: float = Field(ge=0)

class RecommendationRequest(BaseModel):
    session_id: str
    limit: int = Field(default=3, ge=1, le=50)
