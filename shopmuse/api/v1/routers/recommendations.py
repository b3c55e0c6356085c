# shopmuse/api/v1/routers/recommendations.py
import time
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Query

from shopmuse.api.deps import ContainerDep, SessionDep
from shopmuse.api.v1.schemas.responses import RecommendationsOut
from shopmuse.domain.models.product import RecommendationRequest
from shopmuse.domain.services.personalization_svc import get_mood
from shopmuse.domain.services.recommendation_svc import get_recommendations_api

logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])


@router.get("/recommendations", response_model=RecommendationsOut)
async def recommendations(
    session: SessionDep,
    container: ContainerDep,
    limit: Optional[int] = Query(None, ge=1, le=50),
    local_only: bool = Query(False, description="Skip the AI provider and rank with local rules only"),
):
    """
    Session recommendations from the interaction log.
    Viewed and liked products are never returned.
    """
    limit = limit or container.settings.recommendation_limit
    logger.info("Request: recommendations session=%s limit=%s local_only=%s", session.session_id, limit, local_only)
    start_time = time.perf_counter()

    if local_only:
        items = await session.recommendations.generate_local_recommendations(session.session_id, limit)
    else:
        items = await get_recommendations_api(
            session.recommendations, RecommendationRequest(session_id=session.session_id, limit=limit)
        )

    logger.info(
        "Response: recommendations session=%s count=%s elapsed_time=%.4fs",
        session.session_id, len(items), time.perf_counter() - start_time,
    )
    return RecommendationsOut(session_id=session.session_id, items=items, count=len(items))


@router.get("/recommendations/personalized")
async def personalized(session: SessionDep, container: ContainerDep, mood_id: Optional[str] = Query(None)):
    """Profile-based picks, optionally biased by a shopping mood."""
    mood = None
    if mood_id:
        mood = get_mood(mood_id)
        if mood is None:
            raise HTTPException(status_code=404, detail="Unknown shopping mood.")
    else:
        mood = session.personalization.get_current_mood()
    return await session.personalization.get_personalized_recommendations(container.catalog.all(), mood)
