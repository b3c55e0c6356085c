# shopmuse/api/v1/routers/profile.py
import logging
from typing import Any, Dict
from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from shopmuse.api.deps import ContainerDep, SessionDep
from shopmuse.api.v1.schemas.requests import MoodIn, ProfileEventIn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profile"])


@router.get("/profile")
async def get_profile(session: SessionDep):
    return session.personalization.get_user_profile()


@router.patch("/profile")
async def update_profile(updates: Dict[str, Any], session: SessionDep):
    """Replace top-level profile sections (e.g. `preferences`); the result is validated as a whole."""
    try:
        return await session.personalization.update_profile(updates)
    except ValidationError as e:
        logger.warning("Rejected profile update session=%s errors=%s", session.session_id, e.error_count())
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))


@router.post("/profile/events")
async def track_event(body: ProfileEventIn, session: SessionDep, container: ContainerDep):
    svc = session.personalization

    if body.kind in ("product_view", "purchase"):
        product = container.catalog.get_by_product_id(body.product_id or "")
        if product is None:
            raise HTTPException(status_code=404, detail="Product not found.")
        if body.kind == "product_view":
            await svc.track_interaction("product_view", product)
        else:
            await svc.track_interaction("purchase", {"product": product, "amount": body.amount or product.price})
            await session.chatbot.add_to_history("purchased", product.product_id)
    elif body.kind == "search":
        if not body.query:
            raise HTTPException(status_code=422, detail="`query` is required for search events.")
        await svc.track_interaction("search", body.query)
    else:
        if not body.category:
            raise HTTPException(status_code=422, detail="`category` is required for category_browse events.")
        await svc.track_interaction("category_browse", body.category)

    await svc.update_personality_type()
    return svc.get_user_profile()


@router.get("/moods")
async def list_moods(session: SessionDep):
    return {
        "items": session.personalization.get_shopping_moods(),
        "current": session.personalization.get_current_mood(),
    }


@router.put("/moods/current")
async def set_mood(body: MoodIn, session: SessionDep):
    mood = await session.personalization.set_shopping_mood(body.mood_id)
    if mood is None:
        raise HTTPException(status_code=404, detail="Unknown shopping mood.")
    return mood


@router.get("/seasonal")
async def seasonal(session: SessionDep):
    return {"items": session.personalization.get_seasonal_recommendations()}
