# shopmuse/api/v1/routers/interactions.py
import logging
from fastapi import APIRouter, HTTPException

from shopmuse.api.deps import ContainerDep, SessionDep
from shopmuse.api.v1.schemas.requests import InteractionIn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["interactions"])


@router.post("/interactions", status_code=201)
async def add_interaction(body: InteractionIn, session: SessionDep, container: ContainerDep):
    """
    Append one view/click/like to the session's interaction log.
    Views and likes also feed the profile and the chat context.
    """
    product = container.catalog.get_by_product_id(body.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found.")

    interaction = await container.interactions.add(session.session_id, body.product_id, body.interaction_type)
    if body.interaction_type == "view":
        await session.personalization.track_interaction("product_view", product)
        await session.chatbot.add_to_history("viewed", product.product_id)
    elif body.interaction_type == "like":
        await session.chatbot.add_to_history("liked", product.product_id)

    logger.info(
        "Interaction: session=%s product=%s type=%s", session.session_id, body.product_id, body.interaction_type
    )
    return interaction


@router.get("/interactions")
async def list_interactions(session: SessionDep, container: ContainerDep):
    items = await container.interactions.list(session.session_id)
    return {"session_id": session.session_id, "items": items, "count": len(items)}
