# shopmuse/api/v1/routers/chat.py
import logging
from fastapi import APIRouter, Response

from shopmuse.api.deps import SessionDep
from shopmuse.api.v1.schemas.requests import ChatIn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat")
async def send_message(body: ChatIn, session: SessionDep):
    """Classify the message, answer it, and return the assistant's reply."""
    return await session.chatbot.process_message(body.message)


@router.get("/chat/history")
async def history(session: SessionDep):
    items = session.chatbot.get_conversation_history()
    return {"items": items, "count": len(items)}


@router.delete("/chat/history", status_code=204)
async def clear_history(session: SessionDep):
    session.chatbot.clear_history()
    return Response(status_code=204)


@router.get("/chat/quick-responses")
async def quick_responses(session: SessionDep):
    return {"items": session.chatbot.get_quick_responses()}


@router.get("/chat/context")
async def context(session: SessionDep):
    return session.chatbot.get_user_context()
