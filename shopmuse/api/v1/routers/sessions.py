# shopmuse/api/v1/routers/sessions.py
import logging
from fastapi import APIRouter, HTTPException, Response

from shopmuse.api.deps import SESSION_HEADER, ContainerDep, SessionDep
from shopmuse.api.v1.schemas.responses import SessionOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions"])


@router.post("/sessions", response_model=SessionOut)
async def open_session(container: ContainerDep, response: Response):
    """Start a new shopping session; reuse the returned id in the X-Session-Id header."""
    session = await container.open_session()
    response.headers[SESSION_HEADER] = session.session_id
    return SessionOut(session_id=session.session_id, profile_id=session.personalization.profile.profile_id)


@router.get("/sessions/current", response_model=SessionOut)
async def current_session(session: SessionDep):
    return SessionOut(session_id=session.session_id, profile_id=session.personalization.profile.profile_id)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str, container: ContainerDep):
    """Close a live session: records its duration and refreshes the shopper archetype."""
    if not await container.close_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found or already closed.")
    return Response(status_code=204)
