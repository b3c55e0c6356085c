# shopmuse/api/v1/routers/search.py
import time
import logging
from fastapi import APIRouter, Query

from shopmuse.api.deps import SessionDep
from shopmuse.api.v1.schemas.responses import SearchOut, SuggestionsOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


@router.get("/search", response_model=SearchOut)
async def search(session: SessionDep, q: str = Query("", description="Free-text query; blank returns no results")):
    logger.info("Request: search session=%s q=%r", session.session_id, q)
    start_time = time.perf_counter()
    results = await session.search.search(q)
    logger.info(
        "Response: search session=%s count=%s elapsed_time=%.4fs",
        session.session_id, len(results.results) if results else 0, time.perf_counter() - start_time,
    )
    return SearchOut(query=q, results=results, recent_searches=await session.search.recent_searches())


@router.get("/search/suggestions", response_model=SuggestionsOut)
async def suggestions(session: SessionDep, q: str = Query("")):
    return SuggestionsOut(items=await session.search.suggestions(q))
