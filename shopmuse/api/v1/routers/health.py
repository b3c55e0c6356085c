# shopmuse/api/v1/routers/health.py
import time
from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])
START_TIME = time.time()


@router.get("/health")
async def health(request: Request):
    """
    Liveness plus a store ping:
    - storage backend reachable (memory always is)
    - which provider and intent classifier are active
    """
    settings = request.app.state.settings
    container = request.app.state.container
    checks: dict[str, object] = {
        "app_name": settings.APP_NAME,
        "env": settings.APP_ENV,
        "debug": settings.DEBUG,
        "version": settings.GIT_SHA,
        "uptime_seconds": int(time.time() - START_TIME),
        "catalog_size": len(container.catalog),
        "ai_provider": container.provider.name,
        "intent_classifier": container.classifier.name,
        "live_sessions": len(container.sessions),
    }

    try:
        checks["storage"] = "ok" if await container.store.ping() else "error"
    except Exception as e:
        checks["storage"] = f"error: {e}"

    status = "ok" if checks["storage"] == "ok" else "error"
    return {"status": status, "checks": checks, "timestamp": int(time.time())}
