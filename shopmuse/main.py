from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopmuse.core.config import Settings, get_settings
from shopmuse.core.lifespan import lifespan
from shopmuse.core.logging import configure_logging
from shopmuse.api.v1.routers.health import router as health_router
from shopmuse.api.v1.routers.sessions import router as sessions_router
from shopmuse.api.v1.routers.catalog import router as catalog_router
from shopmuse.api.v1.routers.interactions import router as interactions_router
from shopmuse.api.v1.routers.recommendations import router as recommendations_router
from shopmuse.api.v1.routers.profile import router as profile_router
from shopmuse.api.v1.routers.chat import router as chat_router
from shopmuse.api.v1.routers.search import router as search_router
from shopmuse.api.v1.routers.assistance import router as assistance_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(level=logging.DEBUG if settings.DEBUG else logging.INFO)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings

    # ------- CORS -------
    # ALLOWED_ORIGINS is a CSV list, e.g. "https://shop.example.com,https://www.shop.example.com"
    allowed_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=False,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
            max_age=86400,
        )

    # ------- Routes -------
    app.include_router(health_router)
    for router in (
        sessions_router,
        catalog_router,
        interactions_router,
        recommendations_router,
        profile_router,
        chat_router,
        search_router,
        assistance_router,
    ):
        app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
