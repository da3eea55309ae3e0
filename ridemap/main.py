# ridemap/main.py
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import Settings, configure_logging
from .routers.coordinates import router as coordinates_router
from .routers.maps import router as maps_router
from .track_store import TrackStore

log = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[TrackStore] = None) -> FastAPI:
    if settings is None:
        settings = Settings.from_env()
        configure_logging(settings)
    else:
        settings.validate()
    if store is None:
        store = TrackStore(settings.routes, tracks_dir=settings.tracks_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("Serving %d maps from %s", len(settings.routes), settings.tracks_dir)
        yield
        store.close()

    app = FastAPI(title="Ride Map API", lifespan=lifespan)
    app.state.settings = settings
    app.state.track_store = store

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_origins),
            allow_methods=["GET"],
            allow_headers=["*"],
        )

    app.include_router(coordinates_router)
    app.include_router(maps_router)

    # mounted last so the API routes above win over same-named files
    if os.path.isdir(settings.public_dir):
        app.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")
    else:
        log.info("Public directory %s not found; static assets disabled", settings.public_dir)

    return app
