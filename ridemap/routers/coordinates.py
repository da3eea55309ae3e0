# ridemap/routers/coordinates.py
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..config import Settings
from ..deps import get_settings, get_track_store
from ..track_store import TrackStore, TrackStoreError, UnknownRouteError

router = APIRouter(prefix="/get-coordinates", tags=["coordinates"])
log = logging.getLogger(__name__)

# fixed text; the real cause only goes to the log
PARSE_FAILED_MESSAGE = "Error reading or parsing GPX file"


def coordinates_response(store: TrackStore, map_id: str):
    try:
        coords = store.get_coordinates(map_id)
    except UnknownRouteError as e:
        log.warning("Unknown map requested: %s", map_id)
        return JSONResponse(
            status_code=404,
            content={"error": "Map not found", "availableMaps": e.available_ids},
        )
    except TrackStoreError:
        log.exception("Loading coordinates for map %s failed", map_id)
        return JSONResponse(status_code=500, content={"error": PARSE_FAILED_MESSAGE})

    return [[lat, lon] for lat, lon in coords]


@router.get("")
def get_default_coordinates(
    store: TrackStore = Depends(get_track_store),
    settings: Settings = Depends(get_settings),
):
    return coordinates_response(store, settings.default_map_id)


@router.get("/{map_id}")
def get_coordinates(map_id: str, store: TrackStore = Depends(get_track_store)):
    return coordinates_response(store, map_id)
