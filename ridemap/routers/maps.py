# ridemap/routers/maps.py
from fastapi import APIRouter, Depends

from ..deps import get_track_store
from ..track_store import TrackStore

router = APIRouter(prefix="/maps", tags=["maps"])


@router.get("")
def list_maps(store: TrackStore = Depends(get_track_store)):
    items = [route.to_dict() for route in store.routes()]
    return {"count": len(items), "items": items}
