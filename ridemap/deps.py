# ridemap/deps.py
from fastapi import Request

from .config import Settings
from .track_store import TrackStore


def get_track_store(request: Request) -> TrackStore:
    return request.app.state.track_store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
