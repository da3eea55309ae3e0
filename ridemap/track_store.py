# ridemap/track_store.py
import logging
import math
import threading
import time
from pathlib import Path
from typing import Dict, List, Mapping, Optional
from xml.etree import ElementTree as ET

import gpxpy
import httpx

from .models import CoordinateSequence, RouteDescriptor

log = logging.getLogger(__name__)


class TrackStoreError(Exception):
    pass


class UnknownRouteError(TrackStoreError):
    def __init__(self, route_id: str, available_ids: List[str]):
        super().__init__(f"Unknown route {route_id!r}")
        self.route_id = route_id
        self.available_ids = list(available_ids)


class SourceReadError(TrackStoreError):
    def __init__(self, route_id: Optional[str], message: str):
        super().__init__(message)
        self.route_id = route_id


class MalformedTrackError(TrackStoreError):
    def __init__(self, route_id: Optional[str], message: str):
        super().__init__(message)
        self.route_id = route_id


class EmptyTrackError(TrackStoreError):
    def __init__(self, route_id: Optional[str], message: str = "Track segment contains no points."):
        super().__init__(message)
        self.route_id = route_id


def _coordinate(value, name: str, index: int, route_id: Optional[str]) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedTrackError(route_id, f"Track point {index} has non-numeric {name}: {value!r}") from e
    # float("nan") parses, but a NaN point would poison the renderer's bounds
    if not math.isfinite(number):
        raise MalformedTrackError(route_id, f"Track point {index} has non-finite {name}: {value!r}")
    return number


def parse_track_points(content: str, route_id: Optional[str] = None) -> CoordinateSequence:
    """
    Extract (lat, lon) pairs from the first <trkseg> of the first <trk>.

    Elevation, timestamps, extensions and any further tracks or segments
    are ignored. Raises MalformedTrackError for anything that does not fit
    that shape and EmptyTrackError when the segment has no points.
    """
    # gpxpy reads <trk> children under any root, so check the root ourselves
    try:
        root = ET.fromstring(content)
    except (ET.ParseError, ValueError) as e:
        raise MalformedTrackError(route_id, f"Invalid GPX: {e}") from e
    root_name = root.tag.rsplit("}", 1)[-1]
    if root_name != "gpx":
        raise MalformedTrackError(route_id, f"Root element is <{root_name}>, expected <gpx>.")

    try:
        gpx = gpxpy.parse(content)
    except Exception as e:
        raise MalformedTrackError(route_id, f"Invalid GPX: {e}") from e

    if not gpx.tracks:
        raise MalformedTrackError(route_id, "GPX contains no <trk>.")
    track = gpx.tracks[0]
    if not track.segments:
        raise MalformedTrackError(route_id, "First track contains no <trkseg>.")

    points = track.segments[0].points
    if not points:
        raise EmptyTrackError(route_id)

    return tuple(
        (
            _coordinate(p.latitude, "latitude", i, route_id),
            _coordinate(p.longitude, "longitude", i, route_id),
        )
        for i, p in enumerate(points)
    )


class TrackStore:
    """
    Resolves route ids to coordinate sequences.

    Each route's source is parsed at most once per successful load and the
    result is kept for the lifetime of the store. Failed loads are not
    cached, so the next request retries. Loads for the same id are
    serialised so concurrent misses do not parse the file twice.
    """

    def __init__(
        self,
        registry: Mapping[str, RouteDescriptor],
        tracks_dir: str = ".",
        http_client: Optional[httpx.Client] = None,
    ):
        self._registry = registry
        self._tracks_dir = Path(tracks_dir)
        self._http_client = http_client
        self._owns_client = http_client is None
        self._cache: Dict[str, CoordinateSequence] = {}
        # registry is fixed, so one lock per id can be created up front
        self._locks: Dict[str, threading.Lock] = {rid: threading.Lock() for rid in registry}

    def routes(self) -> List[RouteDescriptor]:
        return list(self._registry.values())

    def route_ids(self) -> List[str]:
        return sorted(self._registry)

    def is_cached(self, route_id: str) -> bool:
        return route_id in self._cache

    def get_coordinates(self, route_id: str) -> CoordinateSequence:
        route = self._registry.get(route_id)
        if route is None:
            raise UnknownRouteError(route_id, self.route_ids())

        cached = self._cache.get(route_id)
        if cached is not None:
            log.debug("Cache hit for route %s", route_id)
            return cached

        with self._locks[route_id]:
            # another request may have finished the load while we waited
            cached = self._cache.get(route_id)
            if cached is not None:
                return cached

            log.info("Cache miss for route %s, loading %s", route_id, route.source_location)
            started = time.perf_counter()
            content = self._read_source(route)
            coords = parse_track_points(content, route_id)
            self._cache[route_id] = coords
            log.info(
                "Loaded route %s: %d points in %.1f ms",
                route_id, len(coords), (time.perf_counter() - started) * 1000,
            )
            return coords

    def _resolve_path(self, route: RouteDescriptor) -> Path:
        path = Path(route.source_location)
        return path if path.is_absolute() else self._tracks_dir / path

    def _read_source(self, route: RouteDescriptor) -> str:
        if route.is_remote:
            return self._fetch_remote(route)

        path = self._resolve_path(route)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(route.id, f"Cannot read {path}: {e}") from e

    def _fetch_remote(self, route: RouteDescriptor) -> str:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=20, follow_redirects=True)
        try:
            r = self._http_client.get(route.source_location)
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise SourceReadError(route.id, f"Fetch of {route.source_location} failed: {e}") from e
        return r.text

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None
