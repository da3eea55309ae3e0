import pytest
from fastapi.testclient import TestClient

from ridemap.config import Settings, build_registry
from ridemap.main import create_app
from ridemap.models import RouteDescriptor
from ridemap.track_store import TrackStore

from .helpers import SAMPLE_POINTS, make_gpx


@pytest.fixture
def tracks_dir(tmp_path):
    d = tmp_path / "tracks"
    d.mkdir()
    (d / "sample.gpx").write_text(make_gpx(SAMPLE_POINTS), encoding="utf-8")
    (d / "other.gpx").write_text(make_gpx([("10.5", "20.25"), ("11", "21")]), encoding="utf-8")
    return d


@pytest.fixture
def registry():
    return build_registry([
        RouteDescriptor("sample", "sample.gpx", "Sample Ride", "Three points"),
        RouteDescriptor("other", "other.gpx", "Other Ride"),
        RouteDescriptor("missing", "does-not-exist.gpx", "Missing"),
    ])


@pytest.fixture
def store(registry, tracks_dir):
    s = TrackStore(registry, tracks_dir=str(tracks_dir))
    yield s
    s.close()


@pytest.fixture
def settings(registry, tracks_dir, tmp_path):
    return Settings(
        tracks_dir=str(tracks_dir),
        default_map_id="sample",
        public_dir=str(tmp_path / "public"),
        routes=registry,
    )


@pytest.fixture
def client(settings, store):
    with TestClient(create_app(settings, store)) as c:
        yield c
