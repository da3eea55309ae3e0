# ridemap/config.py
import logging
import os
from configparser import ConfigParser
from dataclasses import dataclass, field
from logging.config import fileConfig
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from .models import RouteDescriptor

log = logging.getLogger(__name__)

DEFAULT_ROUTES: Tuple[RouteDescriptor, ...] = (
    RouteDescriptor(
        id="Sunday-Slow-Ride",
        source_location="Sunday_Slow_Ride.gpx",
        display_name="Sunday Slow Ride",
        description="Easy loop along the river path.",
    ),
    RouteDescriptor(
        id="Ramble-Map",
        source_location="Ramble.gpx",
        display_name="Ramble",
        description="Gravel ramble out past the reservoir.",
    ),
)


class ConfigError(RuntimeError):
    pass


def build_registry(routes) -> Mapping[str, RouteDescriptor]:
    """Read-only id -> descriptor mapping; duplicate ids are rejected."""
    registry = {}
    for route in routes:
        if route.id in registry:
            raise ConfigError(f"Duplicate route id in registry: {route.id!r}")
        registry[route.id] = route
    if not registry:
        raise ConfigError("Route registry is empty.")
    return MappingProxyType(registry)


def load_registry_ini(path: str) -> Mapping[str, RouteDescriptor]:
    """
    Each section is one route:

        [Sunday-Slow-Ride]
        source = Sunday_Slow_Ride.gpx
        name = Sunday Slow Ride
        description = Easy loop along the river path.
    """
    if not os.path.exists(path):
        raise ConfigError(f"Routes file not found: {path}")

    cp = ConfigParser(interpolation=None)
    cp.read(path, encoding="utf-8")

    routes = []
    for section in cp.sections():
        source = cp.get(section, "source", fallback="").strip()
        if not source:
            raise ConfigError(f"Route {section!r} in {path} has no 'source'.")
        routes.append(RouteDescriptor(
            id=section,
            source_location=source,
            display_name=cp.get(section, "name", fallback=section).strip() or section,
            description=cp.get(section, "description", fallback="").strip(),
        ))
    return build_registry(routes)


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass(frozen=True)
class Settings:
    tracks_dir: str = "tracks"
    routes_ini: Optional[str] = None
    default_map_id: str = "Sunday-Slow-Ride"
    public_dir: str = "public"
    cors_origins: Tuple[str, ...] = ()
    log_level: str = "INFO"
    log_config: Optional[str] = None
    routes: Mapping[str, RouteDescriptor] = field(default_factory=lambda: build_registry(DEFAULT_ROUTES))

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Resolution order for the route registry:
          1) ROUTES_INI environment variable (INI file, one section per route)
          2) the built-in DEFAULT_ROUTES
        """
        routes_ini = os.getenv("ROUTES_INI") or None
        routes = load_registry_ini(routes_ini) if routes_ini else build_registry(DEFAULT_ROUTES)

        settings = cls(
            tracks_dir=os.getenv("TRACKS_DIR", "tracks"),
            routes_ini=routes_ini,
            default_map_id=os.getenv("DEFAULT_MAP_ID", "Sunday-Slow-Ride"),
            public_dir=os.getenv("PUBLIC_DIR", "public"),
            cors_origins=tuple(_split_csv(os.getenv("CORS_ORIGINS"))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_config=os.getenv("LOG_CONFIG") or None,
            routes=routes,
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.default_map_id not in self.routes:
            raise ConfigError(
                f"DEFAULT_MAP_ID {self.default_map_id!r} is not a known route. "
                f"Known routes: {sorted(self.routes)}"
            )


def configure_logging(settings: Settings) -> None:
    if settings.log_config:
        cp = ConfigParser()
        cp.read(settings.log_config)
        if cp.has_section("formatters"):
            fileConfig(settings.log_config, disable_existing_loggers=False)
            return
        log.warning("LOG_CONFIG %s has no [formatters] section; using LOG_LEVEL", settings.log_config)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
