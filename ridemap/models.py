from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

# (latitude, longitude)
Coordinate = Tuple[float, float]
CoordinateSequence = Tuple[Coordinate, ...]


@dataclass(frozen=True)
class RouteDescriptor:
    id: str
    source_location: str
    display_name: str
    description: str = ""

    @property
    def is_remote(self) -> bool:
        return self.source_location.lower().startswith(("http://", "https://"))

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.display_name, "description": self.description}
