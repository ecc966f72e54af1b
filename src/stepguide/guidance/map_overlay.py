# map_overlay.py
# Everything a map surface needs to draw the session: user marker,
# heading, waypoint markers, route polyline and the current instruction.

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .models import GeoPoint, LocationSample, NavigationInstruction

ROUTE_STROKE_COLOR = "#FF0000"
ROUTE_STROKE_WIDTH = 3

# Below this the required bearing is numerically meaningless
MIN_BEARING_DISTANCE_M = 0.5


def route_to_geojson(route: Sequence[GeoPoint]) -> dict:
    """
    Route as a GeoJSON FeatureCollection with a single LineString.

    Coordinates are [lon, lat] as GeoJSON requires.
    """
    coords = [[p.longitude, p.latitude] for p in route]
    return {
        "type": "FeatureCollection",
        "features": [{
            "type": "Feature",
            "properties": {"stroke": ROUTE_STROKE_COLOR, "stroke-width": ROUTE_STROKE_WIDTH},
            "geometry": {"type": "LineString", "coordinates": coords},
        }],
    }


def marker_rotation(instruction: Optional[NavigationInstruction]) -> Optional[float]:
    """Rotation hint for the direction marker, None when it would be noise."""
    if instruction is None or instruction.required_bearing is None:
        return None
    if instruction.distance_meters < MIN_BEARING_DISTANCE_M:
        return None
    return instruction.required_bearing


@dataclass(frozen=True)
class MapOverlay:
    location: LocationSample
    waypoints: List[GeoPoint]
    instruction: Optional[NavigationInstruction] = None

    @property
    def heading(self) -> float:
        return self.location.heading

    @property
    def polyline(self) -> dict:
        return route_to_geojson(self.waypoints)

    def to_dict(self) -> dict:
        return {
            "location": self.location.point.to_dict(),
            "heading": self.heading,
            "waypoints": [p.to_dict() for p in self.waypoints],
            "polyline": self.polyline,
            "instruction": self.instruction.to_dict() if self.instruction else None,
            "marker_rotation": marker_rotation(self.instruction),
        }
