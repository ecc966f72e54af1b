# models.py
# Shared data structures and enums used across all modules.

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GeoPoint:
    """Immutable WGS-84 coordinate in decimal degrees."""
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class LocationSample(GeoPoint):
    """One position + compass heading reading from the location provider."""
    heading: float                         # degrees [0, 360), direction the user faces
    timestamp: Optional[float] = None      # provider time, used to drop stale samples

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.latitude, self.longitude)


# Index 0 is the origin anchor, the last entry is the destination.
Route = Tuple[GeoPoint, ...]


def make_route(points: Sequence[GeoPoint]) -> Route:
    """Freeze a sequence of points into a Route, dropping heading/timestamp."""
    return tuple(GeoPoint(p.latitude, p.longitude) for p in points)


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------

class InstructionKind(Enum):
    START       = "start"
    STRAIGHT    = "straight"
    TURN_LEFT   = "turn_left"
    TURN_RIGHT  = "turn_right"
    WAYPOINT    = "waypoint"
    DESTINATION = "destination"


@dataclass(frozen=True)
class NavigationInstruction:
    """Produced fresh on every evaluation; consumed by speech and overlay."""
    kind: InstructionKind
    distance_meters: float
    message: str
    required_bearing: Optional[float] = None
    is_last_waypoint: Optional[bool] = None
    waypoint_number: Optional[int] = None
    total_waypoints: Optional[int] = None
    clock_direction: Optional[str] = None
    steps_remaining: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "distance_meters": self.distance_meters,
            "message": self.message,
            "required_bearing": self.required_bearing,
            "is_last_waypoint": self.is_last_waypoint,
            "waypoint_number": self.waypoint_number,
            "total_waypoints": self.total_waypoints,
            "clock_direction": self.clock_direction,
            "steps_remaining": self.steps_remaining,
        }
