# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects, no imports from other project modules except models.

import math
from typing import Sequence

import numpy as np

from .models import GeoPoint


EARTH_RADIUS_M = 6_371_000.0


def to_radians(degrees: float) -> float:
    return degrees * (math.pi / 180)


def to_degrees(radians: float) -> float:
    return radians * (180 / math.pi)


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """
    Great-circle (haversine) distance between two points in metres.

    Args:
        a, b: Points in decimal degrees.

    Returns:
        Distance in metres. Symmetric, 0 for identical points.
    """
    phi1 = to_radians(a.latitude)
    phi2 = to_radians(b.latitude)
    d_phi = to_radians(b.latitude - a.latitude)
    d_lambda = to_radians(b.longitude - a.longitude)
    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bearing(start: GeoPoint, end: GeoPoint) -> float:
    """
    Initial great-circle bearing from start to end in degrees [0, 360).

    0 is north, clockwise. The value is meaningless when the points coincide.
    """
    phi1 = to_radians(start.latitude)
    phi2 = to_radians(end.latitude)
    d_lambda = to_radians(end.longitude - start.longitude)
    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return (to_degrees(math.atan2(y, x)) + 360) % 360


def distances_from(point: GeoPoint, route: Sequence[GeoPoint]) -> np.ndarray:
    """
    Haversine distance from one point to every point of a route.

    Same formula as distance(), vectorised over the route.

    Returns:
        1-D float array of metres, empty for an empty route.
    """
    if not route:
        return np.empty(0, dtype=float)

    lats = np.radians(np.fromiter((p.latitude for p in route), dtype=float, count=len(route)))
    lons = np.fromiter((p.longitude for p in route), dtype=float, count=len(route))

    phi1 = math.radians(point.latitude)
    d_phi = lats - phi1
    d_lambda = np.radians(lons - point.longitude)
    h = np.sin(d_phi / 2) ** 2 + math.cos(phi1) * np.cos(lats) * np.sin(d_lambda / 2) ** 2
    h = np.clip(h, 0.0, 1.0)
    return 2 * EARTH_RADIUS_M * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def normalize_angle(angle: float) -> float:
    """Wrap an angle difference into (-180, 180]."""
    diff = angle % 360
    if diff > 180:
        diff -= 360
    return diff


def clock_direction(relative_angle: float) -> str:
    """
    Clock-face position of a relative angle (0 = 12 o'clock, 90 = 3 o'clock).
    """
    hour = int(((relative_angle % 360) + 15) // 30) % 12
    return f"{12 if hour == 0 else hour} o'clock"
