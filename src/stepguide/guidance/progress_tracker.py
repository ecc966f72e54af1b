# progress_tracker.py
# Works out which route segment the user is currently on.
# Stateless: the caller owns the segment index and recomputes it every tick.

import logging
from typing import Sequence

import numpy as np

from .geo_utils import distances_from
from .models import GeoPoint

logger = logging.getLogger(__name__)


def get_user_progress(location: GeoPoint, route: Sequence[GeoPoint]) -> int:
    """
    Index of the route point closest to location.

    Ties go to the lowest index so the user is never declared past a
    waypoint early. Empty and single-point routes return 0.

    Args:
        location: Current position (a LocationSample works too).
        route:    Ordered route points.

    Returns:
        Segment index into route.
    """
    if len(route) < 2:
        return 0

    dists = distances_from(location, route)
    # argmin returns the first occurrence of the minimum
    closest = int(np.argmin(dists))

    if closest == len(route) - 2:
        progress = "last waypoint before final destination"
    else:
        progress = f"waypoint {closest + 1} of {len(route) - 1}"
    logger.debug(f"User is at {progress}, {dists[closest]:.1f} m away")
    return closest
