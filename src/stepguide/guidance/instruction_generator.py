# instruction_generator.py
# Turns (location, heading, route, segment) into the next spoken instruction.
# Pure functions: re-evaluate on every location/heading update.

import logging
import math
from typing import Optional, Sequence

from .geo_utils import bearing, clock_direction, distance, normalize_angle
from .models import GeoPoint, InstructionKind, LocationSample, NavigationInstruction
from .nav_config import NavConfig

logger = logging.getLogger(__name__)

STRAIGHT_AHEAD = "straight ahead"

_DEFAULT_CONFIG = NavConfig()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def heading_difference(user_heading: float, required_bearing: float) -> float:
    """
    Signed angle from the user's heading to the required bearing.

    Returns:
        Degrees in (-180, 180]; positive means the target is to the right.
    """
    return normalize_angle(required_bearing - user_heading + 360)


def turn_label(heading_diff: float, config: Optional[NavConfig] = None) -> str:
    """Turn label for a signed heading difference: straight ahead, right or left."""
    config = config or _DEFAULT_CONFIG
    if abs(heading_diff) <= config.heading_tolerance_deg:
        return STRAIGHT_AHEAD
    return "right" if heading_diff > 0 else "left"


def steps_from_distance(meters: float, config: Optional[NavConfig] = None) -> int:
    """Approximate step count for a distance, halves rounded up."""
    config = config or _DEFAULT_CONFIG
    return int(math.floor(meters / config.stride_length_m + 0.5))


def countdown_message(meters: float, config: Optional[NavConfig] = None) -> str:
    """Graded phrasing for the last metres before the final destination."""
    steps = steps_from_distance(meters, config)
    if meters <= 2:
        return "Stop now. You have reached your destination."
    elif meters <= 5:
        return f"Keep walking slowly, your destination is {steps} steps ahead"
    elif meters <= 10:
        return f"Getting very close, about {steps} steps remaining. Start walking more carefully"
    elif meters <= 15:
        return f"Approaching destination, about {steps} steps ahead. Prepare to slow down"
    return f"Continue walking, about {steps} steps remaining to destination"


def _destination_reached(route: Sequence[GeoPoint], current_segment: int) -> NavigationInstruction:
    return NavigationInstruction(
        kind=InstructionKind.DESTINATION,
        distance_meters=0.0,
        message="You have reached your final destination",
        is_last_waypoint=False,
        waypoint_number=current_segment + 1,
        total_waypoints=len(route),
    )


# ---------------------------------------------------------------------------
# Main entry: call once per location/heading update
# ---------------------------------------------------------------------------

def get_next_instruction(
    location: LocationSample,
    route: Sequence[GeoPoint],
    current_segment: int,
    config: Optional[NavConfig] = None,
) -> NavigationInstruction:
    """
    Next instruction for the user on the given segment.

    A route shorter than two points, or a segment index at or past the last
    leg, yields a DESTINATION instruction with distance 0 instead of an error.

    Args:
        location:        Current position and heading.
        route:           Ordered route points, index 0 is the origin anchor.
        current_segment: Index of the waypoint the user is approaching or has
                         just passed (see progress_tracker).
        config:          NavConfig with the thresholds.

    Returns:
        NavigationInstruction.
    """
    config = config or _DEFAULT_CONFIG
    logger.debug(f"Instruction for segment {current_segment} of route length {len(route)}")

    if len(route) < 2 or current_segment >= len(route) - 1:
        logger.debug("Route is empty or the destination has been reached")
        return _destination_reached(route, current_segment)

    next_point = route[current_segment + 1]
    dist = distance(location, next_point)
    required = bearing(location, next_point)
    diff = heading_difference(location.heading, required)
    steps = steps_from_distance(dist, config)
    total = len(route) - 1
    is_last = current_segment == len(route) - 2

    logger.debug(
        f"Next waypoint ({next_point.latitude}, {next_point.longitude}): "
        f"{dist:.1f} m, bearing {required:.1f}, heading diff {diff:.1f}"
    )

    # 1. Waypoint reached: describe the following leg
    if dist < config.arrival_threshold_m:
        return get_next_turn(location, route, current_segment + 1, config)

    fields = dict(
        distance_meters=dist,
        required_bearing=required,
        waypoint_number=current_segment + 1,
        total_waypoints=total,
        clock_direction=clock_direction(diff),
        steps_remaining=steps,
    )

    # 2. First leg
    if current_segment == 0:
        label = turn_label(diff, config)
        return NavigationInstruction(
            kind=InstructionKind.START,
            message=f"Turn {label} and proceed for {steps} steps to reach waypoint 1 of {total}",
            is_last_waypoint=is_last,
            **fields,
        )

    # 3. Close to the waypoint: prepare for the upcoming turn
    if dist < config.turn_threshold_m:
        logger.debug("Within turn threshold, looking ahead")
        return get_next_turn(location, route, current_segment, config)

    label = turn_label(diff, config)
    waypoint_info = (
        "last waypoint before final destination"
        if is_last
        else f"waypoint {current_segment + 1} of {total}"
    )

    # 4. Off course: nudge the heading
    if label != STRAIGHT_AHEAD:
        # TODO: the kind is TURN_RIGHT for any |diff| > 90, left included; decide
        # with the overlay consumers whether TURN_LEFT should be emitted here.
        kind = InstructionKind.TURN_RIGHT if abs(diff) > 90 else InstructionKind.STRAIGHT
        return NavigationInstruction(
            kind=kind,
            message=f"Adjust your direction {label} and continue for {steps} steps to reach {waypoint_info}",
            is_last_waypoint=is_last,
            **fields,
        )

    # 5. On course
    return NavigationInstruction(
        kind=InstructionKind.STRAIGHT,
        message=f"Continue straight for {steps} steps to reach {waypoint_info}",
        is_last_waypoint=is_last,
        **fields,
    )


# ---------------------------------------------------------------------------
# Lookahead: describes the leg after the waypoint the user is at
# ---------------------------------------------------------------------------

def get_next_turn(
    location: LocationSample,
    route: Sequence[GeoPoint],
    current_segment: int,
    config: Optional[NavConfig] = None,
) -> NavigationInstruction:
    """
    Lookahead instruction used at or near a waypoint.

    Reports the direction of the upcoming leg rather than the nearly
    zero-length current one.
    """
    config = config or _DEFAULT_CONFIG
    logger.debug(f"Next turn from segment {current_segment}")

    if len(route) < 2:
        return _destination_reached(route, current_segment)

    if current_segment >= len(route) - 2:
        final_point = route[-1]
        dist = distance(location, final_point)
        required = bearing(location, final_point)
        diff = heading_difference(location.heading, required)
        label = turn_label(diff, config)
        steps = steps_from_distance(dist, config)

        if label == STRAIGHT_AHEAD:
            message = f"Your final destination is straight ahead, approximately {steps} steps"
        else:
            message = f"Turn {label} to reach your final destination in approximately {steps} steps"

        return NavigationInstruction(
            kind=InstructionKind.DESTINATION,
            distance_meters=dist,
            message=message,
            required_bearing=required,
            is_last_waypoint=False,
            waypoint_number=len(route),
            total_waypoints=len(route),
            clock_direction=clock_direction(diff),
            steps_remaining=steps,
        )

    next_point = route[current_segment + 1]
    dist = distance(location, next_point)
    required = bearing(location, next_point)
    diff = heading_difference(location.heading, required)
    label = turn_label(diff, config)
    steps = steps_from_distance(dist, config)
    is_last = current_segment == len(route) - 2

    waypoint_info = (
        "final waypoint"
        if is_last
        else f"waypoint {current_segment + 1} of {len(route) - 1}"
    )

    fields = dict(
        distance_meters=dist,
        required_bearing=required,
        is_last_waypoint=is_last,
        waypoint_number=current_segment + 1,
        total_waypoints=len(route) - 1,
        clock_direction=clock_direction(diff),
        steps_remaining=steps,
    )

    if abs(diff) > config.direction_threshold_deg:
        return NavigationInstruction(
            kind=InstructionKind.TURN_RIGHT if diff > 0 else InstructionKind.TURN_LEFT,
            message=f"Turn {label} in approximately {steps} steps to reach {waypoint_info}",
            **fields,
        )

    return NavigationInstruction(
        kind=InstructionKind.WAYPOINT,
        message=f"Continue straight for approximately {steps} steps to reach {waypoint_info}",
        **fields,
    )
