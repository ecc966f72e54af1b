import pytest

from stepguide.guidance.geo_utils import distance
from stepguide.guidance.instruction_generator import (
    countdown_message,
    get_next_instruction,
    get_next_turn,
    heading_difference,
    steps_from_distance,
    turn_label,
)
from stepguide.guidance.models import GeoPoint, InstructionKind, LocationSample
from stepguide.guidance.nav_config import NavConfig

# Each leg is about 55.6 m along the equator, heading due east
THREE_POINTS = [GeoPoint(0, 0), GeoPoint(0, 0.0005), GeoPoint(0, 0.001)]
FOUR_POINTS = THREE_POINTS + [GeoPoint(0, 0.0015)]
FIVE_POINTS = FOUR_POINTS + [GeoPoint(0, 0.002)]


def at(lon, heading=90.0, lat=0.0):
    return LocationSample(lat, lon, heading=heading)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def test_heading_difference():
    assert heading_difference(90, 90) == 0
    assert heading_difference(0, 90) == 90
    assert heading_difference(90, 0) == -90
    assert heading_difference(0, 180) == 180
    assert heading_difference(350, 10) == 20
    assert heading_difference(10, 350) == -20


def test_turn_label():
    assert turn_label(heading_difference(90, 90)) == "straight ahead"
    assert turn_label(heading_difference(0, 90)) == "right"
    assert turn_label(20) == "straight ahead"
    assert turn_label(-20) == "straight ahead"
    assert turn_label(21) == "right"
    assert turn_label(-21) == "left"


def test_turn_label_uses_configured_tolerance():
    config = NavConfig(heading_tolerance_deg=45)
    assert turn_label(40, config) == "straight ahead"
    assert turn_label(-50, config) == "left"


def test_steps_from_distance():
    assert steps_from_distance(0) == 0
    assert steps_from_distance(3.5) == 5
    assert steps_from_distance(7.0) == 10
    assert steps_from_distance(10, NavConfig(stride_length_m=1.0)) == 10


def test_countdown_message():
    assert countdown_message(1) == "Stop now. You have reached your destination."
    assert countdown_message(4) == "Keep walking slowly, your destination is 6 steps ahead"
    assert countdown_message(8) == (
        "Getting very close, about 11 steps remaining. Start walking more carefully"
    )
    assert countdown_message(12) == "Approaching destination, about 17 steps ahead. Prepare to slow down"
    assert countdown_message(30) == "Continue walking, about 43 steps remaining to destination"


# ---------------------------------------------------------------------------
# Terminal / degenerate
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("route", [[], [GeoPoint(0, 0)]])
def test_degenerate_route_is_destination(route):
    instruction = get_next_instruction(at(0), route, 0)
    assert instruction.kind == InstructionKind.DESTINATION
    assert instruction.distance_meters == 0
    assert instruction.message == "You have reached your final destination"


@pytest.mark.parametrize("route", [[], [GeoPoint(0, 0)]])
def test_lookahead_on_degenerate_route_is_destination(route):
    instruction = get_next_turn(LocationSample(0, 0, heading=0), route, 0)
    assert instruction.kind == InstructionKind.DESTINATION
    assert instruction.distance_meters == 0
    assert instruction.message == "You have reached your final destination"


def test_terminal_segment_is_stable():
    samples = [at(0.001), at(0.0), at(0.5, heading=270), at(0.0002, heading=12, lat=0.3)]
    for sample in samples:
        for segment in (2, 3, 10):
            instruction = get_next_instruction(sample, THREE_POINTS, segment)
            assert instruction.kind == InstructionKind.DESTINATION
            assert instruction.distance_meters == 0
            assert instruction.required_bearing is None


# ---------------------------------------------------------------------------
# START
# ---------------------------------------------------------------------------

def test_first_leg_is_start():
    instruction = get_next_instruction(at(0), THREE_POINTS, 0)
    assert instruction.kind == InstructionKind.START
    assert instruction.required_bearing == pytest.approx(90, abs=0.01)
    assert instruction.waypoint_number == 1
    assert instruction.total_waypoints == 2
    assert instruction.is_last_waypoint is False
    assert instruction.distance_meters == pytest.approx(distance(at(0), THREE_POINTS[1]))
    steps = steps_from_distance(instruction.distance_meters)
    assert instruction.steps_remaining == steps
    assert instruction.clock_direction == "12 o'clock"
    assert instruction.message == (
        f"Turn straight ahead and proceed for {steps} steps to reach waypoint 1 of 2"
    )


def test_start_reports_turn_direction():
    instruction = get_next_instruction(at(0, heading=0), THREE_POINTS, 0)
    assert instruction.kind == InstructionKind.START
    assert instruction.message.startswith("Turn right and proceed for")
    assert instruction.clock_direction == "3 o'clock"

    instruction = get_next_instruction(at(0, heading=180), THREE_POINTS, 0)
    assert instruction.message.startswith("Turn left and proceed for")


def test_start_on_two_point_route_is_last_waypoint():
    route = [GeoPoint(0, 0), GeoPoint(0, 0.001)]
    instruction = get_next_instruction(at(0), route, 0)
    assert instruction.kind == InstructionKind.START
    assert instruction.is_last_waypoint is True
    assert instruction.total_waypoints == 1


# ---------------------------------------------------------------------------
# Arrival collapse (< 10 m)
# ---------------------------------------------------------------------------

def test_arrival_on_short_single_leg_is_destination():
    # Leg of about 8.9 m: already inside the arrival radius at the origin
    route = [GeoPoint(0, 0), GeoPoint(0, 0.00008)]
    instruction = get_next_instruction(at(0), route, 0)
    assert instruction.kind == InstructionKind.DESTINATION
    assert instruction.waypoint_number == 2
    assert instruction.total_waypoints == 2
    assert instruction.distance_meters == pytest.approx(8.9, abs=0.1)
    assert instruction.message == (
        "Your final destination is straight ahead, approximately 13 steps"
    )


def test_arrival_never_yields_start_or_straight():
    for segment, lon in [(0, 0.00046), (1, 0.00096), (2, 0.00146)]:
        for heading in (0, 90, 180, 270):
            instruction = get_next_instruction(at(lon, heading), FIVE_POINTS, segment)
            assert instruction.kind not in (InstructionKind.START, InstructionKind.STRAIGHT)


def test_arrival_describes_following_leg():
    # About 4.4 m before waypoint 2 of a 4-leg route
    instruction = get_next_instruction(at(0.00096), FIVE_POINTS, 1)
    assert instruction.kind == InstructionKind.WAYPOINT
    assert instruction.waypoint_number == 3
    assert instruction.total_waypoints == 4
    assert instruction.distance_meters == pytest.approx(distance(at(0.00096), FIVE_POINTS[3]))
    assert "to reach waypoint 3 of 4" in instruction.message


def test_arrival_at_penultimate_waypoint_points_to_destination():
    instruction = get_next_instruction(at(0.00096, heading=0), FOUR_POINTS, 1)
    assert instruction.kind == InstructionKind.DESTINATION
    assert instruction.waypoint_number == 4
    assert instruction.total_waypoints == 4
    assert instruction.required_bearing == pytest.approx(90, abs=0.01)
    assert instruction.message.startswith("Turn right to reach your final destination in approximately")


# ---------------------------------------------------------------------------
# Turn threshold lookahead (10–15 m)
# ---------------------------------------------------------------------------

def test_turn_threshold_lookahead_straight():
    # About 13.3 m before waypoint 2
    instruction = get_next_instruction(at(0.00088), FOUR_POINTS, 1)
    assert instruction.kind == InstructionKind.WAYPOINT
    assert instruction.waypoint_number == 2
    assert instruction.total_waypoints == 3
    steps = steps_from_distance(instruction.distance_meters)
    assert instruction.message == (
        f"Continue straight for approximately {steps} steps to reach waypoint 2 of 3"
    )


def test_turn_threshold_lookahead_turns():
    right = get_next_instruction(at(0.00088, heading=0), FOUR_POINTS, 1)
    assert right.kind == InstructionKind.TURN_RIGHT
    assert right.message.startswith("Turn right in approximately")

    left = get_next_instruction(at(0.00088, heading=180), FOUR_POINTS, 1)
    assert left.kind == InstructionKind.TURN_LEFT
    assert left.message.startswith("Turn left in approximately")


def test_turn_threshold_on_last_leg_is_destination():
    instruction = get_next_instruction(at(0.00088), THREE_POINTS, 1)
    assert instruction.kind == InstructionKind.DESTINATION
    assert instruction.waypoint_number == 3


# ---------------------------------------------------------------------------
# Mid-segment
# ---------------------------------------------------------------------------

def test_on_course_is_straight():
    instruction = get_next_instruction(at(0.0005, heading=100), FOUR_POINTS, 1)
    assert instruction.kind == InstructionKind.STRAIGHT
    assert instruction.waypoint_number == 2
    assert instruction.total_waypoints == 3
    assert instruction.is_last_waypoint is False
    steps = steps_from_distance(instruction.distance_meters)
    assert instruction.message == f"Continue straight for {steps} steps to reach waypoint 2 of 3"


def test_last_waypoint_label():
    instruction = get_next_instruction(at(0.0005), THREE_POINTS, 1)
    assert instruction.kind == InstructionKind.STRAIGHT
    assert instruction.is_last_waypoint is True
    assert instruction.message.endswith("to reach last waypoint before final destination")


def test_adjust_direction_kind_selection():
    # 90 degrees off: adjustment phrasing, STRAIGHT kind
    right = get_next_instruction(at(0.0005, heading=0), FOUR_POINTS, 1)
    assert right.kind == InstructionKind.STRAIGHT
    assert right.message.startswith("Adjust your direction right and continue for")

    # Facing away: TURN_RIGHT
    behind = get_next_instruction(at(0.0005, heading=270), FOUR_POINTS, 1)
    assert behind.kind == InstructionKind.TURN_RIGHT

    # More than 90 degrees to the left still reports TURN_RIGHT
    left = get_next_instruction(at(0.0005, heading=200), FOUR_POINTS, 1)
    assert left.kind == InstructionKind.TURN_RIGHT
    assert left.message.startswith("Adjust your direction left and continue for")


def test_lookahead_direct_call():
    instruction = get_next_turn(at(0), FOUR_POINTS, 0)
    assert instruction.kind == InstructionKind.WAYPOINT
    assert instruction.waypoint_number == 1

    final = get_next_turn(at(0), FOUR_POINTS, 2)
    assert final.kind == InstructionKind.DESTINATION
    assert final.waypoint_number == 4


def test_instruction_to_dict():
    data = get_next_instruction(at(0), THREE_POINTS, 0).to_dict()
    assert data["kind"] == "start"
    assert data["waypoint_number"] == 1
    assert data["total_waypoints"] == 2
