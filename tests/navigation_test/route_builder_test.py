import pytest

from conftest import straight_points
from navigation.guidance.models import ManeuverKind
from navigation.guidance.route_builder import build_route_geometry, is_highway_road


def here_actions():
    return [
        {"action": "depart", "offset": 0, "instruction": "Head north on Meridian St",
         "length": 400, "duration": 40, "road": {"name": "Meridian St"}},
        {"action": "turn", "direction": "right", "offset": 4,
         "instruction": "Turn right onto Main Street", "length": 300, "road": {"name": "Main Street"}},
        {"action": "exit", "offset": 6, "instruction": "Take exit 12B toward Chicago",
         "length": 200, "road": {"number": "I-65"}},
        {"action": "arrive", "offset": 8, "instruction": "You have arrived"},
    ]


def test_builds_geometry_from_points_and_actions():
    points = straight_points(9)
    route = build_route_geometry(points, here_actions())

    assert len(route.points) == 9
    assert route.total_distance == pytest.approx(800.0, rel=1e-6)
    assert [m.point_index for m in route.maneuvers] == [0, 4, 6, 8]
    assert [m.kind for m in route.maneuvers] == [
        ManeuverKind.OTHER, ManeuverKind.TURN_RIGHT, ManeuverKind.EXIT, ManeuverKind.ARRIVE,
    ]


def test_accepts_lat_lon_pairs():
    pairs = [(p.lat, p.lon) for p in straight_points(3)]
    route = build_route_geometry(pairs)
    assert route.points[1].lat == pytest.approx(pairs[1][0])
    assert route.maneuvers == ()


def test_maneuver_details_are_carried_over():
    route = build_route_geometry(straight_points(9), here_actions())
    depart, turn, exit_, arrive = route.maneuvers

    assert depart.duration_s == 40
    assert depart.road_name == "Meridian St"
    assert turn.distance_m == 300.0
    assert exit_.exit_number == "12B"
    assert exit_.road_name == "I-65"
    assert arrive.distance_m == 0.0


def test_bearings_follow_the_polyline():
    points = straight_points(3) + straight_points(3, bearing=90.0, start=straight_points(3)[-1])[1:]
    actions = [{"action": "turn", "direction": "right", "offset": 2, "instruction": "Turn right"}]
    turn = build_route_geometry(points, actions).maneuvers[0]

    assert min(turn.bearing_before, 360.0 - turn.bearing_before) == pytest.approx(0.0, abs=0.01)
    assert turn.bearing_after == pytest.approx(90.0, abs=0.1)


def test_bearing_defaults_at_route_ends():
    points = straight_points(3, bearing=90.0)
    actions = [
        {"action": "depart", "offset": 0},
        {"action": "arrive", "offset": 2},
    ]
    depart, arrive = build_route_geometry(points, actions).maneuvers

    assert depart.bearing_before == 0.0
    assert arrive.bearing_after == arrive.bearing_before
    assert depart.instruction == "Continue"


def test_invalid_actions_are_dropped():
    actions = [
        {"action": "turn", "direction": "left", "instruction": "Turn left"},       # no offset
        {"action": "turn", "direction": "left", "offset": 2, "instruction": "Turn left"},
        {"action": "keep", "direction": "right", "offset": 2, "instruction": "Keep right"},  # repeat
        {"action": "arrive", "offset": 40, "instruction": "You have arrived"},      # out of range
    ]
    route = build_route_geometry(straight_points(5), actions)

    assert len(route.maneuvers) == 1
    assert route.maneuvers[0].kind == ManeuverKind.TURN_LEFT


def test_exit_number_from_exit_field():
    actions = [{"action": "exit", "offset": 1, "instruction": "Take the exit", "exit": {"number": "7A"}}]
    route = build_route_geometry(straight_points(3), actions)
    assert route.maneuvers[0].exit_number == "7A"


def test_empty_polyline_gives_empty_route():
    route = build_route_geometry([], [{"action": "arrive", "offset": 0}])
    assert route.points == ()
    assert route.maneuvers == ()
    assert route.total_distance == 0.0


@pytest.mark.parametrize("name, highway", [
    ("I-65", True),
    ("I 70 West", True),
    ("US-31", True),
    ("Indiana Toll Road / Turnpike", True),
    ("State Highway 37", True),
    ("Main Street", False),
    ("Indianapolis Ave", False),
    (None, False),
])
def test_is_highway_road(name, highway):
    assert is_highway_road(name) is highway
