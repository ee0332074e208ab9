import pytest

from navigation.guidance.models import Coord, LocationFix, Maneuver, ManeuverKind


@pytest.mark.parametrize("action, direction, kind", [
    ("turn-right", None, ManeuverKind.TURN_RIGHT),
    ("turn-left", None, ManeuverKind.TURN_LEFT),
    ("turn", "right", ManeuverKind.TURN_RIGHT),
    ("turn", "left", ManeuverKind.TURN_LEFT),
    ("turnSharpLeft", None, ManeuverKind.TURN_LEFT),
    ("keep", "left", ManeuverKind.KEEP_LEFT),
    ("KEEP_RIGHT", None, ManeuverKind.KEEP_RIGHT),
    ("uTurn", None, ManeuverKind.U_TURN),
    ("u-turn", None, ManeuverKind.U_TURN),
    ("merge", "left", ManeuverKind.MERGE),
    ("roundaboutExit", None, ManeuverKind.EXIT),
    ("ramp", "right", ManeuverKind.EXIT),
    ("arrive", None, ManeuverKind.ARRIVE),
    ("continue", None, ManeuverKind.CONTINUE),
    ("depart", None, ManeuverKind.OTHER),
    ("board ferry", None, ManeuverKind.OTHER),
    (None, None, ManeuverKind.OTHER),
    ("", "left", ManeuverKind.OTHER),
])
def test_maneuver_kind_parse(action, direction, kind):
    assert ManeuverKind.parse(action, direction) is kind


def test_low_confidence_needs_known_accuracy():
    assert LocationFix(Coord(0, 0), accuracy_m=80.0).is_low_confidence(50.0)
    assert not LocationFix(Coord(0, 0), accuracy_m=50.0).is_low_confidence(50.0)
    assert not LocationFix(Coord(0, 0)).is_low_confidence(50.0)


def test_maneuver_dict_keeps_optional_fields():
    m = Maneuver(
        point_index=3,
        kind=ManeuverKind.EXIT,
        instruction="Take exit 12B",
        bearing_before=10.0,
        bearing_after=40.0,
        distance_m=900.0,
        exit_number="12B",
        duration_s=55,
        road_name="I-65",
    )
    d = m.to_dict()
    assert d["kind"] == "exit"
    assert Maneuver.from_dict(d) == m
